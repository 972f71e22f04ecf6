"""Command codes and the instrument field each one sets.

Every command is a single letter plus a raw string value. The nested notation
spells them as ``name:value`` attributes; ``code_for_name`` maps the names.

| code | name      | sets              | value                                |
|------|-----------|-------------------|--------------------------------------|
| C    | channel   | ``channel``       | MIDI channel 0-15                    |
| T    | timbre    | ``timbre``        | MIDI program 0-127                   |
| S    | scale     | ``scale_id``      | catalog id or name                   |
| K    | key       | ``tonality``      | number or key name (``D``, ``e``...) |
| W    | width     | ``density``       | extra stacked tones, >= 0            |
| I    | inversion | ``inversion``     | voices raised an octave, >= 0        |
| O    | octave    | ``octave``        | octave number                        |
| M    | playmode  | ``play_mode``     | ``PlayMode`` number or name          |
| V    | velocity  | ``velocity``      | MIDI velocity 0-127                  |
| P    | pulse     | ``duration``      | N plays "Nn" notes (P8 = eighths)    |
| D    | duration  | ``duration``      | note value: 4n, 8t, 2m ...           |
| R    | repeat    | ``repeat``        | times to play the block, >= 1        |
| N    | scheme    | ``circle``        | 0/1 note scheme, ``-`` to clear      |

Numbers are hexadecimal in the compact notation (``PF`` is pulse 15, ``KB``
key 11) and decimal in nested ``name:value`` attributes; ``apply`` takes the
base. Names (scales, key labels, play modes) are only read when the value is
not a number in that base. Setters raise ``ValueError`` for values they cannot
use and leave the instrument untouched when they do.
"""

import dataclasses
import typing

import moderanger.circle
import moderanger.durations
import moderanger.instrument
import moderanger.play_mode
import moderanger.scales


Setter = typing.Callable[[moderanger.instrument.Instrument, str, int], None]


class UnknownCommandError(Exception):

	"""
	Raised for a command code that is not in the table.
	"""

	def __init__ (self, code: str) -> None:
		self.code = code
		super().__init__(f"Unknown command type '{code}'")


@dataclasses.dataclass(frozen=True)
class CommandSpec:
	code: str
	name: str
	setter: Setter


def _int (value: str, base: int = 10, low: typing.Optional[int] = None, high: typing.Optional[int] = None) -> int:

	"""
	Parse a numeric command value in the given base, checking the optional inclusive bounds.
	"""

	try:
		number = int(value.strip(), base)
	except ValueError:
		raise ValueError(f"Expected a number, got '{value}'") from None

	if low is not None and number < low:
		raise ValueError(f"Value {number} is below the minimum {low}")

	if high is not None and number > high:
		raise ValueError(f"Value {number} is above the maximum {high}")

	return number


def _set_channel (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.channel = _int(value, base, 0, 15)

def _set_timbre (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.timbre = _int(value, base, 0, 127)

def _set_scale (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.scale_id = moderanger.scales.scale_id(value, base)

def _set_key (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.tonality = moderanger.scales.tonality_from_value(value, base)

def _set_width (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.density = _int(value, base, 0)

def _set_inversion (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.inversion = _int(value, base, 0)

def _set_octave (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.octave = _int(value, base)

def _set_play_mode (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.play_mode = moderanger.play_mode.PlayMode.from_value(value, base)

def _set_velocity (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.velocity = _int(value, base, 0, 127)

def _set_pulse (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.duration = moderanger.durations.pulse_to_note_value(_int(value, base, 1))

def _set_duration (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:

	moderanger.durations.parse_duration(value)
	instrument.duration = value.strip()

def _set_repeat (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:
	instrument.repeat = _int(value, base, 1)

def _set_scheme (instrument: moderanger.instrument.Instrument, value: str, base: int) -> None:

	if value.strip() == "-":
		instrument.circle = None
		return

	instrument.circle = moderanger.circle.Circle.from_string(value.strip())


COMMANDS: typing.Dict[str, CommandSpec] = {
	spec.code: spec for spec in [
		CommandSpec("C", "channel", _set_channel),
		CommandSpec("T", "timbre", _set_timbre),
		CommandSpec("S", "scale", _set_scale),
		CommandSpec("K", "key", _set_key),
		CommandSpec("W", "width", _set_width),
		CommandSpec("I", "inversion", _set_inversion),
		CommandSpec("O", "octave", _set_octave),
		CommandSpec("M", "playmode", _set_play_mode),
		CommandSpec("V", "velocity", _set_velocity),
		CommandSpec("P", "pulse", _set_pulse),
		CommandSpec("D", "duration", _set_duration),
		CommandSpec("R", "repeat", _set_repeat),
		CommandSpec("N", "scheme", _set_scheme),
	]
}

_NAME_TO_CODE: typing.Dict[str, str] = {spec.name: spec.code for spec in COMMANDS.values()}


def code_for_name (name: str) -> typing.Optional[str]:

	"""
	Return the command code for an attribute name, or None if unknown.
	"""

	return _NAME_TO_CODE.get(name.strip().lower())


def apply (instrument: moderanger.instrument.Instrument, code: str, value: str, base: int = 10) -> None:

	"""
	Apply one command to an instrument.

	Numeric values are read in ``base``: 16 for the compact notation, 10 for
	nested attributes and configuration.

	Raises:
		UnknownCommandError: The code is not in the table.
		ValueError: The value cannot be used for that field.
	"""

	spec = COMMANDS.get(code)

	if spec is None:
		raise UnknownCommandError(code)

	spec.setter(instrument, value, base)

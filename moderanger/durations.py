"""Note-value strings and their length in beats.

All values are in **beats**, where 1.0 = one quarter note. Note values are
written the way the song notation writes them:

- ``"4n"`` - a quarter note, ``"8n"`` an eighth, ``"1n"`` a whole note
- ``"8t"`` - an eighth-note triplet (two thirds of an eighth)
- ``"2m"`` - two measures of 4/4

::

    parse_duration("8n")   # 0.5
    parse_duration("4t")   # 0.666...
    parse_duration("1m")   # 4.0
"""

import re


THIRTYSECOND = 0.125
SIXTEENTH = 0.25
EIGHTH = 0.5
QUARTER = 1.0
HALF = 2.0
WHOLE = 4.0

BEATS_PER_MEASURE = 4.0

DEFAULT_NOTE_VALUE = "4n"

_NOTE_VALUE = re.compile(r"^(\d+)([nmt])$")


def parse_duration (value: str) -> float:

	"""
	Convert a note-value string into beats.

	Raises ``ValueError`` for anything that is not ``<digits>n``,
	``<digits>t`` or ``<digits>m`` with a positive number.
	"""

	match = _NOTE_VALUE.match(value.strip())

	if match is None:
		raise ValueError(f"Invalid note value '{value}' (expected e.g. 4n, 8t or 2m)")

	number = int(match.group(1))
	unit = match.group(2)

	if number <= 0:
		raise ValueError(f"Invalid note value '{value}': the number must be positive")

	if unit == "m":
		return number * BEATS_PER_MEASURE

	beats = WHOLE / number

	if unit == "t":
		beats *= 2 / 3

	return beats


def pulse_to_note_value (pulse: int) -> str:

	"""
	Return the note value for a pulse count: 8 → ``"8n"``.
	"""

	if pulse <= 0:
		raise ValueError(f"Pulse must be positive, got {pulse}")

	return f"{pulse}n"

"""Sound backends: where note triggers end up.

The conductor only talks to a ``SoundOutput``. Two are provided:

- ``MidiOutput`` sends each trigger live to a MIDI output port through mido;
  the port is matched by name, never prompted for.
- ``MidiFileOutput`` timestamps each trigger and writes the performance to a
  Standard MIDI File when closed.

Anything with the same four methods (a software synth, a test recorder) can be
passed to the conductor instead.
"""

import logging
import time
import typing

import mido


logger = logging.getLogger(__name__)


@typing.runtime_checkable
class SoundOutput (typing.Protocol):

	"""
	Protocol for objects that can sound note triggers.
	"""

	def note_on (self, channel: int, note: int, velocity: int) -> None:
		...

	def note_off (self, channel: int, note: int) -> None:
		...

	def program_change (self, channel: int, program: int) -> None:
		...

	def close (self) -> None:
		...


def find_output_name (device_name: typing.Optional[str], available: typing.Sequence[str]) -> typing.Optional[str]:

	"""
	Pick the output port to use from the available port names.

	An exact name wins; otherwise the first port whose name contains
	``device_name`` (ignoring case) is used, so ``--device fluid`` finds
	"FLUID Synth (1234):Synth input port 128:0". With no name the first port is
	used. Returns None when nothing matches.
	"""

	if not available:
		return None

	if device_name is None:
		return available[0]

	if device_name in available:
		return device_name

	wanted = device_name.lower()

	for name in available:
		if wanted in name.lower():
			return name

	return None


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""
	Open the MIDI output port chosen by ``find_output_name``.

	Returns:
		A tuple of (port_name, port) or (None, None) when no port could be opened.
	"""

	try:
		available = mido.get_output_names()
		name = find_output_name(device_name, available)

		if name is None:
			logger.error(f"No MIDI output matching {device_name!r}. Available: {available}")
			return None, None

		if device_name is None and len(available) > 1:
			logger.info(f"Using '{name}'; pass --device to pick one of {available}")

		port = mido.open_output(name)
		logger.info(f"Opened MIDI output: {name}")
		return name, port

	except Exception as e:
		logger.error(f"Failed to open MIDI output: {e}")
		return None, None


class MidiOutput:

	"""
	Sends note triggers to a live MIDI output port.

	When no port could be opened the output stays usable and drops messages,
	so a performance can run without hardware.
	"""

	def __init__ (self, device_name: typing.Optional[str] = None) -> None:

		self.device_name, self.port = select_output_device(device_name)

	def _send (self, message: mido.Message) -> None:

		if self.port is None:
			return

		try:
			self.port.send(message)
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")

	def note_on (self, channel: int, note: int, velocity: int) -> None:
		self._send(mido.Message('note_on', channel=channel, note=note, velocity=velocity))

	def note_off (self, channel: int, note: int) -> None:
		self._send(mido.Message('note_off', channel=channel, note=note, velocity=0))

	def program_change (self, channel: int, program: int) -> None:
		self._send(mido.Message('program_change', channel=channel, program=program))

	def panic (self) -> None:

		"""
		Send "All Notes Off" (CC 123) and "All Sound Off" (CC 120) on all 16 channels.
		"""

		logger.info("Panic: sending all notes off.")

		for channel in range(16):
			self._send(mido.Message('control_change', channel=channel, control=123, value=0))
			self._send(mido.Message('control_change', channel=channel, control=120, value=0))

	def close (self) -> None:

		if self.port is None:
			return

		self.panic()
		self.port.close()
		self.port = None


class MidiFileOutput:

	"""
	Records note triggers and writes them to a Standard MIDI File.

	Messages are timestamped with a monotonic clock as they arrive, so the file
	reproduces the performance's real timing at the given tempo.
	"""

	ticks_per_beat = 480

	def __init__ (self, filename: str, bpm: float = 120, clock: typing.Callable[[], float] = time.perf_counter) -> None:

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.filename = filename
		self.bpm = bpm
		self._clock = clock
		self._start: typing.Optional[float] = None
		self.recorded_events: typing.List[typing.Tuple[float, mido.Message]] = []

	def _record (self, message: mido.Message) -> None:

		now = self._clock()

		if self._start is None:
			self._start = now

		self.recorded_events.append((now - self._start, message))

	def note_on (self, channel: int, note: int, velocity: int) -> None:
		self._record(mido.Message('note_on', channel=channel, note=note, velocity=velocity))

	def note_off (self, channel: int, note: int) -> None:
		self._record(mido.Message('note_off', channel=channel, note=note, velocity=0))

	def program_change (self, channel: int, program: int) -> None:
		self._record(mido.Message('program_change', channel=channel, program=program))


	def to_midi_file (self) -> mido.MidiFile:

		"""
		Return the recording as a type-1 MIDI file with a single track.
		"""

		mid = mido.MidiFile(type=1, ticks_per_beat=self.ticks_per_beat)
		track = mido.MidiTrack()
		mid.tracks.append(track)

		track.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(self.bpm), time=0))

		ticks_per_second = self.ticks_per_beat * self.bpm / 60.0
		last_tick = 0

		for seconds, message in sorted(self.recorded_events, key=lambda event: event[0]):

			tick = int(round(seconds * ticks_per_second))
			track.append(message.copy(time=max(tick - last_tick, 0)))
			last_tick = max(tick, last_tick)

		return mid


	def save (self) -> None:

		"""
		Write the recording to ``filename``.
		"""

		if not self.recorded_events:
			logger.info("Nothing recorded - no MIDI file written")
			return

		logger.info(f"Saving MIDI recording ({len(self.recorded_events)} events) to {self.filename}...")

		try:
			self.to_midi_file().save(self.filename)
			logger.info(f"Saved {self.filename}")
		except OSError as e:
			logger.error(f"Failed to save MIDI recording: {e}")

	def close (self) -> None:
		self.save()

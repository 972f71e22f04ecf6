import typing

import mido
import pytest

import moderanger.scales


class FakeMidiOut:

	"""Minimal MIDI output stub that keeps what it is sent."""

	def __init__ (self) -> None:

		"""Start with no messages and an open port."""

		self.sent: typing.List[mido.Message] = []
		self.closed = False

	def send (self, message: mido.Message) -> None:

		"""Keep the outgoing MIDI message."""

		self.sent.append(message)

	def close (self) -> None:

		"""Mark the fake device as closed."""

		self.closed = True


class RecordingOutput:

	"""A SoundOutput that logs every call as a tuple, for conductor tests."""

	def __init__ (self) -> None:

		self.events: typing.List[typing.Tuple] = []
		self.closed = False

	def note_on (self, channel: int, note: int, velocity: int) -> None:
		self.events.append(("note_on", channel, note, velocity))

	def note_off (self, channel: int, note: int) -> None:
		self.events.append(("note_off", channel, note))

	def program_change (self, channel: int, program: int) -> None:
		self.events.append(("program_change", channel, program))

	def close (self) -> None:
		self.closed = True

	def notes_on (self) -> typing.List[int]:

		"""Return the pitches of every note_on, in order."""

		return [event[2] for event in self.events if event[0] == "note_on"]

	def sounding (self) -> typing.Set[typing.Tuple[int, int]]:

		"""Return the (channel, note) pairs switched on and never switched off."""

		active: typing.Set[typing.Tuple[int, int]] = set()

		for event in self.events:
			if event[0] == "note_on":
				active.add((event[1], event[2]))
			elif event[0] == "note_off":
				active.discard((event[1], event[2]))

		return active


# Module-level reference so tests can inspect the most recently opened FakeMidiOut.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	global _current_fake_output
	fake = FakeMidiOut()
	_current_fake_output = fake
	return fake


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use a fake MIDI output for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def fake_output () -> typing.Callable[[], typing.Optional[FakeMidiOut]]:

	"""Return a getter for the most recently opened fake output port."""

	return lambda: _current_fake_output


@pytest.fixture
def recording_output () -> RecordingOutput:

	"""A fresh recording SoundOutput."""

	return RecordingOutput()


@pytest.fixture
def scale_catalog (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Let a test register scales without leaking them into other tests."""

	monkeypatch.setattr(moderanger.scales, "SCALE_NAMES", list(moderanger.scales.SCALE_NAMES))
	monkeypatch.setattr(moderanger.scales, "SCALES", list(moderanger.scales.SCALES))

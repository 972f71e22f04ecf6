import asyncio
import logging
import typing

import pytest

import moderanger.conductor
import moderanger.instrument
import moderanger.song

from moderanger.conductor import Conductor, ConductorState
from moderanger.song import Block, Command, Song


# 1 ms quarter notes keep the playback tests fast.
FAST_BPM = 60000


def _conductor (output: typing.Any, text: typing.Optional[str] = None, bpm: float = FAST_BPM) -> Conductor:

	conductor = Conductor(output=output, bpm=bpm)
	conductor.set_instrument(moderanger.instrument.Instrument())

	if text is not None:
		song = moderanger.song.load(text)
		assert song is not None
		conductor.set_song(song)

	return conductor


def _block (text: str) -> Block:

	song = moderanger.song.load(text)
	assert song is not None
	return song.blocks[0]


# ---------------------------------------------------------------------------
# Performing blocks
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_block_applies_commands_then_plays_chords (recording_output: typing.Any) -> None:

	"""Each selector plays the chord on its degree; the next one releases it."""

	conductor = _conductor(recording_output)

	await conductor.perform_block(_block("W2:13"))

	assert recording_output.events == [
		("program_change", 0, 0),
		("note_on", 0, 60, 100),
		("note_on", 0, 63, 100),
		("note_on", 0, 67, 100),
		("note_off", 0, 60),
		("note_off", 0, 63),
		("note_off", 0, 67),
		("note_on", 0, 63, 100),
		("note_on", 0, 67, 100),
		("note_on", 0, 70, 100),
		("note_off", 0, 63),
		("note_off", 0, 67),
		("note_off", 0, 70),
	]

	assert conductor.instrument.density == 2
	assert conductor.blocks_performed == 1
	assert conductor.steps_performed == 2


@pytest.mark.asyncio
async def test_rests_release_and_sustains_hold (recording_output: typing.Any) -> None:

	"""'=' keeps the chord sounding, '.' releases it."""

	conductor = _conductor(recording_output)

	await conductor.perform_block(_block("O4:1=.1"))

	notes = [event[:3] for event in recording_output.events if event[0] != "program_change"]

	assert notes == [
		("note_on", 0, 48),
		("note_off", 0, 48),
		("note_on", 0, 48),
		("note_off", 0, 48),
	]
	assert conductor.steps_performed == 4


@pytest.mark.asyncio
async def test_arpeggio_plays_voices_one_at_a_time (recording_output: typing.Any) -> None:

	"""Arpeggio modes switch each voice off before the next one sounds."""

	conductor = _conductor(recording_output)

	await conductor.perform_block(_block("W2,M1:1"))

	notes = [event[:3] for event in recording_output.events if event[0] != "program_change"]

	assert notes == [
		("note_on", 0, 60), ("note_off", 0, 60),
		("note_on", 0, 63), ("note_off", 0, 63),
		("note_on", 0, 67), ("note_off", 0, 67),
	]


@pytest.mark.asyncio
async def test_repeat_is_block_scoped (recording_output: typing.Any) -> None:

	"""R plays the block's content again, and resets for the next block."""

	conductor = _conductor(recording_output)

	await conductor.perform_block(_block("R3:1"))
	assert recording_output.notes_on() == [60, 60, 60]

	await conductor.perform_block(_block("O4:1"))
	assert recording_output.notes_on() == [60, 60, 60, 48]
	assert conductor.instrument.repeat == 1


@pytest.mark.asyncio
async def test_nested_blocks_read_decimal_selectors (recording_output: typing.Any) -> None:

	"""Nested content tokens are decimal, so 10 is the tenth degree."""

	conductor = _conductor(recording_output)

	await conductor.perform_block(Block((), "10 -1", " "))

	# Degree 9 of white is one octave above degree 2; degree -2 falls below the tonic.
	assert recording_output.notes_on() == [75, 57]


@pytest.mark.asyncio
async def test_unknown_command_is_a_warning (recording_output: typing.Any, caplog: pytest.LogCaptureFixture) -> None:

	"""An unknown command code is skipped and playback continues."""

	conductor = _conductor(recording_output)

	with caplog.at_level(logging.WARNING, logger="moderanger.conductor"):
		await conductor.perform_block(_block("Z9,O4:1"))

	assert "unknown command type 'Z'" in caplog.text
	assert recording_output.notes_on() == [48]


@pytest.mark.asyncio
async def test_invalid_command_value_is_a_warning (recording_output: typing.Any, caplog: pytest.LogCaptureFixture) -> None:

	"""A command value that cannot be used leaves the field unchanged."""

	conductor = _conductor(recording_output)

	with caplog.at_level(logging.WARNING, logger="moderanger.conductor"):
		await conductor.perform_block(_block("C99:1"))

	assert "Ignoring command C99" in caplog.text
	assert conductor.instrument.channel == 0
	assert recording_output.notes_on() == [60]


@pytest.mark.asyncio
async def test_unknown_selector_plays_as_a_rest (recording_output: typing.Any, caplog: pytest.LogCaptureFixture) -> None:

	"""Selectors that name no degree are reported and still take a step."""

	conductor = _conductor(recording_output)

	with caplog.at_level(logging.WARNING, logger="moderanger.conductor"):
		await conductor.perform_block(_block("O4:1x"))

	assert "unknown selector 'x'" in caplog.text
	assert conductor.steps_performed == 2
	assert recording_output.notes_on() == [48]


@pytest.mark.asyncio
async def test_pitches_outside_midi_range_are_skipped (recording_output: typing.Any, caplog: pytest.LogCaptureFixture) -> None:

	"""Pitches above 127 are not sent."""

	conductor = _conductor(recording_output)

	with caplog.at_level(logging.WARNING, logger="moderanger.conductor"):
		await conductor.perform_block(_block("O10:F"))

	assert recording_output.notes_on() == []
	assert "outside the MIDI range" in caplog.text


def test_step_seconds_follows_tempo_and_note_value () -> None:

	"""An eighth note at 120 BPM lasts a quarter of a second."""

	conductor = _conductor(None, bpm=120)
	conductor.instrument.duration = "8n"

	assert conductor.step_seconds() == pytest.approx(0.25)


def test_selector_degree () -> None:

	"""Selectors count degrees from 1."""

	assert moderanger.conductor.selector_degree("1") == 0
	assert moderanger.conductor.selector_degree("A") == 9
	assert moderanger.conductor.selector_degree("0") == -1
	assert moderanger.conductor.selector_degree("-4", 10) == -5
	assert moderanger.conductor.selector_degree("x") is None


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_start_requires_song_and_instrument () -> None:

	"""Starting with nothing to play is an error."""

	conductor = Conductor()

	with pytest.raises(RuntimeError):
		await conductor.start()

	conductor.set_song(Song(blocks=(_block("O4:1"),)))

	with pytest.raises(RuntimeError):
		await conductor.start()

	assert conductor.state == ConductorState.IDLE


def test_bpm_must_be_positive () -> None:

	"""Zero and negative tempos are rejected."""

	with pytest.raises(ValueError):
		Conductor(bpm=0)

	conductor = Conductor()

	with pytest.raises(ValueError):
		conductor.set_bpm(-10)

	assert conductor.bpm == 120


@pytest.mark.asyncio
async def test_playback_wraps_around_the_song (recording_output: typing.Any) -> None:

	"""After the last block the song starts again from the first."""

	conductor = _conductor(recording_output, "O4:1 O5:1")

	await conductor.start()
	assert conductor.state == ConductorState.RUNNING

	await asyncio.sleep(0.1)
	await conductor.stop()

	assert conductor.state == ConductorState.IDLE
	assert conductor.blocks_performed > 2
	assert recording_output.notes_on()[:3] == [48, 60, 48]


@pytest.mark.asyncio
async def test_stop_cancels_a_long_step (recording_output: typing.Any) -> None:

	"""Stopping interrupts the current wait and silences sounding notes."""

	conductor = _conductor(recording_output, "O4,W2:1", bpm=6)

	await conductor.start()
	await asyncio.sleep(0.05)

	assert recording_output.sounding() == {(0, 48), (0, 51), (0, 55)}

	await asyncio.wait_for(conductor.stop(), timeout=1.0)

	assert recording_output.sounding() == set()
	assert conductor.active_notes == set()
	assert conductor.task is None


@pytest.mark.asyncio
async def test_stop_leaves_instrument_state (recording_output: typing.Any) -> None:

	"""The instrument keeps whatever the song last set."""

	conductor = _conductor(recording_output, "O3,W1,K2:5", bpm=6)

	await conductor.start()
	await asyncio.sleep(0.05)
	await conductor.stop()

	instrument = conductor.instrument
	assert (instrument.octave, instrument.density, instrument.tonality, instrument.selected_note) == (3, 1, 2, 4)


@pytest.mark.asyncio
async def test_song_and_instrument_are_fixed_while_running (recording_output: typing.Any) -> None:

	"""The song and instrument can only be changed while idle."""

	conductor = _conductor(recording_output, "O4:1")

	await conductor.start()

	try:
		with pytest.raises(RuntimeError):
			conductor.set_song(Song(blocks=()))

		with pytest.raises(RuntimeError):
			conductor.set_instrument(moderanger.instrument.Instrument())

		await conductor.start()
		assert conductor.state == ConductorState.RUNNING

	finally:
		await conductor.stop()


@pytest.mark.asyncio
async def test_play_for_a_duration (recording_output: typing.Any) -> None:

	"""play(seconds) returns after the given time with playback stopped."""

	conductor = _conductor(recording_output, "O4:12")

	await conductor.play(seconds=0.05)

	assert conductor.state == ConductorState.IDLE
	assert conductor.steps_performed > 0
	assert recording_output.sounding() == set()


@pytest.mark.asyncio
async def test_song_without_content_still_keeps_time () -> None:

	"""A pass with no steps waits one step instead of spinning."""

	conductor = _conductor(None)
	conductor.set_song(Song(blocks=(Block((Command("O", "4"),), ""),)))

	await conductor.play(seconds=0.05)

	assert conductor.blocks_performed > 0
	assert conductor.steps_performed == 0
	assert conductor.instrument.octave == 4


@pytest.mark.asyncio
async def test_compact_command_values_are_hexadecimal (recording_output: typing.Any) -> None:

	"""Compact commands read numbers in hex, like their content: PF, KB and VA are 15, 11 and 10."""

	conductor = _conductor(recording_output)
	song = moderanger.song.load("W1,P2,S4:87843ABCD PF,S2:84837473747 KB,VA:1")
	assert song is not None

	first, second, third = song.blocks
	instrument = conductor.instrument

	await conductor.perform_block(first)
	assert instrument.duration == "2n"

	await conductor.perform_block(second)
	assert (instrument.duration, instrument.scale_id) == ("15n", 2)

	recording_output.events.clear()
	await conductor.perform_block(third)

	assert (instrument.tonality, instrument.velocity) == (11, 10)
	# Red scale, root degree 0 shifted by key 11: degree 4 an octave up, plus a third.
	assert [event for event in recording_output.events if event[0] == "note_on"] == [
		("note_on", 0, 79, 10),
		("note_on", 0, 83, 10),
	]


@pytest.mark.asyncio
async def test_nested_attribute_values_are_decimal (recording_output: typing.Any) -> None:

	"""Nested blocks keep decimal values, so velocity:10 is ten."""

	conductor = _conductor(recording_output)
	song = moderanger.song.load("{{ {1 velocity:10 key:B} }}")
	assert song is not None

	await conductor.perform_block(song.blocks[0])

	assert conductor.instrument.velocity == 10
	assert conductor.instrument.tonality == 9

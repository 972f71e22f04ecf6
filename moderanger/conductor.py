"""The playback conductor: performs a song on an instrument, forever.

The conductor walks the song's blocks in order and wraps back to the first
block after the last one. For each block it

1. applies the block's commands to the bound instrument,
2. plays the block's content: every selector picks the degree the instrument
   plays next, the player voices it, and the notes sound for one step
   (``instrument.duration`` at the conductor's tempo).

Content selectors:

- a digit (hexadecimal in compact blocks, decimal tokens in nested blocks)
  selects degree ``value - 1``, so ``1`` is the tonic;
- ``.`` or ``s`` is a rest and ``=`` keeps the previous notes sounding;
- anything else is reported and played as a rest.

Playback never ends on its own. ``stop()`` cancels the playback task at its
current wait, silences the notes still sounding and leaves the instrument as
it was at that moment. Bad commands and selectors are logged and skipped;
nothing in a song can abort the performance.
"""

import asyncio
import enum
import logging
import typing

import moderanger.commands
import moderanger.durations
import moderanger.instrument
import moderanger.play_mode
import moderanger.song
import moderanger.sound


logger = logging.getLogger(__name__)

RESTS = (".", "s")
SUSTAIN = "="

MIDI_NOTE_RANGE = range(0, 128)


class ConductorState (enum.Enum):
	IDLE = "idle"
	RUNNING = "running"


class Conductor:

	"""
	Plays a ``Song`` on an ``Instrument`` through a sound output.
	"""

	def __init__ (self, output: typing.Optional[moderanger.sound.SoundOutput] = None, bpm: float = 120) -> None:

		"""
		Parameters:
			output: Where note triggers go. With no output the conductor still
				keeps time and updates the instrument, silently.
			bpm: Tempo in beats per minute; a ``4n`` step lasts one beat.
		"""

		self.output = output
		self.song: typing.Optional[moderanger.song.Song] = None
		self.instrument: typing.Optional[moderanger.instrument.Instrument] = None

		self.bpm: float = 0
		self.set_bpm(bpm)

		self.running = False
		self.task: typing.Optional[asyncio.Task] = None
		self._stop_requested = False

		self.active_notes: typing.Set[typing.Tuple[int, int]] = set()
		self.blocks_performed = 0
		self.steps_performed = 0

	@property
	def state (self) -> ConductorState:
		return ConductorState.RUNNING if self.running else ConductorState.IDLE


	def set_song (self, song: moderanger.song.Song) -> None:

		if self.running:
			raise RuntimeError("Cannot change the song while playing")

		self.song = song

	def set_instrument (self, instrument: moderanger.instrument.Instrument) -> None:

		if self.running:
			raise RuntimeError("Cannot change the instrument while playing")

		self.instrument = instrument

	def set_bpm (self, bpm: float) -> None:

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.bpm = bpm
		logger.info(f"BPM set to {self.bpm:.2f}")


	def step_seconds (self) -> float:

		"""
		Return how long one content step lasts for the bound instrument.
		"""

		beats = moderanger.durations.parse_duration(self._require_instrument().duration)
		return beats * 60.0 / self.bpm


	def _require_instrument (self) -> moderanger.instrument.Instrument:

		if self.instrument is None:
			raise RuntimeError("No instrument set")

		return self.instrument


	async def start (self) -> None:

		"""
		Start playing the song in a separate asyncio task.
		"""

		if self.running:
			return

		if self.song is None:
			raise RuntimeError("No song set")

		self._require_instrument()

		self._stop_requested = False
		self.running = True
		self.task = asyncio.create_task(self._run_loop())

		logger.info(f"Conductor started ({len(self.song.blocks)} blocks)")


	async def stop (self) -> None:

		"""
		Stop playback, release any pending wait and silence sounding notes.
		"""

		if self.task is None:
			return

		logger.info("Stopping conductor...")

		self._stop_requested = True
		self.task.cancel()

		try:
			await self.task
		except asyncio.CancelledError:
			pass
		finally:
			self.task = None
			self.running = False
			self._release_notes()

		logger.info("Conductor stopped")


	async def play (self, seconds: typing.Optional[float] = None) -> None:

		"""
		Start playback and wait; stop after ``seconds`` when given.
		"""

		await self.start()

		try:
			if self.task is not None:
				if seconds is None:
					await self.task
				else:
					await asyncio.wait([self.task], timeout=seconds)
		except asyncio.CancelledError:
			pass
		finally:
			await self.stop()


	async def _run_loop (self) -> None:

		"""
		Perform the blocks in order, wrapping around after the last one.
		"""

		song = typing.cast(moderanger.song.Song, self.song)

		try:
			while not self._stop_requested:

				steps_before = self.steps_performed

				for block in song.blocks:

					if self._stop_requested:
						return

					await self.perform_block(block)

				# A pass with nothing to play still takes one step.
				if self.steps_performed == steps_before:
					await asyncio.sleep(self.step_seconds())

		finally:
			self.running = False


	def apply_command (self, command: moderanger.song.Command, base: int = 10) -> bool:

		"""
		Apply one command to the instrument; return False if it was skipped.

		Numeric values are read in ``base`` (16 for compact blocks).
		"""

		try:
			moderanger.commands.apply(self._require_instrument(), command.type, command.value, base)

		except moderanger.commands.UnknownCommandError:
			logger.warning(f"Ignoring unknown command type '{command.type}' (value '{command.value}')")
			return False

		except ValueError as e:
			logger.warning(f"Ignoring command {command}: {e}")
			return False

		return True


	async def perform_block (self, block: moderanger.song.Block) -> None:

		"""
		Apply a block's commands, then play its content ``repeat`` times.
		"""

		instrument = self._require_instrument()
		instrument.repeat = 1

		# Compact blocks write numbers in hexadecimal, nested blocks in decimal.
		base = 16 if block.separator is None else 10

		for command in block.commands:
			self.apply_command(command, base)

		if self.output is not None:
			self.output.program_change(instrument.channel, instrument.timbre)

		self.blocks_performed += 1
		selectors = block.selectors()

		logger.debug(f"Block {self.blocks_performed}: {len(selectors)} steps x{instrument.repeat}")

		try:
			for _ in range(instrument.repeat):
				for selector in selectors:

					if self._stop_requested:
						return

					await self.perform_selector(selector, base)

		finally:
			self._release_notes()


	async def perform_selector (self, selector: str, base: int = 16) -> None:

		"""
		Play one content step.
		"""

		instrument = self._require_instrument()
		step = self.step_seconds()
		self.steps_performed += 1

		if selector == SUSTAIN:
			await asyncio.sleep(step)
			return

		self._release_notes()

		if selector in RESTS:
			await asyncio.sleep(step)
			return

		degree = selector_degree(selector, base)

		if degree is None:
			logger.warning(f"Playing unknown selector '{selector}' as a rest")
			await asyncio.sleep(step)
			return

		instrument.selected_note = degree
		notes = self._playable(instrument.select_notes())

		if instrument.play_mode == moderanger.play_mode.PlayMode.CHORD:

			for note in notes:
				self._note_on(instrument.channel, note, instrument.velocity)

			await asyncio.sleep(step)
			return

		order = moderanger.play_mode.arpeggiate(notes, instrument.play_mode)

		if not order:
			await asyncio.sleep(step)
			return

		sub_step = step / len(order)

		for note in order:

			if self._stop_requested:
				return

			self._note_on(instrument.channel, note, instrument.velocity)
			await asyncio.sleep(sub_step)
			self._note_off(instrument.channel, note)


	def _playable (self, notes: typing.Sequence[int]) -> typing.List[int]:

		playable = [note for note in notes if note in MIDI_NOTE_RANGE]

		if len(playable) != len(notes):
			logger.warning(f"Skipping pitches outside the MIDI range: {[n for n in notes if n not in MIDI_NOTE_RANGE]}")

		return playable

	def _note_on (self, channel: int, note: int, velocity: int) -> None:

		if self.output is not None:
			self.output.note_on(channel, note, velocity)

		self.active_notes.add((channel, note))

	def _note_off (self, channel: int, note: int) -> None:

		if (channel, note) not in self.active_notes:
			return

		if self.output is not None:
			self.output.note_off(channel, note)

		self.active_notes.discard((channel, note))

	def _release_notes (self) -> None:

		"""
		Send note_off for every note still sounding.
		"""

		for channel, note in sorted(self.active_notes):
			if self.output is not None:
				self.output.note_off(channel, note)

		self.active_notes.clear()


def selector_degree (selector: str, base: int = 16) -> typing.Optional[int]:

	"""
	Return the degree a content selector picks, or None if it picks none.

	Example:
		```python
		selector_degree("1")        # → 0 (the tonic)
		selector_degree("A")        # → 9
		selector_degree("-4", 10)   # → -5
		selector_degree("x")        # → None
		```
	"""

	try:
		return int(selector, base) - 1
	except ValueError:
		return None

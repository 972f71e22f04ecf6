"""Instrument performance state and the player that voices it.

An ``Instrument`` is one voice's mutable state: which scale and key it plays
in, which degree is selected, how many stacked tones to add (``density``), how
many of the lowest voices to raise an octave (``inversion``), and so on.

``Player.play()`` turns that state into absolute MIDI pitches. It has two
chord strategies, picked by which scale representation the instrument holds:

- **catalog** (the default): stacked thirds over a ``Scale`` from the catalog,
  using ``Scale.chord_notes``;
- **wheel**: when the instrument holds a ``Circle``, stacked thirds are walked
  around its note scheme with ``Circle.chord_notes``.

Both results then go through the octave transform (``+12 * octave``) and the
inversion transform (``+12`` on the first ``inversion`` voices), in that order.
The two strategies do not always agree for the same nominal scale.
"""

import dataclasses
import typing

import moderanger.circle
import moderanger.durations
import moderanger.play_mode
import moderanger.scales


class Player:

	"""
	Renders an instrument's selected chord into absolute pitches.
	"""

	def play (self, instrument: "Instrument") -> typing.List[int]:

		"""
		Return the pitches the instrument's current state selects.

		Example:
			```python
			red = Instrument(scale_id=2, tonality=5, density=3, inversion=2, octave=5)
			red.player.play(red)  # → [80, 84, 76, 79]
			```
		"""

		if instrument.circle is not None:
			chord = self._wheel_chord(instrument, instrument.circle)
		else:
			scale = moderanger.scales.get_scale_by_num(instrument.scale_id)
			chord = scale.chord_notes(instrument.selected_note, instrument.density, instrument.tonality)

		return self.set_inversion(self.set_octave(chord, instrument.octave), instrument.inversion)


	def _wheel_chord (self, instrument: "Instrument", circle: moderanger.circle.Circle) -> typing.List[int]:

		circle.set_chord_start_note(instrument.selected_note + 1)
		circle.set_chord_notes(instrument.density + 1)

		return [position + instrument.tonality for position in circle.chord_notes()]


	@staticmethod
	def set_octave (notes: typing.Sequence[int], octave: int) -> typing.List[int]:
		return [note + octave * moderanger.scales.SEMITONES_PER_OCTAVE for note in notes]

	@staticmethod
	def set_inversion (notes: typing.Sequence[int], inversion: int) -> typing.List[int]:

		"""
		Raise the first ``inversion`` voices, in generation order, by an octave.
		"""

		return [
			note + moderanger.scales.SEMITONES_PER_OCTAVE if n < inversion else note
			for n, note in enumerate(notes)
		]


@dataclasses.dataclass(eq=False)
class Instrument:

	"""
	Mutable performance state of one voice.

	Instruments compare by identity: views and conductors hold references to a
	specific instrument object.
	"""

	channel: int = 0
	scale_id: int = 0
	tonality: int = 0
	timbre: int = 0
	octave: int = 5
	selected_note: int = 0
	density: int = 0
	inversion: int = 0
	velocity: int = 100
	play_mode: moderanger.play_mode.PlayMode = moderanger.play_mode.PlayMode.CHORD
	duration: str = moderanger.durations.DEFAULT_NOTE_VALUE
	repeat: int = 1
	circle: typing.Optional[moderanger.circle.Circle] = None
	notes: typing.List[int] = dataclasses.field(default_factory=list)
	player: Player = dataclasses.field(default_factory=Player, repr=False)

	@property
	def scale (self) -> moderanger.scales.Scale:
		return moderanger.scales.get_scale_by_num(self.scale_id)

	def select_scale (self, scale_id: int) -> None:
		self.scale_id = scale_id % len(moderanger.scales.SCALES)

	def select_next_scale (self) -> None:
		self.select_scale(self.scale_id + 1)

	def select_prev_scale (self) -> None:
		self.select_scale(self.scale_id - 1)

	def select_notes (self) -> typing.List[int]:

		"""
		Refresh ``notes`` from the current state and return them.
		"""

		self.notes = self.player.play(self)
		return self.notes

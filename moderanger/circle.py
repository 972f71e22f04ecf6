"""Wheel-based chord construction over a note scheme.

A note scheme is a presence bitmap over the semitones of an octave (usually
12 flags). A ``Circle`` walks raw positions around that wheel, skipping the
positions flagged 0. Positions are never wrapped: stepping past the end of the
scheme keeps counting upwards (or below zero), and only the scheme lookup
folds the position back with ``abs(position) % len(scheme)``. Long runs of
increments therefore drift the stored root far away from ``[0, len(scheme))``;
octave tracking is left to the caller.
"""

import dataclasses
import typing

import moderanger.scales


@dataclasses.dataclass
class Chord:

	"""
	A chord on the wheel: root position, number of voices and octave.
	"""

	root_position: int = 0
	num_notes: int = 0
	octave: int = 0


class Circle:

	"""
	Holds a note scheme and the chord currently built on it.
	"""

	def __init__ (self, note_scheme: typing.Sequence[int], name: str = "", octave: int = 0, start_note: int = 0) -> None:

		"""
		Parameters:
			note_scheme: 0/1 flags, one per wheel position.
			name: Optional label.
			octave: Octave the wheel is drawn in.
			start_note: Key label index the wheel starts on.
		"""

		scheme = [int(flag) for flag in note_scheme]

		if not scheme:
			raise ValueError("Note scheme cannot be empty")

		if any(flag not in (0, 1) for flag in scheme):
			raise ValueError("Note scheme flags must be 0 or 1")

		if 1 not in scheme:
			raise ValueError("Note scheme needs at least one position flagged 1")

		self.note_scheme: typing.List[int] = scheme
		self.name = name
		self.octave = octave
		self.start_note = start_note
		self.chord = Chord()


	@classmethod
	def from_scale (cls, scale: moderanger.scales.Scale, name: str = "") -> "Circle":

		"""
		Build a 12-position wheel with the scale's semitones flagged.
		"""

		scheme = [0] * moderanger.scales.SEMITONES_PER_OCTAVE

		for offset in scale.notes:
			scheme[offset % moderanger.scales.SEMITONES_PER_OCTAVE] = 1

		return cls(scheme, name=name)


	@classmethod
	def from_string (cls, flags: str, name: str = "") -> "Circle":

		"""
		Build a wheel from a flag string such as ``"101101011010"``.
		"""

		if not flags or any(c not in "01" for c in flags):
			raise ValueError(f"Invalid note scheme '{flags}': use a string of 0 and 1")

		return cls([int(c) for c in flags], name=name)


	def _in_scheme (self, position: int) -> bool:
		return self.note_scheme[abs(position) % len(self.note_scheme)] == 1

	def next_scale_position (self, position: int) -> int:

		"""
		Return the next position after ``position`` that belongs to the scheme.
		"""

		position += 1

		while not self._in_scheme(position):
			position += 1

		return position

	def prev_scale_position (self, position: int) -> int:

		"""
		Return the previous position before ``position`` that belongs to the scheme.
		"""

		position -= 1

		while not self._in_scheme(position):
			position -= 1

		return position

	def next_chord_position (self, position: int) -> int:

		"""
		Skip one scale tone upwards and land on the next: a stacked third.
		"""

		return self.next_scale_position(self.next_scale_position(position))

	def prev_chord_position (self, position: int) -> int:
		return self.prev_scale_position(self.prev_scale_position(position))


	def set_chord_start_note (self, note: int) -> None:

		"""
		Put the chord root on the ``note``-th scale tone (1-based).

		The root is reset to position 0 and stepped forward ``note - 1`` times,
		so position 0 counts as the first tone even when it is flagged 0.
		"""

		self.chord.root_position = 0

		for _ in range(note - 1):
			self.chord.root_position = self.next_scale_position(self.chord.root_position)

	def inc_chord_start_note (self) -> None:
		self.chord.root_position = self.next_scale_position(self.chord.root_position)

	def dec_chord_start_note (self) -> None:
		self.chord.root_position = self.prev_scale_position(self.chord.root_position)


	def chord_notes (self) -> typing.List[int]:

		"""
		Return the chord's ``num_notes`` raw positions, root first.
		"""

		if self.chord.num_notes <= 0:
			return []

		position = self.chord.root_position
		notes = [position]

		for _ in range(1, self.chord.num_notes):
			position = self.next_chord_position(position)
			notes.append(position)

		return notes


	def num_scale_notes (self) -> int:

		"""
		Return how many positions of the scheme are flagged 1.
		"""

		return sum(self.note_scheme)

	def add_chord_note (self) -> None:

		if self.chord.num_notes < self.num_scale_notes():
			self.chord.num_notes += 1

	def remove_chord_note (self) -> None:

		if self.chord.num_notes > 0:
			self.chord.num_notes -= 1

	def set_chord_notes (self, num_notes: int) -> None:

		"""
		Set the number of chord voices, clamped to ``[0, num_scale_notes()]``.
		"""

		self.chord.num_notes = max(0, min(num_notes, self.num_scale_notes()))

"""Scale catalog and scale-degree chord construction.

A scale is an ordered list of semitone offsets from a tonic. Scales are looked
up by numeric id or by name from a small module-level catalog:

- `white`: 0 2 3 5 7 9 10
- `blue`: 0 2 4 5 7 8 10
- `red`: 0 1 4 5 7 8 11
- `black`: 1 2 4 5 7 8 10 11
- `penta`: 0 2 5 7 10
- `tones`: 0 2 4 6 8 10
- `full`: the chromatic scale

Module-level helpers:
- `get_scale_by_num(num)`, `get_scale_by_name(name)`, `get_scale(value)`
- `register_scale(name, offsets)` to extend the catalog
- `tonality_from_value(value)` to read a key given as a number or a key name
"""

import typing


SEMITONES_PER_OCTAVE = 12

# Key labels used by the instrument, tonality 0..11. Lowercase means flat.
TONALITY_NAMES: typing.List[str] = ["D", "e", "E", "F", "g", "G", "a", "A", "b", "B", "C", "d"]


class Scale:

	"""
	An immutable, ordered set of semitone offsets from a tonic.
	"""

	def __init__ (self, notes: typing.Sequence[int]) -> None:

		if not notes:
			raise ValueError("A scale needs at least one note")

		self._notes: typing.Tuple[int, ...] = tuple(notes)

	@property
	def notes (self) -> typing.Tuple[int, ...]:
		return self._notes

	def __eq__ (self, other: object) -> bool:

		if not isinstance(other, Scale):
			return NotImplemented

		return self._notes == other._notes

	def __hash__ (self) -> int:
		return hash(self._notes)

	def __repr__ (self) -> str:
		return f"Scale({list(self._notes)})"


	def note_position (self, degree: int) -> int:

		"""
		Return the semitone offset of the given scale degree (0-based).
		"""

		return self._notes[degree]


	def num_notes (self) -> int:

		"""
		Return the number of notes in this scale.
		"""

		return len(self._notes)


	def chord_notes (self, root_degree: int, density: int, tonality: int = 0) -> typing.List[int]:

		"""
		Build a chord by stacking thirds over a scale degree.

		The root index is ``root_degree + tonality``. Roots outside the scale
		are folded back into it, one octave per full turn (negative roots fall
		below the tonic). Each of the ``density`` extra tones advances two scale
		degrees; a third that runs off the top of the scale lands on the tonic
		of the next octave.

		Parameters:
			root_degree: Scale degree of the chord root.
			density: Number of stacked tones added above the root.
			tonality: Key offset added to the root degree (default 0).

		Returns:
			``density + 1`` semitone offsets, lowest voice first.

		Example:
			```python
			white = get_scale_by_name("white")  # 0 2 3 5 7 9 10
			white.chord_notes(0, 3)  # → [0, 3, 7, 10]
			white.chord_notes(6, 3)  # → [10, 12, 15, 19]
			```
		"""

		num_notes = self.num_notes()
		index = root_degree + tonality
		octave_shift = 0

		if index >= num_notes or index < 0:
			octaves, index = divmod(index, num_notes)
			octave_shift += octaves * SEMITONES_PER_OCTAVE

		chord = [self.note_position(index) + octave_shift]

		for _ in range(density):

			index += 2

			if index >= num_notes:
				index = 0
				octave_shift += SEMITONES_PER_OCTAVE

			chord.append(self.note_position(index) + octave_shift)

		return chord


SCALE_NAMES: typing.List[str] = ["white", "blue", "red", "black", "penta", "tones", "full"]

SCALES: typing.List[Scale] = [
	Scale([0, 2, 3, 5, 7, 9, 10]),
	Scale([0, 2, 4, 5, 7, 8, 10]),
	Scale([0, 1, 4, 5, 7, 8, 11]),
	Scale([1, 2, 4, 5, 7, 8, 10, 11]),
	Scale([0, 2, 5, 7, 10]),
	Scale([0, 2, 4, 6, 8, 10]),
	Scale([0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11]),
]


def scale_names () -> typing.List[str]:

	"""
	Return the catalog names in id order.
	"""

	return list(SCALE_NAMES)


def get_scale_by_num (num: int) -> Scale:

	"""
	Return the catalog scale with the given id.
	"""

	if not 0 <= num < len(SCALES):
		raise ValueError(f"Unknown scale id: {num}")

	return SCALES[num]


def get_scale_by_name (name: str) -> Scale:

	"""
	Return the catalog scale with the given name (case-insensitive).
	"""

	key = name.strip().lower()

	if key not in SCALE_NAMES:
		raise ValueError(f"Unknown scale '{name}'. Available: {SCALE_NAMES}")

	return SCALES[SCALE_NAMES.index(key)]


def scale_id (value: typing.Union[int, str], base: int = 10) -> int:

	"""
	Resolve a scale given as an id, a number in ``base`` or a name to its id.
	"""

	if isinstance(value, int):
		get_scale_by_num(value)
		return value

	text = value.strip()

	try:
		number = int(text, base)
	except ValueError:
		get_scale_by_name(text)
		return SCALE_NAMES.index(text.lower())

	return scale_id(number)


def get_scale (value: typing.Union[int, str]) -> Scale:

	"""
	Return a catalog scale given as an id, a numeric string or a name.
	"""

	return SCALES[scale_id(value)]


def register_scale (name: str, notes: typing.Sequence[int]) -> int:

	"""
	Add a named scale to the catalog and return its id.

	Offsets must be distinct semitones in the range 0-11, in ascending order.

	Example:
		```python
		hirajoshi = register_scale("hirajoshi", [0, 2, 3, 7, 8])
		get_scale_by_num(hirajoshi).num_notes()  # → 5
		```
	"""

	key = name.strip().lower()

	if not key:
		raise ValueError("Scale name cannot be empty")

	if key in SCALE_NAMES:
		raise ValueError(f"Scale '{name}' is already registered")

	if not notes:
		raise ValueError("A scale needs at least one note")

	if any(n < 0 or n >= SEMITONES_PER_OCTAVE for n in notes):
		raise ValueError("Scale offsets must be in the range 0-11")

	if list(notes) != sorted(set(notes)):
		raise ValueError("Scale offsets must be distinct and ascending")

	SCALE_NAMES.append(key)
	SCALES.append(Scale(notes))

	return len(SCALES) - 1


def tonality_from_value (value: typing.Union[int, str], base: int = 10) -> int:

	"""
	Read a tonality given as a number or a key name.

	Numbers are returned as-is so that keys above 11 keep shifting the scale
	degree further. Names are case-sensitive (``"E"`` and ``"e"`` differ) and are
	only tried when the text is not a number in ``base``, so in hexadecimal
	``"B"`` is key 11 rather than the ``B`` label.
	"""

	if isinstance(value, int):
		return value

	text = value.strip()

	try:
		return int(text, base)
	except ValueError:
		pass

	if text not in TONALITY_NAMES:
		raise ValueError(f"Unknown key '{value}'. Use a number or one of {TONALITY_NAMES}")

	return TONALITY_NAMES.index(text)


def tonality_name (tonality: int) -> str:

	"""
	Return the key label of a tonality (modulo 12).
	"""

	return TONALITY_NAMES[tonality % SEMITONES_PER_OCTAVE]

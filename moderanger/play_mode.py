"""How an instrument voices the notes of a step.

``CHORD`` sounds every voice together for the whole step. Every other mode is
an arpeggio: the voices are played one after another, splitting the step
evenly. The even/odd modes split the voices by pitch parity first and play
the two halves one after the other, each half ascending or descending.
"""

import enum
import typing


class PlayMode (enum.IntEnum):

	CHORD = 0
	ASCENDING = 1
	DESCENDING = 2
	ASC_DESC = 3
	DESC_ASC = 4
	EVEN_ASC_ODD_ASC = 5
	EVEN_ASC_ODD_DESC = 6
	EVEN_DESC_ODD_DESC = 7
	EVEN_DESC_ODD_ASC = 8
	ODD_ASC_EVEN_ASC = 9
	ODD_ASC_EVEN_DESC = 10
	ODD_DESC_EVEN_DESC = 11
	ODD_DESC_EVEN_ASC = 12

	@classmethod
	def from_value (cls, value: typing.Union[int, str], base: int = 10) -> "PlayMode":

		"""
		Read a play mode given as a number in ``base`` or a name (``"chord"``, ``"asc_desc"``).
		"""

		if isinstance(value, int):
			return cls(value)

		text = value.strip()

		try:
			number = int(text, base)
		except ValueError:
			number = None

		if number is not None:
			try:
				return cls(number)
			except ValueError:
				raise ValueError(f"Unknown play mode {text}") from None

		try:
			return cls[text.upper()]
		except KeyError:
			names = [mode.name.lower() for mode in cls]
			raise ValueError(f"Unknown play mode '{value}'. Available: {names}") from None


def _even (notes: typing.List[int]) -> typing.List[int]:
	return [n for n in notes if n % 2 == 0]

def _odd (notes: typing.List[int]) -> typing.List[int]:
	return [n for n in notes if n % 2 == 1]


def arpeggios (notes: typing.Sequence[int], mode: PlayMode) -> typing.List[typing.List[int]]:

	"""
	Split the notes into the runs an arpeggio mode plays, in order.

	``CHORD`` has no runs.
	"""

	notes = list(notes)

	if mode == PlayMode.CHORD:
		return []

	if mode == PlayMode.ASCENDING:
		return [notes]

	if mode == PlayMode.DESCENDING:
		return [notes[::-1]]

	if mode == PlayMode.ASC_DESC:
		return [notes[:-1], notes[::-1]]

	if mode == PlayMode.DESC_ASC:
		return [notes[::-1], notes[1:]]

	even = _even(notes)
	odd = _odd(notes)

	runs: typing.Dict[PlayMode, typing.List[typing.List[int]]] = {
		PlayMode.EVEN_ASC_ODD_ASC: [even, odd],
		PlayMode.EVEN_ASC_ODD_DESC: [even, odd[::-1]],
		PlayMode.EVEN_DESC_ODD_DESC: [even[::-1], odd[::-1]],
		PlayMode.EVEN_DESC_ODD_ASC: [even[::-1], odd],
		PlayMode.ODD_ASC_EVEN_ASC: [odd, even],
		PlayMode.ODD_ASC_EVEN_DESC: [odd, even[::-1]],
		PlayMode.ODD_DESC_EVEN_DESC: [odd[::-1], even[::-1]],
		PlayMode.ODD_DESC_EVEN_ASC: [odd[::-1], even],
	}

	return runs[mode]


def arpeggiate (notes: typing.Sequence[int], mode: PlayMode) -> typing.List[int]:

	"""
	Return the flat order in which an arpeggio mode plays the notes.

	Example:
		```python
		arpeggiate([60, 64, 67], PlayMode.ASC_DESC)  # → [60, 64, 67, 64, 60]
		```
	"""

	return [note for run in arpeggios(notes, mode) for note in run]

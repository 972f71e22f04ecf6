import pytest

import moderanger.circle
import moderanger.scales


# C major on a 12-position wheel: 0 2 4 5 7 9 11
MAJOR = "101011010101"


def test_next_scale_position_skips_unflagged () -> None:

	"""Stepping up lands only on flagged positions."""

	circle = moderanger.circle.Circle.from_string(MAJOR)

	assert circle.next_scale_position(0) == 2
	assert circle.next_scale_position(4) == 5
	assert circle.next_scale_position(11) == 12


def test_prev_scale_position_skips_unflagged () -> None:

	"""Stepping down mirrors stepping up."""

	circle = moderanger.circle.Circle.from_string(MAJOR)

	assert circle.prev_scale_position(5) == 4
	assert circle.prev_scale_position(2) == 0


def test_positions_are_never_wrapped () -> None:

	"""Positions keep counting past the scheme; only the lookup folds them."""

	circle = moderanger.circle.Circle.from_string(MAJOR)
	position = 0

	for _ in range(7):
		position = circle.next_scale_position(position)

	assert position == 12

	for _ in range(7):
		position = circle.next_scale_position(position)

	assert position == 24


def test_chord_positions_skip_a_scale_tone () -> None:

	"""A chord step is two scale steps: a stacked third."""

	circle = moderanger.circle.Circle.from_string(MAJOR)

	assert circle.next_chord_position(0) == 4
	assert circle.next_chord_position(4) == 7
	assert circle.prev_chord_position(7) == 4


def test_triad_from_start_note () -> None:

	"""Setting the start note and three voices gives the diatonic triad."""

	circle = moderanger.circle.Circle.from_string(MAJOR)

	circle.set_chord_start_note(1)
	circle.set_chord_notes(3)
	assert circle.chord_notes() == [0, 4, 7]

	circle.set_chord_start_note(2)
	assert circle.chord_notes() == [2, 5, 9]


def test_inc_and_dec_chord_start_note () -> None:

	"""Incrementing the root moves it one scale tone; below zero the scheme is read mirrored."""

	circle = moderanger.circle.Circle.from_string(MAJOR)
	circle.set_chord_start_note(1)

	circle.inc_chord_start_note()
	assert circle.chord.root_position == 2

	circle.dec_chord_start_note()
	circle.dec_chord_start_note()
	assert circle.chord.root_position == -2


def test_chord_note_count_is_clamped () -> None:

	"""Chord voices stay within 0 and the number of scale tones."""

	circle = moderanger.circle.Circle.from_string("100100010000")

	circle.set_chord_notes(10)
	assert circle.chord.num_notes == 3

	circle.add_chord_note()
	assert circle.chord.num_notes == 3

	circle.set_chord_notes(0)
	circle.remove_chord_note()
	assert circle.chord.num_notes == 0
	assert circle.chord_notes() == []


def test_from_scale_flags_the_scale_offsets () -> None:

	"""A catalog scale becomes a 12-flag scheme."""

	circle = moderanger.circle.Circle.from_scale(moderanger.scales.get_scale_by_name("penta"))

	assert circle.note_scheme == [1, 0, 1, 0, 0, 1, 0, 1, 0, 0, 1, 0]
	assert circle.num_scale_notes() == 5


@pytest.mark.parametrize("scheme", [[], [0, 0, 0], [1, 2, 0]])
def test_invalid_schemes_raise (scheme: list) -> None:

	"""Empty schemes, schemes with no tones and non-flag values are rejected."""

	with pytest.raises(ValueError):
		moderanger.circle.Circle(scheme)


def test_invalid_scheme_strings_raise () -> None:

	"""Flag strings may only hold 0 and 1."""

	with pytest.raises(ValueError):
		moderanger.circle.Circle.from_string("10x1")

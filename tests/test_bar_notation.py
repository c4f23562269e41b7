import pytest

import reprise.bar_notation
import reprise.constants.markers as markers
import reprise.constants.ticks


def test_plain_bars () -> None:

	"""Space-separated ids should become full bars in score order."""

	bars = reprise.bar_notation.parse("A B C")

	assert [bar.bar_id for bar in bars] == ["A", "B", "C"]
	assert all(bar.tick_len == reprise.constants.ticks.WHOLE for bar in bars)
	assert all(not bar.markers and bar.variation is None for bar in bars)


def test_default_bar_ticks () -> None:

	"""Bars without an explicit length should use bar_ticks."""

	bars = reprise.bar_notation.parse("A B", bar_ticks=720)

	assert [bar.tick_len for bar in bars] == [720, 720]


def test_repeat_marks_attach_to_neighbours () -> None:

	"""|: marks the following bar and :| marks the preceding bar."""

	bars = reprise.bar_notation.parse("|: A B :| C")

	assert bars[0].markers == frozenset({markers.REPEAT_START})
	assert bars[1].markers == frozenset({markers.REPEAT_END})
	assert bars[2].markers == frozenset()


def test_single_bar_repeat () -> None:

	"""One bar can carry both repeat marks."""

	bars = reprise.bar_notation.parse("|: A :|")

	assert bars[0].markers == frozenset({markers.REPEAT_START, markers.REPEAT_END})


@pytest.mark.parametrize("alias,marker", [
	("segno", markers.SEGNO),
	("fine", markers.FINE),
	("coda1", markers.CODA_FIRST),
	("coda2", markers.CODA_SECOND),
	("dc", markers.DA_CAPO),
	("ds", markers.DAL_SEGNO),
	("da_capo", markers.DA_CAPO),
	("coda_first", markers.CODA_FIRST),
])
def test_marker_aliases (alias: str, marker: str) -> None:

	"""Short aliases and full marker names should both be accepted."""

	bars = reprise.bar_notation.parse(f"A@{alias}")

	assert bars[0].markers == frozenset({marker})


def test_multiple_markers () -> None:

	"""Several @markers can follow one bar id."""

	bars = reprise.bar_notation.parse("F@fine@ds")

	assert bars[0].markers == frozenset({markers.FINE, markers.DAL_SEGNO})


@pytest.mark.parametrize("token", ["B=720@dc", "B@dc=720"])
def test_tick_length_before_or_after_markers (token: str) -> None:

	"""The =ticks suffix may follow the id or the last marker."""

	bar = reprise.bar_notation.parse(token)[0]

	assert bar.bar_id == "B"
	assert bar.tick_len == 720
	assert bar.markers == frozenset({markers.DA_CAPO})


def test_variations () -> None:

	"""Bars inside [N ...] should carry variation N."""

	bars = reprise.bar_notation.parse("|: A [1 B C :|] [2 D]")

	assert [bar.variation for bar in bars] == [None, 1, 1, 2]
	assert bars[2].markers == frozenset({markers.REPEAT_END})


def test_brackets_need_no_spaces () -> None:

	"""Brackets are tokens of their own."""

	assert reprise.bar_notation._tokenize("|: A [1 B] [2 C]") == ["|:", "A", "[", "1", "B", "]", "[", "2", "C", "]"]
	assert [bar.variation for bar in reprise.bar_notation.parse("A [1 B][2 C]")] == [None, 1, 2]


def test_empty_notation () -> None:

	"""Empty notation should produce no bars."""

	assert reprise.bar_notation.parse("") == []


@pytest.mark.parametrize("notation", [
	"A [1 B",
	"A B]",
	"A [1 B [2 C]]",
	"A [x B]",
	"A [0 B]",
	"A [",
	":| A",
	"A |:",
	"A@nope",
	"A=12x",
	"@fine",
	"=240",
])
def test_malformed_notation (notation: str) -> None:

	"""Malformed notation should raise BarNotationError."""

	with pytest.raises(reprise.bar_notation.BarNotationError):
		reprise.bar_notation.parse(notation)


@pytest.mark.parametrize("notation", ["A=0", "A@dc@ds", "|: A@dc", "A [1 B@dc]"])
def test_invalid_bars_are_reported_as_notation_errors (notation: str) -> None:

	"""Bar-level validation failures should surface as notation errors."""

	with pytest.raises(reprise.bar_notation.BarNotationError):
		reprise.bar_notation.parse(notation)


def test_bar_ticks_must_be_positive () -> None:

	"""A non-positive default bar length is a caller error."""

	with pytest.raises(ValueError):
		reprise.bar_notation.parse("A", bar_ticks=0)

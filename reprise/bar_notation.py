import dataclasses
import typing

import reprise.bar
import reprise.constants.markers
import reprise.constants.ticks


class BarNotationError (Exception):
	pass


MARKER_ALIASES: typing.Dict[str, str] = {
	"segno": reprise.constants.markers.SEGNO,
	"fine": reprise.constants.markers.FINE,
	"coda1": reprise.constants.markers.CODA_FIRST,
	"coda2": reprise.constants.markers.CODA_SECOND,
	"dc": reprise.constants.markers.DA_CAPO,
	"ds": reprise.constants.markers.DAL_SEGNO,
}


@dataclasses.dataclass
class _PendingBar:

	"""
	A bar being assembled while its surrounding tokens are read.
	"""

	bar_id: str
	tick_len: int
	markers: typing.Set[str] = dataclasses.field(default_factory=set)
	variation: typing.Optional[int] = None


def parse (notation: str, bar_ticks: int = reprise.constants.ticks.WHOLE) -> typing.List[reprise.bar.Bar]:

	"""
	Parse a compact bar notation into a list of bars.

	Bar notation writes a score's repeat structure on one line, which keeps
	fixtures and score files readable.

	**Syntax:**
	- `A B C`: Bars separated by spaces, in score order. The token is the bar id.
	- `|: A B :|`: Repeat marks. `|:` attaches to the next bar, `:|` to the previous one.
	- `[1 B :|] [2 C]`: Variations. The number after `[` is the variation index.
	- `B@fine`: Markers after `@` (`segno`, `fine`, `coda1`, `coda2`, `dc`, `ds`,
	  or any full marker name). Several may follow: `B@coda1@fine`.
	- `P=240`, `B=720@dc`: Tick length after `=`; bars without one are `bar_ticks` long.

	Parameters:
		notation: The string to parse.
		bar_ticks: Tick length of bars that do not give one (default a 4/4 bar).

	Returns:
		The bars, ready for :func:`reprise.regions.build_structure`.

	Example:
		```python
		# Pickup, a repeat with two endings, then Da Capo al Fine
		parse("P=240 |: A [1 B :|] [2 C@fine] D@dc")
		```
	"""

	if bar_ticks <= 0:
		raise ValueError("bar_ticks must be positive")

	tokens = _tokenize(notation)
	pending: typing.List[_PendingBar] = []
	repeat_start_next = False
	variation: typing.Optional[int] = None
	expect_index = False

	for token in tokens:

		if expect_index:
			if not token.isdigit() or int(token) < 1:
				raise BarNotationError(f"Expected a variation number after '[', got {token!r}")
			variation = int(token)
			expect_index = False

		elif token == "[":
			if variation is not None:
				raise BarNotationError("Variations cannot be nested")
			expect_index = True

		elif token == "]":
			if variation is None:
				raise BarNotationError("Unexpected closing bracket")
			variation = None

		elif token == "|:":
			repeat_start_next = True

		elif token == ":|":
			if not pending:
				raise BarNotationError("':|' must follow a bar")
			pending[-1].markers.add(reprise.constants.markers.REPEAT_END)

		else:
			bar = _parse_bar(token, bar_ticks)
			bar.variation = variation

			if repeat_start_next:
				bar.markers.add(reprise.constants.markers.REPEAT_START)
				repeat_start_next = False

			pending.append(bar)

	if expect_index or variation is not None:
		raise BarNotationError("Missing closing bracket")

	if repeat_start_next:
		raise BarNotationError("'|:' must be followed by a bar")

	bars: typing.List[reprise.bar.Bar] = []

	for item in pending:
		try:
			bars.append(reprise.bar.Bar(item.bar_id, item.tick_len, frozenset(item.markers), item.variation))
		except ValueError as exc:
			raise BarNotationError(str(exc)) from exc

	return bars


def _tokenize (text: str) -> typing.List[str]:

	"""
	Split notation into tokens, with brackets as tokens of their own.
	"|: A [1 B]" -> ["|:", "A", "[", "1", "B", "]"]
	"""

	text = text.replace("[", " [ ").replace("]", " ] ")

	return text.split()


def _parse_bar (token: str, bar_ticks: int) -> _PendingBar:

	"""
	Read one bar token: ``id`` and any ``@marker``, with ``=ticks`` after the id or at the end.
	"B=720@dc" and "B@dc=720" are the same bar.
	"""

	parts = token.split("@")
	tick_len = bar_ticks
	names: typing.List[str] = []

	for index, part in enumerate(parts):
		name, equals, ticks_text = part.partition("=")

		if equals:
			if not ticks_text.isdigit():
				raise BarNotationError(f"Tick length must be a whole number, got {token!r}")
			tick_len = int(ticks_text)

		if index == 0:
			bar_id = name
		else:
			names.append(name)

	if not bar_id:
		raise BarNotationError(f"Bar token {token!r} has no id")

	markers: typing.Set[str] = set()

	for name in names:
		marker = MARKER_ALIASES.get(name, name)
		if marker not in reprise.constants.markers.ALL_MARKERS:
			raise BarNotationError(f"Unknown marker {name!r} in {token!r}")
		markers.add(marker)

	return _PendingBar(bar_id=bar_id, tick_len=tick_len, markers=markers)

"""Playing-order resolution: turn a repeat structure into the bars actually played.

The resolver walks a validated :class:`~reprise.regions.Structure` in two modes:

**Forward** (the first, top-to-bottom playing):

- Sequence: each bar once.
- Repeat: the enclosed bars twice.
- Variation: for each variation in turn, the common region then that variation.
- Compound: each region in order.

**Replay** (after a D.C./D.S. jump):

- Sequence: each bar once.
- Repeat: once only; repeat marks are ignored.
- Variation: the common region once, then only the last variation.
- Compound: each region in order, stopping after the Fine bar (or before the
  first bar past it, when Fine sits in a skipped variation); reaching the
  first Coda skips ahead to just after the second Coda.

Every region kind's behaviour is spelled out once, in :func:`_forward` and
:func:`_replay`. Both produce positions into the structure's flattened bars;
because a replay visits each bar at most once and in score order, the Fine and
Coda rules are applied as index jumps over that list.

The top-level order is the forward pass, followed for D.C./D.S. structures by
the replay from the jump target: the first bar for D.C. (the second bar for an
auftakt tune whose pickup is short and whose D.C. bar is a full bar), or the Segno bar for D.S.
"""

import dataclasses
import logging
import typing

import reprise.bar
import reprise.errors
import reprise.regions
import reprise.rhythm
import reprise.validator


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class PlayedBar:

	"""
	One sounding of a bar in the playing order.

	Attributes:
		bar_id: The bar played.
		pass_number: 1 the first time the bar sounds, 2 the second time, and so on.
		position: The bar's position in the structure's flattened bars.
		tick_len: The bar's length in ticks.
	"""

	bar_id: str
	pass_number: int
	position: int
	tick_len: int


class PlayingOrder:

	"""
	The bars of a piece in performance order.

	Behaves as an immutable sequence of :class:`PlayedBar`. Each resolution
	returns a new, complete order; consumers should replace any previous one.
	"""

	def __init__ (self, entries: typing.Iterable[PlayedBar]) -> None:

		self._entries: typing.Tuple[PlayedBar, ...] = tuple(entries)

	def __len__ (self) -> int:
		return len(self._entries)

	def __iter__ (self) -> typing.Iterator[PlayedBar]:
		return iter(self._entries)

	def __getitem__ (self, index: int) -> PlayedBar:
		return self._entries[index]

	def __eq__ (self, other: object) -> bool:

		if not isinstance(other, PlayingOrder):
			return NotImplemented

		return self._entries == other._entries

	def __hash__ (self) -> int:
		return hash(self._entries)

	def __repr__ (self) -> str:

		played = ", ".join(f"{entry.bar_id}{entry.pass_number}" for entry in self._entries)
		return f"PlayingOrder([{played}])"

	def bar_ids (self) -> typing.List[str]:

		"""Return the ids of the played bars, in order."""

		return [entry.bar_id for entry in self._entries]

	def pairs (self) -> typing.List[typing.Tuple[str, int]]:

		"""Return ``(bar_id, pass_number)`` for every played bar, in order."""

		return [(entry.bar_id, entry.pass_number) for entry in self._entries]

	def passes_of (self, bar_id: str) -> int:

		"""Return how many times ``bar_id`` is played."""

		return sum(1 for entry in self._entries if entry.bar_id == bar_id)

	def start_ticks (self) -> typing.List[int]:

		"""Return the start tick of every played bar on the unrolled timeline."""

		ticks: typing.List[int] = []
		tick = 0

		for entry in self._entries:
			ticks.append(tick)
			tick += entry.tick_len

		return ticks

	def total_ticks (self) -> int:

		"""Return the length of the whole performance in ticks."""

		return sum(entry.tick_len for entry in self._entries)


def _sequence (region: reprise.regions.SequenceRegion, structure: reprise.regions.Structure) -> typing.List[int]:
	return [structure.position(bar) for bar in region.bars]


def _forward (region: typing.Union[reprise.regions.SimpleRegion, reprise.regions.CompoundRegion], structure: reprise.regions.Structure) -> typing.List[int]:

	"""Return the positions played by a first, top-to-bottom pass over ``region``."""

	if isinstance(region, reprise.regions.SequenceRegion):
		return _sequence(region, structure)

	if isinstance(region, reprise.regions.RepeatRegion):
		return _sequence(region.body, structure) * 2

	if isinstance(region, reprise.regions.VariationRegion):
		positions: typing.List[int] = []
		for variation in region.variations:
			positions.extend(_forward(region.common, structure))
			positions.extend(_sequence(variation, structure))
		return positions

	if isinstance(region, reprise.regions.CompoundRegion):
		positions = []
		for child in region.regions:
			positions.extend(_forward(child, structure))
		return positions

	raise TypeError(f"Unknown region type: {type(region).__name__}")


def _replay (region: typing.Union[reprise.regions.SimpleRegion, reprise.regions.CompoundRegion], structure: reprise.regions.Structure) -> typing.List[int]:

	"""Return the positions played by a D.C./D.S. replay over ``region``, before Fine/Coda rules."""

	if isinstance(region, reprise.regions.SequenceRegion):
		return _sequence(region, structure)

	if isinstance(region, reprise.regions.RepeatRegion):
		return _sequence(region.body, structure)

	if isinstance(region, reprise.regions.VariationRegion):
		return _replay(region.common, structure) + _sequence(region.variations[-1], structure)

	if isinstance(region, reprise.regions.CompoundRegion):
		positions = []
		for child in region.regions:
			positions.extend(_replay(child, structure))
		return positions

	raise TypeError(f"Unknown region type: {type(region).__name__}")


def _navigate (positions: typing.List[int], start: int, markers: reprise.validator.MarkerIndex) -> typing.List[int]:

	"""
	Apply the replay's start point and its Fine and Coda rules.

	``positions`` is the replay of the whole piece, strictly increasing.
	"""

	played: typing.List[int] = []
	i = 0

	while i < len(positions) and positions[i] < start:
		i += 1

	while i < len(positions):
		position = positions[i]

		if position == markers.coda_first:
			# Skip the first Coda bar and everything up to and including the second.
			coda_second = typing.cast(int, markers.coda_second)
			while i < len(positions) and positions[i] <= coda_second:
				i += 1
			continue

		if markers.fine is not None and position > markers.fine:
			# Fine sat in a variation the replay skips.
			break

		played.append(position)

		if position == markers.fine:
			break

		i += 1

	return played


def _replay_start (
	structure: reprise.regions.Structure,
	markers: reprise.validator.MarkerIndex,
	rhythm: typing.Optional[reprise.rhythm.Rhythm],
	auftakt: bool
) -> int:

	"""Return the position the replay starts from."""

	if structure.kind == reprise.regions.DAL_SEGNO:
		return typing.cast(int, markers.segno)

	if auftakt and len(structure) > 1:
		full_ticks = reprise.rhythm.full_bar_length(rhythm)

		if structure.last_bar().tick_len == full_ticks and structure.first_bar().tick_len < full_ticks:
			# The D.C. bar is complete on its own, so the pickup is not replayed.
			return 1

	return 0


def _check_markers (structure: reprise.regions.Structure, markers: reprise.validator.MarkerIndex) -> None:

	"""Reject structures that break an assumption the navigation relies on."""

	if structure.kind == reprise.regions.DAL_SEGNO and markers.segno is None:
		raise reprise.errors.StructuralInconsistency("D.S. structure has no Segno to return to")

	if markers.coda_first is not None and (markers.coda_second is None or markers.coda_second <= markers.coda_first):
		raise reprise.errors.StructuralInconsistency(
			f"Coda at position {markers.coda_first} has no second Coda after it to jump to"
		)

	ids = [bar.bar_id for bar in structure.bars]
	if len(set(ids)) != len(ids):
		raise reprise.errors.StructuralInconsistency("Bar ids are not unique, positions cannot be resolved")


def resolve (
	structure: reprise.regions.Structure,
	rhythm: typing.Optional[reprise.rhythm.Rhythm] = None,
	auftakt: bool = False,
	markers: typing.Optional[reprise.validator.MarkerIndex] = None
) -> PlayingOrder:

	"""
	Return the playing order of a structure.

	Parameters:
		structure: The structure to play. It is never modified.
		rhythm: The tune's time signature (default 4/4). Only used for auftakt tunes.
		auftakt: Whether the tune starts with a pickup bar.
		markers: The index returned by :func:`reprise.validator.validate`. When
			omitted the structure is assumed unvalidated and indexed here, with
			the navigation assumptions checked.

	Raises:
		reprise.errors.StructuralInconsistency: The structure bypassed validation
			and cannot be navigated.

	Example:
		```python
		structure = build_structure(bars)
		markers = validate(structure)
		order = resolve(structure, markers=markers)
		order.pairs()   # [("A", 1), ("B", 1), ("A", 2), ("B", 2)]
		```
	"""

	if markers is None:
		markers = reprise.validator.MarkerIndex.collect(structure)
		_check_markers(structure, markers)

	positions = _forward(structure.body, structure)

	if structure.kind != reprise.regions.BARE:
		start = _replay_start(structure, markers, rhythm, auftakt)
		positions.extend(_navigate(_replay(structure.body, structure), start, markers))

	passes: typing.Dict[int, int] = {}
	entries: typing.List[PlayedBar] = []

	for position in positions:
		passes[position] = passes.get(position, 0) + 1
		bar = structure.bars[position]
		entries.append(PlayedBar(
			bar_id = bar.bar_id,
			pass_number = passes[position],
			position = position,
			tick_len = bar.tick_len
		))

	order = PlayingOrder(entries)
	logger.debug(f"Resolved {structure.kind} structure of {len(structure)} bars into {len(order)} played bars")

	return order


def playing_order (
	bars: typing.Iterable[reprise.bar.Bar],
	rhythm: typing.Optional[reprise.rhythm.Rhythm] = None,
	auftakt: bool = False
) -> PlayingOrder:

	"""
	Build, validate and resolve a bar stream in one call.

	Raises:
		reprise.errors.StructuralViolation: The bars do not form a valid structure.
	"""

	structure = reprise.regions.build_structure(bars)
	markers = reprise.validator.validate(structure, rhythm=rhythm, auftakt=auftakt)

	return resolve(structure, rhythm=rhythm, auftakt=auftakt, markers=markers)

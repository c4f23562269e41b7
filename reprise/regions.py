"""The repeat structure of a score as a tree of regions.

A score's bars are grouped into a closed set of region types:

- :class:`SequenceRegion` - bars played straight through.
- :class:`RepeatRegion` - a sequence bounded by ``|:`` and ``:|``.
- :class:`VariationRegion` - a common region followed by two or more variations
  (alternate endings).
- :class:`CompoundRegion` - the ordered list of the above that makes up the piece.

:class:`Structure` wraps the compound region with the piece's jump instruction
(none, Da Capo or Dal Segno) and a flattened view of its bars, so navigation
markers can be addressed by integer position.

Regions are immutable data. How each kind is played lives in
:mod:`reprise.resolver`, not here.

Use :func:`build_structure` to group an ordered stream of :class:`~reprise.bar.Bar`
objects into a structure.
"""

import dataclasses
import logging
import typing

import reprise.bar
import reprise.constants.markers
import reprise.errors


logger = logging.getLogger(__name__)


BARE = "bare"
DA_CAPO = "da_capo"
DAL_SEGNO = "dal_segno"

STRUCTURE_KINDS: typing.FrozenSet[str] = frozenset({BARE, DA_CAPO, DAL_SEGNO})


@dataclasses.dataclass(frozen=True)
class SequenceRegion:

	"""An ordered, non-empty run of bars with no internal branching."""

	bars: typing.Tuple[reprise.bar.Bar, ...]

	def __post_init__ (self) -> None:

		object.__setattr__(self, "bars", tuple(self.bars))

		if not self.bars:
			raise ValueError("A sequence region needs at least one bar")

	def first_bar (self) -> reprise.bar.Bar:

		"""Return the first bar of the sequence."""

		return self.bars[0]

	def score_bars (self) -> typing.Tuple[reprise.bar.Bar, ...]:

		"""Return the bars in score (written) order."""

		return self.bars


@dataclasses.dataclass(frozen=True)
class RepeatRegion:

	"""A sequence bounded by repeat marks, played twice on a forward pass."""

	body: SequenceRegion

	def first_bar (self) -> reprise.bar.Bar:

		"""Return the first bar inside the repeat."""

		return self.body.first_bar()

	def score_bars (self) -> typing.Tuple[reprise.bar.Bar, ...]:

		"""Return the bars in score (written) order."""

		return self.body.bars


CommonRegion = typing.Union[SequenceRegion, RepeatRegion]


@dataclasses.dataclass(frozen=True)
class VariationRegion:

	"""
	A common region followed by its variations.

	On a forward pass the common region is played before every variation:
	common, variation 1, common, variation 2, and so on.

	Attributes:
		common: The shared opening, a sequence or a repeat.
		variations: The alternate endings, in order. A well-formed region has at least two.
	"""

	common: CommonRegion
	variations: typing.Tuple[SequenceRegion, ...]

	def __post_init__ (self) -> None:

		object.__setattr__(self, "variations", tuple(self.variations))

		if not self.variations:
			raise ValueError("A variation region needs at least one variation")

	def first_bar (self) -> reprise.bar.Bar:

		"""Return the first bar of the common region."""

		return self.common.first_bar()

	def score_bars (self) -> typing.Tuple[reprise.bar.Bar, ...]:

		"""Return the common bars followed by every variation's bars."""

		bars = list(self.common.score_bars())

		for variation in self.variations:
			bars.extend(variation.bars)

		return tuple(bars)


SimpleRegion = typing.Union[SequenceRegion, RepeatRegion, VariationRegion]


@dataclasses.dataclass(frozen=True)
class CompoundRegion:

	"""An ordered, non-empty list of simple regions played one after another."""

	regions: typing.Tuple[SimpleRegion, ...]

	def __post_init__ (self) -> None:

		object.__setattr__(self, "regions", tuple(self.regions))

		if not self.regions:
			raise ValueError("A compound region needs at least one region")

	def first_bar (self) -> reprise.bar.Bar:

		"""Return the first bar of the first region."""

		return self.regions[0].first_bar()

	def score_bars (self) -> typing.Tuple[reprise.bar.Bar, ...]:

		"""Return every bar in score (written) order."""

		bars: typing.List[reprise.bar.Bar] = []

		for region in self.regions:
			bars.extend(region.score_bars())

		return tuple(bars)


@dataclasses.dataclass(frozen=True)
class Structure:

	"""
	The top-level repeat structure of a piece.

	Attributes:
		body: The piece's regions.
		kind: ``BARE`` (no jump), ``DA_CAPO`` or ``DAL_SEGNO``.
		bars: Every bar in score order. A bar's index in this tuple is its *position*.

	Positions are how markers are addressed: ``position_of(FINE)`` is the index of
	the bar carrying Fine, and ``bars_between(a, b)`` slices the flattened bars.
	"""

	body: CompoundRegion
	kind: str = BARE
	bars: typing.Tuple[reprise.bar.Bar, ...] = dataclasses.field(init=False, repr=False)
	_positions: typing.Dict[str, int] = dataclasses.field(init=False, repr=False, compare=False)
	_owners: typing.Tuple[SimpleRegion, ...] = dataclasses.field(init=False, repr=False, compare=False)

	def __post_init__ (self) -> None:

		if self.kind not in STRUCTURE_KINDS:
			raise ValueError(f"Unknown structure kind {self.kind!r}. Expected one of {sorted(STRUCTURE_KINDS)}")

		bars: typing.List[reprise.bar.Bar] = []
		owners: typing.List[SimpleRegion] = []
		positions: typing.Dict[str, int] = {}

		for region in self.body.regions:
			for bar in region.score_bars():
				# Keep the first position for a repeated id; the validator reports duplicates.
				positions.setdefault(bar.bar_id, len(bars))
				bars.append(bar)
				owners.append(region)

		object.__setattr__(self, "bars", tuple(bars))
		object.__setattr__(self, "_positions", positions)
		object.__setattr__(self, "_owners", tuple(owners))

	def __len__ (self) -> int:

		return len(self.bars)

	def first_bar (self) -> reprise.bar.Bar:

		"""Return the first bar of the piece."""

		return self.bars[0]

	def last_bar (self) -> reprise.bar.Bar:

		"""Return the last bar of the piece, where a D.C./D.S. instruction sits."""

		return self.bars[-1]

	def position (self, bar: reprise.bar.Bar) -> int:

		"""Return the position of ``bar`` in the flattened bar sequence."""

		try:
			return self._positions[bar.bar_id]
		except KeyError:
			raise ValueError(f"Bar {bar.bar_id!r} is not part of this structure") from None

	def positions_of (self, marker: str) -> typing.Tuple[int, ...]:

		"""Return the positions of every bar carrying ``marker``, in score order."""

		return tuple(i for i, bar in enumerate(self.bars) if bar.has(marker))

	def position_of (self, marker: str) -> typing.Optional[int]:

		"""Return the position of the first bar carrying ``marker``, or None."""

		positions = self.positions_of(marker)

		return positions[0] if positions else None

	def bars_between (self, pos_a: int, pos_b: int) -> typing.Tuple[reprise.bar.Bar, ...]:

		"""Return the bars from position ``pos_a`` up to, but not including, ``pos_b``."""

		if pos_a < 0 or pos_b < pos_a or pos_b > len(self.bars):
			raise ValueError(f"Invalid position range {pos_a}..{pos_b} for {len(self.bars)} bars")

		return self.bars[pos_a:pos_b]

	def region_at (self, position: int) -> SimpleRegion:

		"""Return the simple region that owns the bar at ``position``."""

		return self._owners[position]

	def next_sibling_region (self, region: SimpleRegion) -> typing.Optional[SimpleRegion]:

		"""Return the region played after ``region`` in the piece, or None if it is the last."""

		regions = self.body.regions

		for i, candidate in enumerate(regions):
			if candidate is region:
				return regions[i + 1] if i + 1 < len(regions) else None

		raise ValueError("Region is not part of this structure")


class StructureBuilder:

	"""
	Group an ordered stream of bars into a :class:`Structure`.

	Feed bars in score order with :meth:`on_bar`, then call :meth:`build`.

	Grouping rules:

	- Plain bars accumulate into an open run.
	- ``repeat_start`` closes the open run and starts a repeat at that bar.
	- ``repeat_end`` on a plain bar closes the open run as a repeat. Without a
	  matching start the repeat reaches back to the end of the previous region.
	- A bar with variation index 1 turns the open run (or a repeat closed on the
	  bar just before it) into the common region of a variation region.
	  Consecutive bars sharing an index form one variation; the next index starts
	  the next variation; the first plain bar closes the region. ``repeat_end``
	  on a variation bar is notational only.
	- A ``da_capo`` or ``dal_segno`` marker decides the structure kind.

	Raises :class:`~reprise.errors.MalformedStructure` for streams that cannot be
	grouped and :class:`~reprise.errors.DuplicateBarId` for reused ids.
	"""

	def __init__ (self) -> None:

		self._regions: typing.List[SimpleRegion] = []
		self._open: typing.List[reprise.bar.Bar] = []
		self._open_is_repeat: bool = False
		self._open_start: int = 0

		self._common: typing.Optional[CommonRegion] = None
		self._variations: typing.List[typing.List[reprise.bar.Bar]] = []

		self._kind: str = BARE
		self._seen: typing.Dict[str, int] = {}
		self._position: int = 0

	def on_bar (self, bar: reprise.bar.Bar) -> None:

		"""Add the next bar of the score."""

		position = self._position
		self._position += 1

		if bar.bar_id in self._seen:
			raise reprise.errors.DuplicateBarId(
				f"Bar id {bar.bar_id!r} is used at positions {self._seen[bar.bar_id]} and {position}",
				positions = (self._seen[bar.bar_id], position)
			)

		self._seen[bar.bar_id] = position

		if self._kind == BARE:
			if bar.has(reprise.constants.markers.DAL_SEGNO):
				self._kind = DAL_SEGNO
			elif bar.has(reprise.constants.markers.DA_CAPO):
				self._kind = DA_CAPO

		if bar.variation is not None:
			self._on_variation_bar(bar, position)
			return

		if self._variations:
			self._close_variations()

		if bar.has(reprise.constants.markers.REPEAT_START):
			self._close_open_run(position)
			self._open_is_repeat = True
			self._open_start = position

		if not self._open:
			self._open_start = position

		self._open.append(bar)

		if bar.has(reprise.constants.markers.REPEAT_END):
			self._regions.append(RepeatRegion(SequenceRegion(tuple(self._open))))
			self._open = []
			self._open_is_repeat = False

	def _on_variation_bar (self, bar: reprise.bar.Bar, position: int) -> None:

		"""Start, extend or advance the variation region being collected."""

		index = typing.cast(int, bar.variation)

		if not self._variations:

			if index != 1:
				raise reprise.errors.MalformedStructure(
					f"Bar {bar.bar_id!r} starts variation {index} without variation 1 before it",
					positions = (position,)
				)

			if self._open:
				self._common = SequenceRegion(tuple(self._open))
				self._open = []
				self._open_is_repeat = False

			elif self._regions and isinstance(self._regions[-1], RepeatRegion):
				self._common = typing.cast(RepeatRegion, self._regions.pop())

			else:
				raise reprise.errors.MalformedStructure(
					f"Variation 1 at bar {bar.bar_id!r} has no common region before it",
					positions = (position,)
				)

			self._variations = [[bar]]

		elif index == len(self._variations):
			self._variations[-1].append(bar)

		elif index == len(self._variations) + 1:
			self._variations.append([bar])

		else:
			raise reprise.errors.MalformedStructure(
				f"Bar {bar.bar_id!r} has variation {index} but variation {len(self._variations)} is the current one",
				positions = (position,)
			)

	def _close_variations (self) -> None:

		assert self._common is not None, "Variations are always collected after a common region"

		self._regions.append(VariationRegion(
			common = self._common,
			variations = tuple(SequenceRegion(tuple(bars)) for bars in self._variations)
		))

		self._common = None
		self._variations = []

	def _close_open_run (self, position: int) -> None:

		"""Close the open run as a plain sequence before a new repeat starts."""

		if not self._open:
			return

		if self._open_is_repeat:
			raise reprise.errors.MalformedStructure(
				f"Repeat starting at bar {self._open[0].bar_id!r} is not closed before the next repeat starts",
				positions = (self._open_start, position)
			)

		self._regions.append(SequenceRegion(tuple(self._open)))
		self._open = []

	def build (self) -> Structure:

		"""Close whatever is still open and return the structure."""

		if self._variations:
			self._close_variations()

		if self._open:

			if self._open_is_repeat:
				raise reprise.errors.MalformedStructure(
					f"Repeat starting at bar {self._open[0].bar_id!r} is never closed",
					positions = (self._open_start,)
				)

			self._regions.append(SequenceRegion(tuple(self._open)))
			self._open = []

		if not self._regions:
			raise reprise.errors.MalformedStructure("A structure needs at least one bar")

		structure = Structure(body=CompoundRegion(tuple(self._regions)), kind=self._kind)
		logger.debug(f"Built {structure.kind} structure: {len(structure)} bars in {len(structure.body.regions)} regions")

		return structure


def build_structure (bars: typing.Iterable[reprise.bar.Bar]) -> Structure:

	"""
	Group an ordered stream of bars into a structure.

	Example:
		```python
		structure = build_structure([
			Bar("A", 960, {REPEAT_START}),
			Bar("B", 960, {REPEAT_END}),
			Bar("C", 960, {DA_CAPO}),
		])
		```
	"""

	builder = StructureBuilder()

	for bar in bars:
		builder.on_bar(bar)

	return builder.build()

"""Structural validation of a repeat structure.

:func:`validate` is the gate in front of :mod:`reprise.resolver`. It makes one
pass over the flattened bars collecting marker positions, then checks the rules
in a fixed order and raises the first :class:`~reprise.errors.StructuralViolation`
it finds:

1. A Segno exists exactly when the structure is Dal Segno, and only one.
2. Fine appears only with D.C./D.S., at most once, and after any Segno.
3. Coda markers appear only with D.C./D.S., as one first/second pair, before any Fine.
4. Every variation region has at least two variations.
5. At most one D.C./D.S. instruction, on the final bar.
6. Bar ids are unique.
7. An auftakt D.C. tune ends on a full bar, or on one that completes the pickup.

On success it returns the :class:`MarkerIndex` the resolver navigates by.
"""

import dataclasses
import logging
import typing

import reprise.constants.markers
import reprise.errors
import reprise.regions
import reprise.rhythm


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class MarkerIndex:

	"""
	Positions of the navigation markers in a structure's flattened bars.

	Built once at validation time so the resolver never scans for markers.
	Each attribute is a position, or ``None`` when the marker is absent.
	"""

	segno: typing.Optional[int] = None
	fine: typing.Optional[int] = None
	coda_first: typing.Optional[int] = None
	coda_second: typing.Optional[int] = None
	jump: typing.Optional[int] = None

	@staticmethod
	def collect (structure: reprise.regions.Structure) -> "MarkerIndex":

		"""Index the first occurrence of each marker without checking any rule."""

		return MarkerIndex(
			segno = structure.position_of(reprise.constants.markers.SEGNO),
			fine = structure.position_of(reprise.constants.markers.FINE),
			coda_first = structure.position_of(reprise.constants.markers.CODA_FIRST),
			coda_second = structure.position_of(reprise.constants.markers.CODA_SECOND),
			jump = _first(_jump_positions(structure))
		)


def _first (positions: typing.Sequence[int]) -> typing.Optional[int]:
	return positions[0] if positions else None


def _jump_positions (structure: reprise.regions.Structure) -> typing.Tuple[int, ...]:

	return tuple(
		i for i, bar in enumerate(structure.bars)
		if bar.markers & reprise.constants.markers.JUMP_MARKERS
	)


def _variation_regions (structure: reprise.regions.Structure) -> typing.Iterator[reprise.regions.VariationRegion]:

	for region in structure.body.regions:
		if isinstance(region, reprise.regions.VariationRegion):
			yield region


def validate (
	structure: reprise.regions.Structure,
	rhythm: typing.Optional[reprise.rhythm.Rhythm] = None,
	auftakt: bool = False
) -> MarkerIndex:

	"""
	Check a structure against the repeat grammar and index its markers.

	Parameters:
		structure: The structure to check.
		rhythm: The tune's time signature, used for the auftakt check (default 4/4).
		auftakt: Whether the tune starts with a pickup bar.

	Returns:
		The marker index for :func:`reprise.resolver.resolve`.

	Raises:
		reprise.errors.StructuralViolation: The first rule the structure breaks.
	"""

	segnos: typing.List[int] = []
	fines: typing.List[int] = []
	coda_firsts: typing.List[int] = []
	coda_seconds: typing.List[int] = []
	jumps: typing.List[int] = []
	seen: typing.Dict[str, int] = {}

	# One pass: unique ids, and every marker position.
	for i, bar in enumerate(structure.bars):

		if bar.bar_id in seen:
			raise reprise.errors.DuplicateBarId(
				f"Bar id {bar.bar_id!r} is used at positions {seen[bar.bar_id]} and {i}",
				positions = (seen[bar.bar_id], i)
			)
		seen[bar.bar_id] = i

		if bar.has(reprise.constants.markers.SEGNO):
			segnos.append(i)
		if bar.has(reprise.constants.markers.FINE):
			fines.append(i)
		if bar.has(reprise.constants.markers.CODA_FIRST):
			coda_firsts.append(i)
		if bar.has(reprise.constants.markers.CODA_SECOND):
			coda_seconds.append(i)
		if bar.markers & reprise.constants.markers.JUMP_MARKERS:
			jumps.append(i)

	has_jump = structure.kind != reprise.regions.BARE
	last = len(structure) - 1

	# Jump instruction.
	if len(jumps) > 1:
		raise reprise.errors.DuplicatedJump(f"Found {len(jumps)} D.C./D.S. instructions, expected at most one", positions=tuple(jumps))

	if jumps and jumps[0] != last:
		raise reprise.errors.MisplacedJump(
			f"D.C./D.S. instruction on bar {structure.bars[jumps[0]].bar_id!r} must be on the final bar",
			positions = tuple(jumps)
		)

	# Segno.
	if structure.kind == reprise.regions.DAL_SEGNO:
		if not segnos:
			raise reprise.errors.MissingSegno("D.S. structure has no Segno", positions=jumps)
		if len(segnos) > 1:
			raise reprise.errors.DuplicatedSegno(f"D.S. structure has {len(segnos)} Segno markers, expected one", positions=segnos)

	elif segnos:
		raise reprise.errors.UnexpectedSegno(f"Segno found in a {structure.kind} structure", positions=segnos)

	# Fine.
	if fines and not has_jump:
		raise reprise.errors.FineWithoutJump("Fine found without a D.C. or D.S. instruction", positions=fines)

	if len(fines) > 1:
		raise reprise.errors.DuplicatedFine(f"Found {len(fines)} Fine markers, expected at most one", positions=fines)

	fine = _first(fines)

	if fine is not None and segnos and segnos[0] >= fine:
		raise reprise.errors.SegnoAfterFine("Segno must come before Fine", positions=(segnos[0], fine))

	# Coda.
	codas = tuple(sorted(coda_firsts + coda_seconds))

	if codas and not has_jump:
		raise reprise.errors.CodaWithoutJump("Coda found without a D.C. or D.S. instruction", positions=codas)

	if codas and (len(coda_firsts) != 1 or len(coda_seconds) != 1):
		raise reprise.errors.CodaCountInvalid(f"Found {len(codas)} Coda markers, expected none or one pair", positions=codas)

	if codas:
		coda_first, coda_second = coda_firsts[0], coda_seconds[0]

		if coda_first >= coda_second:
			raise reprise.errors.CodaOrderInvalid("The first Coda must come before the second", positions=(coda_first, coda_second))

		if fine is not None and coda_second >= fine:
			raise reprise.errors.CodaAfterFine("The Coda pair must come before Fine", positions=(coda_first, coda_second, fine))

	# Variations.
	for region in _variation_regions(structure):
		if len(region.variations) < 2:
			position = structure.position(region.first_bar())
			raise reprise.errors.InsufficientVariations(
				f"Variation region starting at bar {region.first_bar().bar_id!r} has {len(region.variations)} variation, expected at least 2",
				positions = (position,)
			)

	# Auftakt.
	if auftakt and structure.kind == reprise.regions.DA_CAPO:
		_check_auftakt(structure, rhythm)

	index = MarkerIndex(
		segno = _first(segnos),
		fine = fine,
		coda_first = _first(coda_firsts),
		coda_second = _first(coda_seconds),
		jump = _first(jumps)
	)

	logger.debug(f"Valid {structure.kind} structure: {index}")

	return index


def _check_auftakt (structure: reprise.regions.Structure, rhythm: typing.Optional[reprise.rhythm.Rhythm]) -> None:

	"""The D.C. bar must fill a whole bar, or pickup + D.C. bar must."""

	full_ticks = reprise.rhythm.full_bar_length(rhythm)
	pickup_ticks = structure.first_bar().tick_len
	last_ticks = structure.last_bar().tick_len

	if last_ticks == full_ticks or pickup_ticks + last_ticks == full_ticks:
		return

	raise reprise.errors.AuftaktArithmeticMismatch(
		f"Pickup ({pickup_ticks} ticks) and D.C. bar ({last_ticks} ticks) do not make a full bar of {full_ticks} ticks",
		pickup_ticks = pickup_ticks,
		last_ticks = last_ticks,
		full_ticks = full_ticks,
		positions = (0, len(structure) - 1)
	)

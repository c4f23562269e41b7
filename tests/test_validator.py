import typing

import pytest

import reprise.bar
import reprise.errors
import reprise.regions
import reprise.rhythm
import reprise.validator


StructureOf = typing.Callable[[str], reprise.regions.Structure]


def test_bare_structure_is_valid (structure_of: StructureOf) -> None:

	"""A structure with only repeats and variations should validate with an empty marker index."""

	index = reprise.validator.validate(structure_of("|: A [1 B :|] [2 C] D"))

	assert index == reprise.validator.MarkerIndex()


def test_marker_index_positions (structure_of: StructureOf) -> None:

	"""The marker index should record where each navigation marker sits."""

	index = reprise.validator.validate(structure_of("A B@segno C@coda1 D E@coda2 F@fine@ds"))

	assert index.segno == 1
	assert index.coda_first == 2
	assert index.coda_second == 4
	assert index.fine == 5
	assert index.jump == 5


def test_validation_reads_bars_in_one_pass (structure_of: StructureOf, monkeypatch: pytest.MonkeyPatch) -> None:

	"""Validation should index markers from its own scan, not per-marker lookups."""

	structure = structure_of("A B@segno C@coda1 D E@coda2 F@fine@ds")

	def _lookup (self: reprise.regions.Structure, marker: str) -> typing.NoReturn:
		raise AssertionError(f"unexpected lookup of {marker}")

	monkeypatch.setattr(reprise.regions.Structure, "positions_of", _lookup)
	monkeypatch.setattr(reprise.regions.Structure, "position_of", _lookup)

	index = reprise.validator.validate(structure)

	assert index == reprise.validator.MarkerIndex(segno=1, fine=5, coda_first=2, coda_second=4, jump=5)


# --- Segno ---


def test_ds_without_segno (structure_of: StructureOf) -> None:

	"""A D.S. structure needs a Segno."""

	with pytest.raises(reprise.errors.MissingSegno) as exc_info:
		reprise.validator.validate(structure_of("A B@ds"))

	assert exc_info.value.code == "missing_segno"


def test_ds_with_two_segnos (structure_of: StructureOf) -> None:

	"""A D.S. structure has exactly one Segno."""

	with pytest.raises(reprise.errors.DuplicatedSegno) as exc_info:
		reprise.validator.validate(structure_of("A@segno B@segno C@ds"))

	assert exc_info.value.positions == (0, 1)


def test_segno_in_dc_structure (structure_of: StructureOf) -> None:

	"""Segno belongs to D.S. only."""

	with pytest.raises(reprise.errors.UnexpectedSegno):
		reprise.validator.validate(structure_of("A@segno B@dc"))


def test_segno_in_bare_structure (structure_of: StructureOf) -> None:

	"""A Segno without any jump is rejected."""

	with pytest.raises(reprise.errors.UnexpectedSegno):
		reprise.validator.validate(structure_of("A@segno B"))


# --- Fine ---


def test_fine_in_bare_structure (structure_of: StructureOf) -> None:

	"""Fine only means something after a D.C. or D.S."""

	with pytest.raises(reprise.errors.FineWithoutJump) as exc_info:
		reprise.validator.validate(structure_of("A B@fine C"))

	assert exc_info.value.positions == (1,)


def test_two_fines (structure_of: StructureOf) -> None:

	"""There can be at most one Fine."""

	with pytest.raises(reprise.errors.DuplicatedFine):
		reprise.validator.validate(structure_of("A@fine B@fine C@dc"))


def test_segno_after_fine (structure_of: StructureOf) -> None:

	"""The Segno must come before the Fine."""

	with pytest.raises(reprise.errors.SegnoAfterFine):
		reprise.validator.validate(structure_of("A B@fine C@segno D@ds"))


# --- Coda ---


def test_single_coda (structure_of: StructureOf) -> None:

	"""An odd number of Coda markers is rejected."""

	with pytest.raises(reprise.errors.CodaCountInvalid):
		reprise.validator.validate(structure_of("A@coda1 B C@dc"))


def test_three_codas (structure_of: StructureOf) -> None:

	"""More than one Coda pair is rejected."""

	with pytest.raises(reprise.errors.CodaCountInvalid):
		reprise.validator.validate(structure_of("A@coda1 B@coda2 C@coda2 D@dc"))


def test_coda_pair_out_of_order (structure_of: StructureOf) -> None:

	"""The first Coda must come before the second."""

	with pytest.raises(reprise.errors.CodaOrderInvalid):
		reprise.validator.validate(structure_of("A@coda2 B@coda1 C@dc"))


def test_coda_after_fine (structure_of: StructureOf) -> None:

	"""The Coda pair must come before Fine."""

	with pytest.raises(reprise.errors.CodaAfterFine) as exc_info:
		reprise.validator.validate(structure_of("A@coda1 B@fine C@coda2 D@dc"))

	assert exc_info.value.positions == (0, 2, 1)


def test_coda_in_bare_structure (structure_of: StructureOf) -> None:

	"""Coda markers only apply to D.C./D.S. structures."""

	with pytest.raises(reprise.errors.CodaWithoutJump):
		reprise.validator.validate(structure_of("A@coda1 B@coda2"))


# --- Variations ---


def test_single_variation (structure_of: StructureOf) -> None:

	"""A variation region with one variation is rejected."""

	with pytest.raises(reprise.errors.InsufficientVariations) as exc_info:
		reprise.validator.validate(structure_of("|: A [1 B] C"))

	assert exc_info.value.positions == (0,)


# --- Jump ---


def test_two_jumps (structure_of: StructureOf) -> None:

	"""Only one D.C./D.S. instruction is allowed."""

	with pytest.raises(reprise.errors.DuplicatedJump):
		reprise.validator.validate(structure_of("A@dc B@dc"))


def test_jump_not_on_last_bar (structure_of: StructureOf) -> None:

	"""The D.C./D.S. instruction ends the written score."""

	with pytest.raises(reprise.errors.MisplacedJump) as exc_info:
		reprise.validator.validate(structure_of("A@dc B"))

	assert exc_info.value.positions == (0,)


def test_duplicate_ids_in_hand_built_structure () -> None:

	"""Structures assembled without the builder are still checked for unique ids."""

	bars = (reprise.bar.Bar("A", 960), reprise.bar.Bar("A", 960))
	structure = reprise.regions.Structure(reprise.regions.CompoundRegion((reprise.regions.SequenceRegion(bars),)))

	with pytest.raises(reprise.errors.DuplicateBarId):
		reprise.validator.validate(structure)


# --- Auftakt ---


def test_auftakt_mismatch (structure_of: StructureOf) -> None:

	"""Pickup and D.C. bar that neither complete each other nor end on a full bar are rejected."""

	with pytest.raises(reprise.errors.AuftaktArithmeticMismatch) as exc_info:
		reprise.validator.validate(structure_of("P=240 A B=480@dc"), auftakt=True)

	assert exc_info.value.pickup_ticks == 240
	assert exc_info.value.last_ticks == 480
	assert exc_info.value.full_ticks == 960
	assert exc_info.value.code == "auftakt_arithmetic_mismatch"


def test_auftakt_complementary_bars (structure_of: StructureOf) -> None:

	"""Pickup plus D.C. bar making a full bar is valid."""

	reprise.validator.validate(structure_of("P=240 A B=720@dc"), auftakt=True)


def test_auftakt_full_last_bar (structure_of: StructureOf) -> None:

	"""A full D.C. bar is valid whatever the pickup length."""

	reprise.validator.validate(structure_of("P=240 A B@dc"), auftakt=True)


def test_auftakt_uses_declared_rhythm (structure_of: StructureOf) -> None:

	"""The full bar length comes from the declared rhythm."""

	structure = structure_of("P=240 A=720 B=480@dc")

	reprise.validator.validate(structure, rhythm=reprise.rhythm.Rhythm(3, 4), auftakt=True)

	with pytest.raises(reprise.errors.AuftaktArithmeticMismatch):
		reprise.validator.validate(structure, auftakt=True)


def test_auftakt_check_only_when_declared (structure_of: StructureOf) -> None:

	"""Without the auftakt flag, bar lengths are not compared."""

	reprise.validator.validate(structure_of("P=240 A B=480@dc"))


def test_violations_are_value_errors (structure_of: StructureOf) -> None:

	"""Editors can catch every violation as a ValueError."""

	with pytest.raises(ValueError):
		reprise.validator.validate(structure_of("A B@ds"))

"""Structural errors raised while building, validating or resolving a score's repeat structure.

Every :class:`StructuralViolation` carries a stable ``code`` an editor can use
to look up a localized message, and the ``positions`` (indices into the
flattened bar sequence) it implicates, so the offending bars can be highlighted.
The message text is for logs only.
"""

import typing


class StructuralViolation(ValueError):

	"""
	A structure breaks one of the repeat grammar's rules.

	Recoverable by the editing layer: reject the edit and report ``code``.
	"""

	code = "structural_violation"

	def __init__ (self, message: str, positions: typing.Sequence[int] = ()) -> None:

		super().__init__(message)
		self.positions: typing.Tuple[int, ...] = tuple(positions)


class MalformedStructure (StructuralViolation):

	"""The bar stream cannot be grouped into regions (e.g. a repeat left open)."""

	code = "malformed_structure"


class DuplicateBarId (StructuralViolation):
	code = "duplicate_bar_id"


class MissingSegno (StructuralViolation):

	"""A Dal Segno structure has no Segno."""

	code = "missing_segno"


class UnexpectedSegno (StructuralViolation):

	"""A Segno appears in a structure that is not Dal Segno."""

	code = "unexpected_segno"


class DuplicatedSegno (StructuralViolation):
	code = "duplicated_segno"


class FineWithoutJump (StructuralViolation):

	"""A Fine appears in a structure with neither D.C. nor D.S."""

	code = "fine_without_jump"


class DuplicatedFine (StructuralViolation):
	code = "duplicated_fine"


class SegnoAfterFine (StructuralViolation):
	code = "segno_after_fine"


class CodaWithoutJump (StructuralViolation):

	"""A Coda marker appears in a structure with neither D.C. nor D.S."""

	code = "coda_without_jump"


class CodaCountInvalid (StructuralViolation):

	"""Coda markers must come as exactly one first/second pair."""

	code = "coda_count_invalid"


class CodaOrderInvalid (StructuralViolation):
	code = "coda_order_invalid"


class CodaAfterFine (StructuralViolation):
	code = "coda_after_fine"


class InsufficientVariations (StructuralViolation):

	"""A variation region has fewer than two variations."""

	code = "insufficient_variations"


class DuplicatedJump (StructuralViolation):

	"""More than one D.C./D.S. instruction."""

	code = "duplicated_jump"


class MisplacedJump (StructuralViolation):

	"""A D.C./D.S. instruction is not on the final bar."""

	code = "misplaced_jump"


class AuftaktArithmeticMismatch (StructuralViolation):

	"""
	An auftakt D.C. tune whose final bar neither fills a whole bar nor completes the pickup.

	Attributes:
		pickup_ticks: Tick length of the first (pickup) bar.
		last_ticks: Tick length of the final (D.C.) bar.
		full_ticks: Full bar length for the declared rhythm.
	"""

	code = "auftakt_arithmetic_mismatch"

	def __init__ (self, message: str, pickup_ticks: int, last_ticks: int, full_ticks: int, positions: typing.Sequence[int] = ()) -> None:

		super().__init__(message, positions)
		self.pickup_ticks = pickup_ticks
		self.last_ticks = last_ticks
		self.full_ticks = full_ticks


class StructuralInconsistency (RuntimeError):

	"""
	The resolver was handed a structure that bypassed validation and breaks an assumption it relies on.

	This is a programming error, not a recoverable condition: no partial playing order is produced.
	"""

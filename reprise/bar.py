import dataclasses
import typing

import reprise.constants.markers


@dataclasses.dataclass(frozen=True)
class Bar:

	"""
	One bar of the score, as far as the repeat structure is concerned.

	The bar's content lives elsewhere; only its id, its playable length and the
	navigation markers attached to it matter here.

	Attributes:
		bar_id: Unique identifier of the bar.
		tick_len: Playable length in ticks (240 per quarter note).
		markers: Marker names from :mod:`reprise.constants.markers`.
		variation: 1-based variation (alternate ending) index, or ``None``.
	"""

	bar_id: str
	tick_len: int
	markers: typing.FrozenSet[str] = frozenset()
	variation: typing.Optional[int] = None

	def __post_init__ (self) -> None:

		# Accept any iterable of marker names and normalise it.
		object.__setattr__(self, "markers", frozenset(self.markers))

		if self.tick_len <= 0:
			raise ValueError(f"Bar {self.bar_id!r}: tick length must be positive, got {self.tick_len}")

		unknown = self.markers - reprise.constants.markers.ALL_MARKERS
		if unknown:
			raise ValueError(f"Bar {self.bar_id!r}: unknown markers {sorted(unknown)}")

		for marker in self.markers:
			clash = self.markers & reprise.constants.markers.MARKER_CONFLICTS[marker]
			if clash:
				raise ValueError(f"Bar {self.bar_id!r}: {marker!r} cannot share a bar with {sorted(clash)}")

		if self.variation is not None:

			if self.variation < 1:
				raise ValueError(f"Bar {self.bar_id!r}: variation index must be 1 or more, got {self.variation}")

			clash = self.markers & reprise.constants.markers.VARIATION_CONFLICTS
			if clash:
				raise ValueError(f"Bar {self.bar_id!r}: a variation bar cannot carry {sorted(clash)}")

	def has (self, marker: str) -> bool:

		"""Return True if this bar carries ``marker``."""

		return marker in self.markers

	def __str__ (self) -> str:

		symbols = " ".join(reprise.constants.markers.MARKER_SYMBOLS[m] for m in sorted(self.markers))
		text = self.bar_id if self.variation is None else f"{self.bar_id}[{self.variation}]"
		return f"{text} {symbols}" if symbols else text

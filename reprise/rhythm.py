"""Time signatures and full-bar arithmetic.

Defines :class:`Rhythm`, the time signature that the project declares for a tune.
Its :meth:`~Rhythm.tick_len` is the "full bar length" the resolver compares
against when deciding where a Da Capo replay of an auftakt tune begins.
"""

import dataclasses
import typing

import mido

import reprise.constants.ticks


MIN_NUMERATOR = 1
MAX_NUMERATOR = 99

DENOMINATORS: typing.Tuple[int, ...] = (2, 4, 8, 16, 32, 64)


@dataclasses.dataclass(frozen=True)
class Rhythm:

	"""
	A time signature such as 4/4, 3/4 or 6/8.

	Attributes:
		numerator: Beats per bar (1-99).
		denominator: Note value per beat (2, 4, 8, 16, 32 or 64).

	Example:
		```python
		waltz = Rhythm(3, 4)
		waltz.tick_len()            # 720

		Rhythm.parse("6/8").tick_len()  # 720
		```
	"""

	numerator: int = 4
	denominator: int = 4

	def __post_init__ (self) -> None:

		if not MIN_NUMERATOR <= self.numerator <= MAX_NUMERATOR:
			raise ValueError(f"Numerator must be between {MIN_NUMERATOR} and {MAX_NUMERATOR}, got {self.numerator}")

		if self.denominator not in DENOMINATORS:
			raise ValueError(f"Denominator must be one of {DENOMINATORS}, got {self.denominator}")

	def tick_len (self) -> int:

		"""Return the length of one full bar in ticks."""

		return self.numerator * reprise.constants.ticks.TICK_RESOLUTION * 4 // self.denominator

	@staticmethod
	def parse (text: str) -> "Rhythm":

		"""
		Parse a time signature written as ``"numerator/denominator"``.

		Raises:
			ValueError: If the text is not of that form or the values are out of range.
		"""

		parts = text.strip().split("/")

		if len(parts) != 2:
			raise ValueError(f"Time signature must look like '3/4', got {text!r}")

		try:
			numerator, denominator = int(parts[0]), int(parts[1])
		except ValueError:
			raise ValueError(f"Time signature must look like '3/4', got {text!r}") from None

		return Rhythm(numerator, denominator)

	@staticmethod
	def from_midi_message (message: mido.MetaMessage) -> "Rhythm":

		"""
		Build a rhythm from a ``time_signature`` meta message.

		This is how a rhythm declared in a standard MIDI file reaches the resolver.

		Raises:
			ValueError: If the message is not a ``time_signature`` message.
		"""

		if message.type != "time_signature":
			raise ValueError(f"Expected a time_signature message, got {message.type!r}")

		return Rhythm(message.numerator, message.denominator)

	def to_midi_message (self, time: int = 0) -> mido.MetaMessage:

		"""Return this rhythm as a ``time_signature`` meta message."""

		return mido.MetaMessage("time_signature", numerator=self.numerator, denominator=self.denominator, time=time)

	def __str__ (self) -> str:

		return f"{self.numerator}/{self.denominator}"


def full_bar_length (rhythm: typing.Optional[Rhythm] = None) -> int:

	"""Return the full bar length in ticks, defaulting to 4/4 when no rhythm is declared."""

	return (rhythm or Rhythm()).tick_len()

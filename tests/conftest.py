import typing

import pytest

import reprise.bar_notation
import reprise.regions
import reprise.resolver
import reprise.rhythm
import reprise.validator


def _structure_of (notation: str) -> reprise.regions.Structure:

	"""Build a structure from bar notation without validating it."""

	return reprise.regions.build_structure(reprise.bar_notation.parse(notation))


def _order_of (notation: str, rhythm: typing.Optional[reprise.rhythm.Rhythm] = None, auftakt: bool = False) -> typing.List[str]:

	"""Build, validate and resolve bar notation, returning the played bar ids."""

	bars = reprise.bar_notation.parse(notation, bar_ticks=reprise.rhythm.full_bar_length(rhythm))

	return reprise.resolver.playing_order(bars, rhythm=rhythm, auftakt=auftakt).bar_ids()


@pytest.fixture
def structure_of () -> typing.Callable[[str], reprise.regions.Structure]:

	"""Return a helper that turns bar notation into an unvalidated structure."""

	return _structure_of


@pytest.fixture
def order_of () -> typing.Callable[..., typing.List[str]]:

	"""Return a helper that turns bar notation into the list of played bar ids."""

	return _order_of

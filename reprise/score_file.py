"""Score descriptions loaded from YAML.

A score file declares the tune's rhythm, whether it starts with a pickup, and
its bars, either in bar notation or as an explicit list::

	rhythm: "3/4"
	auftakt: true
	notation: "P=240 |: A B :| C@fine D=480@dc"

	# or

	bars:
	  - {id: A, ticks: 720, markers: [repeat_start]}
	  - {id: B, ticks: 720, markers: [repeat_end]}
	  - {id: C, variation: 1}
"""

import dataclasses
import logging
import typing

import yaml

import reprise.bar
import reprise.bar_notation
import reprise.rhythm


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Score:

	"""
	Everything the resolver needs from a score file.
	"""

	bars: typing.List[reprise.bar.Bar]
	rhythm: reprise.rhythm.Rhythm = dataclasses.field(default_factory=reprise.rhythm.Rhythm)
	auftakt: bool = False


def parse_score (data: typing.Dict[str, typing.Any]) -> Score:

	"""
	Build a :class:`Score` from an already-parsed YAML mapping.

	Raises:
		ValueError: If the mapping is missing bars or holds invalid values.
	"""

	if not isinstance(data, dict):
		raise ValueError("A score file must contain a mapping")

	rhythm = reprise.rhythm.Rhythm.parse(str(data.get("rhythm", "4/4")))
	auftakt = bool(data.get("auftakt", False))
	bar_ticks = rhythm.tick_len()

	if "notation" in data and "bars" in data:
		raise ValueError("A score file gives either 'notation' or 'bars', not both")

	if "notation" in data:
		bars = reprise.bar_notation.parse(str(data["notation"]), bar_ticks=bar_ticks)

	elif "bars" in data:
		entries = data["bars"] or []
		if not isinstance(entries, list):
			raise ValueError(f"'bars' must be a list, got {entries!r}")
		bars = [_parse_bar(entry, bar_ticks) for entry in entries]

	else:
		raise ValueError("A score file needs 'notation' or 'bars'")

	return Score(bars=bars, rhythm=rhythm, auftakt=auftakt)


def _parse_bar (entry: typing.Dict[str, typing.Any], bar_ticks: int) -> reprise.bar.Bar:

	if not isinstance(entry, dict) or "id" not in entry:
		raise ValueError(f"Each bar needs an 'id', got {entry!r}")

	ticks = entry.get("ticks", bar_ticks)
	markers = entry.get("markers") or []
	variation = entry.get("variation")

	# bool is an int subclass, but "ticks: true" is a typo, not a length.
	if not isinstance(ticks, int) or isinstance(ticks, bool):
		raise ValueError(f"Bar {entry['id']!r}: 'ticks' must be a whole number, got {ticks!r}")

	if not isinstance(markers, list) or not all(isinstance(marker, str) for marker in markers):
		raise ValueError(f"Bar {entry['id']!r}: 'markers' must be a list of marker names, got {markers!r}")

	if variation is not None and (not isinstance(variation, int) or isinstance(variation, bool)):
		raise ValueError(f"Bar {entry['id']!r}: 'variation' must be a whole number, got {variation!r}")

	return reprise.bar.Bar(
		bar_id = str(entry["id"]),
		tick_len = ticks,
		markers = frozenset(markers),
		variation = variation
	)


def load_score (path: str) -> Score:

	"""
	Load a score description from a YAML file.
	"""

	with open(path, 'r') as f:
		data = yaml.safe_load(f)

	score = parse_score(data)
	logger.info(f"Loaded {len(score.bars)} bars in {score.rhythm} from {path}")

	return score

import argparse
import logging
import sys
import typing

import yaml

import reprise.bar_notation
import reprise.errors
import reprise.resolver
import reprise.score_file


logger = logging.getLogger(__name__)


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Print the playing order of a score file, one ``bar_id pass_number`` line per played bar.
	"""

	parser = argparse.ArgumentParser(prog="reprise", description="Resolve the playing order of a score's repeat structure")
	parser.add_argument("score", help="Path to a YAML score file")
	parser.add_argument("--verbose", "-v", action="store_true", help="Log structure details")
	args = parser.parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	try:
		score = reprise.score_file.load_score(args.score)
		order = reprise.resolver.playing_order(score.bars, rhythm=score.rhythm, auftakt=score.auftakt)
	except reprise.errors.StructuralViolation as exc:
		logger.error(f"Invalid structure ({exc.code}) at positions {list(exc.positions)}: {exc}")
		return 1
	except (OSError, ValueError, yaml.YAMLError, reprise.bar_notation.BarNotationError) as exc:
		logger.error(f"Cannot read score {args.score}: {exc}")
		return 1

	for bar_id, pass_number in order.pairs():
		print(f"{bar_id} {pass_number}")

	return 0


if __name__ == "__main__":
	sys.exit(main())

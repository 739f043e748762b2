"""CLI entry-point for the Only Noobs discriminator checker.

Workflow:
- `aggregate`: walk the Only Noobs series on start.gg, count how many
  tournaments each user discriminator entered and collect event winners,
  then write discriminators.json, winnerDiscriminators.json and entrants.csv
- `classify`: load those snapshots and split a new tournament's participants
  into valid (returning, never won) and invalid entrants
- `count`: print the participant total of one or more tournaments

Examples:
  py only_noobs.py aggregate --output-dir data
  py only_noobs.py classify --data-dir data --slug only-noobs-200
  py only_noobs.py count only-noobs only-noobs-2

Env:
- STARTGG_API_KEY (or --api-key); a .env file is honoured.
"""

from __future__ import annotations

import argparse
import logging

import query as q
from config import EnvironmentConfig
from repos.discriminator_repository import DiscriminatorRepository
from repos.tournament_processor import TournamentProcessor
from service.classification_service import ClassificationService, format_invalid, format_valid
from service.rate_limiter import RateLimiter
from service.startgg_service import StartGGError, StartGGService
from slugs import CLASSIFY_SLUG, FIRST_INDEX, LAST_INDEX, series_slugs


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Track Only Noobs entrants by start.gg user discriminator.")
    p.add_argument("--api-key", default=None, help="start.gg API key (defaults to STARTGG_API_KEY).")
    p.add_argument(
        "--min-time",
        type=float,
        default=0.8,
        help="Minimum seconds between the starts of successive start.gg requests.",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging verbosity.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    agg = sub.add_parser("aggregate", help="Build the discriminator snapshots from the tournament series.")
    agg.add_argument("--output-dir", default=".", help="Directory for the snapshot files.")
    agg.add_argument("--first", type=int, default=FIRST_INDEX, help="First tournament index of the series.")
    agg.add_argument("--last", type=int, default=LAST_INDEX, help="Last tournament index of the series (inclusive).")

    cls = sub.add_parser("classify", help="Classify a tournament's participants against the snapshots.")
    cls.add_argument("--data-dir", default=".", help="Directory holding the snapshot files.")
    cls.add_argument("--slug", default=CLASSIFY_SLUG, help="Tournament slug to classify.")

    cnt = sub.add_parser("count", help="Print the participant total of tournaments.")
    cnt.add_argument("slugs", nargs="+", help="Tournament slugs.")
    return p


def run_aggregate(service: StartGGService, args: argparse.Namespace) -> int:
    slugs = series_slugs(args.first, args.last)
    logger.info("Aggregating %s tournaments (%s..%s)", len(slugs), slugs[0], slugs[-1])
    aggregate = TournamentProcessor(service).process_slugs(slugs)
    DiscriminatorRepository(args.output_dir).save(aggregate)
    return 0


def run_classify(service: StartGGService, args: argparse.Namespace) -> int:
    result = ClassificationService(service, DiscriminatorRepository(args.data_dir)).classify(args.slug)
    print(format_valid(result))
    print(format_invalid(result))
    return 0


def run_count(service: StartGGService, args: argparse.Namespace) -> int:
    for slug in args.slugs:
        name, total = q.fetch_participant_total(service, slug)
        print(f"{slug}: {name} ({total} participants)")
    return 0


COMMANDS = {
    "aggregate": run_aggregate,
    "classify": run_classify,
    "count": run_count,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    try:
        creds = EnvironmentConfig.load(args.api_key)
    except ValueError as err:
        parser.error(str(err))

    service = StartGGService(creds.api_key, url=creds.url, limiter=RateLimiter(args.min_time))
    try:
        return COMMANDS[args.command](service, args)
    except (StartGGError, FileNotFoundError, ValueError) as err:
        logger.error("%s failed: %s", args.command, err)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

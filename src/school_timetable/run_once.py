import argparse
import asyncio
import dataclasses
import sys

from .config import get_config
from .db import get_database
from .errors import DiscoveryError
from .models import EndTimePolicy, ExtractionMode, FourTokenPolicy
from .seeder import seed_timetables
from .utils import configure_logging


async def main(args: argparse.Namespace) -> int:
    config = get_config()

    overrides = {}
    if args.base_url:
        overrides["base_url"] = args.base_url if args.base_url.endswith("/") else args.base_url + "/"
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.end_time_policy:
        overrides["end_time_policy"] = EndTimePolicy(args.end_time_policy)
    if args.extraction_mode:
        overrides["extraction_mode"] = ExtractionMode(args.extraction_mode)
    if args.four_token_policy:
        overrides["four_token_policy"] = FourTokenPolicy(args.four_token_policy)
    if args.concurrency:
        overrides["max_concurrent_parses"] = args.concurrency
    config = dataclasses.replace(config, **overrides)

    configure_logging(config.log_level)

    store = None
    if not args.dry_run:
        store = await get_database()
        await store.ensure_schema()

    try:
        summary = await seed_timetables(store, config)
    except DiscoveryError as e:
        print(f"[FAILURE] {e}")
        return 1
    finally:
        if store is not None:
            await store.disconnect()

    print(
        f"[SUCCESS] Classes seeded: {summary.seeded}, "
        f"skipped: {summary.skipped}, lessons: {summary.total_lessons}"
    )
    for result in summary.results:
        if not result.status:
            print(f"  skipped {result.class_name}: {result.errors}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed class timetables from the school website.")
    parser.add_argument("--base-url", help="Folder holding index.html and the class pages")
    parser.add_argument("--dry-run", action="store_true", help="Parse everything but write nothing")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--end-time-policy", choices=[p.value for p in EndTimePolicy])
    parser.add_argument("--extraction-mode", choices=[m.value for m in ExtractionMode])
    parser.add_argument("--four-token-policy", choices=[p.value for p in FourTokenPolicy])
    parser.add_argument("--concurrency", type=int, help="Classes processed at the same time")
    return parser


def cli() -> None:
    args = build_parser().parse_args()
    sys.exit(asyncio.run(main(args)))


if __name__ == "__main__":
    cli()

"""
One-shot top-lists refresh.

Without --start/--end the range comes from the Start_date / End_date
variables, defaulting to the current month (and persisting that default).

Exit codes:
  0  refresh ran (datasets may still have been cleared)
  1  refresh skipped or a dataset FAILED
  2  invalid arguments, or no account id configured
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from services.toplists.config import Settings
from services.toplists.dates import DateRange, load_date_range
from services.toplists.errors import InvalidDateRangeError
from services.toplists.pipeline import DatasetOutcome, RefreshSummary
from services.toplists.wiring import (
    build_http_client,
    build_refresher,
    build_store,
    connect_redis,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Refresh top-N material/customer slots")
    parser.add_argument("--start", help="Range start, YYYY-MM-DD (default: stored or month start)")
    parser.add_argument("--end", help="Range end, YYYY-MM-DD (default: stored or month end)")
    parser.add_argument("--account-id", help="Host account id (default: TOPLISTS_ACCOUNT_ID)")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def exit_code(summary: RefreshSummary) -> int:
    if summary.skipped:
        return 1
    if any(r.outcome is DatasetOutcome.FAILED for r in summary.results.values()):
        return 1
    return 0


async def run(args: argparse.Namespace, settings: Settings) -> int:
    if bool(args.start) != bool(args.end):
        logger.error("--start and --end must be given together")
        return 2

    if args.account_id:
        settings = settings.model_copy(update={"account_id": args.account_id})
    if not settings.account_id:
        # Nothing can resolve a deferred account inside a one-shot run
        logger.error("No account id: pass --account-id or set TOPLISTS_ACCOUNT_ID")
        return 2

    redis_client = await connect_redis(settings)
    store = build_store(settings, redis_client)
    client = build_http_client(settings)

    try:
        if args.start:
            try:
                date_range = DateRange.from_strings(args.start, args.end)
            except InvalidDateRangeError as exc:
                logger.error("Invalid date range: %s", exc)
                return 2
        else:
            date_range = await load_date_range(store)

        refresher = build_refresher(settings, client, store)
        summary = await refresher.refresh(date_range)
        logger.info("Refresh result: %s", summary.to_dict())
        return exit_code(summary)
    finally:
        await client.aclose()
        if redis_client:
            await redis_client.aclose()


async def main() -> None:
    """Standalone entry point for running from cron or Cloud Run Job."""
    load_dotenv()

    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    code = await run(args, Settings())
    if code:
        sys.exit(code)


if __name__ == "__main__":
    asyncio.run(main())

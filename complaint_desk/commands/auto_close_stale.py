"""
Close stale complaints from the command line.

Meant for cron or any other scheduler that can run a process:

    complaint-desk-auto-close --stale-days 5
    python -m complaint_desk.commands.auto_close_stale --stale-days 5

Exits with status 1 when the run could not start (database unreachable,
lock held by another run).
"""

import argparse
import asyncio
import logging
import sys

import complaint_desk.config.config as configs
from complaint_desk.service.reaper.reaper import run_stale_reaper

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive number of days")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Auto-close open complaints with no activity in the last N days",
    )
    parser.add_argument(
        "--stale-days",
        type=_positive_int,
        default=configs.DEFAULT_STALE_DAYS,
        help=f"days of inactivity before closing (default: {configs.DEFAULT_STALE_DAYS})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=configs.LOG_LEVEL, format="%(levelname)s: %(message)s")

    try:
        report = asyncio.run(run_stale_reaper(stale_days=args.stale_days))
    except Exception:
        logger.exception("auto-close run failed")
        return 1

    logger.info(report.message)
    if report.failed_ids:
        logger.warning("failed to close: %s", ", ".join(report.failed_ids))
    return 0 if report.success else 1


if __name__ == "__main__":
    sys.exit(main())

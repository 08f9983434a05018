"""
Run the birthday reminder job by hand, e.g. to backfill a missed day.

Usage:
    python scripts/send_birthday_reminders.py [--date YYYY-MM-DD] [--lead-days N]
"""

from __future__ import annotations

import argparse
import datetime
import os
import sys
from typing import Optional

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ricgcw import create_app  # noqa: E402
from ricgcw.reminders import run_birthday_reminders  # noqa: E402


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "--date",
        type=datetime.date.fromisoformat,
        default=None,
        help="Treat this day as 'today' (default: today in the scheduled timezone).",
    )
    parser.add_argument(
        "--lead-days",
        type=int,
        default=None,
        help="Days ahead of the birthday to create the reminder.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    overrides = {}
    if args.lead_days is not None:
        overrides["BIRTHDAY_LEAD_DAYS"] = args.lead_days
    app = create_app(overrides or None)

    result = run_birthday_reminders(app, today=args.date)
    if result is None:
        print("Birthday reminder job failed; see the log for details.")
        return 1

    print(
        f"Reminders for {result.target_date.isoformat()}: "
        f"{len(result.created)} created, {result.existing} already present, "
        f"{len(result.failed)} failed."
    )
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())

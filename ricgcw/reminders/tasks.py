"""Entry point for the scheduled birthday reminder job."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Optional
from zoneinfo import ZoneInfo

from firebase_admin import firestore
from flask import current_app

from .services import BirthdayReminderService, ReminderRun

if TYPE_CHECKING:
    from flask import Flask


def local_today(timezone_name: str) -> datetime.date:
    """Return today's date in the timezone the job is scheduled in."""
    return datetime.datetime.now(ZoneInfo(timezone_name)).date()


def run_birthday_reminders(
    app: Flask, today: Optional[datetime.date] = None
) -> Optional[ReminderRun]:
    """Run the reminder job inside the app context.

    Never raises: the scheduler does not retry, so a failed run is logged and
    reported as None.
    """
    with app.app_context():
        try:
            if today is None:
                today = local_today(current_app.config["BIRTHDAY_SCHEDULE_TIMEZONE"])
            return BirthdayReminderService.run(
                firestore.client(),
                today=today,
                lead_days=current_app.config["BIRTHDAY_LEAD_DAYS"],
                location=current_app.config["BIRTHDAY_EVENT_LOCATION"],
            )
        except Exception as e:
            current_app.logger.error(f"Birthday reminder job failed: {e}")
            return None

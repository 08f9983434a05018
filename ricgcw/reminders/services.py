"""Birthday reminder events, created ahead of each member's birthday."""

from __future__ import annotations

import calendar
import datetime
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from firebase_admin import firestore
from flask import current_app

from ricgcw.constants import (
    BIRTHDAY_EVENT_PREFIX,
    BIRTHDAY_EVENT_TIME,
    DEFAULT_BIRTHDAY_LEAD_DAYS,
    DEFAULT_BIRTHDAY_LOCATION,
    EVENTS_COLLECTION,
    FIELD_BRANCH,
    FIELD_DATE,
    FIELD_DOB,
    FIELD_NAME,
    MEMBERS_COLLECTION,
)
from ricgcw.utils import coerce_date, utc_midnight_iso, utcnow_iso

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


@dataclass
class ReminderRun:
    """Outcome of one pass of the birthday reminder job."""

    target_date: datetime.date
    created: list[str] = field(default_factory=list)
    existing: int = 0
    failed: list[str] = field(default_factory=list)


def birthday_event_name(member_name: str) -> str:
    return f"{BIRTHDAY_EVENT_PREFIX}{member_name}"


def is_birthday_on(dob: datetime.date, day: datetime.date) -> bool:
    """Whether a birthday falls on ``day``, ignoring the year.

    Members born on Feb 29 are celebrated on Feb 28 in non-leap years.
    """
    if (dob.month, dob.day) == (day.month, day.day):
        return True
    return (
        (dob.month, dob.day) == (2, 29)
        and (day.month, day.day) == (2, 28)
        and not calendar.isleap(day.year)
    )


class BirthdayReminderService:
    """Creates a calendar event ahead of every member's birthday."""

    @staticmethod
    def target_date(
        today: datetime.date, lead_days: int = DEFAULT_BIRTHDAY_LEAD_DAYS
    ) -> datetime.date:
        return today + datetime.timedelta(days=lead_days)

    @staticmethod
    def members_with_birthday(
        db: Client, day: datetime.date
    ) -> list[tuple[str, dict[str, Any]]]:
        """Return (id, data) of every member whose birthday falls on ``day``.

        This reads the whole members collection.
        """
        matches = []
        for doc in db.collection(MEMBERS_COLLECTION).stream():
            member = doc.to_dict() or {}
            dob = coerce_date(member.get(FIELD_DOB))
            if dob is None:
                continue
            if is_birthday_on(dob, day):
                matches.append((doc.id, member))
        return matches

    @staticmethod
    def ensure_birthday_event(
        db: Client,
        member_id: str,
        member: dict[str, Any],
        day: datetime.date,
        location: str = DEFAULT_BIRTHDAY_LOCATION,
    ) -> Optional[str]:
        """Insert the reminder event for a member unless it already exists.

        Returns:
            The id of the new event, or None if an equal event was found.
        """
        name = birthday_event_name(member[FIELD_NAME])
        date = utc_midnight_iso(day)

        events_ref = db.collection(EVENTS_COLLECTION)
        existing = (
            events_ref.where(filter=firestore.FieldFilter(FIELD_NAME, "==", name))
            .where(filter=firestore.FieldFilter(FIELD_DATE, "==", date))
            .limit(1)
            .stream()
        )
        if any(True for _ in existing):
            return None

        event = {
            "name": name,
            "date": date,
            "time": BIRTHDAY_EVENT_TIME,
            "location": location,
            "isOnline": False,
            "description": (
                f"{member[FIELD_NAME]} celebrates a birthday on "
                f"{day.strftime('%A, %B')} {day.day}. Remember to wish them well!"
            ),
            "memberId": member_id,
            "createdAt": utcnow_iso(),
        }
        if member.get(FIELD_BRANCH):
            event[FIELD_BRANCH] = member[FIELD_BRANCH]

        doc_ref = events_ref.document()
        doc_ref.set(event)
        return doc_ref.id

    @staticmethod
    def run(
        db: Client,
        today: Optional[datetime.date] = None,
        lead_days: int = DEFAULT_BIRTHDAY_LEAD_DAYS,
        location: str = DEFAULT_BIRTHDAY_LOCATION,
    ) -> ReminderRun:
        """Create reminder events for birthdays ``lead_days`` after today.

        A failure on one member is logged and recorded; the others are still
        processed. Failing to read the members at all propagates.
        """
        if today is None:
            today = datetime.datetime.now(datetime.timezone.utc).date()
        target = BirthdayReminderService.target_date(today, lead_days)
        result = ReminderRun(target_date=target)

        for member_id, member in BirthdayReminderService.members_with_birthday(
            db, target
        ):
            if not (member.get(FIELD_NAME) or "").strip():
                current_app.logger.warning(
                    f"Skipping birthday reminder for member {member_id}: no name."
                )
                continue
            try:
                event_id = BirthdayReminderService.ensure_birthday_event(
                    db, member_id, member, target, location
                )
            except Exception as e:
                current_app.logger.error(
                    f"Failed to create birthday reminder for member {member_id}: {e}"
                )
                result.failed.append(member_id)
                continue

            if event_id is None:
                result.existing += 1
            else:
                result.created.append(event_id)
                current_app.logger.info(
                    f"Created birthday reminder {event_id} for {member[FIELD_NAME]}"
                )

        current_app.logger.info(
            f"Birthday reminders for {target.isoformat()}: "
            f"{len(result.created)} created, {result.existing} already present, "
            f"{len(result.failed)} failed."
        )
        return result

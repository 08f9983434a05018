"""Scheduled birthday reminders."""

from .services import BirthdayReminderService, ReminderRun
from .tasks import run_birthday_reminders

__all__ = ["BirthdayReminderService", "ReminderRun", "run_birthday_reminders"]

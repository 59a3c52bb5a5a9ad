"""Reminder polling."""

from bookkeeper.reminders.poller import ReminderPoller

__all__ = ["ReminderPoller"]

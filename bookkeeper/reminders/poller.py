"""
Reminder Poller

The core has no push notifications. A client that wants to alert its
user calls poll() on a timer (the desktop client used one minute) and
shows whatever comes back.

Each poll covers [last check, now + lookahead] and then moves the last
check to now, so consecutive windows overlap by the lookahead. A reminder
inside the overlap is returned by both polls; callers that must alert
once should remember the ids they have shown.
"""

from datetime import datetime, timedelta
from typing import Optional

from bookkeeper.models.ledger import Reminder, ensure_utc, utc_now
from bookkeeper.services.ledger import LedgerService


class ReminderPoller:
    """Sliding-window view over one user's upcoming reminders."""

    def __init__(
        self,
        service: LedgerService,
        user_id: str,
        lookahead: timedelta = timedelta(seconds=60),
        initial_lookback: timedelta = timedelta(minutes=5),
        now: Optional[datetime] = None,
    ):
        self._service = service
        self._user_id = user_id
        self._lookahead = lookahead
        self._last_check = ensure_utc(now or utc_now()) - initial_lookback

    @property
    def last_check(self) -> datetime:
        return self._last_check

    def poll(self, now: Optional[datetime] = None) -> list[Reminder]:
        """Enabled reminders due between the previous poll and now + lookahead."""
        now = ensure_utc(now or utc_now())
        due = self._service.upcoming_reminders(
            self._user_id,
            self._last_check,
            now + self._lookahead,
        )
        self._last_check = now
        return due

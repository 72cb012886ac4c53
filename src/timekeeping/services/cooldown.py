"""Per-employee scan cooldown for kiosk ingestion."""

from __future__ import annotations

import math
import threading
from datetime import datetime, timedelta

from timekeeping.exceptions import DuplicateScanError


class ScanCooldown:
    """Rejects repeat scans by the same employee within a short window.

    Kept in process memory, keyed by employee ID only, so one employee's
    cooldown never blocks another employee at the same scanner.
    """

    def __init__(self, seconds: int = 60):
        self.window = timedelta(seconds=seconds)
        self._last_accepted: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def check(self, employee_id: str, now: datetime) -> None:
        """Raise DuplicateScanError if ``employee_id`` is still cooling down."""
        with self._lock:
            last = self._last_accepted.get(employee_id)
        if last is None:
            return
        elapsed = now - last
        if elapsed < self.window:
            remaining = (self.window - elapsed).total_seconds()
            raise DuplicateScanError(employee_id, retry_after_seconds=math.ceil(remaining))

    def mark(self, employee_id: str, now: datetime) -> None:
        """Record an accepted scan."""
        with self._lock:
            self._last_accepted[employee_id] = now

    def clear(self) -> None:
        with self._lock:
            self._last_accepted.clear()

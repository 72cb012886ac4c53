"""Exception types raised by the timekeeping engine and its services."""

from __future__ import annotations

from typing import Any


class TimekeepingError(Exception):
    """Base class for all timekeeping errors."""


class ValidationError(TimekeepingError):
    """Raised when an input value is malformed (bad date, time, or policy)."""

    def __init__(self, field: str, value: Any, reason: str | None = None):
        self.field = field
        self.value = value
        self.reason = reason
        msg = f"Invalid {field}: {value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class EmployeeNotFoundError(TimekeepingError):
    """Raised when a scan references an unknown or inactive employee."""

    def __init__(self, employee_id: str, inactive: bool = False):
        self.employee_id = employee_id
        self.inactive = inactive
        if inactive:
            super().__init__(f"Employee {employee_id} is inactive")
        else:
            super().__init__(f"Employee {employee_id} not found")


class DuplicateScanError(TimekeepingError):
    """Raised when a scan is rejected by a duplicate-submission window."""

    def __init__(
        self,
        employee_id: str,
        retry_after_seconds: int,
        punch_type: str | None = None,
    ):
        self.employee_id = employee_id
        self.retry_after_seconds = retry_after_seconds
        self.punch_type = punch_type
        if punch_type:
            msg = f"Duplicate scan for {employee_id}: already clocked {punch_type}"
        else:
            msg = f"Duplicate scan for {employee_id}: please wait"
        super().__init__(f"{msg} (retry after {retry_after_seconds}s)")


class SlotFilledError(TimekeepingError):
    """Raised when the slot a scan classifies into is already recorded today."""

    def __init__(self, employee_id: str, work_date: Any, punch_type: str):
        self.employee_id = employee_id
        self.work_date = work_date
        self.punch_type = punch_type
        super().__init__(f"Employee {employee_id} already clocked {punch_type} on {work_date}")


class EmployeeExistsError(TimekeepingError):
    """Raised when creating an employee whose badge ID is already taken."""

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} already exists")

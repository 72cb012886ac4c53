"""ORM models."""

from timekeeping.models.attendance import AttendanceLog, Schedule
from timekeeping.models.base import Base, TimestampMixin, UTCDateTime
from timekeeping.models.employee import Employee
from timekeeping.models.payroll import PayrollConfig

__all__ = [
    "AttendanceLog",
    "Base",
    "Employee",
    "PayrollConfig",
    "Schedule",
    "TimestampMixin",
    "UTCDateTime",
]

"""Schedule and attendance log models."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timekeeping.calculators.types import Punch, PunchType, ShiftSchedule
from timekeeping.models.base import Base, TimestampMixin, UTCDateTime

if TYPE_CHECKING:
    from timekeeping.models.employee import Employee


class Schedule(Base, TimestampMixin):
    """Scheduled shift. At most one per employee and date; writes are upserts."""

    __tablename__ = "shift_schedule"

    schedule_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", name="shift_schedule_employee_date_unique"),
        CheckConstraint("start_time < end_time", name="shift_schedule_times_check"),
    )

    employee: Mapped[Employee] = relationship(back_populates="schedules")

    def to_domain(self) -> ShiftSchedule:
        return ShiftSchedule(
            employee_id=self.employee_id,
            work_date=self.work_date,
            start_time=self.start_time,
            end_time=self.end_time,
        )


class AttendanceLog(Base):
    """A recorded punch. Append-only."""

    __tablename__ = "attendance_log"

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    punch_type: Mapped[str] = mapped_column(String(8), nullable=False)

    __table_args__ = (
        # One punch per slot per day; the calculators rely on it.
        UniqueConstraint(
            "employee_id", "work_date", "punch_type",
            name="attendance_log_employee_date_type_unique",
        ),
        CheckConstraint(
            "punch_type IN ('AM_IN', 'AM_OUT', 'PM_IN', 'PM_OUT')",
            name="attendance_log_punch_type_check",
        ),
    )

    employee: Mapped[Employee] = relationship(back_populates="attendance_logs")

    def to_domain(self) -> Punch:
        return Punch(
            employee_id=self.employee_id,
            timestamp=self.timestamp,
            work_date=self.work_date,
            punch_type=PunchType(self.punch_type),
        )

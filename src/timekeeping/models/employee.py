"""Employee model."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timekeeping.calculators.types import EmployeeProfile
from timekeeping.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from timekeeping.models.attendance import AttendanceLog, Schedule


class Employee(Base, TimestampMixin):
    """Employee record. The ID is assigned manually and printed on the badge."""

    __tablename__ = "employee"

    employee_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    middle_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    birthday: Mapped[date] = mapped_column(Date, nullable=False)
    hired_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    position: Mapped[str] = mapped_column(String, nullable=False)
    branch: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    schedules: Mapped[list[Schedule]] = relationship(back_populates="employee")
    attendance_logs: Mapped[list[AttendanceLog]] = relationship(back_populates="employee")

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"

    def to_domain(self) -> EmployeeProfile:
        return EmployeeProfile(
            employee_id=self.employee_id,
            first_name=self.first_name,
            last_name=self.last_name,
            birthday=self.birthday,
            position=self.position,
            branch=self.branch,
            is_active=self.is_active,
        )

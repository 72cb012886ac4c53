"""Employee registry: create, edit, list and (de)activate badge holders."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeping.exceptions import EmployeeExistsError, EmployeeNotFoundError, ValidationError
from timekeeping.models import Employee

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("first_name", "last_name", "position", "branch")
UPDATABLE_FIELDS = frozenset(
    {
        "first_name",
        "middle_name",
        "last_name",
        "birthday",
        "hired_date",
        "email",
        "phone",
        "position",
        "branch",
    }
)


def _check_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, value, "must not be blank")
    return value.strip()


class EmployeeService:
    """Maintains employee rows.

    Employees are never deleted: attendance and payroll history keep
    pointing at them, so leaving the company is ``set_active(id, False)``.
    Inactive employees cannot scan but stay readable.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        employee_id: str,
        first_name: str,
        last_name: str,
        birthday: date,
        position: str,
        branch: str,
        middle_name: str = "",
        hired_date: date | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> Employee:
        employee_id = _check_text("employee_id", employee_id)
        values = {
            "first_name": first_name,
            "last_name": last_name,
            "position": position,
            "branch": branch,
        }
        for field in REQUIRED_TEXT_FIELDS:
            values[field] = _check_text(field, values[field])

        if await self.session.get(Employee, employee_id) is not None:
            raise EmployeeExistsError(employee_id)

        row = Employee(
            employee_id=employee_id,
            middle_name=middle_name or "",
            birthday=birthday,
            hired_date=hired_date,
            email=email,
            phone=phone,
            is_active=True,
            **values,
        )
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise EmployeeExistsError(employee_id) from e

        logger.info("Employee %s created (%s, %s)", employee_id, row.position, row.branch)
        return row

    async def get(self, employee_id: str) -> Employee:
        row = await self.session.get(Employee, employee_id)
        if row is None:
            raise EmployeeNotFoundError(employee_id)
        return row

    async def list_employees(self, active_only: bool = False) -> list[Employee]:
        stmt = select(Employee).order_by(Employee.employee_id)
        if active_only:
            stmt = stmt.where(Employee.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, employee_id: str, **changes: Any) -> Employee:
        """Apply a partial update. The badge ID itself cannot change."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError("employee", sorted(unknown), "fields cannot be updated")

        row = await self.get(employee_id)
        for field, value in changes.items():
            if field in REQUIRED_TEXT_FIELDS:
                value = _check_text(field, value)
            elif field == "birthday" and value is None:
                raise ValidationError(field, value, "required")
            elif field == "middle_name":
                value = value or ""
            setattr(row, field, value)

        await self.session.flush()
        logger.info("Employee %s updated: %s", employee_id, ", ".join(sorted(changes)) or "-")
        return row

    async def set_active(self, employee_id: str, active: bool) -> Employee:
        row = await self.get(employee_id)
        if row.is_active != active:
            row.is_active = active
            await self.session.flush()
            logger.info("Employee %s %s", employee_id, "activated" if active else "deactivated")
        return row

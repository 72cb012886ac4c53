"""Schedule lookup and upsert."""

from __future__ import annotations

import logging
from datetime import date, time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeping.calculators.types import ShiftSchedule
from timekeeping.exceptions import EmployeeNotFoundError, ValidationError
from timekeeping.models import Employee, Schedule

logger = logging.getLogger(__name__)


class ScheduleService:
    """Reads and writes shift schedules (one per employee and date)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, employee_id: str, work_date: date) -> ShiftSchedule | None:
        row = await self._get_row(employee_id, work_date)
        return row.to_domain() if row else None

    async def list_range(self, employee_id: str, start: date, end: date) -> list[ShiftSchedule]:
        """Schedules with start <= work_date <= end, ordered by date."""
        result = await self.session.execute(
            select(Schedule)
            .where(
                Schedule.employee_id == employee_id,
                Schedule.work_date >= start,
                Schedule.work_date <= end,
            )
            .order_by(Schedule.work_date)
        )
        return [row.to_domain() for row in result.scalars().all()]

    async def upcoming(self, employee_id: str, today: date, limit: int = 20) -> list[ShiftSchedule]:
        result = await self.session.execute(
            select(Schedule)
            .where(Schedule.employee_id == employee_id, Schedule.work_date >= today)
            .order_by(Schedule.work_date)
            .limit(limit)
        )
        return [row.to_domain() for row in result.scalars().all()]

    async def upsert(
        self,
        employee_id: str,
        work_date: date,
        start_time: time,
        end_time: time,
    ) -> ShiftSchedule:
        """Create or replace the schedule for (employee, date)."""
        if start_time >= end_time:
            raise ValidationError("schedule", (start_time, end_time), "start must be before end")

        if await self.session.get(Employee, employee_id) is None:
            raise EmployeeNotFoundError(employee_id)

        row = await self._get_row(employee_id, work_date)
        if row is None:
            row = Schedule(
                employee_id=employee_id,
                work_date=work_date,
                start_time=start_time,
                end_time=end_time,
            )
            self.session.add(row)
        else:
            row.start_time = start_time
            row.end_time = end_time

        await self.session.flush()
        logger.info(
            "Schedule set for %s on %s: %s-%s",
            employee_id,
            work_date,
            start_time.strftime("%H:%M"),
            end_time.strftime("%H:%M"),
        )
        return row.to_domain()

    async def _get_row(self, employee_id: str, work_date: date) -> Schedule | None:
        result = await self.session.execute(
            select(Schedule).where(
                Schedule.employee_id == employee_id,
                Schedule.work_date == work_date,
            )
        )
        return result.scalar_one_or_none()

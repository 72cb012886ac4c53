"""Scan ingestion and daily attendance queries."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeping.calculators.clock import civil_date, format_clock
from timekeeping.calculators.daily_record import compute_daily_record
from timekeeping.calculators.punch_classifier import classify
from timekeeping.calculators.types import DailyRecord, Punch
from timekeeping.config import Settings, get_settings
from timekeeping.exceptions import (
    DuplicateScanError,
    EmployeeNotFoundError,
    SlotFilledError,
    ValidationError,
)
from timekeeping.models import AttendanceLog, Employee
from timekeeping.services.cooldown import ScanCooldown
from timekeeping.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)


class AttendanceService:
    """Records badge scans and derives daily records from stored punches.

    Scan pipeline:
    1) Employee must exist and be active
    2) Per-employee kiosk cooldown
    3) Classify against today's punches and schedule
    4) Reject a same-type punch inside the duplicate window
    5) Reject a slot that is already filled
    6) Insert and commit, then start the cooldown
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings | None = None,
        cooldown: ScanCooldown | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.cooldown = cooldown or ScanCooldown(self.settings.scan_cooldown_seconds)
        self.schedules = ScheduleService(session)

    @property
    def tz(self) -> str:
        return self.settings.civil_timezone

    async def get_employee(self, employee_id: str, require_active: bool = True) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        if require_active and not employee.is_active:
            raise EmployeeNotFoundError(employee_id, inactive=True)
        return employee

    async def record_scan(self, employee_id: str, now: datetime | None = None) -> Punch:
        """Classify and store a scan for ``employee_id`` at ``now``."""
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            raise ValidationError("now", now, "naive datetime; an absolute time is required")

        await self.get_employee(employee_id)
        self.cooldown.check(employee_id, now)

        today = civil_date(now, self.tz)
        punches = await self.punches_for_date(employee_id, today)
        schedule = await self.schedules.get(employee_id, today)
        punch_type = classify(punches, now, schedule, self.tz)

        self._check_duplicate(employee_id, punches, punch_type, now)
        if any(p.punch_type == punch_type for p in punches):
            raise SlotFilledError(employee_id, today, punch_type.value)

        log = AttendanceLog(
            employee_id=employee_id,
            timestamp=now,
            work_date=today,
            punch_type=punch_type.value,
        )
        self.session.add(log)
        try:
            await self.session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent scan for the same slot.
            await self.session.rollback()
            raise SlotFilledError(employee_id, today, punch_type.value) from e
        except SQLAlchemyError:
            await self.session.rollback()
            raise

        # Only a stored punch starts the cooldown.
        self.cooldown.mark(employee_id, now)
        logger.info(
            "Recorded %s for %s on %s at %s",
            punch_type.value,
            employee_id,
            today,
            format_clock(now, self.tz),
        )
        return log.to_domain()

    def _check_duplicate(self, employee_id, punches, punch_type, now) -> None:
        if not punches:
            return
        window = timedelta(seconds=self.settings.duplicate_window_seconds)
        latest = max(punches, key=lambda p: p.timestamp)
        elapsed = now - latest.timestamp
        if latest.punch_type == punch_type and elapsed < window:
            raise DuplicateScanError(
                employee_id,
                retry_after_seconds=math.ceil((window - elapsed).total_seconds()),
                punch_type=punch_type.value,
            )

    async def punches_for_date(self, employee_id: str, work_date: date) -> list[Punch]:
        return await self.punches_between(employee_id, work_date, work_date)

    async def punches_between(self, employee_id: str, start: date, end: date) -> list[Punch]:
        """Punches attributed to start <= work_date <= end, oldest first."""
        result = await self.session.execute(
            select(AttendanceLog)
            .where(
                AttendanceLog.employee_id == employee_id,
                AttendanceLog.work_date >= start,
                AttendanceLog.work_date <= end,
            )
            .order_by(AttendanceLog.timestamp, AttendanceLog.log_id)
        )
        return [row.to_domain() for row in result.scalars().all()]

    async def daily_record(self, employee_id: str, work_date: date) -> DailyRecord:
        await self.get_employee(employee_id, require_active=False)
        punches = await self.punches_for_date(employee_id, work_date)
        schedule = await self.schedules.get(employee_id, work_date)
        return compute_daily_record(work_date, punches, schedule, self.tz)

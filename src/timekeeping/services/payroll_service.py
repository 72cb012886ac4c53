"""Payroll configuration and period reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeping.calculators.payroll import PayrollCalculator
from timekeeping.calculators.types import (
    DailyRecord,
    EmployeeProfile,
    PayPeriod,
    PayrollPolicy,
    RateSource,
    SalarySlip,
)
from timekeeping.config import Settings, get_settings
from timekeeping.models import Employee, PayrollConfig
from timekeeping.services.attendance_service import AttendanceService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodReport:
    """Daily time record and salary slip for one employee and period."""

    employee: EmployeeProfile
    period: PayPeriod
    records: list[DailyRecord]
    slip: SalarySlip
    calculation_id: UUID


@dataclass(frozen=True)
class PayrollRun:
    """Period reports for all active employees."""

    period: PayPeriod
    reports: list[PeriodReport]
    total_net_pay: Decimal


class PayrollService:
    """Loads payroll policy and computes period reports from stored punches."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()
        self.attendance = AttendanceService(session, self.settings)

    async def load_policy(self) -> PayrollPolicy:
        """Stored policy, or the built-in defaults when none has been saved."""
        row = await self._get_config_row()
        if row is None:
            return PayrollPolicy.defaults()
        return row.to_domain()

    async def save_policy(self, policy: PayrollPolicy) -> PayrollPolicy:
        """Update the single config row, creating it on first save."""
        row = await self._get_config_row()
        if row is None:
            row = PayrollConfig()
            self.session.add(row)
        row.apply(policy)
        await self.session.flush()
        logger.info("Payroll config saved (%d rates)", len(policy.rates))
        return row.to_domain()

    async def period_report(self, employee_id: str, period: PayPeriod) -> PeriodReport:
        employee = await self.attendance.get_employee(employee_id, require_active=False)
        policy = await self.load_policy()
        return await self._report(employee.to_domain(), period, policy)

    async def period_run(self, period: PayPeriod) -> PayrollRun:
        """Reports for every active employee, ordered by employee ID."""
        result = await self.session.execute(
            select(Employee).where(Employee.is_active.is_(True)).order_by(Employee.employee_id)
        )
        employees = result.scalars().all()
        policy = await self.load_policy()

        reports = [await self._report(e.to_domain(), period, policy) for e in employees]
        run = PayrollRun(
            period=period,
            reports=reports,
            total_net_pay=sum((r.slip.net_pay for r in reports), Decimal("0")),
        )
        defaulted = [
            r.employee.employee_id for r in reports if r.slip.rate_source == RateSource.DEFAULTED
        ]
        if defaulted:
            logger.warning("No daily rate configured for: %s", ", ".join(defaulted))
        logger.info(
            "Payroll run %s..%s: %d employees, net %s",
            period.start,
            period.end,
            len(reports),
            run.total_net_pay,
        )
        return run

    async def _report(
        self, profile: EmployeeProfile, period: PayPeriod, policy: PayrollPolicy
    ) -> PeriodReport:
        employee_id = profile.employee_id
        punches = await self.attendance.punches_between(employee_id, period.start, period.end)
        schedules = await self.attendance.schedules.list_range(employee_id, period.start, period.end)

        calculator = PayrollCalculator(
            policy,
            tz=self.settings.civil_timezone,
            engine_version=self.settings.engine_version,
        )
        records, slip = calculator.salary_slip(profile, period, punches, schedules)

        return PeriodReport(
            employee=profile,
            period=period,
            records=records,
            slip=slip,
            calculation_id=calculator.calculation_id(slip),
        )

    async def _get_config_row(self) -> PayrollConfig | None:
        result = await self.session.execute(
            select(PayrollConfig).order_by(PayrollConfig.config_id).limit(1)
        )
        return result.scalar_one_or_none()

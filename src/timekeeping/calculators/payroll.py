"""Payroll aggregation - turns a period of daily records into a salary slip."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from datetime import date, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from timekeeping.calculators.clock import DEFAULT_CIVIL_TIMEZONE
from timekeeping.calculators.daily_record import build_period_records
from timekeeping.calculators.rate_resolver import RateResolver
from timekeeping.calculators.types import (
    DailyRecord,
    EmployeeProfile,
    PayPeriod,
    PayrollPolicy,
    Punch,
    SalarySlip,
    ShiftSchedule,
)

OUTPUT_PRECISION = Decimal("0.01")
_SUNDAY = 6


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places."""
    return amount.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)


def payout_date(period_end: date) -> date:
    """Pay on the period end, or the Saturday before when it is a Sunday.

    Saturdays and holidays are not adjusted.
    """
    if period_end.weekday() == _SUNDAY:
        return period_end - timedelta(days=1)
    return period_end


def compute_payroll(
    employee: EmployeeProfile,
    records: Iterable[DailyRecord],
    policy: PayrollPolicy,
    period_start: date,
    period_end: date,
    is_second_half: bool,
) -> SalarySlip:
    """Compute the salary slip for one employee over one period.

    Rules:
    - Every PRESENT or INCOMPLETE day earns one daily rate.
    - Lateness beyond the grace period is charged for *all* late minutes,
      not only the minutes past grace.
    - Undertime is always charged in full.
    - Meal allowance and birth-month bonus are only paid on the second-half
      run, so at most once per month.
    - Net pay is not clamped and may be negative.
    """
    resolution = RateResolver(policy).resolve(employee)
    daily_rate = resolution.daily_rate
    per_minute = policy.late_deduction_per_minute

    base_pay = Decimal("0")
    late_deduction = Decimal("0")
    undertime_deduction = Decimal("0")
    days_present = 0

    for record in records:
        if not record.is_attended:
            continue
        days_present += 1
        base_pay += daily_rate
        if record.late_minutes > policy.grace_period_minutes:
            late_deduction += record.late_minutes * per_minute
        undertime_deduction += record.undertime_minutes * per_minute

    meal_allowance = Decimal("0")
    if (
        is_second_half
        and days_present > 0
        and employee.position in policy.meal_allowance_eligible_positions
    ):
        meal_allowance = policy.meal_allowance

    birth_month_bonus = Decimal("0")
    if is_second_half and period_start.month == employee.birthday.month:
        birth_month_bonus = policy.birth_month_bonus

    base_pay = round_to_cents(base_pay)
    late_deduction = round_to_cents(late_deduction)
    undertime_deduction = round_to_cents(undertime_deduction)
    meal_allowance = round_to_cents(meal_allowance)
    birth_month_bonus = round_to_cents(birth_month_bonus)

    net_pay = base_pay + meal_allowance + birth_month_bonus - late_deduction - undertime_deduction

    return SalarySlip(
        employee_id=employee.employee_id,
        period_start=period_start,
        period_end=period_end,
        payout_date=payout_date(period_end),
        daily_rate_used=daily_rate,
        base_pay=base_pay,
        total_late_deduction=late_deduction,
        total_undertime_deduction=undertime_deduction,
        meal_allowance=meal_allowance,
        birth_month_bonus=birth_month_bonus,
        net_pay=net_pay,
        days_present=days_present,
        rate_source=resolution.source,
    )


class PayrollCalculator:
    """Runs the daily-record and payroll steps for a fixed policy.

    Pipeline (per employee, per period):
    1) Build one DailyRecord per calendar day from punches and schedules
    2) Aggregate the records into a SalarySlip
    """

    def __init__(
        self,
        policy: PayrollPolicy,
        tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE,
        engine_version: str = "1.0.0",
    ):
        self.policy = policy
        self.tz = tz
        self.engine_version = engine_version

    def daily_records(
        self,
        period: PayPeriod,
        punches: Iterable[Punch],
        schedules: Iterable[ShiftSchedule] = (),
    ) -> list[DailyRecord]:
        return build_period_records(period, punches, schedules, self.tz)

    def salary_slip(
        self,
        employee: EmployeeProfile,
        period: PayPeriod,
        punches: Iterable[Punch],
        schedules: Iterable[ShiftSchedule] = (),
    ) -> tuple[list[DailyRecord], SalarySlip]:
        """Build the period's daily records and the slip computed from them."""
        records = self.daily_records(period, punches, schedules)
        slip = compute_payroll(
            employee,
            records,
            self.policy,
            period.start,
            period.end,
            period.is_second_half,
        )
        return records, slip

    def calculation_id(self, slip: SalarySlip) -> UUID:
        """Deterministic ID for a slip: same inputs and engine version, same ID."""
        data = {
            "slip": slip.to_dict(),
            "policy": self.policy.to_dict(),
            "engine_version": self.engine_version,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

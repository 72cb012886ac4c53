"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from timekeeping.calculators.clock import parse_time_of_day
from timekeeping.calculators.types import PayrollPolicy
from timekeeping.exceptions import ValidationError


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""

    detail: str
    code: str


def _strip_employee_id(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("employee_id must not be blank")
    return value


EmployeeId = Annotated[str, Field(min_length=1, max_length=64), AfterValidator(_strip_employee_id)]


# ============================================================================
# Attendance schemas
# ============================================================================


class ScanRequest(BaseModel):
    """A badge scan (the decoded employee ID)."""

    employee_id: EmployeeId


class PunchResponse(BaseModel):
    """A recorded punch."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    timestamp: datetime
    work_date: date
    punch_type: str
    display_time: str | None = None


class DailyRecordResponse(BaseModel):
    """Attendance derived for one day."""

    model_config = ConfigDict(from_attributes=True)

    work_date: date
    am_in: datetime | None = None
    am_out: datetime | None = None
    pm_in: datetime | None = None
    pm_out: datetime | None = None
    status: str
    arrival_status: str | None = None
    departure_status: str | None = None
    late_minutes: int
    undertime_minutes: int
    hours_worked: Decimal


class ScheduleRequest(BaseModel):
    """Shift times as ``HH:mm`` strings."""

    start_time: time
    end_time: time

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_clock(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return parse_time_of_day(value)
            except ValidationError as e:
                raise ValueError(str(e)) from None
        return value


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    work_date: date
    start_time: time
    end_time: time


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeCreate(BaseModel):
    """A new badge holder. The ID is the value encoded on the badge."""

    employee_id: EmployeeId
    first_name: str = Field(min_length=1)
    middle_name: str = ""
    last_name: str = Field(min_length=1)
    birthday: date
    hired_date: date | None = None
    email: str | None = None
    phone: str | None = None
    position: str = Field(min_length=1)
    branch: str = Field(min_length=1)


class EmployeeUpdate(BaseModel):
    """Partial employee update; omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    birthday: date | None = None
    hired_date: date | None = None
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    branch: str | None = None


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    first_name: str
    middle_name: str
    last_name: str
    full_name: str
    birthday: date
    hired_date: date | None = None
    email: str | None = None
    phone: str | None = None
    position: str
    branch: str
    is_active: bool


# ============================================================================
# Payroll schemas
# ============================================================================


class SalarySlipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    period_start: date
    period_end: date
    payout_date: date
    daily_rate_used: Decimal
    base_pay: Decimal
    total_late_deduction: Decimal
    total_undertime_deduction: Decimal
    meal_allowance: Decimal
    birth_month_bonus: Decimal
    net_pay: Decimal
    days_present: int
    rate_source: str


class PeriodReportResponse(BaseModel):
    """Daily time record plus salary slip for one semi-monthly period."""

    employee_id: str
    employee_name: str
    period_start: date
    period_end: date
    is_second_half: bool
    calculation_id: UUID
    records: list[DailyRecordResponse]
    slip: SalarySlipResponse


class PayrollRunEntry(BaseModel):
    employee_id: str
    employee_name: str
    calculation_id: UUID
    slip: SalarySlipResponse


class PayrollRunResponse(BaseModel):
    """Salary slips for every active employee in one period."""

    period_start: date
    period_end: date
    is_second_half: bool
    total_net_pay: Decimal
    entries: list[PayrollRunEntry]


class PayrollConfigSchema(BaseModel):
    """Payroll policy as exchanged with admin tooling."""

    model_config = ConfigDict(from_attributes=True)

    rates: dict[str, Decimal] = Field(default_factory=dict)
    grace_period_minutes: int = Field(default=15, ge=0)
    late_deduction_per_minute: Decimal = Field(default=Decimal("5"), ge=0)
    meal_allowance: Decimal = Field(default=Decimal("100"), ge=0)
    birth_month_bonus: Decimal = Field(default=Decimal("1000"), ge=0)
    positions: list[str] = Field(default_factory=lambda: list(PayrollPolicy().positions))
    branches: list[str] = Field(default_factory=lambda: list(PayrollPolicy().branches))
    meal_allowance_eligible_positions: list[str] = Field(
        default_factory=lambda: list(PayrollPolicy().meal_allowance_eligible_positions)
    )

    @classmethod
    def from_policy(cls, policy: PayrollPolicy) -> PayrollConfigSchema:
        return cls(
            rates=dict(policy.rates),
            grace_period_minutes=policy.grace_period_minutes,
            late_deduction_per_minute=policy.late_deduction_per_minute,
            meal_allowance=policy.meal_allowance,
            birth_month_bonus=policy.birth_month_bonus,
            positions=list(policy.positions),
            branches=list(policy.branches),
            meal_allowance_eligible_positions=list(policy.meal_allowance_eligible_positions),
        )

    def to_policy(self) -> PayrollPolicy:
        return PayrollPolicy(
            rates=self.rates,
            grace_period_minutes=self.grace_period_minutes,
            late_deduction_per_minute=self.late_deduction_per_minute,
            meal_allowance=self.meal_allowance,
            birth_month_bonus=self.birth_month_bonus,
            positions=tuple(self.positions),
            branches=tuple(self.branches),
            meal_allowance_eligible_positions=tuple(self.meal_allowance_eligible_positions),
        )

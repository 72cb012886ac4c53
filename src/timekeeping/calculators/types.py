"""Type definitions for the attendance and payroll pipeline."""

from __future__ import annotations

import calendar
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from timekeeping.exceptions import ValidationError


class PunchType(str, Enum):
    """The four daily punch slots."""

    AM_IN = "AM_IN"
    AM_OUT = "AM_OUT"
    PM_IN = "PM_IN"
    PM_OUT = "PM_OUT"

    @classmethod
    def sequence(cls) -> tuple[PunchType, ...]:
        """Slots in the order a normal working day fills them."""
        return (cls.AM_IN, cls.AM_OUT, cls.PM_IN, cls.PM_OUT)


class DayStatus(str, Enum):
    """Attendance status for one calendar day."""

    PRESENT = "PRESENT"
    INCOMPLETE = "INCOMPLETE"
    ABSENT = "ABSENT"


class ArrivalStatus(str, Enum):
    EARLY = "EARLY"
    ON_TIME = "ON_TIME"
    LATE = "LATE"


class DepartureStatus(str, Enum):
    UNDER_TIME = "UNDER_TIME"
    ON_TIME = "ON_TIME"


class RateSource(str, Enum):
    """Whether a daily rate came from configuration or fell back to zero."""

    CONFIGURED = "CONFIGURED"
    DEFAULTED = "DEFAULTED"


@dataclass(frozen=True)
class Punch:
    """A single clock-in/out event."""

    employee_id: str
    timestamp: datetime  # absolute instant
    work_date: date  # civil date the punch is attributed to
    punch_type: PunchType


@dataclass(frozen=True)
class ShiftSchedule:
    """Scheduled working hours for one employee on one date."""

    employee_id: str
    work_date: date
    start_time: time
    end_time: time


@dataclass(frozen=True)
class EmployeeProfile:
    """The slice of employee data payroll needs."""

    employee_id: str
    first_name: str
    last_name: str
    birthday: date
    position: str
    branch: str
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def rate_key(self) -> str:
        """Key into PayrollPolicy.rates ("<position>|<branch>")."""
        return rate_key(self.position, self.branch)


def rate_key(position: str, branch: str) -> str:
    return f"{position}|{branch}"


@dataclass(frozen=True)
class DailyRecord:
    """Attendance derived for one employee on one calendar day."""

    work_date: date
    am_in: datetime | None
    am_out: datetime | None
    pm_in: datetime | None
    pm_out: datetime | None
    status: DayStatus
    arrival_status: ArrivalStatus | None = None
    departure_status: DepartureStatus | None = None
    late_minutes: int = 0
    undertime_minutes: int = 0
    hours_worked: Decimal = Decimal("0")

    @property
    def is_attended(self) -> bool:
        """True for days that count toward pay."""
        return self.status in (DayStatus.PRESENT, DayStatus.INCOMPLETE)


def _to_amount(name: str, value: Any) -> Decimal:
    """Coerce a non-negative money amount to Decimal."""
    if isinstance(value, bool):
        raise ValidationError(name, value, "expected a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(name, value, "expected a number") from None
    if not amount.is_finite():
        raise ValidationError(name, value, "expected a finite number")
    if amount < 0:
        raise ValidationError(name, value, "must be >= 0")
    return amount


_DEFAULT_POSITIONS = ("Branch Manager", "Team Leader", "Regular Staff")
_DEFAULT_BRANCHES = ("Cabanatuan", "Solano")
_DEFAULT_MEAL_ELIGIBLE = ("Branch Manager", "Team Leader")


@dataclass(frozen=True)
class PayrollPolicy:
    """Rates and pay rules used by the payroll aggregator."""

    rates: Mapping[str, Decimal] = field(default_factory=dict)
    grace_period_minutes: int = 15
    late_deduction_per_minute: Decimal = Decimal("5")
    meal_allowance: Decimal = Decimal("100")
    birth_month_bonus: Decimal = Decimal("1000")
    positions: tuple[str, ...] = _DEFAULT_POSITIONS
    branches: tuple[str, ...] = _DEFAULT_BRANCHES
    meal_allowance_eligible_positions: tuple[str, ...] = _DEFAULT_MEAL_ELIGIBLE

    def __post_init__(self) -> None:
        grace = self.grace_period_minutes
        if isinstance(grace, bool) or not isinstance(grace, int):
            raise ValidationError("grace_period_minutes", grace, "expected an integer")
        if grace < 0:
            raise ValidationError("grace_period_minutes", grace, "must be >= 0")

        for name in ("late_deduction_per_minute", "meal_allowance", "birth_month_bonus"):
            value = _to_amount(name, getattr(self, name))
            object.__setattr__(self, name, value)

        try:
            raw_rates = dict(self.rates)
        except (TypeError, ValueError):
            raise ValidationError("rates", self.rates, "expected a mapping") from None
        rates = {}
        for key, amount in raw_rates.items():
            if not isinstance(key, str) or "|" not in key:
                raise ValidationError("rates", key, "expected '<position>|<branch>' key")
            rates[key] = _to_amount(f"rates[{key}]", amount)
        object.__setattr__(self, "rates", rates)

        for name in ("positions", "branches", "meal_allowance_eligible_positions"):
            value = getattr(self, name)
            try:
                names = tuple(value)
            except TypeError:
                names = None
            if isinstance(value, str) or names is None or not all(isinstance(v, str) for v in names):
                raise ValidationError(name, value, "expected a list of names")
            object.__setattr__(self, name, names)

    @classmethod
    def defaults(cls) -> PayrollPolicy:
        """Policy used when no configuration has been saved yet."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {
            "rates": {key: str(amount) for key, amount in sorted(self.rates.items())},
            "grace_period_minutes": self.grace_period_minutes,
            "late_deduction_per_minute": str(self.late_deduction_per_minute),
            "meal_allowance": str(self.meal_allowance),
            "birth_month_bonus": str(self.birth_month_bonus),
            "positions": list(self.positions),
            "branches": list(self.branches),
            "meal_allowance_eligible_positions": list(self.meal_allowance_eligible_positions),
        }


@dataclass(frozen=True)
class RateResolution:
    """Outcome of a daily-rate lookup."""

    rate_key: str
    daily_rate: Decimal
    source: RateSource

    @property
    def is_defaulted(self) -> bool:
        return self.source == RateSource.DEFAULTED


@dataclass(frozen=True)
class PayPeriod:
    """A semi-monthly payroll window (1st-15th or 16th-end of month)."""

    start: date
    end: date
    is_second_half: bool

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError("period", (self.start, self.end), "end before start")

    @staticmethod
    def _check_month(year: int, month: int) -> None:
        if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= 9999:
            raise ValidationError("year", year, "expected 1-9999")
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise ValidationError("month", month, "expected 1-12")

    @classmethod
    def first_half(cls, year: int, month: int) -> PayPeriod:
        cls._check_month(year, month)
        return cls(start=date(year, month, 1), end=date(year, month, 15), is_second_half=False)

    @classmethod
    def second_half(cls, year: int, month: int) -> PayPeriod:
        cls._check_month(year, month)
        last_day = calendar.monthrange(year, month)[1]
        return cls(start=date(year, month, 16), end=date(year, month, last_day), is_second_half=True)

    @classmethod
    def for_half(cls, year: int, month: int, half: int) -> PayPeriod:
        """Period by half number (1 or 2)."""
        cls._check_month(year, month)
        if half == 1:
            return cls.first_half(year, month)
        if half == 2:
            return cls.second_half(year, month)
        raise ValidationError("half", half, "expected 1 or 2")

    @classmethod
    def containing(cls, day: date) -> PayPeriod:
        if day.day <= 15:
            return cls.first_half(day.year, day.month)
        return cls.second_half(day.year, day.month)

    def days(self) -> Iterator[date]:
        """Each calendar date in the period, in order."""
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end


@dataclass(frozen=True)
class SalarySlip:
    """Salary computation for one employee over one period."""

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
    rate_source: RateSource = RateSource.CONFIGURED

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly dict (money rendered as strings)."""
        return {
            "employee_id": self.employee_id,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "payout_date": self.payout_date.isoformat(),
            "daily_rate_used": str(self.daily_rate_used),
            "base_pay": str(self.base_pay),
            "total_late_deduction": str(self.total_late_deduction),
            "total_undertime_deduction": str(self.total_undertime_deduction),
            "meal_allowance": str(self.meal_allowance),
            "birth_month_bonus": str(self.birth_month_bonus),
            "net_pay": str(self.net_pay),
            "days_present": self.days_present,
            "rate_source": self.rate_source.value,
        }

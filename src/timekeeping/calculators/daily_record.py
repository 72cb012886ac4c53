"""Daily attendance record derivation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from timekeeping.calculators.clock import (
    DEFAULT_CIVIL_TIMEZONE,
    civil_date,
    civil_datetime,
    minutes_of_day,
    to_civil,
)
from timekeeping.calculators.types import (
    ArrivalStatus,
    DailyRecord,
    DayStatus,
    DepartureStatus,
    PayPeriod,
    Punch,
    PunchType,
    ShiftSchedule,
)

# Classification window around the scheduled start. Not the payroll grace period.
ARRIVAL_TOLERANCE_MINUTES = 15
LUNCH_BREAK_HOURS = Decimal("1")
HOURS_PRECISION = Decimal("0.0001")

_SECONDS_PER_HOUR = Decimal("3600")


def _first_of_type(punches: Sequence[Punch], punch_type: PunchType) -> datetime | None:
    for punch in punches:
        if punch.punch_type == punch_type:
            return punch.timestamp
    return None


def _arrival(
    am_in: datetime, schedule: ShiftSchedule, tz: str | tzinfo
) -> tuple[ArrivalStatus, int]:
    diff = minutes_of_day(to_civil(am_in, tz)) - minutes_of_day(schedule.start_time)
    if diff < -ARRIVAL_TOLERANCE_MINUTES:
        return ArrivalStatus.EARLY, 0
    if diff > ARRIVAL_TOLERANCE_MINUTES:
        return ArrivalStatus.LATE, diff
    return ArrivalStatus.ON_TIME, 0


def _departure(
    pm_out: datetime, schedule: ShiftSchedule, tz: str | tzinfo
) -> tuple[DepartureStatus, int]:
    departure = minutes_of_day(to_civil(pm_out, tz))
    scheduled_end = minutes_of_day(schedule.end_time)
    if departure < scheduled_end:
        return DepartureStatus.UNDER_TIME, scheduled_end - departure
    # Leaving late earns nothing extra.
    return DepartureStatus.ON_TIME, 0


def _hours_worked(
    am_in: datetime,
    pm_out: datetime,
    schedule: ShiftSchedule | None,
    tz: str | tzinfo,
) -> Decimal:
    end = pm_out
    if schedule is not None:
        scheduled_end = civil_datetime(civil_date(pm_out, tz), schedule.end_time, tz)
        if pm_out > scheduled_end:
            end = scheduled_end

    span = Decimal(str((end - am_in).total_seconds())) / _SECONDS_PER_HOUR
    # Fixed unpaid lunch, whether or not a break was punched.
    hours = max(Decimal("0"), span - LUNCH_BREAK_HOURS)
    return hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


def compute_daily_record(
    work_date: date,
    punches: Iterable[Punch],
    schedule: ShiftSchedule | None = None,
    tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE,
) -> DailyRecord:
    """Derive the attendance record for ``work_date``.

    ``punches`` may span several days; only those attributed to
    ``work_date`` are used. When a slot was punched more than once the
    first one in the given order wins.
    """
    day_punches = [p for p in punches if p.work_date == work_date]

    am_in = _first_of_type(day_punches, PunchType.AM_IN)
    am_out = _first_of_type(day_punches, PunchType.AM_OUT)
    pm_in = _first_of_type(day_punches, PunchType.PM_IN)
    pm_out = _first_of_type(day_punches, PunchType.PM_OUT)

    if am_in and am_out and pm_in and pm_out:
        status = DayStatus.PRESENT
    elif am_in or pm_in:
        status = DayStatus.INCOMPLETE
    else:
        status = DayStatus.ABSENT

    arrival_status: ArrivalStatus | None = None
    departure_status: DepartureStatus | None = None
    late_minutes = 0
    undertime_minutes = 0
    hours_worked = Decimal("0")

    if schedule is not None and am_in is not None:
        arrival_status, late_minutes = _arrival(am_in, schedule, tz)

    if schedule is not None and pm_out is not None:
        departure_status, undertime_minutes = _departure(pm_out, schedule, tz)

    if am_in is not None and pm_out is not None:
        hours_worked = _hours_worked(am_in, pm_out, schedule, tz)

    return DailyRecord(
        work_date=work_date,
        am_in=am_in,
        am_out=am_out,
        pm_in=pm_in,
        pm_out=pm_out,
        status=status,
        arrival_status=arrival_status,
        departure_status=departure_status,
        late_minutes=late_minutes,
        undertime_minutes=undertime_minutes,
        hours_worked=hours_worked,
    )


def build_period_records(
    period: PayPeriod,
    punches: Iterable[Punch],
    schedules: Iterable[ShiftSchedule] = (),
    tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE,
) -> list[DailyRecord]:
    """Daily time record: one DailyRecord per calendar day of ``period``."""
    punch_list = [p for p in punches if p.work_date in period]
    schedule_by_date: dict[date, ShiftSchedule] = {}
    for schedule in schedules:
        schedule_by_date.setdefault(schedule.work_date, schedule)

    return [
        compute_daily_record(day, punch_list, schedule_by_date.get(day), tz)
        for day in period.days()
    ]

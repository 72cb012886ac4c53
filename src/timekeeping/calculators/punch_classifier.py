"""Decides which daily slot a new badge scan fills."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, tzinfo

from timekeeping.calculators.clock import DEFAULT_CIVIL_TIMEZONE, minutes_of_day, to_civil
from timekeeping.calculators.types import Punch, PunchType, ShiftSchedule

DEFAULT_BREAK_START_MINUTES = 12 * 60
BREAK_OFFSET_MINUTES = 4 * 60
BREAK_LENGTH_MINUTES = 60


def break_window(schedule: ShiftSchedule | None = None) -> tuple[int, int]:
    """Lunch break as (start, end) minutes of day.

    Scheduled days break four hours after the shift starts; unscheduled days
    use 12:00-13:00. The end may run past midnight for late shifts, in which
    case it is never reached.
    """
    if schedule is not None:
        start = minutes_of_day(schedule.start_time) + BREAK_OFFSET_MINUTES
    else:
        start = DEFAULT_BREAK_START_MINUTES
    return start, start + BREAK_LENGTH_MINUTES


def classify(
    todays_punches: Iterable[Punch],
    now: datetime,
    schedule: ShiftSchedule | None = None,
    tz: str | tzinfo = DEFAULT_CIVIL_TIMEZONE,
) -> PunchType:
    """Return the punch type the next scan should be recorded as.

    Slots progress AM_IN -> AM_OUT -> PM_IN -> PM_OUT and are re-derived
    from the punches already recorded today. An employee who never clocked
    in for the morning goes straight to PM_IN once the break has ended.
    """
    present = {punch.punch_type for punch in todays_punches}
    has_am_in = PunchType.AM_IN in present
    has_am_out = PunchType.AM_OUT in present
    has_pm_in = PunchType.PM_IN in present

    _, break_end = break_window(schedule)
    now_minutes = minutes_of_day(to_civil(now, tz))

    if has_pm_in:
        return PunchType.PM_OUT
    if (has_am_in and has_am_out) or (not has_am_in and now_minutes >= break_end):
        return PunchType.PM_IN
    if has_am_in and not has_am_out:
        return PunchType.AM_OUT
    return PunchType.AM_IN

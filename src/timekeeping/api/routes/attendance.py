"""Scan, daily record and schedule endpoints."""

from datetime import date, datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from timekeeping.api.dependencies import AppSettings, Attendance, DbSession, Schedules
from timekeeping.api.schemas import (
    DailyRecordResponse,
    ErrorResponse,
    PunchResponse,
    ScanRequest,
    ScheduleRequest,
    ScheduleResponse,
)
from timekeeping.calculators.clock import civil_date, format_clock
from timekeeping.calculators.types import DailyRecord, Punch, ShiftSchedule
from timekeeping.exceptions import ValidationError

router = APIRouter(tags=["attendance"])


def to_punch_response(punch: Punch, tz: str) -> PunchResponse:
    return PunchResponse(
        employee_id=punch.employee_id,
        timestamp=punch.timestamp,
        work_date=punch.work_date,
        punch_type=punch.punch_type.value,
        display_time=format_clock(punch.timestamp, tz),
    )


def to_daily_record_response(record: DailyRecord) -> DailyRecordResponse:
    return DailyRecordResponse(
        work_date=record.work_date,
        am_in=record.am_in,
        am_out=record.am_out,
        pm_in=record.pm_in,
        pm_out=record.pm_out,
        status=record.status.value,
        arrival_status=record.arrival_status.value if record.arrival_status else None,
        departure_status=record.departure_status.value if record.departure_status else None,
        late_minutes=record.late_minutes,
        undertime_minutes=record.undertime_minutes,
        hours_worked=record.hours_worked,
    )


def to_schedule_response(schedule: ShiftSchedule) -> ScheduleResponse:
    return ScheduleResponse(
        employee_id=schedule.employee_id,
        work_date=schedule.work_date,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
    )


@router.post(
    "/scans",
    response_model=PunchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def record_scan(
    attendance: Attendance,
    settings: AppSettings,
    payload: ScanRequest,
) -> PunchResponse:
    """Record a badge scan; the punch slot is decided server-side."""
    punch = await attendance.record_scan(payload.employee_id)
    return to_punch_response(punch, settings.civil_timezone)


@router.get(
    "/employees/{employee_id}/daily-records/{work_date}",
    response_model=DailyRecordResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_daily_record(
    attendance: Attendance,
    employee_id: Annotated[str, Path()],
    work_date: Annotated[date, Path()],
) -> DailyRecordResponse:
    """Attendance derived for one employee and day."""
    record = await attendance.daily_record(employee_id, work_date)
    return to_daily_record_response(record)


@router.put(
    "/employees/{employee_id}/schedules/{work_date}",
    response_model=ScheduleResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def put_schedule(
    db: DbSession,
    schedules: Schedules,
    employee_id: Annotated[str, Path()],
    work_date: Annotated[date, Path()],
    payload: ScheduleRequest,
) -> ScheduleResponse:
    """Create or replace the schedule for one employee and date."""
    schedule = await schedules.upsert(employee_id, work_date, payload.start_time, payload.end_time)
    await db.commit()
    return to_schedule_response(schedule)


@router.get(
    "/employees/{employee_id}/schedules",
    response_model=list[ScheduleResponse],
)
async def list_schedules(
    schedules: Schedules,
    employee_id: Annotated[str, Path()],
    start: Annotated[date, Query()],
    end: Annotated[date, Query()],
) -> list[ScheduleResponse]:
    """Schedules for an employee between two dates (inclusive)."""
    if end < start:
        raise ValidationError("end", end, "before start")
    items = await schedules.list_range(employee_id, start, end)
    return [to_schedule_response(s) for s in items]


@router.get(
    "/employees/{employee_id}/schedules/upcoming",
    response_model=list[ScheduleResponse],
    responses={404: {"model": ErrorResponse}},
)
async def upcoming_schedules(
    attendance: Attendance,
    schedules: Schedules,
    settings: AppSettings,
    employee_id: Annotated[str, Path()],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> list[ScheduleResponse]:
    """Schedules from today's civil date onward, soonest first."""
    await attendance.get_employee(employee_id, require_active=False)
    today = civil_date(datetime.now(timezone.utc), settings.civil_timezone)
    items = await schedules.upcoming(employee_id, today, limit=limit)
    return [to_schedule_response(s) for s in items]

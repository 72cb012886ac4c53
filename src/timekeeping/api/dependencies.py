"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeping.config import Settings, get_settings
from timekeeping.database import init_db
from timekeeping.services import (
    AttendanceService,
    EmployeeService,
    PayrollService,
    ScanCooldown,
    ScheduleService,
)

# Shared by every request so the cooldown spans the whole process.
_scan_cooldown: ScanCooldown | None = None


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_app_settings() -> Settings:
    return get_settings()


def get_scan_cooldown(settings: Annotated[Settings, Depends(get_app_settings)]) -> ScanCooldown:
    global _scan_cooldown
    if _scan_cooldown is None:
        _scan_cooldown = ScanCooldown(settings.scan_cooldown_seconds)
    return _scan_cooldown


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Cooldown = Annotated[ScanCooldown, Depends(get_scan_cooldown)]


def get_attendance_service(
    db: DbSession, settings: AppSettings, cooldown: Cooldown
) -> AttendanceService:
    return AttendanceService(db, settings, cooldown)


def get_employee_service(db: DbSession) -> EmployeeService:
    return EmployeeService(db)


def get_schedule_service(db: DbSession) -> ScheduleService:
    return ScheduleService(db)


def get_payroll_service(db: DbSession, settings: AppSettings) -> PayrollService:
    return PayrollService(db, settings)


Attendance = Annotated[AttendanceService, Depends(get_attendance_service)]
Employees = Annotated[EmployeeService, Depends(get_employee_service)]
Schedules = Annotated[ScheduleService, Depends(get_schedule_service)]
Payroll = Annotated[PayrollService, Depends(get_payroll_service)]

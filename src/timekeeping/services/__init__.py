"""Services layered over the calculation core and the database."""

from timekeeping.services.attendance_service import AttendanceService
from timekeeping.services.cooldown import ScanCooldown
from timekeeping.services.employee_service import EmployeeService
from timekeeping.services.payroll_service import PayrollRun, PayrollService, PeriodReport
from timekeeping.services.schedule_service import ScheduleService

__all__ = [
    "AttendanceService",
    "EmployeeService",
    "PayrollRun",
    "PayrollService",
    "PeriodReport",
    "ScanCooldown",
    "ScheduleService",
]

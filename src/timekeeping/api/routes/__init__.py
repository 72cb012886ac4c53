"""API routes."""

from timekeeping.api.routes.attendance import router as attendance_router
from timekeeping.api.routes.employees import router as employees_router
from timekeeping.api.routes.health import router as health_router
from timekeeping.api.routes.payroll import router as payroll_router

__all__ = ["attendance_router", "employees_router", "health_router", "payroll_router"]

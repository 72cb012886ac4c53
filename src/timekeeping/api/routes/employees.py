"""Employee registry endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from timekeeping.api.dependencies import DbSession, Employees
from timekeeping.api.schemas import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ErrorResponse,
)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_employee(
    db: DbSession,
    employees: Employees,
    payload: EmployeeCreate,
) -> EmployeeResponse:
    """Register a badge holder. New employees start active."""
    row = await employees.create(**payload.model_dump())
    await db.commit()
    return EmployeeResponse.model_validate(row)


@router.get("", response_model=list[EmployeeResponse])
async def list_employees(
    employees: Employees,
    active_only: Annotated[bool, Query()] = False,
) -> list[EmployeeResponse]:
    rows = await employees.list_employees(active_only=active_only)
    return [EmployeeResponse.model_validate(row) for row in rows]


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee(
    employees: Employees,
    employee_id: Annotated[str, Path()],
) -> EmployeeResponse:
    return EmployeeResponse.model_validate(await employees.get(employee_id))


@router.patch(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_employee(
    db: DbSession,
    employees: Employees,
    employee_id: Annotated[str, Path()],
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    """Change the fields present in the body."""
    row = await employees.update(employee_id, **payload.model_dump(exclude_unset=True))
    await db.commit()
    return EmployeeResponse.model_validate(row)


@router.post(
    "/{employee_id}/activate",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def activate_employee(
    db: DbSession,
    employees: Employees,
    employee_id: Annotated[str, Path()],
) -> EmployeeResponse:
    row = await employees.set_active(employee_id, True)
    await db.commit()
    return EmployeeResponse.model_validate(row)


@router.post(
    "/{employee_id}/deactivate",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def deactivate_employee(
    db: DbSession,
    employees: Employees,
    employee_id: Annotated[str, Path()],
) -> EmployeeResponse:
    """Stop accepting scans; history and payroll reports stay available."""
    row = await employees.set_active(employee_id, False)
    await db.commit()
    return EmployeeResponse.model_validate(row)

"""Payroll endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Query

from timekeeping.api.dependencies import DbSession, Payroll
from timekeeping.api.routes.attendance import to_daily_record_response
from timekeeping.api.schemas import (
    ErrorResponse,
    PayrollConfigSchema,
    PayrollRunEntry,
    PayrollRunResponse,
    PeriodReportResponse,
    SalarySlipResponse,
)
from timekeeping.calculators.types import PayPeriod, SalarySlip

router = APIRouter(tags=["payroll"])


def to_slip_response(slip: SalarySlip) -> SalarySlipResponse:
    return SalarySlipResponse(
        employee_id=slip.employee_id,
        period_start=slip.period_start,
        period_end=slip.period_end,
        payout_date=slip.payout_date,
        daily_rate_used=slip.daily_rate_used,
        base_pay=slip.base_pay,
        total_late_deduction=slip.total_late_deduction,
        total_undertime_deduction=slip.total_undertime_deduction,
        meal_allowance=slip.meal_allowance,
        birth_month_bonus=slip.birth_month_bonus,
        net_pay=slip.net_pay,
        days_present=slip.days_present,
        rate_source=slip.rate_source.value,
    )


@router.get(
    "/employees/{employee_id}/payroll",
    response_model=PeriodReportResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def get_period_payroll(
    payroll: Payroll,
    employee_id: Annotated[str, Path()],
    year: Annotated[int, Query(ge=1900, le=9999)],
    month: Annotated[int, Query(ge=1, le=12)],
    half: Annotated[int, Query(ge=1, le=2)],
) -> PeriodReportResponse:
    """Daily time record and salary slip for a semi-monthly period."""
    period = PayPeriod.for_half(year, month, half)
    report = await payroll.period_report(employee_id, period)

    return PeriodReportResponse(
        employee_id=report.employee.employee_id,
        employee_name=report.employee.full_name,
        period_start=period.start,
        period_end=period.end,
        is_second_half=period.is_second_half,
        calculation_id=report.calculation_id,
        records=[to_daily_record_response(r) for r in report.records],
        slip=to_slip_response(report.slip),
    )


@router.get(
    "/payroll",
    response_model=PayrollRunResponse,
    responses={422: {"model": ErrorResponse}},
)
async def run_period_payroll(
    payroll: Payroll,
    year: Annotated[int, Query(ge=1900, le=9999)],
    month: Annotated[int, Query(ge=1, le=12)],
    half: Annotated[int, Query(ge=1, le=2)],
) -> PayrollRunResponse:
    """Salary slips for all active employees in a semi-monthly period."""
    period = PayPeriod.for_half(year, month, half)
    run = await payroll.period_run(period)

    return PayrollRunResponse(
        period_start=period.start,
        period_end=period.end,
        is_second_half=period.is_second_half,
        total_net_pay=run.total_net_pay,
        entries=[
            PayrollRunEntry(
                employee_id=report.employee.employee_id,
                employee_name=report.employee.full_name,
                calculation_id=report.calculation_id,
                slip=to_slip_response(report.slip),
            )
            for report in run.reports
        ],
    )


@router.get("/payroll/config", response_model=PayrollConfigSchema)
async def get_payroll_config(payroll: Payroll) -> PayrollConfigSchema:
    """Current payroll policy (defaults if never saved)."""
    return PayrollConfigSchema.from_policy(await payroll.load_policy())


@router.put(
    "/payroll/config",
    response_model=PayrollConfigSchema,
    responses={422: {"model": ErrorResponse}},
)
async def put_payroll_config(
    db: DbSession,
    payroll: Payroll,
    payload: PayrollConfigSchema,
) -> PayrollConfigSchema:
    """Replace the payroll policy."""
    policy = await payroll.save_policy(payload.to_policy())
    await db.commit()
    return PayrollConfigSchema.from_policy(policy)

"""Attendance and payroll calculation core."""

from timekeeping.calculators.daily_record import build_period_records, compute_daily_record
from timekeeping.calculators.payroll import PayrollCalculator, compute_payroll, payout_date
from timekeeping.calculators.punch_classifier import classify
from timekeeping.calculators.rate_resolver import RateNotFoundError, RateResolver

__all__ = [
    "PayrollCalculator",
    "RateNotFoundError",
    "RateResolver",
    "build_period_records",
    "classify",
    "compute_daily_record",
    "compute_payroll",
    "payout_date",
]

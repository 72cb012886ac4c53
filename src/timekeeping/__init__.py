"""Timekeeping & payroll engine.

Turns badge-scan punches into daily attendance records and aggregates
them into semi-monthly salary slips.
"""

__version__ = "1.0.0"

"""Timekeeping Command Line Interface.

Runs the attendance and payroll calculators over JSON files, without a
database:
- Punch classification
- Daily record derivation
- Semi-monthly salary slips

Usage:
    python -m timekeeping.cli classify --punches today.json --now 2024-03-04T01:02:00Z
    python -m timekeeping.cli daily-record --punches punches.json --date 2024-03-04 --schedule 08:00-17:00
    python -m timekeeping.cli payslip --employee emp.json --punches punches.json \\
        --policy policy.json --year 2024 --month 3 --half 2

Punch files hold a list of objects with ``employee_id``, ``timestamp``
(ISO-8601 with offset) and ``punch_type``; ``work_date`` defaults to the
civil date of the timestamp.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from typing import Any, Callable

from timekeeping.calculators import PayrollCalculator, classify, compute_daily_record
from timekeeping.calculators.clock import (
    DEFAULT_CIVIL_TIMEZONE,
    civil_date,
    get_zone,
    parse_civil_date,
    parse_instant,
    parse_time_of_day,
)
from timekeeping.calculators.types import (
    DailyRecord,
    EmployeeProfile,
    PayPeriod,
    PayrollPolicy,
    Punch,
    PunchType,
    ShiftSchedule,
)
from timekeeping.exceptions import ValidationError
from timekeeping.logging_setup import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID = 2


def parse_shift(s: str) -> tuple:
    """Parse a ``START-END`` shift such as ``08:00-17:00``."""
    start, sep, end = s.partition("-")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected START-END, got {s!r}")
    try:
        return parse_time_of_day(start), parse_time_of_day(end)
    except ValidationError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def parse_date_arg(s: str) -> date:
    try:
        return parse_civil_date(s)
    except ValidationError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def load_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _require(item: dict, key: str, what: str) -> Any:
    try:
        return item[key]
    except (KeyError, TypeError):
        raise ValidationError(what, item, f"missing {key!r}") from None


def load_punches(path: str, tz: str) -> list[Punch]:
    """Read punches from a JSON list, oldest first."""
    punches = []
    for item in load_json(path):
        timestamp = parse_instant(_require(item, "timestamp", "punch"))
        raw_type = _require(item, "punch_type", "punch")
        try:
            punch_type = PunchType(raw_type)
        except ValueError:
            raise ValidationError("punch_type", raw_type) from None
        work_date = item.get("work_date")
        punches.append(
            Punch(
                employee_id=str(item.get("employee_id", "")),
                timestamp=timestamp,
                work_date=parse_civil_date(work_date) if work_date else civil_date(timestamp, tz),
                punch_type=punch_type,
            )
        )
    punches.sort(key=lambda p: p.timestamp)
    return punches


def load_schedules(path: str) -> list[ShiftSchedule]:
    return [
        ShiftSchedule(
            employee_id=str(item.get("employee_id", "")),
            work_date=parse_civil_date(_require(item, "work_date", "schedule")),
            start_time=parse_time_of_day(_require(item, "start_time", "schedule")),
            end_time=parse_time_of_day(_require(item, "end_time", "schedule")),
        )
        for item in load_json(path)
    ]


def load_employee(path: str) -> EmployeeProfile:
    data = load_json(path)
    return EmployeeProfile(
        employee_id=str(_require(data, "employee_id", "employee")),
        first_name=data.get("first_name", ""),
        last_name=data.get("last_name", ""),
        birthday=parse_civil_date(_require(data, "birthday", "employee")),
        position=_require(data, "position", "employee"),
        branch=_require(data, "branch", "employee"),
        is_active=bool(data.get("is_active", True)),
    )


def load_policy(path: str | None) -> PayrollPolicy:
    if path is None:
        return PayrollPolicy.defaults()
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValidationError("policy", data, "expected a JSON object")
    fields = {
        key: data[key]
        for key in (
            "rates",
            "grace_period_minutes",
            "late_deduction_per_minute",
            "meal_allowance",
            "birth_month_bonus",
            "positions",
            "branches",
            "meal_allowance_eligible_positions",
        )
        if key in data
    }
    return PayrollPolicy(**fields)


def record_to_dict(record: DailyRecord) -> dict[str, Any]:
    def iso(value):
        return value.isoformat() if value is not None else None

    return {
        "work_date": record.work_date.isoformat(),
        "am_in": iso(record.am_in),
        "am_out": iso(record.am_out),
        "pm_in": iso(record.pm_in),
        "pm_out": iso(record.pm_out),
        "status": record.status.value,
        "arrival_status": record.arrival_status.value if record.arrival_status else None,
        "departure_status": record.departure_status.value if record.departure_status else None,
        "late_minutes": record.late_minutes,
        "undertime_minutes": record.undertime_minutes,
        "hours_worked": str(record.hours_worked),
    }


class TimekeepingCli:
    """Timekeeping Command Line Interface."""

    def __init__(self, out=None) -> None:
        self.out = out or sys.stdout
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m timekeeping.cli",
            description="Attendance and payroll calculators",
        )
        parser.add_argument(
            "--tz",
            default=DEFAULT_CIVIL_TIMEZONE,
            help=f"Civil timezone (default: {DEFAULT_CIVIL_TIMEZONE})",
        )
        parser.add_argument(
            "--log-level",
            default="WARNING",
            help="Logging level (default: WARNING)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # classify command
        cls_cmd = subparsers.add_parser(
            "classify",
            help="Decide which slot the next scan fills",
        )
        cls_cmd.add_argument(
            "--punches",
            required=True,
            help="JSON file with the punches already recorded today",
        )
        cls_cmd.add_argument(
            "--now",
            required=True,
            help="Scan instant (ISO format with offset)",
        )
        cls_cmd.add_argument(
            "--schedule",
            type=parse_shift,
            help="Today's shift as START-END (e.g. 08:00-17:00)",
        )

        # daily-record command
        daily = subparsers.add_parser(
            "daily-record",
            help="Derive the attendance record for one day",
        )
        daily.add_argument("--punches", required=True, help="JSON punches file")
        daily.add_argument(
            "--date",
            type=parse_date_arg,
            required=True,
            help="Civil date (YYYY-MM-DD)",
        )
        daily.add_argument(
            "--schedule",
            type=parse_shift,
            help="Shift as START-END (e.g. 08:00-17:00)",
        )

        # payslip command
        payslip = subparsers.add_parser(
            "payslip",
            help="Compute the salary slip for a semi-monthly period",
        )
        payslip.add_argument("--employee", required=True, help="JSON employee file")
        payslip.add_argument("--punches", required=True, help="JSON punches file")
        payslip.add_argument(
            "--policy",
            help="JSON payroll policy file (defaults when omitted)",
        )
        payslip.add_argument("--year", type=int, required=True)
        payslip.add_argument("--month", type=int, required=True)
        payslip.add_argument(
            "--half",
            type=int,
            choices=[1, 2],
            required=True,
            help="1 for the 1st-15th, 2 for the 16th-end of month",
        )
        payslip.add_argument("--schedules", help="JSON schedules file")
        payslip.add_argument(
            "--engine-version",
            default="1.0.0",
            help="Engine version mixed into the calculation ID",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return EXIT_ERROR

        configure_logging(parsed.log_level)

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "classify": self._cmd_classify,
            "daily-record": self._cmd_daily_record,
            "payslip": self._cmd_payslip,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return EXIT_ERROR

        try:
            get_zone(parsed.tz)
            return handler(parsed)
        except ValidationError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_INVALID
        except (OSError, json.JSONDecodeError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_ERROR

    def _emit(self, data: dict[str, Any]) -> None:
        print(json.dumps(data, indent=2), file=self.out)

    def _schedule(self, args: argparse.Namespace, work_date: date) -> ShiftSchedule | None:
        if args.schedule is None:
            return None
        start, end = args.schedule
        return ShiftSchedule(employee_id="", work_date=work_date, start_time=start, end_time=end)

    def _cmd_classify(self, args: argparse.Namespace) -> int:
        """Classify the next scan."""
        now = parse_instant(args.now)
        today = civil_date(now, args.tz)
        punches = [p for p in load_punches(args.punches, args.tz) if p.work_date == today]

        punch_type = classify(punches, now, self._schedule(args, today), args.tz)
        self._emit({"work_date": today.isoformat(), "punch_type": punch_type.value})
        return EXIT_OK

    def _cmd_daily_record(self, args: argparse.Namespace) -> int:
        """Derive one day's record."""
        punches = load_punches(args.punches, args.tz)
        record = compute_daily_record(args.date, punches, self._schedule(args, args.date), args.tz)
        self._emit(record_to_dict(record))
        return EXIT_OK

    def _cmd_payslip(self, args: argparse.Namespace) -> int:
        """Compute a period's daily time record and salary slip."""
        employee = load_employee(args.employee)
        policy = load_policy(args.policy)
        period = PayPeriod.for_half(args.year, args.month, args.half)
        punches = load_punches(args.punches, args.tz)
        schedules = load_schedules(args.schedules) if args.schedules else []

        calculator = PayrollCalculator(policy, tz=args.tz, engine_version=args.engine_version)
        records, slip = calculator.salary_slip(employee, period, punches, schedules)

        self._emit(
            {
                "employee_name": employee.full_name,
                "calculation_id": str(calculator.calculation_id(slip)),
                "records": [record_to_dict(r) for r in records],
                "slip": slip.to_dict(),
            }
        )
        return EXIT_OK


def main() -> int:
    """CLI entry point."""
    cli = TimekeepingCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())

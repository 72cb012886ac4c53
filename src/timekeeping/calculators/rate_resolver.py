"""Daily rate resolution by position and branch."""

from __future__ import annotations

import logging
from decimal import Decimal

from timekeeping.calculators.types import (
    EmployeeProfile,
    PayrollPolicy,
    RateResolution,
    RateSource,
    rate_key,
)
from timekeeping.exceptions import TimekeepingError

logger = logging.getLogger(__name__)


class RateNotFoundError(TimekeepingError):
    """Raised by a strict resolver when no rate is configured."""

    def __init__(self, employee_id: str, key: str):
        self.employee_id = employee_id
        self.rate_key = key
        super().__init__(f"No daily rate configured for employee {employee_id} ({key})")


class RateResolver:
    """Resolves an employee's daily rate from the payroll policy.

    Rates are keyed by ``"<position>|<branch>"``. A missing key resolves to
    zero with source DEFAULTED and a logged warning, so a configuration gap
    zeroes pay instead of failing the run. Pass ``strict=True`` to raise
    RateNotFoundError instead.
    """

    def __init__(self, policy: PayrollPolicy, strict: bool = False):
        self.policy = policy
        self.strict = strict

    def resolve(self, employee: EmployeeProfile) -> RateResolution:
        """Resolve the daily rate for an employee."""
        return self.resolve_key(employee.position, employee.branch, employee.employee_id)

    def resolve_key(
        self,
        position: str,
        branch: str,
        employee_id: str | None = None,
    ) -> RateResolution:
        key = rate_key(position, branch)
        amount = self.policy.rates.get(key)

        if amount is not None:
            return RateResolution(rate_key=key, daily_rate=amount, source=RateSource.CONFIGURED)

        if self.strict:
            raise RateNotFoundError(employee_id or "?", key)

        logger.warning(
            "No daily rate configured for %s (employee %s); defaulting to 0",
            key,
            employee_id or "-",
        )
        return RateResolution(rate_key=key, daily_rate=Decimal("0"), source=RateSource.DEFAULTED)

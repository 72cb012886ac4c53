"""Payroll configuration model (single global row)."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from timekeeping.calculators.types import PayrollPolicy
from timekeeping.models.base import Base, TimestampMixin


class PayrollConfig(Base, TimestampMixin):
    """Admin-edited rates and pay rules."""

    __tablename__ = "payroll_config"

    config_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # "<position>|<branch>" -> daily rate, amounts stored as strings
    rates: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    grace_period_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    late_deduction_per_minute: Mapped[Decimal] = mapped_column(
        Numeric(12, 4), nullable=False, default=Decimal("5")
    )
    meal_allowance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("100")
    )
    birth_month_bonus: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("1000")
    )
    positions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    branches: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    meal_allowance_eligible_positions: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )

    def to_domain(self) -> PayrollPolicy:
        defaults = PayrollPolicy.defaults()
        return PayrollPolicy(
            rates={key: Decimal(str(amount)) for key, amount in (self.rates or {}).items()},
            grace_period_minutes=self.grace_period_minutes,
            late_deduction_per_minute=Decimal(str(self.late_deduction_per_minute)),
            meal_allowance=Decimal(str(self.meal_allowance)),
            birth_month_bonus=Decimal(str(self.birth_month_bonus)),
            positions=tuple(self.positions or defaults.positions),
            branches=tuple(self.branches or defaults.branches),
            meal_allowance_eligible_positions=tuple(self.meal_allowance_eligible_positions or ()),
        )

    def apply(self, policy: PayrollPolicy) -> None:
        """Overwrite this row with the values of ``policy``."""
        self.rates = {key: str(amount) for key, amount in policy.rates.items()}
        self.grace_period_minutes = policy.grace_period_minutes
        self.late_deduction_per_minute = policy.late_deduction_per_minute
        self.meal_allowance = policy.meal_allowance
        self.birth_month_bonus = policy.birth_month_bonus
        self.positions = list(policy.positions)
        self.branches = list(policy.branches)
        self.meal_allowance_eligible_positions = list(policy.meal_allowance_eligible_positions)

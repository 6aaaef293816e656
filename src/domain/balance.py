"""
Balance Module

Calculates the monthly hour bank and renders signed hour quantities.
"""

import math

from .entities import MonthlyBalance
from config.config_manager import WorkRules


def format_hours(hours: float) -> str:
    """
    Render signed fractional hours as zero-padded HH:MM.

    Minutes are truncated, not rounded: -1.5 -> "-01:30", -0.25 -> "-00:15".
    The product is rounded to six places before flooring so that values like
    6.1 do not lose a minute to binary representation.
    """
    sign = "-" if hours < 0 else ""
    total_minutes = int(math.floor(round(abs(hours) * 60, 6)))
    hh, mm = divmod(total_minutes, 60)
    return f"{sign}{hh:02d}:{mm:02d}"


class BalanceCalculator:
    """
    Calculates MonthlyBalance figures.

    Provides:
    - Expected monthly hours (standard day x standard working days)
    - Credits and debits against the expectation
    - Overtime balance and initial balance
    """

    def __init__(self, rules: WorkRules = None):
        """
        Initialize calculator.

        Args:
            rules: Working-time rules, defaults to 8h x 22 days
        """
        self.rules = rules or WorkRules()

    @property
    def expected_hours(self) -> float:
        return self.rules.expected_monthly_hours

    def calculate(self, total_hours: float, total_overtime: float) -> MonthlyBalance:
        """
        Calculate the hour bank for a month.

        Args:
            total_hours: Hours worked in the month
            total_overtime: Overtime accrued in the month

        Returns:
            MonthlyBalance where at most one of credits/debits is non-zero
        """
        difference = total_hours - self.expected_hours
        return MonthlyBalance(
            initial_balance=difference - total_overtime,
            overtime_balance=total_overtime,
            monthly_credits=max(difference, 0.0),
            monthly_debits=max(-difference, 0.0)
        )

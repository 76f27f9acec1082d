# finbro/summary.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple, TypeVar

from finbro.core.models import Category
from finbro.ledger import TransactionManager
from finbro.utils import check_month, month_name

logger = logging.getLogger(__name__)

K = TypeVar("K")

MAXIMUM_CATEGORIES_TO_DISPLAY = 3


def rank_totals(totals: Dict[K, Decimal], limit: Optional[int] = None) -> List[Tuple[K, Decimal]]:
    """Order ``totals`` by amount, largest first, for display.

    Ties keep the mapping's order. The ranking stops at the first zero
    amount, or once ``limit`` entries have been taken, whichever comes first.
    """
    ranked = []
    for key, amount in sorted(totals.items(), key=lambda kv: kv[1], reverse=True):
        if amount == 0:
            break
        ranked.append((key, amount))
        if limit is not None and len(ranked) >= limit:
            break
    return ranked


def total_savings(income: Decimal, expense: Decimal) -> Decimal:
    return income - expense


def remaining_budget(budget: Decimal, income: Decimal, expense: Decimal) -> Decimal:
    """Budget left once the month's net savings are taken off."""
    return budget - total_savings(income, expense)


@dataclass
class MonthlySummary:
    month: int
    year: int
    total_income: Decimal
    total_expense: Decimal
    budget: Optional[Decimal]
    top_categories: List[Tuple[Category, Decimal]] = field(default_factory=list)
    tags: List[Tuple[str, Decimal]] = field(default_factory=list)


@dataclass
class BudgetReport:
    month: int
    year: int
    budget: Optional[Decimal]
    total_income: Decimal
    total_expense: Decimal

    @property
    def remaining(self) -> Optional[Decimal]:
        if self.budget is None:
            return None
        return remaining_budget(self.budget, self.total_income, self.total_expense)


@dataclass
class SavingsReport:
    month: int
    year: int
    goal: Optional[Decimal]
    total_income: Decimal
    total_expense: Decimal

    @property
    def savings(self) -> Decimal:
        return total_savings(self.total_income, self.total_expense)

    @property
    def goal_met(self) -> Optional[bool]:
        if self.goal is None:
            return None
        return self.savings >= self.goal

    @property
    def shortfall(self) -> Optional[Decimal]:
        if self.goal is None:
            return None
        return max(self.goal - self.savings, Decimal("0"))


def build_summary(
    manager: TransactionManager,
    month: int,
    year: int,
    top_categories: int = MAXIMUM_CATEGORIES_TO_DISPLAY,
) -> MonthlySummary:
    month, year = check_month(month, year)
    logger.info("Building summary for %s %d", month_name(month), year)
    return MonthlySummary(
        month=month,
        year=year,
        total_income=manager.get_monthly_total_income(month, year),
        total_expense=manager.get_monthly_total_expense(month, year),
        budget=manager.get_budget(month, year),
        top_categories=rank_totals(
            manager.get_monthly_categorised_expenses(month, year), top_categories
        ),
        tags=rank_totals(manager.get_monthly_tagged_transactions(month, year)),
    )


def track_budget(manager: TransactionManager, month: int, year: int) -> BudgetReport:
    month, year = check_month(month, year)
    return BudgetReport(
        month=month,
        year=year,
        budget=manager.get_budget(month, year),
        total_income=manager.get_monthly_total_income(month, year),
        total_expense=manager.get_monthly_total_expense(month, year),
    )


def track_savings(manager: TransactionManager, month: int, year: int) -> SavingsReport:
    month, year = check_month(month, year)
    return SavingsReport(
        month=month,
        year=year,
        goal=manager.get_savings_goal(month, year),
        total_income=manager.get_monthly_total_income(month, year),
        total_expense=manager.get_monthly_total_expense(month, year),
    )


# -----------------------------------------------------------------------------
# Text rendering
# -----------------------------------------------------------------------------

def format_summary(summary: MonthlySummary, currency: str = "$") -> str:
    period = f"{month_name(summary.month)} {summary.year}"
    lines = [
        f"Financial Summary for {period}:",
        "",
        f"Total Income: {currency}{summary.total_income:.2f}",
        f"Total Expenses: {currency}{summary.total_expense:.2f}",
    ]
    if summary.top_categories:
        lines += ["", "Top Expense Categories:"]
        for i, (cat, amount) in enumerate(summary.top_categories, start=1):
            lines.append(f"{i}. {cat}: {currency}{amount:.2f}")

    lines.append("")
    if summary.budget is None:
        lines.append(f"No budget set for {period}")
    else:
        lines.append(f"Budget for {period}: {currency}{summary.budget:.2f}")

    if summary.tags:
        lines += ["", "Tags Summary:"]
        for i, (tag, amount) in enumerate(summary.tags, start=1):
            lines.append(f"{i}. {tag}: {currency}{amount:.2f}")
    return "\n".join(lines)


def format_budget(report: BudgetReport, currency: str = "$") -> str:
    period = f"{month_name(report.month)} {report.year}"
    if report.budget is None:
        return f"No budget set for {period}."
    return (
        f"Budget for {period}: {currency}{report.budget:.2f}\n\n"
        f"Your remaining budget for {period}: {currency}{report.remaining:.2f}"
    )


def format_savings(report: SavingsReport, currency: str = "$") -> str:
    period = f"{month_name(report.month)} {report.year}"
    if report.goal is None:
        return f"No savings goal set for {period}."
    lines = [
        f"Savings goal for {period}: {currency}{report.goal:.2f}",
        f"Total savings for {period}: {currency}{report.savings:.2f}",
    ]
    if report.goal_met:
        lines.append("Congratulations! You have met your savings goal.")
    else:
        lines.append(f"You are {currency}{report.shortfall:.2f} short of your savings goal.")
    return "\n".join(lines)

# finbro/ledger.py
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from finbro.budget import GoalStore
from finbro.core.categorizer import parse_category
from finbro.core.models import Category, Expense, Income, Transaction
from finbro.utils import filter_transactions_by_month, parse_date

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {"amount", "description", "date", "tags", "category"}


class TransactionIndexError(IndexError):
    """Raised when a 1-based transaction index falls outside the ledger."""


class LedgerIntegrityError(RuntimeError):
    """Raised when a monthly aggregate exceeds the totals it is drawn from."""


def _sum(transactions: Iterable[Transaction]) -> Decimal:
    return sum((tx.amount for tx in transactions), Decimal("0"))


class TransactionManager:
    """Ordered store of incomes and expenses with aggregate queries.

    Positions used by :meth:`get_transaction`, :meth:`edit_transaction` and
    :meth:`delete_transaction` are 1-based and follow insertion order.
    Monthly budgets and savings goals are kept alongside the transactions
    in two :class:`GoalStore` instances.
    """

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None) -> None:
        self._transactions: List[Transaction] = list(transactions or [])
        self.budgets = GoalStore("budget")
        self.savings_goals = GoalStore("savings goal")

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add_transaction(self, transaction: Transaction) -> Transaction:
        self._transactions.append(transaction)
        logger.debug("Added %s", transaction)
        return transaction

    def _check_index(self, index: int) -> int:
        if not 1 <= index <= len(self._transactions):
            raise TransactionIndexError(
                f"Index {index} is out of range, "
                f"expected a number between 1 and {len(self._transactions)}"
            )
        return index - 1

    def get_transaction(self, index: int) -> Transaction:
        return self._transactions[self._check_index(index)]

    def delete_transaction(self, start: int, end: Optional[int] = None) -> List[Transaction]:
        """Remove the transaction at ``start``, or the inclusive range ``start..end``.

        Both bounds are validated before anything is removed, so a failed
        call leaves the ledger untouched. Returns the removed transactions.
        """
        end = start if end is None else end
        first = self._check_index(start)
        last = self._check_index(end)
        if first > last:
            raise ValueError(f"Invalid range {start}-{end}: start must not exceed end")
        removed = self._transactions[first:last + 1]
        del self._transactions[first:last + 1]
        logger.info("Deleted %d transaction(s) at %d-%d", len(removed), start, end)
        return removed

    def edit_transaction(self, index: int, **changes) -> Transaction:
        """Replace fields on the transaction at ``index`` and return the new record."""
        pos = self._check_index(index)
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")
        current = self._transactions[pos]
        updates = {k: v for k, v in changes.items() if v is not None}
        if "category" in updates:
            if not isinstance(current, Expense):
                raise ValueError("Only expenses have a category")
            updates["category"] = parse_category(updates["category"])
        if "date" in updates:
            updates["date"] = parse_date(updates["date"])
        if "tags" in updates:
            updates["tags"] = list(updates["tags"])
        edited = replace(current, **updates)
        self._transactions[pos] = edited
        logger.info("Edited transaction %d: %s", index, edited)
        return edited

    def clear_transactions(self) -> None:
        self._transactions.clear()
        logger.info("Cleared all transactions")

    def clear_all(self) -> None:
        self.clear_transactions()
        self.budgets.clear()
        self.savings_goals.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def transactions(self) -> List[Transaction]:
        return list(self._transactions)

    def list_transactions(self, limit: Optional[int] = None) -> List[Transaction]:
        """Transactions with the most recent date first.

        Python's sort is stable, so transactions sharing a date keep the
        order they were added in.
        """
        ordered = sorted(self._transactions, key=lambda tx: tx.date, reverse=True)
        if limit is not None:
            ordered = ordered[:max(limit, 0)]
        return ordered

    def get_filtered_transactions(self, start_date: date, end_date: date) -> List[Transaction]:
        start_date, end_date = parse_date(start_date), parse_date(end_date)
        return [tx for tx in self._transactions if start_date <= tx.date <= end_date]

    def search(self, keyword: str) -> List[Transaction]:
        needle = keyword.lower()
        return [tx for tx in self._transactions if needle in tx.description.lower()]

    def get_total_income(self) -> Decimal:
        return _sum(tx for tx in self._transactions if isinstance(tx, Income))

    def get_total_expenses(self) -> Decimal:
        return _sum(tx for tx in self._transactions if isinstance(tx, Expense))

    def get_balance(self) -> Decimal:
        return self.get_total_income() - self.get_total_expenses()

    def get_transaction_count(self) -> int:
        return len(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    # ------------------------------------------------------------------
    # Monthly aggregation
    # ------------------------------------------------------------------
    def _month(self, month: int, year: int) -> List[Transaction]:
        return filter_transactions_by_month(self._transactions, month, year)

    def get_monthly_total_income(self, month: int, year: int) -> Decimal:
        return _sum(tx for tx in self._month(month, year) if isinstance(tx, Income))

    def get_monthly_total_expense(self, month: int, year: int) -> Decimal:
        return _sum(tx for tx in self._month(month, year) if isinstance(tx, Expense))

    def get_monthly_categorised_expenses(self, month: int, year: int) -> Dict[Category, Decimal]:
        totals: Dict[Category, Decimal] = {}
        for tx in self._month(month, year):
            if isinstance(tx, Expense):
                totals[tx.category] = totals.get(tx.category, Decimal("0")) + tx.amount

        ceiling = self.get_monthly_total_expense(month, year)
        for category, amount in totals.items():
            if amount > ceiling:
                raise LedgerIntegrityError(
                    f"{category} total {amount} exceeds monthly expenses {ceiling}"
                )
        return totals

    def get_monthly_tagged_transactions(self, month: int, year: int) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = {}
        for tx in self._month(month, year):
            for tag in dict.fromkeys(tx.tags):
                totals[tag] = totals.get(tag, Decimal("0")) + tx.amount

        ceiling = self.get_monthly_total_income(month, year) + self.get_monthly_total_expense(month, year)
        for tag, amount in totals.items():
            if amount > ceiling:
                raise LedgerIntegrityError(
                    f"Tag '{tag}' total {amount} exceeds monthly transactions {ceiling}"
                )
        return totals

    # ------------------------------------------------------------------
    # Budgets and savings goals
    # ------------------------------------------------------------------
    def set_budget(self, month: int, year: int, amount) -> Decimal:
        return self.budgets.set(month, year, amount)

    def get_budget(self, month: int, year: int) -> Optional[Decimal]:
        return self.budgets.get(month, year)

    def set_savings_goal(self, month: int, year: int, amount) -> Decimal:
        return self.savings_goals.set(month, year, amount)

    def get_savings_goal(self, month: int, year: int) -> Optional[Decimal]:
        return self.savings_goals.get(month, year)

# finbro/core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import List


class Category(Enum):
    FOOD = "Food"
    TRANSPORT = "Transport"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    ENTERTAINMENT = "Entertainment"
    OTHERS = "Others"

    def __str__(self):
        return self.value


def to_amount(value) -> Decimal:
    """Convert ``value`` to a Decimal without picking up float noise."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def check_amount(value) -> Decimal:
    """Like ``to_amount`` but also rejects negative, NaN and infinite values."""
    amount = to_amount(value)
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Amount must be a non-negative number, got {value!r}")
    return amount


@dataclass(frozen=True)
class Transaction:
    amount: Decimal
    description: str
    date: date = field(default_factory=date.today)
    tags: List[str] = field(default_factory=list)

    kind = "transaction"

    def __post_init__(self):
        amount = check_amount(self.amount)
        description = str(self.description or "").strip()
        if not description:
            raise ValueError("Description cannot be empty")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "description", description)
        object.__setattr__(self, "tags", [str(t) for t in (self.tags or [])])
        if self.date is None:
            object.__setattr__(self, "date", date.today())

    def _tag_suffix(self):
        return f" [{', '.join(self.tags)}]" if self.tags else ""

    def describe(self, currency="$"):
        raise NotImplementedError

    def __str__(self):
        return self.describe()


@dataclass(frozen=True)
class Income(Transaction):
    kind = "income"

    def describe(self, currency="$"):
        return f"[Income] {currency}{self.amount:.2f} - {self.description}{self._tag_suffix()}"


@dataclass(frozen=True)
class Expense(Transaction):
    category: Category = Category.OTHERS

    kind = "expense"

    def __post_init__(self):
        super().__post_init__()
        if self.category is None:
            object.__setattr__(self, "category", Category.OTHERS)

    def describe(self, currency="$"):
        return (
            f"[Expense][{self.category}] {currency}{self.amount:.2f} - "
            f"{self.description}{self._tag_suffix()}"
        )

from datetime import date

import pytest

from finbro.core.models import Category, Expense, Income
from finbro.ledger import TransactionManager


@pytest.fixture
def manager():
    return TransactionManager()


@pytest.fixture
def april_manager():
    """Ledger with a spread of April 2025 transactions plus some noise in other months."""
    m = TransactionManager()
    m.add_transaction(Income(amount="4000", description="Salary", date=date(2025, 4, 1), tags=["Work"]))
    m.add_transaction(Expense(amount="25.50", description="Lunch", date=date(2025, 4, 1),
                              category=Category.FOOD, tags=["Work"]))
    m.add_transaction(Expense(amount="120", description="Electricity bill", date=date(2025, 4, 5),
                              category=Category.BILLS))
    m.add_transaction(Expense(amount="60", description="Groceries", date=date(2025, 4, 12),
                              category=Category.FOOD, tags=["Home"]))
    m.add_transaction(Expense(amount="221.99", description="Concert tickets", date=date(2025, 4, 20),
                              category=Category.ENTERTAINMENT, tags=["Fun"]))
    m.add_transaction(Income(amount="700.50", description="Freelance job", date=date(2025, 4, 28)))
    m.add_transaction(Expense(amount="999", description="Laptop", date=date(2025, 3, 31),
                              category=Category.SHOPPING, tags=["Work"]))
    m.add_transaction(Income(amount="50", description="Refund", date=date(2024, 4, 15)))
    return m

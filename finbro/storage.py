# finbro/storage.py
import csv
import logging
import os

from finbro.core.categorizer import parse_category
from finbro.core.models import Expense, Income
from finbro.ledger import TransactionManager
from finbro.utils import parse_date

logger = logging.getLogger(__name__)

TRANSACTION_FIELDS = ['type', 'date', 'amount', 'description', 'category', 'tags']
GOAL_FIELDS = ['kind', 'month', 'year', 'amount']
TAG_SEPARATOR = '|'


class Storage:
    """
    Flat-file persistence for a TransactionManager: one CSV of transactions
    in ledger order and one CSV of monthly budgets and savings goals.
    """
    def __init__(self, data_dir):
        self.data_dir = data_dir
        self.transactions_path = os.path.join(data_dir, 'transactions.csv')
        self.goals_path = os.path.join(data_dir, 'goals.csv')

    def load(self):
        manager = TransactionManager()
        for tx in self._read_transactions():
            manager.add_transaction(tx)
        for line_no, kind, month, year, amount in self._read_goals():
            store = manager.budgets if kind == 'budget' else manager.savings_goals
            try:
                store.set(month, year, amount)
            except ValueError as e:
                logger.warning(
                    "Skipping corrupted line %d in %s: %s", line_no, self.goals_path, e
                )
        logger.info(
            "Loaded %d transaction(s) from %s", len(manager), self.transactions_path
        )
        return manager

    def save(self, manager):
        os.makedirs(self.data_dir, exist_ok=True)

        with open(self.transactions_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(TRANSACTION_FIELDS)
            for tx in manager.transactions:
                writer.writerow([
                    tx.kind,
                    tx.date.isoformat(),
                    f"{tx.amount:.2f}",
                    tx.description,
                    str(tx.category) if isinstance(tx, Expense) else '',
                    TAG_SEPARATOR.join(tx.tags),
                ])

        with open(self.goals_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(GOAL_FIELDS)
            for kind, store in (('budget', manager.budgets), ('savings', manager.savings_goals)):
                for (month, year), amount in store.items():
                    writer.writerow([kind, month, year, f"{amount:.2f}"])

        logger.debug("Saved %d transaction(s) to %s", len(manager), self.transactions_path)

    def _read_rows(self, path):
        if not os.path.exists(path):
            return
        with open(path, newline='', encoding='utf-8') as f:
            for line_no, row in enumerate(csv.DictReader(f), start=2):
                yield line_no, row

    def _read_transactions(self):
        for line_no, row in self._read_rows(self.transactions_path):
            try:
                yield _row_to_transaction(row)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(
                    "Skipping corrupted line %d in %s: %s", line_no, self.transactions_path, e
                )

    def _read_goals(self):
        for line_no, row in self._read_rows(self.goals_path):
            try:
                kind = row['kind'].strip().lower()
                if kind not in ('budget', 'savings'):
                    raise ValueError(f"unknown goal kind '{kind}'")
                yield line_no, kind, int(row['month']), int(row['year']), row['amount']
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(
                    "Skipping corrupted line %d in %s: %s", line_no, self.goals_path, e
                )


def _row_to_transaction(row):
    kind = (row['type'] or '').strip().lower()
    tags = [t for t in (row.get('tags') or '').split(TAG_SEPARATOR) if t]
    fields = dict(
        amount=row['amount'],
        description=row['description'],
        date=parse_date(row['date'] or ''),
        tags=tags,
    )
    if kind == 'income':
        return Income(**fields)
    if kind == 'expense':
        return Expense(category=parse_category(row.get('category')), **fields)
    raise ValueError(f"unknown transaction type '{kind}'")

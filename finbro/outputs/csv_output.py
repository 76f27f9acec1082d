# finbro/outputs/csv_output.py

import os
import csv
from finbro.core.models import Expense
from finbro.outputs.base import BaseOutput


class CSVOutput(BaseOutput):
    """
    Writes all transactions to finbro_export.csv in the export directory,
    sorted by date (oldest to latest).
    """
    filename = 'finbro_export.csv'

    def __init__(self, config):
        self.config     = config
        self.output_dir = config.get('export_dir', 'data/exports')
        os.makedirs(self.output_dir, exist_ok=True)

    def write(self, transactions):
        out_path = os.path.join(self.output_dir, self.filename)
        rows = sorted(transactions, key=lambda t: t.date)

        with open(out_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['date', 'type', 'description', 'category', 'tags', 'amount'])
            for tx in rows:
                writer.writerow([
                    tx.date.isoformat(),
                    tx.kind.capitalize(),
                    tx.description,
                    str(tx.category) if isinstance(tx, Expense) else '',
                    ', '.join(tx.tags),
                    f"{tx.amount:.2f}",
                ])

        return out_path

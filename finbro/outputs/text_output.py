# finbro/outputs/text_output.py

import os
from decimal import Decimal
from finbro.core.models import Income
from finbro.outputs.base import BaseOutput


class TextOutput(BaseOutput):
    """Write a plain-text report with one section per month."""

    filename = 'finbro_export.txt'

    def __init__(self, config):
        self.config = config
        self.currency = config.get('currency', '$')
        self.output_dir = config.get('export_dir', 'data/exports')
        os.makedirs(self.output_dir, exist_ok=True)

    def write(self, transactions):
        txs = sorted(transactions, key=lambda t: t.date)

        # Organize by month
        months = {}
        for tx in txs:
            months.setdefault(tx.date.strftime('%Y-%m'), []).append(tx)

        lines = ["FinBro Transactions", "=" * 19, ""]
        if not txs:
            lines.append("No transactions recorded.")

        for key in sorted(months):
            tx_list = months[key]
            title = tx_list[0].date.strftime('%B %Y')
            lines += [title, "-" * len(title)]
            income = Decimal("0")
            expense = Decimal("0")
            for tx in tx_list:
                lines.append(f"{tx.date.isoformat()}  {tx.describe(self.currency)}")
                if isinstance(tx, Income):
                    income += tx.amount
                else:
                    expense += tx.amount
            lines.append(f"Income: {self.currency}{income:.2f}  Expenses: {self.currency}{expense:.2f}")
            lines.append("")

        out_path = os.path.join(self.output_dir, self.filename)
        with open(out_path, 'w', encoding='utf-8') as f:
            f.write("\n".join(lines) + "\n")

        return out_path

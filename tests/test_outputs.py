import csv

import pytest

from finbro.config import DEFAULT_CONFIG
from finbro.outputs import get_output
from finbro.outputs.csv_output import CSVOutput
from finbro.outputs.text_output import TextOutput


def _config(tmp_path):
    return dict(DEFAULT_CONFIG, export_dir=str(tmp_path / "exports"))


def test_get_output_resolves_configured_classes(tmp_path):
    assert isinstance(get_output("csv", _config(tmp_path)), CSVOutput)
    assert isinstance(get_output("txt", _config(tmp_path)), TextOutput)
    with pytest.raises(ValueError):
        get_output("pdf", _config(tmp_path))


def test_csv_export_sorted_oldest_first(tmp_path, april_manager):
    path = CSVOutput(_config(tmp_path)).write(april_manager.list_transactions())

    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["date", "type", "description", "category", "tags", "amount"]
    assert len(rows) == 1 + len(april_manager)
    assert [r[0] for r in rows[1:]] == sorted(r[0] for r in rows[1:])
    assert rows[1] == ["2024-04-15", "Income", "Refund", "", "", "50.00"]
    assert ["2025-04-01", "Expense", "Lunch", "Food", "Work", "25.50"] in rows


def test_text_export_groups_by_month(tmp_path, april_manager):
    path = TextOutput(_config(tmp_path)).write(april_manager.transactions)

    text = open(path, encoding="utf-8").read()
    assert text.index("April 2024") < text.index("March 2025") < text.index("April 2025")
    assert "2025-04-01  [Expense][Food] $25.50 - Lunch [Work]" in text
    assert "Income: $4700.50  Expenses: $427.49" in text


def test_text_export_with_no_transactions(tmp_path):
    path = TextOutput(_config(tmp_path)).write([])
    assert "No transactions recorded." in open(path, encoding="utf-8").read()


def test_text_export_uses_configured_currency(tmp_path, april_manager):
    config = dict(_config(tmp_path), currency="€")
    text = open(TextOutput(config).write(april_manager.transactions), encoding="utf-8").read()
    assert "2025-04-01  [Expense][Food] €25.50 - Lunch [Work]" in text
    assert "$" not in text

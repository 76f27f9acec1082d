# finbro/utils.py
import calendar
from datetime import date, datetime


def check_month(month, year):
    if not 1 <= int(month) <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return int(month), int(year)


def filter_transactions_by_month(transactions, month, year):
    """
    Return only those transactions whose date falls in the given month/year.
    """
    month, year = check_month(month, year)
    return [tx for tx in transactions if tx.date.year == year and tx.date.month == month]


def month_name(month):
    return calendar.month_name[month]


def parse_date(value):
    if isinstance(value, datetime):
        return value.date()
    if value is None or isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc

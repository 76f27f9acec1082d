from datetime import date
from decimal import Decimal

from finbro.core.models import Category, Expense
from finbro.summary import (
    build_summary,
    format_budget,
    format_savings,
    format_summary,
    rank_totals,
    remaining_budget,
    track_budget,
    track_savings,
)


def test_rank_totals_orders_and_limits():
    totals = {"a": Decimal("5"), "b": Decimal("20"), "c": Decimal("10"), "d": Decimal("1")}
    assert rank_totals(totals, 3) == [("b", Decimal("20")), ("c", Decimal("10")), ("a", Decimal("5"))]
    assert [k for k, _ in rank_totals(totals)] == ["b", "c", "a", "d"]


def test_rank_totals_stops_at_first_zero():
    totals = {"a": Decimal("0"), "b": Decimal("12"), "c": Decimal("0")}
    assert rank_totals(totals, 3) == [("b", Decimal("12"))]
    assert rank_totals({"a": Decimal("0")}, 3) == []
    assert rank_totals({}) == []


def test_rank_totals_keeps_mapping_order_on_ties():
    totals = {"x": Decimal("3"), "y": Decimal("7"), "z": Decimal("3")}
    assert [k for k, _ in rank_totals(totals)] == ["y", "x", "z"]


def test_summary_for_april(april_manager):
    april_manager.set_budget(4, 2025, "1500")
    summary = build_summary(april_manager, 4, 2025)

    assert summary.total_income == Decimal("4700.50")
    assert summary.total_expense == Decimal("427.49")
    assert summary.top_categories == [
        (Category.ENTERTAINMENT, Decimal("221.99")),
        (Category.BILLS, Decimal("120")),
        (Category.FOOD, Decimal("85.50")),
    ]
    assert [tag for tag, _ in summary.tags] == ["Work", "Fun", "Home"]

    assert format_summary(summary) == "\n".join([
        "Financial Summary for April 2025:",
        "",
        "Total Income: $4700.50",
        "Total Expenses: $427.49",
        "",
        "Top Expense Categories:",
        "1. Entertainment: $221.99",
        "2. Bills: $120.00",
        "3. Food: $85.50",
        "",
        "Budget for April 2025: $1500.00",
        "",
        "Tags Summary:",
        "1. Work: $4025.50",
        "2. Fun: $221.99",
        "3. Home: $60.00",
    ])


def test_summary_top_categories_cutoff(manager):
    manager.add_transaction(Expense(amount=40, description="Taxi", date=date(2025, 6, 1), category=Category.TRANSPORT))
    manager.add_transaction(Expense(amount=0, description="Free sample", date=date(2025, 6, 2), category=Category.FOOD))
    summary = build_summary(manager, 6, 2025)
    assert summary.top_categories == [(Category.TRANSPORT, Decimal("40"))]
    assert summary.tags == []


def test_empty_month_summary_text(manager):
    text = format_summary(build_summary(manager, 2, 2025))
    assert "Top Expense Categories" not in text
    assert "Tags Summary" not in text
    assert "No budget set for February 2025" in text


def test_remaining_budget_uses_net_savings(april_manager):
    april_manager.set_budget(4, 2025, 1500.0)
    report = track_budget(april_manager, 4, 2025)
    assert report.remaining == Decimal("-2773.01")
    assert remaining_budget(Decimal("1500.0"), Decimal("4700.50"), Decimal("427.49")) == Decimal("-2773.01")
    assert format_budget(report) == (
        "Budget for April 2025: $1500.00\n\n"
        "Your remaining budget for April 2025: $-2773.01"
    )


def test_unset_budget_is_distinct_from_zero(april_manager):
    assert april_manager.get_budget(5, 2025) is None
    april_manager.set_budget(6, 2025, 0)
    assert april_manager.get_budget(6, 2025) == Decimal("0")
    assert track_budget(april_manager, 5, 2025).remaining is None
    assert format_budget(track_budget(april_manager, 5, 2025)) == "No budget set for May 2025."


def test_budget_last_write_wins(manager):
    manager.set_budget(4, 2025, 100)
    manager.set_budget(4, 2025, 250)
    assert manager.get_budget(4, 2025) == Decimal("250")


def test_savings_goal_met_and_missed(april_manager):
    april_manager.set_savings_goal(4, 2025, 4000)
    report = track_savings(april_manager, 4, 2025)
    assert report.savings == Decimal("4273.01")
    assert report.goal_met is True
    assert report.shortfall == 0

    april_manager.set_savings_goal(4, 2025, "4300")
    report = track_savings(april_manager, 4, 2025)
    assert report.goal_met is False
    assert report.shortfall == Decimal("26.99")
    assert "You are $26.99 short of your savings goal." in format_savings(report)


def test_savings_goal_exactly_met(april_manager):
    april_manager.set_savings_goal(4, 2025, "4273.01")
    assert track_savings(april_manager, 4, 2025).goal_met is True


def test_unset_savings_goal(manager):
    report = track_savings(manager, 7, 2025)
    assert report.goal is None
    assert report.goal_met is None
    assert format_savings(report) == "No savings goal set for July 2025."

import json
import logging

import pytest

from report import analyze_financial_data
from transactions import Transaction, load_expenses, load_income

REPORT_KEYS = {
    "generated_at",
    "overview",
    "spending_patterns",
    "income_analysis",
    "category_insights",
    "trends",
    "recommendations",
    "financial_health",
    "budget_suggestions",
    "anomalies",
    "spending_velocity",
    "forecast",
    "comparative_analysis",
    "behavior_patterns",
}


def _sample_records() -> tuple[list[dict], list[dict]]:
    expenses = []
    for month in ("01", "02", "03"):
        expenses.extend(
            [
                {"amount": 1200.0, "category": "Bills & Utilities", "date": f"2024-{month}-01"},
                {"amount": 45.5, "category": "Food & Dining", "date": f"2024-{month}-06"},
                {"amount": 32.0, "category": "Food & Dining", "date": f"2024-{month}-13"},
                {"amount": 60.0, "category": "Transportation", "date": f"2024-{month}-15"},
                {"amount": 25.0, "category": "Shopping", "date": f"2024-{month}-20"},
            ]
        )
    expenses.append({"amount": 25.0, "category": "Shopping", "date": "2024-03-20"})
    income = [
        {"amount": 3000.0, "source": "Salary", "date": "2024-01-31", "currency": "USD"},
        {"amount": 3000.0, "source": "Salary", "date": "2024-02-29", "currency": "USD"},
        {"amount": 3100.0, "source": "Salary", "date": "2024-03-31", "currency": "USD"},
        {"amount": 400.0, "source": "Freelance", "date": "2024-03-15"},
    ]
    return expenses, income


def test_analyze_financial_data_contains_every_section() -> None:
    expenses, income = _sample_records()
    report = analyze_financial_data(expenses, income, now="2024-03-31")

    assert set(report) == REPORT_KEYS
    assert report["generated_at"] == "2024-03-31"
    assert report["overview"]["expense_count"] == 16
    assert report["overview"]["net_savings"] == pytest.approx(
        report["overview"]["total_income"] - report["overview"]["total_expenses"]
    )
    assert report["anomalies"]["available"] is True
    assert report["forecast"]["available"] is True
    assert report["spending_velocity"]["available"] is True
    assert report["behavior_patterns"] is not None
    assert report["budget_suggestions"] is not None
    assert 0 <= report["financial_health"]["score"] <= 100


def test_analyze_financial_data_finds_duplicate_and_recurring_bill() -> None:
    expenses, income = _sample_records()
    report = analyze_financial_data(expenses, income, now="2024-03-31")

    duplicates = [a for a in report["anomalies"]["anomalies"] if a["type"] == "potential_duplicate"]
    assert len(duplicates) == 1
    assert duplicates[0]["count"] == 2
    recurring = report["behavior_patterns"]["recurring_expenses"]
    assert recurring[0]["category"] == "Bills & Utilities"
    assert recurring[0]["amount"] == 1200
    assert recurring[0]["frequency"] == "monthly"


def test_analyze_financial_data_is_idempotent_and_json_ready() -> None:
    expenses, income = _sample_records()
    first = analyze_financial_data(expenses, income, now="2024-03-31")
    second = analyze_financial_data(expenses, income, now="2024-03-31")

    assert first == second
    assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)


def test_analyze_financial_data_accepts_frames_and_transactions() -> None:
    expenses, income = _sample_records()
    from_frames = analyze_financial_data(load_expenses(expenses), load_income(income), now="2024-03-31")
    from_records = analyze_financial_data(expenses, income, now="2024-03-31")
    from_objects = analyze_financial_data(
        [Transaction(e["amount"], e["category"], e["date"]) for e in expenses],
        income,
        now="2024-03-31",
    )

    assert from_frames == from_records
    assert from_objects == from_records


def test_analyze_financial_data_empty_inputs_degrade_gracefully() -> None:
    report = analyze_financial_data([], [], now="2024-03-31")

    assert report["overview"]["savings_rate"] == 0.0
    assert report["spending_patterns"] is None
    assert report["income_analysis"] is None
    assert report["anomalies"]["anomalies"] == []
    assert report["spending_velocity"]["available"] is False
    assert report["forecast"]["available"] is False
    assert report["behavior_patterns"] is None
    assert report["budget_suggestions"] is None
    assert report["comparative_analysis"]["category_comparisons"] == []
    json.dumps(report)


def test_analyze_financial_data_logs_run(caplog) -> None:
    expenses, income = _sample_records()
    with caplog.at_level(logging.INFO, logger="report"):
        analyze_financial_data(expenses[:3], income[:1], now="2024-03-31")

    assert "Analyzing 3 expense(s) and 1 income record(s)" in caplog.text


def test_analyze_financial_data_adds_goal_section() -> None:
    expenses, income = _sample_records()
    goal = {"target_amount": 20000, "current_amount": 5000, "deadline": "2024-06-30", "category": "wedding"}
    report = analyze_financial_data(expenses, income, now="2024-03-31", goal=goal)

    assert set(report) == REPORT_KEYS | {"goal_recommendations"}
    section = report["goal_recommendations"]
    assert section["timeline"]["months_until_deadline"] == 4
    assert section["warnings"][0]["message"] == "on_track"
    assert section["financial"]["monthly_savings"] == pytest.approx(report["overview"]["net_savings"])
    json.dumps(report)

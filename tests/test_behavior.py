import pytest

from behavior import analyze_behavior_patterns, detect_anomalies, detect_recurring_expenses
from transactions import load_expenses


def _expense(amount: float, category: str, date: str) -> dict:
    return {"amount": amount, "category": category, "date": date}


def _daily(amounts: list[float], category: str, start_day: int = 1) -> list[dict]:
    return [
        _expense(amount, category, f"2024-01-{start_day + idx:02d}")
        for idx, amount in enumerate(amounts)
    ]


def test_detect_anomalies_needs_ten_expenses() -> None:
    result = detect_anomalies(load_expenses(_daily([10.0] * 9, "Food & Dining")))

    assert result["available"] is False
    assert result["anomalies"] == []
    assert result["summary"] == "Insufficient data for anomaly detection"


def test_detect_anomalies_flags_high_outlier() -> None:
    expenses = load_expenses(_daily([10.0] * 11 + [100.0], "Food & Dining"))
    result = detect_anomalies(expenses)

    assert result["available"] is True
    assert len(result["anomalies"]) == 1
    anomaly = result["anomalies"][0]
    assert anomaly["type"] == "unusually_high"
    assert anomaly["severity"] == "high"
    assert anomaly["amount"] == 100.0
    assert anomaly["date"] == "2024-01-12"
    assert anomaly["deviation"] == pytest.approx((100.0 - 17.5) / 17.5 * 100.0)
    assert result["summary"] == "Found 1 anomalies requiring attention"


def test_detect_anomalies_medium_severity_and_constant_group() -> None:
    rows = _daily([10.0] * 5 + [40.0], "Food & Dining") + _daily([20.0] * 4, "Transportation", start_day=10)
    result = detect_anomalies(load_expenses(rows))

    assert len(result["anomalies"]) == 1
    anomaly = result["anomalies"][0]
    assert anomaly["severity"] == "medium"
    assert anomaly["category"] == "Food & Dining"
    assert anomaly["description"] == "Food & Dining expense of $40.00 is 167% higher than average ($15.00)"


def test_detect_anomalies_reports_duplicate_once() -> None:
    rows = [
        _expense(25.0, "Food", "2024-01-05"),
        _expense(25.0, "Food", "2024-01-05"),
    ] + _daily([20.0, 21.0, 22.0, 23.0, 24.0, 25.0, 26.0, 27.0], "Transportation", start_day=10)
    result = detect_anomalies(load_expenses(rows))

    duplicates = [a for a in result["anomalies"] if a["type"] == "potential_duplicate"]
    assert len(result["anomalies"]) == 1
    assert len(duplicates) == 1
    assert duplicates[0]["count"] == 2
    assert duplicates[0]["category"] == "Food"
    assert duplicates[0]["severity"] == "medium"
    assert duplicates[0]["date"] == "2024-01-05"


def test_detect_anomalies_sorted_by_severity() -> None:
    rows = (
        [_expense(5.0, "Shopping", "2024-02-01"), _expense(5.0, "Shopping", "2024-02-01")]
        + _daily([10.0] * 11 + [100.0], "Food & Dining")
    )
    result = detect_anomalies(load_expenses(rows))

    assert [a["severity"] for a in result["anomalies"]] == ["high", "medium"]
    assert result["anomalies"][1]["type"] == "potential_duplicate"


def test_detect_anomalies_no_findings_summary() -> None:
    result = detect_anomalies(load_expenses(_daily([10.0] * 10, "Food & Dining")))

    assert result["available"] is True
    assert result["anomalies"] == []
    assert result["summary"] == "No significant anomalies detected"


def test_detect_recurring_expenses_biweekly_bill() -> None:
    expenses = load_expenses(
        [
            _expense(50.0, "Bills & Utilities", "2024-01-01"),
            _expense(50.0, "Bills & Utilities", "2024-01-15"),
            _expense(50.0, "Bills & Utilities", "2024-01-29"),
            _expense(50.0, "Bills & Utilities", "2024-02-12"),
            _expense(12.0, "Food & Dining", "2024-01-03"),
            _expense(80.0, "Shopping", "2024-02-20"),
        ]
    )
    recurring = detect_recurring_expenses(expenses)

    assert len(recurring) == 1
    item = recurring[0]
    assert item["classification"] == "recurring"
    assert item["category"] == "Bills & Utilities"
    assert item["amount"] == 50
    assert item["frequency"] == "bi-weekly"
    assert item["consistency"] == "very_high"
    assert item["avg_days_between"] == 14
    assert item["occurrences"] == 4


def test_detect_recurring_expenses_rounds_half_up_and_sorts() -> None:
    expenses = load_expenses(
        [
            _expense(10.5, "Entertainment", "2024-01-01"),
            _expense(10.6, "Entertainment", "2024-01-08"),
            _expense(10.9, "Entertainment", "2024-01-15"),
            _expense(900.0, "Bills & Utilities", "2024-01-01"),
            _expense(900.0, "Bills & Utilities", "2024-01-31"),
            _expense(900.0, "Bills & Utilities", "2024-03-01"),
        ]
    )
    recurring = detect_recurring_expenses(expenses)

    assert [item["amount"] for item in recurring] == [900, 11]
    assert recurring[0]["frequency"] == "monthly"
    assert recurring[1]["frequency"] == "weekly"
    assert recurring[1]["occurrences"] == 3


def test_detect_recurring_expenses_ignores_irregular_and_same_day() -> None:
    expenses = load_expenses(
        [
            _expense(30.0, "Shopping", "2024-01-01"),
            _expense(30.0, "Shopping", "2024-01-03"),
            _expense(30.0, "Shopping", "2024-02-20"),
            _expense(15.0, "Food & Dining", "2024-01-05"),
            _expense(15.0, "Food & Dining", "2024-01-05"),
        ]
    )

    assert detect_recurring_expenses(expenses) == []


def test_analyze_behavior_patterns_requires_ten_expenses() -> None:
    assert analyze_behavior_patterns(load_expenses(_daily([10.0] * 9, "Food & Dining"))) is None


def test_analyze_behavior_patterns_weekend_impulse_and_large() -> None:
    # 2024-01-01 is a Monday.
    rows = [
        _expense(10.0, "Food & Dining", "2024-01-01"),
        _expense(10.0, "Food & Dining", "2024-01-02"),
        _expense(10.0, "Food & Dining", "2024-01-03"),
        _expense(10.0, "Food & Dining", "2024-01-04"),
        _expense(10.0, "Food & Dining", "2024-01-05"),
        _expense(30.0, "Shopping", "2024-01-06"),
        _expense(20.0, "Entertainment", "2024-01-07"),
        _expense(10.0, "Food & Dining", "2024-01-08"),
        _expense(10.0, "Food & Dining", "2024-01-09"),
        _expense(400.0, "Shopping", "2024-01-13"),
    ]
    patterns = analyze_behavior_patterns(load_expenses(rows))

    assert patterns["day_of_week_patterns"][0]["day"] == "Saturday"
    assert patterns["day_of_week_patterns"][0]["average_spending"] == 215.0
    assert patterns["day_of_week_patterns"][0]["total_transactions"] == 2

    split = patterns["weekday_vs_weekend"]
    assert split["weekday"] == {"total": 70.0, "average": 10.0, "count": 7}
    assert split["weekend"]["total"] == 450.0
    assert split["weekend"]["count"] == 3
    assert split["preference"] == "weekend_spender"

    impulse = patterns["impulse_buying"]
    assert impulse["count"] == 2
    assert impulse["total"] == 50.0
    assert impulse["percentage"] == pytest.approx(20.0)
    assert impulse["insight"] == "Impulse buying is under control"

    large = patterns["large_purchases"]
    assert large["count"] == 1
    assert large["average"] == 400.0
    assert large["categories"] == ["Shopping"]
    assert isinstance(patterns["recurring_expenses"], list)


def test_analyze_behavior_patterns_flags_frequent_small_purchases() -> None:
    rows = _daily([20.0] * 4, "Shopping") + _daily([15.0] * 6, "Transportation", start_day=10)
    patterns = analyze_behavior_patterns(load_expenses(rows))

    assert patterns["impulse_buying"]["count"] == 4
    assert patterns["impulse_buying"]["insight"].startswith("High frequency of small purchases")
    assert patterns["large_purchases"] == {"count": 0, "total": 0.0, "average": 0.0, "categories": []}

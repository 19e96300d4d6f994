"""Anomaly detection and spending behavior mining over expense frames."""

from __future__ import annotations

import math

import pandas as pd

from categories import IMPULSE_CATEGORIES, SEVERITY_ORDER

MIN_ANOMALY_EXPENSES = 10
MIN_CATEGORY_SAMPLES = 3
MIN_BEHAVIOR_EXPENSES = 10

IMPULSE_MAX_AMOUNT = 50.0
IMPULSE_SHARE_LIMIT = 0.3
LARGE_PURCHASE_AMOUNT = 200.0

RECURRING_MAX_COV = 0.3
RECURRING_MAX_INTERVAL_DAYS = 45


def _iso(value: pd.Timestamp) -> str:
    return value.date().isoformat()


def _z_score_anomalies(
    expenses: pd.DataFrame, z_threshold: float, high_z: float
) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for category, group in expenses.groupby("Category", sort=False):
        if len(group) < MIN_CATEGORY_SAMPLES:
            continue
        mean = float(group["Amount"].mean())
        std = float(group["Amount"].std(ddof=0))
        for _, row in group.iterrows():
            amount = float(row["Amount"])
            z = (amount - mean) / std if std > 0 else 0.0
            if abs(z) <= z_threshold:
                continue
            deviation = (amount - mean) / mean * 100.0 if mean else 0.0
            direction = "higher" if z > 0 else "lower"
            rows.append(
                {
                    "category": str(category),
                    "amount": amount,
                    "date": _iso(row["Date"]),
                    "type": "unusually_high" if z > 0 else "unusually_low",
                    "z_score": z,
                    "deviation": deviation,
                    "severity": "high" if abs(z) > high_z else "medium",
                    "description": (
                        f"{category} expense of ${amount:.2f} is {abs(deviation):.0f}% "
                        f"{direction} than average (${mean:.2f})"
                    ),
                }
            )
    return rows


def _duplicate_anomalies(expenses: pd.DataFrame) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for (category, amount, date), group in expenses.groupby(["Category", "Amount", "Date"], sort=False):
        count = int(len(group))
        if count < 2:
            continue
        rows.append(
            {
                "category": str(category),
                "amount": float(amount),
                "date": _iso(date),
                "type": "potential_duplicate",
                "severity": "medium",
                "count": count,
                "description": (
                    f"Potential duplicate: {count} identical transactions of ${float(amount):.2f} in {category}"
                ),
            }
        )
    return rows


def detect_anomalies(
    expenses: pd.DataFrame, z_threshold: float = 2.0, high_z: float = 3.0
) -> dict[str, object]:
    """Flag per-category z-score outliers and same-day duplicate transactions."""
    if len(expenses) < MIN_ANOMALY_EXPENSES:
        return {
            "available": False,
            "anomalies": [],
            "summary": "Insufficient data for anomaly detection",
        }

    anomalies = _z_score_anomalies(expenses, z_threshold, high_z) + _duplicate_anomalies(expenses)
    anomalies.sort(key=lambda row: SEVERITY_ORDER[str(row["severity"])])
    if anomalies:
        summary = f"Found {len(anomalies)} anomalies requiring attention"
    else:
        summary = "No significant anomalies detected"
    return {"available": True, "anomalies": anomalies, "summary": summary}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _recurring_frequency(avg_interval: float) -> str:
    if avg_interval < 10:
        return "weekly"
    if avg_interval < 20:
        return "bi-weekly"
    return "monthly"


def _recurring_consistency(cov: float) -> str:
    if cov < 0.1:
        return "very_high"
    if cov < 0.2:
        return "high"
    return "moderate"


def detect_recurring_expenses(expenses: pd.DataFrame) -> list[dict[str, object]]:
    """Detect category/amount pairs that repeat at a regular day interval."""
    if expenses.empty:
        return []
    work = expenses.assign(RoundedAmount=expenses["Amount"].apply(_round_half_up))

    rows: list[dict[str, object]] = []
    for (category, amount), group in work.groupby(["Category", "RoundedAmount"], sort=False):
        if len(group) < 2:
            continue
        intervals = group["Date"].sort_values().diff().dt.days.dropna().astype(float)
        avg_interval = float(intervals.mean())
        if avg_interval <= 0:
            continue
        cov = float(intervals.std(ddof=0)) / avg_interval
        if cov >= RECURRING_MAX_COV or avg_interval >= RECURRING_MAX_INTERVAL_DAYS:
            continue
        rows.append(
            {
                "category": str(category),
                "amount": int(amount),
                "classification": "recurring",
                "frequency": _recurring_frequency(avg_interval),
                "avg_days_between": _round_half_up(avg_interval),
                "occurrences": int(len(group)),
                "coefficient_of_variation": cov,
                "consistency": _recurring_consistency(cov),
                "last_seen": _iso(group["Date"].max()),
            }
        )
    return sorted(rows, key=lambda row: row["amount"], reverse=True)


def analyze_behavior_patterns(expenses: pd.DataFrame) -> dict[str, object] | None:
    """Weekday distribution, weekend split, impulse/large purchases and recurring costs."""
    if len(expenses) < MIN_BEHAVIOR_EXPENSES:
        return None

    work = expenses.copy()
    work["Weekday"] = work["Date"].dt.day_name()

    day_patterns = []
    for day, group in work.groupby("Weekday", sort=False):
        total = float(group["Amount"].sum())
        count = int(len(group))
        day_patterns.append(
            {
                "day": str(day),
                "average_spending": total / count,
                "total_transactions": count,
                "total_spent": total,
            }
        )
    day_patterns.sort(key=lambda row: row["average_spending"], reverse=True)

    weekend_mask = work["Date"].dt.dayofweek >= 5
    weekday = work.loc[~weekend_mask, "Amount"]
    weekend = work.loc[weekend_mask, "Amount"]
    weekday_total = float(weekday.sum())
    weekend_total = float(weekend.sum())

    total_count = int(len(work))
    impulse = work[
        work["CategoryKind"].isin(list(IMPULSE_CATEGORIES)) & (work["Amount"] < IMPULSE_MAX_AMOUNT)
    ]
    impulse_count = int(len(impulse))
    if impulse_count > total_count * IMPULSE_SHARE_LIMIT:
        impulse_insight = "High frequency of small purchases - consider consolidating shopping trips"
    else:
        impulse_insight = "Impulse buying is under control"

    large = work[work["Amount"] > LARGE_PURCHASE_AMOUNT]
    large_total = float(large["Amount"].sum())

    return {
        "day_of_week_patterns": day_patterns,
        "weekday_vs_weekend": {
            "weekday": {
                "total": weekday_total,
                "average": weekday_total / (len(weekday) or 1),
                "count": int(len(weekday)),
            },
            "weekend": {
                "total": weekend_total,
                "average": weekend_total / (len(weekend) or 1),
                "count": int(len(weekend)),
            },
            "preference": "weekend_spender" if weekend_total > weekday_total else "weekday_spender",
        },
        "impulse_buying": {
            "count": impulse_count,
            "total": float(impulse["Amount"].sum()),
            "percentage": impulse_count / total_count * 100.0,
            "insight": impulse_insight,
        },
        "large_purchases": {
            "count": int(len(large)),
            "total": large_total,
            "average": large_total / len(large) if len(large) else 0.0,
            "categories": [str(c) for c in dict.fromkeys(large["Category"].tolist())],
        },
        "recurring_expenses": detect_recurring_expenses(work),
    }

"""Benchmark comparison, financial health scoring and rule-based recommendations."""

from __future__ import annotations

import pandas as pd

from analytics import calculate_overview, income_consistency, percent_of
from categories import (
    BENCHMARKS,
    DEBT_CATEGORY,
    DEBT_SAVINGS_FRACTION,
    NEEDS_CATEGORIES,
    PRIORITY_ORDER,
    RECOMMENDATION_RULES,
    WANTS_CATEGORIES,
    ExpenseCategory,
)

STATUS_POINTS = {"excellent": 10, "good": 7, "warning": 4, "critical": 0}
SAVINGS_TARGET_RATE = 20.0
MIN_SAVINGS_RATE = 10.0
BUDGET_SPLIT = {"needs": 0.5, "wants": 0.3, "savings": 0.2}


def _category_totals(expenses: pd.DataFrame) -> list[tuple[str, ExpenseCategory, float]]:
    """(label, kind, total) per category label in first-seen order."""
    rows = []
    for label, group in expenses.groupby("Category", sort=False):
        rows.append((str(label), group["CategoryKind"].iloc[0], float(group["Amount"].sum())))
    return rows


def _benchmark_status(percentage: float, benchmark: dict[str, float] | None) -> tuple[str, str]:
    if not benchmark:
        return "no_benchmark", "No standard benchmark available"
    if percentage <= benchmark["ideal"]:
        return "excellent", "Spending is within ideal range"
    if percentage <= benchmark["acceptable"]:
        return "good", "Spending is acceptable but could be optimized"
    if percentage <= benchmark["warning"]:
        over = percentage - benchmark["acceptable"]
        return "warning", f"Consider reducing spending - {over:.1f}% above recommended"
    over = percentage - benchmark["warning"]
    return "critical", f"Significantly overspending - {over:.1f}% above warning threshold"


def savings_rate_status(rate: float) -> tuple[str, str]:
    if rate >= 30:
        return "excellent", "Outstanding savings rate! Consider investment opportunities"
    if rate >= 20:
        return "good", "Good savings rate, maintain this discipline"
    if rate >= 10:
        return "fair", "Adequate savings, try to increase to 20%"
    return "poor", "Critical: Aim for at least 10% savings rate"


def _savings_points(rate: float) -> int:
    if rate >= 30:
        return 30
    if rate >= 20:
        return 25
    if rate >= 10:
        return 15
    if rate >= 0:
        return 5
    return 0


def _score_rating(ratio: float) -> str:
    if ratio >= 0.8:
        return "excellent"
    if ratio >= 0.6:
        return "good"
    if ratio >= 0.4:
        return "fair"
    return "needs_improvement"


def overall_benchmark_score(comparisons: list[dict[str, object]], savings_rate: float) -> dict[str, object]:
    """Points per category status plus savings points, normalized against the maximum.

    Categories without a benchmark score zero but still count toward the maximum.
    """
    score = sum(STATUS_POINTS.get(str(row["status"]), 0) for row in comparisons)
    score += _savings_points(savings_rate)
    max_score = len(comparisons) * 10 + 30
    ratio = score / max_score
    return {
        "score": int(score),
        "max_score": int(max_score),
        "percentage": ratio * 100.0,
        "rating": _score_rating(ratio),
    }


def compare_to_benchmarks(
    expenses: pd.DataFrame,
    income: pd.DataFrame,
    benchmarks: dict[ExpenseCategory, dict[str, float]] | None = None,
) -> dict[str, object]:
    """Compare category shares of spend against ideal/acceptable/warning thresholds."""
    table = BENCHMARKS if benchmarks is None else benchmarks
    overview = calculate_overview(expenses, income)
    total_expenses = overview["total_expenses"]

    comparisons = []
    for label, kind, amount in _category_totals(expenses):
        percentage = percent_of(amount, total_expenses)
        benchmark = table.get(kind)
        status, recommendation = _benchmark_status(percentage, benchmark)
        comparisons.append(
            {
                "category": label,
                "amount": amount,
                "percentage": percentage,
                "status": status,
                "benchmark": dict(benchmark) if benchmark else None,
                "recommendation": recommendation,
            }
        )
    comparisons.sort(key=lambda row: row["percentage"], reverse=True)

    savings_rate = overview["savings_rate"]
    savings_status, savings_recommendation = savings_rate_status(savings_rate)
    return {
        "category_comparisons": comparisons,
        "savings_analysis": {
            "rate": savings_rate,
            "status": savings_status,
            "recommendation": savings_recommendation,
            "benchmark_comparison": {
                "excellent": 30.0,
                "good": 20.0,
                "fair": 10.0,
                "current": savings_rate,
            },
        },
        "overall_score": overall_benchmark_score(comparisons, savings_rate),
    }


def health_rating(score: int) -> str:
    if score >= 85:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 50:
        return "fair"
    return "needs_improvement"


def _savings_factor(rate: float) -> tuple[str, int]:
    if rate >= 20:
        return "excellent", 30
    if rate >= 10:
        return "good", 20
    if rate >= 0:
        return "fair", 10
    return "poor", 0


def _income_factor(consistency: str) -> tuple[str, int]:
    # Both consistent tiers share the top bucket.
    if consistency in {"very_consistent", "consistent"}:
        return "excellent", 25
    if consistency == "moderate":
        return "good", 15
    return "fair", 5


def _discipline_factor(category_count: int) -> tuple[str, int]:
    if category_count <= 5:
        return "excellent", 20
    if category_count <= 7:
        return "good", 15
    return "needs_improvement", 5


def has_debt(expenses: pd.DataFrame) -> bool:
    return bool(expenses["CategoryKind"].isin([DEBT_CATEGORY]).any())


def calculate_financial_health(expenses: pd.DataFrame, income: pd.DataFrame) -> dict[str, object]:
    """Composite 0-100 score over savings, income stability, category sprawl and debt."""
    overview = calculate_overview(expenses, income)
    factors = []

    status, points = _savings_factor(overview["savings_rate"])
    factors.append({"factor": "Savings Rate", "status": status, "points": points})

    status, points = _income_factor(income_consistency(income))
    factors.append({"factor": "Income Stability", "status": status, "points": points})

    status, points = _discipline_factor(int(expenses["Category"].nunique()))
    factors.append({"factor": "Spending Discipline", "status": status, "points": points})

    if has_debt(expenses):
        factors.append({"factor": "Debt Status", "status": "needs_attention", "points": 10})
    else:
        factors.append({"factor": "Debt Status", "status": "excellent", "points": 25})

    score = sum(int(f["points"]) for f in factors)
    return {
        "score": score,
        "rating": health_rating(score),
        "factors": factors,
        "max_score": 100,
    }


def generate_recommendations(expenses: pd.DataFrame, income: pd.DataFrame) -> list[dict[str, object]]:
    """Threshold rules per category, debt and overall savings rate, most urgent first."""
    overview = calculate_overview(expenses, income)
    total_expenses = overview["total_expenses"]
    total_income = overview["total_income"]

    recommendations: list[dict[str, object]] = []
    for label, kind, amount in _category_totals(expenses):
        percentage = percent_of(amount, total_expenses)
        rule = RECOMMENDATION_RULES.get(kind)
        if rule and percentage > float(rule["max_pct"]):
            recommendations.append(
                {
                    "priority": rule["priority"],
                    "category": label,
                    "issue": str(rule["issue"]).format(pct=percentage),
                    "suggestion": rule["suggestion"],
                    "potential_savings": amount * float(rule["savings_fraction"]),
                }
            )
        if kind == DEBT_CATEGORY:
            recommendations.append(
                {
                    "priority": "critical",
                    "category": label,
                    "issue": "Credit card payments detected",
                    "suggestion": "Prioritize paying off high-interest debt",
                    "potential_savings": amount * DEBT_SAVINGS_FRACTION,
                }
            )

    savings_rate = overview["savings_rate"]
    if savings_rate < MIN_SAVINGS_RATE:
        recommendations.append(
            {
                "priority": "critical",
                "category": "Overall",
                "issue": f"Only {savings_rate:.1f}% savings rate",
                "suggestion": "Aim for at least 20% savings rate - review all categories",
                "potential_savings": total_income * SAVINGS_TARGET_RATE / 100.0 - overview["net_savings"],
            }
        )

    return sorted(recommendations, key=lambda row: PRIORITY_ORDER[str(row["priority"])])


def budget_suggestions(expenses: pd.DataFrame, income: pd.DataFrame) -> dict[str, dict[str, float]] | None:
    """50/30/20 split of income against current needs, wants and savings."""
    overview = calculate_overview(expenses, income)
    total_income = overview["total_income"]
    if not total_income:
        return None

    recommended = {bucket: total_income * share for bucket, share in BUDGET_SPLIT.items()}
    kinds = expenses["CategoryKind"]
    current = {
        "needs": float(expenses.loc[kinds.isin(list(NEEDS_CATEGORIES)), "Amount"].sum()),
        "wants": float(expenses.loc[kinds.isin(list(WANTS_CATEGORIES)), "Amount"].sum()),
        "savings": overview["net_savings"],
    }
    return {
        "recommended": recommended,
        "current": current,
        "adjustments": {bucket: recommended[bucket] - current[bucket] for bucket in recommended},
    }

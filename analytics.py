"""Analytics helpers for spending/income statistics, trends and forecasts."""

from __future__ import annotations

import datetime

import pandas as pd

from categories import ExpenseCategory
from transactions import to_day

RECENT_WINDOW_DAYS = 7
BURN_RATE_TARGET = 1000.0
TREND_CHANGE_PCT = 10.0
SAVINGS_TREND_CHANGE_PCT = 15.0

MIN_FORECAST_EXPENSES = 5
MIN_FORECAST_INCOME = 2
MIN_FORECAST_MONTHS = 3
FORECAST_LOOKBACK_MONTHS = 3
FORECAST_HORIZON_MONTHS = 3


def percent_of(part: float, whole: float) -> float:
    return float(part / whole * 100.0) if whole else 0.0


def _change_pct(current: float, previous: float) -> float:
    if previous:
        return (current - previous) / previous * 100.0
    return 100.0 if current > 0 else 0.0


def _direction(change: float, threshold: float = TREND_CHANGE_PCT) -> str:
    if change > threshold:
        return "increasing"
    if change < -threshold:
        return "decreasing"
    return "stable"


def calculate_overview(expenses: pd.DataFrame, income: pd.DataFrame) -> dict[str, float]:
    """Return totals, net savings and savings rate."""
    total_expenses = float(expenses["Amount"].sum())
    total_income = float(income["Amount"].sum())
    net_savings = total_income - total_expenses
    return {
        "total_expenses": total_expenses,
        "total_income": total_income,
        "net_savings": net_savings,
        "savings_rate": percent_of(net_savings, total_income),
        "expense_count": int(len(expenses)),
        "income_count": int(len(income)),
    }


def half_split_trend(group: pd.DataFrame) -> str:
    """Compare average amount of the later half of transactions with the earlier half.

    The split is by transaction count after ordering by date, not by time.
    """
    if len(group) < 2:
        return "stable"
    ordered = group.sort_values("Date", kind="mergesort")["Amount"].reset_index(drop=True)
    midpoint = len(ordered) // 2
    first_avg = float(ordered.iloc[:midpoint].mean())
    second_avg = float(ordered.iloc[midpoint:].mean())
    return _direction(_change_pct(second_avg, first_avg))


def category_breakdown(df: pd.DataFrame, label_col: str = "Category") -> list[dict[str, object]]:
    """Per-category (or per-source) totals, share of total and trend, largest first."""
    if df.empty:
        return []
    key = label_col.lower()
    grand_total = float(df["Amount"].sum())
    rows: list[dict[str, object]] = []
    for label, group in df.groupby(label_col, sort=True):
        amounts = group["Amount"]
        total = float(amounts.sum())
        count = int(len(group))
        rows.append(
            {
                key: str(label),
                "total": total,
                "count": count,
                "average": total / count,
                "min": float(amounts.min()),
                "max": float(amounts.max()),
                "percentage": percent_of(total, grand_total),
                "trend": half_split_trend(group),
            }
        )
    return sorted(rows, key=lambda row: row["total"], reverse=True)


def analyze_spending_patterns(expenses: pd.DataFrame) -> dict[str, object] | None:
    """Category breakdown plus transaction size extremes."""
    if expenses.empty:
        return None
    total = float(expenses["Amount"].sum())
    return {
        "category_breakdown": category_breakdown(expenses, "Category"),
        "average_transaction": total / len(expenses),
        "largest_expense": float(expenses["Amount"].max()),
        "smallest_expense": float(expenses["Amount"].min()),
        "total_categories": int(expenses["Category"].nunique()),
    }


def coefficient_of_variation(values: pd.Series) -> float | None:
    """Population standard deviation over mean; None when the mean is zero."""
    if values.empty:
        return None
    mean = float(values.mean())
    if not mean:
        return None
    return float(values.std(ddof=0)) / mean


def income_consistency(income: pd.DataFrame) -> str:
    """Bucket income regularity by coefficient of variation of amounts."""
    if len(income) < 2:
        return "insufficient_data"
    cov = coefficient_of_variation(income["Amount"])
    if cov is None:
        return "variable"
    cov_pct = cov * 100.0
    if cov_pct < 10:
        return "very_consistent"
    if cov_pct < 25:
        return "consistent"
    if cov_pct < 50:
        return "moderate"
    return "variable"


def analyze_income(income: pd.DataFrame) -> dict[str, object] | None:
    """Source breakdown and consistency of income."""
    if income.empty:
        return None
    total = float(income["Amount"].sum())
    return {
        "source_breakdown": category_breakdown(income, "Source"),
        "average_income": total / len(income),
        "consistency": income_consistency(income),
        "total_sources": int(income["Source"].nunique()),
    }


def _purchase_frequency(dates: pd.Series) -> str:
    if len(dates) < 2:
        return "occasional"
    gaps = dates.sort_values().diff().dt.days.dropna()
    avg_days = float(gaps.mean())
    if avg_days < 3:
        return "daily"
    if avg_days < 10:
        return "weekly"
    if avg_days < 35:
        return "monthly"
    return "occasional"


def _category_advice(kind: ExpenseCategory, total: float, count: int, average: float) -> list[str]:
    advice: list[str] = []
    if kind == ExpenseCategory.FOOD_AND_DINING:
        if average > 30:
            advice.append("High average per meal - consider cooking at home more")
        if count > 20:
            advice.append("Frequent dining out - meal prep could save money")
    elif kind == ExpenseCategory.SHOPPING:
        if average > 50:
            advice.append("Large shopping transactions - review necessity of purchases")
        if count > 15:
            advice.append("Frequent shopping - implement a waiting period before purchases")
    elif kind == ExpenseCategory.ENTERTAINMENT:
        if total > 200:
            advice.append("High entertainment spending - explore free alternatives")
    elif kind == ExpenseCategory.TRANSPORTATION:
        if average > 40:
            advice.append("High transportation costs - consider carpooling or public transit")
    elif kind == ExpenseCategory.CREDIT_CARD:
        advice.append("Focus on paying down credit card debt to reduce interest charges")
    return advice or ["Monitor this category for optimization opportunities"]


def category_insights(expenses: pd.DataFrame) -> list[dict[str, object]]:
    """Per-category statistics with purchase frequency and advice."""
    if expenses.empty:
        return []
    rows: list[dict[str, object]] = []
    for category, group in expenses.groupby("Category", sort=True):
        amounts = group["Amount"]
        total = float(amounts.sum())
        count = int(len(group))
        average = total / count
        rows.append(
            {
                "category": str(category),
                "total": total,
                "count": count,
                "average": average,
                "max": float(amounts.max()),
                "min": float(amounts.min()),
                "frequency": _purchase_frequency(group["Date"]),
                "insight": _category_advice(group["CategoryKind"].iloc[0], total, count, average),
            }
        )
    return sorted(rows, key=lambda row: row["total"], reverse=True)


def _overall_savings_trend(monthly: list[dict[str, object]]) -> str:
    if len(monthly) < 2:
        return "insufficient_data"
    recent = monthly[-3:]
    older = monthly[:-3]
    if not older:
        return "new_data"
    avg_recent = sum(float(m["savings"]) for m in recent) / len(recent)
    avg_older = sum(float(m["savings"]) for m in older) / len(older)
    change = (avg_recent - avg_older) / abs(avg_older) * 100.0 if avg_older else 0.0
    if change > SAVINGS_TREND_CHANGE_PCT:
        return "improving"
    if change < -SAVINGS_TREND_CHANGE_PCT:
        return "declining"
    return "stable"


def monthly_trends(expenses: pd.DataFrame, income: pd.DataFrame) -> dict[str, object]:
    """Aggregate income/expenses/savings by calendar month."""
    spend = expenses.groupby("Month")["Amount"].sum()
    earn = income.groupby("Month")["Amount"].sum()
    months = sorted(set(spend.index.tolist()) | set(earn.index.tolist()))

    monthly: list[dict[str, object]] = []
    for month in months:
        expense_total = float(spend.get(month, 0.0))
        income_total = float(earn.get(month, 0.0))
        savings = income_total - expense_total
        monthly.append(
            {
                "month": str(month),
                "expenses": expense_total,
                "income": income_total,
                "savings": savings,
                "savings_rate": percent_of(savings, income_total),
            }
        )

    return {
        "monthly_data": monthly,
        "trend": _overall_savings_trend(monthly),
        "best_month": max(monthly, key=lambda m: m["savings"]) if monthly else None,
        "worst_month": min(monthly, key=lambda m: m["savings"]) if monthly else None,
    }


def spending_velocity(expenses: pd.DataFrame, now: datetime.date | str) -> dict[str, object]:
    """Daily/weekly/monthly burn rates and recent acceleration relative to ``now``."""
    if len(expenses) < 2:
        return {"available": False, "reason": "Need at least 2 expenses to measure spending velocity"}

    today = to_day(now)
    dates = expenses["Date"]
    day_span = int((dates.max() - dates.min()).days) or 1

    total_spent = float(expenses["Amount"].sum())
    daily_average = total_spent / day_span
    weekly_average = daily_average * 7
    monthly_average = daily_average * 30

    days_ago = (today - dates).dt.days
    recent_total = float(expenses.loc[days_ago <= RECENT_WINDOW_DAYS, "Amount"].sum())
    recent_daily = recent_total / RECENT_WINDOW_DAYS
    acceleration = (recent_daily - daily_average) / daily_average * 100.0 if daily_average else 0.0
    if acceleration > TREND_CHANGE_PCT:
        trend = "accelerating"
    elif acceleration < -TREND_CHANGE_PCT:
        trend = "decelerating"
    else:
        trend = "stable"

    per_category = expenses.groupby("Category", sort=True)["Amount"].agg(["sum", "count"])
    by_category = []
    for category, row in per_category.iterrows():
        daily_rate = float(row["sum"]) / day_span
        by_category.append(
            {
                "category": str(category),
                "daily_rate": daily_rate,
                "weekly_rate": daily_rate * 7,
                "monthly_rate": daily_rate * 30,
                "transaction_frequency": float(row["count"]) / day_span,
            }
        )
    by_category.sort(key=lambda row: row["daily_rate"], reverse=True)

    return {
        "available": True,
        "overall": {
            "daily_average": daily_average,
            "weekly_average": weekly_average,
            "monthly_average": monthly_average,
            "recent_daily_average": recent_daily,
            "acceleration": acceleration,
            "trend": trend,
        },
        "by_category": by_category,
        "burn_rate": {
            "daily": daily_average,
            "days_until_1000": BURN_RATE_TARGET / daily_average if daily_average > 0 else None,
            "projected_monthly": monthly_average,
        },
    }


def trend_slope(values: list[float]) -> float:
    """Least-squares slope of values against their index 0..n-1."""
    if len(values) < 2:
        return 0.0
    x = pd.Series(range(len(values)), dtype=float)
    y = pd.Series(values, dtype=float)
    x_mean = float(x.mean())
    y_mean = float(y.mean())
    num = float(((x - x_mean) * (y - y_mean)).sum())
    den = float(((x - x_mean) ** 2).sum())
    return num / den if den else 0.0


def _slope_direction(slope: float) -> str:
    if slope > 0:
        return "increasing"
    if slope < 0:
        return "decreasing"
    return "stable"


def _forecast_confidence(count: int) -> str:
    if count >= 10:
        return "high"
    if count >= 5:
        return "medium"
    return "low"


def generate_forecast(
    expenses: pd.DataFrame, income: pd.DataFrame, now: datetime.date | str
) -> dict[str, object]:
    """Project the next months from the three most recent months of data."""
    if len(expenses) < MIN_FORECAST_EXPENSES or len(income) < MIN_FORECAST_INCOME:
        return {"available": False, "reason": "Insufficient historical data for forecasting"}

    monthly_expense = expenses.groupby("Month")["Amount"].sum().sort_index()
    if len(monthly_expense) < MIN_FORECAST_MONTHS:
        return {"available": False, "reason": "Need at least 3 months of data"}

    monthly_income = income.groupby("Month")["Amount"].sum()
    recent_months = [str(m) for m in monthly_expense.index[-FORECAST_LOOKBACK_MONTHS:]]
    expense_values = [float(monthly_expense[m]) for m in recent_months]
    income_values = [float(monthly_income.get(m, 0.0)) for m in recent_months]

    avg_expense = sum(expense_values) / len(recent_months)
    avg_income = sum(income_values) / len(recent_months)
    expense_slope = trend_slope(expense_values)
    income_slope = trend_slope(income_values)

    next_expense = avg_expense + expense_slope
    next_income = avg_income + income_slope
    next_savings = next_income - next_expense

    today = to_day(now)
    next_months = []
    for step in range(1, FORECAST_HORIZON_MONTHS + 1):
        projected_expense = avg_expense + expense_slope * step
        projected_income = avg_income + income_slope * step
        projected_savings = projected_income - projected_expense
        next_months.append(
            {
                "month": (today + pd.DateOffset(months=step)).strftime("%b %Y"),
                "projected_expense": projected_expense,
                "projected_income": projected_income,
                "projected_savings": projected_savings,
                "savings_rate": percent_of(projected_savings, projected_income) if projected_income > 0 else 0.0,
            }
        )

    recent = expenses[expenses["Month"].isin(recent_months)]
    recent_by_category = recent.groupby("Category")["Amount"].sum()
    counts = expenses.groupby("Category", sort=False).size()
    category_forecasts = [
        {
            "category": str(category),
            "projected_monthly": float(recent_by_category.get(category, 0.0)) / len(recent_months),
            "confidence": _forecast_confidence(int(count)),
        }
        for category, count in counts.items()
    ]
    category_forecasts.sort(key=lambda row: row["projected_monthly"], reverse=True)

    return {
        "available": True,
        "based_on_months": recent_months,
        "next_month": {
            "expense": next_expense,
            "income": next_income,
            "savings": next_savings,
            "savings_rate": percent_of(next_savings, next_income) if next_income > 0 else 0.0,
        },
        "next_3_months": next_months,
        "category_forecasts": category_forecasts,
        "trends": {
            "expense_trend": _slope_direction(expense_slope),
            "income_trend": _slope_direction(income_slope),
            "outlook": "positive" if next_savings > 0 else "concerning",
        },
    }

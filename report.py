"""Full financial analysis run: every analyzer over one expense/income snapshot."""

from __future__ import annotations

import datetime
import logging
from typing import Any, Iterable

import pandas as pd

from analytics import (
    analyze_income,
    analyze_spending_patterns,
    calculate_overview,
    category_insights,
    generate_forecast,
    monthly_trends,
    spending_velocity,
)
from behavior import analyze_behavior_patterns, detect_anomalies
from goals import SavingsGoal, calculate_goal_recommendations
from health import (
    budget_suggestions,
    calculate_financial_health,
    compare_to_benchmarks,
    generate_recommendations,
)
from transactions import load_expenses, load_income, to_day

logger = logging.getLogger(__name__)


def _as_frame(records: Iterable[Any] | pd.DataFrame | None, loader) -> pd.DataFrame:
    if isinstance(records, pd.DataFrame):
        return records
    return loader(records)


def analyze_financial_data(
    expenses: Iterable[Any] | pd.DataFrame | None,
    income: Iterable[Any] | pd.DataFrame | None,
    now: datetime.date | str | None = None,
    goal: SavingsGoal | dict[str, Any] | None = None,
) -> dict[str, object]:
    """Run every analyzer and bundle the results into one report dict.

    ``expenses``/``income`` may be raw records (mappings or ``Transaction``
    objects) or frames already produced by ``load_expenses``/``load_income``.
    ``now`` anchors the recent-spending window and forecast month labels; it
    defaults to today's date. When a savings ``goal`` is given the report
    gains a ``goal_recommendations`` section.
    """
    expense_df = _as_frame(expenses, load_expenses)
    income_df = _as_frame(income, load_income)
    today = to_day(now if now is not None else datetime.date.today())
    logger.info(
        "Analyzing %d expense(s) and %d income record(s) as of %s",
        len(expense_df),
        len(income_df),
        today.date().isoformat(),
    )

    report = {
        "generated_at": today.date().isoformat(),
        "overview": calculate_overview(expense_df, income_df),
        "spending_patterns": analyze_spending_patterns(expense_df),
        "income_analysis": analyze_income(income_df),
        "category_insights": category_insights(expense_df),
        "trends": monthly_trends(expense_df, income_df),
        "recommendations": generate_recommendations(expense_df, income_df),
        "financial_health": calculate_financial_health(expense_df, income_df),
        "budget_suggestions": budget_suggestions(expense_df, income_df),
        "anomalies": detect_anomalies(expense_df),
        "spending_velocity": spending_velocity(expense_df, today),
        "forecast": generate_forecast(expense_df, income_df, today),
        "comparative_analysis": compare_to_benchmarks(expense_df, income_df),
        "behavior_patterns": analyze_behavior_patterns(expense_df),
    }
    if goal is not None:
        report["goal_recommendations"] = calculate_goal_recommendations(goal, expense_df, income_df, today)

    unavailable = [
        name
        for name, section in report.items()
        if section is None or (isinstance(section, dict) and section.get("available") is False)
    ]
    if unavailable:
        logger.debug("Sections without enough data: %s", ", ".join(unavailable))
    return report

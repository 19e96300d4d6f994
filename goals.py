"""Savings-goal progress, timeline and recommendations against the current cash flow."""

from __future__ import annotations

import datetime
import logging
import math
from dataclasses import dataclass
from typing import Any

import pandas as pd

from analytics import calculate_overview, percent_of
from transactions import to_day

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30
CATEGORY_CUT_FRACTION = 0.2
CATEGORY_CUT_MIN_SHARE = 0.3
MIN_SAVINGS_RATE = 10.0
SAVINGS_STRATEGIES = (("aggressive", 30), ("moderate", 20), ("conservative", 10))

GOAL_TIPS = {
    "wedding": [
        "Set a guest limit early - headcount drives most wedding costs",
        "Book vendors off-season or on weekdays for lower prices",
    ],
    "house": [
        "Aim for a 20% down payment to avoid mortgage insurance",
        "Budget 2-5% of the price for closing costs on top of the down payment",
    ],
    "car": ["Compare the total cost of ownership, not just the monthly payment"],
    "vacation": ["Book flights and stays early and travel outside peak season"],
    "emergency_fund": ["Keep three to six months of expenses in an easy-access savings account"],
}
LOW_SAVINGS_TIP = "Automate a transfer to savings on payday to lift your savings rate above 10%"


@dataclass(frozen=True)
class SavingsGoal:
    """A target amount to save, optionally by a deadline."""

    target_amount: float
    current_amount: float = 0.0
    deadline: datetime.date | str | None = None
    category: str = "other"


def load_goal(record: Any) -> SavingsGoal:
    """Build a ``SavingsGoal`` from a mapping (or return it unchanged)."""
    if isinstance(record, SavingsGoal):
        return record
    if "target_amount" not in record:
        raise ValueError("Goal needs a target_amount")
    return SavingsGoal(
        target_amount=float(record["target_amount"]),
        current_amount=float(record.get("current_amount") or 0.0),
        deadline=record.get("deadline") or None,
        category=str(record.get("category") or "other"),
    )


def _months_until(deadline: pd.Timestamp | None, now: pd.Timestamp) -> int | None:
    if deadline is None:
        return None
    days = (deadline - now).days
    return max(1, math.ceil(days / DAYS_PER_MONTH))


def _months_to_save(remaining: float, monthly_amount: float) -> int:
    return max(0, math.ceil(remaining / monthly_amount))


def _top_categories(expenses: pd.DataFrame, limit: int = 3) -> list[tuple[str, float]]:
    totals = expenses.groupby("Category", sort=False)["Amount"].sum()
    totals = totals.sort_values(ascending=False, kind="stable").head(limit)
    return [(str(label), float(amount)) for label, amount in totals.items()]


def savings_strategies(
    total_income: float, monthly_savings: float, remaining: float, now: pd.Timestamp
) -> list[dict[str, object]]:
    """Fixed-share-of-income plans; the aggressive one only when it beats current savings."""
    strategies = []
    for name, percentage in SAVINGS_STRATEGIES:
        amount = total_income * percentage / 100.0
        if amount <= 0 or (name == "aggressive" and amount <= monthly_savings):
            continue
        months = _months_to_save(remaining, amount)
        completion = now + pd.Timedelta(days=months * DAYS_PER_MONTH)
        strategies.append(
            {
                "name": name,
                "percentage": percentage,
                "monthly_amount": amount,
                "months": months,
                "completion_date": completion.date().isoformat(),
            }
        )
    return strategies


def calculate_goal_recommendations(
    goal: SavingsGoal | dict[str, Any],
    expenses: pd.DataFrame,
    income: pd.DataFrame,
    now: datetime.date | str | None = None,
) -> dict[str, object]:
    """Progress, timeline, warnings, recommendations and tips for one savings goal.

    The whole expense/income snapshot counts as one month of cash flow.
    ``now`` anchors the months left until the deadline and the strategy
    completion dates; it defaults to today's date.
    """
    goal = load_goal(goal)
    today = to_day(now if now is not None else datetime.date.today())
    overview = calculate_overview(expenses, income)
    total_income = overview["total_income"]
    monthly_savings = overview["net_savings"]

    remaining = goal.target_amount - goal.current_amount
    deadline = to_day(goal.deadline) if goal.deadline else None
    months_left = _months_until(deadline, today)
    required_monthly = remaining / months_left if months_left else None
    estimated_months = _months_to_save(remaining, monthly_savings) if monthly_savings > 0 else None

    warnings: list[dict[str, object]] = []
    recommendations: list[dict[str, object]] = []
    if monthly_savings <= 0:
        warnings.append({"type": "critical", "message": "no_savings"})
        recommendations.append(
            {
                "title": "increase_income",
                "priority": "high",
                "description": "Look for extra income such as overtime, freelance work or selling unused items",
            }
        )
        recommendations.append(
            {
                "title": "reduce_expenses",
                "priority": "high",
                "description": "Spending matches or exceeds income - cut back before saving toward this goal",
            }
        )
    else:
        if months_left and required_monthly > monthly_savings:
            shortfall = required_monthly - monthly_savings
            warnings.append(
                {
                    "type": "warning",
                    "message": "behind_schedule",
                    "details": {"required": required_monthly, "current": monthly_savings, "shortfall": shortfall},
                }
            )
            recommendations.append(
                {
                    "title": "increase_savings",
                    "priority": "high",
                    "description": f"Save an extra ${shortfall:,.2f} per month to reach the goal on time",
                    "amount": shortfall,
                    "percentage": percent_of(shortfall, total_income),
                }
            )
            for label, amount in _top_categories(expenses):
                cut = amount * CATEGORY_CUT_FRACTION
                if cut >= shortfall * CATEGORY_CUT_MIN_SHARE:
                    recommendations.append(
                        {
                            "title": "reduce_category_spending",
                            "priority": "medium",
                            "description": f"Cutting {label} by 20% frees ${cut:,.2f} per month",
                            "category": label,
                            "current_amount": amount,
                            "suggested_reduction": cut,
                        }
                    )
        elif months_left:
            warnings.append({"type": "success", "message": "on_track"})

        recommendations.append(
            {
                "title": "savings_strategies",
                "priority": "medium",
                "description": "Pick a fixed share of income to set aside every month",
                "strategies": savings_strategies(total_income, monthly_savings, remaining, today),
            }
        )

    tips = list(GOAL_TIPS.get(goal.category, []))
    if overview["savings_rate"] < MIN_SAVINGS_RATE:
        tips.append(LOW_SAVINGS_TIP)

    logger.debug("Goal %.2f/%.2f: %d warning(s)", goal.current_amount, goal.target_amount, len(warnings))
    return {
        "progress": {
            "current": goal.current_amount,
            "target": goal.target_amount,
            "remaining": remaining,
            "percentage": percent_of(goal.current_amount, goal.target_amount),
        },
        "timeline": {
            "deadline": deadline.date().isoformat() if deadline is not None else None,
            "months_until_deadline": months_left,
            "estimated_months": estimated_months,
            "required_monthly_savings": required_monthly,
        },
        "financial": {
            "monthly_income": total_income,
            "monthly_expenses": overview["total_expenses"],
            "monthly_savings": monthly_savings,
            "savings_rate": overview["savings_rate"],
        },
        "warnings": warnings,
        "recommendations": recommendations,
        "tips": tips,
    }

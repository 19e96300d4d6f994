"""Plain-text summaries of an analysis report for display or an external advisor."""

from __future__ import annotations

import logging

import pandas as pd
from openai import OpenAI, OpenAIError

from categories import ExpenseCategory, parse_expense_category

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"

# (share of spend above which the tip applies, tip)
CATEGORY_TIPS = {
    ExpenseCategory.FOOD_AND_DINING: (20.0, "Consider meal planning and cooking at home to reduce dining expenses."),
    ExpenseCategory.SHOPPING: (15.0, "Try the 24-hour rule: wait a day before making non-essential purchases."),
    ExpenseCategory.ENTERTAINMENT: (10.0, "Look for free or low-cost entertainment alternatives."),
    ExpenseCategory.TRANSPORTATION: (15.0, "Consider carpooling, public transit, or combining trips to save on fuel."),
}
DEFAULT_TIP = "Review this category for potential savings opportunities."

GENERAL_TIPS = [
    "Set a budget for each category and track progress",
    "Look for subscription services you can cancel",
    "Use the 50/30/20 rule: 50% needs, 30% wants, 20% savings",
]


def _rows(section: object, key: str = "") -> list[dict[str, object]]:
    if isinstance(section, dict):
        value = section.get(key) or []
    else:
        value = section or []
    return [row for row in value if isinstance(row, dict)]


def _safe_table(rows: list[dict[str, object]], columns: list[str], limit: int = 10) -> str:
    if not rows:
        return "(none)"
    df = pd.DataFrame(rows)
    subset = [col for col in columns if col in df.columns]
    if not subset:
        return "(none)"
    return df[subset].head(limit).to_string(index=False)


def category_tip(label: str, percentage: float) -> str:
    threshold, tip = CATEGORY_TIPS.get(parse_expense_category(label), (None, DEFAULT_TIP))
    if threshold is not None and percentage > threshold:
        return tip
    return DEFAULT_TIP


def build_offline_brief(report: dict[str, object], top_n: int = 3) -> str:
    """Deterministic text summary of a report."""
    overview = report.get("overview") or {}
    total_spend = float(overview.get("total_expenses", 0.0))
    total_income = float(overview.get("total_income", 0.0))
    net = float(overview.get("net_savings", 0.0))
    savings_rate = float(overview.get("savings_rate", 0.0))

    lines = [
        "Spending Analysis",
        "",
        f"- Total spending: ${total_spend:,.2f}",
        f"- Total income: ${total_income:,.2f}",
        f"- Net savings: ${net:,.2f}",
        f"- Savings rate: {savings_rate:.1f}%",
    ]

    health = report.get("financial_health") or {}
    if health:
        lines.append(f"- Financial health: {health.get('score', 0)}/{health.get('max_score', 100)} ({health.get('rating', '')})")

    categories = _rows(report.get("spending_patterns"), "category_breakdown")[:top_n]
    lines.append("")
    lines.append(f"Top {top_n} spending categories:")
    if categories:
        for idx, row in enumerate(categories, start=1):
            label = str(row.get("category", ""))
            pct = float(row.get("percentage", 0.0))
            lines.append(f"{idx}. {label}: ${float(row.get('total', 0.0)):,.2f} ({pct:.1f}%)")
            lines.append(f"   Tip: {category_tip(label, pct)}")
    else:
        lines.append("- No expenses recorded yet.")

    recommendations = _rows(report.get("recommendations"))
    lines.append("")
    lines.append("Priority actions:")
    if recommendations:
        for row in recommendations[:top_n]:
            savings = float(row.get("potential_savings", 0.0))
            lines.append(f"- [{row.get('priority')}] {row.get('suggestion')} (potential savings ${savings:,.2f})")
    else:
        lines.append("- Continue current spending controls and monitor monthly trends.")

    anomalies = report.get("anomalies") or {}
    if isinstance(anomalies, dict) and anomalies.get("summary"):
        lines.append("")
        lines.append(f"Anomalies: {anomalies['summary']}")

    lines.append("")
    lines.append("General recommendations:")
    lines.extend(f"- {tip}" for tip in GENERAL_TIPS)
    return "\n".join(lines)


def build_insights_prompt(report: dict[str, object], user_goal: str = "") -> str:
    """Build a concise advisor prompt from a report."""
    overview = report.get("overview") or {}
    lines = [
        "You are a financial advisor. Analyze the following spending data and provide specific,",
        "actionable recommendations to reduce spending.",
        "Return sections: Top 3 categories to reduce, Tips per category, Estimated monthly savings, Concerns.",
        "",
        f"User goal: {user_goal.strip() or '(not specified)'}",
        "",
        f"Total spending: ${float(overview.get('total_expenses', 0.0)):,.2f}",
        f"Total income: ${float(overview.get('total_income', 0.0)):,.2f}",
        f"Savings rate: {float(overview.get('savings_rate', 0.0)):.1f}%",
        "",
        "Expenses by category:",
        _safe_table(
            _rows(report.get("spending_patterns"), "category_breakdown"),
            ["category", "total", "count", "percentage", "trend"],
            limit=12,
        ),
        "",
        "Benchmark comparison:",
        _safe_table(
            _rows(report.get("comparative_analysis"), "category_comparisons"),
            ["category", "percentage", "status"],
            limit=12,
        ),
        "",
        "Recommendations:",
        _safe_table(_rows(report.get("recommendations")), ["priority", "category", "issue", "suggestion"], limit=8),
        "",
        "Anomalies:",
        _safe_table(
            _rows(report.get("anomalies"), "anomalies"),
            ["date", "category", "amount", "type", "severity"],
            limit=8,
        ),
        "",
        "Recurring expenses:",
        _safe_table(
            _rows(report.get("behavior_patterns"), "recurring_expenses"),
            ["category", "amount", "frequency", "occurrences"],
            limit=10,
        ),
    ]
    return "\n".join(lines)


def generate_insights(
    report: dict[str, object],
    user_goal: str = "",
    api_key: str = "",
    model: str = DEFAULT_MODEL,
) -> tuple[str, str]:
    """Return (mode, text). Falls back to the offline brief without a key or on API errors."""
    offline = build_offline_brief(report)
    if not api_key.strip():
        return "offline", offline

    prompt = build_insights_prompt(report, user_goal=user_goal)
    try:
        client = OpenAI(api_key=api_key.strip())
        response = client.chat.completions.create(
            model=model,
            temperature=0.25,
            messages=[
                {
                    "role": "system",
                    "content": (
                        "You are a practical personal finance advisor. Give precise actions with numbers "
                        "and no generic advice."
                    ),
                },
                {"role": "user", "content": prompt},
            ],
        )
    except OpenAIError as exc:
        logger.warning("Advisor request failed, using offline brief: %s", exc)
        return "offline", offline

    content = response.choices[0].message.content if response.choices else ""
    content = (content or "").strip()
    if not content:
        return "offline", offline
    return "online", content

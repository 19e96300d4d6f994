"""Category/source enumerations and the rule tables keyed on them."""

from __future__ import annotations

import re
from enum import Enum


class ExpenseCategory(str, Enum):
    FOOD_AND_DINING = "Food & Dining"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    TRANSPORTATION = "Transportation"
    BILLS_AND_UTILITIES = "Bills & Utilities"
    HEALTHCARE = "Healthcare"
    CREDIT_CARD = "Credit Card"
    OTHER = "Other"


class IncomeSource(str, Enum):
    SALARY = "Salary"
    FREELANCE = "Freelance"
    INVESTMENT = "Investment"
    GIFT = "Gift"
    BONUS = "Bonus"
    OTHER = "Other"


EXPENSE_ALIASES = {
    "food & drink": ExpenseCategory.FOOD_AND_DINING,
    "dining": ExpenseCategory.FOOD_AND_DINING,
    "restaurants": ExpenseCategory.FOOD_AND_DINING,
    "transport": ExpenseCategory.TRANSPORTATION,
    "utilities & bills": ExpenseCategory.BILLS_AND_UTILITIES,
    "utilities": ExpenseCategory.BILLS_AND_UTILITIES,
    "bills": ExpenseCategory.BILLS_AND_UTILITIES,
    "health & wellness": ExpenseCategory.HEALTHCARE,
    "health": ExpenseCategory.HEALTHCARE,
    "medical": ExpenseCategory.HEALTHCARE,
    "credit card payment": ExpenseCategory.CREDIT_CARD,
    "credit cards": ExpenseCategory.CREDIT_CARD,
}

INCOME_ALIASES = {
    "wages": IncomeSource.SALARY,
    "paycheck": IncomeSource.SALARY,
    "investments": IncomeSource.INVESTMENT,
    "dividends": IncomeSource.INVESTMENT,
}

# Percent-of-total-spend thresholds per category.
BENCHMARKS: dict[ExpenseCategory, dict[str, float]] = {
    ExpenseCategory.FOOD_AND_DINING: {"ideal": 15.0, "acceptable": 20.0, "warning": 25.0},
    ExpenseCategory.TRANSPORTATION: {"ideal": 10.0, "acceptable": 15.0, "warning": 20.0},
    ExpenseCategory.SHOPPING: {"ideal": 10.0, "acceptable": 15.0, "warning": 20.0},
    ExpenseCategory.ENTERTAINMENT: {"ideal": 5.0, "acceptable": 10.0, "warning": 15.0},
    ExpenseCategory.BILLS_AND_UTILITIES: {"ideal": 20.0, "acceptable": 25.0, "warning": 30.0},
    ExpenseCategory.HEALTHCARE: {"ideal": 5.0, "acceptable": 10.0, "warning": 15.0},
}

# max_pct: share of spend that triggers the rule; savings_fraction: share of the
# category's spend reported as potential savings.
RECOMMENDATION_RULES: dict[ExpenseCategory, dict[str, object]] = {
    ExpenseCategory.FOOD_AND_DINING: {
        "max_pct": 20.0,
        "priority": "high",
        "savings_fraction": 0.30,
        "issue": "{pct:.1f}% of spending on food & dining",
        "suggestion": "Reduce dining out by 50% through meal planning",
    },
    ExpenseCategory.SHOPPING: {
        "max_pct": 15.0,
        "priority": "high",
        "savings_fraction": 0.25,
        "issue": "{pct:.1f}% on shopping",
        "suggestion": "Implement 48-hour rule before non-essential purchases",
    },
    ExpenseCategory.ENTERTAINMENT: {
        "max_pct": 12.0,
        "priority": "medium",
        "savings_fraction": 0.40,
        "issue": "{pct:.1f}% on entertainment",
        "suggestion": "Explore free community events and streaming alternatives",
    },
}

DEBT_CATEGORY = ExpenseCategory.CREDIT_CARD
DEBT_SAVINGS_FRACTION = 0.15

NEEDS_CATEGORIES = frozenset(
    {
        ExpenseCategory.BILLS_AND_UTILITIES,
        ExpenseCategory.HEALTHCARE,
        ExpenseCategory.TRANSPORTATION,
    }
)
WANTS_CATEGORIES = frozenset(
    {
        ExpenseCategory.FOOD_AND_DINING,
        ExpenseCategory.SHOPPING,
        ExpenseCategory.ENTERTAINMENT,
    }
)
IMPULSE_CATEGORIES = frozenset({ExpenseCategory.SHOPPING, ExpenseCategory.ENTERTAINMENT})

PRIORITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}
SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def _normalize_label(label: str) -> str:
    text = re.sub(r"\s+", " ", str(label or "")).strip().casefold()
    return re.sub(r"\band\b", "&", text)


def _lookup(label: str, members: type[Enum], aliases: dict) -> Enum | None:
    key = _normalize_label(label)
    for member in members:
        if _normalize_label(member.value) == key:
            return member
    return aliases.get(key)


def parse_expense_category(label: str) -> ExpenseCategory:
    """Map a free-form category label onto the closed enumeration."""
    return _lookup(label, ExpenseCategory, EXPENSE_ALIASES) or ExpenseCategory.OTHER


def parse_income_source(label: str) -> IncomeSource:
    """Map a free-form income source label onto the closed enumeration."""
    return _lookup(label, IncomeSource, INCOME_ALIASES) or IncomeSource.OTHER


def canonical_label(label: str, members: type[Enum], aliases: dict) -> str:
    """Canonical name for a recognized label, original text otherwise."""
    text = re.sub(r"\s+", " ", str(label or "")).strip()
    member = _lookup(text, members, aliases)
    if member is None:
        return text or members("Other").value
    return member.value

from categories import (
    BENCHMARKS,
    EXPENSE_ALIASES,
    RECOMMENDATION_RULES,
    ExpenseCategory,
    IncomeSource,
    canonical_label,
    parse_expense_category,
    parse_income_source,
)


def test_parse_expense_category_is_case_and_spacing_insensitive() -> None:
    assert parse_expense_category("food and dining") == ExpenseCategory.FOOD_AND_DINING
    assert parse_expense_category("  Credit   Card ") == ExpenseCategory.CREDIT_CARD
    assert parse_expense_category("BILLS & UTILITIES") == ExpenseCategory.BILLS_AND_UTILITIES
    assert parse_expense_category("transport") == ExpenseCategory.TRANSPORTATION


def test_unknown_labels_fall_back_to_other() -> None:
    assert parse_expense_category("Food") == ExpenseCategory.OTHER
    assert parse_expense_category("Pets") == ExpenseCategory.OTHER
    assert parse_expense_category("") == ExpenseCategory.OTHER
    assert parse_income_source("Lottery") == IncomeSource.OTHER


def test_parse_income_source_uses_aliases() -> None:
    assert parse_income_source("paycheck") == IncomeSource.SALARY
    assert parse_income_source("Dividends") == IncomeSource.INVESTMENT
    assert parse_income_source("freelance") == IncomeSource.FREELANCE


def test_canonical_label_rewrites_known_and_keeps_unknown() -> None:
    assert canonical_label("bills and utilities", ExpenseCategory, EXPENSE_ALIASES) == "Bills & Utilities"
    assert canonical_label("Groceries ", ExpenseCategory, EXPENSE_ALIASES) == "Groceries"
    assert canonical_label("", ExpenseCategory, EXPENSE_ALIASES) == "Other"


def test_rule_tables_key_on_enum_members() -> None:
    assert all(isinstance(key, ExpenseCategory) for key in BENCHMARKS)
    assert all(isinstance(key, ExpenseCategory) for key in RECOMMENDATION_RULES)
    for thresholds in BENCHMARKS.values():
        assert thresholds["ideal"] < thresholds["acceptable"] < thresholds["warning"]

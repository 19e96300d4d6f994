"""Transaction record loading and normalization helpers."""

from __future__ import annotations

import datetime
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from categories import (
    EXPENSE_ALIASES,
    INCOME_ALIASES,
    ExpenseCategory,
    IncomeSource,
    canonical_label,
    parse_expense_category,
    parse_income_source,
)

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".json")

EXPENSE_COLUMNS = ["Date", "Month", "Amount", "Category", "CategoryKind", "Description"]
INCOME_COLUMNS = ["Date", "Month", "Amount", "Source", "SourceKind", "Currency", "Description"]


@dataclass(frozen=True)
class Transaction:
    """A single expense or income entry as handed over by the caller."""

    amount: float
    label: str
    date: datetime.date | str
    description: str = ""
    currency: str | None = None


def _field(record: Any, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if isinstance(record, dict):
            value = record.get(key)
        else:
            value = getattr(record, key, None)
        if value is not None:
            return value
    return default


def to_day(value: Any) -> pd.Timestamp:
    """Parse an ISO date (or date/datetime) to a naive midnight timestamp."""
    stamp = pd.Timestamp(value)
    if stamp.tzinfo is not None:
        stamp = stamp.tz_localize(None)
    return stamp.normalize()


def month_key(value: Any) -> str:
    """Return the YYYY-MM grouping key of a date."""
    stamp = to_day(value)
    return f"{stamp.year}-{stamp.month:02d}"


def _finish_frame(rows: list[dict[str, object]], columns: list[str]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=columns)
    df["Date"] = pd.to_datetime(df["Date"])
    df["Month"] = df["Date"].dt.to_period("M").astype(str)
    df["Amount"] = df["Amount"].astype(float)
    return df.reset_index(drop=True)


def load_expenses(records: Iterable[Any] | None) -> pd.DataFrame:
    """Normalize expense records (mappings or Transaction objects) into a frame."""
    rows: list[dict[str, object]] = []
    for record in records or []:
        label = canonical_label(
            _field(record, "category", "label", default=""), ExpenseCategory, EXPENSE_ALIASES
        )
        rows.append(
            {
                "Date": to_day(_field(record, "date")),
                "Month": "",
                "Amount": float(_field(record, "amount", default=0.0)),
                "Category": label,
                "CategoryKind": parse_expense_category(label),
                "Description": str(_field(record, "description", default="")),
            }
        )
    return _finish_frame(rows, EXPENSE_COLUMNS)


def load_income(records: Iterable[Any] | None) -> pd.DataFrame:
    """Normalize income records into a frame; currency is carried, never converted."""
    rows: list[dict[str, object]] = []
    for record in records or []:
        label = canonical_label(
            _field(record, "source", "label", default=""), IncomeSource, INCOME_ALIASES
        )
        rows.append(
            {
                "Date": to_day(_field(record, "date")),
                "Month": "",
                "Amount": float(_field(record, "amount", default=0.0)),
                "Source": label,
                "SourceKind": parse_income_source(label),
                "Currency": _field(record, "currency"),
                "Description": str(_field(record, "description", default="")),
            }
        )
    return _finish_frame(rows, INCOME_COLUMNS)


def _records_from_csv(path: Path, label_key: str) -> list[dict[str, object]]:
    raw = pd.read_csv(path, dtype=str, keep_default_na=False)
    raw.columns = [str(col).strip().lower() for col in raw.columns]
    records: list[dict[str, object]] = []
    skipped = 0
    for row in raw.to_dict("records"):
        amount = str(row.get("amount", "")).strip()
        label = str(row.get(label_key, "")).strip()
        date = str(row.get("date", "")).strip()
        if not (amount and label and date):
            skipped += 1
            continue
        record: dict[str, object] = {
            "amount": float(amount),
            label_key: label,
            "date": date,
            "description": str(row.get("description", "")).strip(),
        }
        if str(row.get("currency", "")).strip():
            record["currency"] = str(row["currency"]).strip()
        records.append(record)
    if skipped:
        logger.debug("Skipped %d incomplete row(s) in %s", skipped, path)
    return records


def load_transaction_file(path: str, label_key: str = "category") -> list[dict[str, object]]:
    """Read expense/income records from a CSV export or a JSON list."""
    target = Path(path).expanduser()
    suffix = target.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ValueError(
            f"Unsupported file type: {target.name or '<unknown>'}. Supported: csv, json."
        )
    if not target.exists():
        raise FileNotFoundError(f"File does not exist: {target}")

    if suffix == ".csv":
        return _records_from_csv(target, label_key)

    payload = json.loads(target.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON list of records in {target}")
    return [dict(item) for item in payload if isinstance(item, dict)]

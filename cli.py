"""Command line entry point: analyze expense/income files and print the report."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from insights import DEFAULT_MODEL, generate_insights
from report import analyze_financial_data
from transactions import load_transaction_file, to_day

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyze expense and income records and print a financial report.")
    parser.add_argument(
        "--expenses",
        required=True,
        help="CSV or JSON file with amount, category and date per expense.",
    )
    parser.add_argument(
        "--income",
        default="",
        help="CSV or JSON file with amount, source and date per income entry.",
    )
    parser.add_argument(
        "--now",
        default="",
        help="Analysis date (YYYY-MM-DD). Defaults to today.",
    )
    parser.add_argument(
        "--output",
        default="",
        help="Write the result to this file instead of stdout.",
    )
    parser.add_argument(
        "--brief",
        action="store_true",
        help="Print a plain-text summary instead of the JSON report.",
    )
    parser.add_argument(
        "--goal-file",
        default="",
        help="JSON file with a savings goal (target_amount, current_amount, deadline, category).",
    )
    parser.add_argument(
        "--goal",
        default="",
        help="Free-text goal passed to the advisor with --brief.",
    )
    parser.add_argument(
        "--api-key",
        default=os.environ.get("OPENAI_API_KEY", ""),
        help="OpenAI API key for an advisor brief. Without one the offline brief is printed.",
    )
    parser.add_argument(
        "--model",
        default=DEFAULT_MODEL,
        help="Model used for the advisor brief.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level)), format="%(levelname)s %(name)s: %(message)s")

    expenses = load_transaction_file(str(args.expenses), label_key="category")
    income = load_transaction_file(str(args.income), label_key="source") if args.income else []
    now = to_day(args.now) if args.now else None
    goal = json.loads(Path(str(args.goal_file)).expanduser().read_text(encoding="utf-8")) if args.goal_file else None

    report = analyze_financial_data(expenses, income, now=now, goal=goal)
    if args.brief:
        mode, text = generate_insights(
            report, user_goal=str(args.goal), api_key=str(args.api_key), model=str(args.model)
        )
        logger.info("Brief mode: %s", mode)
    else:
        text = json.dumps(report, indent=2)

    if args.output:
        target = Path(str(args.output)).expanduser()
        target.write_text(text + "\n", encoding="utf-8")
        logger.info("Report written to %s", target)
        return
    print(text)


if __name__ == "__main__":
    main()

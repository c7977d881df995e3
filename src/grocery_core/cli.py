"""Command line entry point: clean a grocery sales dataset and print its KPI views.

Usage
-----
Basic (all views, marts written under ./data):
    grocery-report -i blinkit_grocery_data.csv

Selected views, rebuilding every stage:
    grocery-report -i data.xlsx --view sales_by_item_type --view outlet_type_scorecard --force

With QA checks:
    grocery-report -i blinkit_grocery_data.csv --qa --verbose

Exit codes:
    0 on success
    1 when --qa finds view invariant errors
    2 on unreadable input, schema or argument errors
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from grocery_core.config import DataPaths
from grocery_core.exceptions import GroceryCoreError
from grocery_core.formatters.console import format_kpis_for_console, format_views_for_console
from grocery_core.qa import check_view_invariants, run_sales_qa
from grocery_core.sales import core, marts
from grocery_core.sales.aggregate import VIEWS, compute_kpis
from grocery_core.sales.raw import dataset_name

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="grocery-report",
        description=(
            "Normalize a grocery sales dataset (item fat content labels) and report "
            "total/average sales, ratings and sales breakdowns by item and outlet."
        ),
    )
    p.add_argument(
        "-i",
        "--input",
        required=True,
        help="Dataset file (CSV or Excel).",
    )
    p.add_argument(
        "--data-root",
        default="data",
        help="Root directory for the clean and mart layers (default: data).",
    )
    p.add_argument(
        "--view",
        action="append",
        choices=list(VIEWS),
        dest="views",
        help="View to report; repeat for several. Default: all views.",
    )
    p.add_argument(
        "--force",
        action="store_true",
        help="Rebuild the clean fact and marts even if they are current.",
    )
    p.add_argument(
        "--qa",
        action="store_true",
        help="Run record QA and cross-check the views.",
    )
    p.add_argument(
        "--verbose",
        "--debug",
        action="store_true",
        dest="verbose",
        help="Verbose/debug logging output.",
    )
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
    )

    paths = DataPaths.from_root(args.data_root)
    mode = "force" if args.force else "missing"
    views = args.views or list(VIEWS)

    try:
        results = marts.fetch_many(paths, args.input, views, mode=mode)
        records = core.load(paths, args.input)
    except (GroceryCoreError, FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    logger.info("Dataset %s: %d records", dataset_name(args.input), len(records))

    print(format_kpis_for_console(compute_kpis(records)))
    print()
    print(format_views_for_console(results))

    if args.qa:
        qa = run_sales_qa(records)
        print("QA summary:")
        for key, value in qa.summary.items():
            print(f"  {key}: {value}")

        problems = check_view_invariants(records, results)
        for problem in problems:
            print(f"  [{problem.level}] {problem.message}")
        if any(p.level == "ERROR" for p in problems):
            return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""QA module for data quality assurance.

This module provides quality assurance checks for grocery sales data.

Example:
    >>> from grocery_core.sales import compute_views, prepare_records
    >>> from grocery_core.sales.raw import read_sales_file
    >>> from grocery_core.qa import check_view_invariants, run_sales_qa
    >>>
    >>> records = prepare_records(read_sales_file("blinkit_grocery_data.csv"))
    >>> result = run_sales_qa(records)
    >>> print(result.summary)
    >>> problems = check_view_invariants(records, compute_views(records))
"""

from grocery_core.qa.api import SalesQAResult, check_view_invariants, run_sales_qa
from grocery_core.qa.checks import QAResult

__all__ = ["QAResult", "SalesQAResult", "check_view_invariants", "run_sales_qa"]

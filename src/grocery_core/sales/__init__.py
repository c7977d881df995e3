"""Sales domain module.

This module provides functions to load grocery sales data at different grains:

- **fact_sales_record** (grain="record"): Core fact. One row per item-outlet
  record, with ``item_fat_content`` normalized to "Low Fat" / "Regular".

- **marts** (grain=<view name>): One table per reporting view, computed by
  ``sales.aggregate`` (total sales, sales by item type, outlet-size share,
  fat content by location tier, outlet-type scorecard, ...).

Example:
    >>> from grocery_core import DataPaths
    >>> from grocery_core.sales import get_sales
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> source = "data/a_raw/sales/blinkit_grocery_data.csv"
    >>>
    >>> records = get_sales(paths, source)
    >>> by_type = get_sales(paths, source, grain="sales_by_item_type")
"""

from grocery_core.sales.aggregate import VIEWS, SalesKPIs, compute_kpis, compute_views
from grocery_core.sales.api import get_sales
from grocery_core.sales.transform import normalize_fat_content, prepare_records

__all__ = [
    "SalesKPIs",
    "VIEWS",
    "compute_kpis",
    "compute_views",
    "get_sales",
    "normalize_fat_content",
    "prepare_records",
]

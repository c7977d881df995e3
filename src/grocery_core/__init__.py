"""Grocery Core - cleaning and KPI marts for grocery sales data.

This package turns a static grocery sales dataset (one row per
item-outlet combination) into a small set of reporting tables, using the
same layered layout for every stage:

- **Bronze (raw)**: the dataset file as delivered (CSV or Excel)
- **Silver (core fact)**: fact_sales_record, with fat content labels
  normalized to "Low Fat" / "Regular"
- **Gold (marts)**: one table per reporting view

Module Structure:
    grocery_core.sales: Record store, normalizer, aggregation views, marts
    grocery_core.qa: Record and view quality checks
    grocery_core.formatters: Console report rendering
    grocery_core.config: DataPaths configuration

Quick Start:
    >>> from grocery_core import DataPaths
    >>> from grocery_core.sales import get_sales
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> records = get_sales(paths, "blinkit_grocery_data.csv")
    >>> shares = get_sales(paths, "blinkit_grocery_data.csv", grain="sales_share_by_outlet_size")
    >>> print(shares)

Grain Reference:
    - core: fact_sales_record - item x outlet
    - marts: one row per group of the view's dimension (single row for KPIs)
"""

__version__ = "0.1.0"

from grocery_core.config import DataPaths
from grocery_core.exceptions import ConfigError, DataQualityError, ETLError, GroceryCoreError

__all__ = [
    "ConfigError",
    "DataPaths",
    "DataQualityError",
    "ETLError",
    "GroceryCoreError",
    "__version__",
]

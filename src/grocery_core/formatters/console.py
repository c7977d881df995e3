"""Console output formatting utilities."""

from __future__ import annotations

import re
from typing import Iterable

import pandas as pd

from grocery_core.sales.aggregate import SalesKPIs

VIEW_TITLES = {
    "total_sales": "Total Sales",
    "average_sales": "Average Sales",
    "record_count": "Number of Items",
    "average_rating": "Average Rating",
    "sales_by_fat_content": "Total Sales by Item Fat Content",
    "sales_by_item_type": "Total Sales by Item Type",
    "fat_content_by_location": "Fat Content Sales by Outlet Location Type",
    "sales_by_establishment_year": "Total Sales by Outlet Establishment Year",
    "sales_share_by_outlet_size": "Percentage of Sales by Outlet Size",
    "sales_by_location": "Sales by Outlet Location Type",
    "outlet_type_scorecard": "All Metrics by Outlet Type",
}


def sanitize_for_console(text: str) -> str:
    """Strip non-ASCII characters so the report prints on cp1252 consoles."""
    return re.sub(r"[^\x00-\x7F]+", "", text)


# Columns a view rounds to whole numbers; every other float column has 2 decimals
WHOLE_NUMBER_COLUMNS = {
    "average_rating": {"avg_rating"},
    "outlet_type_scorecard": {"avg_sales"},
}


def _format_value(value: object, places: int = 2) -> str:
    if value is None or value is pd.NA or (isinstance(value, float) and pd.isna(value)):
        return "-"
    if isinstance(value, float):
        return f"{value:,.{places}f}"
    return str(value)


def format_table(df: pd.DataFrame, whole_numbers: Iterable[str] = ()) -> str:
    """Render a view as a plain-text table with right-aligned numbers.

    Float columns show 2 decimals, except those named in ``whole_numbers``.
    """
    if df.empty:
        return "(no rows)"

    headers = [str(c) for c in df.columns]
    whole = set(whole_numbers)
    places = [0 if c in whole else 2 for c in headers]
    rows = [
        [_format_value(v, p) for v, p in zip(row, places)]
        for row in df.itertuples(index=False)
    ]
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers)]
    numeric = [pd.api.types.is_numeric_dtype(df[c]) for c in df.columns]

    def _line(cells: list[str]) -> str:
        parts = [
            c.rjust(w) if is_num else c.ljust(w) for c, w, is_num in zip(cells, widths, numeric)
        ]
        return "  ".join(parts).rstrip()

    lines = [_line(headers), "  ".join("-" * w for w in widths)]
    lines.extend(_line(r) for r in rows)
    return "\n".join(lines)


def format_views_for_console(views: dict[str, pd.DataFrame]) -> str:
    """Build a human-readable report of the computed views.

    Args:
        views: Mapping of view name to DataFrame, as returned by
            ``sales.aggregate.compute_views``.

    Returns:
        Report text, one titled table per view.
    """
    if not views:
        return "No views computed."

    lines = []
    for name, df in views.items():
        title = VIEW_TITLES.get(name, name)
        lines.append(title)
        lines.append("=" * len(title))
        lines.append(format_table(df, WHOLE_NUMBER_COLUMNS.get(name, ())))
        lines.append("")

    return sanitize_for_console("\n".join(lines).rstrip() + "\n")


def format_kpis_for_console(kpis: SalesKPIs) -> str:
    """One-paragraph summary of the headline KPIs."""
    lines = [
        "Sales KPIs",
        "=" * 60,
        f"  Total sales:     {kpis.total_sales:,.2f} ({kpis.total_sales_millions:.2f} M)",
        f"  Average sales:   {_format_value(kpis.avg_sales)}",
        f"  Number of items: {kpis.no_of_items:,}",
        f"  Average rating:  {_format_value(kpis.avg_rating, 0)}",
    ]
    return "\n".join(lines)

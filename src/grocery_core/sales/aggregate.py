"""Gold layer: aggregate fact_sales_record into the reporting views.

Every function takes records whose fat content is already normalized
(see ``transform.normalize_fat_content``) and returns a new DataFrame.
Grouped views keep missing keys as a group of their own and skip missing
measure values, so a null ``outlet_size`` shows up as its own row and a
null ``rating`` does not count towards a mean.

Views:
    total_sales, average_sales, record_count, average_rating
        Single-row KPIs.
    sales_by_fat_content, sales_by_item_type, sales_by_establishment_year,
    sales_by_location
        Sum of total_sales per group.
    fat_content_by_location
        Location tier x fat content pivot; absent combinations are 0.
    sales_share_by_outlet_size
        Sum per outlet size and its share of the grand total.
    outlet_type_scorecard
        Five measures per outlet type.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable, Iterable, Sequence

import numpy as np
import pandas as pd

from grocery_core.sales.schema import CANONICAL_FAT_CONTENT, require_columns
from grocery_core.utils import round_half_up, round_series

logger = logging.getLogger(__name__)

SALES = "total_sales"


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _group_sum(df: pd.DataFrame, key: str) -> pd.DataFrame:
    """Unrounded sum of total_sales per ``key``, missing keys kept."""
    require_columns(df, [key, SALES])
    return df.groupby(key, dropna=False, sort=False)[SALES].sum().reset_index()


def _order_by_key(df: pd.DataFrame, key: str) -> pd.DataFrame:
    return df.sort_values(key, na_position="last", kind="mergesort").reset_index(drop=True)


def _order_by_value_desc(df: pd.DataFrame, key: str, value: str) -> pd.DataFrame:
    # key ascending first, then a stable sort on the value breaks ties by key
    out = df.sort_values(key, na_position="last", kind="mergesort")
    return out.sort_values(value, ascending=False, kind="mergesort").reset_index(drop=True)


def pivot_column_name(category: str) -> str:
    """Column label for a pivot category, e.g. ``Low Fat`` -> ``Low_Fat``."""
    return str(category).replace(" ", "_")


def conditional_sum_pivot(
    df: pd.DataFrame,
    index: str,
    columns: str,
    values: str,
    categories: Iterable[str],
) -> pd.DataFrame:
    """Group by ``index`` and sum ``values`` separately for each category of ``columns``.

    Every distinct ``index`` value (missing included) gets exactly one row
    and every requested category gets a column, even when no record has
    that combination; such cells are 0, never NaN. Records whose
    ``columns`` value is not in ``categories`` still create their index
    row but contribute to no column.

    Args:
        df: Records.
        index: Row dimension.
        columns: Column dimension.
        values: Measure to sum.
        categories: Column dimension values to report, in column order.

    Returns:
        DataFrame with ``index`` as a column followed by one column per
        category (named with :func:`pivot_column_name`), rows in first-seen
        order of ``index``.

    Examples:
        >>> df = pd.DataFrame({
        ...     "tier": ["Tier 1", "Tier 1", "Tier 2"],
        ...     "fat": ["Low Fat", "Regular", "Low Fat"],
        ...     "sales": [10.0, 5.0, 7.0],
        ... })
        >>> conditional_sum_pivot(df, "tier", "fat", "sales", ["Low Fat", "Regular"])
             tier  Low_Fat  Regular
        0  Tier 1     10.0      5.0
        1  Tier 2      7.0      0.0
    """
    require_columns(df, [index, columns, values])
    categories = list(categories)

    parts = pd.DataFrame({index: df[index]})
    for category in categories:
        parts[pivot_column_name(category)] = df[values].where(df[columns] == category)

    value_cols = [pivot_column_name(c) for c in categories]
    out = parts.groupby(index, dropna=False, sort=False)[value_cols].sum(min_count=0)
    return out.reset_index()


def pivot_to_mapping(pivot: pd.DataFrame, index: str) -> dict:
    """Turn a :func:`conditional_sum_pivot` frame into ``{row: {column: value}}``."""
    records = pivot.set_index(index).to_dict(orient="index")
    return {key: dict(values) for key, values in records.items()}


# --------------------------------------------------------------------------- #
# Ungrouped KPIs
# --------------------------------------------------------------------------- #


def total_sales(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales, also expressed in millions (2 decimals)."""
    require_columns(df, [SALES])
    total = float(df[SALES].sum())
    return pd.DataFrame(
        {
            "total_sales": [total],
            "total_sales_millions": [round_half_up(total / 1_000_000, 2)],
        }
    )


def average_sales(df: pd.DataFrame) -> pd.DataFrame:
    """Mean total_sales per record (2 decimals)."""
    require_columns(df, [SALES])
    return pd.DataFrame({"avg_sales": [round_half_up(df[SALES].mean(), 2)]})


def record_count(df: pd.DataFrame) -> pd.DataFrame:
    """Number of item-outlet records."""
    return pd.DataFrame({"no_of_items": [int(len(df))]})


def average_rating(df: pd.DataFrame) -> pd.DataFrame:
    """Mean rating rounded to a whole number."""
    require_columns(df, ["rating"])
    return pd.DataFrame({"avg_rating": [round_half_up(df["rating"].mean(), 0)]})


# --------------------------------------------------------------------------- #
# Grouped views
# --------------------------------------------------------------------------- #


def sales_by_fat_content(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales per fat content label, ordered by label."""
    out = _group_sum(df, "item_fat_content")
    out[SALES] = round_series(out[SALES], 2)
    return _order_by_key(out, "item_fat_content")


def sales_by_item_type(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales per item type, highest first."""
    out = _group_sum(df, "item_type")
    out[SALES] = round_series(out[SALES], 2)
    return _order_by_value_desc(out, "item_type", SALES)


def fat_content_by_location(
    df: pd.DataFrame,
    categories: Sequence[str] = CANONICAL_FAT_CONTENT,
) -> pd.DataFrame:
    """Sales per location tier split into one column per fat content label.

    One row per distinct ``outlet_location_type``; a tier with no sales
    for a label reports 0 in that column. Ordered by tier.
    """
    out = conditional_sum_pivot(
        df,
        index="outlet_location_type",
        columns="item_fat_content",
        values=SALES,
        categories=categories,
    )
    for category in categories:
        col = pivot_column_name(category)
        out[col] = round_series(out[col], 2)
    return _order_by_key(out, "outlet_location_type")


def sales_by_establishment_year(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales per outlet establishment year, oldest first."""
    out = _group_sum(df, "outlet_establishment_year")
    out[SALES] = round_series(out[SALES], 2)
    return _order_by_key(out, "outlet_establishment_year")


def sales_share_by_outlet_size(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales per outlet size and its percentage of all sales.

    Two passes: group sums first, then each sum divided by the total of
    those same sums, so the shares always add up to 100 (before rounding).
    An empty input gives an empty frame. If the grand total is 0 the
    shares are NaN.
    """
    sums = _group_sum(df, "outlet_size")
    grand_total = float(sums[SALES].sum())

    if sums.empty:
        shares = pd.Series([], dtype="float64")
    elif grand_total == 0:
        logger.warning("Outlet size share: grand total is 0, percentages left empty")
        shares = pd.Series(np.nan, index=sums.index)
    else:
        shares = sums[SALES] * 100.0 / grand_total

    out = pd.DataFrame(
        {
            "outlet_size": sums["outlet_size"],
            SALES: round_series(sums[SALES], 2),
            "sales_percentage": round_series(shares, 2),
        }
    )
    return _order_by_value_desc(out, "outlet_size", SALES)


def sales_by_location(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales per outlet location tier, highest first."""
    out = _group_sum(df, "outlet_location_type")
    out[SALES] = round_series(out[SALES], 2)
    return _order_by_value_desc(out, "outlet_location_type", SALES)


def outlet_type_scorecard(df: pd.DataFrame) -> pd.DataFrame:
    """Total sales, average sales, item count, average rating and visibility per outlet type.

    Rounding: total 2 decimals, average sales whole number, rating and
    visibility 2 decimals. ``no_of_items`` counts records, including
    those with a missing measure. Highest total first.
    """
    require_columns(df, ["outlet_type", SALES, "rating", "item_visibility"])
    grouped = df.groupby("outlet_type", dropna=False, sort=False)
    out = grouped.agg(
        total_sales=(SALES, "sum"),
        avg_sales=(SALES, "mean"),
        no_of_items=(SALES, "size"),
        avg_rating=("rating", "mean"),
        item_visibility=("item_visibility", "mean"),
    ).reset_index()

    out["total_sales"] = round_series(out["total_sales"], 2)
    out["avg_sales"] = round_series(out["avg_sales"], 0)
    out["no_of_items"] = out["no_of_items"].astype("int64")
    out["avg_rating"] = round_series(out["avg_rating"], 2)
    out["item_visibility"] = round_series(out["item_visibility"], 2)
    return _order_by_value_desc(out, "outlet_type", "total_sales")


# --------------------------------------------------------------------------- #
# Registry
# --------------------------------------------------------------------------- #

VIEWS: dict[str, Callable[[pd.DataFrame], pd.DataFrame]] = {
    "total_sales": total_sales,
    "average_sales": average_sales,
    "record_count": record_count,
    "average_rating": average_rating,
    "sales_by_fat_content": sales_by_fat_content,
    "sales_by_item_type": sales_by_item_type,
    "fat_content_by_location": fat_content_by_location,
    "sales_by_establishment_year": sales_by_establishment_year,
    "sales_share_by_outlet_size": sales_share_by_outlet_size,
    "sales_by_location": sales_by_location,
    "outlet_type_scorecard": outlet_type_scorecard,
}


def compute_views(
    df: pd.DataFrame,
    views: Iterable[str] | None = None,
) -> dict[str, pd.DataFrame]:
    """Compute the requested views (all of them by default).

    Args:
        df: Normalized records.
        views: View names from VIEWS. Order of the result follows VIEWS.

    Returns:
        Mapping of view name to result DataFrame.

    Raises:
        ValueError: If an unknown view name is requested.
    """
    requested = list(VIEWS) if views is None else list(views)
    unknown = [v for v in requested if v not in VIEWS]
    if unknown:
        raise ValueError(f"Unknown view(s) {unknown}. Must be one of {list(VIEWS)}.")

    results = {}
    for name in VIEWS:
        if name in requested:
            results[name] = VIEWS[name](df)
            logger.debug("Computed view %s: %d row(s)", name, len(results[name]))
    return results


@dataclass
class SalesKPIs:
    """Headline KPIs of a sales dataset.

    Attributes:
        total_sales: Sum of total_sales (unrounded).
        total_sales_millions: total_sales / 1,000,000, 2 decimals.
        avg_sales: Mean total_sales, 2 decimals.
        no_of_items: Number of records.
        avg_rating: Mean rating, whole number.
    """

    total_sales: float
    total_sales_millions: float
    avg_sales: float
    no_of_items: int
    avg_rating: float

    def to_dict(self) -> dict:
        return asdict(self)


def compute_kpis(df: pd.DataFrame) -> SalesKPIs:
    """Compute the four ungrouped KPI views as one object."""
    totals = total_sales(df).iloc[0]
    return SalesKPIs(
        total_sales=float(totals["total_sales"]),
        total_sales_millions=float(totals["total_sales_millions"]),
        avg_sales=float(average_sales(df).iloc[0]["avg_sales"]),
        no_of_items=int(record_count(df).iloc[0]["no_of_items"]),
        avg_rating=float(average_rating(df).iloc[0]["avg_rating"]),
    )

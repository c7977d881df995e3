"""QA checks for the sales record store and its reporting views.

Record checks report what a reviewer of the dataset wants to know before
trusting the numbers (nulls, leftover fat content labels, negative sales,
ratings off the 0-5 scale, duplicate item-outlet pairs). Nothing here
changes or drops a record.

View checks verify that the computed views agree with each other:

- every exhaustive group-by view sums back to the ungrouped total
- outlet-size shares add up to 100
- the fat content pivot has one complete row per location tier
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from grocery_core.sales.aggregate import SALES, pivot_column_name
from grocery_core.sales.schema import CANONICAL_FAT_CONTENT, RECORD_COLUMNS

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = RECORD_COLUMNS

RATING_RANGE = (0.0, 5.0)

RECORD_KEY = ["item_identifier", "outlet_identifier"]

# Views whose rows partition every record, with the column holding the sum
EXHAUSTIVE_VIEWS = {
    "sales_by_fat_content": "total_sales",
    "sales_by_item_type": "total_sales",
    "sales_by_establishment_year": "total_sales",
    "sales_share_by_outlet_size": "total_sales",
    "sales_by_location": "total_sales",
    "outlet_type_scorecard": "total_sales",
}

# Half a cent per rounded group sum
ROUNDING_TOLERANCE = 0.005


@dataclass
class QAResult:
    """Represents a single QA check result.

    Attributes:
        level: Severity level, either "ERROR" or "WARN".
        message: Human-readable message describing the issue.

    Examples:
        >>> result = QAResult("ERROR", "Shares add up to 99.5")
        >>> result.level
        'ERROR'
    """

    level: str  # "ERROR" or "WARN"
    message: str


# --------------------------------------------------------------------------- #
# Record checks
# --------------------------------------------------------------------------- #


def null_counts(df: pd.DataFrame) -> dict[str, int]:
    """Missing values per record column (only columns with at least one)."""
    counts = df[REQUIRED_COLUMNS].isna().sum()
    return {col: int(n) for col, n in counts.items() if n > 0}


def detect_unrecognized_fat_content(df: pd.DataFrame) -> pd.DataFrame:
    """Rows per fat content label outside "Low Fat" / "Regular"."""
    labels = df["item_fat_content"]
    mask = labels.notna() & ~labels.isin(CANONICAL_FAT_CONTENT)
    out = labels[mask].value_counts().rename_axis("item_fat_content").reset_index(name="rows")
    return out.sort_values("item_fat_content").reset_index(drop=True)


def detect_negative_sales(df: pd.DataFrame) -> pd.DataFrame:
    """Records with a negative total_sales."""
    return df[df[SALES] < 0]


def detect_rating_out_of_range(df: pd.DataFrame) -> pd.DataFrame:
    """Records whose rating falls outside RATING_RANGE (missing ratings ignored)."""
    low, high = RATING_RANGE
    rating = df["rating"]
    return df[rating.notna() & ((rating < low) | (rating > high))]


def detect_duplicate_records(df: pd.DataFrame) -> pd.DataFrame:
    """Records sharing an (item_identifier, outlet_identifier) pair."""
    dupes = df.duplicated(subset=RECORD_KEY, keep=False)
    return df[dupes].sort_values(RECORD_KEY)


# --------------------------------------------------------------------------- #
# View checks
# --------------------------------------------------------------------------- #


def check_sum_conservation(
    records: pd.DataFrame,
    views: dict[str, pd.DataFrame],
) -> list[QAResult]:
    """Each exhaustive group-by view must sum to the ungrouped total."""
    results: list[QAResult] = []
    grand_total = float(records[SALES].sum())

    for name, column in EXHAUSTIVE_VIEWS.items():
        view = views.get(name)
        if view is None:
            continue
        view_total = float(view[column].sum())
        tolerance = ROUNDING_TOLERANCE * max(len(view), 1)
        if abs(view_total - grand_total) > tolerance:
            results.append(
                QAResult(
                    "ERROR",
                    f"{name}: groups sum to {view_total:,.2f}, "
                    f"total sales is {grand_total:,.2f}",
                )
            )

    pivot = views.get("fat_content_by_location")
    if pivot is not None:
        canonical_total = float(
            records.loc[records["item_fat_content"].isin(CANONICAL_FAT_CONTENT), SALES].sum()
        )
        cols = [pivot_column_name(c) for c in CANONICAL_FAT_CONTENT]
        cols = [c for c in cols if c in pivot.columns]
        pivot_total = float(pivot[cols].to_numpy().sum())
        tolerance = ROUNDING_TOLERANCE * max(pivot[cols].size, 1)
        if abs(pivot_total - canonical_total) > tolerance:
            results.append(
                QAResult(
                    "ERROR",
                    f"fat_content_by_location: cells sum to {pivot_total:,.2f}, "
                    f"Low Fat + Regular sales is {canonical_total:,.2f}",
                )
            )

    return results


def check_share_total(views: dict[str, pd.DataFrame]) -> list[QAResult]:
    """Outlet-size percentages must add up to 100 within rounding."""
    view = views.get("sales_share_by_outlet_size")
    if view is None or view.empty:
        return []

    shares = view["sales_percentage"]
    if shares.isna().all():
        return [QAResult("WARN", "sales_share_by_outlet_size: no percentages (total sales is 0)")]

    total = float(shares.sum())
    tolerance = 0.01 * len(view)
    if abs(total - 100.0) > tolerance:
        return [
            QAResult(
                "ERROR",
                f"sales_share_by_outlet_size: percentages add up to {total:.2f}, expected 100",
            )
        ]
    return []


def check_pivot_completeness(
    records: pd.DataFrame,
    views: dict[str, pd.DataFrame],
) -> list[QAResult]:
    """One row per location tier present in the records, no null cells."""
    pivot = views.get("fat_content_by_location")
    if pivot is None:
        return []

    results: list[QAResult] = []
    key = "outlet_location_type"
    expected = records[key].nunique(dropna=False)
    if len(pivot) != expected or pivot[key].duplicated().any():
        results.append(
            QAResult(
                "ERROR",
                f"fat_content_by_location: {len(pivot)} row(s) for {expected} location tier(s)",
            )
        )

    for category in CANONICAL_FAT_CONTENT:
        col = pivot_column_name(category)
        if col not in pivot.columns:
            results.append(QAResult("ERROR", f"fat_content_by_location: missing column {col}"))
        elif pivot[col].isna().any():
            results.append(QAResult("ERROR", f"fat_content_by_location: null values in {col}"))

    return results

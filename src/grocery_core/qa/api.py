"""Public API for the sales QA pipeline.

This module runs QA checks on sales records and views in memory, without
reading or writing files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from grocery_core.exceptions import DataQualityError
from grocery_core.qa.checks import (
    REQUIRED_COLUMNS,
    QAResult,
    check_pivot_completeness,
    check_share_total,
    check_sum_conservation,
    detect_duplicate_records,
    detect_negative_sales,
    detect_rating_out_of_range,
    detect_unrecognized_fat_content,
    null_counts,
)

logger = logging.getLogger(__name__)


@dataclass
class SalesQAResult:
    """Result of the sales QA pipeline.

    Attributes:
        summary: Dictionary with summary statistics and counts.
        unrecognized_fat_content: Labels outside "Low Fat" / "Regular" with
            their row counts, or None if none found.
        negative_sales: Records with negative total_sales, or None.
        rating_out_of_range: Records with a rating outside 0-5, or None.
        duplicate_records: Records sharing an item-outlet pair, or None.
    """

    summary: dict
    unrecognized_fat_content: pd.DataFrame | None
    negative_sales: pd.DataFrame | None
    rating_out_of_range: pd.DataFrame | None
    duplicate_records: pd.DataFrame | None

    @property
    def has_issues(self) -> bool:
        return any(
            frame is not None
            for frame in (
                self.unrecognized_fat_content,
                self.negative_sales,
                self.rating_out_of_range,
                self.duplicate_records,
            )
        )


def _none_if_empty(df: pd.DataFrame) -> pd.DataFrame | None:
    return None if df.empty else df


def run_sales_qa(records: pd.DataFrame) -> SalesQAResult:
    """Run record-level QA checks on normalized sales records.

    This function:
    - does NOT read or write any files,
    - does NOT modify or drop records,
    - MAY log progress via the logging module.

    Args:
        records: fact_sales_record rows (output of ``prepare_records`` or
            ``sales.core.fetch``).

    Returns:
        SalesQAResult with a summary and the offending rows per check.

    Raises:
        DataQualityError: If required columns are missing.
    """
    missing_cols = [col for col in REQUIRED_COLUMNS if col not in records.columns]
    if missing_cols:
        raise DataQualityError(
            f"Missing required columns in records: {missing_cols}. Required: {REQUIRED_COLUMNS}"
        )

    logger.info("Running sales QA checks for %d rows", len(records))

    unrecognized = _none_if_empty(detect_unrecognized_fat_content(records))
    negative = _none_if_empty(detect_negative_sales(records))
    out_of_range = _none_if_empty(detect_rating_out_of_range(records))
    duplicates = _none_if_empty(detect_duplicate_records(records))

    summary = {
        "total_rows": len(records),
        "total_outlets": int(records["outlet_identifier"].nunique()),
        "total_items": int(records["item_identifier"].nunique()),
        "null_counts": null_counts(records),
        "fat_content_labels": sorted(str(v) for v in records["item_fat_content"].dropna().unique()),
        "unrecognized_fat_content_count": (
            0 if unrecognized is None else int(unrecognized["rows"].sum())
        ),
        "negative_sales_count": 0 if negative is None else len(negative),
        "rating_out_of_range_count": 0 if out_of_range is None else len(out_of_range),
        "duplicate_records_count": 0 if duplicates is None else len(duplicates),
    }

    logger.info(
        "QA complete: %d unrecognized fat content rows, %d negative sales, "
        "%d ratings out of range, %d duplicate records",
        summary["unrecognized_fat_content_count"],
        summary["negative_sales_count"],
        summary["rating_out_of_range_count"],
        summary["duplicate_records_count"],
    )

    return SalesQAResult(
        summary=summary,
        unrecognized_fat_content=unrecognized,
        negative_sales=negative,
        rating_out_of_range=out_of_range,
        duplicate_records=duplicates,
    )


def check_view_invariants(
    records: pd.DataFrame,
    views: dict[str, pd.DataFrame],
) -> list[QAResult]:
    """Cross-check computed views against the records they came from.

    Args:
        records: The normalized records the views were computed from.
        views: Output of ``sales.aggregate.compute_views`` (any subset).

    Returns:
        List of QAResult; empty when every check passes.
    """
    results = (
        check_sum_conservation(records, views)
        + check_share_total(views)
        + check_pivot_completeness(records, views)
    )
    for r in results:
        if r.level == "ERROR":
            logger.error(r.message)
        else:
            logger.warning(r.message)
    return results

"""Public API for sales data.

This module provides the main entry point for loading sales data.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from grocery_core.config import DataPaths

from grocery_core.sales.aggregate import VIEWS

logger = logging.getLogger(__name__)

GRAINS = ("record",) + tuple(VIEWS)


def get_sales(
    paths: DataPaths,
    source: str | Path,
    grain: str = "record",
    refresh: bool = False,
) -> pd.DataFrame:
    """Load sales data at the specified grain.

    This function orchestrates the pipeline to deliver sales data:
    1. Cleans the raw file into fact_sales_record (if needed)
    2. Builds the requested mart (if needed)

    Args:
        paths: DataPaths configuration with data directories.
        source: Raw dataset file (CSV or Excel).
        grain: Data grain to return:
            - "record": Core fact (fact_sales_record). One row per item-outlet
              record with normalized fat content. This is the default.
            - any view name from ``sales.aggregate.VIEWS``, e.g.
              "sales_by_item_type" or "outlet_type_scorecard".
        refresh: If True, force re-run all stages. Default False reuses
            stage outputs whose metadata is current.

    Returns:
        DataFrame at the requested grain.

    Raises:
        ValueError: If grain is not "record" or a known view.

    Examples:
        >>> from grocery_core import DataPaths
        >>> paths = DataPaths.from_root("data")
        >>> df = get_sales(paths, "data/a_raw/sales/blinkit_grocery_data.csv")
        >>> scorecard = get_sales(paths, "blinkit_grocery_data.csv", grain="outlet_type_scorecard")
    """
    if grain not in GRAINS:
        raise ValueError(f"Invalid grain '{grain}'. Must be one of {list(GRAINS)}.")

    # Import internal modules here to avoid circular imports
    from grocery_core.sales import core, marts

    mode = "force" if refresh else "missing"
    if refresh:
        logger.info("Refresh=True: running all stages for %s", source)

    if grain == "record":
        return core.fetch(paths, source, mode=mode)
    return marts.fetch(paths, source, grain, mode=mode)

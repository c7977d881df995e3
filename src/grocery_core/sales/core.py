"""Silver layer: core sales fact table (fact_sales_record).

This module provides fetch/load functions for the cleaned record store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from grocery_core.config import DataPaths

from grocery_core.sales.metadata import CLEAN_VERSION, read_metadata, should_run_stage
from grocery_core.sales.raw import dataset_name
from grocery_core.sales.schema import coerce_schema
from grocery_core.sales.transform import clean_sales, fact_path

logger = logging.getLogger(__name__)


def fetch(
    paths: DataPaths,
    source: str | Path,
    *,
    mode: str = "missing",
) -> pd.DataFrame:
    """Ensure fact_sales_record exists for ``source``, then return it.

    Args:
        paths: DataPaths configuration.
        source: Raw dataset file (CSV or Excel).
        mode: Processing mode - "missing" (default) or "force".

    Returns:
        DataFrame with fact_sales_record structure.

    Raises:
        ValueError: If mode is not "missing" or "force".
    """
    if mode not in ("missing", "force"):
        raise ValueError(f"Invalid mode '{mode}'. Must be 'missing' or 'force'.")

    paths.ensure_dirs()
    dataset = dataset_name(source)

    if mode == "force" or should_run_stage(paths.clean_sales, dataset, CLEAN_VERSION):
        return clean_sales(paths, source)

    logger.debug("Clean sales already exist for %s", dataset)
    return _load_fact(paths, dataset)


def load(paths: DataPaths, source: str | Path) -> pd.DataFrame:
    """Load fact_sales_record from disk without running the clean stage.

    Raises:
        FileNotFoundError: If the clean stage has not completed for ``source``.
    """
    dataset = dataset_name(source)
    meta = read_metadata(paths.clean_sales, dataset)
    if meta is None or meta.status != "ok":
        raise FileNotFoundError(
            f"Clean sales data not found for {source}. "
            f"Use sales.core.fetch() to build the core fact."
        )

    return _load_fact(paths, dataset)


def _load_fact(paths: DataPaths, dataset: str) -> pd.DataFrame:
    """Load fact_sales_record from the clean CSV."""
    csv_path = fact_path(paths, dataset)
    if not csv_path.exists():
        raise FileNotFoundError(f"No cleaned sales CSV found at {csv_path}")

    df = pd.read_csv(csv_path, encoding="utf-8", keep_default_na=False, na_values=[""])
    return coerce_schema(df)

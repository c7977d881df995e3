"""Gold layer: sales marts (one CSV per reporting view).

This module builds, fetches and loads the gold-layer marts computed by
``sales.aggregate`` from the cleaned record store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import pandas as pd

if TYPE_CHECKING:
    from grocery_core.config import DataPaths

from grocery_core.exceptions import ETLError, GroceryCoreError
from grocery_core.sales.aggregate import VIEWS, compute_views
from grocery_core.sales.core import fetch as fetch_core
from grocery_core.sales.metadata import (
    MARTS_VERSION,
    StageMetadata,
    read_metadata,
    record_stage,
)
from grocery_core.sales.raw import dataset_name
from grocery_core.sales.schema import CATEGORICAL_COLUMNS, YEAR_COLUMN

logger = logging.getLogger(__name__)

# Count columns come back as int64, years as nullable Int64
INTEGER_COLUMNS = {"no_of_items": "int64", YEAR_COLUMN: "Int64"}


def mart_path(paths: DataPaths, dataset: str, view: str) -> Path:
    """Location of the mart CSV for one view of a dataset."""
    return paths.mart_sales / dataset / f"mart_{view}.csv"


def _check_view(view: str) -> None:
    if view not in VIEWS:
        raise ValueError(f"Invalid view '{view}'. Must be one of {list(VIEWS)}.")


def _fact_run(paths: DataPaths, dataset: str) -> str | None:
    """``last_run`` of the successful clean stage the marts must match."""
    meta = read_metadata(paths.clean_sales, dataset)
    return meta.last_run if meta is not None and meta.ok else None


def _is_current(meta: StageMetadata | None, fact_run: str | None) -> bool:
    return (
        meta is not None
        and meta.ok
        and meta.version == MARTS_VERSION
        and fact_run is not None
        and meta.fact_run == fact_run
    )


def build_marts(
    paths: DataPaths,
    records: pd.DataFrame,
    dataset: str,
    views: Iterable[str] | None = None,
    source: str = "",
    fact_run: str | None = None,
) -> dict[str, pd.DataFrame]:
    """Compute views from normalized records and write them as mart CSVs.

    Args:
        paths: DataPaths configuration.
        records: Normalized fact_sales_record rows.
        dataset: Dataset identifier (subdirectory of the mart layer).
        views: View names to build. Defaults to all views.
        source: Source file, recorded in the stage metadata.
        fact_run: ``last_run`` of the clean stage ``records`` came from.
            Views of an earlier build stay listed in the metadata only when
            that build used the same clean run.

    Returns:
        Mapping of view name to mart DataFrame.
    """
    paths.ensure_dirs()

    logger.info("Building sales marts for %s", dataset)

    try:
        results = compute_views(records, views)

        for view, df in results.items():
            out_path = mart_path(paths, dataset, view)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(out_path, index=False, encoding="utf-8")
            logger.debug("Wrote mart %s (%d rows)", out_path, len(df))

        previous = read_metadata(paths.mart_sales, dataset)
        built = set(results)
        if _is_current(previous, fact_run):
            built |= set(previous.views or [])

        record_stage(
            paths.mart_sales,
            dataset,
            source,
            MARTS_VERSION,
            "ok",
            row_count=len(records),
            views=[v for v in VIEWS if v in built],
            fact_run=fact_run,
        )
        logger.info("Built %d mart(s) for %s", len(results), dataset)
        return results

    except Exception as e:
        logger.error("Error building sales marts: %s", e)
        record_stage(paths.mart_sales, dataset, source, MARTS_VERSION, "failed")
        if isinstance(e, (GroceryCoreError, FileNotFoundError, ValueError)):
            raise
        raise ETLError(f"Mart build failed for {dataset}: {e}") from e


def fetch_many(
    paths: DataPaths,
    source: str | Path,
    views: Iterable[str] | None = None,
    *,
    mode: str = "missing",
) -> dict[str, pd.DataFrame]:
    """Ensure the marts for ``views`` exist, then return them.

    This function:
    1. Ensures the core fact exists (builds/refreshes if needed based on mode)
    2. Builds the marts that are missing, or were computed from another
       clean run than the current one, in one pass
    3. Returns every requested mart, reading the current ones from disk

    Args:
        paths: DataPaths configuration.
        source: Raw dataset file.
        views: View names from ``aggregate.VIEWS``. Defaults to all views.
        mode: Processing mode - "missing" (default) or "force".

    Returns:
        Mapping of view name to mart DataFrame, in VIEWS order.

    Raises:
        ValueError: If mode or a view name is invalid.
    """
    if mode not in ("missing", "force"):
        raise ValueError(f"Invalid mode '{mode}'. Must be 'missing' or 'force'.")
    requested = list(VIEWS) if views is None else list(views)
    for view in requested:
        _check_view(view)

    dataset = dataset_name(source)
    records = fetch_core(paths, source, mode=mode)
    fact_run = _fact_run(paths, dataset)

    meta = read_metadata(paths.mart_sales, dataset)
    if mode == "force" or not _is_current(meta, fact_run):
        stale = requested
    else:
        built = set(meta.views or [])
        stale = [
            v for v in requested if v not in built or not mart_path(paths, dataset, v).exists()
        ]

    results: dict[str, pd.DataFrame] = {}
    if stale:
        logger.info("Building %d mart(s) for %s", len(stale), dataset)
        results.update(
            build_marts(paths, records, dataset, stale, source=str(source), fact_run=fact_run)
        )

    for view in requested:
        if view not in results:
            logger.debug("Loading existing mart_%s", view)
            results[view] = _read_mart(paths, dataset, view)

    return {v: results[v] for v in VIEWS if v in results}


def fetch(
    paths: DataPaths,
    source: str | Path,
    view: str,
    *,
    mode: str = "missing",
) -> pd.DataFrame:
    """Ensure the mart for ``view`` exists, then return it.

    Args:
        paths: DataPaths configuration.
        source: Raw dataset file.
        view: One of ``aggregate.VIEWS``.
        mode: Processing mode - "missing" (default) or "force".

    Raises:
        ValueError: If mode or view is invalid.
    """
    _check_view(view)
    return fetch_many(paths, source, [view], mode=mode)[view]


def load(paths: DataPaths, source: str | Path, view: str) -> pd.DataFrame:
    """Load the mart for ``view`` from disk without running any stage.

    Raises:
        ValueError: If view is invalid.
        FileNotFoundError: If the mart has not been built from the current
            clean fact.
    """
    _check_view(view)
    dataset = dataset_name(source)
    meta = read_metadata(paths.mart_sales, dataset)

    if not _is_current(meta, _fact_run(paths, dataset)) or view not in (meta.views or []):
        raise FileNotFoundError(
            f"Sales mart '{view}' not found or outdated for {source}. "
            f"Use sales.marts.fetch() to build the mart."
        )

    return _read_mart(paths, dataset, view)


def _read_mart(paths: DataPaths, dataset: str, view: str) -> pd.DataFrame:
    """Read a mart CSV back with the dtypes the view produced."""
    path = mart_path(paths, dataset, view)
    if not path.exists():
        raise FileNotFoundError(f"Mart file missing: {path}")
    df = pd.read_csv(path, encoding="utf-8", keep_default_na=False, na_values=[""])

    for col in df.columns:
        if col in INTEGER_COLUMNS:
            df[col] = pd.to_numeric(df[col]).astype(INTEGER_COLUMNS[col])
        elif col not in CATEGORICAL_COLUMNS:
            df[col] = pd.to_numeric(df[col]).astype("float64")
    return df

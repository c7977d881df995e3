"""Silver layer: clean a raw sales dataset into fact_sales_record.

The only content rule is the fat content normalization: synonymous labels
collapse onto "Low Fat" and "Regular". Everything else is schema coercion.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from grocery_core.config import DataPaths

from grocery_core.exceptions import ETLError, GroceryCoreError
from grocery_core.sales.metadata import CLEAN_VERSION, record_stage
from grocery_core.sales.raw import dataset_name, read_sales_file
from grocery_core.sales.schema import (
    CANONICAL_FAT_CONTENT,
    FAT_CONTENT_MAP,
    coerce_schema,
    require_columns,
)

logger = logging.getLogger(__name__)

FACT_PREFIX = "fact_sales_record"


def fact_path(paths: DataPaths, dataset: str) -> Path:
    """Location of the cleaned fact CSV for a dataset."""
    return paths.clean_sales / f"{FACT_PREFIX}_{dataset}.csv"


def normalize_fat_content(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` with canonical ``item_fat_content`` labels.

    Mapping is an exact, case-sensitive match on the stored value:
    ``LF`` and ``low fat`` become ``Low Fat``, ``reg`` becomes ``Regular``.
    Any other value, including missing values and labels such as
    ``LOW FAT``, is left unchanged. Applying it twice is the same as
    applying it once. The input frame is not modified.

    Args:
        df: Records with an ``item_fat_content`` column.

    Returns:
        New DataFrame with the same rows, index and columns.

    Raises:
        DataQualityError: If ``item_fat_content`` is missing.

    Examples:
        >>> raw = pd.DataFrame({"item_fat_content": ["LF", "reg", "Low Fat"]})
        >>> normalize_fat_content(raw)["item_fat_content"].tolist()
        ['Low Fat', 'Regular', 'Low Fat']
    """
    require_columns(df, ["item_fat_content"])
    out = df.copy()
    labels = out["item_fat_content"]
    out["item_fat_content"] = labels.map(
        lambda v: FAT_CONTENT_MAP.get(v, v) if isinstance(v, str) else v
    )
    return out


def unrecognized_fat_content(df: pd.DataFrame) -> list[str]:
    """Distinct non-missing fat content labels outside the canonical pair."""
    labels = df["item_fat_content"].dropna().unique()
    return sorted(str(v) for v in labels if v not in CANONICAL_FAT_CONTENT)


def prepare_records(raw_df: pd.DataFrame) -> pd.DataFrame:
    """Coerce the schema and normalize fat content in one pass.

    This is the in-memory equivalent of the clean stage and is what every
    aggregation expects as input.
    """
    df = normalize_fat_content(coerce_schema(raw_df))

    leftovers = unrecognized_fat_content(df)
    if leftovers:
        logger.warning("Fat content labels left as-is (not in the label map): %s", leftovers)

    counts = df["item_fat_content"].value_counts(dropna=False)
    logger.debug("Fat content distribution after normalization:\n%s", counts)
    return df


def clean_sales(paths: DataPaths, source: str | Path) -> pd.DataFrame:
    """Clean a raw dataset file into the fact_sales_record CSV.

    Output: ``paths.clean_sales / fact_sales_record_<dataset>.csv`` with one row per
    item-outlet record, canonical columns and normalized fat content.
    Stage metadata is written with status "ok" or "failed".

    Args:
        paths: DataPaths configuration.
        source: Raw CSV or Excel dataset file.

    Returns:
        The cleaned records.
    """
    paths.ensure_dirs()
    dataset = dataset_name(source)

    logger.info("Cleaning sales dataset %s", source)

    try:
        df = prepare_records(read_sales_file(source))

        out_path = fact_path(paths, dataset)
        df.to_csv(out_path, index=False, encoding="utf-8")
        logger.info("Cleaned: %s (%d rows)", out_path, len(df))

        record_stage(
            paths.clean_sales, dataset, str(source), CLEAN_VERSION, "ok", row_count=len(df)
        )
        return df

    except Exception as e:
        logger.error("Error cleaning sales: %s", e)
        record_stage(paths.clean_sales, dataset, str(source), CLEAN_VERSION, "failed")
        if isinstance(e, (GroceryCoreError, FileNotFoundError, ValueError)):
            raise
        raise ETLError(f"Clean stage failed for {source}: {e}") from e

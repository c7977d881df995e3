"""Bronze layer: read a grocery sales dataset file into a DataFrame.

Supports the two formats the dataset is delivered in: CSV and Excel
(``.xlsx``/``.xls``). Headers are snake-cased and mapped onto the
canonical record columns; values are left as read.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from grocery_core.exceptions import DataQualityError
from grocery_core.sales.schema import HEADER_ALIASES
from grocery_core.utils import to_snake, uniquify

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xls"}
CSV_SUFFIXES = {".csv", ".txt"}


def canonical_headers(columns: list[str]) -> list[str]:
    """Map raw headers like ``Item Fat Content`` or ``Sales`` to record columns.

    Examples:
        >>> canonical_headers(["Item Fat Content", "Sales", "Rating"])
        ['item_fat_content', 'total_sales', 'rating']
    """
    snake = [to_snake(str(c)) for c in columns]
    return uniquify([HEADER_ALIASES.get(c, c) for c in snake])


def read_sales_file(path: str | Path, sheet_name: str | int = 0) -> pd.DataFrame:
    """Read a raw sales dataset file.

    Args:
        path: CSV or Excel file.
        sheet_name: Excel sheet to read (ignored for CSV).

    Returns:
        DataFrame with canonical headers and raw values.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        DataQualityError: If the file extension is not supported.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sales dataset not found: {path}")

    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(path, sheet_name=sheet_name)
    elif suffix in CSV_SUFFIXES:
        df = pd.read_csv(path, encoding="utf-8", low_memory=False)
    else:
        raise DataQualityError(
            f"Unsupported dataset format '{suffix}' for {path.name}. "
            f"Expected one of {sorted(EXCEL_SUFFIXES | CSV_SUFFIXES)}"
        )

    df.columns = canonical_headers(list(df.columns))
    logger.info("Read %s: %d rows, %d columns", path.name, len(df), len(df.columns))
    return df


def dataset_name(path: str | Path) -> str:
    """Stable identifier for a dataset file, used to key stage metadata."""
    return to_snake(Path(path).stem) or "dataset"

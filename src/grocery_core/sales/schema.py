"""Column layout of fact_sales_record and the fat content label map.

One row per item-outlet combination. Column order follows the layout of
the delivered dataset.
"""

from __future__ import annotations

import logging

import pandas as pd

from grocery_core.exceptions import DataQualityError
from grocery_core.utils import strip_invisibles, strip_zero_width

logger = logging.getLogger(__name__)

RECORD_COLUMNS = [
    "item_fat_content",
    "item_identifier",
    "item_type",
    "outlet_establishment_year",
    "outlet_identifier",
    "outlet_location_type",
    "outlet_size",
    "outlet_type",
    "item_visibility",
    "item_weight",
    "total_sales",
    "rating",
]

CATEGORICAL_COLUMNS = [
    "item_fat_content",
    "item_identifier",
    "item_type",
    "outlet_identifier",
    "outlet_location_type",
    "outlet_size",
    "outlet_type",
]

NUMERIC_COLUMNS = ["item_visibility", "item_weight", "total_sales", "rating"]

YEAR_COLUMN = "outlet_establishment_year"

# Headers seen in exports, after to_snake(), that differ from the canonical name
HEADER_ALIASES = {
    "sales": "total_sales",
    "item_outlet_sales": "total_sales",
    "outlet_establishment": "outlet_establishment_year",
    "establishment_year": "outlet_establishment_year",
}

# Exact, case-sensitive raw value -> canonical label
FAT_CONTENT_MAP = {
    "LF": "Low Fat",
    "low fat": "Low Fat",
    "reg": "Regular",
}

CANONICAL_FAT_CONTENT = ("Low Fat", "Regular")


def require_columns(df: pd.DataFrame, columns: list[str], context: str = "sales data") -> None:
    """Raise DataQualityError if any of ``columns`` is missing from ``df``."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DataQualityError(
            f"Missing required columns in {context}: {missing}. "
            f"Available: {list(df.columns)}"
        )


def coerce_schema(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` with the fact_sales_record dtypes applied.

    - Numeric columns are parsed with ``errors="coerce"``; unparseable
      values become NaN rather than failing the load.
    - The establishment year becomes nullable ``Int64``.
    - Categorical columns have invisible characters stripped and
      whitespace collapsed. ``item_fat_content`` only loses zero-width
      characters: the fat content map matches the stored label exactly,
      so `` reg`` or ``low  fat`` must not turn into a mapped label.

    Columns outside RECORD_COLUMNS are kept after the canonical ones.
    No rows are added or dropped.

    Raises:
        DataQualityError: If any column of RECORD_COLUMNS is absent.
    """
    require_columns(df, RECORD_COLUMNS)
    out = df.copy()

    for col in NUMERIC_COLUMNS:
        before = out[col].isna().sum()
        out[col] = pd.to_numeric(out[col], errors="coerce").astype("float64")
        coerced = out[col].isna().sum() - before
        if coerced:
            logger.warning("Column %s: %d value(s) could not be parsed as numbers", col, coerced)

    out[YEAR_COLUMN] = pd.to_numeric(out[YEAR_COLUMN], errors="coerce").round().astype("Int64")

    for col in CATEGORICAL_COLUMNS:
        # fat content labels are matched exactly, so their spaces stay put
        clean = strip_zero_width if col == "item_fat_content" else strip_invisibles
        out[col] = out[col].map(clean).astype("object")
        out[col] = out[col].where(out[col].notna(), None)

    extras = [c for c in out.columns if c not in RECORD_COLUMNS]
    return out[RECORD_COLUMNS + extras]

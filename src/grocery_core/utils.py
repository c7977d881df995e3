"""Shared helpers for cleaning headers and rounding report values.

Key utilities:
- Text: drop invisible characters and accents from exported headers/labels
- Column naming: snake_case headers, suffix duplicates
- Rounding: decimal half-up rounding that leaves missing values missing

Examples:
    >>> from grocery_core.utils import to_snake, round_half_up
    >>> to_snake("Item Fat Content")
    'item_fat_content'
    >>> round_half_up(116.916666, 2)
    116.92
"""

from __future__ import annotations

import math
import re
import unicodedata
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Optional

import pandas as pd

# Spreadsheet exports carry NBSP/narrow NBSP and zero-width marks (incl. BOM)
_SPACE_LIKE = {ord("\t"): " ", ord("\u00a0"): " ", ord("\u202f"): " "}
_ZERO_WIDTH = str.maketrans({ord(c): None for c in "\u200b\u200c\u200d\ufeff"})
_DROPPED = {ord(c): None for c in "\r\u200b\u200c\u200d\ufeff"}
_INVISIBLES = str.maketrans({**_SPACE_LIKE, **_DROPPED})

_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w\s]")


def strip_invisibles(x: Any) -> Optional[str]:
    """Clean a text value without changing its case or spelling.

    Tabs and non-breaking spaces become spaces, carriage returns and
    zero-width characters are dropped, runs of whitespace collapse to one
    space and the ends are trimmed. ``"low fat"`` stays ``"low fat"``.

    Examples:
        >>> strip_invisibles("\\u200bLow\\u00a0Fat ")
        'Low Fat'
        >>> strip_invisibles(float("nan")) is None
        True
    """
    if x is None or (isinstance(x, float) and math.isnan(x)):
        return None
    return _WHITESPACE_RE.sub(" ", str(x).translate(_INVISIBLES)).strip()


def strip_zero_width(x: Any) -> Optional[str]:
    """Drop zero-width characters and BOMs only; spaces are kept as stored.

    Examples:
        >>> strip_zero_width("\\ufeff reg")
        ' reg'
    """
    if x is None or (isinstance(x, float) and math.isnan(x)):
        return None
    return str(x).translate(_ZERO_WIDTH)


def remove_accents(s: str) -> str:
    decomposed = unicodedata.normalize("NFD", s)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def to_snake(s: str) -> str:
    """Header -> snake_case identifier.

    Examples:
        >>> to_snake("Outlet Establishment Year")
        'outlet_establishment_year'
        >>> to_snake("Item_Visibility (%)")
        'item_visibility'
    """
    text = remove_accents(strip_invisibles(s) or "").lower()
    words = _NON_WORD_RE.sub(" ", text).split()
    return "_".join(words).strip("_")


def uniquify(cols: Iterable[str]) -> List[str]:
    """Suffix repeated names with .1, .2, ... the way pandas does on read."""
    counts: dict[str, int] = {}
    out = []
    for name in cols:
        n = counts.get(name, 0)
        counts[name] = n + 1
        out.append(f"{name}.{n}" if n else name)
    return out


def round_half_up(value: Any, places: int = 2) -> Optional[float]:
    """Round a number half-up (away from zero on ties) to ``places`` decimals.

    Python's ``round`` uses banker's rounding on the binary value, which
    disagrees with ``CAST(... AS DECIMAL(p, s))`` style reporting. The value
    goes through its shortest repr so ``0.125`` rounds to ``0.13``.

    Args:
        value: Number to round. None/NaN pass through as NaN.
        places: Number of decimal places (0 for whole numbers).

    Returns:
        Rounded float, or NaN for missing input.

    Examples:
        >>> round_half_up(2.675, 2)
        2.68
        >>> round_half_up(3.5, 0)
        4.0
    """
    if value is None or pd.isna(value):
        return math.nan
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def round_series(series: pd.Series, places: int = 2) -> pd.Series:
    """Apply :func:`round_half_up` element-wise, keeping the index."""
    return series.map(lambda v: round_half_up(v, places)).astype("float64")

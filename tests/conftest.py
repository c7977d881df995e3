"""Shared fixtures for grocery_core tests."""

from __future__ import annotations

from typing import Callable

import pandas as pd
import pytest

from grocery_core.sales.schema import RECORD_COLUMNS


def build_records(rows: list[dict]) -> pd.DataFrame:
    """Build a record frame with every schema column, filling gaps with defaults."""
    defaults = {
        "item_fat_content": "Low Fat",
        "item_identifier": "FDA15",
        "item_type": "Dairy",
        "outlet_establishment_year": 2012,
        "outlet_identifier": "OUT049",
        "outlet_location_type": "Tier 1",
        "outlet_size": "Medium",
        "outlet_type": "Supermarket Type1",
        "item_visibility": 0.05,
        "item_weight": 9.3,
        "total_sales": 100.0,
        "rating": 4.0,
    }
    df = pd.DataFrame([{**defaults, **row} for row in rows], columns=RECORD_COLUMNS)
    df["outlet_establishment_year"] = df["outlet_establishment_year"].astype("Int64")
    for col in ["item_visibility", "item_weight", "total_sales", "rating"]:
        df[col] = df[col].astype("float64")
    return df


@pytest.fixture
def make_records() -> Callable[[list[dict]], pd.DataFrame]:
    """Factory fixture: ``make_records([{"total_sales": 10.0}, ...])``."""
    return build_records


@pytest.fixture
def sample_records() -> pd.DataFrame:
    """Small normalized dataset: three tiers, a missing outlet size, two outlet types.

    Totals: 500.75 overall; Low Fat 360.50, Regular 140.25.
    """
    df = pd.DataFrame(
        {
            "item_fat_content": ["Low Fat", "Regular", "Low Fat", "Regular", "Low Fat"],
            "item_identifier": ["FDA15", "DRC01", "FDN15", "FDX07", "NCD19"],
            "item_type": ["Dairy", "Soft Drinks", "Meat", "Dairy", "Household"],
            "outlet_establishment_year": [1999, 1999, 1998, 1998, 2007],
            "outlet_identifier": ["OUT049", "OUT049", "OUT010", "OUT010", "OUT017"],
            "outlet_location_type": ["Tier 1", "Tier 1", "Tier 3", "Tier 3", "Tier 2"],
            "outlet_size": ["Medium", "Medium", "Small", "Small", None],
            "outlet_type": [
                "Supermarket Type1",
                "Supermarket Type1",
                "Grocery Store",
                "Grocery Store",
                "Supermarket Type1",
            ],
            "item_visibility": [0.02, 0.04, 0.10, 0.12, 0.06],
            "item_weight": [9.3, 5.92, 17.5, None, 8.93],
            "total_sales": [120.50, 80.25, 40.00, 60.00, 200.00],
            "rating": [4.0, 5.0, 3.0, 4.0, 4.5],
        },
        columns=RECORD_COLUMNS,
    )
    df["outlet_establishment_year"] = df["outlet_establishment_year"].astype("Int64")
    return df

"""Tests for the sales aggregation views.

Expected values for ``sample_records`` (see conftest):
- total 500.75, average 100.15, 5 records, average rating 4.1 -> 4
- Low Fat 360.50, Regular 140.25
- Medium 200.75, missing size 200.00, Small 100.00
"""

import math

import pandas as pd
import pytest

from grocery_core.sales import aggregate
from grocery_core.sales.aggregate import (
    VIEWS,
    compute_kpis,
    compute_views,
    conditional_sum_pivot,
    pivot_to_mapping,
)
from grocery_core.utils import round_half_up


class TestRoundHalfUp:
    def test_ties_round_away_from_zero(self) -> None:
        assert round_half_up(2.675, 2) == 2.68
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(2.5, 0) == 3.0
        assert round_half_up(-2.5, 0) == -3.0

    def test_missing_stays_missing(self) -> None:
        assert math.isnan(round_half_up(None, 2))
        assert math.isnan(round_half_up(float("nan"), 2))


class TestKPIs:
    def test_total_and_average_scenario(self, make_records) -> None:
        """Three records of 100.00, 200.50 and 50.25."""
        df = make_records(
            [{"total_sales": 100.00}, {"total_sales": 200.50}, {"total_sales": 50.25}]
        )

        assert aggregate.total_sales(df)["total_sales"].iloc[0] == pytest.approx(350.75)
        assert aggregate.average_sales(df)["avg_sales"].iloc[0] == 116.92

    def test_total_in_millions(self, make_records) -> None:
        df = make_records([{"total_sales": 1_000_000.0}, {"total_sales": 201_681.48}])

        assert aggregate.total_sales(df)["total_sales_millions"].iloc[0] == 1.20

    def test_record_count_and_rating(self, sample_records: pd.DataFrame) -> None:
        assert aggregate.record_count(sample_records)["no_of_items"].iloc[0] == 5
        assert aggregate.average_rating(sample_records)["avg_rating"].iloc[0] == 4.0

    def test_missing_measures_excluded_from_mean(self, make_records) -> None:
        df = make_records([{"rating": 5.0}, {"rating": float("nan")}, {"rating": 3.0}])

        assert aggregate.average_rating(df)["avg_rating"].iloc[0] == 4.0
        assert aggregate.record_count(df)["no_of_items"].iloc[0] == 3

    def test_compute_kpis(self, sample_records: pd.DataFrame) -> None:
        kpis = compute_kpis(sample_records)

        assert kpis.total_sales == pytest.approx(500.75)
        assert kpis.total_sales_millions == 0.0
        assert kpis.avg_sales == 100.15
        assert kpis.no_of_items == 5
        assert kpis.avg_rating == 4.0
        assert set(kpis.to_dict()) == {
            "total_sales",
            "total_sales_millions",
            "avg_sales",
            "no_of_items",
            "avg_rating",
        }


class TestGroupedViews:
    def test_sales_by_fat_content(self, sample_records: pd.DataFrame) -> None:
        out = aggregate.sales_by_fat_content(sample_records)

        assert list(out.columns) == ["item_fat_content", "total_sales"]
        assert dict(zip(out["item_fat_content"], out["total_sales"])) == {
            "Low Fat": 360.50,
            "Regular": 140.25,
        }

    def test_sales_by_item_type_descending(self, sample_records: pd.DataFrame) -> None:
        out = aggregate.sales_by_item_type(sample_records)

        assert out["item_type"].tolist() == ["Household", "Dairy", "Soft Drinks", "Meat"]
        assert out["total_sales"].tolist() == [200.00, 180.50, 80.25, 40.00]

    def test_ties_break_on_group_key(self, make_records) -> None:
        df = make_records(
            [
                {"item_type": "Snack Foods", "total_sales": 10.0},
                {"item_type": "Breads", "total_sales": 10.0},
                {"item_type": "Canned", "total_sales": 30.0},
            ]
        )
        out = aggregate.sales_by_item_type(df)

        assert out["item_type"].tolist() == ["Canned", "Breads", "Snack Foods"]

    def test_sales_by_establishment_year_ascending(self, sample_records: pd.DataFrame) -> None:
        out = aggregate.sales_by_establishment_year(sample_records)

        assert out["outlet_establishment_year"].tolist() == [1998, 1999, 2007]
        assert out["total_sales"].tolist() == [100.00, 200.75, 200.00]

    def test_sales_by_location_descending(self, sample_records: pd.DataFrame) -> None:
        out = aggregate.sales_by_location(sample_records)

        assert out["outlet_location_type"].tolist() == ["Tier 1", "Tier 2", "Tier 3"]
        assert out["total_sales"].tolist() == [200.75, 200.00, 100.00]

    def test_sums_rounded_to_two_decimals(self, make_records) -> None:
        df = make_records(
            [
                {"item_type": "Dairy", "total_sales": 10.004},
                {"item_type": "Dairy", "total_sales": 10.004},
            ]
        )
        out = aggregate.sales_by_item_type(df)

        assert out["total_sales"].iloc[0] == 20.01


class TestSumConservation:
    @pytest.mark.parametrize(
        "view",
        [
            "sales_by_fat_content",
            "sales_by_item_type",
            "sales_by_establishment_year",
            "sales_share_by_outlet_size",
            "sales_by_location",
            "outlet_type_scorecard",
        ],
    )
    def test_groups_sum_to_total(self, sample_records: pd.DataFrame, view: str) -> None:
        out = VIEWS[view](sample_records)
        grand_total = aggregate.total_sales(sample_records)["total_sales"].iloc[0]

        assert out["total_sales"].sum() == pytest.approx(grand_total, abs=0.01 * len(out))


class TestFatContentByLocation:
    def test_pivot_values(self, sample_records: pd.DataFrame) -> None:
        out = aggregate.fat_content_by_location(sample_records)

        assert list(out.columns) == ["outlet_location_type", "Low_Fat", "Regular"]
        assert out["outlet_location_type"].tolist() == ["Tier 1", "Tier 2", "Tier 3"]
        assert out["Low_Fat"].tolist() == [120.50, 200.00, 40.00]
        assert out["Regular"].tolist() == [80.25, 0.00, 60.00]

    def test_absent_combination_is_zero_not_null(self, make_records) -> None:
        df = make_records(
            [
                {"outlet_location_type": "Tier 2", "item_fat_content": "Regular"},
                {"outlet_location_type": "Tier 1", "item_fat_content": "Low Fat"},
            ]
        )
        out = aggregate.fat_content_by_location(df)

        assert len(out) == 2
        assert not out[["Low_Fat", "Regular"]].isna().any().any()
        tier_2 = out[out["outlet_location_type"] == "Tier 2"].iloc[0]
        assert tier_2["Low_Fat"] == 0.0
        assert tier_2["Regular"] == 100.0

    def test_one_row_per_tier_even_without_canonical_labels(self, make_records) -> None:
        df = make_records(
            [
                {"outlet_location_type": "Tier 1", "item_fat_content": "Non-Edible"},
                {"outlet_location_type": "Tier 3", "item_fat_content": "Low Fat"},
            ]
        )
        out = aggregate.fat_content_by_location(df)

        assert out["outlet_location_type"].tolist() == ["Tier 1", "Tier 3"]
        assert out.iloc[0]["Low_Fat"] == 0.0
        assert out.iloc[0]["Regular"] == 0.0

    def test_generic_pivot_and_mapping(self) -> None:
        df = pd.DataFrame(
            {
                "a": ["x", "x", "y"],
                "b": ["p", "q", "p"],
                "v": [1.0, 2.0, 3.0],
            }
        )
        pivot = conditional_sum_pivot(df, "a", "b", "v", ["p", "q", "r"])

        assert pivot_to_mapping(pivot, "a") == {
            "x": {"p": 1.0, "q": 2.0, "r": 0.0},
            "y": {"p": 3.0, "q": 0.0, "r": 0.0},
        }


class TestSalesShareByOutletSize:
    def test_scenario_percentages(self, make_records) -> None:
        df = make_records(
            [
                {"outlet_size": "Medium", "total_sales": 507895.73},
                {"outlet_size": "Small", "total_sales": 444794.17},
                {"outlet_size": "High", "total_sales": 248991.58},
            ]
        )
        out = aggregate.sales_share_by_outlet_size(df)

        assert out["outlet_size"].tolist() == ["Medium", "Small", "High"]
        assert out["total_sales"].tolist() == [507895.73, 444794.17, 248991.58]
        medium = out["sales_percentage"].iloc[0]
        assert 42.26 <= medium <= 42.27
        assert out["sales_percentage"].sum() == pytest.approx(100.0, abs=0.03)

    def test_missing_size_is_its_own_group(self, sample_records: pd.DataFrame) -> None:
        out = aggregate.sales_share_by_outlet_size(sample_records)

        assert len(out) == 3
        assert out["outlet_size"].iloc[0] == "Medium"
        assert pd.isna(out["outlet_size"].iloc[1])
        assert out["outlet_size"].iloc[2] == "Small"
        assert out["sales_percentage"].tolist() == [40.09, 39.94, 19.97]

    def test_percentages_sum_to_100(self, sample_records: pd.DataFrame) -> None:
        out = aggregate.sales_share_by_outlet_size(sample_records)

        assert out["sales_percentage"].sum() == pytest.approx(100.0, abs=0.01 * len(out))

    def test_empty_dataset_reports_no_rows(self, make_records) -> None:
        df = make_records([]).iloc[0:0]
        out = aggregate.sales_share_by_outlet_size(df)

        assert out.empty
        assert list(out.columns) == ["outlet_size", "total_sales", "sales_percentage"]

    def test_zero_total_gives_empty_percentages(self, make_records) -> None:
        df = make_records([{"outlet_size": "Small", "total_sales": 0.0}])
        out = aggregate.sales_share_by_outlet_size(df)

        assert len(out) == 1
        assert pd.isna(out["sales_percentage"].iloc[0])


class TestOutletTypeScorecard:
    def test_measures(self, sample_records: pd.DataFrame) -> None:
        out = aggregate.outlet_type_scorecard(sample_records)

        assert list(out.columns) == [
            "outlet_type",
            "total_sales",
            "avg_sales",
            "no_of_items",
            "avg_rating",
            "item_visibility",
        ]
        assert out["outlet_type"].tolist() == ["Supermarket Type1", "Grocery Store"]

        first = out.iloc[0]
        assert first["total_sales"] == 400.75
        assert first["avg_sales"] == 134.0
        assert first["no_of_items"] == 3
        assert first["avg_rating"] == 4.5
        assert first["item_visibility"] == 0.04

        second = out.iloc[1]
        assert second["total_sales"] == 100.00
        assert second["avg_sales"] == 50.0
        assert second["no_of_items"] == 2
        assert second["avg_rating"] == 3.5
        assert second["item_visibility"] == 0.11

    def test_count_includes_rows_with_missing_measures(self, make_records) -> None:
        df = make_records([{"total_sales": 10.0}, {"total_sales": float("nan")}])
        out = aggregate.outlet_type_scorecard(df)

        assert out["no_of_items"].iloc[0] == 2
        assert out["total_sales"].iloc[0] == 10.0
        assert out["avg_sales"].iloc[0] == 10.0


class TestComputeViews:
    def test_all_views_by_default(self, sample_records: pd.DataFrame) -> None:
        views = compute_views(sample_records)

        assert list(views) == list(VIEWS)
        assert len(views) == 11

    def test_subset_in_registry_order(self, sample_records: pd.DataFrame) -> None:
        views = compute_views(sample_records, ["outlet_type_scorecard", "total_sales"])

        assert list(views) == ["total_sales", "outlet_type_scorecard"]

    def test_unknown_view_raises(self, sample_records: pd.DataFrame) -> None:
        with pytest.raises(ValueError, match="Unknown view"):
            compute_views(sample_records, ["sales_by_colour"])

    def test_grouped_views_empty_on_empty_input(self, make_records) -> None:
        empty = make_records([]).iloc[0:0]
        views = compute_views(empty)

        for name in ("sales_by_item_type", "fat_content_by_location", "outlet_type_scorecard"):
            assert views[name].empty, name
        assert views["record_count"]["no_of_items"].iloc[0] == 0

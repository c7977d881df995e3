"""Tests for the grocery-report command line entry point."""

from pathlib import Path

import pandas as pd
import pytest

from grocery_core.cli import main


@pytest.fixture
def dataset(tmp_path: Path) -> Path:
    path = tmp_path / "grocery.csv"
    pd.DataFrame(
        {
            "Item Fat Content": ["LF", "Regular", "reg"],
            "Item Identifier": ["FDA15", "DRC01", "FDN15"],
            "Item Type": ["Dairy", "Soft Drinks", "Meat"],
            "Outlet Establishment Year": [1999, 2009, 1999],
            "Outlet Identifier": ["OUT049", "OUT018", "OUT049"],
            "Outlet Location Type": ["Tier 1", "Tier 3", "Tier 1"],
            "Outlet Size": ["Medium", "Medium", "Small"],
            "Outlet Type": ["Supermarket Type1", "Supermarket Type2", "Supermarket Type1"],
            "Item Visibility": [0.016, 0.019, 0.017],
            "Item Weight": [9.3, 5.92, 17.5],
            "Sales": [100.00, 200.50, 50.25],
            "Rating": [5.0, 4.0, 3.0],
        }
    ).to_csv(path, index=False)
    return path


def test_report_all_views(dataset: Path, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    code = main(["-i", str(dataset), "--data-root", str(tmp_path / "data")])

    out = capsys.readouterr().out
    assert code == 0
    assert "Total sales:     350.75" in out
    assert "Average sales:   116.92" in out
    assert "All Metrics by Outlet Type" in out
    assert (tmp_path / "data" / "c_processed" / "sales" / "grocery").is_dir()


def test_report_selected_view_with_qa(
    dataset: Path, tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    code = main(
        [
            "-i",
            str(dataset),
            "--data-root",
            str(tmp_path / "data"),
            "--view",
            "sales_by_fat_content",
            "--qa",
            "--force",
        ]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "Total Sales by Item Fat Content" in out
    assert "Total Sales by Item Type" not in out
    assert "QA summary:" in out


def test_missing_input_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    code = main(["-i", str(tmp_path / "missing.csv"), "--data-root", str(tmp_path / "data")])

    assert code == 2
    assert "ERROR" in capsys.readouterr().err


def test_unparseable_input_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    broken = tmp_path / "broken.csv"
    broken.write_text("Item Fat Content,Sales\nLF,1.0\nreg,2.0,extra,fields\n")

    code = main(["-i", str(broken), "--data-root", str(tmp_path / "data")])

    assert code == 2
    assert "ERROR" in capsys.readouterr().err


def test_whole_number_averages_print_without_decimals(
    dataset: Path, tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    code = main(
        ["-i", str(dataset), "--data-root", str(tmp_path / "data"), "--view", "average_rating"]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "Average rating:  4\n" in out
    assert "4.00" not in out

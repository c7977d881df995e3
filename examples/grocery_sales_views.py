"""Example: grocery sales KPIs and breakdowns using the sales API

This example shows how to get the cleaned record store and a few of the
reporting views for a grocery sales dataset, then cross-check them with QA.

Prerequisites:
- Put the dataset export (CSV or Excel) under data/a_raw/sales/
  (or modify the path below)
"""

from pathlib import Path

from grocery_core import DataPaths
from grocery_core.qa import check_view_invariants, run_sales_qa
from grocery_core.sales import compute_kpis, get_sales

source = Path("data/a_raw/sales/blinkit_grocery_data.xlsx")  # MODIFY AS NEEDED

paths = DataPaths.from_root(Path("data"))

# Record grain (core fact) - default grain
print(f"Getting cleaned records from {source}...")
df_records = get_sales(
    paths=paths,
    source=source,
    grain="record",  # Core fact: one row per item-outlet record
    refresh=True,  # Force re-run all stages
)

print(f"Record store: {len(df_records)} rows")
print(df_records["item_fat_content"].value_counts(dropna=False))

kpis = compute_kpis(df_records)
print(f"\nTotal sales: {kpis.total_sales:,.2f} ({kpis.total_sales_millions:.2f} M)")
print(f"Average sales: {kpis.avg_sales:.2f}  Items: {kpis.no_of_items}  Rating: {kpis.avg_rating}")

# Views (marts)
views = {}
for view in ("fat_content_by_location", "sales_share_by_outlet_size", "outlet_type_scorecard"):
    views[view] = get_sales(paths=paths, source=source, grain=view)
    print(f"\n{view}: {len(views[view])} rows")
    print(views[view])

# QA
qa = run_sales_qa(df_records)
print("\nQA summary:")
for key, value in qa.summary.items():
    print(f"  {key}: {value}")

for problem in check_view_invariants(df_records, views):
    print(f"  [{problem.level}] {problem.message}")

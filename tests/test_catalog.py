from decimal import Decimal
from pathlib import Path

import pytest

from budget_report.catalog import BudgetCatalog, build_catalog, load_catalog
from budget_report.errors import SourceNotFound, UnreadableSource
from budget_report.matching import PrefixMatcher
from budget_report.models import BudgetEntry

from tests.helpers.sources import TEMPLATE_ROWS, write_template


def test_entries_take_nearest_preceding_header():
    catalog = build_catalog(TEMPLATE_ROWS)

    assert list(catalog) == ["HYDRO", "ROGERS", "NETFLIX", "GRO", "PAYROLL"]
    assert catalog["HYDRO"].expense_type == "Utilities"
    assert catalog["ROGERS"].expense_type == "Utilities"
    assert catalog["NETFLIX"].expense_type == "Entertainment"
    assert catalog["GRO"] == BudgetEntry(
        key="GRO",
        display_name="Groceries",
        budgeted_amount=Decimal("-200"),
        expense_type="Others",
    )


def test_header_rows_never_become_entries():
    catalog = build_catalog(
        [
            ("Utilities", -1, "UTIL"),
            ("EXPENSE", 0, "EXP"),
            ("Hydro", -90, "HYDRO"),
        ]
    )
    assert list(catalog) == ["HYDRO"]
    assert catalog["HYDRO"].expense_type == "Utilities"


def test_header_labels_are_case_insensitive_and_title_cased():
    catalog = build_catalog([("uTILITIES", None, None), ("Hydro", -90, "HYDRO")])
    assert catalog["HYDRO"].expense_type == "Utilities"


def test_expense_divider_keeps_current_type():
    catalog = build_catalog(
        [
            ("Entertainment", None, None),
            ("Streaming", -20, "NETFLIX"),
            ("expense", None, None),
            ("Cinema", -30, "CINEPLEX"),
        ]
    )
    assert catalog["CINEPLEX"].expense_type == "Entertainment"


def test_entries_before_any_header_have_no_type():
    catalog = build_catalog([("Rent", -1500, "RENT"), ("Others", None, None)])
    assert catalog["RENT"].expense_type is None


def test_rows_missing_name_or_key_are_skipped_and_logged(caplog: pytest.LogCaptureFixture):
    rows = [
        ("Utilities", None, None),
        ("Hydro", -90, None),
        (None, -10, "ORPHAN"),
        ("Internet", -75, "ROGERS"),
    ]
    with caplog.at_level("WARNING", logger="budget_report"):
        catalog = build_catalog(rows)

    assert list(catalog) == ["ROGERS"]
    assert catalog["ROGERS"].expense_type == "Utilities"
    assert sum("Skipping budget row" in r.getMessage() for r in caplog.records) == 2


def test_skipped_row_does_not_change_current_type():
    rows = [
        ("Utilities", None, None),
        ("Entertainment", -5, None),
        ("Broken", None, None),
        ("Streaming", -20, "NETFLIX"),
    ]
    assert build_catalog(rows)["NETFLIX"].expense_type == "Entertainment"


def test_missing_budget_amount_defaults_to_zero():
    catalog = build_catalog([("Gifts", None, "GIFT"), ("Parking", "", "PARK")])
    assert catalog["GIFT"].budgeted_amount == Decimal("0")
    assert catalog["PARK"].budgeted_amount == Decimal("0")


def test_duplicate_keys_last_write_wins_keeping_first_position():
    catalog = build_catalog(
        [
            ("Groceries", -100, "GRO"),
            ("Hydro", -90, "HYDRO"),
            ("Groceries (new)", -250, "GRO"),
        ]
    )
    assert list(catalog) == ["GRO", "HYDRO"]
    assert catalog["GRO"].display_name == "Groceries (new)"
    assert catalog["GRO"].budgeted_amount == Decimal("-250")


def test_custom_expense_types():
    catalog = build_catalog(
        [("Housing", None, None), ("Rent", -1500, "RENT")], expense_types=["Housing"]
    )
    assert catalog["RENT"].expense_type == "Housing"


def test_find_uses_matcher_and_catalog_order():
    catalog = BudgetCatalog(
        {
            "GAS": BudgetEntry("GAS", "Fuel", Decimal("-100"), "Others"),
            "GASTRO": BudgetEntry("GASTRO", "Dining", Decimal("-50"), "Entertainment"),
        }
    )
    assert catalog.find("GASTRO").display_name == "Fuel"
    assert catalog.find("THE GAS").display_name == "Fuel"
    assert catalog.find("THE GAS", matcher=PrefixMatcher()) is None
    assert catalog.find("NOPE") is None


def test_load_catalog_reads_template_sheet(tmp_path: Path):
    path = write_template(tmp_path / "Budget" / "template.xlsx", TEMPLATE_ROWS)
    catalog = load_catalog(path)

    assert len(catalog) == 5
    assert catalog["ROGERS"].budgeted_amount == Decimal("-75.5")
    assert catalog["PAYROLL"].expense_type == "Others"


def test_load_catalog_missing_file_is_not_found(tmp_path: Path):
    with pytest.raises(SourceNotFound) as info:
        load_catalog(tmp_path / "missing.xlsx")
    assert info.value.path.endswith("missing.xlsx")


def test_load_catalog_missing_sheet_is_not_found(tmp_path: Path):
    path = write_template(tmp_path / "template.xlsx", TEMPLATE_ROWS, sheet="Plan")
    with pytest.raises(SourceNotFound):
        load_catalog(path)
    assert len(load_catalog(path, sheet="Plan")) == 5


def test_load_catalog_rejects_non_workbook(tmp_path: Path):
    path = tmp_path / "template.xlsx"
    path.write_text("Name,Budget,Key\n", encoding="utf-8")

    with pytest.raises(UnreadableSource) as info:
        load_catalog(path)
    assert info.value.path.endswith("template.xlsx")

from pathlib import Path

import pytest
from pydantic import ValidationError

from budget_report.catalog import DEFAULT_EXPENSE_TYPES
from budget_report.config import ReportSettings, default_budget_file, split_list


def test_split_list_drops_blank_entries():
    assert split_list("TRANSFER; ;E-TRANSFER TO SELF;") == ("TRANSFER", "E-TRANSFER TO SELF")
    assert split_list("") == ()
    assert split_list(None) == ()


def test_defaults_without_environment():
    settings = ReportSettings.from_env({})

    assert settings.template_file == Path("Budget") / "template.xlsx"
    assert settings.template_sheet == "Budget"
    assert settings.data_dir == Path("Data")
    assert settings.ignored_transactions == ()
    assert settings.expense_types == DEFAULT_EXPENSE_TYPES
    assert settings.budget_file.parent == Path("Budget")
    assert settings.budget_file.name.startswith("budget-")


def test_default_budget_file_for_year():
    assert default_budget_file(2024) == Path("Budget") / "budget-2024.xlsx"


def test_from_env_reads_variables():
    settings = ReportSettings.from_env(
        {
            "IGNORED_TRANSACTIONS": "TRANSFER;;SAVINGS",
            "BUDGET_TEMPLATE_FILE": "t/template.xlsx",
            "BUDGET_TEMPLATE_SHEET": " Plan ",
            "BUDGET_FILE": "out/b.xlsx",
            "BUDGET_DATA_DIR": "exports",
            "BUDGET_EXPENSE_TYPES": "Housing;Food",
        }
    )

    assert settings.ignored_transactions == ("TRANSFER", "SAVINGS")
    assert settings.template_file == Path("t/template.xlsx")
    assert settings.template_sheet == "Plan"
    assert settings.budget_file == Path("out/b.xlsx")
    assert settings.data_dir == Path("exports")
    assert settings.expense_types == ("Housing", "Food")


def test_blank_variables_fall_back_to_defaults():
    settings = ReportSettings.from_env({"BUDGET_DATA_DIR": "  ", "IGNORED_TRANSACTIONS": ""})
    assert settings.data_dir == Path("Data")
    assert settings.ignored_transactions == ()


def test_overrides_win_and_none_is_ignored():
    settings = ReportSettings.from_env(
        {"BUDGET_DATA_DIR": "exports", "BUDGET_TEMPLATE_SHEET": "Plan"},
        data_dir=Path("other"),
        template_sheet=None,
    )
    assert settings.data_dir == Path("other")
    assert settings.template_sheet == "Plan"


def test_reads_process_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("IGNORED_TRANSACTIONS", "TRANSFER")
    assert ReportSettings.from_env().ignored_transactions == ("TRANSFER",)


def test_list_fields_accept_sequences():
    settings = ReportSettings(ignored_transactions=["A", " ", "B "])
    assert settings.ignored_transactions == ("A", "B")


def test_blank_sheet_is_rejected():
    with pytest.raises(ValidationError):
        ReportSettings(template_sheet="   ")


def test_unknown_fields_are_rejected():
    with pytest.raises(ValidationError):
        ReportSettings.from_env({}, colour="red")

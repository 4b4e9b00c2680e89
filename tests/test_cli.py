import os
from pathlib import Path

import pytest
from openpyxl import load_workbook
from typer.testing import CliRunner

import budget_report.cli as cli
from tests.helpers.sources import TEMPLATE_ROWS, bank_row, write_bank_csv, write_template

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **k: None)


@pytest.fixture
def sources(tmp_path: Path) -> Path:
    write_template(tmp_path / "Budget" / "template.xlsx", TEMPLATE_ROWS)
    write_bank_csv(
        tmp_path / "Data" / "chequing.csv",
        [
            bank_row("20240302", "-50.00", "GRO STORE #1"),
            bank_row("20240315", "3000", "PAYROLL ACME"),
            bank_row("20240309", "-30.00", "GRO STORE #2"),
            bank_row("20240320", "-500", "TRANSFER TO SAVINGS"),
        ],
    )
    return tmp_path


def test_generate_writes_month_sheet(sources: Path):
    result = runner.invoke(cli.app, ["generate", "--workbook", "out.xlsx"])

    assert result.exit_code == 0, result.output
    assert "Wrote March to out.xlsx" in result.output
    assert "Total Income\t3,000.00" in result.output
    wb = load_workbook(sources / "out.xlsx")
    assert wb.sheetnames == ["March"]


def test_generate_month_override(sources: Path):
    result = runner.invoke(cli.app, ["generate", "--workbook", "out.xlsx", "--month", "2"])

    assert result.exit_code == 0, result.output
    assert load_workbook(sources / "out.xlsx").sheetnames == ["February"]


def test_generate_rejects_month_out_of_range(sources: Path):
    result = runner.invoke(cli.app, ["generate", "--month", "13"])
    assert result.exit_code == 2
    assert [p.name for p in (sources / "Budget").iterdir()] == ["template.xlsx"]


def test_generate_missing_template_fails(tmp_path: Path):
    write_bank_csv(tmp_path / "Data" / "a.csv", [bank_row("20240302", "-5", "GRO")])

    result = runner.invoke(cli.app, ["generate", "--workbook", "out.xlsx"])

    assert result.exit_code == 1
    assert "Error" in result.output
    assert not (tmp_path / "out.xlsx").exists()


def test_generate_empty_data_dir_fails(tmp_path: Path):
    write_template(tmp_path / "Budget" / "template.xlsx", TEMPLATE_ROWS)
    (tmp_path / "Data").mkdir()

    result = runner.invoke(cli.app, ["generate", "--workbook", "out.xlsx"])

    assert result.exit_code == 1
    assert "Error" in result.output
    assert not (tmp_path / "out.xlsx").exists()


def test_preview_prints_summary_lines(sources: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("IGNORED_TRANSACTIONS", "TRANSFER")

    result = runner.invoke(cli.app, ["preview"])

    assert result.exit_code == 0, result.output
    assert "Period\tMarch 2024" in result.output
    assert "Groceries\tOthers\t80.00\t-200.00\t-280.00" in result.output
    assert "TRANSFER" not in result.output
    assert list(sources.glob("**/budget-*.xlsx")) == []


def test_preview_reads_dotenv(sources: Path, request: pytest.FixtureRequest):
    # load_dotenv writes to os.environ directly.
    request.addfinalizer(lambda: os.environ.pop("BUDGET_DATA_DIR", None))
    (sources / "exports").mkdir()
    write_bank_csv(sources / "exports" / "x.csv", [bank_row("20240511", "-12", "CORNER SHOP")])
    (sources / ".env").write_text("BUDGET_DATA_DIR=exports\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["preview"])

    assert result.exit_code == 0, result.output
    assert "Period\tMay 2024" in result.output
    assert "CORNER SHOP\tNo Type\t12.00\t0.00\t-12.00" in result.output


def test_cmd_preview_option_overrides_env(sources: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("BUDGET_DATA_DIR", "missing")
    assert cli.cmd_preview(data_dir=sources / "Data") == 0
    assert cli.cmd_preview() == 1


@pytest.mark.parametrize("command", [["preview"], ["generate", "--workbook", "out.xlsx"]])
def test_non_utf8_export_is_reported_not_raised(tmp_path: Path, command: list[str]):
    write_template(tmp_path / "Budget" / "template.xlsx", TEMPLATE_ROWS)
    write_bank_csv(
        tmp_path / "Data" / "a.csv",
        [bank_row("20240302", "-5.00", "CAFÉ DÉPANNEUR")],
        encoding="latin-1",
    )

    result = runner.invoke(cli.app, command)

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Error: cannot read" in result.output
    assert "a.csv" in result.output
    assert not (tmp_path / "out.xlsx").exists()

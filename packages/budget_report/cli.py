# ruff: noqa: I001
"""CLI for the ``budget_report`` package.

Command handlers (``cmd_generate``, ``cmd_preview``) return a process exit
code and never raise; the Typer commands below wrap them. Settings are read
from the environment after loading a local ``.env`` with ``python-dotenv``,
and command-line options take precedence over both.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer.models import OptionInfo

from .config import ReportSettings, log_level_from_env
from .errors import BudgetReportError
from .logging_setup import configure_logging, get_logger
from .models import MonthlyReport

logger = get_logger("budget_report.cli")


def _load_settings(**overrides: object) -> ReportSettings | None:
    try:
        return ReportSettings.from_env(**overrides)
    except ValidationError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        return None


def _print_summary(report: MonthlyReport) -> None:
    s = report.summary
    print(f"Period\t{report.period.sheet_name} {report.period.year}")
    print(f"Total Income\t{s.total_income:,.2f}")
    print(f"Total Expense\t{s.total_expense:,.2f}")
    print(f"Savings\t{s.savings:,.2f}")


def cmd_generate(
    *,
    data_dir: Path | None = None,
    template: Path | None = None,
    sheet: str | None = None,
    workbook: Path | None = None,
    month: int | None = None,
    open_after: bool = False,
) -> int:
    """Build the month sheet and write it into the budget workbook.

    Prints the workbook path and the headline totals on success. Missing or
    undecodable sources, an empty ledger and I/O failures are logged, reported
    on stderr and turned into exit code ``1``; the workbook is left untouched.
    """

    from .api import generate_monthly_report

    settings = _load_settings(
        data_dir=data_dir, template_file=template, template_sheet=sheet, budget_file=workbook
    )
    if settings is None:
        return 1

    try:
        outcome = generate_monthly_report(settings, month=month)
    except (BudgetReportError, OSError) as e:
        logger.error("Report not generated: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:  # pragma: no cover
        logger.exception("Unexpected failure while generating the report")
        print(f"Error: Unexpected failure: {e}", file=sys.stderr)
        return 1

    print(f"Wrote {outcome.report.period.sheet_name} to {outcome.workbook}")
    _print_summary(outcome.report)

    if open_after:
        typer.launch(str(outcome.workbook))
    return 0


def cmd_preview(
    *,
    data_dir: Path | None = None,
    template: Path | None = None,
    sheet: str | None = None,
) -> int:
    """Print the totals and one tab-separated line per spending key.

    Line format: ``<name>\\t<type>\\t<cost>\\t<budget>\\t<difference>``.
    Failures are reported like :func:`cmd_generate` reports them.
    """

    from .api import prepare_report

    settings = _load_settings(data_dir=data_dir, template_file=template, template_sheet=sheet)
    if settings is None:
        return 1

    try:
        report = prepare_report(settings)
    except (BudgetReportError, OSError) as e:
        logger.error("Preview failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:  # pragma: no cover
        logger.exception("Unexpected failure while previewing the report")
        print(f"Error: Unexpected failure: {e}", file=sys.stderr)
        return 1

    _print_summary(report)
    print()
    for row in report.expense_summary:
        print(
            f"{row.name.strip()}\t{row.expense_type}\t{-row.actual_cost:.2f}"
            f"\t{row.budgeted:.2f}\t{row.difference:.2f}"
        )
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Build a monthly budget report from bank CSV exports and a budget template. "
        "Loads settings from a local .env before running."
    ),
)

# Module-level option objects for Annotated parameters (ruff B008). Option
# names only; defaults are given on the parameters.
DATA_DIR_OPTION: OptionInfo = typer.Option(
    "--data-dir", help="Directory of bank CSV exports (env BUDGET_DATA_DIR).", file_okay=False
)
TEMPLATE_OPTION: OptionInfo = typer.Option(
    "--template", help="Budget template workbook (env BUDGET_TEMPLATE_FILE).", dir_okay=False
)
SHEET_OPTION: OptionInfo = typer.Option(
    "--sheet", help="Template sheet name (env BUDGET_TEMPLATE_SHEET)."
)
WORKBOOK_OPTION: OptionInfo = typer.Option(
    "--workbook", help="Budget workbook to write (env BUDGET_FILE).", dir_okay=False
)
LOG_LEVEL_OPTION: OptionInfo = typer.Option(
    "--log-level", help="Logging level name or number (env BUDGET_REPORT_LOG_LEVEL)."
)


@app.command("generate")
def generate_cmd(
    data_dir: Annotated[Path | None, DATA_DIR_OPTION] = None,
    template: Annotated[Path | None, TEMPLATE_OPTION] = None,
    sheet: Annotated[str | None, SHEET_OPTION] = None,
    workbook: Annotated[Path | None, WORKBOOK_OPTION] = None,
    month: int | None = typer.Option(
        None, min=1, max=12, help="Override the report month (1-12)."
    ),
    open_after: bool = typer.Option(
        False, "--open", help="Open the workbook once it has been written."
    ),
) -> None:
    """Write the month sheet into the budget workbook."""

    code = cmd_generate(
        data_dir=data_dir,
        template=template,
        sheet=sheet,
        workbook=workbook,
        month=month,
        open_after=open_after,
    )
    if code:
        raise typer.Exit(code)


@app.command("preview")
def preview_cmd(
    data_dir: Annotated[Path | None, DATA_DIR_OPTION] = None,
    template: Annotated[Path | None, TEMPLATE_OPTION] = None,
    sheet: Annotated[str | None, SHEET_OPTION] = None,
) -> None:
    """Print the report totals and expense summary without writing anything."""

    code = cmd_preview(data_dir=data_dir, template=template, sheet=sheet)
    if code:
        raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    log_level: Annotated[str | None, LOG_LEVEL_OPTION] = None,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding
    already-set variables) and configures logging for every subcommand.
    ``--log-level`` wins over ``BUDGET_REPORT_LOG_LEVEL``.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level or log_level_from_env())

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()

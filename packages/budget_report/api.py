"""Run orchestration for the monthly budget report.

The stages run strictly one after another: the catalog and the ledger are
loaded from their sources, aggregated into a :class:`MonthlyReport`, and the
report is handed to the renderer. Failures surface as
:class:`~budget_report.errors.BudgetReportError` subclasses; nothing is
written unless every earlier stage succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from .aggregate import build_report
from .catalog import load_catalog
from .config import ReportSettings
from .errors import EmptyResult
from .ingest.bank_csv import DEFAULT_FORMAT, BankCsvFormat
from .ledger import load_ledger
from .logging_setup import get_logger
from .matching import DEFAULT_MATCHER, Matcher
from .models import MonthlyReport, ReportPeriod
from .renderer import ReportRenderer

logger = get_logger("budget_report.api")


@dataclass(frozen=True, slots=True)
class ReportOutcome:
    report: MonthlyReport
    workbook: Path


def prepare_report(
    settings: ReportSettings,
    *,
    month: int | None = None,
    fmt: BankCsvFormat = DEFAULT_FORMAT,
    matcher: Matcher = DEFAULT_MATCHER,
) -> MonthlyReport:
    """Load both sources and aggregate them, without writing anything.

    ``month`` overrides the month derived from the transactions; the year is
    always taken from the data.
    """

    catalog = load_catalog(
        settings.template_file,
        sheet=settings.template_sheet,
        expense_types=settings.expense_types,
    )
    logger.debug("Ignored transaction patterns: %s", list(settings.ignored_transactions))
    ledger = load_ledger(
        settings.data_dir,
        catalog.keys(),
        settings.ignored_transactions,
        fmt=fmt,
        matcher=matcher,
    )
    if ledger.is_empty:
        raise EmptyResult(
            f"no spending or income found in {settings.data_dir}; "
            "either no export file is there or every row was skipped"
        )

    report = build_report(catalog, ledger, matcher=matcher)
    if month is not None:
        report = replace(report, period=ReportPeriod(year=report.period.year, month=month))
    return report


def generate_monthly_report(
    settings: ReportSettings,
    *,
    month: int | None = None,
    fmt: BankCsvFormat = DEFAULT_FORMAT,
    matcher: Matcher = DEFAULT_MATCHER,
) -> ReportOutcome:
    """Build the report and write its month sheet into ``settings.budget_file``."""

    report = prepare_report(settings, month=month, fmt=fmt, matcher=matcher)
    workbook = ReportRenderer(settings.budget_file).render(report)
    return ReportOutcome(report=report, workbook=workbook)


__all__ = ["ReportOutcome", "prepare_report", "generate_monthly_report"]

"""Derive the report datasets from a budget catalog and a finished ledger.

``aggregate`` produces the two core datasets:

- one :class:`ExpenseSummaryRow` per spending key, in bucket order, with the
  budget line copied from the catalog when the key is budgeted;
- the keys with more than one transaction, most transactions first.

``build_report`` adds the headline totals, the income listing and the
reporting period. Nothing here mutates its inputs, so repeated calls on the
same catalog and ledger return equal results.
"""

from __future__ import annotations

from .catalog import BudgetCatalog
from .errors import EmptyResult
from .matching import DEFAULT_MATCHER, Matcher
from .models import (
    NO_TYPE,
    ZERO,
    ExpandedExpenseEntry,
    ExpenseSummaryRow,
    IncomeRow,
    Ledger,
    MonthlyReport,
    ReportPeriod,
    ReportSummary,
)


def expense_summary(
    catalog: BudgetCatalog, ledger: Ledger, *, matcher: Matcher = DEFAULT_MATCHER
) -> tuple[ExpenseSummaryRow, ...]:
    rows: list[ExpenseSummaryRow] = []
    for key, bucket in ledger.spending.items():
        entry = catalog.find(key, matcher=matcher)
        if entry is not None:
            name = entry.display_name
            expense_type = entry.expense_type or NO_TYPE
            budgeted = entry.budgeted_amount
        else:
            name, expense_type, budgeted = key, NO_TYPE, ZERO
        rows.append(
            ExpenseSummaryRow(
                name=name,
                expense_type=expense_type,
                budgeted=budgeted,
                actual_cost=bucket.total_amount,
                difference=bucket.total_amount + budgeted,
            )
        )
    return tuple(rows)


def expanded_expenses(ledger: Ledger) -> tuple[ExpandedExpenseEntry, ...]:
    """Spending keys with several transactions, by count descending.

    ``sorted`` is stable, so keys with equal counts keep bucket order.
    """

    multi = [(key, b) for key, b in ledger.spending.items() if b.count > 1]
    multi.sort(key=lambda kv: kv[1].count, reverse=True)
    return tuple(ExpandedExpenseEntry(key=k, transactions=b.transactions) for k, b in multi)


def aggregate(
    catalog: BudgetCatalog, ledger: Ledger, *, matcher: Matcher = DEFAULT_MATCHER
) -> tuple[tuple[ExpenseSummaryRow, ...], tuple[ExpandedExpenseEntry, ...]]:
    """Return ``(expense_summary, expanded)`` for ``ledger``."""

    return expense_summary(catalog, ledger, matcher=matcher), expanded_expenses(ledger)


def income_rows(ledger: Ledger) -> tuple[IncomeRow, ...]:
    return tuple(
        IncomeRow(date=tx.date, source=key, amount=tx.amount)
        for key, bucket in ledger.income.items()
        for tx in bucket.transactions
    )


def summarize(ledger: Ledger) -> ReportSummary:
    # total_spending is negative, so savings is a plain sum.
    return ReportSummary(
        total_income=ledger.total_income,
        total_expense=-ledger.total_spending,
        savings=ledger.total_income + ledger.total_spending,
    )


def report_period(
    ledger: Ledger, expanded: tuple[ExpandedExpenseEntry, ...] = ()
) -> ReportPeriod:
    """Pick the month the report covers.

    Uses the first expanded entry's first transaction; without expanded
    entries, the first spending transaction read, then the first income one.
    Raises :class:`EmptyResult` when the ledger holds no transactions.
    """

    if expanded:
        return ReportPeriod.from_date(expanded[0].transactions[0].date)
    for buckets in (ledger.spending, ledger.income):
        for bucket in buckets.values():
            if bucket.transactions:
                return ReportPeriod.from_date(bucket.transactions[0].date)
    raise EmptyResult("no spending or income transactions were found")


def build_report(
    catalog: BudgetCatalog,
    ledger: Ledger,
    *,
    period: ReportPeriod | None = None,
    matcher: Matcher = DEFAULT_MATCHER,
) -> MonthlyReport:
    """Assemble the full :class:`MonthlyReport`.

    Raises :class:`EmptyResult` when the ledger saw neither spending nor income.
    """

    if ledger.is_empty:
        raise EmptyResult("no spending or income transactions were found")
    summary_rows, expanded = aggregate(catalog, ledger, matcher=matcher)
    return MonthlyReport(
        period=period or report_period(ledger, expanded),
        summary=summarize(ledger),
        expense_summary=summary_rows,
        income=income_rows(ledger),
        expanded=expanded,
    )


__all__ = [
    "aggregate",
    "expense_summary",
    "expanded_expenses",
    "income_rows",
    "summarize",
    "report_period",
    "build_report",
]

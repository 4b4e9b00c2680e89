"""Data models for ``budget_report``.

All records are frozen dataclasses. Amounts are :class:`decimal.Decimal` and
keep the bank's sign convention throughout: negative is money out, positive is
money in. Dates are strings in ``YYYY/MM/DD`` form, as rendered in the report.

Ordered mappings (catalog entries, ledger buckets) rely on ``dict`` insertion
order. That order is observable: it decides which catalog key wins a match and
how ties are broken when ordering expanded entries.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

NO_TYPE = "No Type"
"""Expense type shown for spending keys that have no budget entry."""

ZERO = Decimal("0")

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BudgetEntry:
    """One budgeted line item from the template.

    ``expense_type`` is the label of the nearest category header above the
    row, or ``None`` when the row precedes every header.
    """

    key: str
    display_name: str
    budgeted_amount: Decimal
    expense_type: str | None


@dataclass(frozen=True, slots=True)
class Transaction:
    date: str
    amount: Decimal
    description: str

    @property
    def is_spending(self) -> bool:
        return self.amount < 0


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LedgerBucket:
    """Accumulated total and transactions for one resolved key.

    Buckets only grow: :meth:`with_transaction` returns a new bucket whose
    total equals the sum of its transactions.
    """

    total_amount: Decimal = ZERO
    transactions: tuple[Transaction, ...] = ()

    def with_transaction(self, tx: Transaction) -> LedgerBucket:
        return LedgerBucket(
            total_amount=self.total_amount + tx.amount,
            transactions=(*self.transactions, tx),
        )

    @property
    def count(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True, slots=True)
class Ledger:
    """Per-key buckets for spending (amount < 0) and income (amount >= 0)."""

    spending: Mapping[str, LedgerBucket] = field(default_factory=dict)
    income: Mapping[str, LedgerBucket] = field(default_factory=dict)
    total_spending: Decimal = ZERO
    total_income: Decimal = ZERO

    @property
    def is_empty(self) -> bool:
        return not self.spending and not self.income

    @property
    def transaction_count(self) -> int:
        return sum(b.count for b in self.spending.values()) + sum(
            b.count for b in self.income.values()
        )


# ---------------------------------------------------------------------------
# Derived report datasets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ExpenseSummaryRow:
    """One row per spending key.

    ``difference = actual_cost + budgeted``; with a negative budget this is the
    slack left (positive) or the overspend (negative).
    """

    name: str
    expense_type: str
    budgeted: Decimal
    actual_cost: Decimal
    difference: Decimal


@dataclass(frozen=True, slots=True)
class ExpandedExpenseEntry:
    key: str
    transactions: tuple[Transaction, ...]


@dataclass(frozen=True, slots=True)
class IncomeRow:
    date: str
    source: str
    amount: Decimal


@dataclass(frozen=True, slots=True)
class ReportSummary:
    """Headline totals.

    ``total_expense`` is the positive magnitude of total spending;
    ``savings = total_income - total_expense``.
    """

    total_income: Decimal
    total_expense: Decimal
    savings: Decimal

    @property
    def savings_positive(self) -> bool:
        return self.savings > 0


@dataclass(frozen=True, slots=True)
class ReportPeriod:
    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be within 1..12, got {self.month}")

    @property
    def sheet_name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @classmethod
    def from_date(cls, date: str) -> ReportPeriod:
        """Parse ``YYYY/MM/DD`` into a period."""

        parts = date.split("/")
        if len(parts) != 3:
            raise ValueError(f"expected YYYY/MM/DD date, got {date!r}")
        return cls(year=int(parts[0]), month=int(parts[1]))


@dataclass(frozen=True, slots=True)
class MonthlyReport:
    """Everything the renderer needs, in presentation order."""

    period: ReportPeriod
    summary: ReportSummary
    expense_summary: tuple[ExpenseSummaryRow, ...]
    income: tuple[IncomeRow, ...]
    expanded: tuple[ExpandedExpenseEntry, ...]


__all__ = [
    "NO_TYPE",
    "BudgetEntry",
    "Transaction",
    "LedgerBucket",
    "Ledger",
    "ExpenseSummaryRow",
    "ExpandedExpenseEntry",
    "IncomeRow",
    "ReportSummary",
    "ReportPeriod",
    "MonthlyReport",
]

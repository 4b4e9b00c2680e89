"""Public interface for the ``budget_report`` package.

Symbol re-exports only; there is no runtime logic here.
"""

from .aggregate import aggregate, build_report
from .api import ReportOutcome, generate_monthly_report, prepare_report
from .catalog import BudgetCatalog, build_catalog, load_catalog
from .config import ReportSettings
from .errors import (
    BudgetReportError,
    EmptyResult,
    MalformedRow,
    SourceNotFound,
    UnreadableSource,
)
from .ingest.bank_csv import BankCsvFormat, load_transactions, read_transactions
from .ledger import LedgerBuilder, build_ledger, load_ledger
from .matching import (
    ExactKeyMatcher,
    Matcher,
    MatchKind,
    MatchResult,
    PrefixMatcher,
    SubstringMatcher,
    match_description,
)
from .models import (
    BudgetEntry,
    ExpandedExpenseEntry,
    ExpenseSummaryRow,
    IncomeRow,
    Ledger,
    LedgerBucket,
    MonthlyReport,
    ReportPeriod,
    ReportSummary,
    Transaction,
)
from .renderer import ReportRenderer

__all__ = [
    # API
    "generate_monthly_report",
    "prepare_report",
    "ReportOutcome",
    "ReportSettings",
    # Pipeline stages
    "build_catalog",
    "load_catalog",
    "match_description",
    "build_ledger",
    "load_ledger",
    "load_transactions",
    "read_transactions",
    "aggregate",
    "build_report",
    "BudgetCatalog",
    "LedgerBuilder",
    "BankCsvFormat",
    "ReportRenderer",
    # Matching strategies
    "Matcher",
    "SubstringMatcher",
    "PrefixMatcher",
    "ExactKeyMatcher",
    "MatchKind",
    "MatchResult",
    # Models
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
    # Errors
    "BudgetReportError",
    "SourceNotFound",
    "UnreadableSource",
    "MalformedRow",
    "EmptyResult",
]

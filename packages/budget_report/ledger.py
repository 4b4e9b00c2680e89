"""Fold bank transactions into per-key spending and income buckets.

Each transaction is resolved by :func:`~budget_report.matching.match_description`:

- ignored descriptions contribute nothing (no bucket, no total);
- matched descriptions land in the bucket of their budget key;
- unmatched descriptions use the raw description as the bucket key.

Negative amounts go to spending, everything else to income. The bucket update
and the grand total update happen together in :meth:`LedgerBuilder.add`, so
``total_spending`` equals the sum of the spending buckets after every call.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from os import PathLike
from types import MappingProxyType

from .ingest.bank_csv import DEFAULT_FORMAT, BankCsvFormat, load_transactions
from .logging_setup import get_logger
from .matching import DEFAULT_MATCHER, MatchResult, Matcher, match_description
from .models import ZERO, Ledger, LedgerBucket, Transaction

logger = get_logger("budget_report.ledger")


class LedgerBuilder:
    """Single-pass accumulator producing a read-only :class:`Ledger`."""

    def __init__(
        self,
        candidate_keys: Iterable[str],
        ignore_list: Iterable[str] = (),
        *,
        matcher: Matcher = DEFAULT_MATCHER,
    ) -> None:
        # Materialized once; key order decides which budget key wins.
        self._candidate_keys = tuple(candidate_keys)
        self._ignore_list = tuple(ignore_list)
        self._matcher = matcher
        self._spending: dict[str, LedgerBucket] = {}
        self._income: dict[str, LedgerBucket] = {}
        self._total_spending: Decimal = ZERO
        self._total_income: Decimal = ZERO
        self.ignored_count = 0

    @property
    def total_spending(self) -> Decimal:
        return self._total_spending

    @property
    def total_income(self) -> Decimal:
        return self._total_income

    def add(self, tx: Transaction) -> MatchResult:
        """Route one transaction and return how it was resolved."""

        result = match_description(
            tx.description, self._candidate_keys, self._ignore_list, matcher=self._matcher
        )
        if result.is_ignored:
            self.ignored_count += 1
            return result

        key = result.bucket_key
        if tx.is_spending:
            self._spending[key] = self._spending.get(key, LedgerBucket()).with_transaction(tx)
            self._total_spending += tx.amount
        else:
            self._income[key] = self._income.get(key, LedgerBucket()).with_transaction(tx)
            self._total_income += tx.amount
        return result

    def add_all(self, transactions: Iterable[Transaction]) -> LedgerBuilder:
        for tx in transactions:
            self.add(tx)
        return self

    def build(self) -> Ledger:
        """Snapshot the current state as an immutable :class:`Ledger`."""

        return Ledger(
            spending=MappingProxyType(dict(self._spending)),
            income=MappingProxyType(dict(self._income)),
            total_spending=self._total_spending,
            total_income=self._total_income,
        )


def build_ledger(
    transactions: Iterable[Transaction],
    candidate_keys: Iterable[str],
    ignore_list: Iterable[str] = (),
    *,
    matcher: Matcher = DEFAULT_MATCHER,
) -> Ledger:
    """Fold ``transactions`` (in read order) into a :class:`Ledger`."""

    builder = LedgerBuilder(candidate_keys, ignore_list, matcher=matcher)
    ledger = builder.add_all(transactions).build()
    logger.info(
        "Ledger built: %d spending keys, %d income keys, %d ignored transactions",
        len(ledger.spending),
        len(ledger.income),
        builder.ignored_count,
    )
    return ledger


def load_ledger(
    directory: str | PathLike[str],
    candidate_keys: Iterable[str],
    ignore_list: Iterable[str] = (),
    *,
    fmt: BankCsvFormat = DEFAULT_FORMAT,
    matcher: Matcher = DEFAULT_MATCHER,
) -> Ledger:
    """Read every export under ``directory`` and build the ledger.

    Raises :class:`~budget_report.errors.SourceNotFound` when the directory
    does not exist.
    """

    transactions = load_transactions(directory, fmt=fmt)
    return build_ledger(transactions, candidate_keys, ignore_list, matcher=matcher)


__all__ = ["LedgerBuilder", "build_ledger", "load_ledger"]

"""Adapter for bank transaction exports (CSV, optionally XLSX).

Bank exports carry a few preamble lines before the transactions, and some
banks repeat a banner row (e.g. the card product name) between sections. The
layout is described by :class:`BankCsvFormat`:

- rows are numbered from 1; the first ``skip_rows`` rows are always dropped;
- rows whose first column equals a banner value (case-insensitive) are dropped;
- date, amount and description are read from fixed 0-based columns.

Dates arrive as ``YYYYMMDD`` and are rendered ``YYYY/MM/DD``. Amounts are
parsed into :class:`~decimal.Decimal` with the sign preserved.

Failure mode
------------
A row with a missing or unparseable field raises :class:`MalformedRow` from
:func:`row_to_transaction`; :func:`read_transactions` logs and skips it. A
file that cannot be decoded at all (not UTF-8, corrupt workbook) raises
:class:`UnreadableSource` naming the file, which ends the run.
"""

from __future__ import annotations

import csv
import zipfile
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from os import PathLike
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import MalformedRow, SourceNotFound, UnreadableSource
from ..logging_setup import get_logger
from ..models import Transaction

logger = get_logger("budget_report.ingest.bank_csv")


@dataclass(frozen=True, slots=True)
class BankCsvFormat:
    """Column layout and row filters for one bank's export."""

    skip_rows: int = 4
    banner_values: tuple[str, ...] = ("first bank card",)
    date_column: int = 2
    amount_column: int = 3
    description_column: int = 4
    extensions: tuple[str, ...] = (".csv",)

    def accepts(self, path: Path) -> bool:
        return path.suffix.lower() in {e.lower() for e in self.extensions}


DEFAULT_FORMAT = BankCsvFormat()


# ---------------------------------------------------------------------------
# Field normalization
# ---------------------------------------------------------------------------


def parse_amount(raw: str | None) -> Decimal:
    """Parse a signed amount such as ``-1,234.56``, ``$12``, or ``(7.50)``."""

    if raw is None:
        raise ValueError("amount is required")
    s = raw.strip()
    if not s:
        raise ValueError("amount is empty")
    negative = False

    # Strip leading sign, currency symbol and surrounding parentheses in any
    # order until stable, so "-($1,234.56)" and "$(1,234.56)" both work.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("$"):
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "").strip()
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    return -abs(d) if negative else d


def _cell_amount(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"invalid amount: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))
    return parse_amount(None if value is None else str(value))


def normalize_date(value: Any) -> str:
    """Render a bank date as ``YYYY/MM/DD``.

    Accepts ``YYYYMMDD`` (string or integer), ``YYYY/MM/DD``, ``YYYY-MM-DD``
    and ``date``/``datetime`` cells from spreadsheet exports.
    """

    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime("%Y/%m/%d")
    if value is None:
        raise ValueError("date is required")
    s = str(value).strip()
    if not s:
        raise ValueError("date is empty")
    for fmt in ("%Y%m%d", "%Y/%m/%d", "%Y-%m-%d"):
        try:
            return datetime.strptime(s, fmt).strftime("%Y/%m/%d")
        except ValueError:
            continue
    raise ValueError(f"invalid date: {value!r}")


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def row_to_transaction(
    row: Sequence[Any],
    *,
    row_number: int,
    source: str,
    fmt: BankCsvFormat = DEFAULT_FORMAT,
) -> Transaction:
    """Extract a :class:`Transaction` from one data row or raise ``MalformedRow``."""

    raw_description = _cell(row, fmt.description_column)
    if _is_blank(raw_description):
        raise MalformedRow(source, row_number, "description is empty")
    try:
        tx_date = normalize_date(_cell(row, fmt.date_column))
        amount = _cell_amount(_cell(row, fmt.amount_column))
    except ValueError as exc:
        raise MalformedRow(source, row_number, str(exc)) from exc
    # Description is kept verbatim; it becomes the bucket key when unmatched.
    return Transaction(date=tx_date, amount=amount, description=str(raw_description))


# ---------------------------------------------------------------------------
# File reading
# ---------------------------------------------------------------------------


def _iter_raw_rows(path: Path) -> Iterator[list[Any]]:
    """Yield raw rows; undecodable files raise :class:`UnreadableSource`."""

    if path.suffix.lower() == ".xlsx":
        try:
            wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
        except (zipfile.BadZipFile, InvalidFileException) as exc:
            raise UnreadableSource(path, f"not a valid .xlsx workbook ({exc})") from exc
        try:
            for values in wb.active.iter_rows(values_only=True):
                yield list(values)
        finally:
            wb.close()
        return

    try:
        with path.open(encoding="utf-8-sig", newline="") as f:
            yield from csv.reader(f)
    except UnicodeDecodeError as exc:
        raise UnreadableSource(
            path, f"not UTF-8 text ({exc.reason} at byte {exc.start}); re-export as UTF-8"
        ) from exc
    except csv.Error as exc:
        raise UnreadableSource(path, f"not a CSV file ({exc})") from exc


def _is_skipped(row: Sequence[Any], row_number: int, fmt: BankCsvFormat) -> bool:
    if row_number <= fmt.skip_rows:
        return True
    if all(_is_blank(v) for v in row):
        return True
    first = _cell(row, 0)
    if first is None:
        return False
    banners = {b.strip().casefold() for b in fmt.banner_values}
    return str(first).strip().casefold() in banners


def read_transactions(
    path: str | PathLike[str], *, fmt: BankCsvFormat = DEFAULT_FORMAT
) -> Iterator[Transaction]:
    """Yield transactions from one export file in file order."""

    p = Path(path)
    for row_number, row in enumerate(_iter_raw_rows(p), start=1):
        if _is_skipped(row, row_number, fmt):
            continue
        try:
            yield row_to_transaction(row, row_number=row_number, source=p.name, fmt=fmt)
        except MalformedRow as exc:
            logger.warning("Skipping transaction row: %s", exc)


def list_source_files(
    directory: str | PathLike[str], *, fmt: BankCsvFormat = DEFAULT_FORMAT
) -> list[Path]:
    """Return the recognized export files under ``directory`` in name order.

    Raises :class:`SourceNotFound` when ``directory`` does not exist.
    """

    d = Path(directory)
    if not d.is_dir():
        raise SourceNotFound("Transaction directory", d)
    return sorted((p for p in d.iterdir() if p.is_file() and fmt.accepts(p)), key=lambda p: p.name)


def load_transactions(
    directory: str | PathLike[str], *, fmt: BankCsvFormat = DEFAULT_FORMAT
) -> Iterator[Transaction]:
    """Return transactions from every recognized file under ``directory``.

    The directory is checked eagerly so a missing source fails here rather
    than on first iteration.
    """

    files = list_source_files(directory, fmt=fmt)
    if not files:
        logger.warning("No %s files found in %s", "/".join(fmt.extensions), directory)
    return _iter_files(files, fmt)


def _iter_files(files: list[Path], fmt: BankCsvFormat) -> Iterator[Transaction]:
    for path in files:
        count = 0
        for tx in read_transactions(path, fmt=fmt):
            count += 1
            yield tx
        logger.info("Read %d transactions from %s", count, path.name)


__all__ = [
    "BankCsvFormat",
    "DEFAULT_FORMAT",
    "parse_amount",
    "normalize_date",
    "row_to_transaction",
    "read_transactions",
    "list_source_files",
    "load_transactions",
]

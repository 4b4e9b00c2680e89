"""Budget catalog built from the recurring budget template.

The template sheet lists rows of ``(name, budgeted amount, key)``. Category
header rows (``Entertainment``, ``Utilities``, ...) introduce a section, and
each line item below a header inherits that header's label as its expense
type. A row named ``Expense`` is a plain section divider and leaves the
current type alone.

Rows are folded strictly in sheet order; the carried "current expense type"
is what makes the order significant.
"""

from __future__ import annotations

import zipfile
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from os import PathLike
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .errors import MalformedRow, SourceNotFound, UnreadableSource
from .ingest.bank_csv import parse_amount
from .logging_setup import get_logger
from .matching import DEFAULT_MATCHER, Matcher, find_first_key
from .models import ZERO, BudgetEntry

logger = get_logger("budget_report.catalog")

DEFAULT_EXPENSE_TYPES: tuple[str, ...] = ("Entertainment", "Utilities", "Others")
DEFAULT_TEMPLATE_SHEET = "Budget"

# Generic section divider; never an entry and never changes the current type.
_DIVIDER = "expense"


class BudgetCatalog(Mapping[str, BudgetEntry]):
    """Read-only, insertion-ordered mapping of budget key to entry."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, BudgetEntry] | None = None) -> None:
        self._entries: dict[str, BudgetEntry] = dict(entries or {})

    def __getitem__(self, key: str) -> BudgetEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BudgetCatalog({list(self._entries)!r})"

    def find(self, text: str, *, matcher: Matcher = DEFAULT_MATCHER) -> BudgetEntry | None:
        """Return the entry of the first catalog key that ``matcher`` finds in ``text``."""

        key = find_first_key(self._entries, text, matcher=matcher)
        return None if key is None else self._entries[key]


def _cell_text(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _budget_amount(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"invalid amount: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))
    s = str(value).strip()
    return parse_amount(s) if s else ZERO


@dataclass(slots=True)
class _CatalogFold:
    """Accumulator for the header/entry fold: current type plus entries so far."""

    header_labels: frozenset[str]
    current_type: str | None = None
    entries: dict[str, BudgetEntry] = field(default_factory=dict)

    def step(self, row_number: int, row: Sequence[Any], *, source: str) -> None:
        cells = list(row[:3]) + [None] * (3 - len(row[:3]))
        raw_name, raw_amount, raw_key = cells
        name = _cell_text(raw_name)
        key = _cell_text(raw_key)

        if name is None and key is None and _cell_text(raw_amount) is None:
            return

        if name is not None:
            folded = name.casefold()
            if folded == _DIVIDER:
                return
            if folded in self.header_labels:
                self.current_type = name.lower().capitalize()
                return

        if name is None or key is None:
            raise MalformedRow(
                source, row_number, f"key/name not found for name/key: {name} || {key}"
            )

        try:
            amount = _budget_amount(raw_amount)
        except ValueError as exc:
            raise MalformedRow(source, row_number, str(exc)) from exc

        # Last write wins for a repeated key; the key keeps its first position.
        self.entries[key] = BudgetEntry(
            key=key,
            display_name=name,
            budgeted_amount=amount,
            expense_type=self.current_type,
        )


def build_catalog(
    rows: Iterable[Sequence[Any]],
    *,
    expense_types: Iterable[str] = DEFAULT_EXPENSE_TYPES,
    source: str = "template",
) -> BudgetCatalog:
    """Fold template rows into a :class:`BudgetCatalog`.

    Each row exposes ``(name, budgeted_amount, key)`` positionally; extra
    cells are ignored and missing trailing cells read as empty. Rows missing a
    name or key are logged and skipped without affecting the current type.
    """

    fold = _CatalogFold(header_labels=frozenset(t.casefold() for t in expense_types))
    for row_number, row in enumerate(rows, start=1):
        try:
            fold.step(row_number, row, source=source)
        except MalformedRow as exc:
            logger.warning("Skipping budget row: %s", exc)
    return BudgetCatalog(fold.entries)


def load_catalog(
    path: str | PathLike[str],
    *,
    sheet: str = DEFAULT_TEMPLATE_SHEET,
    expense_types: Iterable[str] = DEFAULT_EXPENSE_TYPES,
) -> BudgetCatalog:
    """Read the template workbook at ``path`` and build the catalog.

    Raises :class:`SourceNotFound` when the workbook or the sheet is missing;
    callers treat that as "no budget configured", never as an empty catalog.
    A file that is not a workbook raises :class:`UnreadableSource`.
    """

    p = Path(path)
    if not p.is_file():
        raise SourceNotFound("Budget template", p)

    try:
        wb = openpyxl.load_workbook(p, read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException) as exc:
        raise UnreadableSource(p, f"not a valid .xlsx workbook ({exc})") from exc
    try:
        if sheet not in wb.sheetnames:
            raise SourceNotFound(f"Budget template sheet {sheet!r}", p)
        rows = wb[sheet].iter_rows(max_col=3, values_only=True)
        catalog = build_catalog(rows, expense_types=expense_types, source=p.name)
    finally:
        wb.close()

    logger.info("Loaded %d budget entries from %s", len(catalog), p)
    return catalog


__all__ = [
    "DEFAULT_EXPENSE_TYPES",
    "DEFAULT_TEMPLATE_SHEET",
    "BudgetCatalog",
    "build_catalog",
    "load_catalog",
]

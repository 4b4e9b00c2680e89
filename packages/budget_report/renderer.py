"""Write a :class:`MonthlyReport` into the yearly budget workbook.

The sheet named after the report month is replaced on every run. Layout:

- ``A1:B3``: total income, total expense and savings (green when positive);
- ``A5``: "Expense Summary" header over the expense table at ``A6``;
- below it: "Income Sources" header and the income table;
- ``J1``: "Expense Break Down" header, with one Date/Cost table per expanded
  key, dealt round-robin into the column groups starting at J, N and R.

Saving is all-or-nothing: the workbook is written to a temporary file next to
the target and moved over it with :func:`os.replace`.
"""

from __future__ import annotations

import os
import re
import tempfile
from collections.abc import Sequence
from decimal import Decimal
from os import PathLike
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo
from openpyxl.worksheet.worksheet import Worksheet

from .logging_setup import get_logger
from .models import ExpandedExpenseEntry, MonthlyReport

logger = get_logger("budget_report.renderer")

FONT_NAME = "Arial Narrow"
AMOUNT_FORMAT = "$#,##0.00;[Red]-$#,##0.00"

_BLACK = "FF000000"
_WHITE = "FFFFFFFF"
_PURPLE = "FF7030A0"
_GREEN = "FF9BBB59"

EXPENSE_COLUMNS = ("Expense Name", "Expense Type", "Expense", "Budget", "Difference")
INCOME_COLUMNS = ("Date", "From", "Amount")
BREAKDOWN_COLUMNS = ("Date", "Cost")

# First column of each breakdown lane (J, N, R).
BREAKDOWN_LANES = (10, 14, 18)
BREAKDOWN_FIRST_ROW = 3


def _solid(color: str) -> PatternFill:
    return PatternFill(fill_type="solid", start_color=color, end_color=color)


def _style_header(cell, *, size: int | None = None, fill: str = _PURPLE) -> None:
    cell.font = Font(name=FONT_NAME, bold=True, color=_WHITE, size=size)
    cell.fill = _solid(fill)
    cell.alignment = Alignment(horizontal="center")


def _style_main_header(cell) -> None:
    _style_header(cell, size=16, fill=_BLACK)


def _is_amount(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _put(ws: Worksheet, row: int, col: int, value: Any):
    cell = ws.cell(row=row, column=col, value=value)
    cell.font = Font(name=FONT_NAME)
    if _is_amount(value):
        cell.number_format = AMOUNT_FORMAT
    return cell


class _TableNames:
    """Excel table names are workbook-wide; hand out unique, valid ones."""

    def __init__(self, wb: Workbook) -> None:
        self._used = {name.casefold() for ws in wb.worksheets for name in ws.tables}

    def claim(self, base: str) -> str:
        name = re.sub(r"[^A-Za-z]", "_", base)
        if not name or not (name[0].isalpha() or name[0] == "_"):
            name = f"_{name}"
        candidate, n = name, 2
        while candidate.casefold() in self._used:
            candidate = f"{name}_{n}"
            n += 1
        self._used.add(candidate.casefold())
        return candidate


def _write_table(
    ws: Worksheet,
    names: _TableNames,
    *,
    name: str,
    top: int,
    left: int,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
) -> int:
    """Write header + rows at (top, left); return the last row used."""

    for j, title in enumerate(columns):
        _style_header(_put(ws, top, left + j, title))
    for i, values in enumerate(rows, start=1):
        for j, value in enumerate(values):
            _put(ws, top + i, left + j, value)
    bottom = top + len(rows)
    # A table needs at least one data row to be valid in Excel.
    if rows:
        ref = f"{get_column_letter(left)}{top}:{get_column_letter(left + len(columns) - 1)}{bottom}"
        table = Table(displayName=names.claim(name), ref=ref)
        table.tableStyleInfo = TableStyleInfo(name="TableStyleMedium9", showRowStripes=True)
        ws.add_table(table)
    return bottom


def _write_breakdown(
    ws: Worksheet,
    names: _TableNames,
    *,
    sheet: str,
    col: int,
    row: int,
    entry: ExpandedExpenseEntry,
) -> None:
    header = _put(ws, row - 1, col, entry.key)
    _style_header(header)
    ws.merge_cells(start_row=row - 1, start_column=col, end_row=row - 1, end_column=col + 1)
    _write_table(
        ws,
        names,
        name=f"{sheet}_{entry.key}",
        top=row,
        left=col,
        columns=BREAKDOWN_COLUMNS,
        rows=[(tx.date, -tx.amount) for tx in entry.transactions],
    )


def _fit_columns(ws: Worksheet) -> None:
    widths: dict[int, int] = {}
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None:
                continue
            widths[cell.column] = max(widths.get(cell.column, 0), len(str(cell.value)))
    for col, width in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = width + 2


def fill_sheet(wb: Workbook, report: MonthlyReport) -> Worksheet:
    """Replace the report month's sheet in ``wb`` and lay out the report."""

    sheet = report.period.sheet_name
    if sheet in wb.sheetnames:
        del wb[sheet]
    ws = wb.create_sheet(sheet)
    names = _TableNames(wb)

    summary = report.summary
    for r, (label, value) in enumerate(
        (
            ("Total Income", summary.total_income),
            ("Total Expense", summary.total_expense),
            ("Savings", summary.savings),
        ),
        start=1,
    ):
        _put(ws, r, 1, label)
        _put(ws, r, 2, value)
    thin = Side(style="thin", color=_BLACK)
    savings_cell = ws.cell(row=3, column=2)
    savings_cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)
    savings_cell.fill = _solid(_GREEN if summary.savings_positive else _WHITE)

    _style_main_header(_put(ws, 5, 1, "Expense Summary"))
    ws.merge_cells("A5:E5")
    last = _write_table(
        ws,
        names,
        name=f"{sheet}_Expense_Summary",
        top=6,
        left=1,
        columns=EXPENSE_COLUMNS,
        rows=[
            (r.name.strip(), r.expense_type, -r.actual_cost, r.budgeted, r.difference)
            for r in report.expense_summary
        ],
    )

    income_header = last + 2
    _style_main_header(_put(ws, income_header, 1, "Income Sources"))
    ws.merge_cells(start_row=income_header, start_column=1, end_row=income_header, end_column=3)
    _write_table(
        ws,
        names,
        name=f"{sheet}_Income",
        top=income_header + 1,
        left=1,
        columns=INCOME_COLUMNS,
        rows=[(r.date, r.source.strip(), r.amount) for r in report.income],
    )

    _style_main_header(_put(ws, 1, BREAKDOWN_LANES[0], "Expense Break Down"))
    ws.merge_cells("J1:S1")
    next_row = [BREAKDOWN_FIRST_ROW] * len(BREAKDOWN_LANES)
    for i, entry in enumerate(report.expanded):
        lane = i % len(BREAKDOWN_LANES)
        _write_breakdown(
            ws, names, sheet=sheet, col=BREAKDOWN_LANES[lane], row=next_row[lane], entry=entry
        )
        next_row[lane] += len(entry.transactions) + 3

    _fit_columns(ws)
    return ws


class ReportRenderer:
    """Render reports into the workbook at ``workbook_path``.

    A missing workbook is created; an existing one keeps its other sheets.
    """

    def __init__(self, workbook_path: str | PathLike[str]) -> None:
        self.workbook_path = Path(workbook_path)

    def _open(self) -> Workbook:
        if self.workbook_path.exists():
            return load_workbook(self.workbook_path)
        logger.info("Budget workbook %s not found; creating it", self.workbook_path)
        wb = Workbook()
        # Drop the blank default sheet; fill_sheet adds the month sheet.
        wb.remove(wb.active)
        return wb

    def render(self, report: MonthlyReport) -> Path:
        wb = self._open()
        fill_sheet(wb, report)

        target = self.workbook_path
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.stem}-", suffix=".xlsx", dir=target.parent
        )
        os.close(fd)
        try:
            wb.save(tmp_name)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Wrote %s sheet to %s", report.period.sheet_name, target)
        return target


__all__ = ["ReportRenderer", "fill_sheet"]

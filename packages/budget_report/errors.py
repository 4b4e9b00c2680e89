"""Error taxonomy for the monthly report run.

``SourceNotFound``, ``UnreadableSource`` and ``EmptyResult`` are terminal for a
run; the CLI turns them into a logged message and a non-zero exit.
``MalformedRow`` is raised by row extractors and caught by the folding loops,
which log it and move on.
"""

from __future__ import annotations

from os import PathLike


class BudgetReportError(Exception):
    """Base class for every error raised by ``budget_report``."""


class SourceNotFound(BudgetReportError):
    """A required input (template workbook, sheet, or data directory) is missing."""

    def __init__(self, what: str, path: str | PathLike[str]) -> None:
        self.what = what
        self.path = str(path)
        super().__init__(f"{what} not found: {self.path}")


class UnreadableSource(BudgetReportError):
    """An input exists but cannot be decoded (wrong text encoding, corrupt workbook)."""

    def __init__(self, path: str | PathLike[str], reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"cannot read {self.path}: {reason}")


class MalformedRow(BudgetReportError):
    """A non-header row lacks a required field or holds an unparseable value."""

    def __init__(self, source: str, row_number: int, reason: str) -> None:
        self.source = source
        self.row_number = row_number
        self.reason = reason
        super().__init__(f"{source} row {row_number}: {reason}")


class EmptyResult(BudgetReportError):
    """No spending and no income were observed, so there is nothing to report."""


__all__ = [
    "BudgetReportError",
    "SourceNotFound",
    "UnreadableSource",
    "MalformedRow",
    "EmptyResult",
]

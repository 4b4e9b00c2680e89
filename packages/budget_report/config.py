"""Run settings for the monthly report.

``ReportSettings.from_env()`` reads the process environment (the CLI loads a
local ``.env`` first). The core modules never read the environment; they get
what they need from a settings instance passed in by the caller.

Environment variables
---------------------
- ``IGNORED_TRANSACTIONS``: semicolon-delimited substrings of descriptions to
  drop entirely (e.g. transfers between own accounts).
- ``BUDGET_TEMPLATE_FILE`` / ``BUDGET_TEMPLATE_SHEET``: budget template.
- ``BUDGET_FILE``: yearly workbook receiving the month sheet.
- ``BUDGET_DATA_DIR``: directory of bank exports.
- ``BUDGET_EXPENSE_TYPES``: semicolon-delimited category header labels.
- ``BUDGET_REPORT_LOG_LEVEL``: logging level name or number, read by
  :func:`log_level_from_env` for the CLI's logging setup.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import date
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .catalog import DEFAULT_EXPENSE_TYPES, DEFAULT_TEMPLATE_SHEET

LOG_LEVEL_ENV = "BUDGET_REPORT_LOG_LEVEL"

# Settings field -> environment variable.
_ENV_FIELDS: tuple[tuple[str, str], ...] = (
    ("template_file", "BUDGET_TEMPLATE_FILE"),
    ("template_sheet", "BUDGET_TEMPLATE_SHEET"),
    ("budget_file", "BUDGET_FILE"),
    ("data_dir", "BUDGET_DATA_DIR"),
    ("ignored_transactions", "IGNORED_TRANSACTIONS"),
    ("expense_types", "BUDGET_EXPENSE_TYPES"),
)


def split_list(raw: str | None) -> tuple[str, ...]:
    """Split a semicolon-delimited value, dropping blank entries."""

    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(";") if part.strip())


def log_level_from_env(environ: Mapping[str, str] | None = None) -> str | None:
    """Return the configured log level, or ``None`` when unset or blank."""

    env = os.environ if environ is None else environ
    raw = env.get(LOG_LEVEL_ENV, "").strip()
    return raw or None


def default_budget_file(year: int | None = None) -> Path:
    return Path("Budget") / f"budget-{year or date.today().year}.xlsx"


class ReportSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    template_file: Path = Path("Budget") / "template.xlsx"
    template_sheet: str = DEFAULT_TEMPLATE_SHEET
    budget_file: Path = Field(default_factory=default_budget_file)
    data_dir: Path = Path("Data")
    ignored_transactions: tuple[str, ...] = ()
    expense_types: tuple[str, ...] = DEFAULT_EXPENSE_TYPES

    @field_validator("ignored_transactions", "expense_types", mode="before")
    @classmethod
    def _split_semicolons(cls, v: object) -> object:
        if v is None:
            return ()
        if isinstance(v, str):
            return split_list(v)
        return tuple(s.strip() for s in v if isinstance(s, str) and s.strip())

    @field_validator("template_sheet")
    @classmethod
    def _sheet_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("template_sheet must be non-empty")
        return v.strip()

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: object
    ) -> ReportSettings:
        """Build settings from ``environ`` (default ``os.environ``).

        Keyword ``overrides`` win over the environment; ``None`` values are
        ignored so CLI options left unset fall through.
        """

        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for field_name, var in _ENV_FIELDS:
            raw = env.get(var)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


__all__ = [
    "LOG_LEVEL_ENV",
    "ReportSettings",
    "default_budget_file",
    "log_level_from_env",
    "split_list",
]

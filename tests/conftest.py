"""Pytest configuration for test isolation.

The CLI and ``ReportSettings.from_env`` read ``BUDGET_*`` variables and a
``.env`` in the working directory. A developer's own settings must never leak
into tests, so every test runs from its own temporary directory with those
variables cleared.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make the workspace `packages/` dir (and the repo root, for `tests.helpers`)
# importable without an installed distribution.
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]

_ENV_VARS = (
    "IGNORED_TRANSACTIONS",
    "BUDGET_TEMPLATE_FILE",
    "BUDGET_TEMPLATE_SHEET",
    "BUDGET_FILE",
    "BUDGET_DATA_DIR",
    "BUDGET_EXPENSE_TYPES",
    "BUDGET_REPORT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    from budget_report import logging_setup

    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)

    # Every test starts with logging unconfigured and propagating to caplog;
    # whatever the test installs on the package logger is undone afterwards.
    pkg_logger = logging.getLogger("budget_report")
    level = pkg_logger.level
    monkeypatch.setattr(logging_setup, "_handler", None)
    monkeypatch.setattr(pkg_logger, "handlers", list(pkg_logger.handlers))
    monkeypatch.setattr(pkg_logger, "propagate", True)
    yield
    pkg_logger.setLevel(level)

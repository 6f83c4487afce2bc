"""
Shared test fixtures for asset-frame tests.

All source files are synthetic and written to ``tmp_path`` -- no real
input files are required.  ``write_source`` is a small factory so each
test can spell out exactly the CSV text it ingests.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Canonical sample contents
# ---------------------------------------------------------------------------
TWO_ROW_OPEN = "Date,Open\n2020-01-01,10.5\n2020-01-02,11.0\n"

EUR_USD = (
    "Date,Open,High,Low,Close\n"
    "2020-01-03,1.1170,1.1180,1.1125,1.1160\n"
    "2020-01-01,1.1213,1.1225,1.1200,1.1215\n"
    "2020-01-02,1.1215,1.1229,1.1163,1.1172\n"
)

DAY_FIRST = (
    "Day,Open,Volume\n"
    "02-01-2020,20.0,300\n"
    "04-01-2020,21.5,310\n"
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory: ``write_source("EUR_USD.csv", text) -> Path``."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8", newline="")
        return path

    return _write


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (config -> table -> export)",
    )

"""Pytest configuration and fixtures for test suite.

Provides:
- Python path setup (so the package imports without installation)
- Environment defaults applied before the settings object is created
- Shared record and HTML fixtures
"""
import os
import sys
from pathlib import Path

import pytest

# Settings are read at import time, so defaults must be in place first
os.environ.setdefault("ENRICH_BROWSER_ENABLED", "false")
os.environ.setdefault("ENRICH_RETRY_BASE_DELAY", "0")
os.environ.setdefault("ENRICH_LOG_LEVEL", "WARNING")

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from catalog_enricher.models.record import ToolRecord  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def load_fixture():
    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")
    return _load


@pytest.fixture
def make_record():
    """Factory for ToolRecord with sensible defaults."""
    counter = {"n": 0}

    def _make(
        description: str = "SD1103-1000-035-10R1",
        type_of_tool: str = "Solid Drill",
        channel: str = "SECO",
        **slots,
    ) -> ToolRecord:
        counter["n"] += 1
        return ToolRecord(
            row_index=counter["n"] + 1,
            no=counter["n"],
            tool_description=description,
            type_of_tool=type_of_tool,
            procurement_channel=channel,
            **slots,
        )

    return _make

# tests/conftest.py
from __future__ import annotations

from typing import Sequence

import pytest

from grouptable.memory.table import ChunkedTable


@pytest.fixture(autouse=True)
def _isolated_logs(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep jsonl event logs and env overrides from leaking between tests."""
    monkeypatch.setenv("GROUPTABLE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("GROUPTABLE_PROBE_WORKERS", raising=False)
    yield


def table_with_liveness(liveness: Sequence[bool]) -> ChunkedTable:
    """One chunk per entry; live chunks hold a single row tagged with their position."""
    return ChunkedTable([[{"pos": i}] if live else [] for i, live in enumerate(liveness)])


@pytest.fixture
def make_table():
    return table_with_liveness

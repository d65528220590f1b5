"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest


def pytest_configure() -> None:
    """Ensure the backend/ directory is importable without installing the package."""
    root = Path(__file__).resolve().parents[1]
    backend_path = str(root / "backend")
    if backend_path not in sys.path:
        sys.path.insert(0, backend_path)


class FakeStore:
    """In-memory stand-in for StatsStore that records every fetch."""

    def __init__(self, rows: Optional[Dict[str, Optional[str]]] = None, fail: bool = False) -> None:
        self.rows = dict(rows or {})
        self.fail = fail
        self.calls: List[str] = []

    def _check(self) -> None:
        if self.fail:
            from mcstats.database import StoreUnavailable

            raise StoreUnavailable("connection refused")

    def fetch_by_id(self, uuid: str):
        from mcstats.stats import PlayerRecord

        self.calls.append(f"fetch_by_id:{uuid}")
        self._check()
        if uuid not in self.rows:
            return None
        return PlayerRecord(id=uuid, raw_payload=self.rows[uuid])

    def fetch_all(self) -> Iterable:
        from mcstats.stats import PlayerRecord

        self.calls.append("fetch_all")
        self._check()
        return [PlayerRecord(id=k, raw_payload=v) for k, v in self.rows.items()]

    def dispose(self) -> None:
        pass


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def failing_store() -> FakeStore:
    return FakeStore(fail=True)

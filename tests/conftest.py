"""
Shared pytest fixtures for dbcli tests.

No database is needed: ``FakeDriver`` mimics the bits of a DB‑API driver the
runner touches and records every connect, close and execute call.
"""
from __future__ import annotations

import typing as t

import pytest

from dbcli.driver import select_driver
from dbcli.runner import ExecutionContext


class FakeDatabaseError(Exception):
    """Stands in for a driver's PEP 249 ``Error``."""


class FakeCursor:
    def __init__(self, driver: "FakeDriver") -> None:
        self.driver = driver
        self.description: list[tuple] | None = None
        self.rowcount = -1
        self._rows: list[tuple] = []

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def execute(self, sql: str) -> None:
        self.driver.executed.append(sql)
        if sql in self.driver.failures:
            raise FakeDatabaseError(f"syntax error near {sql!r}")
        if sql in self.driver.results:
            columns, rows = self.driver.results[sql]
            self.description = [(c, None, None, None, None, None, None) for c in columns]
            self._rows = list(rows)
        else:
            self.description = None
            self.rowcount = self.driver.update_counts.get(sql, 0)

    def fetchall(self) -> list[tuple]:
        self.driver.fetched += 1
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        self.driver.cursors_closed += 1


class FakeConnection:
    def __init__(self, driver: "FakeDriver") -> None:
        self.driver = driver
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self.driver)

    def close(self) -> None:
        self.closed = True
        self.driver.closed += 1


class FakeDriver:
    errors = (FakeDatabaseError,)

    def __init__(self) -> None:
        self.opened = 0
        self.closed = 0
        self.cursors_closed = 0
        self.fetched = 0
        self.executed: list[str] = []
        self.credentials: list[tuple[str, str, str]] = []
        self.results: dict[str, tuple[list[str], list[tuple]]] = {}
        self.update_counts: dict[str, int] = {}
        self.failures: set[str] = set()
        self.fail_connect = False

    def connect(self, url: str, user: str = "", password: str = "") -> FakeConnection:
        self.credentials.append((url, user, password))
        if self.fail_connect:
            raise FakeDatabaseError("connection refused")
        self.opened += 1
        return FakeConnection(self)


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fake_selector(fake_driver) -> t.Callable[[str], FakeDriver]:
    """Validate the URL prefix like the real selector, then hand out the fake."""

    def _select(url: str) -> FakeDriver:
        select_driver(url)
        return fake_driver

    return _select


@pytest.fixture
def exec_context(fake_selector) -> ExecutionContext:
    return ExecutionContext(select_driver=fake_selector)

# tests/conftest.py
"""Shared test fixtures and helpers.

Test plugins record every call the engine makes into a shared CallLog so
tests can assert both WHAT was called and in WHICH order.

Test Plugins:
- RecordingSource: opens a real SQLite connection (file-backed via tmp_path)
- StaticTransform: returns a prepared ResultList
- RecordingSink: keeps every payload it receives

Direct instantiation bypasses PluginManager on purpose: these tests cover
the engine's dispatch contract, not settings loading.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest
import structlog
from sqlalchemy import create_engine, inspect, text

from plumbline.contracts import ResultList
from plumbline.engine.environment import RuntimeEnvironment
from plumbline.plugins.base import BaseSink, BaseSource, BaseTransform
from plumbline.plugins.connection import SqlConnectionItem

CallLog = list[tuple[str, str]]


class RecordingSource(BaseSource):
    """Source that opens a SQLite connection and records engine calls."""

    name = "recording_source"

    def __init__(
        self,
        config: dict[str, Any],
        *,
        url: str,
        calls: CallLog,
        label: str = "source",
        table_exists: bool = True,
    ) -> None:
        super().__init__(config)
        self.url = url
        self.calls = calls
        self.label = label
        self.table_exists = table_exists
        self.items: list[SqlConnectionItem] = []

    def get_connection_item(self, env: RuntimeEnvironment) -> SqlConnectionItem:
        self.calls.append(("get_connection_item", self.label))
        item = SqlConnectionItem.from_url(self.url)
        self.items.append(item)
        return item

    def check_table_exist(self) -> bool:
        self.calls.append(("check_table_exist", self.label))
        return self.table_exists


class StaticTransform(BaseTransform):
    """Transform returning a prepared ResultList (or running a side effect)."""

    name = "static_transform"

    def __init__(
        self,
        config: dict[str, Any],
        *,
        calls: CallLog,
        result: ResultList | None = None,
        label: str = "transform",
        side_effect: Callable[[RuntimeEnvironment], None] | None = None,
    ) -> None:
        super().__init__(config)
        self.calls = calls
        self.label = label
        self.result = result if result is not None else ResultList.empty(label)
        self.side_effect = side_effect
        self.seen_environments: list[RuntimeEnvironment] = []

    def process(self, env: RuntimeEnvironment) -> ResultList:
        self.calls.append(("process", self.label))
        self.seen_environments.append(env)
        if self.side_effect is not None:
            self.side_effect(env)
        return self.result


class RecordingSink(BaseSink):
    """Sink that keeps every payload passed to output()."""

    name = "recording_sink"

    def __init__(
        self,
        config: dict[str, Any],
        *,
        calls: CallLog,
        label: str = "sink",
        error: Exception | None = None,
    ) -> None:
        super().__init__(config)
        self.calls = calls
        self.label = label
        self.error = error
        self.received: list[Sequence[ResultList] | None] = []

    def output(self, results: Sequence[ResultList] | None, env: RuntimeEnvironment) -> None:
        self.calls.append(("output", self.label))
        self.received.append(results)
        if self.error is not None:
            raise self.error


def result_list(name: str, *values: Any) -> ResultList:
    """ResultList with one ``{"value": v}`` row per value."""
    return ResultList.from_rows(name, [{"value": v} for v in values])


def table_names(url: str) -> set[str]:
    """Tables in the database at ``url``, read through a fresh engine."""
    engine = create_engine(url)
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def view_names(url: str) -> set[str]:
    engine = create_engine(url)
    try:
        return set(inspect(engine).get_view_names())
    finally:
        engine.dispose()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """configure_logging() replaces root handlers; put them back afterwards.

    The CLI configures logging against the stream CliRunner swaps in, which
    is closed once the invocation returns.
    """
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def calls() -> CallLog:
    return []


@pytest.fixture
def sqlite_url(tmp_path: Path) -> Callable[[str], str]:
    """Factory for file-backed SQLite databases holding an ``orders`` table.

    Usage:
        url = sqlite_url("warehouse")
    """

    def _make(name: str) -> str:
        url = f"sqlite:///{tmp_path / f'{name}.db'}"
        engine = create_engine(url)
        try:
            with engine.begin() as conn:
                conn.execute(text("CREATE TABLE IF NOT EXISTS orders (id INTEGER PRIMARY KEY, amount INTEGER)"))
                conn.execute(text("DELETE FROM orders"))
                conn.execute(text("INSERT INTO orders (id, amount) VALUES (1, 10), (2, NULL), (3, 30)"))
        finally:
            engine.dispose()
        return url

    return _make


@pytest.fixture
def env() -> RuntimeEnvironment:
    return RuntimeEnvironment()

# tests/plugins/test_connection.py
"""Tests for SqlConnectionItem engine ownership."""

from collections.abc import Callable
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from plumbline.plugins.connection import SqlConnectionItem


class _UnreachableEngine:
    """Engine stand-in whose connect() always fails."""

    def __init__(self) -> None:
        self.disposed = 0

    def connect(self) -> None:
        raise OperationalError("connect", {}, Exception("unable to open database file"))

    def dispose(self) -> None:
        self.disposed += 1


class TestSqlConnectionItem:
    def test_failed_connect_disposes_engine(self) -> None:
        engine = _UnreachableEngine()

        with pytest.raises(OperationalError):
            SqlConnectionItem(engine)  # type: ignore[arg-type]

        assert engine.disposed == 1

    def test_failed_connect_from_url_disposes_engine(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        engine = create_engine(f"sqlite:///{tmp_path / 'missing_dir' / 'x.db'}")
        disposed: list[bool] = []
        original_dispose = engine.dispose

        def _dispose(close: bool = True) -> None:
            disposed.append(True)
            original_dispose(close)

        monkeypatch.setattr(engine, "dispose", _dispose)

        with pytest.raises(OperationalError):
            SqlConnectionItem(engine)

        assert disposed == [True]

    def test_close_releases_connection_and_engine(self, sqlite_url: Callable[[str], str]) -> None:
        item = SqlConnectionItem.from_url(sqlite_url("src"))

        item.close()

        assert item.closed
        with pytest.raises(RuntimeError, match="closed"):
            _ = item.engine

# src/plumbline/plugins/connection.py
"""SQLAlchemy-backed connection handle used by the built-in plugins."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine


class SqlConnectionItem:
    """Owns one Engine and one open Connection for a connection role.

    close() closes the connection and disposes the engine's pool; calling
    it again does nothing. If the engine cannot connect, its pool is
    disposed before the error propagates.
    """

    def __init__(self, engine: Engine) -> None:
        try:
            connection = engine.connect()
        except Exception:
            engine.dispose()
            raise
        self._engine: Engine | None = engine
        self._connection: Connection | None = connection

    @classmethod
    def from_url(cls, url: str) -> SqlConnectionItem:
        return cls(create_engine(url))

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            raise RuntimeError("Connection has been closed")
        return self._connection

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Connection has been closed")
        return self._engine

    @property
    def closed(self) -> bool:
        return self._connection is None

    def close(self) -> None:
        connection, engine = self._connection, self._engine
        self._connection = None
        self._engine = None
        if connection is not None:
            connection.close()
        if engine is not None:
            engine.dispose()

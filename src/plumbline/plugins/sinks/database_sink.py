# src/plumbline/plugins/sinks/database_sink.py
"""Database sink plugin for plumbline.

Writes result rows to a database table using SQLAlchemy Core. The sink
manages its own engine; it never writes through the runtime environment's
connections.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import Column, MetaData, Table, Text, create_engine, insert, inspect
from sqlalchemy.engine import Engine

from plumbline.contracts import ResultList
from plumbline.core.logging import get_logger
from plumbline.core.sql import quote_identifier
from plumbline.plugins.base import BaseSink
from plumbline.plugins.config_base import SinkConfig

if TYPE_CHECKING:
    from plumbline.engine.environment import RuntimeEnvironment

logger = get_logger(__name__)

# Column holding the name of the ResultList a row came from
RESULT_NAME_COLUMN = "result_name"


class DatabaseSinkConfig(SinkConfig):
    """Configuration for the database sink plugin."""

    url: str
    table: str
    if_exists: Literal["append", "replace"] = "append"


class DatabaseSink(BaseSink):
    """Insert every row of every received ResultList into a table.

    The table is created on first write with a ``result_name`` column plus
    one Text column per key seen across all rows, in first-seen order. Keys
    an existing table lacks are added as Text columns. Values are stored via
    str(); None and keys a row does not carry stay NULL.

    Config options:
        plugin_type: Sink kind (required). error_data is not supported.
        url: SQLAlchemy database URL (required)
        table: Table name (required)
        if_exists: "append" or "replace" (default: "append")
    """

    name = "database"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        cfg = DatabaseSinkConfig.from_dict(config)
        super().__init__(cfg)
        self._url = cfg.url
        self._table_name = cfg.table
        self._if_exists = cfg.if_exists
        self._replaced = False

    def _ensure_table(self, engine: Engine, keys: list[str]) -> Table:
        """Create or extend the table so it has a column for every key.

        "replace" drops an existing table on this sink's first write only.
        """
        metadata = MetaData()
        if inspect(engine).has_table(self._table_name):
            if self._if_exists == "replace" and not self._replaced:
                Table(self._table_name, MetaData()).drop(engine)
            else:
                table = Table(self._table_name, metadata, autoload_with=engine)
                missing = [key for key in keys if key not in table.c]
                if not missing:
                    return table
                self._add_columns(engine, missing)
                return Table(self._table_name, MetaData(), autoload_with=engine)

        self._replaced = True
        columns = [Column(RESULT_NAME_COLUMN, Text)]
        columns.extend(Column(key, Text) for key in keys if key != RESULT_NAME_COLUMN)
        table = Table(self._table_name, metadata, *columns)
        metadata.create_all(engine, checkfirst=True)
        return table

    def _add_columns(self, engine: Engine, keys: list[str]) -> None:
        with engine.begin() as conn:
            quoted_table = quote_identifier(self._table_name, conn)
            for key in keys:
                column = conn.dialect.identifier_preparer.quote(key)
                conn.exec_driver_sql(f"ALTER TABLE {quoted_table} ADD COLUMN {column} TEXT")
        logger.info("Added result columns", table=self._table_name, columns=keys)

    def output(self, results: Sequence[ResultList] | None, env: "RuntimeEnvironment") -> None:
        if results is None:
            logger.warning("Database sink received no results, nothing to write", table=self._table_name)
            return

        rows = [
            {RESULT_NAME_COLUMN: result.name, **{k: (None if v is None else str(v)) for k, v in row.items()}}
            for result in results
            for row in result
        ]
        if not rows:
            return

        # Union of keys across every ResultList, in first-seen order
        keys = list(dict.fromkeys(key for row in rows for key in row))
        engine = create_engine(self._url)
        try:
            table = self._ensure_table(engine, keys)
            columns = [column.name for column in table.columns]
            with engine.begin() as conn:
                conn.execute(insert(table), [{c: row.get(c) for c in columns} for row in rows])
        finally:
            engine.dispose()
        logger.info("Inserted result rows", table=self._table_name, rows=len(rows))

# src/plumbline/plugins/sources/sql_source.py
"""SQL source plugin for plumbline.

Opens a SQLAlchemy connection for one role (source, target or metadata)
and checks that the table under validation exists.
"""

from typing import TYPE_CHECKING, Any

from pydantic import field_validator
from sqlalchemy import inspect

from plumbline.plugins.base import BaseSource
from plumbline.plugins.config_base import SourceConfig
from plumbline.plugins.connection import SqlConnectionItem

if TYPE_CHECKING:
    from plumbline.engine.environment import RuntimeEnvironment


class SqlSourceConfig(SourceConfig):
    """Configuration for the SQL source plugin."""

    url: str
    table: str | None = None
    db_schema: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("url cannot be empty")
        return v


class SqlSource(BaseSource):
    """Connection source backed by any SQLAlchemy-supported database.

    Config options:
        plugin_type: "source", "target" or "metadata" (required)
        url: SQLAlchemy database URL (required)
        table: Table under validation. Without it the table check passes.
        db_schema: Schema containing the table (default: connection default)
        pre_sql: Script run once the connection is open
        post_sql: Script run after a successful run
    """

    name = "sql"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        cfg = SqlSourceConfig.from_dict(config)
        super().__init__(cfg)
        self._url = cfg.url
        self._table = cfg.table
        self._db_schema = cfg.db_schema
        self._item: SqlConnectionItem | None = None

    @property
    def table(self) -> str | None:
        return self._table

    def get_connection_item(self, env: "RuntimeEnvironment") -> SqlConnectionItem:
        self._item = SqlConnectionItem.from_url(self._url)
        return self._item

    def check_table_exist(self) -> bool:
        """Check the table on the connection this source opened.

        Raises:
            RuntimeError: If called before get_connection_item().
        """
        if self._item is None:
            raise RuntimeError("SqlSource.check_table_exist() called before get_connection_item()")
        if not self._table:
            return True
        inspector = inspect(self._item.connection)
        return bool(inspector.has_table(self._table, schema=self._db_schema))

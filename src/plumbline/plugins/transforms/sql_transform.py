# src/plumbline/plugins/transforms/sql_transform.py
"""SQL transform plugin for plumbline.

Runs one configured statement against a connection from the runtime
environment. INVALIDATE_ITEMS transforms materialise the statement as a
view (dropped by the engine at the end of the run); every other kind
returns the statement's rows.
"""

from typing import TYPE_CHECKING, Any

from pydantic import field_validator

from plumbline.contracts import ResultList, SourceType, TransformType
from plumbline.core.logging import get_logger
from plumbline.core.sql import create_view
from plumbline.plugins.base import BaseTransform
from plumbline.plugins.config_base import TransformConfig

if TYPE_CHECKING:
    from plumbline.engine.environment import RuntimeEnvironment

logger = get_logger(__name__)


class SqlTransformConfig(TransformConfig):
    """Configuration for the SQL transform plugin."""

    sql: str
    connection: SourceType = SourceType.SOURCE
    result_name: str | None = None

    @field_validator("sql")
    @classmethod
    def validate_sql_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("sql cannot be empty")
        return v


class SqlTransform(BaseTransform):
    """Run a SQL statement and return its rows as a ResultList.

    Config options:
        plugin_type: Transform kind (required)
        sql: Statement to run (required). For invalidate_items, the SELECT
            that defines the view.
        connection: Role whose connection to use (default: "source")
        invalidate_items_table: View name for invalidate_items transforms
        result_name: Name for the ResultList (default: plugin_type)

    An invalidate_items transform without invalidate_items_table runs
    ``sql`` as a plain statement.
    """

    name = "sql"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        cfg = SqlTransformConfig.from_dict(config)
        super().__init__(cfg)
        self._sql = cfg.sql
        self._role = cfg.connection
        self._result_name = cfg.result_name or cfg.plugin_type
        self._view = cfg.invalidate_items_table
        self._kind = TransformType.parse(cfg.plugin_type)

    def process(self, env: "RuntimeEnvironment") -> ResultList:
        """Run the statement on the configured role's connection.

        Raises:
            ConnectionNotAvailableError: If that role was never opened.
            SQLAlchemyError: If the database rejects the statement.
        """
        connection = env.connection_for(self._role).connection

        if self._kind == TransformType.INVALIDATE_ITEMS:
            if self._view:
                create_view(self._view, self._sql, connection)
                logger.info("Created invalidate-item view", view=self._view, role=str(self._role))
            else:
                connection.exec_driver_sql(self._sql)
                connection.commit()
            return ResultList.empty(self._result_name)

        rows = connection.exec_driver_sql(self._sql).mappings().all()
        logger.debug("Transform query returned rows", result=self._result_name, rows=len(rows))
        return ResultList.from_rows(self._result_name, rows)

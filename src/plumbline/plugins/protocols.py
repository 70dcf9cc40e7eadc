# src/plumbline/plugins/protocols.py
"""Plugin protocols defining the contracts for each plugin type.

These protocols define what the execution engine calls on plugins. They
are used for type checking; discovery relies on the base classes in
plugins/base.py.

Plugin Types:
- Source: Opens the connection for one role (source, target, metadata)
- Transform: Computes one ResultList against the runtime environment
- Sink: Consumes aggregated ResultLists (or no payload)
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

    from plumbline.contracts import ResultList
    from plumbline.engine.environment import RuntimeEnvironment
    from plumbline.plugins.config_base import SinkConfig, SourceConfig, TransformConfig


@runtime_checkable
class ConnectionItemProtocol(Protocol):
    """Handle for one open database connection held by the environment."""

    @property
    def connection(self) -> "Connection":
        """The live SQLAlchemy connection."""
        ...

    def close(self) -> None:
        """Release the connection. Must tolerate being called twice."""
        ...


@runtime_checkable
class SourceProtocol(Protocol):
    """Protocol for source plugins.

    A source describes one connection role. The engine asks it for a
    connection only if that role's slot is still empty.

    Lifecycle:
    1. __init__(config) - Plugin instantiation
    2. get_connection_item(env) - Open the connection for this role
    3. check_table_exist() - Verify the declared table (SOURCE/TARGET only)
    """

    name: str

    @property
    def config(self) -> "SourceConfig":
        """Validated configuration (plugin_type, pre_sql, post_sql, ...)."""
        ...

    def get_connection_item(self, env: "RuntimeEnvironment") -> ConnectionItemProtocol:
        """Open a connection for this source's role."""
        ...

    def check_table_exist(self) -> bool:
        """Return True if the declared table exists on the opened connection."""
        ...


@runtime_checkable
class TransformProtocol(Protocol):
    """Protocol for transform plugins.

    Example:
        class RowCountTransform:
            name = "row_count"

            def process(self, env: RuntimeEnvironment) -> ResultList:
                rows = env.source_connection.connection.execute(text("SELECT COUNT(*) AS n FROM t"))
                return ResultList.from_rows("actual_value", rows.mappings())
    """

    name: str

    @property
    def config(self) -> "TransformConfig":
        """Validated configuration (plugin_type, invalidate_items_table, ...)."""
        ...

    def process(self, env: "RuntimeEnvironment") -> "ResultList":
        """Compute this transform's result against the environment."""
        ...


@runtime_checkable
class SinkProtocol(Protocol):
    """Protocol for sink plugins.

    ERROR_DATA sinks receive None and derive their rows from the
    environment. Every other kind receives one of the run's aggregates.
    """

    name: str

    @property
    def config(self) -> "SinkConfig":
        """Validated configuration (plugin_type, ...)."""
        ...

    def output(self, results: Sequence["ResultList"] | None, env: "RuntimeEnvironment") -> None:
        """Write the given results (or derived error data)."""
        ...

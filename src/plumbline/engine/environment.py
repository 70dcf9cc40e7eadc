# src/plumbline/engine/environment.py
"""Per-run holder of the source, target and metadata connections.

One RuntimeEnvironment serves exactly one run. Slots are filled during
source dispatch and emptied by close(). The environment is not
thread-safe: concurrent runs need their own environments.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from plumbline.contracts import ConnectionNotAvailableError, SourceType
from plumbline.core.logging import get_logger

if TYPE_CHECKING:
    from plumbline.plugins.protocols import ConnectionItemProtocol

logger = get_logger(__name__)


class RuntimeEnvironment:
    """Mutable container of up to three connection handles.

    Example:
        env = RuntimeEnvironment()
        env.set_connection(SourceType.SOURCE, item)
        env.source_connection.connection.execute(...)
        env.close()
    """

    def __init__(self) -> None:
        self._connections: dict[SourceType, ConnectionItemProtocol | None] = dict.fromkeys(SourceType)

    # === Per-role access ===

    def get_connection(self, role: SourceType) -> ConnectionItemProtocol | None:
        """Return the handle for ``role``, or None if the slot is empty."""
        return self._connections[role]

    def set_connection(self, role: SourceType, item: ConnectionItemProtocol) -> None:
        self._connections[role] = item

    def connection_for(self, role: SourceType) -> ConnectionItemProtocol:
        """Return the handle for ``role``.

        Raises:
            ConnectionNotAvailableError: If the slot is empty.
        """
        item = self._connections[role]
        if item is None:
            raise ConnectionNotAvailableError(role)
        return item

    @property
    def source_connection(self) -> ConnectionItemProtocol | None:
        return self._connections[SourceType.SOURCE]

    @source_connection.setter
    def source_connection(self, item: ConnectionItemProtocol) -> None:
        self._connections[SourceType.SOURCE] = item

    @property
    def target_connection(self) -> ConnectionItemProtocol | None:
        return self._connections[SourceType.TARGET]

    @target_connection.setter
    def target_connection(self, item: ConnectionItemProtocol) -> None:
        self._connections[SourceType.TARGET] = item

    @property
    def metadata_connection(self) -> ConnectionItemProtocol | None:
        return self._connections[SourceType.METADATA]

    @metadata_connection.setter
    def metadata_connection(self, item: ConnectionItemProtocol) -> None:
        self._connections[SourceType.METADATA] = item

    @property
    def open_roles(self) -> list[SourceType]:
        """Roles whose slot currently holds a connection, in enum order."""
        return [role for role, item in self._connections.items() if item is not None]

    # === Lifecycle ===

    def close(self) -> None:
        """Close every populated slot and empty it.

        Empty slots are skipped, so calling close() twice is a no-op. A
        failure closing one connection is logged and does not stop the
        others from closing.
        """
        for role, item in self._connections.items():
            if item is None:
                continue
            self._connections[role] = None
            try:
                item.close()
            except Exception as e:
                logger.warning(
                    "Failed to close connection",
                    role=str(role),
                    error=str(e),
                    error_type=type(e).__name__,
                )
            else:
                logger.debug("Closed connection", role=str(role))

# src/plumbline/contracts/errors.py
"""Exceptions raised by the execution engine and its plugins."""

from typing import Any


class PlumblineError(Exception):
    """Base class for errors that abort a validation run."""


class TableNotFoundError(PlumblineError):
    """Raised when a source's declared table does not exist.

    Attributes:
        role: Connection role of the source ("source" or "target")
        plugin: Name of the source plugin that reported the table missing
    """

    def __init__(self, role: str, plugin: str | None = None) -> None:
        self.role = role
        self.plugin = plugin
        message = f"{role} table does not exist"
        if plugin:
            message = f"{message} (plugin {plugin!r})"
        super().__init__(message)


class ScriptExecutionError(PlumblineError):
    """Raised when a pre/post script fails at the SQL layer.

    The driver error is chained as ``__cause__``.
    """

    def __init__(self, script: str, error: Exception) -> None:
        self.script = script
        self.error = error
        super().__init__(f"Failed to execute script {script!r}: {error}")


class PluginConfigError(PlumblineError):
    """Raised when plugin configuration is invalid."""


class PluginNotFoundError(PlumblineError):
    """Raised when settings name a plugin that is not registered.

    Attributes:
        kind: "source", "transform" or "sink"
        name: The requested plugin name
        available: Names registered for that kind
    """

    def __init__(self, kind: str, name: str, available: list[str]) -> None:
        self.kind = kind
        self.name = name
        self.available = available
        super().__init__(f"Unknown {kind} plugin: {name!r}. Available: {', '.join(sorted(available)) or 'none'}")


class ConnectionNotAvailableError(PlumblineError):
    """Raised when a plugin needs a connection role that was never opened."""

    def __init__(self, role: Any) -> None:
        self.role = role
        super().__init__(f"No {role} connection in the runtime environment")

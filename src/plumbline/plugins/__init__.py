# src/plumbline/plugins/__init__.py
"""Plugin system: protocols, base classes, registry and built-in plugins.

Built-in plugins live in sources/, transforms/ and sinks/ and are found by
PluginManager.register_builtin_plugins().
"""

from plumbline.plugins.base import BaseSink, BaseSource, BaseTransform
from plumbline.plugins.config_base import PluginConfig, SinkConfig, SourceConfig, TransformConfig
from plumbline.plugins.connection import SqlConnectionItem
from plumbline.plugins.hookspecs import hookimpl
from plumbline.plugins.manager import JobPlugins, PluginManager
from plumbline.plugins.protocols import (
    ConnectionItemProtocol,
    SinkProtocol,
    SourceProtocol,
    TransformProtocol,
)

__all__ = [
    "BaseSink",
    "BaseSource",
    "BaseTransform",
    "ConnectionItemProtocol",
    "JobPlugins",
    "PluginConfig",
    "PluginManager",
    "SinkConfig",
    "SinkProtocol",
    "SourceConfig",
    "SourceProtocol",
    "SqlConnectionItem",
    "TransformConfig",
    "TransformProtocol",
    "hookimpl",
]

# src/plumbline/contracts/__init__.py
"""Shared contracts: enums, errors and result types.

This package is a leaf: it must not import from engine, plugins or core.
"""

from plumbline.contracts.config_keys import NULL_SCRIPT, PLUGIN_TYPE
from plumbline.contracts.enums import (
    ExecutionStatus,
    ScriptErrorPolicy,
    SinkType,
    SourceType,
    TransformType,
)
from plumbline.contracts.errors import (
    ConnectionNotAvailableError,
    PluginConfigError,
    PluginNotFoundError,
    PlumblineError,
    ScriptExecutionError,
    TableNotFoundError,
)
from plumbline.contracts.results import ExecutionResult, ResultList, ScriptPair

__all__ = [
    "NULL_SCRIPT",
    "PLUGIN_TYPE",
    "ConnectionNotAvailableError",
    "ExecutionResult",
    "ExecutionStatus",
    "PluginConfigError",
    "PluginNotFoundError",
    "PlumblineError",
    "ResultList",
    "ScriptErrorPolicy",
    "ScriptExecutionError",
    "ScriptPair",
    "SinkType",
    "SourceType",
    "TableNotFoundError",
    "TransformType",
]

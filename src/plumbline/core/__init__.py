# src/plumbline/core/__init__.py
"""Core infrastructure: Configuration, Logging, SQL helpers."""

from plumbline.core.config import (
    ExecutionSettings,
    JobSettings,
    SinkSettings,
    SourceSettings,
    TransformSettings,
    load_settings,
)
from plumbline.core.logging import configure_logging, get_logger
from plumbline.core.sql import create_view, drop_view, execute_script, is_blank_script

__all__ = [
    "ExecutionSettings",
    "JobSettings",
    "SinkSettings",
    "SourceSettings",
    "TransformSettings",
    "configure_logging",
    "create_view",
    "drop_view",
    "execute_script",
    "get_logger",
    "is_blank_script",
    "load_settings",
]

# src/plumbline/plugins/sinks/__init__.py
"""Built-in sink plugins."""

from plumbline.plugins.sinks.database_sink import DatabaseSink
from plumbline.plugins.sinks.json_sink import JSONSink

__all__ = ["DatabaseSink", "JSONSink"]

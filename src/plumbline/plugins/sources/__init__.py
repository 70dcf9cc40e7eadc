# src/plumbline/plugins/sources/__init__.py
"""Built-in source plugins."""

from plumbline.plugins.sources.sql_source import SqlSource

__all__ = ["SqlSource"]

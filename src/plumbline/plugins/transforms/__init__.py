# src/plumbline/plugins/transforms/__init__.py
"""Built-in transform plugins."""

from plumbline.plugins.transforms.sql_transform import SqlTransform

__all__ = ["SqlTransform"]

# src/plumbline/plugins/hookspecs.py
"""pluggy hook specifications for plumbline plugins.

Plugins implement these hooks to register themselves with the framework.
The plugin manager calls these hooks during discovery.

Usage (implementing a plugin):
    from plumbline.plugins.hookspecs import hookimpl

    class MyPlugins:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def plumbline_get_transforms(self):
            return [MyTransform]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from plumbline.plugins.base import BaseSink, BaseSource, BaseTransform

PROJECT_NAME = "plumbline"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class PlumblineSourceSpec:
    """Hook specifications for source plugins."""

    @hookspec
    def plumbline_get_sources(self) -> list[type["BaseSource"]]:  # type: ignore[empty-body]
        """Return source plugin classes (not instances)."""


class PlumblineTransformSpec:
    """Hook specifications for transform plugins."""

    @hookspec
    def plumbline_get_transforms(self) -> list[type["BaseTransform"]]:  # type: ignore[empty-body]
        """Return transform plugin classes."""


class PlumblineSinkSpec:
    """Hook specifications for sink plugins."""

    @hookspec
    def plumbline_get_sinks(self) -> list[type["BaseSink"]]:  # type: ignore[empty-body]
        """Return sink plugin classes."""

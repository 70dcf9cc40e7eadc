# src/plumbline/plugins/manager.py
"""Plugin manager for discovery, registration, and instantiation.

Uses pluggy for hook-based plugin registration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import pluggy

from plumbline.contracts import PluginNotFoundError
from plumbline.plugins.base import BaseSink, BaseSource, BaseTransform
from plumbline.plugins.hookspecs import (
    PROJECT_NAME,
    PlumblineSinkSpec,
    PlumblineSourceSpec,
    PlumblineTransformSpec,
)

if TYPE_CHECKING:
    from plumbline.core.config import JobSettings, SinkSettings, SourceSettings, TransformSettings


@dataclass(frozen=True)
class JobPlugins:
    """Instantiated plugins for one job, in configured order."""

    sources: list[BaseSource]
    transforms: list[BaseTransform]
    sinks: list[BaseSink]


def _collect(results: list[list[type[Any]]], kind: str) -> dict[str, type[Any]]:
    """Flatten hook results into name -> class, rejecting duplicate names."""
    collected: dict[str, type[Any]] = {}
    for classes in results:
        for cls in classes:
            name = cls.name
            if name in collected:
                raise ValueError(f"Duplicate {kind} plugin name: '{name}'. Already registered by {collected[name].__name__}")
            collected[name] = cls
    return collected


class PluginManager:
    """Manages plugin discovery, registration, and lookup.

    Usage:
        manager = PluginManager()
        manager.register_builtin_plugins()

        plugins = manager.instantiate_job(settings)
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(PlumblineSourceSpec)
        self._pm.add_hookspecs(PlumblineTransformSpec)
        self._pm.add_hookspecs(PlumblineSinkSpec)

        self._sources: dict[str, type[BaseSource]] = {}
        self._transforms: dict[str, type[BaseTransform]] = {}
        self._sinks: dict[str, type[BaseSink]] = {}

    def register_builtin_plugins(self) -> None:
        """Discover and register all built-in plugins."""
        from plumbline.plugins.discovery import create_dynamic_hookimpl, discover_all_plugins

        discovered = discover_all_plugins()
        self.register(create_dynamic_hookimpl(discovered["sources"], "plumbline_get_sources"))
        self.register(create_dynamic_hookimpl(discovered["transforms"], "plumbline_get_transforms"))
        self.register(create_dynamic_hookimpl(discovered["sinks"], "plumbline_get_sinks"))

    def register(self, plugin: Any) -> None:
        """Register an object implementing one or more plumbline hooks.

        Raises:
            ValueError: If a plugin name is already registered for its kind.
        """
        self._pm.register(plugin)
        try:
            self._refresh_caches()
        except ValueError:
            self._pm.unregister(plugin)
            raise

    def _refresh_caches(self) -> None:
        sources = _collect(self._pm.hook.plumbline_get_sources(), "source")
        transforms = _collect(self._pm.hook.plumbline_get_transforms(), "transform")
        sinks = _collect(self._pm.hook.plumbline_get_sinks(), "sink")
        self._sources, self._transforms, self._sinks = sources, transforms, sinks

    # === Getters ===

    def get_sources(self) -> list[type[BaseSource]]:
        return list(self._sources.values())

    def get_transforms(self) -> list[type[BaseTransform]]:
        return list(self._transforms.values())

    def get_sinks(self) -> list[type[BaseSink]]:
        return list(self._sinks.values())

    # === Lookup by name ===

    def get_source_by_name(self, name: str) -> type[BaseSource] | None:
        return self._sources.get(name)

    def get_transform_by_name(self, name: str) -> type[BaseTransform] | None:
        return self._transforms.get(name)

    def get_sink_by_name(self, name: str) -> type[BaseSink] | None:
        return self._sinks.get(name)

    # === Instantiation ===

    def create_source(self, settings: SourceSettings) -> BaseSource:
        """Instantiate a source from settings.

        Raises:
            PluginNotFoundError: If the plugin name is not registered.
            PluginConfigError: If the options fail validation.
        """
        cls = self._sources.get(settings.plugin)
        if cls is None:
            raise PluginNotFoundError("source", settings.plugin, list(self._sources))
        return cls(dict(settings.options))

    def create_transform(self, settings: TransformSettings) -> BaseTransform:
        cls = self._transforms.get(settings.plugin)
        if cls is None:
            raise PluginNotFoundError("transform", settings.plugin, list(self._transforms))
        return cls(dict(settings.options))

    def create_sink(self, settings: SinkSettings) -> BaseSink:
        cls = self._sinks.get(settings.plugin)
        if cls is None:
            raise PluginNotFoundError("sink", settings.plugin, list(self._sinks))
        return cls(dict(settings.options))

    def instantiate_job(self, settings: JobSettings) -> JobPlugins:
        """Instantiate every plugin a job names, preserving configured order."""
        return JobPlugins(
            sources=[self.create_source(s) for s in settings.sources],
            transforms=[self.create_transform(t) for t in settings.transforms],
            sinks=[self.create_sink(s) for s in settings.sinks],
        )

# src/plumbline/plugins/discovery.py
"""Plugin discovery by package scanning.

Imports every module of the built-in plugin packages and collects classes
that:
1. Inherit from a base class (BaseSource, BaseTransform, BaseSink)
2. Have a non-empty `name` class attribute
3. Are not abstract
"""

import importlib
import inspect
import logging
import pkgutil
from typing import Any

logger = logging.getLogger(__name__)

# Package (relative to plumbline.plugins) scanned for each plugin kind
PLUGIN_SCAN_CONFIG: dict[str, str] = {
    "sources": "sources",
    "transforms": "transforms",
    "sinks": "sinks",
}


def _get_base_classes() -> dict[str, type]:
    """Deferred import to avoid cycles at module load time."""
    from plumbline.plugins.base import BaseSink, BaseSource, BaseTransform

    return {
        "sources": BaseSource,
        "transforms": BaseTransform,
        "sinks": BaseSink,
    }


def discover_plugins_in_package(package_name: str, base_class: type) -> list[type]:
    """Discover plugin classes defined in the modules of ``package_name``.

    Plugin modules are system code: import errors propagate.
    """
    package = importlib.import_module(package_name)
    discovered: list[type] = []

    for module_info in sorted(pkgutil.iter_modules(package.__path__), key=lambda m: m.name):
        if module_info.ispkg:
            continue
        module = importlib.import_module(f"{package_name}.{module_info.name}")

        for class_name, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module.__name__:
                continue
            if not issubclass(obj, base_class) or obj is base_class:
                continue
            if inspect.isabstract(obj):
                continue
            if not getattr(obj, "name", None):
                logger.warning(
                    "Class %s in %s inherits from %s but has no/empty 'name' attribute - skipping",
                    class_name,
                    module.__name__,
                    base_class.__name__,
                )
                continue
            discovered.append(obj)

    return discovered


def discover_all_plugins() -> dict[str, list[type]]:
    """Discover all built-in plugins.

    Returns:
        {"sources": [SqlSource], "transforms": [SqlTransform], "sinks": [DatabaseSink, JSONSink]}

    Raises:
        ValueError: If two plugins of the same kind share a name.
    """
    base_classes = _get_base_classes()
    result: dict[str, list[type]] = {}

    for plugin_kind, package in PLUGIN_SCAN_CONFIG.items():
        discovered = discover_plugins_in_package(f"plumbline.plugins.{package}", base_classes[plugin_kind])
        seen: dict[str, type] = {}
        for cls in discovered:
            cls_name: str = cls.name  # type: ignore[attr-defined]
            if cls_name in seen:
                raise ValueError(
                    f"Duplicate {plugin_kind} plugin name '{cls_name}': "
                    f"found in both {seen[cls_name].__module__} and {cls.__module__}. "
                    f"Plugin names must be unique within each type."
                )
            seen[cls_name] = cls
        result[plugin_kind] = discovered

    return result


def get_plugin_description(plugin_cls: type) -> str:
    """First non-empty docstring line, or "<name> plugin"."""
    if plugin_cls.__doc__:
        for line in plugin_cls.__doc__.strip().split("\n"):
            cleaned = line.strip()
            if cleaned:
                return cleaned
    name = getattr(plugin_cls, "name", plugin_cls.__name__)
    return f"{name} plugin"


def create_dynamic_hookimpl(plugin_classes: list[type], hook_method_name: str) -> object:
    """Create a pluggy hookimpl object returning ``plugin_classes``."""
    from plumbline.plugins.hookspecs import hookimpl

    class DynamicHookImpl:
        """Dynamically generated hook implementer."""

    def hook_method(self: Any) -> list[type]:
        return plugin_classes

    setattr(DynamicHookImpl, hook_method_name, hookimpl(hook_method))
    return DynamicHookImpl()

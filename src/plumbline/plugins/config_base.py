# src/plumbline/plugins/config_base.py
"""Base classes for typed plugin configurations.

This module provides base classes that plugins inherit from to get:
- Strict validation (reject unknown fields)
- Immutability for the duration of a run
- Factory methods with clear error messages

Example usage:
    class SqlSourceConfig(SourceConfig):
        url: str
        table: str

    cfg = SqlSourceConfig.from_dict(config)
    url = cfg.url  # Direct access, fails fast if missing
"""

from typing import Any, Self

from pydantic import BaseModel, ValidationError, field_validator

from plumbline.contracts import PluginConfigError


class PluginConfig(BaseModel):
    """Base class for typed plugin configurations.

    ``plugin_type`` selects the role/kind the engine dispatches on. It is
    kept as a plain string: unknown kinds are legal and make the plugin a
    no-op.
    """

    model_config = {"extra": "forbid", "frozen": True}

    plugin_type: str

    @field_validator("plugin_type")
    @classmethod
    def validate_plugin_type_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("plugin_type cannot be empty")
        return v

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create config from dict with clear error on validation failure.

        Raises:
            PluginConfigError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: config must be a dict, got {type(config).__name__}.")
        try:
            return cls.model_validate(config)
        except ValidationError as e:
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e


class SourceConfig(PluginConfig):
    """Keys the engine reads from every source."""

    pre_sql: str | None = None
    post_sql: str | None = None


class TransformConfig(PluginConfig):
    """Keys the engine reads from every transform."""

    invalidate_items_table: str | None = None


class SinkConfig(PluginConfig):
    """Keys the engine reads from every sink."""

# src/plumbline/core/config.py
"""
Configuration schema and loading for plumbline validation jobs.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Example YAML:
    name: row_count_check
    execution:
      on_script_error: raise
    sources:
      - plugin: sql
        options:
          plugin_type: source
          url: sqlite:///warehouse.db
          table: orders
          post_sql: "DELETE FROM scratch"
    transforms:
      - plugin: sql
        options:
          plugin_type: actual_value
          sql: "SELECT COUNT(*) AS actual_value FROM orders"
    sinks:
      - plugin: json
        options:
          plugin_type: validate_result
          path: results.jsonl
"""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from plumbline.contracts import PLUGIN_TYPE, ScriptErrorPolicy


class _PluginSettings(BaseModel):
    """Plugin name plus the options handed to the plugin's constructor."""

    model_config = {"frozen": True, "extra": "forbid"}

    plugin: str = Field(description="Registered plugin name (sql, json, database, ...)")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Plugin-specific configuration options, including plugin_type",
    )

    @field_validator("options")
    @classmethod
    def validate_plugin_type_present(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Every plugin must declare its role/kind."""
        if PLUGIN_TYPE not in v:
            raise ValueError(f"options must include '{PLUGIN_TYPE}'")
        return v


class SourceSettings(_PluginSettings):
    """Source plugin configuration."""


class TransformSettings(_PluginSettings):
    """Transform plugin configuration."""


class SinkSettings(_PluginSettings):
    """Sink plugin configuration."""


class ExecutionSettings(BaseModel):
    """Engine behaviour knobs.

    on_script_error:
        "raise" aborts the run with ScriptExecutionError when a pre/post
        script fails. "log" records the failure and carries on.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    on_script_error: ScriptErrorPolicy = ScriptErrorPolicy.RAISE


class JobSettings(BaseModel):
    """Top-level settings for one validation job."""

    model_config = {"frozen": True, "extra": "forbid"}

    name: str = "validation"
    sources: list[SourceSettings] = Field(default_factory=list)
    transforms: list[TransformSettings] = Field(default_factory=list)
    sinks: list[SinkSettings] = Field(default_factory=list)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Unset variables without a default are left as-is.
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            default = match.group(2)
            if default is not None:
                return default
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lowercase_keys(value: Any) -> Any:
    """Dynaconf uppercases top-level keys only; nested dicts come back as written."""
    if isinstance(value, dict):
        return {str(k).lower(): v for k, v in value.items()}
    return value


def load_settings(config_path: Path) -> JobSettings:
    """Load job settings from YAML with environment variable overrides.

    Precedence:
    1. Environment variables (PLUMBLINE_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: PLUMBLINE_EXECUTION__ON_SCRIPT_ERROR for
    nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="PLUMBLINE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    if "execution" in raw_config:
        raw_config["execution"] = _lowercase_keys(raw_config["execution"])

    raw_config = _expand_env_vars(raw_config)
    return JobSettings(**raw_config)

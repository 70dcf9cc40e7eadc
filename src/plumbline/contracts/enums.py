# src/plumbline/contracts/enums.py
"""Roles and kinds the execution engine dispatches on.

Every plugin declares one of these through the ``plugin_type`` key of its
configuration. Parsing is case-insensitive. A value that names no member
parses to None, and the engine treats such plugins as a no-op.
"""

from enum import StrEnum
from typing import Self


class _PluginKind(StrEnum):
    @classmethod
    def parse(cls, value: str | None) -> Self | None:
        """Return the member named by ``value``, or None if there is none."""
        if value is None:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class SourceType(_PluginKind):
    """Connection role a source plugin fills in the runtime environment."""

    SOURCE = "source"
    TARGET = "target"
    METADATA = "metadata"


class TransformType(_PluginKind):
    """What a transform computes, and where its result is aggregated."""

    INVALIDATE_ITEMS = "invalidate_items"
    ACTUAL_VALUE = "actual_value"
    EXPECTED_VALUE_FROM_METADATA_SOURCE = "expected_value_from_metadata_source"
    EXPECTED_VALUE_FROM_SOURCE = "expected_value_from_source"
    EXPECTED_VALUE_FROM_TARGET_SOURCE = "expected_value_from_target_source"


class SinkType(_PluginKind):
    """Which aggregate (if any) a sink is fed."""

    ERROR_DATA = "error_data"
    ACTUAL_VALUE = "actual_value"
    PROFILE_VALUE = "profile_value"
    VALIDATE_RESULT = "validate_result"


class ExecutionStatus(StrEnum):
    """Outcome of a call to Execution.execute().

    Failed runs raise instead of returning a status.
    """

    COMPLETED = "completed"
    SKIPPED = "skipped"  # No sources configured


class ScriptErrorPolicy(StrEnum):
    """What the engine does when a pre/post script fails."""

    RAISE = "raise"
    LOG = "log"

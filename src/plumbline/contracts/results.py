# src/plumbline/contracts/results.py
"""Result types passed between transforms, sinks and the caller.

- ResultList: rows produced by one transform invocation
- ScriptPair: the pre/post scripts shared across connection roles
- ExecutionResult: summary of one Execution.execute() call
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from plumbline.contracts.enums import ExecutionStatus


@dataclass(frozen=True, slots=True)
class ResultList:
    """Ordered, immutable rows produced by exactly one transform invocation.

    Rows are stored as read-only mappings so a sink cannot mutate what
    another sink will see.
    """

    name: str
    rows: tuple[Mapping[str, Any], ...] = ()

    @classmethod
    def from_rows(cls, name: str, rows: Iterable[Mapping[str, Any]]) -> ResultList:
        """Build a ResultList, freezing each row."""
        return cls(name=name, rows=tuple(MappingProxyType(dict(row)) for row in rows))

    @classmethod
    def empty(cls, name: str) -> ResultList:
        return cls(name=name)

    def to_dicts(self) -> list[dict[str, Any]]:
        """Return mutable copies of the rows."""
        return [dict(row) for row in self.rows]

    def __iter__(self) -> Iterator[Mapping[str, Any]]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True, slots=True)
class ScriptPair:
    """Pre/post scripts read from the most recently opened SOURCE or TARGET.

    One pair is shared across roles for the whole run. Each SOURCE or TARGET
    source that opens a connection replaces it wholesale, None values
    included, so the last role processed decides the post-script for both
    connections.
    """

    pre_sql: str | None = None
    post_sql: str | None = None


@dataclass(frozen=True)
class ExecutionResult:
    """Summary of a validation run.

    Attributes:
        status: COMPLETED, or SKIPPED when no sources were configured
        actual_values: ResultLists from ACTUAL_VALUE transforms
        task_results: Every ResultList meant for validation, in order
        invalidate_items_tables: View names registered for cleanup
        post_sql: Post-script that ran against the open connections, or
            None when it was missing, blank or "null"
        sinks_run: Number of sinks whose output() was called
    """

    status: ExecutionStatus
    actual_values: tuple[ResultList, ...] = ()
    task_results: tuple[ResultList, ...] = ()
    invalidate_items_tables: tuple[str, ...] = ()
    post_sql: str | None = None
    sinks_run: int = 0

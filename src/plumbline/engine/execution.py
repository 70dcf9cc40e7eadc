# src/plumbline/engine/execution.py
"""Execution: runs one validation task end to end.

Coordinates, strictly in sequence:
- Source dispatch: open at most one connection per role, check tables,
  run the pre-script
- Transform dispatch: compute ResultLists and aggregate them
- Sink dispatch: feed each sink the aggregate its kind asks for
- Cleanup: drop invalidate-item views (success or failure)
- Post-script: on success only, against source and target connections
- Close: the environment is closed on every exit path

Aggregation rules:
- ACTUAL_VALUE results go to both actual_values and task_results
- EXPECTED_VALUE_* results go to task_results only
- INVALIDATE_ITEMS results are discarded; the named view is registered
  for cleanup (duplicates included)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from plumbline.contracts import (
    ExecutionResult,
    ExecutionStatus,
    ResultList,
    ScriptErrorPolicy,
    ScriptExecutionError,
    ScriptPair,
    SinkType,
    SourceType,
    TableNotFoundError,
    TransformType,
)
from plumbline.core.config import ExecutionSettings
from plumbline.core.logging import get_logger
from plumbline.core.sql import drop_view, execute_script, is_blank_script

if TYPE_CHECKING:
    from plumbline.engine.environment import RuntimeEnvironment
    from plumbline.plugins.protocols import (
        ConnectionItemProtocol,
        SinkProtocol,
        SourceProtocol,
        TransformProtocol,
    )

logger = get_logger(__name__)


@dataclass
class _RunState:
    """Mutable state accumulated over one execute() call."""

    scripts: ScriptPair = field(default_factory=ScriptPair)
    actual_values: list[ResultList] = field(default_factory=list)
    task_results: list[ResultList] = field(default_factory=list)
    invalidate_items_tables: list[str] = field(default_factory=list)
    sinks_run: int = 0


class Execution:
    """Dispatches sources, transforms and sinks around one RuntimeEnvironment.

    Example:
        env = RuntimeEnvironment()
        execution = Execution(env, ExecutionSettings())
        execution.prepare()
        result = execution.execute(sources, transforms, sinks)

    The environment is closed when execute() returns or raises, so an
    Execution runs at most once.
    """

    def __init__(
        self,
        environment: RuntimeEnvironment,
        settings: ExecutionSettings | None = None,
        *,
        name: str = "validation",
    ) -> None:
        self._environment = environment
        self._settings = settings if settings is not None else ExecutionSettings()
        self._log = logger.bind(job=name)

    @property
    def environment(self) -> RuntimeEnvironment:
        return self._environment

    def prepare(self) -> None:
        """Hook called before execute(). Nothing to prepare for local runs."""

    def stop(self) -> None:
        """Release every connection the environment holds."""
        self._environment.close()

    def execute(
        self,
        sources: Sequence[SourceProtocol],
        transforms: Sequence[TransformProtocol],
        sinks: Sequence[SinkProtocol],
    ) -> ExecutionResult:
        """Run the validation task.

        Returns:
            ExecutionResult with status SKIPPED if ``sources`` is empty
            (nothing is opened or run), COMPLETED otherwise.

        Raises:
            TableNotFoundError: A SOURCE/TARGET table is missing.
            ScriptExecutionError: A pre/post script failed and
                on_script_error is "raise".
            Exception: Any error raised by a plugin, unchanged.
        """
        if not sources:
            self._log.info("No sources configured, skipping execution")
            return ExecutionResult(status=ExecutionStatus.SKIPPED)

        state = _RunState()
        try:
            try:
                self._dispatch_sources(sources, state)
                self._dispatch_transforms(transforms, state)
                self._dispatch_sinks(sinks, state)
            except Exception:
                self._log.exception("Execution failed")
                raise
            finally:
                self._drop_invalidate_items_views(state.invalidate_items_tables)

            self._run_post_script(state.scripts.post_sql)
        finally:
            self._environment.close()

        self._log.info(
            "Execution completed",
            actual_values=len(state.actual_values),
            task_results=len(state.task_results),
            sinks=state.sinks_run,
        )
        return ExecutionResult(
            status=ExecutionStatus.COMPLETED,
            actual_values=tuple(state.actual_values),
            task_results=tuple(state.task_results),
            invalidate_items_tables=tuple(state.invalidate_items_tables),
            post_sql=None if is_blank_script(state.scripts.post_sql) else state.scripts.post_sql,
            sinks_run=state.sinks_run,
        )

    # === Dispatch phases ===

    def _dispatch_sources(self, sources: Sequence[SourceProtocol], state: _RunState) -> None:
        env = self._environment
        for source in sources:
            role = SourceType.parse(source.config.plugin_type)
            match role:
                case SourceType.SOURCE | SourceType.TARGET:
                    if env.get_connection(role) is not None:
                        self._log.debug("Connection already open, skipping source", role=str(role), plugin=source.name)
                        continue

                    item = source.get_connection_item(env)
                    env.set_connection(role, item)
                    self._log.info("Opened connection", role=str(role), plugin=source.name)
                    if not source.check_table_exist():
                        raise TableNotFoundError(str(role), source.name)

                    # One pair for all roles: last SOURCE/TARGET opened wins
                    state.scripts = ScriptPair(pre_sql=source.config.pre_sql, post_sql=source.config.post_sql)
                    self._execute_script(state.scripts.pre_sql, item, role)
                case SourceType.METADATA:
                    if env.metadata_connection is not None:
                        continue
                    env.metadata_connection = source.get_connection_item(env)
                    self._log.info("Opened connection", role=str(role), plugin=source.name)
                case _:
                    self._log.debug("Unknown source plugin_type, skipping", plugin=source.name, plugin_type=source.config.plugin_type)

    def _dispatch_transforms(self, transforms: Sequence[TransformProtocol], state: _RunState) -> None:
        env = self._environment
        for transform in transforms:
            kind = TransformType.parse(transform.config.plugin_type)
            match kind:
                case TransformType.INVALIDATE_ITEMS:
                    table = transform.config.invalidate_items_table
                    if table:
                        state.invalidate_items_tables.append(table)
                    transform.process(env)
                case TransformType.ACTUAL_VALUE:
                    result = transform.process(env)
                    state.actual_values.append(result)
                    state.task_results.append(result)
                case (
                    TransformType.EXPECTED_VALUE_FROM_METADATA_SOURCE
                    | TransformType.EXPECTED_VALUE_FROM_SOURCE
                    | TransformType.EXPECTED_VALUE_FROM_TARGET_SOURCE
                ):
                    result = transform.process(env)
                    state.task_results.append(result)
                case _:
                    self._log.debug(
                        "Unknown transform plugin_type, skipping", plugin=transform.name, plugin_type=transform.config.plugin_type
                    )
                    continue
            self._log.debug("Transform processed", plugin=transform.name, kind=str(kind))

    def _dispatch_sinks(self, sinks: Sequence[SinkProtocol], state: _RunState) -> None:
        env = self._environment
        actual_values = tuple(state.actual_values)
        task_results = tuple(state.task_results)
        for sink in sinks:
            kind = SinkType.parse(sink.config.plugin_type)
            match kind:
                case SinkType.ERROR_DATA:
                    sink.output(None, env)
                case SinkType.ACTUAL_VALUE | SinkType.PROFILE_VALUE:
                    sink.output(actual_values, env)
                case SinkType.VALIDATE_RESULT:
                    sink.output(task_results, env)
                case _:
                    self._log.debug("Unknown sink plugin_type, skipping", plugin=sink.name, plugin_type=sink.config.plugin_type)
                    continue
            state.sinks_run += 1
            self._log.debug("Sink output written", plugin=sink.name, kind=str(kind))

    # === Scripts and cleanup ===

    def _run_post_script(self, post_sql: str | None) -> None:
        for role in (SourceType.SOURCE, SourceType.TARGET):
            item = self._environment.get_connection(role)
            if item is not None:
                self._execute_script(post_sql, item, role)

    def _execute_script(self, script: str | None, item: ConnectionItemProtocol, role: SourceType) -> None:
        try:
            execute_script(script, item.connection)
        except ScriptExecutionError as e:
            if self._settings.on_script_error == ScriptErrorPolicy.RAISE:
                raise
            self._log.error(
                "Script failed, continuing",
                role=str(role),
                script=e.script,
                error=str(e.error),
                error_type=type(e.error).__name__,
            )

    def _drop_invalidate_items_views(self, tables: list[str]) -> None:
        """Drop every registered view; one failure never blocks the rest."""
        if not tables:
            return

        source_item = self._environment.source_connection
        if source_item is None:
            self._log.warning("No source connection, cannot drop invalidate-item views", views=list(tables))
            return

        for table in tables:
            try:
                drop_view(table, source_item.connection)
            except Exception as e:
                self._log.error(
                    "Failed to drop invalidate-item view",
                    view=table,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            else:
                self._log.debug("Dropped invalidate-item view", view=table)

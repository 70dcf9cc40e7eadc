# src/plumbline/plugins/sinks/json_sink.py
"""JSON Lines sink plugin for plumbline.

Writes one JSON object per row. Result rows are tagged with the name of
the ResultList they came from. ERROR_DATA sinks read the invalidate-item
view from the source connection instead of receiving results.
"""

import json
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import field_validator

from plumbline.contracts import ResultList, SinkType, SourceType
from plumbline.core.logging import get_logger
from plumbline.core.sql import quote_identifier
from plumbline.plugins.base import BaseSink
from plumbline.plugins.config_base import SinkConfig

if TYPE_CHECKING:
    from plumbline.engine.environment import RuntimeEnvironment

logger = get_logger(__name__)


class JSONSinkConfig(SinkConfig):
    """Configuration for the JSON Lines sink plugin."""

    path: str
    mode: Literal["write", "append"] = "write"
    encoding: str = "utf-8"
    invalidate_items_table: str | None = None
    error_data_limit: int | None = None

    @field_validator("path")
    @classmethod
    def validate_path_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("path cannot be empty")
        return v


class JSONSink(BaseSink):
    """Write results (or error rows) to a JSON Lines file.

    Config options:
        plugin_type: Sink kind (required)
        path: Output file (required). Parent directories are created.
        mode: "write" (truncate) or "append" (default: "write")
        encoding: File encoding (default: "utf-8")
        invalidate_items_table: View to read for error_data sinks
        error_data_limit: Maximum error rows to write (default: all)

    Each result row is written as ``{"result": <name>, **row}``. Values
    JSON cannot represent natively (dates, decimals) are written via str().
    """

    name = "json"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any]) -> None:
        cfg = JSONSinkConfig.from_dict(config)
        super().__init__(cfg)
        self._path = Path(cfg.path)
        self._mode = cfg.mode
        self._encoding = cfg.encoding
        self._error_view = cfg.invalidate_items_table
        self._error_limit = cfg.error_data_limit
        self._kind = SinkType.parse(cfg.plugin_type)

    @property
    def path(self) -> Path:
        return self._path

    def output(self, results: Sequence[ResultList] | None, env: "RuntimeEnvironment") -> None:
        if self._kind == SinkType.ERROR_DATA:
            records = self._read_error_rows(env)
        else:
            records = self._result_records(results or ())
        written = self._write(records)
        logger.info("Wrote JSON lines", path=str(self._path), rows=written, kind=str(self._kind))

    def _result_records(self, results: Sequence[ResultList]) -> Iterable[Mapping[str, Any]]:
        for result in results:
            for row in result:
                yield {"result": result.name, **row}

    def _read_error_rows(self, env: "RuntimeEnvironment") -> list[Mapping[str, Any]]:
        """Read rows of the invalidate-item view from the source connection."""
        if not self._error_view:
            logger.warning("error_data sink has no invalidate_items_table, writing nothing", path=str(self._path))
            return []
        connection = env.connection_for(SourceType.SOURCE).connection
        statement = f"SELECT * FROM {quote_identifier(self._error_view, connection)}"
        result = connection.exec_driver_sql(statement).mappings()
        if self._error_limit is not None:
            return list(result.fetchmany(self._error_limit))
        return list(result.all())

    def _write(self, records: Iterable[Mapping[str, Any]]) -> int:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        file_mode = "a" if self._mode == "append" else "w"
        count = 0
        with self._path.open(file_mode, encoding=self._encoding) as f:
            for record in records:
                f.write(json.dumps(dict(record), default=str))
                f.write("\n")
                count += 1
        return count

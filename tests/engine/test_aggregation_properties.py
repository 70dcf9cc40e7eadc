# tests/engine/test_aggregation_properties.py
"""Property tests for transform aggregation.

For any sequence of transform kinds:
- actual_values holds exactly the ACTUAL_VALUE results, in order
- task_results holds ACTUAL_VALUE and EXPECTED_VALUE_* results, in order
- actual_values is an ordered subsequence of task_results
- the registry holds every named view of INVALIDATE_ITEMS transforms
"""

from __future__ import annotations

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from plumbline.contracts import ResultList, TransformType
from plumbline.engine.environment import RuntimeEnvironment
from plumbline.engine.execution import Execution
from plumbline.plugins.base import BaseSource
from plumbline.plugins.connection import SqlConnectionItem
from tests.conftest import StaticTransform

EXPECTED_KINDS = {
    TransformType.EXPECTED_VALUE_FROM_METADATA_SOURCE,
    TransformType.EXPECTED_VALUE_FROM_SOURCE,
    TransformType.EXPECTED_VALUE_FROM_TARGET_SOURCE,
}

transform_specs = st.lists(
    st.tuples(
        st.sampled_from([*(str(kind) for kind in TransformType), "unknown_kind"]),
        st.one_of(st.none(), st.sampled_from(["v1", "v2", "v3"])),
    ),
    max_size=12,
)


class InMemorySource(BaseSource):
    """Source role backed by a throwaway in-memory SQLite database."""

    name = "in_memory"

    def get_connection_item(self, env: RuntimeEnvironment) -> SqlConnectionItem:
        return SqlConnectionItem.from_url("sqlite://")

    def check_table_exist(self) -> bool:
        return True


def _is_subsequence(needle: tuple[ResultList, ...], haystack: tuple[ResultList, ...]) -> bool:
    it = iter(haystack)
    return all(any(item is candidate for candidate in it) for item in needle)


class TestAggregationProperties:
    @given(specs=transform_specs)
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_aggregates_follow_kind(self, specs: list[tuple[str, str | None]]) -> None:
        calls: list[tuple[str, str]] = []
        transforms = [
            StaticTransform(
                {"plugin_type": kind, "invalidate_items_table": table},
                calls=calls,
                result=ResultList.from_rows(f"r{i}", [{"i": i}]),
                label=f"t{i}",
            )
            for i, (kind, table) in enumerate(specs)
        ]

        result = Execution(RuntimeEnvironment()).execute([InMemorySource({"plugin_type": "source"})], transforms, [])

        kinds = [TransformType.parse(kind) for kind, _ in specs]
        expected_actual = tuple(t.result for t, k in zip(transforms, kinds, strict=True) if k == TransformType.ACTUAL_VALUE)
        expected_tasks = tuple(
            t.result for t, k in zip(transforms, kinds, strict=True) if k == TransformType.ACTUAL_VALUE or k in EXPECTED_KINDS
        )
        expected_views = tuple(table for (_, table), k in zip(specs, kinds, strict=True) if k == TransformType.INVALIDATE_ITEMS and table)

        assert result.actual_values == expected_actual
        assert result.task_results == expected_tasks
        assert _is_subsequence(result.actual_values, result.task_results)
        assert result.invalidate_items_tables == expected_views
        assert [label for op, label in calls] == [f"t{i}" for i, k in enumerate(kinds) if k is not None]

"""
Unit Tests for PredicateMatcher and query templating.

Test Aspects Covered:
    ✅ Business Logic: Default skip filter, overrides, item references
    ✅ Edge Cases: Missing items, falsy skip markers, unresolved references
    ✅ Error Handling: Malformed filters rejected when building
"""

from __future__ import annotations

import pytest

from hook_pipeline.domain.entities import HookContext, Stage
from hook_pipeline.matching.predicate import DEFAULT_FILTER, PredicateMatcher
from hook_pipeline.matching.templating import template_query
from hook_pipeline.resilience.errors import QuerySyntaxError


def before(data) -> HookContext:
    return HookContext(type=Stage.BEFORE, data=data)


def after(data) -> HookContext:
    return HookContext(type=Stage.AFTER, data={"input": True}, result={"data": data})


class TestTemplating:
    """Test cases for template_query."""

    def test_reference_keeps_value_type(self) -> None:
        resolved = template_query({"b": 5}, {"a": "$b"})

        assert resolved == {"a": 5}

    def test_nested_reference_inside_operators(self) -> None:
        item = {"limits": {"max": 10}, "allowed": ["x", "y"]}

        resolved = template_query(
            item, {"value": {"$lte": "$limits.max"}, "kind": {"$in": "$allowed"}}
        )

        assert resolved == {"value": {"$lte": 10}, "kind": {"$in": ["x", "y"]}}

    def test_unresolved_reference_left_untouched(self) -> None:
        assert template_query({}, {"a": "$missing"}) == {"a": "$missing"}

    def test_placeholder_interpolation(self) -> None:
        resolved = template_query(
            {"prefix": "wx", "id": 3}, {"name": {"$regex": "^<%= prefix %>-<%= id %>"}}
        )

        assert resolved == {"name": {"$regex": "^wx-3"}}

    def test_query_is_not_modified(self) -> None:
        query = {"a": "$b", "c": ["$b"]}

        template_query({"b": 1}, query)

        assert query == {"a": "$b", "c": ["$b"]}


class TestDefaultFilter:
    """Test cases for the skip marker filter."""

    @pytest.fixture
    def should_run(self):
        return PredicateMatcher().build_predicate("echo")

    def test_item_without_marker_runs(self, should_run) -> None:
        assert should_run(before({"id": 1}))

    @pytest.mark.parametrize("marker", [None, False, "", 0, 0.0, [], {}])
    def test_falsy_marker_runs(self, should_run, marker) -> None:
        assert should_run(before({"id": 1, "skip": marker}))

    @pytest.mark.parametrize("marker", [True, "yes", 1, [False], [None], {"x": 0}])
    def test_truthy_marker_skips(self, should_run, marker) -> None:
        assert not should_run(before({"id": 1, "skip": marker}))

    @pytest.mark.parametrize(
        "marker", [None, False, "", 0, [], {}, True, "yes", [False], {"x": 0}]
    )
    def test_guard_agrees_with_is_skipped(self, should_run, marker) -> None:
        """
        SCENARIO: Same item checked by the guard and by the context
        EXPECTED: The step runs exactly when the item is not skipped
        """
        context = before({"id": 1, "skip": marker})

        assert should_run(context) is not context.is_skipped()

    def test_after_stage_uses_result_data(self, should_run) -> None:
        """
        SCENARIO: After stage, input carries no marker but result does
        EXPECTED: Result data decides
        """
        context = after({"skip": True})

        assert not should_run(context)
        assert should_run(after({"id": 1}))

    def test_missing_item_skips(self, should_run) -> None:
        assert not should_run(before(None))
        assert not should_run(HookContext(type=Stage.AFTER, data={"id": 1}))
        assert not should_run(before(["not", "a", "mapping"]))

    def test_predicate_never_mutates_context(self, should_run) -> None:
        context = before({"id": 1, "skip": False})

        should_run(context)

        assert context.data == {"id": 1, "skip": False}
        assert context.result == {}


class TestFilterOverride:
    """Test cases for custom filters."""

    def test_self_reference_match(self) -> None:
        """
        SCENARIO: {a: "$b"} filter
        EXPECTED: Runs when a equals b on the same item
        """
        should_run = PredicateMatcher().build_predicate("echo", {"a": "$b"})

        assert should_run(before({"a": 5, "b": 5}))
        assert not should_run(before({"a": 5, "b": 6}))

    def test_override_is_layered_on_default(self) -> None:
        should_run = PredicateMatcher().build_predicate("echo", {"type": "Feature"})

        assert should_run(before({"type": "Feature"}))
        assert not should_run(before({"type": "Feature", "skip": True}))
        assert not should_run(before({"type": "Point"}))

    def test_override_replaces_default_on_same_path(self) -> None:
        should_run = PredicateMatcher().build_predicate("echo", {"skip": True})

        assert should_run(before({"skip": True}))
        assert not should_run(before({}))

    def test_merge_does_not_leak_between_predicates(self) -> None:
        matcher = PredicateMatcher()

        matcher.merge_filter({"type": "Feature"})

        assert matcher.merge_filter() == DEFAULT_FILTER

    def test_malformed_override_rejected(self) -> None:
        with pytest.raises(QuerySyntaxError):
            PredicateMatcher().build_predicate("echo", {"a": {"$bogus": 1}})

    def test_custom_default_filter(self) -> None:
        matcher = PredicateMatcher(default_filter={"enabled": True})
        should_run = matcher.build_predicate("echo")

        assert should_run(before({"enabled": True, "skip": True}))
        assert not should_run(before({"enabled": False}))

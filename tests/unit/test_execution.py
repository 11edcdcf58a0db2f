"""
Unit Tests for step execution wrappers.

Tests:
    - fault_tolerant containment and rollback
    - guarded predicate and error wrapping
    - parallel fan-out/fan-in semantics
    - Pipeline ordering and abort behavior
"""

from __future__ import annotations

import asyncio
import copy

import pytest

from hook_pipeline.domain.entities import HookContext, Stage
from hook_pipeline.pipeline.execution import guarded
from hook_pipeline.pipeline.parallel import parallel
from hook_pipeline.pipeline.pipeline import Pipeline, PipelineEntry
from hook_pipeline.resilience.errors import ParallelGroupError, StepError
from hook_pipeline.resilience.fault_tolerance import fault_tolerant


def context() -> HookContext:
    return HookContext(type=Stage.BEFORE, data={"id": 1, "nested": {"n": [1, 2]}})


def always(_: HookContext) -> bool:
    return True


def never(_: HookContext) -> bool:
    return False


class TestFaultTolerant:
    """Test cases for the fault-tolerant wrapper."""

    @pytest.mark.asyncio
    async def test_sync_failure_returns_original_context(self) -> None:
        """
        SCENARIO: Step mutates the context, then raises synchronously
        EXPECTED: Same context object returned, content as before the call
        """
        ctx = context()
        before = copy.deepcopy(ctx.data)

        def failing(c: HookContext) -> HookContext:
            c.data["nested"]["n"].append(3)
            c.data["added"] = True
            raise ValueError("boom")

        result = await fault_tolerant(failing, "failing")(ctx)

        assert result is ctx
        assert ctx.data == before
        assert ctx.params == {}

    @pytest.mark.asyncio
    async def test_async_failure_is_contained(self) -> None:
        ctx = context()

        async def failing(c: HookContext) -> HookContext:
            await asyncio.sleep(0)
            c.params["touched"] = True
            raise RuntimeError("rejected")

        result = await fault_tolerant(failing, "failing")(ctx)

        assert result is ctx
        assert ctx.params == {}

    @pytest.mark.asyncio
    async def test_without_rollback_keeps_mutations(self) -> None:
        ctx = context()

        def failing(c: HookContext) -> HookContext:
            c.params["touched"] = True
            raise RuntimeError("boom")

        result = await fault_tolerant(failing, "failing", rollback=False)(ctx)

        assert result is ctx
        assert ctx.params == {"touched": True}

    @pytest.mark.asyncio
    async def test_reassigned_field_object_left_intact(self) -> None:
        """
        SCENARIO: Failing step swaps params for a dict owned by the caller
        EXPECTED: Caller dict untouched, original params object put back
        """
        shared = {"region": "eu"}
        ctx = context()
        ctx.params["page"] = 1
        params = ctx.params

        def failing(c: HookContext) -> HookContext:
            c.params = shared
            c.data = {"replaced": True}
            raise RuntimeError("boom")

        result = await fault_tolerant(failing, "failing")(ctx)

        assert result is ctx
        assert shared == {"region": "eu"}
        assert ctx.params is params
        assert ctx.params == {"page": 1}
        assert ctx.data == {"id": 1, "nested": {"n": [1, 2]}}

    @pytest.mark.asyncio
    async def test_success_passes_result_through(self) -> None:
        ctx = context()

        def ok(c: HookContext) -> HookContext:
            c.data["ok"] = True
            return c

        result = await fault_tolerant(ok, "ok")(ctx)

        assert result.data["ok"] is True

    @pytest.mark.asyncio
    async def test_cancellation_is_not_contained(self) -> None:
        async def cancelled(c: HookContext) -> HookContext:
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await fault_tolerant(cancelled, "cancelled")(context())


class TestGuarded:
    """Test cases for predicate guards."""

    @pytest.mark.asyncio
    async def test_rejected_predicate_skips_step(self) -> None:
        calls = []
        ctx = context()

        result = await guarded(lambda c: calls.append(c), never, "echo")(ctx)

        assert result is ctx
        assert calls == []

    @pytest.mark.asyncio
    async def test_step_returning_none_yields_context(self) -> None:
        ctx = context()

        result = await guarded(lambda c: None, always, "echo")(ctx)

        assert result is ctx

    @pytest.mark.asyncio
    async def test_failure_wrapped_in_step_error(self) -> None:
        def failing(c: HookContext) -> HookContext:
            raise KeyError("missing")

        with pytest.raises(StepError) as exc_info:
            await guarded(failing, always, "echo", stage="before")(context())

        assert exc_info.value.step_name == "echo"
        assert exc_info.value.stage == "before"
        assert isinstance(exc_info.value.__cause__, KeyError)


class TestParallel:
    """Test cases for the parallel combinator."""

    @pytest.mark.asyncio
    async def test_all_members_mutations_visible(self) -> None:
        """
        SCENARIO: Three members with disjoint mutations, finishing out of order
        EXPECTED: All mutations visible, same context returned
        """
        order = []

        def member(key: str, delay: float):
            async def step(c: HookContext) -> HookContext:
                await asyncio.sleep(delay)
                c.data[key] = True
                order.append(key)
                return c

            return step

        ctx = context()
        group = parallel(
            [("a", member("a", 0.03)), ("b", member("b", 0.0)), ("c", member("c", 0.01))]
        )

        result = await group(ctx)

        assert result is ctx
        assert ctx.data["a"] and ctx.data["b"] and ctx.data["c"]
        assert order == ["b", "c", "a"]

    @pytest.mark.asyncio
    async def test_members_start_together(self) -> None:
        started = []
        release = asyncio.Event()

        def member(key: str):
            async def step(c: HookContext) -> HookContext:
                started.append(key)
                await release.wait()
                return c

            return step

        task = asyncio.ensure_future(
            parallel([("a", member("a")), ("b", member("b"))])(context())
        )
        await asyncio.sleep(0.01)

        assert sorted(started) == ["a", "b"]
        release.set()
        await task

    @pytest.mark.asyncio
    async def test_failing_member_fails_group_after_all_settle(self) -> None:
        """
        SCENARIO: Second of three members rejects early
        EXPECTED: Siblings still complete, then the group raises
        """
        finished = []

        async def slow(c: HookContext) -> HookContext:
            await asyncio.sleep(0.02)
            finished.append("slow")
            return c

        async def failing(c: HookContext) -> HookContext:
            raise RuntimeError("member failed")

        async def fast(c: HookContext) -> HookContext:
            finished.append("fast")
            return c

        group = parallel([("slow", slow), ("failing", failing), ("fast", fast)], stage="before")

        with pytest.raises(ParallelGroupError) as exc_info:
            await group(context())

        assert sorted(finished) == ["fast", "slow"]
        assert exc_info.value.step_name == "failing"
        assert exc_info.value.details["failed"] == ["failing"]
        assert len(exc_info.value.errors) == 1
        assert isinstance(exc_info.value, StepError)

    @pytest.mark.asyncio
    async def test_fault_tolerant_member_does_not_fail_group(self) -> None:
        def failing(c: HookContext) -> HookContext:
            raise RuntimeError("tolerated")

        def ok(c: HookContext) -> HookContext:
            c.data["ok"] = True
            return c

        ctx = context()
        group = parallel(
            [("failing", fault_tolerant(failing, "failing", rollback=False)), ("ok", ok)]
        )

        result = await group(ctx)

        assert result.data["ok"] is True


class TestPipeline:
    """Test cases for sequential pipelines."""

    def make_entry(self, name: str, calls: list, fail: bool = False) -> PipelineEntry:
        async def run(c: HookContext) -> HookContext:
            calls.append(name)
            if fail:
                raise StepError(f"{name} failed", step_name=name)
            return c

        return PipelineEntry(name, run)

    @pytest.mark.asyncio
    async def test_runs_entries_in_order(self) -> None:
        calls = []
        pipeline = Pipeline(
            "before", [self.make_entry(name, calls) for name in ["one", "two", "three"]]
        )

        await pipeline.run(context())

        assert calls == ["one", "two", "three"]
        assert pipeline.names == ["one", "two", "three"]
        assert len(pipeline) == 3

    @pytest.mark.asyncio
    async def test_failure_stops_later_entries(self) -> None:
        calls = []
        pipeline = Pipeline(
            "before",
            [
                self.make_entry("one", calls),
                self.make_entry("two", calls, fail=True),
                self.make_entry("three", calls),
            ],
        )

        with pytest.raises(StepError, match="two failed"):
            await pipeline(context())

        assert calls == ["one", "two"]

    def test_entries_are_immutable(self) -> None:
        entries = [self.make_entry("one", [])]
        pipeline = Pipeline("before", entries)

        entries.append(self.make_entry("two", []))

        assert len(pipeline) == 1
        assert isinstance(pipeline.entries, tuple)

    @pytest.mark.asyncio
    async def test_empty_pipeline_returns_context(self) -> None:
        ctx = context()

        assert await Pipeline("after").run(ctx) is ctx

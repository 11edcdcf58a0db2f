"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from hook_pipeline.domain.entities import HookContext, Stage
from hook_pipeline.pipeline.builder import PipelineBuilder
from hook_pipeline.registry.step_registry import StepRegistry, create_default_registry


class StepRecorder:
    """
    Builds step constructors recording their invocations.

    Every step appends its name to `calls` when its body runs, so tests
    can assert on execution order and on which steps were filtered out.
    """

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.options: Dict[str, Dict[str, Any]] = {}

    def async_step(
        self,
        name: str,
        mutate: Optional[Callable[[HookContext], None]] = None,
        fail: bool = False,
        delay: float = 0.0,
    ) -> Callable[[Dict[str, Any]], Callable[[HookContext], Any]]:
        """Constructor of an async recording step."""

        def constructor(options: Dict[str, Any]) -> Callable[[HookContext], Any]:
            self.options[name] = options

            async def step(context: HookContext) -> HookContext:
                if delay:
                    await asyncio.sleep(delay)
                self.calls.append(name)
                if mutate is not None:
                    mutate(context)
                if fail:
                    raise RuntimeError(f"{name} failed")
                return context

            return step

        return constructor

    def sync_step(
        self,
        name: str,
        mutate: Optional[Callable[[HookContext], None]] = None,
        fail: bool = False,
    ) -> Callable[[Dict[str, Any]], Callable[[HookContext], Any]]:
        """Constructor of a plain (non-async) recording step returning None."""

        def constructor(options: Dict[str, Any]) -> Callable[[HookContext], Any]:
            self.options[name] = options

            def step(context: HookContext) -> None:
                self.calls.append(name)
                if mutate is not None:
                    mutate(context)
                if fail:
                    raise ValueError(f"{name} failed")

            return step

        return constructor


@pytest.fixture
def recorder() -> StepRecorder:
    """Fresh step recorder."""
    return StepRecorder()


@pytest.fixture
def registry() -> StepRegistry:
    """Registry seeded with the built-in steps only."""
    return create_default_registry()


@pytest.fixture
def builder(registry: StepRegistry) -> PipelineBuilder:
    """Builder over the default registry."""
    return PipelineBuilder(registry)


@pytest.fixture
def before_context() -> HookContext:
    """Context of an item entering the before stage."""
    return HookContext(
        type=Stage.BEFORE,
        data={"id": "item-1", "type": "Feature", "a": 5, "b": 5},
        params={},
    )


@pytest.fixture
def after_context() -> HookContext:
    """Context of an item in the after stage."""
    return HookContext(
        type=Stage.AFTER,
        data={"id": "item-1"},
        result={"data": {"id": "item-1", "status": "done", "count": 3}},
    )


@pytest.fixture
def sample_config_path() -> Path:
    """Path to the sample hook configuration."""
    return Path(__file__).parent / "fixtures" / "sample_hooks.yaml"

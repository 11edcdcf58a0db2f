"""
Step Protocols.

Defines the only contract the engine requires from a step
implementation, plus the host handle pipelines may be installed on.

A step constructor receives its options mapping and returns a step.
A step receives the context and returns it, either directly or from a
coroutine. Failure is signalled by raising, never by a sentinel value.

Design Notes:
    - Uses typing.Protocol for structural subtyping
    - Returning None from a step is treated as returning the context
"""

from __future__ import annotations

import inspect
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Mapping,
    Protocol,
    Union,
    runtime_checkable,
)

from hook_pipeline.domain.entities import HookContext

StepReturn = Union[HookContext, None, Awaitable[Union[HookContext, None]]]
AsyncStep = Callable[[HookContext], Awaitable[HookContext]]


class Step(Protocol):
    """A configured unit of per-item processing."""

    def __call__(self, context: HookContext) -> StepReturn:
        ...


class StepConstructor(Protocol):
    """Builds a step from its options."""

    def __call__(self, options: Dict[str, Any]) -> Step:
        ...


@runtime_checkable
class HookHost(Protocol):
    """Something built pipelines can be installed on, keyed by stage."""

    def hooks(self, hooks: Mapping[str, Mapping[str, Any]]) -> Any:
        ...


async def invoke_step(step: Step, context: HookContext) -> HookContext:
    """
    Run a step against a context, whichever way it is written.

    Returns:
        The context returned by the step, or the given one when the
        step returned None
    """
    result = step(context)
    if inspect.isawaitable(result):
        result = await result
    return context if result is None else result

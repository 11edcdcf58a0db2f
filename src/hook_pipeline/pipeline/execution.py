"""
Step Guards.

Guarding a step with its execution predicate: the step only runs when
the predicate accepts the context, otherwise the context passes through
unchanged.
"""

from __future__ import annotations

from typing import Callable, Optional

from hook_pipeline.domain.entities import HookContext
from hook_pipeline.interfaces.step import AsyncStep, Step, invoke_step
from hook_pipeline.resilience.errors import HookPipelineError, StepError


def guarded(
    step: Step,
    predicate: Callable[[HookContext], bool],
    step_name: str,
    stage: Optional[str] = None,
) -> AsyncStep:
    """
    Run step only when predicate accepts the context.

    Failures not already raised as package errors are wrapped in a
    StepError chained to the original exception.

    Args:
        step: Step to guard
        predicate: Decides whether the step runs
        step_name: Name for errors and logging
        stage: Stage the step belongs to

    Returns:
        Coroutine function returning the context
    """

    async def run(context: HookContext) -> HookContext:
        if not predicate(context):
            return context
        try:
            return await invoke_step(step, context)
        except HookPipelineError:
            raise
        except Exception as e:
            raise StepError(
                f"Step {step_name} failed: {e}",
                step_name=step_name,
                stage=stage,
            ) from e

    run.__name__ = f"guarded_{step_name}"
    return run

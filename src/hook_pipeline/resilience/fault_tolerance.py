"""
Fault Tolerance - Contained Step Calls.

Wraps a step so that any failure, raised synchronously or from its
coroutine, is logged and the context is handed back as it was before
the call. The enclosing pipeline then proceeds as though the step were
absent.

Design Notes:
    - Only Exception subclasses are contained; cancellation and
      interpreter exits propagate
    - With rollback enabled the context is restored from a snapshot
      taken before the call, undoing partial mutations
    - Parallel members share their context, so they are wrapped
      without rollback: restoring would also undo sibling mutations
"""

from __future__ import annotations

import logging

from hook_pipeline.domain.entities import HookContext
from hook_pipeline.interfaces.step import AsyncStep, Step, invoke_step

logger = logging.getLogger(__name__)


def fault_tolerant(
    step: Step,
    step_name: str = "step",
    rollback: bool = True,
) -> AsyncStep:
    """
    Wrap a step so its failures never escape.

    Args:
        step: Step to protect
        step_name: Name for logging
        rollback: Restore the pre-call context state on failure

    Returns:
        Step that always returns the context it was given
    """

    async def contained(context: HookContext) -> HookContext:
        state = context.snapshot() if rollback else None
        try:
            return await invoke_step(step, context)
        except Exception as e:
            logger.warning(
                f"Fault-tolerant step {step_name} failed, continuing: {e}",
                exc_info=True,
            )
            if state is not None:
                context.restore(state)
            return context

    contained.__name__ = f"fault_tolerant_{step_name}"
    return contained

"""
Parallel Combinator - Fan-Out / Fan-In Step Groups.

Runs a fixed set of already-wrapped steps concurrently against one
shared context. All members are started together and every one of them
is awaited, whatever the others do; a failing member never cancels its
siblings.

Design Notes:
    - The shared context is not locked; members writing overlapping
      fields must be idempotent or non-conflicting
    - Fault tolerance is applied per member, never to the group
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from hook_pipeline.domain.entities import HookContext
from hook_pipeline.interfaces.step import AsyncStep, Step, invoke_step
from hook_pipeline.resilience.errors import ParallelGroupError

logger = logging.getLogger(__name__)


def parallel(
    members: Sequence[Tuple[str, Step]],
    stage: Optional[str] = None,
) -> AsyncStep:
    """
    Combine steps into one concurrent group.

    Args:
        members: (name, step) pairs
        stage: Stage the group belongs to

    Returns:
        Coroutine function returning the shared context once all
        members have settled

    Raises:
        ParallelGroupError: From the returned function, if any member failed
    """
    members = tuple(members)
    names = [name for name, _ in members]

    async def run(context: HookContext) -> HookContext:
        logger.debug(f"Starting parallel group {names}")
        results = await asyncio.gather(
            *(invoke_step(step, context) for _, step in members),
            return_exceptions=True,
        )

        failures: List[Tuple[str, BaseException]] = [
            (name, result)
            for name, result in zip(names, results)
            if isinstance(result, BaseException)
        ]
        if failures:
            failed_names = [name for name, _ in failures]
            logger.error(
                f"Parallel group {names} failed in {len(failures)} member(s): "
                f"{failed_names}"
            )
            raise ParallelGroupError(
                f"Parallel group failed in {failed_names}: {failures[0][1]}",
                step_name=failed_names[0],
                stage=stage,
                errors=[error for _, error in failures],
                details={"failed": failed_names, "members": names},
            ) from failures[0][1]

        logger.debug(f"Parallel group {names} completed")
        return context

    run.__name__ = "parallel"
    return run

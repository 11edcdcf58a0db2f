"""
Pipeline - Immutable Ordered Step Sequence.

A Pipeline is produced once per stage by the builder and never changes
shape afterwards. Running it threads a context through its entries in
declaration order; the first unguarded failure aborts the run.

State per context run:
    Ready -> entry 1 -> ... -> entry k -> Done
    any unguarded failure   -> Aborted (the error propagates)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from hook_pipeline.domain.entities import HookContext
from hook_pipeline.interfaces.step import AsyncStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineEntry:
    """One executable entry of a pipeline."""

    name: str
    run: AsyncStep
    parallel: bool = False


class Pipeline:
    """Ordered, immutable sequence of wrapped steps for one stage."""

    def __init__(self, stage: str, entries: Iterable[PipelineEntry] = ()) -> None:
        """
        Initialize pipeline.

        Args:
            stage: Stage this pipeline runs at
            entries: Entries in execution order
        """
        self._stage = stage
        self._entries: Tuple[PipelineEntry, ...] = tuple(entries)

    @property
    def stage(self) -> str:
        return self._stage

    @property
    def entries(self) -> Tuple[PipelineEntry, ...]:
        return self._entries

    @property
    def names(self) -> List[str]:
        """Entry names in execution order."""
        return [entry.name for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PipelineEntry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"Pipeline(stage={self._stage!r}, entries={self.names!r})"

    async def run(self, context: HookContext) -> HookContext:
        """
        Thread a context through every entry.

        Args:
            context: Context owned by this run

        Returns:
            Context after the last entry

        Raises:
            StepError: If an entry fails without fault tolerance; later
                entries are not run
        """
        for index, entry in enumerate(self._entries, start=1):
            try:
                context = await entry.run(context)
            except Exception as e:
                logger.error(
                    f"Aborting {self._stage} pipeline at entry {index}/{len(self)} "
                    f"({entry.name}): {e}"
                )
                raise
        return context

    async def __call__(self, context: HookContext) -> HookContext:
        return await self.run(context)

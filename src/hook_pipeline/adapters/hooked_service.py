"""
Hooked Service - Host Handle for Built Pipelines.

A minimal host wrapping an operation with `before` and `after`
pipelines. PipelineBuilder.build(config, host=service) installs the
built pipelines through hooks(); create() then runs one item through
before hooks, the operation and after hooks.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from hook_pipeline.domain.entities import HookContext, Stage
from hook_pipeline.pipeline.pipeline import Pipeline

logger = logging.getLogger(__name__)

Operation = Callable[[Any, Dict[str, Any]], Any]


class HookedService:
    """Runs an operation between its stage pipelines."""

    def __init__(self, operation: Operation, name: str = "service") -> None:
        """
        Initialize service.

        Args:
            operation: Callable (sync or async) receiving (data, params)
                and returning the result data
            name: Service name for logging
        """
        self.name = name
        self._operation = operation
        self._pipelines: Dict[str, Dict[str, Pipeline]] = {}

    def hooks(self, hooks: Mapping[str, Mapping[str, Pipeline]]) -> "HookedService":
        """
        Install pipelines keyed by stage then operation kind.

        A pipeline installed for a stage/operation pair replaces any
        previously installed one.
        """
        for stage, methods in hooks.items():
            installed = self._pipelines.setdefault(stage, {})
            for method, pipeline in methods.items():
                installed[method] = pipeline
                logger.debug(
                    f"Installed {stage} {method} pipeline on {self.name}: "
                    f"{pipeline.names}"
                )
        return self

    def get_pipeline(self, stage: str, method: str = "create") -> Optional[Pipeline]:
        return self._pipelines.get(stage, {}).get(method)

    async def create(
        self, data: Any, params: Optional[Dict[str, Any]] = None
    ) -> HookContext:
        """
        Process one item.

        The operation is not called when a before hook already provided
        result data.

        Args:
            data: Input item
            params: Free-form parameters

        Returns:
            Context after the after stage

        Raises:
            StepError: If a stage pipeline aborts
        """
        context = HookContext(
            type=Stage.BEFORE.value,
            data=data,
            params=dict(params or {}),
            method="create",
        )
        context = await self._run_stage(Stage.BEFORE, context)

        if "data" not in context.result:
            result = self._operation(context.data, context.params)
            if inspect.isawaitable(result):
                result = await result
            context.result["data"] = result
        else:
            logger.debug(f"{self.name}: result provided by before hooks")

        context.type = Stage.AFTER.value
        return await self._run_stage(Stage.AFTER, context)

    async def _run_stage(self, stage: Stage, context: HookContext) -> HookContext:
        pipeline = self.get_pipeline(stage.value, context.method)
        if pipeline is None:
            return context
        return await pipeline.run(context)

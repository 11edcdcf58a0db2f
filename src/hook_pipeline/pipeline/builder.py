"""
Pipeline Builder - Configuration to Per-Stage Pipelines.

Turns a stage configuration into one immutable Pipeline per stage. Each
entry is resolved against the step registry, constructed with its
options, optionally made fault tolerant and guarded by its predicate.
The reserved `parallel` key groups members into one concurrent entry.

Usage:
    builder = PipelineBuilder(registry)
    hooks = builder.build(config.hooks, host=service)
    await hooks["before"]["create"].run(context)

Design Notes:
    - A bad entry (unknown step, invalid options, malformed filter or a
      failing constructor) is recorded as a BuildError, logged and
      skipped; the rest of the build is unaffected
    - The registry is read during build only; built pipelines keep the
      constructed steps, not the names
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError

from hook_pipeline.config.models import PARALLEL_KEY, ParallelMember, StepOptions
from hook_pipeline.interfaces.step import HookHost, Step
from hook_pipeline.matching.predicate import PredicateMatcher
from hook_pipeline.pipeline.execution import guarded
from hook_pipeline.pipeline.parallel import parallel
from hook_pipeline.pipeline.pipeline import Pipeline, PipelineEntry
from hook_pipeline.registry.step_registry import StepRegistryProtocol
from hook_pipeline.resilience.errors import BuildError, QuerySyntaxError
from hook_pipeline.resilience.fault_tolerance import fault_tolerant

logger = logging.getLogger(__name__)

OptionsT = TypeVar("OptionsT", bound=StepOptions)

HookMap = Dict[str, Dict[str, Pipeline]]


class PipelineBuilder:
    """Builds per-stage pipelines from hook configurations."""

    def __init__(
        self,
        registry: StepRegistryProtocol,
        matcher: Optional[PredicateMatcher] = None,
        operation: str = "create",
    ) -> None:
        """
        Initialize builder.

        Args:
            registry: Step name resolution
            matcher: Guard factory (default filter unless given)
            operation: Operation kind each stage pipeline handles
        """
        self._registry = registry
        self._matcher = matcher or PredicateMatcher()
        self._operation = operation
        self._errors: List[BuildError] = []

    @property
    def errors(self) -> List[BuildError]:
        """Errors recorded by the last build."""
        return list(self._errors)

    def build(
        self,
        stage_config: Mapping[str, Any],
        host: Optional[HookHost] = None,
    ) -> HookMap:
        """
        Build one pipeline per stage.

        Args:
            stage_config: Stage -> step key -> options
            host: Optional handle the pipelines are installed on

        Returns:
            Stage -> {operation: Pipeline}
        """
        self._errors = []
        hooks: HookMap = {}

        for stage, definitions in stage_config.items():
            if definitions is None:
                definitions = {}
            if not isinstance(definitions, Mapping):
                self._record(
                    BuildError(
                        f"Hooks of stage {stage} must be a mapping, "
                        f"got {type(definitions).__name__}",
                        stage=stage,
                    )
                )
                definitions = {}

            entries: List[PipelineEntry] = []
            for key, value in definitions.items():
                if key == PARALLEL_KEY:
                    entry = self._build_parallel(stage, value)
                else:
                    entry = self._build_entry(stage, key, value)
                if entry is not None:
                    entries.append(entry)

            pipeline = Pipeline(stage, entries)
            logger.debug(f"Built {stage} pipeline: {pipeline.names}")
            # Only the create operation is managed
            hooks[stage] = {self._operation: pipeline}

        if self._errors:
            logger.warning(
                f"Hook build completed with {len(self._errors)} rejected entries"
            )

        if host is not None:
            host.hooks(hooks)
        return hooks

    def _build_entry(self, stage: str, key: str, value: Any) -> Optional[PipelineEntry]:
        try:
            options = self._parse_options(StepOptions, value, stage, key)
            # Use the 'hook' option as step name if given, the key otherwise
            name = options.hook or key
            return PipelineEntry(name, self._build_step(stage, name, options, rollback=True))
        except BuildError as e:
            self._record(e)
            return None

    def _build_parallel(self, stage: str, value: Any) -> Optional[PipelineEntry]:
        if not isinstance(value, list):
            self._record(
                BuildError(
                    f"Parallel hooks of stage {stage} must be a list",
                    step_name=PARALLEL_KEY,
                    stage=stage,
                )
            )
            return None

        members = []
        for index, item in enumerate(value):
            try:
                options = self._parse_options(
                    ParallelMember, item, stage, f"{PARALLEL_KEY}[{index}]"
                )
                # Members share the context, a rollback would undo sibling work
                step = self._build_step(stage, options.hook, options, rollback=False)
                members.append((options.hook, step))
            except BuildError as e:
                self._record(e)

        if not members:
            logger.warning(f"Skipping empty parallel group in stage {stage}")
            return None

        names = [name for name, _ in members]
        logger.debug(f"Adding parallel group to {stage} hook chain: {names}")
        return PipelineEntry(
            f"{PARALLEL_KEY}[{', '.join(names)}]",
            parallel(members, stage=stage),
            parallel=True,
        )

    def _parse_options(
        self, model: Type[OptionsT], value: Any, stage: str, key: str
    ) -> OptionsT:
        try:
            return model.from_entry(value)
        except ValidationError as e:
            raise BuildError(
                f"Invalid options for hook {key} in stage {stage}: {e}",
                step_name=key,
                stage=stage,
            ) from e

    def _build_step(
        self, stage: str, name: str, options: StepOptions, rollback: bool
    ) -> Step:
        constructor = self._registry.lookup(name)
        if constructor is None:
            raise BuildError(f"Unknown hook {name}", step_name=name, stage=stage)

        try:
            step = constructor(options.step_options())
        except Exception as e:
            raise BuildError(
                f"Cannot create hook {name}: {e}", step_name=name, stage=stage
            ) from e
        if not callable(step):
            raise BuildError(
                f"Hook {name} constructor did not return a callable",
                step_name=name,
                stage=stage,
            )

        if options.fault_tolerant:
            logger.debug(f"Adding fault-tolerant hook for {name}")
            step = fault_tolerant(step, name, rollback=rollback)

        try:
            predicate = self._matcher.build_predicate(name, options.match)
        except QuerySyntaxError as e:
            raise BuildError(
                f"Invalid match filter for hook {name}: {e}",
                step_name=name,
                stage=stage,
            ) from e

        if options.match:
            logger.debug(f"Adding hook {name} to {stage} hook chain with filter {options.match}")
        else:
            logger.debug(f"Adding hook {name} to {stage} hook chain")
        return guarded(step, predicate, name, stage)

    def _record(self, error: BuildError) -> None:
        logger.error(str(error))
        self._errors.append(error)

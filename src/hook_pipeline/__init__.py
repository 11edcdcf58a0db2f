"""
Hook Pipeline - Declarative Per-Item Step Pipelines.

Builds ordered pipelines of named processing steps ("hooks") attached to
the before/after stages of an operation, from a nested configuration
saying which steps run, in what order, with what options and under what
conditions, and runs them against a mutable per-item context.

Architecture:
    - Steps are opaque capabilities behind one call contract
    - Name resolution through an explicit registry object
    - Per-step guards written as document queries over the current item
    - Fault tolerance and parallel groups as composable wrappers

Main Components:
    - domain: Stage marker and per-item HookContext
    - registry: StepRegistry (name -> step constructor)
    - matching: Query interpreter, templating and PredicateMatcher
    - resilience: Error hierarchy and the fault-tolerant wrapper
    - pipeline: Pipeline, parallel combinator and PipelineBuilder
    - adapters: HookedService host
    - config: Configuration models and YAML loader

Example:
    >>> from hook_pipeline import PipelineBuilder, create_default_registry
    >>> registry = create_default_registry()
    >>> registry.register("stamp", stamp)
    >>> hooks = PipelineBuilder(registry).build(
    ...     {"before": {"stamp": {"match": {"type": "Feature"}}}}
    ... )
    >>> context = await hooks["before"]["create"].run(context)

"""

import logging

from hook_pipeline.adapters.hooked_service import HookedService
from hook_pipeline.config.loader import ConfigLoader, load_config
from hook_pipeline.config.models import HooksConfig, StepOptions
from hook_pipeline.domain.entities import HookContext, Stage
from hook_pipeline.matching.predicate import DEFAULT_FILTER, PredicateMatcher
from hook_pipeline.pipeline.builder import PipelineBuilder
from hook_pipeline.pipeline.parallel import parallel
from hook_pipeline.pipeline.pipeline import Pipeline
from hook_pipeline.registry.step_registry import StepRegistry, create_default_registry
from hook_pipeline.resilience.errors import (
    BuildError,
    HookPipelineError,
    ParallelGroupError,
    QuerySyntaxError,
    StepError,
)
from hook_pipeline.resilience.fault_tolerance import fault_tolerant

__version__ = "0.1.0"


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for the hook pipeline.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import hook_pipeline
        >>> hook_pipeline.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("hook_pipeline").setLevel(level)


__all__ = [
    "BuildError",
    "ConfigLoader",
    "DEFAULT_FILTER",
    "HookContext",
    "HookPipelineError",
    "HookedService",
    "HooksConfig",
    "ParallelGroupError",
    "Pipeline",
    "PipelineBuilder",
    "PredicateMatcher",
    "QuerySyntaxError",
    "Stage",
    "StepError",
    "StepOptions",
    "StepRegistry",
    "configure_logging",
    "create_default_registry",
    "fault_tolerant",
    "load_config",
    "parallel",
]

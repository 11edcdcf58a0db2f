"""
Pipeline Package - Composition and Execution.

Components:
    - Pipeline: Immutable ordered entries for one stage
    - parallel: Fan-out/fan-in combinator
    - guarded: Predicate guard around a step
    - PipelineBuilder: Configuration -> per-stage pipelines
"""

from hook_pipeline.pipeline.builder import PipelineBuilder
from hook_pipeline.pipeline.execution import guarded
from hook_pipeline.pipeline.parallel import parallel
from hook_pipeline.pipeline.pipeline import Pipeline, PipelineEntry

__all__ = ["Pipeline", "PipelineBuilder", "PipelineEntry", "guarded", "parallel"]

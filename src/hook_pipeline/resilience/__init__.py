"""
Resilience Package - Errors and Fault Tolerance.

This package provides:
    - The package exception hierarchy
    - fault_tolerant: Contains step failures, context left unchanged

Design Principles:
    - Unguarded failures abort the current stage
    - Tolerance is opt-in per step, never per group
    - No automatic retries
"""

from hook_pipeline.resilience.errors import (
    BuildError,
    HookPipelineError,
    ParallelGroupError,
    QuerySyntaxError,
    StepError,
)
from hook_pipeline.resilience.fault_tolerance import fault_tolerant

__all__ = [
    "BuildError",
    "HookPipelineError",
    "ParallelGroupError",
    "QuerySyntaxError",
    "StepError",
    "fault_tolerant",
]

"""
Exception Hierarchy for the Hook Pipeline.

All package exceptions inherit from HookPipelineError so callers can
catch broadly or narrowly as needed. Each exception carries structured
context (step name, stage, details) for logging.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class HookPipelineError(Exception):
    """Base exception for all hook pipeline errors."""

    def __init__(
        self,
        message: str,
        *,
        step_name: Optional[str] = None,
        stage: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.step_name = step_name
        self.stage = stage
        self.details = details or {}
        super().__init__(message)


class BuildError(HookPipelineError):
    """A single configuration entry could not be turned into a step."""
    pass


class StepError(HookPipelineError):
    """A step failed while running against a context."""
    pass


class ParallelGroupError(StepError):
    """One or more members of a parallel group failed."""

    def __init__(
        self,
        message: str,
        *,
        errors: Optional[List[BaseException]] = None,
        **kwargs: Any,
    ) -> None:
        self.errors = errors or []
        super().__init__(message, **kwargs)


class QuerySyntaxError(HookPipelineError):
    """A predicate filter uses an unknown operator or a malformed operand."""
    pass

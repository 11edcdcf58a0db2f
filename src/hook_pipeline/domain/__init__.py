"""
Domain Layer - Stage Marker and Per-Item Context.

Entities:
    - Stage: Lifecycle point a pipeline runs at (before/after)
    - HookContext: Mutable record threaded through one pipeline run
"""

from hook_pipeline.domain.entities import SKIP_FIELD, HookContext, Stage

__all__ = ["SKIP_FIELD", "HookContext", "Stage"]

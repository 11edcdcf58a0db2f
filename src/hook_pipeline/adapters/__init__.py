"""
Adapters Package - Host Implementations.

Components:
    - HookedService: Runs an operation between before/after pipelines
"""

from hook_pipeline.adapters.hooked_service import HookedService

__all__ = ["HookedService"]

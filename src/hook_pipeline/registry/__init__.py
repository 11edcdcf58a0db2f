"""
Registry Module - Named Step Resolution.

This module provides the registry the pipeline builder resolves step
names against.

Components:
    - StepRegistry: Built-in and custom step constructors by name
    - create_default_registry: Registry seeded with the built-in steps
"""

from hook_pipeline.registry.step_registry import (
    StepRegistry,
    StepRegistryProtocol,
    create_default_registry,
)

__all__ = [
    "StepRegistry",
    "StepRegistryProtocol",
    "create_default_registry",
]

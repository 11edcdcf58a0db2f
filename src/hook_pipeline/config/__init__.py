"""
Configuration Package - Models and Loaders.

Configuration Structure:
    - HooksConfig: Root object (version, stage -> step entries)
    - StepOptions: Engine fields of one entry, the rest is passed through
    - ParallelMember: Entry of a parallel group, names its step

Design Principles:
    - Type-safe via Pydantic
    - Entries validated one by one at build time
    - Overlay files deep-merged over a base configuration
"""

from hook_pipeline.config.loader import ConfigLoader, load_config, merge_configs
from hook_pipeline.config.models import (
    PARALLEL_KEY,
    HooksConfig,
    ParallelMember,
    StepOptions,
)

__all__ = [
    "PARALLEL_KEY",
    "ConfigLoader",
    "HooksConfig",
    "ParallelMember",
    "StepOptions",
    "load_config",
    "merge_configs",
]

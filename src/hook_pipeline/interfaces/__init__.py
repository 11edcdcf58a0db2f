"""
Interfaces Package - Step Contract.

Protocols describing what the engine needs from collaborators:
    - StepConstructor: options -> step
    - Step: context -> context (sync or async)
    - HookHost: handle pipelines can be installed on
"""

from hook_pipeline.interfaces.step import (
    AsyncStep,
    HookHost,
    Step,
    StepConstructor,
    invoke_step,
)

__all__ = ["AsyncStep", "HookHost", "Step", "StepConstructor", "invoke_step"]

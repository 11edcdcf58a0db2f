"""
Built-in Steps Package.
"""

from hook_pipeline.steps.builtin import BUILTIN_STEPS

__all__ = ["BUILTIN_STEPS"]

"""
Configuration Models - Pydantic Models for Hook Definitions.

A hook configuration maps each stage to its step entries:

    hooks:
      before:
        readJson: {}
        transform:
          hook: apply
          match: { type: Feature }
          faultTolerant: true
          dataPath: result.data
        parallel:
          - hook: writeMongoCollection
            collection: features
          - hook: writeJson

Engine fields are `hook`, `match` and `faultTolerant`; any other field
is passed unchanged to the step constructor. Stage maps are kept raw on
the root model and validated entry by entry by the builder, so one bad
entry never invalidates the whole configuration.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

PARALLEL_KEY = "parallel"


class StepOptions(BaseModel):
    """Options of a single step entry."""

    hook: Optional[str] = Field(default=None, description="Override step name")
    match: Optional[Dict[str, Any]] = Field(
        default=None, description="Predicate filter layered over the default"
    )
    fault_tolerant: bool = Field(default=False, alias="faultTolerant")

    model_config = {"extra": "allow", "populate_by_name": True}

    @classmethod
    def from_entry(cls, value: Any) -> "StepOptions":
        """
        Build options from a raw configuration value.

        A string, None or True is shorthand for default options.

        Raises:
            ValidationError: If value is not a valid options mapping
        """
        if value is None or value is True or isinstance(value, str):
            value = {}
        return cls.model_validate(value)

    def step_options(self) -> Dict[str, Any]:
        """Options handed to the step constructor (engine fields removed)."""
        return dict(self.model_extra or {})


class ParallelMember(StepOptions):
    """A parallel group member, which must name its step."""

    hook: str = Field(..., min_length=1, description="Step name")


class HooksConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    hooks: Dict[str, Any] = Field(default_factory=dict)

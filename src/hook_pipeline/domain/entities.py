"""
Core Domain Entities.

This module defines the records the hook pipeline operates on: the
lifecycle stage marker and the per-item context threaded through a
stage's pipeline.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

SKIP_FIELD = "skip"


class Stage(str, Enum):
    """Lifecycle point at which a pipeline runs."""

    BEFORE = "before"
    AFTER = "after"


@dataclass
class HookContext:
    """
    Mutable record threaded through one pipeline invocation.

    One context is created per processed item by the caller, mutated in
    place by each step and discarded once the stage completes. It must
    never be shared between unrelated invocations.

    Attributes:
        type: Stage marker ("before" or "after")
        data: Input data of the underlying operation
        result: Result container, the produced item lives under "data"
        params: Free-form parameters
        method: Operation kind the context belongs to
    """

    type: str = Stage.BEFORE.value
    data: Any = None
    result: Dict[str, Any] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    method: str = "create"

    def __post_init__(self) -> None:
        if isinstance(self.type, Stage):
            self.type = self.type.value

    @property
    def stage(self) -> Stage:
        return Stage(self.type)

    def get_item(self) -> Optional[Any]:
        """
        Return the item steps of the current stage operate on.

        Before the operation this is the input data, after it the result
        data. None is returned when nothing can be extracted.
        """
        if self.type == Stage.BEFORE.value:
            return self.data
        if self.type == Stage.AFTER.value and isinstance(self.result, dict):
            return self.result.get("data")
        return None

    def is_skipped(self) -> bool:
        """True when the current item carries a truthy skip marker."""
        item = self.get_item()
        return isinstance(item, dict) and bool(item.get(SKIP_FIELD))

    def snapshot(self) -> Dict[str, Tuple[Any, Any]]:
        """
        Capture field values so they can be put back with restore().

        Returns:
            Field name -> (original object, copy of its content)
        """
        state = {f.name: getattr(self, f.name) for f in fields(self)}
        try:
            saved = copy.deepcopy(state)
        except (TypeError, copy.Error) as e:
            # Live handles (clients, sockets) cannot be deep-copied
            logger.debug(f"Falling back to shallow context snapshot: {e}")
            saved = {name: copy.copy(value) for name, value in state.items()}
        return {name: (state[name], saved[name]) for name in state}

    def restore(self, state: Dict[str, Tuple[Any, Any]]) -> None:
        """
        Put back field values captured by snapshot().

        Dict fields get their original object back, refilled in place;
        objects assigned to a field after the snapshot are left untouched.
        """
        for name, (original, saved) in state.items():
            if isinstance(original, dict) and isinstance(saved, dict):
                original.clear()
                original.update(saved)
                setattr(self, name, original)
            else:
                setattr(self, name, saved)

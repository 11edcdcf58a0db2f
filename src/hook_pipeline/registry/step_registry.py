"""
Step Registry - Named Step Constructor Lookup.

This module provides the capability table the pipeline builder resolves
step names against. Built-in constructors are supplied when the registry
is created and always win over custom registrations of the same name.

Usage:
    registry = StepRegistry(builtins={"skip": skip})
    registry.register("writeJson", write_json)

    ctor = registry.lookup("writeJson")
    step = ctor({"dataPath": "result.data"})

Design Notes:
    - The registry is an explicit object handed to the builder, not a
      module-level singleton
    - Individual operations are guarded by a lock, but nothing stops a
      registration from racing an in-flight build; callers must not
      mutate the registry while building
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Dict, List, Mapping, Optional, Protocol

from hook_pipeline.interfaces.step import StepConstructor
from hook_pipeline.steps.builtin import BUILTIN_STEPS

logger = logging.getLogger(__name__)


class StepRegistryProtocol(Protocol):
    """Protocol for step registry implementations."""

    def register(self, name: str, constructor: StepConstructor) -> None:
        """Bind a name to a step constructor."""
        ...

    def unregister(self, name: str) -> None:
        """Remove a custom binding."""
        ...

    def lookup(self, name: str) -> Optional[StepConstructor]:
        """Resolve a name to a constructor, or None."""
        ...


class StepRegistry:
    """
    Registry mapping step names to step constructors.

    Supports:
        - A fixed set of built-in constructors
        - Custom registration and removal at any time
        - Resolution with built-ins taking precedence
    """

    def __init__(
        self, builtins: Optional[Mapping[str, StepConstructor]] = None
    ) -> None:
        """
        Initialize registry.

        Args:
            builtins: Constructors known at process start
        """
        self._builtins: Dict[str, StepConstructor] = dict(builtins or {})
        self._custom: Dict[str, StepConstructor] = {}
        self._lock = RLock()
        logger.debug(
            f"StepRegistry initialized with {len(self._builtins)} built-in steps"
        )

    def register(self, name: str, constructor: StepConstructor) -> None:
        """
        Register a custom step constructor.

        Registering an existing name overwrites the previous binding.

        Args:
            name: Step name used in configurations
            constructor: Callable receiving options, returning a step

        Raises:
            TypeError: If constructor is not callable
        """
        if not callable(constructor):
            raise TypeError(f"Step constructor for '{name}' must be callable")

        with self._lock:
            if name in self._custom:
                logger.debug(f"Overwriting step registration: {name}")
            self._custom[name] = constructor
            if name in self._builtins:
                logger.warning(
                    f"Step '{name}' is shadowed by a built-in step and will not "
                    f"be resolved"
                )
            logger.info(f"Registered step: {name}")

    def unregister(self, name: str) -> None:
        """
        Remove a custom step binding. Unknown names are ignored.

        Args:
            name: Step name to remove
        """
        with self._lock:
            if self._custom.pop(name, None) is not None:
                logger.info(f"Unregistered step: {name}")

    def lookup(self, name: str) -> Optional[StepConstructor]:
        """
        Resolve a step name, built-ins first then custom registrations.

        Args:
            name: Step name

        Returns:
            Bound constructor or None if the name is unknown
        """
        with self._lock:
            constructor = self._builtins.get(name)
            if constructor is None:
                constructor = self._custom.get(name)
            return constructor

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def list_names(self) -> List[str]:
        """List all resolvable step names."""
        with self._lock:
            names = list(self._builtins)
            names.extend(n for n in self._custom if n not in self._builtins)
            return names

    @property
    def builtin_names(self) -> List[str]:
        with self._lock:
            return list(self._builtins)

    @property
    def registered_count(self) -> int:
        """Number of custom registrations."""
        with self._lock:
            return len(self._custom)

    def clear(self) -> None:
        """Remove all custom registrations, built-ins are kept."""
        with self._lock:
            self._custom.clear()
            logger.info("Cleared custom steps from registry")


def create_default_registry() -> StepRegistry:
    """Create a registry seeded with the built-in steps."""
    return StepRegistry(builtins=BUILTIN_STEPS)

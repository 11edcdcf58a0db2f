"""
Predicate Matcher - Conditional Step Execution.

Builds the guard deciding whether a step runs for a given context. The
guard extracts the current item from the context, resolves the filter's
item references and evaluates it as a document query.

Every filter is layered over a default that skips items carrying a
truthy skip marker, so any step can stop the rest of a chain by setting
it. An override replaces default clauses on the same field path only.

Usage:
    matcher = PredicateMatcher()
    should_run = matcher.build_predicate("writeJson", {"a": "$b"})
    if should_run(context):
        ...
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from hook_pipeline.domain.entities import SKIP_FIELD, HookContext
from hook_pipeline.matching.query import matches, validate_query
from hook_pipeline.matching.templating import template_query

logger = logging.getLogger(__name__)

# Absent or falsy markers count as "not skipped"
DEFAULT_FILTER: Dict[str, Any] = {SKIP_FIELD: {"$truthy": False}}

Predicate = Callable[[HookContext], bool]


class PredicateMatcher:
    """Builds per-step execution guards from filter documents."""

    def __init__(self, default_filter: Optional[Mapping[str, Any]] = None) -> None:
        """
        Initialize matcher.

        Args:
            default_filter: Filter every guard starts from
        """
        self._default_filter = copy.deepcopy(
            dict(default_filter) if default_filter is not None else DEFAULT_FILTER
        )
        validate_query(self._default_filter)

    @property
    def default_filter(self) -> Dict[str, Any]:
        return copy.deepcopy(self._default_filter)

    def merge_filter(
        self, filter_override: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Layer an override on top of the default filter.

        Args:
            filter_override: Field path -> condition, wins per path

        Returns:
            New merged filter document
        """
        merged = copy.deepcopy(self._default_filter)
        if filter_override:
            merged.update(copy.deepcopy(dict(filter_override)))
        return merged

    def build_predicate(
        self,
        step_name: str,
        filter_override: Optional[Mapping[str, Any]] = None,
    ) -> Predicate:
        """
        Build the guard for a step.

        Args:
            step_name: Step name, used for diagnostics
            filter_override: Optional custom filter

        Returns:
            Function telling whether the step should run for a context

        Raises:
            QuerySyntaxError: If the merged filter is malformed
        """
        query = self.merge_filter(filter_override)
        validate_query(query)

        def should_run(context: HookContext) -> bool:
            item = context.get_item()
            if not isinstance(item, Mapping):
                logger.debug(
                    f"Skipping step {step_name}: no item to match in "
                    f"{context.type} context"
                )
                return False

            resolved = template_query(item, query)
            execute = matches(resolved, item)
            if execute:
                logger.debug(f"Executing step {step_name} not filtered by {resolved}")
            else:
                logger.debug(f"Skipping step {step_name} due to filter {resolved}")
            return execute

        return should_run

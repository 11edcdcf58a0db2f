"""
Built-in Steps.

Generic item manipulation steps available in every default registry.
They operate on the current item of the context (input data before the
operation, result data after it).

Steps:
    - skip: mark the item so later steps are filtered out
    - set: assign values on item paths; values may reference the item
    - unset: remove item paths
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from hook_pipeline.domain.entities import SKIP_FIELD, HookContext
from hook_pipeline.interfaces.step import Step
from hook_pipeline.matching.paths import set_path, unset_path
from hook_pipeline.matching.templating import template_query

logger = logging.getLogger(__name__)


def _current_item(context: HookContext, step_name: str) -> Dict[str, Any]:
    item = context.get_item()
    if not isinstance(item, dict):
        raise TypeError(
            f"The '{step_name}' hook needs a mapping item in the {context.type} "
            f"context, got {type(item).__name__}"
        )
    return item


def skip(options: Dict[str, Any]) -> Step:
    """
    Mark the current item as skipped.

    Options:
        value: Marker value to store (default True)
    """
    marker = options.get("value", True)

    def run(context: HookContext) -> HookContext:
        item = _current_item(context, "skip")
        item[SKIP_FIELD] = marker
        logger.debug(f"Marked {context.type} item as skipped")
        return context

    return run


def set_values(options: Dict[str, Any]) -> Step:
    """
    Assign values on the current item.

    Options:
        values: Mapping of dotted path -> value; string values may use
            "$field" references or "<%= field %>" placeholders
    """
    values = options.get("values") or {}
    if not isinstance(values, dict):
        raise ValueError("The 'set' hook expects a 'values' mapping")

    def run(context: HookContext) -> HookContext:
        item = _current_item(context, "set")
        for path, value in template_query(item, values).items():
            set_path(item, path, value)
        return context

    return run


def unset(options: Dict[str, Any]) -> Step:
    """
    Remove paths from the current item.

    Options:
        paths: List of dotted paths (a single string is accepted)
    """
    paths = options.get("paths") or []
    if isinstance(paths, str):
        paths = [paths]
    if not isinstance(paths, list):
        raise ValueError("The 'unset' hook expects a 'paths' list")
    paths = list(paths)

    def run(context: HookContext) -> HookContext:
        item = _current_item(context, "unset")
        for path in paths:
            unset_path(item, path)
        return context

    return run


BUILTIN_STEPS = {
    "skip": skip,
    "set": set_values,
    "unset": unset,
}

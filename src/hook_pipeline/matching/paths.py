"""
Dotted Path Helpers.

Read and write nested item fields addressed as "a.b.0.c". Mapping keys
and list indices are both supported.
"""

from __future__ import annotations

from typing import Any, List, Mapping, MutableMapping, Tuple

_ABSENT = object()


def split_path(path: str) -> List[str]:
    return [part for part in path.split(".") if part != ""]


def get_path(document: Any, path: str) -> Tuple[bool, Any]:
    """
    Look up a dotted path.

    Returns:
        Tuple of (found, value); value is None when not found
    """
    current = document
    for part in split_path(path):
        if isinstance(current, Mapping):
            if part not in current:
                return False, None
            current = current[part]
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return False, None
            current = current[index]
        else:
            return False, None
    return True, current


def set_path(document: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Set a dotted path, creating intermediate mappings as needed."""
    parts = split_path(path)
    if not parts:
        raise ValueError("Cannot set an empty path")
    current: Any = document
    for part in parts[:-1]:
        if isinstance(current, list) and part.isdigit():
            current = current[int(part)]
            continue
        nested = current.get(part)
        if not isinstance(nested, (dict, list)):
            nested = {}
            current[part] = nested
        current = nested
    last = parts[-1]
    if isinstance(current, list) and last.isdigit():
        current[int(last)] = value
    else:
        current[last] = value


def unset_path(document: MutableMapping[str, Any], path: str) -> bool:
    """
    Remove a dotted path.

    Returns:
        True if something was removed
    """
    parts = split_path(path)
    if not parts:
        return False
    found, parent = get_path(document, ".".join(parts[:-1]))
    if not found or not isinstance(parent, dict):
        return False
    return parent.pop(parts[-1], _ABSENT) is not _ABSENT

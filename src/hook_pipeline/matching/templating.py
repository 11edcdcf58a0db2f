"""
Query Templating - Resolve Item References Inside Filters.

Filter values may refer to other fields of the item being tested, which
makes self-referential conditions possible:

    {"a": "$b"}                 -> {"a": <value of item.b>}
    {"name": {"$regex": "^<%= prefix %>-"}}
                                -> {"name": {"$regex": "^<value of item.prefix>-"}}

A whole-string reference keeps the referenced value's type. Embedded
placeholders are interpolated as text. References to fields the item
does not have are left untouched.
"""

from __future__ import annotations

import re
from typing import Any

from hook_pipeline.matching.paths import get_path

_REFERENCE = re.compile(r"^\$([A-Za-z_][\w\-]*(?:\.[\w\-]+)*)$")
_PLACEHOLDER = re.compile(r"<%=\s*([\w\-.]+)\s*%>")


def template_query(item: Any, query: Any) -> Any:
    """
    Return a copy of query with item references substituted.

    Args:
        item: Item whose fields are referenced
        query: Query document (or any nested value of it)

    Returns:
        Resolved copy, the input query is never modified
    """
    if isinstance(query, dict):
        return {key: template_query(item, value) for key, value in query.items()}
    if isinstance(query, list):
        return [template_query(item, value) for value in query]
    if isinstance(query, str):
        return _template_string(item, query)
    return query


def is_template(value: Any) -> bool:
    """True for a "$path" reference or a string holding placeholders."""
    return isinstance(value, str) and (
        _REFERENCE.match(value) is not None or _PLACEHOLDER.search(value) is not None
    )


def _template_string(item: Any, value: str) -> Any:
    reference = _REFERENCE.match(value)
    if reference:
        found, resolved = get_path(item, reference.group(1))
        return resolved if found else value

    if "<%=" not in value:
        return value

    def _substitute(placeholder: "re.Match[str]") -> str:
        found, resolved = get_path(item, placeholder.group(1))
        return "" if not found or resolved is None else str(resolved)

    return _PLACEHOLDER.sub(_substitute, value)

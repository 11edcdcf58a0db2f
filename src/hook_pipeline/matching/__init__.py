"""
Matching Package - Conditional Step Execution.

Components:
    - query: Document query interpreter (matches, validate_query)
    - templating: Item references inside filters
    - PredicateMatcher: Builds per-step guards over the default filter
"""

from hook_pipeline.matching.predicate import DEFAULT_FILTER, PredicateMatcher
from hook_pipeline.matching.query import matches, validate_query
from hook_pipeline.matching.templating import template_query

__all__ = [
    "DEFAULT_FILTER",
    "PredicateMatcher",
    "matches",
    "template_query",
    "validate_query",
]

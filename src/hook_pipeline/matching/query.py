"""
Document Query Interpreter.

A small interpreter for MongoDB-style query documents evaluated against
a single in-memory item. A query maps dotted field paths to conditions;
a condition is either a literal (implicit equality) or an operator
document such as {"$gte": 3, "$lt": 10}.

Supported operators:
    - Comparison: $eq, $ne, $gt, $gte, $lt, $lte
    - Membership: $in, $nin, $all, $size, $elemMatch
    - Element: $exists, $truthy
    - Evaluation: $regex (with $options)
    - Logical: $not, $and, $or, $nor

Design Notes:
    - A missing field compares equal to None, so {"f": {"$in": [None]}}
      matches items without "f"
    - When a field holds a list, equality and comparison operators match
      if the list itself or any of its elements matches
    - $truthy tests the whole field value with bool(); a missing field
      is falsy
    - Unknown operators raise QuerySyntaxError
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterator, List, Mapping

from hook_pipeline.matching.paths import split_path
from hook_pipeline.matching.templating import is_template
from hook_pipeline.resilience.errors import QuerySyntaxError

_MISSING = object()

LOGICAL_OPERATORS = ("$and", "$or", "$nor")

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def matches(query: Mapping[str, Any], document: Any) -> bool:
    """
    Evaluate a query document against an item.

    Args:
        query: Query document
        document: Item to test

    Returns:
        True if the item satisfies every clause of the query

    Raises:
        QuerySyntaxError: If the query is malformed
    """
    if not isinstance(query, Mapping):
        raise QuerySyntaxError(f"Query must be a mapping, got {type(query).__name__}")

    for key, condition in query.items():
        _check_key(key)
        if key in LOGICAL_OPERATORS:
            if not _match_logical(key, condition, document):
                return False
        elif key.startswith("$"):
            raise QuerySyntaxError(f"Unknown top-level operator: {key}")
        elif not _match_condition(_field_values(document, split_path(key)), condition):
            return False
    return True


def validate_query(query: Any) -> None:
    """
    Check a query for unknown operators without evaluating it.

    Raises:
        QuerySyntaxError: If the query is malformed
    """
    if not isinstance(query, Mapping):
        raise QuerySyntaxError(f"Query must be a mapping, got {type(query).__name__}")
    for key, condition in query.items():
        _check_key(key)
        if key in LOGICAL_OPERATORS:
            for clause in _logical_clauses(key, condition):
                validate_query(clause)
        elif key.startswith("$"):
            raise QuerySyntaxError(f"Unknown top-level operator: {key}")
        else:
            _validate_condition(condition)


def _validate_condition(condition: Any) -> None:
    if not _is_operator_document(condition):
        return
    for operator, operand in condition.items():
        if operator == "$options":
            continue
        if operator not in _OPERATORS:
            raise QuerySyntaxError(f"Unknown operator: {operator}")
        if operator in ("$in", "$nin", "$all") and not (
            isinstance(operand, list) or is_template(operand)
        ):
            raise QuerySyntaxError(f"{operator} expects a list, got {operand!r}")
        if operator == "$not":
            _validate_condition(operand)
        elif operator == "$elemMatch" and isinstance(operand, Mapping):
            if _is_operator_document(operand):
                _validate_condition(operand)
            else:
                validate_query(operand)


def _check_key(key: Any) -> None:
    if not isinstance(key, str):
        raise QuerySyntaxError(
            f"Query keys must be strings, got {type(key).__name__} {key!r}"
        )


def _logical_clauses(operator: str, condition: Any) -> List[Mapping[str, Any]]:
    if not isinstance(condition, list) or not condition:
        raise QuerySyntaxError(f"{operator} expects a non-empty list of queries")
    return condition


def _match_logical(operator: str, condition: Any, document: Any) -> bool:
    results = (matches(clause, document) for clause in _logical_clauses(operator, condition))
    if operator == "$and":
        return all(results)
    if operator == "$or":
        return any(results)
    return not any(results)


def _is_operator_document(condition: Any) -> bool:
    return (
        isinstance(condition, Mapping)
        and len(condition) > 0
        and all(isinstance(k, str) and k.startswith("$") for k in condition)
    )


def _field_values(document: Any, parts: List[str]) -> List[Any]:
    """Collect every value a path reaches, descending through lists."""
    if not parts:
        return [document]
    head, rest = parts[0], parts[1:]
    if isinstance(document, Mapping):
        if head not in document:
            return [_MISSING]
        return _field_values(document[head], rest)
    if isinstance(document, list):
        if head.isdigit():
            index = int(head)
            if index >= len(document):
                return [_MISSING]
            return _field_values(document[index], rest)
        values: List[Any] = []
        for element in document:
            if isinstance(element, (Mapping, list)):
                values.extend(
                    v for v in _field_values(element, parts) if v is not _MISSING
                )
        return values or [_MISSING]
    return [_MISSING]


def _expand(values: List[Any]) -> Iterator[Any]:
    for value in values:
        yield value
        if isinstance(value, list):
            yield from value


def _equals(value: Any, operand: Any) -> bool:
    if value is _MISSING:
        return operand is None
    if isinstance(operand, re.Pattern):
        return isinstance(value, str) and operand.search(value) is not None
    return value == operand


def _compare(values: List[Any], operand: Any, test: Callable[[Any, Any], bool]) -> bool:
    for value in _expand(values):
        if value is _MISSING or value is None or isinstance(value, list):
            continue
        try:
            if test(value, operand):
                return True
        except TypeError:
            continue
    return False


def _match_condition(values: List[Any], condition: Any) -> bool:
    if not _is_operator_document(condition):
        return _op_eq(values, condition, {})
    for operator, operand in condition.items():
        if operator == "$options":
            continue
        handler = _OPERATORS.get(operator)
        if handler is None:
            raise QuerySyntaxError(f"Unknown operator: {operator}")
        if not handler(values, operand, condition):
            return False
    return True


def _op_eq(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    return any(_equals(v, operand) for v in _expand(values))


def _op_ne(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    return not _op_eq(values, operand, condition)


def _op_in(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    if not isinstance(operand, list):
        raise QuerySyntaxError(f"$in expects a list, got {operand!r}")
    return any(_equals(v, o) for v in _expand(values) for o in operand)


def _op_nin(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    return not _op_in(values, operand, condition)


def _op_exists(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    present = any(v is not _MISSING for v in values)
    return present == bool(operand)


def _op_truthy(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    # Whole values are tested, list elements are not expanded
    truthy = any(v is not _MISSING and bool(v) for v in values)
    return truthy == bool(operand)


def _op_regex(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    flags = 0
    for letter in str(condition.get("$options", "")):
        if letter not in _REGEX_FLAGS:
            raise QuerySyntaxError(f"Unknown $regex option: {letter}")
        flags |= _REGEX_FLAGS[letter]
    try:
        pattern = operand if isinstance(operand, re.Pattern) else re.compile(operand, flags)
    except (re.error, TypeError) as e:
        raise QuerySyntaxError(f"Invalid $regex {operand!r}: {e}") from e
    return any(
        isinstance(v, str) and pattern.search(v) is not None for v in _expand(values)
    )


def _op_size(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    return any(isinstance(v, list) and len(v) == operand for v in values)


def _op_all(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    if not isinstance(operand, list):
        raise QuerySyntaxError(f"$all expects a list, got {operand!r}")
    for value in values:
        if isinstance(value, list) and all(
            any(_equals(element, o) for element in value) for o in operand
        ):
            return True
    return False


def _op_elem_match(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    if not isinstance(operand, Mapping):
        raise QuerySyntaxError(f"$elemMatch expects a mapping, got {operand!r}")
    for value in values:
        if not isinstance(value, list):
            continue
        for element in value:
            if _is_operator_document(operand):
                if _match_condition([element], operand):
                    return True
            elif isinstance(element, Mapping) and matches(operand, element):
                return True
    return False


def _op_not(values: List[Any], operand: Any, condition: Mapping[str, Any]) -> bool:
    return not _match_condition(values, operand)


_OPERATORS: Dict[str, Callable[[List[Any], Any, Mapping[str, Any]], bool]] = {
    "$eq": _op_eq,
    "$ne": _op_ne,
    "$gt": lambda values, operand, _: _compare(values, operand, lambda a, b: a > b),
    "$gte": lambda values, operand, _: _compare(values, operand, lambda a, b: a >= b),
    "$lt": lambda values, operand, _: _compare(values, operand, lambda a, b: a < b),
    "$lte": lambda values, operand, _: _compare(values, operand, lambda a, b: a <= b),
    "$in": _op_in,
    "$nin": _op_nin,
    "$exists": _op_exists,
    "$truthy": _op_truthy,
    "$regex": _op_regex,
    "$size": _op_size,
    "$all": _op_all,
    "$elemMatch": _op_elem_match,
    "$not": _op_not,
}

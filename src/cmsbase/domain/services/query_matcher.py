"""Matching of Mongo-style filter documents against stored documents."""

import json
import re
from typing import Any, Mapping

_MISSING = object()

_COMPARISONS = {"$gt", "$gte", "$lt", "$lte"}


class QueryError(ValueError):
    """Raised for filters that cannot be parsed or evaluated."""


def parse_query(raw: str | None) -> dict[str, Any]:
    """Parse a JSON filter from a query string. Empty input matches everything."""
    if raw is None or not raw.strip():
        return {}
    try:
        query = json.loads(raw)
    except json.JSONDecodeError as e:
        raise QueryError(f"Invalid JSON filter: {e.msg}") from e
    if not isinstance(query, dict):
        raise QueryError("Filter must be a JSON object")
    return query


def _resolve_path(document: Mapping[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if isinstance(value, dict):
            if part not in value:
                return _MISSING
            value = value[part]
        elif isinstance(value, list) and part.isdigit():
            index = int(part)
            if index >= len(value):
                return _MISSING
            value = value[index]
        else:
            return _MISSING
    return value


def _equals(actual: Any, expected: Any) -> bool:
    if actual is _MISSING:
        return expected is None
    if isinstance(actual, list) and not isinstance(expected, list):
        return expected in actual
    return actual == expected


def _compare(actual: Any, op: str, expected: Any) -> bool:
    if actual is _MISSING or actual is None:
        return False
    candidates = actual if isinstance(actual, list) else [actual]
    for candidate in candidates:
        try:
            if op == "$gt" and candidate > expected:
                return True
            if op == "$gte" and candidate >= expected:
                return True
            if op == "$lt" and candidate < expected:
                return True
            if op == "$lte" and candidate <= expected:
                return True
        except TypeError:
            continue
    return False


def _match_operators(actual: Any, operators: Mapping[str, Any]) -> bool:
    for op, operand in operators.items():
        if op == "$eq":
            if not _equals(actual, operand):
                return False
        elif op == "$ne":
            if _equals(actual, operand):
                return False
        elif op in _COMPARISONS:
            if not _compare(actual, op, operand):
                return False
        elif op in ("$in", "$nin"):
            if not isinstance(operand, list):
                raise QueryError(f"{op} expects an array")
            hit = any(_equals(actual, item) for item in operand)
            if hit != (op == "$in"):
                return False
        elif op == "$exists":
            if (actual is not _MISSING) != bool(operand):
                return False
        elif op == "$regex":
            if not isinstance(operand, str):
                raise QueryError("$regex expects a string")
            try:
                pattern = re.compile(operand, re.IGNORECASE if "i" in operators.get("$options", "") else 0)
            except re.error as e:
                raise QueryError(f"Invalid $regex: {e}") from e
            values = actual if isinstance(actual, list) else [actual]
            if not any(isinstance(v, str) and pattern.search(v) for v in values):
                return False
        elif op == "$options":
            continue
        else:
            raise QueryError(f"Unsupported operator '{op}'")
    return True


def matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """Evaluate ``query`` against a document in wire shape (``_id`` included).

    Raises:
        QueryError: On unsupported operators or malformed operands.
    """
    for key, condition in query.items():
        if key in ("$and", "$or", "$nor"):
            if not isinstance(condition, list) or not all(isinstance(c, dict) for c in condition):
                raise QueryError(f"{key} expects an array of filters")
            results = [matches(document, sub) for sub in condition]
            if key == "$and" and not all(results):
                return False
            if key == "$or" and not any(results):
                return False
            if key == "$nor" and any(results):
                return False
            continue
        if key.startswith("$"):
            raise QueryError(f"Unsupported operator '{key}'")

        actual = _resolve_path(document, key)
        if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
            if not _match_operators(actual, condition):
                return False
        elif not _equals(actual, condition):
            return False
    return True

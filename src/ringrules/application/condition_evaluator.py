"""Condition evaluation against event payloads.

Pure functions: no I/O, no shared state. A malformed condition never
raises; it fails closed and is logged as an evaluation anomaly.

Missing-field policy: a field that does not resolve, or resolves to
``None``, is "missing". ``notEquals`` treats missing as a match (the field
is trivially not equal to anything); every other operator, ``exists``
included, treats it as no match.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

import structlog

from ringrules.core.domain.rule import Condition, ConditionOperator

logger = structlog.get_logger(__name__)

MISSING = object()


def resolve_path(payload: dict[str, Any], path: str) -> Any:
    """Follow a dot path through nested maps.

    Returns the ``MISSING`` sentinel when any segment is
    absent or the walk reaches a non-map.
    """
    current: Any = payload
    for key in path.split("."):
        if not isinstance(current, dict) or key not in current:
            return MISSING
        current = current[key]
    return current


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _equals(actual: Any, expected: Any) -> bool:
    left, right = _as_number(actual), _as_number(expected)
    if left is not None and right is not None:
        return left == right
    return _as_text(actual) == _as_text(expected)


def _members(expected: Any) -> set[str]:
    if isinstance(expected, (list, tuple, set)):
        items: Iterable[Any] = expected
    else:
        items = str(expected if expected is not None else "").split(",")
    return {_as_text(item).strip() for item in items if _as_text(item).strip()}


def _anomaly(condition: Condition, reason: str) -> bool:
    logger.warning(
        "condition_evaluator.anomaly",
        field=condition.field,
        operator=condition.operator,
        reason=reason,
    )
    return False


def evaluate_condition(condition: Condition, payload: dict[str, Any]) -> bool:
    """Evaluate one condition against ``payload``."""
    if not isinstance(condition.field, str) or not condition.field.strip():
        return _anomaly(condition, "blank_field")
    try:
        operator = ConditionOperator(condition.operator)
    except ValueError:
        return _anomaly(condition, "unknown_operator")

    actual = resolve_path(payload, condition.field.strip())
    if actual is MISSING or actual is None:
        return operator == ConditionOperator.NOT_EQUALS

    expected = condition.value

    if operator == ConditionOperator.EXISTS:
        return True
    if operator == ConditionOperator.EQUALS:
        return _equals(actual, expected)
    if operator == ConditionOperator.NOT_EQUALS:
        return not _equals(actual, expected)
    if operator == ConditionOperator.CONTAINS:
        if expected is None:
            return False
        return _as_text(expected).lower() in _as_text(actual).lower()
    if operator in (ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN):
        left, right = _as_number(actual), _as_number(expected)
        if left is None or right is None:
            return False
        return left > right if operator == ConditionOperator.GREATER_THAN else left < right
    if operator == ConditionOperator.IN:
        return _as_text(actual).strip() in _members(expected)

    return _anomaly(condition, "unhandled_operator")


def evaluate(conditions: Iterable[Condition], payload: dict[str, Any]) -> bool:
    """AND-combine ``conditions``; an empty set always matches."""
    return all(evaluate_condition(condition, payload) for condition in conditions)

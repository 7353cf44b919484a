"""Comparison operators shared by conditional logic and email rules."""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, Callable, Dict, Optional

__all__ = ["Operator", "evaluate", "to_number", "is_empty", "strict_equals"]


class Operator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"

    @classmethod
    def parse(cls, name: Any) -> Optional["Operator"]:
        """Return the operator for ``name`` (snake or camel case), else ``None``."""
        if isinstance(name, Operator):
            return name
        if not isinstance(name, str):
            return None
        return _ALIASES.get(name.strip().replace("-", "_").lower())


_ALIASES: Dict[str, Operator] = {}
for _op in Operator:
    _ALIASES[_op.value] = _op
    _ALIASES[_op.value.replace("_", "")] = _op  # notEquals -> notequals


_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def to_number(value: Any) -> float:
    """Coerce ``value`` the way JavaScript's ``Number()`` does.

    Blank strings are ``0``; anything that is not a plain decimal literal
    becomes ``nan``.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return 0.0
        if _NUMBER_RE.match(text):
            return float(text)
        return math.nan
    return math.nan


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def strict_equals(actual: Any, expected: Any) -> bool:
    """``===`` semantics: no coercion between strings, numbers and booleans."""
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual is expected
    if isinstance(actual, (int, float)) and isinstance(expected, (int, float)):
        return actual == expected
    if isinstance(actual, (list, dict)) or isinstance(expected, (list, dict)):
        return actual is expected
    return type(actual) is type(expected) and actual == expected


def _contains(actual: Any, expected: Any) -> bool:
    return isinstance(actual, str) and str(expected) in actual


def _not_contains(actual: Any, expected: Any) -> bool:
    return isinstance(actual, str) and str(expected) not in actual


def _greater_than(actual: Any, expected: Any) -> bool:
    # nan compares False either way
    return to_number(actual) > to_number(expected)


def _less_than(actual: Any, expected: Any) -> bool:
    return to_number(actual) < to_number(expected)


_EVALUATORS: Dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQUALS: strict_equals,
    Operator.NOT_EQUALS: lambda a, e: not strict_equals(a, e),
    Operator.CONTAINS: _contains,
    Operator.NOT_CONTAINS: _not_contains,
    Operator.GREATER_THAN: _greater_than,
    Operator.LESS_THAN: _less_than,
    Operator.IS_EMPTY: lambda a, e: is_empty(a),
    Operator.IS_NOT_EMPTY: lambda a, e: not is_empty(a),
}


def evaluate(operator: Any, actual: Any, expected: Any) -> bool:
    """Return whether ``actual <operator> expected`` holds.

    Unknown operators and failed coercions evaluate to ``False``.
    """
    op = Operator.parse(operator)
    if op is None:
        return False
    return _EVALUATORS[op](actual, expected)

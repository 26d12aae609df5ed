"""
Comparison operators for condition nodes.

The registry maps an operator name to a binary predicate over two resolved
values. It starts with the built-in operators and accepts new ones at
runtime; each run works on its own copy.
"""

import logging
import numbers
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional

from flowrunner.flow_engine.paths import is_absent

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, Any], bool]


class ComparisonOperator(str, Enum):
    """Built-in comparison operators"""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_OR_EQUALS = "greater_or_equals"
    LESS_OR_EQUALS = "less_or_equals"
    CONTAINS = "contains"


def strict_equals(a: Any, b: Any) -> bool:
    """
    Equality without cross-type coercion.

    Numbers compare by value (1 == 1.0) but booleans never equal numbers and
    strings never equal numbers.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    return a == b


def _ordered(compare: Predicate) -> Predicate:
    """Wrap an ordering so it returns False unless both operands are orderable."""
    def predicate(a: Any, b: Any) -> bool:
        if is_absent(a) or is_absent(b):
            return False
        try:
            return bool(compare(a, b))
        except TypeError:
            return False
    return predicate


def contains(a: Any, b: Any) -> bool:
    """Substring test; False when the left value is not a string."""
    if not isinstance(a, str):
        return False
    if isinstance(b, numbers.Number) and not isinstance(b, bool):
        b = str(b)
    if not isinstance(b, str):
        return False
    return b in a


DEFAULT_OPERATORS: Dict[str, Predicate] = {
    ComparisonOperator.EQUALS.value: strict_equals,
    ComparisonOperator.NOT_EQUALS.value: lambda a, b: not strict_equals(a, b),
    ComparisonOperator.GREATER_THAN.value: _ordered(lambda a, b: a > b),
    ComparisonOperator.LESS_THAN.value: _ordered(lambda a, b: a < b),
    ComparisonOperator.GREATER_OR_EQUALS.value: _ordered(lambda a, b: a >= b),
    ComparisonOperator.LESS_OR_EQUALS.value: _ordered(lambda a, b: a <= b),
    ComparisonOperator.CONTAINS.value: contains,
}


class OperatorRegistry:
    """
    Named comparison predicates.

    Usage:
        registry = OperatorRegistry()
        registry.register('starts_with', lambda a, b: str(a).startswith(str(b)))
        snapshot = registry.copy()
    """

    def __init__(self, operators: Optional[Dict[str, Predicate]] = None):
        self._operators: Dict[str, Predicate] = dict(DEFAULT_OPERATORS)
        if operators:
            for name, fn in operators.items():
                self.register(name, fn)

    def register(self, name: str, fn: Predicate) -> None:
        """
        Add (or replace) a named operator.

        Args:
            name: Operator name used in comparison expressions
            fn: Binary predicate over the two resolved operands
        """
        if not name or not isinstance(name, str):
            raise ValueError("Operator name must be a non-empty string")
        if not callable(fn):
            raise ValueError(f"Operator {name} must be callable")

        if name in self._operators:
            logger.info(f"Replacing comparison operator: {name}")
        self._operators[name] = fn

    def get(self, name: Any) -> Optional[Predicate]:
        if not isinstance(name, str):
            return None
        return self._operators.get(name)

    def copy(self) -> 'OperatorRegistry':
        clone = OperatorRegistry()
        clone._operators = dict(self._operators)
        return clone

    def names(self):
        return list(self._operators.keys())

    def __contains__(self, name: Any) -> bool:
        return isinstance(name, str) and name in self._operators

    def __iter__(self) -> Iterator[str]:
        return iter(self._operators)

    def __len__(self) -> int:
        return len(self._operators)

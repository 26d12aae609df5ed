"""
Condition Evaluator - Evaluates boolean expression trees for condition nodes

Supports:
- Comparisons: {"type": "comparison", "lhs": "user.age", "operator": "greater_than", "rhs": 18}
- Groups: {"type": "group", "logicalOperator": "and" | "or", "conditions": [...]}
- Negation: {"type": "group", "logicalOperator": "not", "operand": {...}}
- Lists: implicit AND over the elements

Conditions given as strings of code are rejected.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from flowrunner.flow_engine.exceptions import (
    InvalidExpressionError,
    SecurityError,
    UnsupportedOperatorError,
)
from flowrunner.flow_engine.operators import OperatorRegistry, Predicate
from flowrunner.flow_engine.paths import get_path

logger = logging.getLogger(__name__)


class LogicalOperator(str, Enum):
    """Logical operators for combining conditions"""
    AND = "and"
    OR = "or"
    NOT = "not"


class ExpressionType(str, Enum):
    GROUP = "group"
    COMPARISON = "comparison"


class ConditionEvaluator:
    """
    Evaluates condition expressions against the execution context.

    Expression example:
    {
        "type": "group",
        "logicalOperator": "or",
        "conditions": [
            {"type": "comparison", "lhs": "order.total", "operator": "greater_than", "rhs": 100},
            {"type": "comparison", "lhs": "customer.vip", "operator": "equals", "rhs": true}
        ]
    }
    """

    def __init__(self, operators: Optional[OperatorRegistry] = None):
        """
        Initialize evaluator.

        Args:
            operators: Operator registry (defaults to the built-in operators)
        """
        self.operators = operators if operators is not None else OperatorRegistry()

    def register_operator(self, name: str, fn: Predicate) -> None:
        """Add a named comparison operator."""
        self.operators.register(name, fn)

    def evaluate(self, expression: Any, context: Any) -> bool:
        """
        Evaluate an expression.

        Args:
            expression: Comparison, group, or list of expressions
            context: Execution context used to resolve operands

        Returns:
            True if the expression holds

        Raises:
            SecurityError: expression is a string
            InvalidExpressionError: expression has a malformed shape
            UnsupportedOperatorError: unknown logical or comparison operator
        """
        if isinstance(expression, str):
            raise SecurityError()

        # Default: AND for lists
        if isinstance(expression, (list, tuple)):
            return all(self.evaluate(e, context) for e in expression)

        if not isinstance(expression, Mapping):
            raise InvalidExpressionError(f"Invalid condition format: {type(expression).__name__}")

        expression_type = self._expression_type(expression)

        if expression_type == ExpressionType.GROUP.value:
            return self._evaluate_group(expression, context)

        if expression_type == ExpressionType.COMPARISON.value:
            return self._evaluate_comparison(expression, context)

        raise InvalidExpressionError(f"Invalid condition type: {expression_type}")

    def _expression_type(self, expression: Mapping) -> Optional[str]:
        expression_type = expression.get('type')
        if expression_type:
            return expression_type
        if 'logicalOperator' in expression:
            return ExpressionType.GROUP.value
        if 'lhs' in expression:
            return ExpressionType.COMPARISON.value
        return None

    def _evaluate_group(self, group: Mapping, context: Any) -> bool:
        logical_operator = group.get('logicalOperator')
        conditions = group.get('conditions')
        operand = group.get('operand')

        if logical_operator in (LogicalOperator.AND.value, LogicalOperator.OR.value):
            if not isinstance(conditions, (list, tuple)) or not conditions:
                raise InvalidExpressionError(f"'{logical_operator}' requires a non-empty conditions list")

            results = (self.evaluate(c, context) for c in conditions)
            if logical_operator == LogicalOperator.AND.value:
                return all(results)
            return any(results)

        if logical_operator == LogicalOperator.NOT.value:
            if operand is None:
                raise InvalidExpressionError("'not' requires an operand")
            return not self.evaluate(operand, context)

        raise UnsupportedOperatorError(logical_operator, kind='logical')

    def _evaluate_comparison(self, comparison: Mapping, context: Any) -> bool:
        operator = comparison.get('operator', comparison.get('op'))
        if operator is None:
            raise InvalidExpressionError("Comparison requires an operator")

        predicate = self.operators.get(operator)
        if predicate is None:
            raise UnsupportedOperatorError(operator, known=self.operators.names())

        lhs = self.resolve_value(comparison.get('lhs'), context)
        rhs = self.resolve_value(comparison.get('rhs'), context)

        result = bool(predicate(lhs, rhs))
        logger.debug(f"Comparison {lhs!r} {operator} {rhs!r} -> {result}")
        return result

    def resolve_value(self, value: Any, context: Any) -> Any:
        """
        Resolve a comparison operand.

        - "a.b.c" is a dotted path into the context (ABSENT when missing)
        - "name" is the context value when the context has that key
        - anything else is a literal
        """
        if isinstance(value, str) and '.' in value:
            return get_path(context, value)
        if isinstance(value, str) and isinstance(context, Mapping) and value in context:
            return context[value]
        return value

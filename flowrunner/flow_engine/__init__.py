"""
Flow Engine - interprets graph-shaped flow definitions

Nodes (start, httpRequest, condition, loop, end, custom kinds) are connected
by directed transitions and executed against a context that flows from node
to node.
"""

from flowrunner.flow_engine.cancellation import CancellationToken
from flowrunner.flow_engine.condition_evaluator import ConditionEvaluator, LogicalOperator
from flowrunner.flow_engine.definition import FlowDefinition, NodeKind, NodeSpec
from flowrunner.flow_engine.exceptions import (
    CancelledError,
    ExecutionError,
    ExpressionError,
    ExternalCallError,
    FlowError,
    InvalidExpressionError,
    InvalidParameterError,
    MalformedGraphError,
    MaxDepthExceededError,
    NoStartNodeError,
    SecurityError,
    UnknownNodeKindError,
    UnsupportedOperatorError,
)
from flowrunner.flow_engine.executor import FlowExecutor, run_flow
from flowrunner.flow_engine.graph import FlowGraph
from flowrunner.flow_engine.http_adapter import ExternalCallAdapter, HttpxCallAdapter
from flowrunner.flow_engine.operators import ComparisonOperator, OperatorRegistry
from flowrunner.flow_engine.paths import ABSENT, get_path
from flowrunner.flow_engine.variable_resolver import PlaceholderResolver

__all__ = [
    # Engine
    'FlowExecutor',
    'run_flow',
    'CancellationToken',

    # Model
    'FlowDefinition',
    'FlowGraph',
    'NodeKind',
    'NodeSpec',

    # Evaluation
    'ConditionEvaluator',
    'ComparisonOperator',
    'LogicalOperator',
    'OperatorRegistry',
    'PlaceholderResolver',
    'ABSENT',
    'get_path',

    # External calls
    'ExternalCallAdapter',
    'HttpxCallAdapter',

    # Errors
    'FlowError',
    'MalformedGraphError',
    'NoStartNodeError',
    'ExecutionError',
    'UnknownNodeKindError',
    'InvalidParameterError',
    'ExternalCallError',
    'CancelledError',
    'MaxDepthExceededError',
    'ExpressionError',
    'InvalidExpressionError',
    'UnsupportedOperatorError',
    'SecurityError',
]

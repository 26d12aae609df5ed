"""
Custom exceptions for the flow engine.

Every error aborts the whole run. Errors raised while a node is executing
carry that node's id.
"""

from typing import Optional


class FlowError(Exception):
    """Base error for flow definitions and flow runs"""

    def __init__(self, message: str, node_id: Optional[str] = None, cause: Optional[BaseException] = None):
        self.message = message
        self.node_id = node_id
        self.cause = cause
        super().__init__(self.message)

    def __str__(self):
        if self.node_id:
            return f"[{self.node_id}] {self.message}"
        return self.message

    def to_dict(self):
        return {
            'type': type(self).__name__,
            'message': self.message,
            'node_id': self.node_id,
        }


class MalformedGraphError(FlowError):
    """Flow definition is invalid (raised at construction)"""


class NoStartNodeError(MalformedGraphError):
    """Flow definition has no start node, or more than one"""

    def __init__(self, message: str = "Flow must have exactly one start node", start_ids=None):
        self.start_ids = list(start_ids or [])
        if self.start_ids:
            message = f"{message} (found: {', '.join(self.start_ids)})"
        super().__init__(message)


class ExecutionError(FlowError):
    """Error raised while running a flow"""


class UnknownNodeKindError(ExecutionError):
    """Node kind has no handler"""

    def __init__(self, kind: str, node_id: Optional[str] = None):
        self.kind = kind
        super().__init__(f"Unknown node kind: {kind}", node_id=node_id)


class InvalidParameterError(ExecutionError):
    """Node parameter is missing or has the wrong shape"""


class ExternalCallError(ExecutionError):
    """External call failed (transport error or non-2xx response)"""

    def __init__(self, message: str, node_id: Optional[str] = None, cause: Optional[BaseException] = None,
                 status_code: Optional[int] = None):
        self.status_code = status_code
        if status_code:
            message = f"{message} (status: {status_code})"
        super().__init__(message, node_id=node_id, cause=cause)


class CancelledError(ExecutionError):
    """Run was cancelled or its deadline expired"""

    def __init__(self, message: str = "Flow run cancelled", node_id: Optional[str] = None):
        super().__init__(message, node_id=node_id)


class MaxDepthExceededError(ExecutionError):
    """Traversal went deeper than the configured bound (usually a cycle)"""

    def __init__(self, max_depth: int, node_id: Optional[str] = None):
        self.max_depth = max_depth
        super().__init__(f"Maximum traversal depth exceeded ({max_depth})", node_id=node_id)


class ExpressionError(ExecutionError):
    """Base error for condition evaluation"""


class InvalidExpressionError(ExpressionError):
    """Expression has a malformed shape"""


class UnsupportedOperatorError(ExpressionError):
    """Logical or comparison operator is not known"""

    def __init__(self, operator, kind: str = 'comparison', node_id: Optional[str] = None, known=None):
        self.operator = operator
        self.kind = kind
        self.known = sorted(known or [])
        message = f"Unsupported {kind} operator: {operator}"
        if self.known:
            message = f"{message} (known: {', '.join(self.known)})"
        super().__init__(message, node_id=node_id)


class SecurityError(ExpressionError):
    """Expression was given as code-in-a-string"""

    def __init__(self, message: str = "String conditions are not supported for security reasons",
                 node_id: Optional[str] = None):
        super().__init__(message, node_id=node_id)

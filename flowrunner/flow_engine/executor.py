"""
Flow Executor - Main orchestrator for flow execution

Responsibilities:
- Locate the start node
- Dispatch each node by kind (start, httpRequest, condition, loop, end, custom)
- Thread the context through successors (sequential fold, left to right)
- Handle branching (falseNext) and looping (loopItems / loopNext)
- Bound traversal depth and honor cancellation
- Tag every failure with the failing node id
"""

import copy
import inspect
import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from uuid import uuid4

from flowrunner.flow_engine.cancellation import CancellationToken
from flowrunner.flow_engine.condition_evaluator import ConditionEvaluator
from flowrunner.flow_engine.definition import NodeKind, NodeSpec, optional_str
from flowrunner.flow_engine.exceptions import (
    ExecutionError,
    ExternalCallError,
    FlowError,
    InvalidParameterError,
    MaxDepthExceededError,
    UnknownNodeKindError,
)
from flowrunner.flow_engine.graph import FlowGraph
from flowrunner.flow_engine.http_adapter import ExternalCallAdapter, HttpxCallAdapter
from flowrunner.flow_engine.loop_handler import LoopHandler
from flowrunner.flow_engine.operators import OperatorRegistry
from flowrunner.flow_engine.variable_resolver import PlaceholderResolver

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 200

NodeHandler = Callable[[NodeSpec, Any], Union[Any, Awaitable[Any]]]


class FlowExecutor:
    """
    Executes one run of a flow definition.

    Usage:
        executor = FlowExecutor(definition)
        result = await executor.run({'user': {'name': 'Ann'}})

    An executor is built per run and discarded afterwards. The definition and
    the operator registry are never modified; the registry is copied at
    construction so later registrations do not affect this run.
    """

    def __init__(
        self,
        definition: Any,
        adapter: Optional[ExternalCallAdapter] = None,
        operators: Optional[OperatorRegistry] = None,
        node_handlers: Optional[Dict[str, NodeHandler]] = None,
        cancellation_token: Optional[CancellationToken] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        run_id: Optional[str] = None,
    ):
        """
        Initialize executor.

        Args:
            definition: FlowDefinition or raw definition document
            adapter: External call adapter for httpRequest nodes
            operators: Comparison operators (snapshotted)
            node_handlers: Handlers for custom node kinds: handler(node, context) -> context
            cancellation_token: Run-scoped cancellation token
            max_depth: Maximum traversal depth before the run is aborted

        Raises:
            MalformedGraphError: If the definition is invalid
        """
        self.graph = FlowGraph(definition)
        self.adapter = adapter or HttpxCallAdapter()
        self.resolver = PlaceholderResolver()
        self.evaluator = ConditionEvaluator((operators or OperatorRegistry()).copy())
        self.loop_handler = LoopHandler(self.resolver)
        self.cancellation_token = cancellation_token or CancellationToken()
        self.max_depth = max_depth
        self.run_id = run_id or str(uuid4())
        self.nodes_executed = 0

        self._handlers = {
            NodeKind.START.value: self._execute_start,
            NodeKind.HTTP_REQUEST.value: self._execute_http_request,
            NodeKind.CONDITION.value: self._execute_condition,
            NodeKind.LOOP.value: self._execute_loop,
            NodeKind.END.value: self._execute_end,
        }

        self.node_handlers: Dict[str, NodeHandler] = {}
        for kind, handler in (node_handlers or {}).items():
            if kind in self._handlers:
                raise ValueError(f"Cannot override built-in node kind: {kind}")
            self.node_handlers[kind] = handler

    async def run(self, initial_context: Optional[Any] = None) -> Any:
        """
        Execute the flow.

        Args:
            initial_context: Input data (copied; the caller's object is never mutated)

        Returns:
            Final context

        Raises:
            ExecutionError: If any node fails
        """
        context = copy.deepcopy(initial_context) if initial_context is not None else {}
        start_node = self.graph.start_node
        self.nodes_executed = 0

        logger.info(f"Starting flow run: {self.run_id} (start node: {start_node.id})")

        try:
            result = await self._execute_node(start_node.id, context, depth=0)
        except ExecutionError as e:
            logger.error(f"Flow run failed: {self.run_id} - {e}")
            raise

        logger.info(f"Flow run completed: {self.run_id} ({self.nodes_executed} nodes executed)")
        return result

    async def _execute_node(self, node_id: str, context: Any, depth: int) -> Any:
        if depth > self.max_depth:
            raise MaxDepthExceededError(self.max_depth, node_id=node_id)

        self.cancellation_token.raise_if_cancelled(node_id)

        node = self.graph.get_node(node_id)
        self.nodes_executed += 1
        logger.debug(f"Executing node {node.id} ({node.kind}) at depth {depth}")

        try:
            handler = self._handlers.get(node.kind)
            if handler is not None:
                return await handler(node, context, depth)

            custom_handler = self.node_handlers.get(node.kind)
            if custom_handler is None:
                raise UnknownNodeKindError(node.kind, node_id=node.id)

            return await self._execute_custom(node, custom_handler, context, depth)

        except FlowError as e:
            if e.node_id is None:
                e.node_id = node.id
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in node {node.id}")
            raise ExecutionError(f"Node {node.id} failed: {e}", node_id=node.id, cause=e) from e

    async def _execute_successors(self, node_id: str, context: Any, depth: int) -> Any:
        """
        Run the successors of a node one after another.

        Each successor receives the previous successor's output; the last
        output is returned. A node without successors ends the path.
        """
        next_ids = self.graph.successors(node_id)
        if not next_ids:
            return context

        output = context
        for next_id in next_ids:
            output = await self._execute_node(next_id, output, depth + 1)
        return output

    async def _execute_start(self, node: NodeSpec, context: Any, depth: int) -> Any:
        return await self._execute_successors(node.id, context, depth)

    async def _execute_end(self, node: NodeSpec, context: Any, depth: int) -> Any:
        return context

    async def _execute_http_request(self, node: NodeSpec, context: Any, depth: int) -> Any:
        """
        Call the external adapter; the response body becomes the context.
        """
        url = self.resolver.resolve(node.param('url'), context)
        if not isinstance(url, str) or not url:
            raise InvalidParameterError("httpRequest requires a url", node_id=node.id)

        method = str(node.param('method') or 'GET').upper()

        headers = self.resolver.resolve(node.param('headers') or {}, context)
        if not isinstance(headers, Mapping):
            raise InvalidParameterError("httpRequest headers must be an object", node_id=node.id)

        body = self.resolver.resolve(node.param('body'), context)

        unresolved = self.resolver.find_unresolved(
            [node.param('url'), node.param('headers'), node.param('body')],
            context,
        )
        if unresolved:
            logger.debug(f"Unresolved placeholders in node {node.id}: {', '.join(unresolved)}")

        try:
            response = await self.adapter.invoke(method, url, dict(headers), body)
        except FlowError:
            raise
        except Exception as e:
            raise ExternalCallError(f"HTTP request failed: {e}", node_id=node.id, cause=e) from e

        return await self._execute_successors(node.id, response.get('body'), depth)

    async def _execute_condition(self, node: NodeSpec, context: Any, depth: int) -> Any:
        """
        True: continue to successors. False: jump to falseNext, or end the
        run with the context unchanged.
        """
        result = self.evaluator.evaluate(node.param('condition'), context)

        if result:
            return await self._execute_successors(node.id, context, depth)

        false_next = optional_str(node.param('falseNext'))
        if false_next:
            logger.debug(f"Condition {node.id} is false, jumping to {false_next}")
            return await self._execute_node(false_next, context, depth + 1)

        logger.info(f"Condition {node.id} is false with no falseNext, ending path")
        return context

    async def _execute_loop(self, node: NodeSpec, context: Any, depth: int) -> Any:
        """
        Fold the successors over loopItems, then continue at loopNext.
        """
        items = self.loop_handler.get_loop_items(node, context)
        item_variable = self.loop_handler.get_item_variable(node)

        logger.info(f"Loop {node.id}: iterating {len(items)} items")

        last_output = context
        for index, item in enumerate(items):
            self.cancellation_token.raise_if_cancelled(node.id)
            item_context = self.loop_handler.create_item_context(node, last_output, item, index, item_variable)
            last_output = await self._execute_successors(node.id, item_context, depth)

        loop_next = optional_str(node.param('loopNext'))
        if loop_next:
            return await self._execute_node(loop_next, last_output, depth + 1)

        return last_output

    async def _execute_custom(self, node: NodeSpec, handler: NodeHandler, context: Any, depth: int) -> Any:
        node_input = dict(context) if isinstance(context, Mapping) else context

        result = handler(node, node_input)
        if inspect.isawaitable(result):
            result = await result

        return await self._execute_successors(node.id, result, depth)


async def run_flow(
    definition: Any,
    input_data: Optional[Dict[str, Any]] = None,
    **executor_options,
) -> Any:
    """
    Shortcut for FlowExecutor(definition, **options).run(input_data).
    """
    executor = FlowExecutor(definition, **executor_options)
    return await executor.run(input_data)

"""
Loop Handler - Handle iteration over sequences in flows

Supports:
- Literal item lists, or a {{placeholder}} resolving to a list in the context
- Item variable (and optional index variable) injected per iteration
- Sequential fold: each iteration starts from the previous iteration's output
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from flowrunner.flow_engine.definition import NodeSpec
from flowrunner.flow_engine.exceptions import ExecutionError, InvalidParameterError
from flowrunner.flow_engine.variable_resolver import PlaceholderResolver

logger = logging.getLogger(__name__)


class LoopHandler:
    """
    Handles loop/iteration logic in flows.

    Loop node example:
    {
        "id": "eachItem",
        "kind": "loop",
        "parameters": {
            "loopItems": "{{order.items}}",
            "itemVariable": "item",
            "indexVariable": "itemIndex",  # optional
            "loopNext": "summary"          # optional
        }
    }
    """

    def __init__(self, resolver: PlaceholderResolver):
        """
        Initialize loop handler.

        Args:
            resolver: Placeholder resolver used for templated loopItems
        """
        self.resolver = resolver

    def get_loop_items(self, node: NodeSpec, context: Any) -> List[Any]:
        """
        Get items to iterate over.

        Args:
            node: Loop node
            context: Current execution context

        Returns:
            List of items to iterate

        Raises:
            InvalidParameterError: If loopItems does not resolve to a list
        """
        items = self.resolver.resolve(node.param('loopItems'), context)

        if not isinstance(items, (list, tuple)):
            raise InvalidParameterError(
                f"loopItems must be a list, got {type(items).__name__}",
                node_id=node.id,
            )

        return list(items)

    def get_item_variable(self, node: NodeSpec) -> str:
        item_variable = node.param('itemVariable')
        if not isinstance(item_variable, str) or not item_variable:
            raise InvalidParameterError("itemVariable must be a non-empty string", node_id=node.id)
        return item_variable

    def create_item_context(
        self,
        node: NodeSpec,
        context: Any,
        item: Any,
        index: int,
        item_variable: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create context for current loop iteration.

        Args:
            node: Loop node
            context: Context carried forward from the previous iteration
            item: Current item
            index: Current index (0-based)
            item_variable: Name already checked by get_item_variable

        Returns:
            New context dict; the carried context is not modified
        """
        if not isinstance(context, Mapping):
            raise ExecutionError(
                f"Loop requires an object context, got {type(context).__name__}",
                node_id=node.id,
            )

        item_context = dict(context)
        item_context[item_variable or self.get_item_variable(node)] = item

        index_variable = node.param('indexVariable')
        if index_variable:
            item_context[index_variable] = index

        return item_context

"""
Flow Graph - validated index over a FlowDefinition.

Provides O(1) node lookup and the ordered successor list of each node.
Cycles are not detected here; the executor bounds traversal depth instead.
"""

import logging
from typing import Any, Dict, Iterator, Tuple

from flowrunner.flow_engine.definition import (
    FlowDefinition,
    NodeKind,
    NodeSpec,
    coerce_definition,
    optional_str,
)
from flowrunner.flow_engine.exceptions import MalformedGraphError, NoStartNodeError

logger = logging.getLogger(__name__)

# Parameters that name another node to jump to
JUMP_PARAMETERS = {
    NodeKind.CONDITION.value: 'falseNext',
    NodeKind.LOOP.value: 'loopNext',
}


class FlowGraph:
    """
    Validated flow graph.

    Usage:
        graph = FlowGraph(definition)
        start = graph.start_node
        for next_id in graph.successors(start.id):
            ...

    Raises:
        MalformedGraphError: duplicate ids or transitions to unknown nodes
        NoStartNodeError: zero or several start nodes
    """

    def __init__(self, definition: Any):
        self.definition: FlowDefinition = coerce_definition(definition)
        self._nodes: Dict[str, NodeSpec] = {}

        for node in self.definition.nodes:
            if node.id in self._nodes:
                raise MalformedGraphError(f"Duplicate node id: {node.id}")
            self._nodes[node.id] = node

        self._validate_transitions()
        self.start_node = self._find_start_node()

        logger.debug(
            f"Flow graph built: {len(self._nodes)} nodes, start node: {self.start_node.id}"
        )

    def _validate_transitions(self):
        for source, targets in self.definition.successors.items():
            if source not in self._nodes:
                raise MalformedGraphError(f"Transition from unknown node: {source}")
            for target in targets:
                if target not in self._nodes:
                    raise MalformedGraphError(f"Transition from {source} to unknown node: {target}")

        for node in self._nodes.values():
            param_name = JUMP_PARAMETERS.get(node.kind)
            if not param_name:
                continue
            raw_target = node.param(param_name)
            # "" means unset
            if raw_target is None or raw_target == '':
                continue
            target = optional_str(raw_target)
            if target is None or target not in self._nodes:
                raise MalformedGraphError(
                    f"Node {node.id} parameter {param_name} references unknown node: {raw_target}"
                )

    def _find_start_node(self) -> NodeSpec:
        start_nodes = [n for n in self._nodes.values() if n.kind == NodeKind.START.value]

        if not start_nodes:
            raise NoStartNodeError("Start node not found")

        # Ambiguous entry point: fail fast instead of picking one
        if len(start_nodes) > 1:
            raise NoStartNodeError(
                "Flow has more than one start node",
                start_ids=[n.id for n in start_nodes],
            )

        return start_nodes[0]

    def get_node(self, node_id: str) -> NodeSpec:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise MalformedGraphError(f"Node with id {node_id} not found") from None

    def successors(self, node_id: str) -> Tuple[str, ...]:
        return self.definition.successors.get(node_id, ())

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[NodeSpec]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

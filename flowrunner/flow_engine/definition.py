"""
Flow definition model and normalization.

Accepts the two encodings produced by the editor and collapses them into a
single model where every node carries its ordered successor ids:

Edge list (React Flow format):
{
    'nodes': [
        {'id': 'start-1', 'type': 'start', 'data': {'parameters': {}}},
        {'id': 'fetch', 'type': 'httpRequest', 'data': {'parameters': {'url': '...'}}}
    ],
    'edges': [
        {'id': 'e1', 'source': 'start-1', 'target': 'fetch'}
    ]
}

Inline successors:
{
    'nodes': [
        {'id': 'start-1', 'kind': 'start', 'next': 'fetch'},
        {'id': 'fetch', 'kind': 'httpRequest', 'parameters': {'url': '...'}, 'next': ['a', 'b']}
    ]
}
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple

from flowrunner.flow_engine.exceptions import MalformedGraphError


class NodeKind(str, Enum):
    """Built-in node kinds"""
    START = "start"
    HTTP_REQUEST = "httpRequest"
    CONDITION = "condition"
    LOOP = "loop"
    END = "end"


@dataclass(frozen=True)
class NodeSpec:
    id: str
    kind: str
    parameters: Mapping = field(default_factory=lambda: MappingProxyType({}))

    def param(self, name: str, default: Any = None) -> Any:
        return self.parameters.get(name, default)


@dataclass(frozen=True)
class FlowDefinition:
    """
    Immutable, normalized flow definition.

    Attributes:
        nodes: Nodes in document order
        successors: node id -> ordered successor ids
    """
    nodes: Tuple[NodeSpec, ...]
    successors: Mapping

    @classmethod
    def from_dict(cls, data: Mapping) -> 'FlowDefinition':
        """
        Build a definition from a parsed JSON document.

        Args:
            data: Document with 'nodes' and optionally 'edges'

        Returns:
            FlowDefinition

        Raises:
            MalformedGraphError: If the document does not have the expected shape
        """
        if not isinstance(data, Mapping):
            raise MalformedGraphError("Flow definition must be an object")

        raw_nodes = data.get('nodes')
        if not isinstance(raw_nodes, (list, tuple)):
            raise MalformedGraphError("Flow definition requires a 'nodes' list")

        raw_edges = data.get('edges') or []
        if not isinstance(raw_edges, (list, tuple)):
            raise MalformedGraphError("'edges' must be a list")

        nodes = []
        successors: Dict[str, List[str]] = {}
        for index, raw in enumerate(raw_nodes):
            node = _normalize_node(raw, index)
            nodes.append(node)
            successors.setdefault(node.id, []).extend(_inline_successors(raw, node.id))

        for edge in raw_edges:
            if not isinstance(edge, Mapping):
                raise MalformedGraphError(f"Invalid edge: {edge!r}")
            source = edge.get('source')
            target = edge.get('target')
            if not source or not target:
                raise MalformedGraphError(f"Edge {edge.get('id', '?')} requires source and target")
            successors.setdefault(source, []).append(target)

        return cls(
            nodes=tuple(nodes),
            successors=MappingProxyType({k: tuple(v) for k, v in successors.items()}),
        )


def _normalize_node(raw: Any, index: int) -> NodeSpec:
    """
    Convert one node to NodeSpec.

    'kind' falls back to the React Flow 'type' and 'parameters' falls back to
    'data.parameters'.
    """
    if not isinstance(raw, Mapping):
        raise MalformedGraphError(f"Node at position {index} must be an object")

    node_id = raw.get('id')
    if not isinstance(node_id, str) or not node_id:
        raise MalformedGraphError(f"Node at position {index} has no id")

    kind = raw.get('kind') or raw.get('type')
    if not isinstance(kind, str) or not kind:
        raise MalformedGraphError(f"Node {node_id} has no kind")

    parameters = raw.get('parameters')
    if parameters is None:
        data = raw.get('data') or {}
        parameters = data.get('parameters') if isinstance(data, Mapping) else None
    if parameters is None:
        parameters = {}
    if not isinstance(parameters, Mapping):
        raise MalformedGraphError(f"Node {node_id} parameters must be an object")

    return NodeSpec(id=node_id, kind=kind, parameters=MappingProxyType(dict(parameters)))


def _inline_successors(raw: Mapping, node_id: str) -> List[str]:
    next_ids = raw.get('next')
    if next_ids is None:
        return []
    if isinstance(next_ids, str):
        return [next_ids]
    if isinstance(next_ids, (list, tuple)) and all(isinstance(n, str) for n in next_ids):
        return list(next_ids)
    raise MalformedGraphError(f"Node {node_id} has an invalid 'next' value")


def coerce_definition(definition: Any) -> FlowDefinition:
    """Accept a FlowDefinition or a raw document."""
    if isinstance(definition, FlowDefinition):
        return definition
    return FlowDefinition.from_dict(definition)


def optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None

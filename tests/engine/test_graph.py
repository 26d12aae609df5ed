"""
Tests for FlowDefinition normalization and FlowGraph validation
"""

import pytest

from flowrunner.flow_engine import (
    FlowDefinition,
    FlowGraph,
    MalformedGraphError,
    NoStartNodeError,
)


class TestNormalization:
    """Both graph encodings collapse into ordered successor lists"""

    def test_edge_list_encoding(self):
        definition = FlowDefinition.from_dict({
            'nodes': [
                {'id': 'start', 'type': 'start', 'data': {'parameters': {}}},
                {'id': 'fetch', 'type': 'httpRequest', 'data': {'parameters': {'url': 'https://example.com'}}},
                {'id': 'end', 'type': 'end', 'data': {}},
            ],
            'edges': [
                {'id': 'e1', 'source': 'start', 'target': 'fetch'},
                {'id': 'e2', 'source': 'fetch', 'target': 'end'},
            ],
        })

        assert [n.id for n in definition.nodes] == ['start', 'fetch', 'end']
        assert definition.nodes[1].kind == 'httpRequest'
        assert definition.nodes[1].parameters['url'] == 'https://example.com'
        assert definition.successors['start'] == ('fetch',)
        assert definition.successors['fetch'] == ('end',)

    def test_inline_encoding(self):
        definition = FlowDefinition.from_dict({
            'nodes': [
                {'id': 'start', 'kind': 'start', 'next': 'a'},
                {'id': 'a', 'kind': 'end', 'next': []},
            ],
        })

        assert definition.successors['start'] == ('a',)
        assert definition.successors['a'] == ()

    def test_both_encodings_are_equivalent(self):
        edges = FlowDefinition.from_dict({
            'nodes': [{'id': 's', 'kind': 'start'}, {'id': 'a', 'kind': 'end'}, {'id': 'b', 'kind': 'end'}],
            'edges': [
                {'id': 'e1', 'source': 's', 'target': 'a'},
                {'id': 'e2', 'source': 's', 'target': 'b'},
            ],
        })
        inline = FlowDefinition.from_dict({
            'nodes': [{'id': 's', 'kind': 'start', 'next': ['a', 'b']}, {'id': 'a', 'kind': 'end'}, {'id': 'b', 'kind': 'end'}],
        })

        assert edges.successors['s'] == inline.successors['s'] == ('a', 'b')

    def test_inline_successors_come_before_edges(self):
        definition = FlowDefinition.from_dict({
            'nodes': [{'id': 's', 'kind': 'start', 'next': 'b'}, {'id': 'a', 'kind': 'end'}, {'id': 'b', 'kind': 'end'}],
            'edges': [{'id': 'e1', 'source': 's', 'target': 'a'}],
        })

        assert definition.successors['s'] == ('b', 'a')

    def test_parameters_are_read_only(self):
        definition = FlowDefinition.from_dict({
            'nodes': [{'id': 's', 'kind': 'start', 'parameters': {'a': 1}}],
        })

        with pytest.raises(TypeError):
            definition.nodes[0].parameters['a'] = 2

    @pytest.mark.parametrize('document', [
        None,
        [],
        {'nodes': 'nope'},
        {'nodes': [{'kind': 'start'}]},
        {'nodes': [{'id': 's'}]},
        {'nodes': [{'id': 's', 'kind': 'start', 'parameters': 'x'}]},
        {'nodes': [{'id': 's', 'kind': 'start', 'next': 5}]},
        {'nodes': [{'id': 's', 'kind': 'start'}], 'edges': [{'id': 'e1', 'source': 's'}]},
    ])
    def test_malformed_documents(self, document):
        with pytest.raises(MalformedGraphError):
            FlowDefinition.from_dict(document)


class TestFlowGraph:
    """Validation and lookup"""

    def test_lookup_and_successors(self):
        graph = FlowGraph({
            'nodes': [{'id': 's', 'kind': 'start', 'next': 'e'}, {'id': 'e', 'kind': 'end'}],
        })

        assert graph.start_node.id == 's'
        assert graph.get_node('e').kind == 'end'
        assert graph.successors('s') == ('e',)
        assert graph.successors('e') == ()
        assert 'e' in graph
        assert len(graph) == 2

    def test_accepts_a_definition_instance(self):
        definition = FlowDefinition.from_dict({'nodes': [{'id': 's', 'kind': 'start'}]})

        graph = FlowGraph(definition)

        assert graph.definition is definition

    def test_edge_to_unknown_node(self):
        with pytest.raises(MalformedGraphError):
            FlowGraph({
                'nodes': [{'id': 's', 'kind': 'start'}],
                'edges': [{'id': 'e1', 'source': 's', 'target': 'ghost'}],
            })

    def test_edge_from_unknown_node(self):
        with pytest.raises(MalformedGraphError):
            FlowGraph({
                'nodes': [{'id': 's', 'kind': 'start'}],
                'edges': [{'id': 'e1', 'source': 'ghost', 'target': 's'}],
            })

    def test_false_next_to_unknown_node(self):
        with pytest.raises(MalformedGraphError):
            FlowGraph({
                'nodes': [
                    {'id': 's', 'kind': 'start', 'next': 'c'},
                    {'id': 'c', 'kind': 'condition', 'parameters': {'condition': [], 'falseNext': 'ghost'}},
                ],
            })

    def test_loop_next_to_unknown_node(self):
        with pytest.raises(MalformedGraphError):
            FlowGraph({
                'nodes': [
                    {'id': 's', 'kind': 'start', 'next': 'l'},
                    {'id': 'l', 'kind': 'loop', 'parameters': {'loopItems': [], 'itemVariable': 'x', 'loopNext': 'ghost'}},
                ],
            })

    @pytest.mark.parametrize('kind, parameters', [
        ('condition', {'condition': [], 'falseNext': ''}),
        ('loop', {'loopItems': [], 'itemVariable': 'x', 'loopNext': ''}),
    ])
    def test_empty_jump_target_is_unset(self, kind, parameters):
        graph = FlowGraph({
            'nodes': [
                {'id': 's', 'kind': 'start', 'next': 'n'},
                {'id': 'n', 'kind': kind, 'parameters': parameters},
            ],
        })

        assert graph.successors('n') == ()

    @pytest.mark.parametrize('false_next', [5, ['s'], {'id': 's'}])
    def test_non_string_jump_target(self, false_next):
        with pytest.raises(MalformedGraphError):
            FlowGraph({
                'nodes': [
                    {'id': 's', 'kind': 'start', 'next': 'c'},
                    {'id': 'c', 'kind': 'condition', 'parameters': {'condition': [], 'falseNext': false_next}},
                ],
            })

    def test_duplicate_ids(self):
        with pytest.raises(MalformedGraphError):
            FlowGraph({'nodes': [{'id': 's', 'kind': 'start'}, {'id': 's', 'kind': 'end'}]})

    def test_zero_start_nodes(self):
        with pytest.raises(NoStartNodeError):
            FlowGraph({'nodes': [{'id': 'e', 'kind': 'end'}]})

    def test_no_start_is_a_malformed_graph(self):
        with pytest.raises(MalformedGraphError):
            FlowGraph({'nodes': []})

    def test_unknown_kind_is_accepted_at_construction(self):
        graph = FlowGraph({
            'nodes': [{'id': 's', 'kind': 'start', 'next': 'x'}, {'id': 'x', 'kind': 'custom'}],
        })

        assert graph.get_node('x').kind == 'custom'

    def test_cycle_is_not_rejected(self):
        graph = FlowGraph({
            'nodes': [{'id': 's', 'kind': 'start', 'next': 'a'}, {'id': 'a', 'kind': 'custom', 'next': 's'}],
        })

        assert graph.successors('a') == ('s',)

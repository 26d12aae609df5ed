"""
Pytest fixtures shared by all tests
"""

import pytest

from flowrunner.flow_engine import ExternalCallAdapter, ExternalCallError


class StubCallAdapter(ExternalCallAdapter):
    """Records calls and returns canned response bodies in order"""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    async def invoke(self, method, url, headers=None, body=None):
        self.calls.append({'method': method, 'url': url, 'headers': headers, 'body': body})
        if self.error is not None:
            raise self.error
        response_body = self.responses.pop(0) if self.responses else {}
        return {'status': 200, 'body': response_body, 'headers': {}}


@pytest.fixture
def stub_adapter():
    """Adapter returning an empty object for every call"""
    return StubCallAdapter()


@pytest.fixture
def make_adapter():
    """Factory for adapters with canned responses or a failure"""
    def _make(responses=None, error=None):
        return StubCallAdapter(responses=responses, error=error)
    return _make


@pytest.fixture
def failing_adapter():
    """Adapter that fails like a transport error"""
    return StubCallAdapter(error=ExternalCallError("HTTP request failed: connection refused"))


@pytest.fixture
def app(tmp_path, make_adapter):
    """Flask app with a stub adapter and a flow file in a temp dir"""
    import json
    from flowrunner import create_app
    from flowrunner.config import TestingConfig

    flow_path = tmp_path / 'flow.json'
    flow_path.write_text(json.dumps({
        'nodes': [
            {'id': 'start', 'type': 'start', 'data': {'parameters': {}}},
            {
                'id': 'fetch',
                'type': 'httpRequest',
                'data': {'parameters': {'url': 'https://api.example.com/users/{{userId | default: 1}}'}},
            },
            {'id': 'end', 'type': 'end', 'data': {'parameters': {}}},
        ],
        'edges': [
            {'id': 'e1', 'source': 'start', 'target': 'fetch'},
            {'id': 'e2', 'source': 'fetch', 'target': 'end'},
        ],
    }))

    class _Config(TestingConfig):
        FLOW_DEFINITION_PATH = str(flow_path)

    app = create_app(_Config)
    service = app.extensions['flow_execution_service']
    service.adapter = make_adapter(responses=[{'id': 1, 'name': 'Ann'}])
    return app


@pytest.fixture
def client(app):
    return app.test_client()

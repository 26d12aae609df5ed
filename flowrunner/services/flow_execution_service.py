"""
Flow Execution Service - high-level API to run flow definitions

Loads definitions (from a JSON file or an in-memory document), owns the
host-level operator registry and builds a fresh FlowExecutor for every run.
"""

import json
import logging
from typing import Any, Dict, Optional

from flowrunner.config import Config
from flowrunner.flow_engine import (
    CancellationToken,
    ExternalCallAdapter,
    FlowDefinition,
    FlowExecutor,
    HttpxCallAdapter,
    MalformedGraphError,
    OperatorRegistry,
)
from flowrunner.flow_engine.operators import Predicate

logger = logging.getLogger(__name__)


class FlowExecutionService:
    """
    Service to run flows.

    Usage:
        service = FlowExecutionService()
        service.register_operator('starts_with', lambda a, b: str(a).startswith(str(b)))
        result = await service.run_flow(definition, {'deal_id': '123'})
    """

    def __init__(
        self,
        config: Any = Config,
        adapter: Optional[ExternalCallAdapter] = None,
        operators: Optional[OperatorRegistry] = None,
        node_handlers: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize service.

        Args:
            config: Config object or mapping (Flask app.config works)
            adapter: External call adapter (httpx adapter by default)
            operators: Operator registry shared by all runs (copied per run)
            node_handlers: Handlers for custom node kinds
        """
        self.config = config
        self.adapter = adapter or HttpxCallAdapter(timeout=self._setting('HTTP_TIMEOUT_SECONDS', 30.0))
        self.operators = operators or OperatorRegistry()
        self.node_handlers = dict(node_handlers or {})

    def _setting(self, name: str, default: Any = None) -> Any:
        if isinstance(self.config, dict):
            value = self.config.get(name, default)
        else:
            value = getattr(self.config, name, default)
        return default if value is None else value

    def register_operator(self, name: str, fn: Predicate) -> None:
        """Add a comparison operator for all runs started after this call."""
        self.operators.register(name, fn)
        logger.info(f"Registered comparison operator: {name}")

    def load_definition(self, path: Optional[str] = None) -> FlowDefinition:
        """
        Load a flow definition from a JSON file.

        Args:
            path: File path (defaults to FLOW_DEFINITION_PATH)

        Returns:
            FlowDefinition

        Raises:
            MalformedGraphError: If the file is missing or not valid JSON
        """
        path = path or self._setting('FLOW_DEFINITION_PATH')
        if not path:
            raise MalformedGraphError("No flow definition path configured")

        try:
            with open(path, encoding='utf-8') as f:
                document = json.load(f)
        except FileNotFoundError:
            raise MalformedGraphError(f"Flow definition not found: {path}") from None
        except json.JSONDecodeError as e:
            raise MalformedGraphError(f"Flow definition is not valid JSON: {path} - {e}") from e

        logger.info(f"Loaded flow definition: {path}")
        return FlowDefinition.from_dict(document)

    def create_executor(
        self,
        definition: Any,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> FlowExecutor:
        if cancellation_token is None:
            cancellation_token = CancellationToken(timeout=self._setting('FLOW_RUN_TIMEOUT_SECONDS'))

        return FlowExecutor(
            definition,
            adapter=self.adapter,
            operators=self.operators,
            node_handlers=self.node_handlers,
            cancellation_token=cancellation_token,
            max_depth=int(self._setting('FLOW_MAX_DEPTH', 200)),
        )

    async def run_flow(
        self,
        definition: Any = None,
        input_data: Optional[Dict[str, Any]] = None,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Any:
        """
        Run a flow definition with the given input.

        Args:
            definition: FlowDefinition, raw document, or None to load the configured file
            input_data: Initial context
            cancellation_token: Optional token to cancel the run

        Returns:
            Final context

        Raises:
            MalformedGraphError: If the definition is invalid
            ExecutionError: If the run fails
        """
        if definition is None:
            definition = self.load_definition()

        executor = self.create_executor(definition, cancellation_token=cancellation_token)
        return await executor.run(input_data or {})


# Singleton instance
_service_instance: Optional[FlowExecutionService] = None


def get_flow_execution_service() -> FlowExecutionService:
    """
    Get singleton instance of FlowExecutionService.

    Returns:
        FlowExecutionService instance
    """
    global _service_instance
    if _service_instance is None:
        _service_instance = FlowExecutionService()
    return _service_instance

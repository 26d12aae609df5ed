"""
Flows API - Run flow definitions

Endpoints:
- POST /api/v1/flows/run - Run the posted definition (or the configured one) with the posted input
- GET /api/v1/flows/run - Run the configured definition with an empty input
"""

from flask import Blueprint, current_app, jsonify, request
import logging

from flowrunner.flow_engine import ExecutionError, MalformedGraphError
from flowrunner.services.flow_execution_service import (
    FlowExecutionService,
    get_flow_execution_service,
)

logger = logging.getLogger(__name__)

flows_bp = Blueprint('flows', __name__, url_prefix='/api/v1/flows')


def _get_service() -> FlowExecutionService:
    return current_app.extensions.get('flow_execution_service') or get_flow_execution_service()


@flows_bp.route('/run', methods=['GET', 'POST'])
async def run_flow():
    """
    Run a flow.

    Body (POST, optional):
        flow: Flow definition ({nodes, edges}); the configured file is used when absent
        input: Initial context (object)
    """
    payload = {}
    if request.method == 'POST':
        payload = request.get_json(silent=True) or {}

    if not isinstance(payload, dict):
        return jsonify({'success': False, 'error': {'type': 'BadRequest', 'message': 'Body must be an object'}}), 400

    definition = payload.get('flow')
    input_data = payload.get('input') or {}
    if not isinstance(input_data, dict):
        return jsonify({'success': False, 'error': {'type': 'BadRequest', 'message': 'input must be an object'}}), 400

    try:
        result = await _get_service().run_flow(definition, input_data)

    except MalformedGraphError as e:
        logger.warning(f"Rejected flow definition: {e}")
        return jsonify({'success': False, 'error': e.to_dict()}), 400

    except ExecutionError as e:
        logger.error(f"Flow run failed: {e}")
        return jsonify({'success': False, 'error': e.to_dict()}), 422

    return jsonify({'success': True, 'data': result}), 200

"""
Health check endpoint
"""
from flask import Blueprint, jsonify
from datetime import datetime, timezone

bp = Blueprint('health', __name__, url_prefix='/api')


@bp.route('/health', methods=['GET'])
def health_check():
    """Healthcheck endpoint to check that the API is online"""
    return jsonify({
        'status': 'healthy',
        'message': 'API is online',
        'timestamp': datetime.now(timezone.utc).isoformat()
    }), 200

"""
Location Routes — submission endpoint for the location client

POST /api/submit-location   — log the report and echo it back
"""

import logging
from flask import Blueprint, request, jsonify

logger = logging.getLogger('location_routes')

location_bp = Blueprint('location', __name__, url_prefix='/api')


def submit_method_not_allowed():
    response = jsonify({'error': 'Method Not Allowed'})
    response.headers['Allow'] = 'POST'
    return response, 405


@location_bp.route('/submit-location', methods=['POST'])
def submit_location():
    try:
        payload = request.get_json(silent=True) or {}
        logger.info(f"Received location payload: {payload}")

        return jsonify({'ok': True, 'received': payload})
    except Exception:
        logger.exception("Server error while handling location payload")
        return jsonify({'ok': False, 'error': 'Server error'}), 500

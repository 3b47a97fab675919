"""
Legacy Routes — older save endpoint, kept for clients still posting here

POST /api/save-location   — log lat/lon/state, fixed acknowledgement
"""

import logging
from flask import Blueprint, request, jsonify

logger = logging.getLogger('legacy_routes')

legacy_bp = Blueprint('legacy', __name__, url_prefix='/api')


def save_method_not_allowed():
    # No Allow header here, unlike /api/submit-location
    return jsonify({'error': 'Method not allowed'}), 405


@legacy_bp.route('/save-location', methods=['POST'])
def save_location():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    logger.info(
        f"New location received: {data.get('latitude')} {data.get('longitude')} {data.get('state')}"
    )

    return jsonify({'success': True})

"""Health check routes"""

import logging
from flask import Blueprint, jsonify

from routes.geocoding import resolver

logger = logging.getLogger(__name__)
health_bp = Blueprint('health', __name__)


@health_bp.route("/health")
def health_check():
    """Health check endpoint"""
    providers = resolver.provider_status()
    enabled = [p['name'] for p in providers if p['enabled']]

    if not enabled:
        logger.error("Health check failed: no geocoding providers enabled")
        return jsonify({"status": "unhealthy", "providers": providers}), 503

    logger.info("Health check successful")
    return jsonify({"status": "healthy", "providers": providers})

"""Geocoding API routes"""

import logging
from flask import Blueprint, jsonify

from config import GEOCODING_CONFIG
from routes.common import get_location_param, log_request_data
from services.geocoding import GeocodingResolver, generate_location_suggestions
from services.location_cache import CachedGeocoder

logger = logging.getLogger(__name__)
geocoding_bp = Blueprint('geocoding', __name__, url_prefix='/api')

# Initialize geocoding resolver and the shared cache in front of it
resolver = GeocodingResolver(config=GEOCODING_CONFIG)
location_cache = CachedGeocoder(
    resolver,
    ttl_seconds=GEOCODING_CONFIG['cache_ttl'],
    max_entries=GEOCODING_CONFIG['cache_max_entries']
)


@geocoding_bp.route("/geocode", methods=["GET"])
@log_request_data
def geocode():
    """Geocode a location, returning zero or one normalized results"""
    location, error = get_location_param()
    if error:
        logger.warning("Missing location in geocode request")
        return jsonify({"error": error}), 400

    try:
        result = location_cache.lookup(location)
    except Exception as e:
        logger.error(f"Geocoding error for {location}: {e}")
        return jsonify({"error": "Geocoding failed", "details": str(e)}), 500

    if result is None:
        logger.info(f"No results found for {location} across all geocoding sources")
        return jsonify([])

    logger.info(
        f"Successfully geocoded {location} using {result.source} "
        f"with {result.confidence} confidence"
    )
    return jsonify([result.to_api_dict()])


@geocoding_bp.route("/validate-location", methods=["GET"])
@log_request_data
def validate_location():
    """Validate a location, suggesting better input when it cannot be found"""
    location, error = get_location_param()
    if error:
        logger.warning("Missing location in validation request")
        return jsonify({"error": error}), 400

    try:
        result = location_cache.lookup(location)
    except Exception as e:
        logger.error(f"Location validation error for {location}: {e}")
        return jsonify({"error": "Validation failed"}), 500

    if result is None:
        return jsonify({
            "valid": False,
            "suggestions": generate_location_suggestions(location)
        })

    return jsonify({
        "valid": True,
        "location": {
            "address": location,
            "coordinates": [result.latitude, result.longitude],
            "confidence": result.confidence,
            "source": result.source,
            "displayName": result.display_name,
            "country": result.country,
            "city": result.city,
            "state": result.state
        }
    })


@geocoding_bp.route("/geocode/coordinates", methods=["GET"])
@log_request_data
def map_coordinates():
    """Coordinates for placing a post on the map, with fallback defaults"""
    location, error = get_location_param()
    if error:
        return jsonify({"error": error}), 400

    latitude, longitude, origin = location_cache.coordinates_for(location)
    return jsonify({
        "location": location,
        "latitude": latitude,
        "longitude": longitude,
        "origin": origin
    })

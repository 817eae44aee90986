"""
Services package - Geocoding resolution and caller-side caching
"""

from .geocoding import GeocodingResolver, generate_location_suggestions
from .location_cache import CachedGeocoder, fallback_coordinates_for

__all__ = [
    "GeocodingResolver",
    "generate_location_suggestions",
    "CachedGeocoder",
    "fallback_coordinates_for",
]

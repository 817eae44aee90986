"""
Scoring heuristics for geocoding candidates

All functions here are pure: they look only at a raw provider candidate
and the original query text.
"""
import re
from typing import Any, Dict, List, Optional

from models.location import GeocodeResult

# Place types ranked from most to least useful for locating a tutoring post
NOMINATIM_TYPE_SCORES = {
    'city': 10,
    'town': 9,
    'village': 8,
    'suburb': 7,
    'neighbourhood': 6,
    'hamlet': 5,
    'administrative': 4,
    'house': 3,
    'building': 2,
    'amenity': 1
}

IMPORTANCE_WEIGHT = 10
QUERY_MATCH_BONUS = 5
NORTH_AMERICA_BONUS = 3

HIGH_IMPORTANCE_THRESHOLD = 0.7
MEDIUM_IMPORTANCE_THRESHOLD = 0.4

MAPBOX_HIGH_RELEVANCE = 0.9
MAPBOX_MEDIUM_RELEVANCE = 0.6
MAPBOX_PRECISE_TYPES = ('place', 'postcode', 'address')

POSTAL_CODE_PATTERN = re.compile(r'^[A-Za-z]\d[A-Za-z]\s?\d[A-Za-z]\d$')

UNKNOWN_LOCATION = 'Unknown Location'


def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ''


def as_dict(value: Any) -> Dict[str, Any]:
    """Treat anything that is not a JSON object as an empty one"""
    return value if isinstance(value, dict) else {}


def _importance(candidate: Dict[str, Any]) -> float:
    try:
        return float(candidate.get('importance') or 0)
    except (ValueError, TypeError):
        return 0.0


def is_postal_code(text: str) -> bool:
    """True if text has the shape of a Canadian postal code (A1A 1A1)"""
    return bool(POSTAL_CODE_PATTERN.match((text or '').strip()))


def score_nominatim_candidate(candidate: Dict[str, Any], query: str) -> float:
    """
    Score a Nominatim candidate against the original query

    Args:
        candidate: Raw Nominatim search result
        query: Original location text

    Returns:
        Ranking score, higher is better
    """
    query_lower = query.lower()
    score = 0.0

    place_type = candidate.get('type') or candidate.get('class')
    if isinstance(place_type, str):
        score += NOMINATIM_TYPE_SCORES.get(place_type, 0)

    importance = _importance(candidate)
    if importance:
        score += importance * IMPORTANCE_WEIGHT

    if query_lower in _lower(candidate.get('display_name')):
        score += QUERY_MATCH_BONUS

    address = as_dict(candidate.get('address'))
    country = _lower(address.get('country'))
    if 'canada' in country or 'united states' in country:
        score += NORTH_AMERICA_BONUS

    return score


def select_best_nominatim_candidate(candidates: List[Dict[str, Any]],
                                    query: str) -> Optional[Dict[str, Any]]:
    """
    Pick the highest scoring candidate

    Only a strictly greater score replaces the current best, so the
    earliest candidate wins ties and an all-zero list yields the first.
    """
    if not candidates:
        return None

    best = candidates[0]
    best_score = 0.0
    for candidate in candidates:
        score = score_nominatim_candidate(candidate, query)
        if score > best_score:
            best_score = score
            best = candidate

    return best


def nominatim_confidence(candidate: Dict[str, Any], query: str) -> str:
    """Label how trustworthy a Nominatim match is for the query"""
    query_lower = query.lower()
    display_lower = _lower(candidate.get('display_name'))
    importance = _importance(candidate)

    if (query_lower in display_lower
            or is_postal_code(query)
            or importance > HIGH_IMPORTANCE_THRESHOLD):
        return GeocodeResult.CONFIDENCE_HIGH

    address = as_dict(candidate.get('address'))
    for key in ('city', 'town', 'state'):
        part = _lower(address.get(key))
        if part and part in query_lower:
            return GeocodeResult.CONFIDENCE_MEDIUM
    if importance > MEDIUM_IMPORTANCE_THRESHOLD:
        return GeocodeResult.CONFIDENCE_MEDIUM

    return GeocodeResult.CONFIDENCE_LOW


def photon_confidence(feature: Dict[str, Any], query: str) -> str:
    """Label how trustworthy a Photon feature is for the query"""
    properties = as_dict(feature.get('properties'))
    query_lower = query.lower()
    name = _lower(properties.get('name'))

    if (name and (query_lower in name or name in query_lower)) \
            or properties.get('osm_key') == 'place':
        return GeocodeResult.CONFIDENCE_HIGH

    for key in ('city', 'state', 'street'):
        if query_lower in _lower(properties.get(key)):
            return GeocodeResult.CONFIDENCE_MEDIUM

    return GeocodeResult.CONFIDENCE_LOW


def format_photon_display_name(properties: Dict[str, Any]) -> str:
    parts = [
        properties[key]
        for key in ('name', 'street', 'city', 'state', 'country')
        if properties.get(key)
    ]
    return ', '.join(parts) or UNKNOWN_LOCATION


def mapbox_confidence(feature: Dict[str, Any], query: str) -> str:
    """
    Label how trustworthy a MapBox feature is for the query

    MapBox reports its own match quality as ``relevance`` (0-1); precise
    place types with high relevance, or a place name containing the
    query, count as high confidence.
    """
    try:
        relevance = float(feature.get('relevance') or 0)
    except (ValueError, TypeError):
        relevance = 0.0
    place_types = feature.get('place_type')
    if not isinstance(place_types, list):
        place_types = []
    place_name = _lower(feature.get('place_name'))

    if query.lower() in place_name:
        return GeocodeResult.CONFIDENCE_HIGH
    if relevance >= MAPBOX_HIGH_RELEVANCE and any(
            place_type in MAPBOX_PRECISE_TYPES for place_type in place_types):
        return GeocodeResult.CONFIDENCE_HIGH
    if relevance >= MAPBOX_MEDIUM_RELEVANCE:
        return GeocodeResult.CONFIDENCE_MEDIUM

    return GeocodeResult.CONFIDENCE_LOW

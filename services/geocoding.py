"""
Geocoding Service - Resolves free-text locations through a provider cascade
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from config import GEOCODING_CONFIG
from models.location import GeocodeResult
from services.providers import (GeocodingProvider, MapboxProvider,
                                NominatimProvider, PhotonProvider)

logger = logging.getLogger(__name__)

# Provider failures that count as "no result from this provider"
PROVIDER_ERRORS = (
    requests.exceptions.RequestException,
    ValueError,
    AttributeError,
    KeyError,
    TypeError,
    IndexError,
)

ATTEMPT_FOUND = 'found'
ATTEMPT_EMPTY = 'empty'
ATTEMPT_ERROR = 'error'
ATTEMPT_DISABLED = 'disabled'
ATTEMPT_SKIPPED = 'skipped'

GENERIC_SUGGESTIONS = [
    'Try including province/state (e.g., "Vancouver, BC" or "Seattle, WA")',
    'Use full address (e.g., "123 Main St, Toronto, ON")',
    'Include postal/zip code (e.g., "M5V 3L9" or "90210")',
    'Try neighborhood name (e.g., "Downtown Toronto")',
    'Check spelling of city/region name'
]

CANADA_SUGGESTION = 'For Canadian locations, include province (e.g., "Calgary, AB")'
US_SUGGESTION = 'For US locations, include state (e.g., "Austin, TX")'


def build_default_providers(config: Optional[Dict[str, Any]] = None) -> List[GeocodingProvider]:
    """
    Build the provider chain in order of preference

    Nominatim first for broad coverage, Photon for regional coverage,
    MapBox last and only when an access token is configured.
    """
    config = config or GEOCODING_CONFIG
    timeout = config.get('timeout', 5)

    return [
        NominatimProvider(
            timeout=timeout,
            user_agent=config.get('user_agent', 'TutorConnect/1.0'),
            base_url=config.get('nominatim_url', 'https://nominatim.openstreetmap.org/search')
        ),
        PhotonProvider(
            timeout=timeout,
            base_url=config.get('photon_url', 'https://photon.komoot.io/api/')
        ),
        MapboxProvider(
            access_token=config.get('mapbox_token', ''),
            timeout=timeout,
            base_url=config.get('mapbox_url', 'https://api.mapbox.com/geocoding/v5/mapbox.places')
        ),
    ]


class GeocodingResolver:
    """Resolve location text by trying each provider in order"""

    def __init__(self, providers: Optional[List[GeocodingProvider]] = None,
                 config: Optional[Dict[str, Any]] = None):
        self.providers = list(providers) if providers is not None \
            else build_default_providers(config)

    def resolve(self, location_text: str) -> Optional[GeocodeResult]:
        """
        Resolve a location to coordinates

        Args:
            location_text: Free-text location, e.g. "Vancouver, BC"

        Returns:
            GeocodeResult from the first provider with a usable match,
            or None if every provider came up empty
        """
        result, _ = self.resolve_with_attempts(location_text)
        return result

    def resolve_with_attempts(self, location_text: str) -> Tuple[Optional[GeocodeResult],
                                                                 List[Dict[str, str]]]:
        """
        Resolve a location and report what each provider did

        Returns:
            Tuple of (result or None, list of {'provider', 'outcome'} dicts)
        """
        query = (location_text or '').strip()
        attempts = []

        if not query:
            logger.warning("Empty location passed to geocoding resolver")
            return None, attempts

        result = None
        for provider in self.providers:
            if result is not None:
                attempts.append({'provider': provider.name, 'outcome': ATTEMPT_SKIPPED})
                continue

            if not provider.enabled:
                attempts.append({'provider': provider.name, 'outcome': ATTEMPT_DISABLED})
                continue

            logger.info(f"Trying {provider.name} for: {query}")
            try:
                candidates = provider.fetch_candidates(query)
                if candidates:
                    result = provider.build_result(candidates, query)
            except requests.exceptions.Timeout:
                logger.warning(f"{provider.name} timed out for: {query}")
                attempts.append({'provider': provider.name, 'outcome': ATTEMPT_ERROR})
                continue
            except PROVIDER_ERRORS as e:
                logger.warning(f"{provider.name} failed for {query}: {e}")
                attempts.append({'provider': provider.name, 'outcome': ATTEMPT_ERROR})
                continue

            if result is not None:
                logger.info(
                    f"{provider.name} found result for {query} "
                    f"with {result.confidence} confidence"
                )
                attempts.append({'provider': provider.name, 'outcome': ATTEMPT_FOUND})
            else:
                logger.info(f"{provider.name} found no results for: {query}")
                attempts.append({'provider': provider.name, 'outcome': ATTEMPT_EMPTY})

        if result is None:
            logger.info(f"All geocoding sources failed for: {query}")

        return result, attempts

    def provider_status(self) -> List[Dict[str, Any]]:
        return [
            {'name': provider.name, 'enabled': provider.enabled}
            for provider in self.providers
        ]


def generate_location_suggestions(location_text: str) -> List[str]:
    """
    Build formatting hints for a location that could not be resolved

    Args:
        location_text: The location text that failed to resolve

    Returns:
        List of advisory strings, country-specific hints first
    """
    suggestions = list(GENERIC_SUGGESTIONS)
    location_lower = (location_text or '').lower()

    if 'canada' in location_lower or 'canadian' in location_lower:
        suggestions.insert(0, CANADA_SUGGESTION)

    if 'us' in location_lower or 'america' in location_lower:
        suggestions.insert(0, US_SUGGESTION)

    return suggestions

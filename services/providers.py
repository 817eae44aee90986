"""
Geocoding provider adapters - one per external geocoding service
"""
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from models.location import GeocodeResult, parse_coordinates
from services.scoring import (as_dict, format_photon_display_name,
                              mapbox_confidence, nominatim_confidence,
                              photon_confidence, select_best_nominatim_candidate)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5
DEFAULT_USER_AGENT = 'TutorConnect/1.0 (contact@tutorconnect.com)'


class GeocodingProvider(ABC):
    """
    Abstract forward-geocoding provider.

    Contract:
    - fetch_candidates() performs exactly one bounded HTTP request and
      returns the raw candidate list (possibly empty). Transport and parse
      failures are raised to the caller.
    - build_result() picks one candidate and normalizes it, or returns
      None if no candidate carries usable coordinates.
    """

    name = None

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return True

    @abstractmethod
    def fetch_candidates(self, query: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def build_result(self, candidates: List[Dict[str, Any]],
                     query: str) -> Optional[GeocodeResult]:
        raise NotImplementedError

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                  headers: Optional[Dict[str, str]] = None) -> Any:
        # requests bounds connect and each socket read, not the whole body,
        # so the body is streamed against a deadline
        deadline = time.monotonic() + self.timeout
        response = requests.get(
            url,
            params=params,
            headers=headers,
            timeout=self.timeout,
            stream=True
        )
        try:
            response.raise_for_status()
            body = bytearray()
            for chunk in response.iter_content(chunk_size=8192):
                body.extend(chunk)
                if time.monotonic() > deadline:
                    raise requests.exceptions.Timeout(
                        f"{self.name} response exceeded {self.timeout}s"
                    )
        finally:
            response.close()
        return json.loads(bytes(body).decode('utf-8'))

    @staticmethod
    def _features(data: Any, label: str) -> List[Dict[str, Any]]:
        """Extract the feature list from a GeoJSON FeatureCollection payload"""
        if not data:
            return []
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected {label} payload: {type(data).__name__}")
        features = data.get('features') or []
        if not isinstance(features, list):
            raise ValueError(f"Unexpected {label} features: {type(features).__name__}")
        return features


class NominatimProvider(GeocodingProvider):
    """OpenStreetMap Nominatim - free, broad coverage, biased to Canada/US"""

    name = GeocodeResult.SOURCE_NOMINATIM

    def __init__(self, timeout: float = DEFAULT_TIMEOUT,
                 user_agent: str = DEFAULT_USER_AGENT,
                 base_url: str = 'https://nominatim.openstreetmap.org/search'):
        super().__init__(timeout)
        self.user_agent = user_agent
        self.base_url = base_url

    def fetch_candidates(self, query: str) -> List[Dict[str, Any]]:
        params = {
            'format': 'json',
            'q': query,
            'limit': 5,
            'countrycodes': 'ca,us',
            'accept-language': 'en',
            'addressdetails': 1,
            'bounded': 0,
            'dedupe': 1
        }

        # Nominatim usage policy requires an identifying User-Agent
        headers = {
            'User-Agent': self.user_agent
        }

        data = self._get_json(self.base_url, params=params, headers=headers)
        if not data:
            return []
        if not isinstance(data, list):
            raise ValueError(f"Unexpected Nominatim payload: {type(data).__name__}")
        return data

    def build_result(self, candidates, query):
        usable = [
            item for item in candidates
            if isinstance(item, dict)
            and parse_coordinates(item.get('lat'), item.get('lon')) is not None
        ]
        best = select_best_nominatim_candidate(usable, query)
        if best is None:
            return None

        latitude, longitude = parse_coordinates(best['lat'], best['lon'])
        address = as_dict(best.get('address'))

        return GeocodeResult(
            latitude=latitude,
            longitude=longitude,
            display_name=best.get('display_name', ''),
            confidence=nominatim_confidence(best, query),
            source=self.name,
            country=address.get('country', ''),
            city=address.get('city') or address.get('town') or address.get('village', ''),
            state=address.get('state') or address.get('province', ''),
        )


class PhotonProvider(GeocodingProvider):
    """Komoot Photon - OSM based, better regional coverage"""

    name = GeocodeResult.SOURCE_PHOTON

    def __init__(self, timeout: float = DEFAULT_TIMEOUT,
                 base_url: str = 'https://photon.komoot.io/api/'):
        super().__init__(timeout)
        self.base_url = base_url

    def fetch_candidates(self, query: str) -> List[Dict[str, Any]]:
        params = {
            'q': query,
            'limit': 5,
            'lang': 'en'
        }
        data = self._get_json(self.base_url, params=params)
        return self._features(data, 'Photon')

    def build_result(self, candidates, query):
        for feature in candidates:
            if not isinstance(feature, dict):
                continue
            # Photon returns GeoJSON [lon, lat]
            coords = as_dict(feature.get('geometry')).get('coordinates')
            if not isinstance(coords, list) or len(coords) < 2:
                continue
            parsed = parse_coordinates(coords[1], coords[0])
            if parsed is None:
                continue

            properties = as_dict(feature.get('properties'))
            return GeocodeResult(
                latitude=parsed[0],
                longitude=parsed[1],
                display_name=format_photon_display_name(properties),
                confidence=photon_confidence(feature, query),
                source=self.name,
                country=properties.get('country', ''),
                city=properties.get('city', ''),
                state=properties.get('state', ''),
            )

        return None


class MapboxProvider(GeocodingProvider):
    """MapBox Geocoding API - best North American precision, needs a token"""

    name = GeocodeResult.SOURCE_MAPBOX

    def __init__(self, access_token: str = '', timeout: float = DEFAULT_TIMEOUT,
                 base_url: str = 'https://api.mapbox.com/geocoding/v5/mapbox.places'):
        super().__init__(timeout)
        self.access_token = access_token
        self.base_url = base_url

    @property
    def enabled(self) -> bool:
        return bool(self.access_token)

    def fetch_candidates(self, query: str) -> List[Dict[str, Any]]:
        if not self.enabled:
            return []

        url = f"{self.base_url}/{quote(query, safe='')}.json"
        params = {
            'access_token': self.access_token,
            'country': 'us,ca',
            'limit': 5,
            'types': 'address,poi,place'
        }
        data = self._get_json(url, params=params)
        return self._features(data, 'MapBox')

    def build_result(self, candidates, query):
        for feature in candidates:
            if not isinstance(feature, dict):
                continue
            center = feature.get('center')
            if not isinstance(center, list) or len(center) < 2:
                continue
            parsed = parse_coordinates(center[1], center[0])
            if parsed is None:
                continue

            return GeocodeResult(
                latitude=parsed[0],
                longitude=parsed[1],
                display_name=feature.get('place_name', ''),
                confidence=mapbox_confidence(feature, query),
                source=self.name,
                country=self._context_text(feature, 'country'),
                city=self._context_text(feature, 'place'),
                state=self._context_text(feature, 'region'),
            )

        return None

    @staticmethod
    def _context_text(feature: Dict[str, Any], prefix: str) -> str:
        """Find the name of a context entry such as 'region.123'"""
        place_types = feature.get('place_type')
        if isinstance(place_types, list) and prefix in place_types:
            return feature.get('text', '')
        context = feature.get('context')
        for entry in context if isinstance(context, list) else []:
            if not isinstance(entry, dict):
                continue
            if str(entry.get('id', '')).startswith(f"{prefix}."):
                return entry.get('text', '')
        return ''

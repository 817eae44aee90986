"""
Shared caller-side geocoding layer: result cache, retry and fallback coordinates
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Optional, Tuple

from models.location import GeocodeResult
from services.geocoding import ATTEMPT_ERROR

logger = logging.getLogger(__name__)

# Vancouver, BC
DEFAULT_COORDINATES = (49.2827, -123.1207)

# Single table of well-known places used when a location cannot be geocoded.
# Checked in order, so more specific names come before names they contain.
FALLBACK_COORDINATES = OrderedDict([
    ('north vancouver', (49.3200, -123.0724)),
    ('vancouver', (49.2827, -123.1207)),
    ('burnaby', (49.2488, -122.9805)),
    ('surrey', (49.1913, -122.8490)),
    ('richmond', (49.1666, -123.1336)),
    ('victoria', (48.4284, -123.3656)),
    ('calgary', (51.0447, -114.0719)),
    ('edmonton', (53.5461, -113.4938)),
    ('winnipeg', (49.8951, -97.1384)),
    ('toronto', (43.6532, -79.3832)),
    ('ottawa', (45.4215, -75.6972)),
    ('montreal', (45.5017, -73.5673)),
    ('halifax', (44.6488, -63.5752)),
    ('seattle', (47.6062, -122.3321)),
    ('portland', (45.5152, -122.6784)),
    ('san francisco', (37.7749, -122.4194)),
    ('berkeley', (37.8715, -122.2730)),
    ('los angeles', (34.0522, -118.2437)),
    ('new york', (40.7128, -74.0060)),
    ('chicago', (41.8781, -87.6298)),
    ('boston', (42.3601, -71.0589)),
    ('austin', (30.2672, -97.7431)),
])

ORIGIN_GEOCODED = 'geocoded'
ORIGIN_FALLBACK = 'fallback'
ORIGIN_DEFAULT = 'default'


def fallback_coordinates_for(location_text: str) -> Optional[Tuple[float, float]]:
    """Return coordinates of the first known place named in the text"""
    location_lower = (location_text or '').lower()
    for name, coords in FALLBACK_COORDINATES.items():
        if name in location_lower:
            return coords
    return None


class CachedGeocoder:
    """
    Wrap a GeocodingResolver with a TTL cache and retries

    Found outcomes are cached, keyed by the normalized location text.
    Not-found outcomes are cached only when every provider answered
    without error. Safe to share between request threads.
    """

    def __init__(self, resolver, ttl_seconds: int = 3600, max_entries: int = 1000,
                 retries: int = 2, retry_delay: float = 0.5):
        self.resolver = resolver
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.retries = retries
        self.retry_delay = retry_delay
        self._cache = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def _cache_key(location_text: str) -> str:
        return ' '.join((location_text or '').lower().split())

    def _get_cached(self, key: str):
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return False, None
            stored_at, result = entry
            if time.monotonic() - stored_at > self.ttl_seconds:
                del self._cache[key]
                return False, None
            self._cache.move_to_end(key)
            return True, result

    def _store(self, key: str, result: Optional[GeocodeResult]):
        with self._lock:
            self._cache[key] = (time.monotonic(), result)
            self._cache.move_to_end(key)
            while len(self._cache) > self.max_entries:
                self._cache.popitem(last=False)

    def lookup(self, location_text: str) -> Optional[GeocodeResult]:
        """
        Resolve a location, using the cache when possible

        Args:
            location_text: Free-text location

        Returns:
            GeocodeResult or None when not found
        """
        key = self._cache_key(location_text)
        if not key:
            return None

        hit, result = self._get_cached(key)
        if hit:
            logger.debug(f"Geocoding cache hit for: {key}")
            return result

        attempt = 0
        while True:
            try:
                result, attempts = self.resolver.resolve_with_attempts(location_text)
                break
            except Exception as e:
                if attempt >= self.retries:
                    logger.error(f"Geocoding failed for {location_text} after {attempt + 1} attempts: {e}")
                    raise
                attempt += 1
                logger.warning(f"Geocoding attempt {attempt} failed for {location_text}: {e}")
                time.sleep(self.retry_delay * attempt)

        # Not-found is cached only when no provider errored
        if result is None and any(a['outcome'] == ATTEMPT_ERROR for a in attempts):
            logger.info(f"Not caching unresolved {location_text}: provider errors")
            return None

        self._store(key, result)
        return result

    def coordinates_for(self, location_text: str) -> Tuple[float, float, str]:
        """
        Get coordinates for map display, never failing to produce a point

        Returns:
            Tuple of (latitude, longitude, origin) where origin is
            'geocoded', 'fallback' or 'default'
        """
        result = self.lookup(location_text)
        if result is not None:
            return result.latitude, result.longitude, ORIGIN_GEOCODED

        coords = fallback_coordinates_for(location_text)
        if coords is not None:
            logger.info(f"Using fallback coordinates for: {location_text}")
            return coords[0], coords[1], ORIGIN_FALLBACK

        logger.info(f"Using default coordinates for: {location_text}")
        return DEFAULT_COORDINATES[0], DEFAULT_COORDINATES[1], ORIGIN_DEFAULT

    def clear(self):
        with self._lock:
            self._cache.clear()

    def __len__(self):
        with self._lock:
            return len(self._cache)

import pytest
from unittest.mock import MagicMock, patch
import requests

from models.location import GeocodeResult
from services.geocoding import GeocodingResolver
from services.providers import MapboxProvider, NominatimProvider, PhotonProvider
from services.location_cache import (DEFAULT_COORDINATES, CachedGeocoder,
                                     fallback_coordinates_for)


@pytest.fixture
def toronto_result():
    return GeocodeResult(
        latitude=43.6532,
        longitude=-79.3832,
        display_name="Toronto, Ontario, Canada",
        confidence=GeocodeResult.CONFIDENCE_HIGH,
        source=GeocodeResult.SOURCE_NOMINATIM,
    )


class TestFallbackCoordinates:

    def test_known_city(self):
        assert fallback_coordinates_for("Downtown Toronto, ON") == (43.6532, -79.3832)

    def test_more_specific_name_wins(self):
        assert fallback_coordinates_for("North Vancouver") == (49.3200, -123.0724)

    def test_unknown_place(self):
        assert fallback_coordinates_for("zzqqxx") is None


class TestCachedGeocoder:

    def test_lookup_caches_result(self, toronto_result):
        resolver = MagicMock()
        resolver.resolve_with_attempts.return_value = (toronto_result, [])
        cache = CachedGeocoder(resolver)

        assert cache.lookup("Toronto") is toronto_result
        assert cache.lookup("  toronto ") is toronto_result
        resolver.resolve_with_attempts.assert_called_once_with("Toronto")
        assert len(cache) == 1

    def test_not_found_is_cached(self):
        resolver = MagicMock()
        resolver.resolve_with_attempts.return_value = (None, [])
        cache = CachedGeocoder(resolver)

        assert cache.lookup("zzqqxx") is None
        assert cache.lookup("zzqqxx") is None
        resolver.resolve_with_attempts.assert_called_once()

    def test_empty_location_not_resolved(self):
        resolver = MagicMock()
        cache = CachedGeocoder(resolver)

        assert cache.lookup("   ") is None
        resolver.resolve_with_attempts.assert_not_called()

    def test_expired_entries_are_refreshed(self, toronto_result):
        resolver = MagicMock()
        resolver.resolve_with_attempts.return_value = (toronto_result, [])
        cache = CachedGeocoder(resolver, ttl_seconds=60)

        now = [0]
        with patch('services.location_cache.time.monotonic', side_effect=lambda: now[0]):
            cache.lookup("Toronto")
            now[0] = 30
            cache.lookup("Toronto")
            now[0] = 100
            cache.lookup("Toronto")

        assert resolver.resolve_with_attempts.call_count == 2

    def test_oldest_entries_evicted(self, toronto_result):
        resolver = MagicMock()
        resolver.resolve_with_attempts.return_value = (toronto_result, [])
        cache = CachedGeocoder(resolver, max_entries=2)

        cache.lookup("a")
        cache.lookup("b")
        cache.lookup("c")
        assert len(cache) == 2

        cache.lookup("a")
        assert resolver.resolve_with_attempts.call_count == 4

    @patch('services.location_cache.time.sleep')
    def test_retries_unexpected_errors(self, mock_sleep, toronto_result):
        resolver = MagicMock()
        resolver.resolve_with_attempts.side_effect = [RuntimeError("boom"), (toronto_result, [])]
        cache = CachedGeocoder(resolver, retries=2, retry_delay=0.5)

        assert cache.lookup("Toronto") is toronto_result
        assert resolver.resolve_with_attempts.call_count == 2
        mock_sleep.assert_called_once_with(0.5)

    @patch('services.location_cache.time.sleep')
    def test_raises_after_retries_exhausted(self, mock_sleep):
        resolver = MagicMock()
        resolver.resolve_with_attempts.side_effect = RuntimeError("boom")
        cache = CachedGeocoder(resolver, retries=2)

        with pytest.raises(RuntimeError):
            cache.lookup("Toronto")

        assert resolver.resolve_with_attempts.call_count == 3
        assert len(cache) == 0

    def test_coordinates_for_geocoded(self, toronto_result):
        resolver = MagicMock()
        resolver.resolve_with_attempts.return_value = (toronto_result, [])

        coords = CachedGeocoder(resolver).coordinates_for("Toronto")

        assert coords == (43.6532, -79.3832, "geocoded")

    def test_coordinates_for_fallback(self):
        resolver = MagicMock()
        resolver.resolve_with_attempts.return_value = (None, [])

        coords = CachedGeocoder(resolver).coordinates_for("somewhere in seattle")

        assert coords == (47.6062, -122.3321, "fallback")

    def test_coordinates_for_default(self):
        resolver = MagicMock()
        resolver.resolve_with_attempts.return_value = (None, [])

        coords = CachedGeocoder(resolver).coordinates_for("zzqqxx")

        assert coords == (DEFAULT_COORDINATES[0], DEFAULT_COORDINATES[1], "default")

    def test_clear(self, toronto_result):
        resolver = MagicMock()
        resolver.resolve_with_attempts.return_value = (toronto_result, [])
        cache = CachedGeocoder(resolver)
        cache.lookup("Toronto")

        cache.clear()

        assert len(cache) == 0

    def test_not_found_after_provider_errors_is_not_cached(self, toronto_result):
        resolver = MagicMock()
        resolver.resolve_with_attempts.side_effect = [
            (None, [{'provider': 'nominatim', 'outcome': 'error'},
                    {'provider': 'photon', 'outcome': 'empty'}]),
            (toronto_result, [{'provider': 'nominatim', 'outcome': 'found'}]),
        ]
        cache = CachedGeocoder(resolver)

        assert cache.lookup("Toronto") is None
        assert len(cache) == 0
        assert cache.lookup("Toronto") is toronto_result
        assert resolver.resolve_with_attempts.call_count == 2

    def test_lookup_recovers_after_network_outage(self, vancouver_candidate, make_response):
        """A connection outage does not pin the location to not-found"""
        resolver = GeocodingResolver([
            NominatimProvider(),
            PhotonProvider(),
            MapboxProvider(access_token=""),
        ])
        cache = CachedGeocoder(resolver)

        with patch('requests.get') as mock_get:
            mock_get.side_effect = [
                requests.exceptions.ConnectionError("refused"),
                requests.exceptions.ConnectionError("refused"),
                make_response([vancouver_candidate]),
            ]

            assert cache.lookup("Vancouver") is None
            result = cache.lookup("Vancouver")

        assert result is not None
        assert result.source == "nominatim"
        assert mock_get.call_count == 3

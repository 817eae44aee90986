import pytest
import json
import os
import sys
from unittest.mock import MagicMock
import requests

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app
from routes.geocoding import location_cache


def _make_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.iter_content.return_value = [json.dumps(payload).encode("utf-8")]
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error"
        )
    return response


@pytest.fixture
def make_response():
    """Factory for mocked requests.Response objects returning JSON"""
    return _make_response


@pytest.fixture(autouse=True)
def clear_location_cache():
    """Every test starts with an empty shared geocoding cache"""
    location_cache.clear()
    yield
    location_cache.clear()


@pytest.fixture
def client():
    """Flask test client"""
    app.config["TESTING"] = True

    with app.test_client() as client:
        with app.app_context():
            yield client


@pytest.fixture
def vancouver_candidate():
    """Nominatim search result for Vancouver"""
    return {
        "lat": "49.2608724",
        "lon": "-123.113952",
        "display_name": "Vancouver, BC, Canada",
        "type": "city",
        "class": "place",
        "importance": 0.8,
        "address": {
            "city": "Vancouver",
            "state": "British Columbia",
            "country": "Canada",
        },
    }


@pytest.fixture
def building_candidate():
    """Low signal Nominatim result for a generic building"""
    return {
        "lat": "39.7817",
        "lon": "-89.6501",
        "display_name": "Municipal Building, 800 East Monroe, Springfield, Illinois",
        "type": "building",
        "class": "building",
        "importance": 0.1,
        "address": {
            "city": "Springfield",
            "state": "Illinois",
            "country": "United States",
        },
    }


@pytest.fixture
def photon_payload():
    """Photon API response with a single feature"""
    return {
        "features": [
            {
                "geometry": {"type": "Point", "coordinates": [-122.2730, 37.8715]},
                "properties": {
                    "name": "Berkeley",
                    "osm_key": "place",
                    "state": "California",
                    "country": "United States",
                },
            }
        ]
    }


@pytest.fixture
def mapbox_payload():
    """MapBox geocoding response with a single feature"""
    return {
        "features": [
            {
                "center": [-79.3832, 43.6532],
                "place_name": "Toronto, Ontario, Canada",
                "place_type": ["place"],
                "relevance": 0.95,
                "text": "Toronto",
                "context": [
                    {"id": "region.9196", "text": "Ontario"},
                    {"id": "country.2884", "text": "Canada"},
                ],
            }
        ]
    }

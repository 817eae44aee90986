"""Application configuration loaded from the environment"""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

GEOCODING_CONFIG = {
    'timeout': float(os.getenv('GEOCODING_TIMEOUT', '5')),
    'user_agent': os.getenv(
        'GEOCODING_USER_AGENT',
        'TutorConnect/1.0 (contact@tutorconnect.com)'
    ),
    'nominatim_url': os.getenv('NOMINATIM_URL', 'https://nominatim.openstreetmap.org/search'),
    'photon_url': os.getenv('PHOTON_URL', 'https://photon.komoot.io/api/'),
    'mapbox_url': os.getenv('MAPBOX_URL', 'https://api.mapbox.com/geocoding/v5/mapbox.places'),
    'mapbox_token': os.getenv('MAPBOX_ACCESS_TOKEN', ''),
    'cache_ttl': int(os.getenv('GEOCODING_CACHE_TTL', '3600')),
    'cache_max_entries': int(os.getenv('GEOCODING_CACHE_MAX_ENTRIES', '1000')),
}

FLASK_CONFIG = {
    'secret_key': os.getenv('SECRET_KEY', 'dev-secret-key'),
    'debug': os.getenv('FLASK_DEBUG', 'True').lower() == 'true',
    'port': int(os.getenv('FLASK_PORT', 5000)),
}

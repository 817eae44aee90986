"""Routes package initialization"""

from .geocoding import geocoding_bp
from .health import health_bp

# List of all blueprints to register
ALL_BLUEPRINTS = [
    geocoding_bp,
    health_bp
]

"""
Location models - resolved geocoding results and coordinate parsing
"""
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class GeocodeResult:
    """A single resolved location returned by the geocoding resolver"""

    CONFIDENCE_HIGH = 'high'
    CONFIDENCE_MEDIUM = 'medium'
    CONFIDENCE_LOW = 'low'

    VALID_CONFIDENCES = [CONFIDENCE_HIGH, CONFIDENCE_MEDIUM, CONFIDENCE_LOW]

    SOURCE_NOMINATIM = 'nominatim'
    SOURCE_PHOTON = 'photon'
    SOURCE_MAPBOX = 'mapbox'

    VALID_SOURCES = [SOURCE_NOMINATIM, SOURCE_PHOTON, SOURCE_MAPBOX]

    latitude: float
    longitude: float
    display_name: str
    confidence: str
    source: str
    country: str = ''
    city: str = ''
    state: str = ''

    def __post_init__(self):
        if parse_coordinates(self.latitude, self.longitude) is None:
            raise ValueError(
                f"Invalid coordinates: lat={self.latitude}, lon={self.longitude}"
            )
        if self.confidence not in self.VALID_CONFIDENCES:
            raise ValueError(f"Invalid confidence: {self.confidence}")
        if self.source not in self.VALID_SOURCES:
            raise ValueError(f"Invalid source: {self.source}")

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_api_dict(self) -> Dict[str, Any]:
        """
        Format the result as a lookup endpoint entry

        Coordinates are serialized as strings to match the
        Nominatim-style payload clients already parse.
        """
        return {
            'lat': str(self.latitude),
            'lon': str(self.longitude),
            'display_name': self.display_name,
            'confidence': self.confidence,
            'source': self.source,
            'country': self.country,
            'city': self.city,
            'state': self.state,
            'type': 'geocoded'
        }


def parse_coordinates(latitude, longitude) -> Optional[Tuple[float, float]]:
    """
    Parse and validate a latitude/longitude pair

    Args:
        latitude: Latitude as number or numeric string
        longitude: Longitude as number or numeric string

    Returns:
        Tuple of (latitude, longitude) or None if missing or out of range
    """
    if latitude is None or longitude is None:
        return None
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        return None

    try:
        lat = float(latitude)
        lon = float(longitude)
    except (ValueError, TypeError):
        return None

    if math.isnan(lat) or math.isnan(lon):
        return None

    if not ((-90 <= lat <= 90) and (-180 <= lon <= 180)):
        return None

    return (lat, lon)

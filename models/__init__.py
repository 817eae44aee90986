"""
Models package - Location value types
"""

from .location import GeocodeResult, parse_coordinates

__all__ = ["GeocodeResult", "parse_coordinates"]

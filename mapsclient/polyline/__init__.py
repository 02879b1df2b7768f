"""
Polyline module for the Maps web services client.

Encodes and decodes paths in the Encoded Polyline Algorithm Format used
by directions, elevation and roads requests and responses.
"""

from .polyline_codec import LatLng, PolylineError, decode_polyline, encode_polyline, parse_latlng

__all__ = [
    "LatLng",
    "PolylineError",
    "decode_polyline",
    "encode_polyline",
    "parse_latlng",
]

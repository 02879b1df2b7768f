"""
Client core for the Google Maps web services.

Signs and rate-limits requests, dispatches them with cancellation
support, decodes responses into typed models with a uniform error
taxonomy, and encodes and decodes polylines.
"""

__version__ = "1.0.0"

from .mapping import MapsClient
from .polyline import LatLng, PolylineError, decode_polyline, encode_polyline
from .transport import (
    APIError,
    CanceledError,
    CancelToken,
    ClientConfig,
    CredentialError,
    DecodeError,
    MapsError,
    QuotaExceededError,
    TransportError,
)

__all__ = [
    "__version__",
    "MapsClient",
    "ClientConfig",
    "CancelToken",
    "LatLng",
    "PolylineError",
    "decode_polyline",
    "encode_polyline",
    "MapsError",
    "CredentialError",
    "TransportError",
    "CanceledError",
    "DecodeError",
    "APIError",
    "QuotaExceededError",
]

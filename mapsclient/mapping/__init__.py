"""
Mapping module for the Maps web services client.

This module provides:
- MapsClient: generic JSON and image calls plus endpoint wrappers
- Request types for geocoding, elevation, static maps and place photos
- Pydantic response models
"""

from .mapping_client import EXPERIENCE_ID_HEADER, MapsClient
from .mapping_models import (
    AddressComponent,
    AddressGeometry,
    Bounds,
    ElevationResponse,
    ElevationResult,
    GeocodingResponse,
    GeocodingResult,
    Location,
)
from .mapping_requests import (
    ElevationRequest,
    GeocodingRequest,
    PlacePhotoRequest,
    StaticMapRequest,
    encoded_path,
)

__all__ = [
    # Client
    "MapsClient",
    "EXPERIENCE_ID_HEADER",

    # Requests
    "GeocodingRequest",
    "ElevationRequest",
    "StaticMapRequest",
    "PlacePhotoRequest",
    "encoded_path",

    # Models
    "Location",
    "Bounds",
    "AddressComponent",
    "AddressGeometry",
    "GeocodingResult",
    "GeocodingResponse",
    "ElevationResult",
    "ElevationResponse",
]

"""
Response models for the endpoint wrappers.

Fields the service may omit have defaults; unknown fields are ignored so
that new response attributes do not break decoding.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..polyline.polyline_codec import LatLng


class Location(BaseModel):
    lat: float
    lng: float

    def to_latlng(self) -> LatLng:
        return LatLng(self.lat, self.lng)


class Bounds(BaseModel):
    northeast: Location
    southwest: Location


class StatusResponse(BaseModel):
    """Envelope fields every status-style response carries."""
    status: str = "OK"
    error_message: str = ""


# ==================== GEOCODING ====================

class AddressComponent(BaseModel):
    long_name: str = ""
    short_name: str = ""
    types: List[str] = Field(default_factory=list)


class AddressGeometry(BaseModel):
    location: Location
    location_type: str = ""
    viewport: Optional[Bounds] = None
    bounds: Optional[Bounds] = None
    types: List[str] = Field(default_factory=list)


class GeocodingResult(BaseModel):
    """A single geocoded address."""
    address_components: List[AddressComponent] = Field(default_factory=list)
    formatted_address: str = ""
    geometry: AddressGeometry
    types: List[str] = Field(default_factory=list)
    place_id: str = ""
    partial_match: bool = False


class GeocodingResponse(StatusResponse):
    results: List[GeocodingResult]


# ==================== ELEVATION ====================

class ElevationResult(BaseModel):
    """Elevation in meters at one location."""
    location: Optional[Location] = None
    elevation: float
    resolution: float = 0.0


class ElevationResponse(StatusResponse):
    results: List[ElevationResult]

"""
Catalog of Maps web service endpoints.

Each EndpointDescriptor is an immutable record of where a service lives,
whether it accepts client ID credentials, and how its JSON status is to
be read. The catalog is built once at import time and never mutated;
callers pass descriptors explicitly with every request.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


MAPS_HOST = "https://maps.googleapis.com"
ROADS_HOST = "https://roads.googleapis.com"
GEOLOCATION_HOST = "https://www.googleapis.com"
ADDRESS_VALIDATION_HOST = "https://addressvalidation.googleapis.com"


@dataclass(frozen=True)
class EndpointDescriptor:
    """
    Immutable description of one remote service.

    Attributes:
        name: Catalog key, also used as the metrics label
        host: Scheme and host, without a trailing slash
        path: Request path; also the prefix of the signed message
        accepts_client_id: Whether client ID + signature auth is accepted
        accepts_zero_results: Whether status ZERO_RESULTS is a success
        status_envelope: Whether JSON bodies carry a top-level status field
    """
    name: str
    host: str
    path: str
    accepts_client_id: bool = True
    accepts_zero_results: bool = False
    status_envelope: bool = True

    @property
    def url(self) -> str:
        return f"{self.host}{self.path}"


DIRECTIONS = EndpointDescriptor(
    "directions", MAPS_HOST, "/maps/api/directions/json",
    accepts_zero_results=True,
)
DISTANCE_MATRIX = EndpointDescriptor(
    "distancematrix", MAPS_HOST, "/maps/api/distancematrix/json",
    accepts_zero_results=True,
)
ELEVATION = EndpointDescriptor(
    "elevation", MAPS_HOST, "/maps/api/elevation/json",
)
GEOCODING = EndpointDescriptor(
    "geocode", MAPS_HOST, "/maps/api/geocode/json",
    accepts_zero_results=True,
)
TIMEZONE = EndpointDescriptor(
    "timezone", MAPS_HOST, "/maps/api/timezone/json",
)
PLACES_NEARBY_SEARCH = EndpointDescriptor(
    "place.nearbysearch", MAPS_HOST, "/maps/api/place/nearbysearch/json",
    accepts_zero_results=True,
)
PLACES_TEXT_SEARCH = EndpointDescriptor(
    "place.textsearch", MAPS_HOST, "/maps/api/place/textsearch/json",
    accepts_zero_results=True,
)
PLACE_DETAILS = EndpointDescriptor(
    "place.details", MAPS_HOST, "/maps/api/place/details/json",
)
PLACES_QUERY_AUTOCOMPLETE = EndpointDescriptor(
    "place.queryautocomplete", MAPS_HOST, "/maps/api/place/queryautocomplete/json",
    accepts_zero_results=True,
)
PLACES_AUTOCOMPLETE = EndpointDescriptor(
    "place.autocomplete", MAPS_HOST, "/maps/api/place/autocomplete/json",
    accepts_zero_results=True,
)
FIND_PLACE_FROM_TEXT = EndpointDescriptor(
    "place.findplacefromtext", MAPS_HOST, "/maps/api/place/findplacefromtext/json",
    accepts_client_id=False,
    accepts_zero_results=True,
)
PLACE_PHOTO = EndpointDescriptor(
    "place.photo", MAPS_HOST, "/maps/api/place/photo",
)
STATIC_MAP = EndpointDescriptor(
    "staticmap", MAPS_HOST, "/maps/api/staticmap",
)
SNAP_TO_ROADS = EndpointDescriptor(
    "roads.snaptoroads", ROADS_HOST, "/v1/snapToRoads",
    accepts_client_id=False,
    status_envelope=False,
)
NEAREST_ROADS = EndpointDescriptor(
    "roads.nearestroads", ROADS_HOST, "/v1/nearestRoads",
    accepts_client_id=False,
    status_envelope=False,
)
SPEED_LIMITS = EndpointDescriptor(
    "roads.speedlimits", ROADS_HOST, "/v1/speedLimits",
    accepts_client_id=False,
    status_envelope=False,
)
GEOLOCATION = EndpointDescriptor(
    "geolocation", GEOLOCATION_HOST, "/geolocation/v1/geolocate",
    status_envelope=False,
)
ADDRESS_VALIDATION = EndpointDescriptor(
    "addressvalidation", ADDRESS_VALIDATION_HOST, "/v1:validateAddress",
    status_envelope=False,
)


ENDPOINTS: Mapping[str, EndpointDescriptor] = MappingProxyType({
    endpoint.name: endpoint
    for endpoint in (
        DIRECTIONS,
        DISTANCE_MATRIX,
        ELEVATION,
        GEOCODING,
        TIMEZONE,
        PLACES_NEARBY_SEARCH,
        PLACES_TEXT_SEARCH,
        PLACE_DETAILS,
        PLACES_QUERY_AUTOCOMPLETE,
        PLACES_AUTOCOMPLETE,
        FIND_PLACE_FROM_TEXT,
        PLACE_PHOTO,
        STATIC_MAP,
        SNAP_TO_ROADS,
        NEAREST_ROADS,
        SPEED_LIMITS,
        GEOLOCATION,
        ADDRESS_VALIDATION,
    )
})

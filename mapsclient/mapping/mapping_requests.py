"""
Request types for the endpoint wrappers.

Each request is a dataclass implementing MapsRequest: it validates its
own fields and renders them as query parameters. Credentials are never
part of a request; the transport adds them.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..polyline.polyline_codec import LatLng, encode_polyline
from ..transport.transport_types import MapsRequest, ParamSet


def _join_points(points: Sequence[LatLng]) -> str:
    return "|".join(str(LatLng(*point)) for point in points)


@dataclass
class GeocodingRequest(MapsRequest):
    """
    Geocoding or reverse geocoding request.

    At least one of address, components or latlng is required.
    """
    address: str = ""
    components: Dict[str, str] = field(default_factory=dict)
    bounds: Optional[Tuple[LatLng, LatLng]] = None  # (southwest, northeast)
    region: str = ""
    latlng: Optional[LatLng] = None
    result_type: List[str] = field(default_factory=list)
    location_type: List[str] = field(default_factory=list)
    language: str = ""

    def to_query_params(self) -> ParamSet:
        if not self.address and not self.components and self.latlng is None:
            raise ValueError(
                "Geocoding requires an address or components, or a latlng for reverse geocoding"
            )

        params: ParamSet = {}
        if self.address:
            params["address"] = self.address
        if self.components:
            params["components"] = "|".join(
                f"{name}:{value}" for name, value in sorted(self.components.items())
            )
        if self.bounds is not None:
            params["bounds"] = _join_points(self.bounds)
        if self.region:
            params["region"] = self.region
        if self.latlng is not None:
            params["latlng"] = str(LatLng(*self.latlng))
        if self.result_type:
            params["result_type"] = "|".join(self.result_type)
        if self.location_type:
            params["location_type"] = "|".join(self.location_type)
        if self.language:
            params["language"] = self.language
        return params


@dataclass
class ElevationRequest(MapsRequest):
    """
    Elevation request for discrete locations or samples along a path.

    Both are sent as encoded polylines. samples is required with a path.
    """
    locations: List[LatLng] = field(default_factory=list)
    path: List[LatLng] = field(default_factory=list)
    samples: int = 0

    def to_query_params(self) -> ParamSet:
        if not self.locations and not self.path:
            raise ValueError("Elevation requires locations or a path")
        if self.path and self.samples <= 0:
            raise ValueError("Elevation along a path requires a positive samples count")

        params: ParamSet = {}
        if self.path:
            params["path"] = f"enc:{encode_polyline(self.path)}"
            params["samples"] = str(self.samples)
        if self.locations:
            params["locations"] = f"enc:{encode_polyline(self.locations)}"
        return params


@dataclass
class StaticMapRequest(MapsRequest):
    """
    Static map image request.

    size is required, and center with zoom unless markers position the map.
    markers, paths and styles take the service's pipe-separated descriptor
    syntax, e.g. "color:red|label:A|40.7,-74.0" or "weight:3|enc:<polyline>".
    """
    size: str = ""
    center: str = ""
    zoom: int = 0
    scale: int = 0
    format: str = ""
    language: str = ""
    region: str = ""
    maptype: str = ""
    markers: List[str] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)
    visible: List[LatLng] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)

    def to_query_params(self) -> ParamSet:
        if not self.markers and not self.center and self.zoom == 0:
            raise ValueError("Static maps require center and zoom when no markers are given")
        if not self.size:
            raise ValueError("Static maps require a size")

        params: ParamSet = {"size": self.size}
        if self.center:
            params["center"] = self.center
        if self.zoom > 0:
            params["zoom"] = str(self.zoom)
        if self.scale > 0:
            params["scale"] = str(self.scale)
        if self.format:
            params["format"] = self.format
        if self.language:
            params["language"] = self.language
        if self.region:
            params["region"] = self.region
        if self.maptype:
            params["maptype"] = self.maptype
        if self.markers:
            params["markers"] = list(self.markers)
        if self.paths:
            params["path"] = list(self.paths)
        if self.visible:
            params["visible"] = _join_points(self.visible)
        if self.styles:
            params["style"] = list(self.styles)
        return params


def encoded_path(points: Sequence[LatLng], style: str = "") -> str:
    """Static map path descriptor carrying the points as an encoded polyline."""
    encoded = f"enc:{encode_polyline(points)}"
    return f"{style}|{encoded}" if style else encoded


@dataclass
class PlacePhotoRequest(MapsRequest):
    """Place photo request; one of max_width or max_height is required."""
    photo_reference: str
    max_width: int = 0
    max_height: int = 0

    def to_query_params(self) -> ParamSet:
        if not self.photo_reference:
            raise ValueError("Place photo requires a photo reference")
        if self.max_width <= 0 and self.max_height <= 0:
            raise ValueError("Place photo requires max_width or max_height")

        params: ParamSet = {"photoreference": self.photo_reference}
        if self.max_height > 0:
            params["maxheight"] = str(self.max_height)
        if self.max_width > 0:
            params["maxwidth"] = str(self.max_width)
        return params

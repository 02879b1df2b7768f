"""
Encoded Polyline Algorithm Format codec.

Paths are transmitted to and received from the Maps web services as
compact ASCII strings: each coordinate is scaled to 1e-5 degrees, stored
as a delta from the previous point, zigzag-mapped to a non-negative
integer and written as 5-bit groups offset into the printable range
63..126.

See https://developers.google.com/maps/documentation/utilities/polylinealgorithm
"""

import math
from typing import Iterable, List, NamedTuple, Sequence, Tuple, Union


PRECISION = 1e5
_OFFSET = 63
_CHUNK_BITS = 5
_CHUNK_MASK = 0x1f
_CONTINUATION = 0x20


class PolylineError(ValueError):
    """Raised when a string is not a well-formed encoded polyline."""
    pass


def _format_degrees(value: float) -> str:
    """Shortest exact decimal form, without a trailing ".0"."""
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


class LatLng(NamedTuple):
    """A location on the Earth in decimal degrees."""
    lat: float
    lng: float

    def __str__(self) -> str:
        return f"{_format_degrees(self.lat)},{_format_degrees(self.lng)}"

    def almost_equal(self, other: Sequence[float], epsilon: float = 1e-5) -> bool:
        """Check both coordinates are within epsilon of other's."""
        return abs(self.lat - other[0]) <= epsilon and abs(self.lng - other[1]) <= epsilon


PointLike = Union[LatLng, Tuple[float, float], Sequence[float]]


def parse_latlng(location: str) -> LatLng:
    """
    Parse a "lat,lng" string.

    Raises:
        ValueError: If the string is not two comma-separated numbers
    """
    parts = location.split(",")
    if len(parts) != 2:
        raise ValueError(f"Expected 'lat,lng', got {location!r}")
    return LatLng(float(parts[0]), float(parts[1]))


def _scale(value: float) -> int:
    """Scale degrees to 1e-5 units, rounding half away from zero."""
    scaled = math.floor(abs(value) * PRECISION + 0.5)
    return int(-scaled if value < 0 else scaled)


def _encode_value(value: int, out: List[str]) -> None:
    value = ~(value << 1) if value < 0 else value << 1
    while value >= _CONTINUATION:
        out.append(chr((_CONTINUATION | (value & _CHUNK_MASK)) + _OFFSET))
        value >>= _CHUNK_BITS
    out.append(chr(value + _OFFSET))


def encode_polyline(points: Iterable[PointLike]) -> str:
    """
    Encode an ordered sequence of (lat, lng) pairs as a polyline string.

    Args:
        points: LatLng values or any (lat, lng) pairs

    Returns:
        The encoded polyline ("" for an empty sequence)
    """
    out: List[str] = []
    prev_lat = 0
    prev_lng = 0

    for point in points:
        lat = _scale(point[0])
        lng = _scale(point[1])

        _encode_value(lat - prev_lat, out)
        _encode_value(lng - prev_lng, out)

        prev_lat, prev_lng = lat, lng

    return "".join(out)


def decode_polyline(polyline: str) -> List[LatLng]:
    """
    Decode a polyline string into its points.

    Args:
        polyline: Encoded polyline

    Returns:
        List of LatLng, in order ([] for an empty string)

    Raises:
        PolylineError: On characters outside 63..126, a truncated value,
            or a latitude without its longitude
    """
    values: List[int] = []
    result = 0
    shift = 0
    pending = False

    for index, char in enumerate(polyline):
        chunk = ord(char) - _OFFSET
        if chunk < 0 or chunk > 0x3f:
            raise PolylineError(f"Invalid polyline character {char!r} at offset {index}")

        result |= (chunk & _CHUNK_MASK) << shift
        shift += _CHUNK_BITS
        pending = True

        if chunk < _CONTINUATION:
            values.append(~(result >> 1) if result & 1 else result >> 1)
            result = 0
            shift = 0
            pending = False

    if pending:
        raise PolylineError("Polyline ends in the middle of a value")
    if len(values) % 2:
        raise PolylineError("Polyline has a latitude without a longitude")

    path: List[LatLng] = []
    lat = 0
    lng = 0
    for i in range(0, len(values), 2):
        lat += values[i]
        lng += values[i + 1]
        path.append(LatLng(lat / PRECISION, lng / PRECISION))

    return path

# looproute/services/polyline.py
from typing import List, Tuple

from looproute.models.routing import RoutePoint


def _read_value(encoded: str, index: int) -> Tuple[int, int]:
    """
    Read one zig-zag varint starting at index; return (value, next index).
    """
    shift = 0
    result = 0
    while True:
        if index >= len(encoded):
            raise ValueError("Truncated polyline")
        byte = ord(encoded[index]) - 63
        index += 1
        result |= (byte & 0x1F) << shift
        shift += 5
        if byte < 0x20:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def decode_polyline(encoded: str, include_elevation: bool = False) -> List[RoutePoint]:
    """
    Decode a GraphHopper encoded polyline.

    Coordinates use precision 1e5 in (lat, lng) order. When elevation is
    included, every point carries a third value at precision 1e2.
    """
    points: List[RoutePoint] = []
    index = 0
    lat = lng = ele = 0

    while index < len(encoded):
        d_lat, index = _read_value(encoded, index)
        d_lng, index = _read_value(encoded, index)
        lat += d_lat
        lng += d_lng

        elevation = None
        if include_elevation:
            d_ele, index = _read_value(encoded, index)
            ele += d_ele
            elevation = ele / 100.0

        points.append(RoutePoint(lat=lat / 1e5, lng=lng / 1e5, elevation=elevation))

    return points

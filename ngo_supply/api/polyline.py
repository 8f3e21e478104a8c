# ngo_supply/api/polyline.py
"""Decoder for Google's encoded polyline format.

Each coordinate component is a zig-zag encoded delta from the previous point,
written as a little-endian sequence of 5-bit chunks. Every chunk is stored as
a printable character offset by 63, with 0x20 marking that another chunk
follows. Values are fixed point with five decimals.
"""

from __future__ import annotations

from typing import List, Tuple

from ngo_supply.api.errors import MalformedPolyline
from ngo_supply.api.models import Coordinate

PRECISION = 1e5

_OFFSET = 63
_MAX_CHAR = 126
_CONTINUATION = 0x20
_CHUNK_MASK = 0x1F


def _read_varint(encoded: str, index: int) -> Tuple[int, int]:
    """Read one signed delta starting at ``index``.

    Returns the decoded value and the index just past it.
    """
    result = 0
    shift = 0
    length = len(encoded)

    while True:
        if index >= length:
            raise MalformedPolyline(
                f"Polyline ends in the middle of a value at offset {index}"
            )
        code = ord(encoded[index])
        if code < _OFFSET or code > _MAX_CHAR:
            raise MalformedPolyline(
                f"Invalid polyline character {encoded[index]!r} at offset {index}"
            )
        chunk = code - _OFFSET
        index += 1
        result |= (chunk & _CHUNK_MASK) << shift
        shift += 5
        if chunk < _CONTINUATION:
            break

    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def decode(encoded: str) -> List[Coordinate]:
    """Decode an encoded polyline into a list of coordinates.

    An empty string decodes to an empty list. Raises MalformedPolyline when
    the string stops mid-value, holds characters outside the encoding
    alphabet, or carries a latitude without its longitude.
    """
    if not encoded:
        return []

    points: List[Coordinate] = []
    index = 0
    lat = 0
    lng = 0
    length = len(encoded)

    while index < length:
        dlat, index = _read_varint(encoded, index)
        if index >= length:
            raise MalformedPolyline("Polyline has a latitude without a longitude")
        dlng, index = _read_varint(encoded, index)
        lat += dlat
        lng += dlng
        points.append(Coordinate(lat / PRECISION, lng / PRECISION))

    return points


def bounds(points: List[Coordinate]) -> dict:
    """Bounding box of ``points`` as north/south/east/west."""
    if not points:
        return {}
    lats = [p.lat for p in points]
    lngs = [p.lng for p in points]
    return {
        "north": max(lats),
        "south": min(lats),
        "east": max(lngs),
        "west": min(lngs),
    }


__all__ = ["decode", "bounds", "PRECISION"]

"""Geometry text formats.

Converts between the persisted geometry text (storage frame) and the
in-memory ``Feature`` (display frame):

- GeometryFormat: Abstract base class a host can implement to substitute
  another text format
- GeoJSONFormat: Default adapter reading and writing GeoJSON geometry
"""

from map_widget.formats.base import GeometryFormat
from map_widget.formats.geojson import (
    GeoJSONFormat,
    get_default_format,
    parse,
    serialize,
)

__all__ = [
    "GeoJSONFormat",
    "GeometryFormat",
    "get_default_format",
    "parse",
    "serialize",
]

"""GeoJSON geometry adapter.

Reads GeoJSON geometry text in the storage frame (EPSG:4326) into a
display-frame ``Feature`` (EPSG:3857) and writes it back with a fixed
number of decimal digits.

Accepted input:
- A bare geometry object: ``{"type": "Point", "coordinates": [lon, lat]}``
- A single ``Feature`` object wrapping one of the above

Output is always a compact bare geometry object. Altitude values are
dropped on read. Unclosed polygon rings are closed with a warning.
Written positions are clamped so rounding never leaves the range the
reader accepts.
"""

from __future__ import annotations

import json
import logging
import math
from typing import TYPE_CHECKING

from map_widget.core.constants import (
    DEFAULT_DECIMALS,
    GEOMETRY_TYPES,
    LINE_STRING,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MAX_MERCATOR_LATITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    POINT,
    POLYGON,
)
from map_widget.core.exceptions import FormatError, GeometryTypeMismatchError
from map_widget.formats.base import GeometryFormat
from map_widget.models.feature import Feature
from map_widget.utils.projection import transform_geometry, transformers

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from map_widget.core.config import FieldConfig

logger = logging.getLogger("map_widget.formats.geojson")

# Minimum positions per geometry part (closing position included for rings)
MIN_LINE_POSITIONS = 2
MIN_RING_POSITIONS = 4

Position = tuple[float, float]


class GeoJSONFormat(GeometryFormat):
    """Default geometry adapter.

    Args:
        geometry_type: Family every read geometry must belong to. ``None``
            accepts any of Point, LineString and Polygon.
    """

    def __init__(self, geometry_type: str | None = None) -> None:
        if geometry_type is not None and geometry_type not in GEOMETRY_TYPES:
            msg = f"Unsupported geometry type {geometry_type!r}"
            raise FormatError(msg, recoverable=False)
        self.geometry_type = geometry_type
        self._to_display, self._to_storage = transformers()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read_feature(self, text: str) -> Feature | None:
        if text is None or not str(text).strip():
            return None

        try:
            obj = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"Not valid JSON: {exc}"
            raise FormatError(msg) from exc

        if not isinstance(obj, dict):
            msg = f"Expected a GeoJSON object, got {type(obj).__name__}"
            raise FormatError(msg)

        properties: dict[str, object] = {}
        if obj.get("type") == "Feature":
            raw_props = obj.get("properties") or {}
            if not isinstance(raw_props, dict):
                msg = f"Feature properties must be an object, got {type(raw_props).__name__}"
                raise FormatError(msg)
            properties = dict(raw_props)
            obj = obj.get("geometry")
            if not isinstance(obj, dict):
                msg = "Feature has no geometry"
                raise FormatError(msg)

        geom_type = obj.get("type")
        if geom_type not in GEOMETRY_TYPES:
            msg = f"Unsupported GeoJSON geometry type: {geom_type!r}"
            raise FormatError(msg)
        if self.geometry_type is not None and geom_type != self.geometry_type:
            raise GeometryTypeMismatchError(self.geometry_type, str(geom_type))

        if "coordinates" not in obj:
            msg = f"{geom_type} has no coordinates"
            raise FormatError(msg)

        storage_geom = _build_geometry(str(geom_type), obj["coordinates"])
        _check_projectable(storage_geom)
        display_geom = transform_geometry(storage_geom, self._to_display)
        _check_finite(display_geom)

        logger.debug(
            "Geometry read | type=%s | bounds=%s",
            display_geom.geom_type,
            display_geom.bounds,
        )
        return Feature(geometry=display_geom, properties=properties)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write_geometry(self, feature: Feature, *, decimals: int = DEFAULT_DECIMALS) -> str:
        from shapely.geometry import mapping

        storage_geom = transform_geometry(feature.geometry, self._to_storage)
        payload = mapping(storage_geom)
        return json.dumps(
            {
                "type": payload["type"],
                "coordinates": _round_coords(payload["coordinates"], decimals),
            },
            separators=(",", ":"),
        )


# ---------------------------------------------------------------------------
# Module-level convenience API
# ---------------------------------------------------------------------------


def get_default_format(config: FieldConfig | None = None) -> GeoJSONFormat:
    """Build the default adapter for a field, bound to its geometry family."""
    return GeoJSONFormat(config.type if config is not None else None)


def parse(text: str, geometry_type: str | None = None) -> Feature | None:
    """Parse GeoJSON geometry text into a display-frame feature.

    Raises:
        FormatError: If non-empty text is not a readable geometry of
            *geometry_type*.
    """
    return GeoJSONFormat(geometry_type).read_feature(text)


def serialize(feature: Feature, precision: int = DEFAULT_DECIMALS) -> str:
    """Serialize a feature to storage-frame GeoJSON rounded to *precision* digits."""
    return GeoJSONFormat().write_geometry(feature, decimals=precision)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_geometry(geom_type: str, coordinates: object) -> BaseGeometry:
    """Validate raw GeoJSON coordinates and build a storage-frame geometry."""
    from shapely.geometry import LineString, Point, Polygon

    if geom_type == POINT:
        return Point(_position(coordinates, "Point"))

    if geom_type == LINE_STRING:
        positions = _positions(coordinates, "LineString")
        if len(positions) < MIN_LINE_POSITIONS:
            msg = (
                f"LineString needs at least {MIN_LINE_POSITIONS} positions, "
                f"got {len(positions)}"
            )
            raise FormatError(msg)
        return LineString(positions)

    if geom_type == POLYGON:
        if not isinstance(coordinates, list) or not coordinates:
            msg = "Polygon coordinates must be a non-empty list of rings"
            raise FormatError(msg)
        rings = [_ring(raw, idx) for idx, raw in enumerate(coordinates)]
        return Polygon(rings[0], holes=rings[1:] or None)

    msg = f"Unsupported GeoJSON geometry type: {geom_type!r}"
    raise FormatError(msg)


def _position(raw: object, context: str) -> Position:
    """Convert one GeoJSON position to ``(lon, lat)``, dropping altitude."""
    if not isinstance(raw, list | tuple) or len(raw) < 2:
        msg = f"Malformed position in {context}: {raw!r}"
        raise FormatError(msg)
    lon, lat = raw[0], raw[1]
    if isinstance(lon, bool) or isinstance(lat, bool):
        msg = f"Malformed position in {context}: {raw!r}"
        raise FormatError(msg)
    if not isinstance(lon, int | float) or not isinstance(lat, int | float):
        msg = f"Non-numeric position in {context}: {raw!r}"
        raise FormatError(msg)
    if not (MIN_LONGITUDE <= lon <= MAX_LONGITUDE):
        msg = (
            f"Longitude {lon} out of WGS 84 range [{MIN_LONGITUDE}, {MAX_LONGITUDE}] "
            f"in {context}"
        )
        raise FormatError(msg)
    if not (MIN_LATITUDE <= lat <= MAX_LATITUDE):
        msg = (
            f"Latitude {lat} out of WGS 84 range [{MIN_LATITUDE}, {MAX_LATITUDE}] "
            f"in {context}"
        )
        raise FormatError(msg)
    return (float(lon), float(lat))


def _positions(raw: object, context: str) -> list[Position]:
    if not isinstance(raw, list | tuple):
        msg = f"{context} coordinates must be a list of positions"
        raise FormatError(msg)
    return [_position(item, context) for item in raw]


def _ring(raw: object, index: int) -> list[Position]:
    """Validate a polygon ring, closing it if the last position is missing."""
    context = f"Polygon ring {index}"
    positions = _positions(raw, context)
    if positions and positions[0] != positions[-1]:
        logger.warning("Auto-closing unclosed ring | ring=%d", index)
        positions.append(positions[0])
    if len(positions) < MIN_RING_POSITIONS:
        msg = (
            f"{context} needs at least {MIN_RING_POSITIONS} positions "
            f"(including closure), got {len(positions)}"
        )
        raise FormatError(msg)
    return positions


def _check_projectable(geom: BaseGeometry) -> None:
    """Reject latitudes the display projection cannot represent (e.g. the poles)."""
    _, min_lat, _, max_lat = geom.bounds
    if min_lat < -MAX_MERCATOR_LATITUDE or max_lat > MAX_MERCATOR_LATITUDE:
        msg = (
            f"Latitude beyond Web Mercator limit of +/-{MAX_MERCATOR_LATITUDE:.4f}; "
            "geometry cannot be shown on the map"
        )
        raise FormatError(msg)


def _check_finite(geom: BaseGeometry) -> None:
    if not all(math.isfinite(v) for v in geom.bounds):
        msg = "Geometry cannot be projected to the display frame"
        raise FormatError(msg)


def _round_coords(value: object, decimals: int) -> object:
    """Round nested coordinate sequences, converting tuples to lists."""
    if value and isinstance(value[0], int | float):  # type: ignore[index]
        return _round_position(value, decimals)  # type: ignore[arg-type]
    return [_round_coords(item, decimals) for item in value]  # type: ignore[attr-defined]


def _round_position(position: tuple[float, ...], decimals: int) -> list[int | float]:
    """Round one ``(lon, lat)`` position without leaving the readable range."""
    # Rounding must not push a latitude past what read_feature accepts
    scale = 10**decimals
    lat_limit = math.floor(MAX_MERCATOR_LATITUDE * scale) / scale
    lon = min(max(float(position[0]), MIN_LONGITUDE), MAX_LONGITUDE)
    lat = min(max(float(position[1]), -lat_limit), lat_limit)
    return [_round_number(lon, decimals), _round_number(lat, decimals)]


def _round_number(value: float, decimals: int) -> int | float:
    rounded = round(value, decimals)
    if rounded.is_integer():
        return int(rounded)
    return rounded

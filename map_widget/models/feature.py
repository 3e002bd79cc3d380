"""Data model for the editable map feature.

A Feature wraps a single shapely geometry (Point, LineString or Polygon)
whose coordinates are in the display frame (EPSG:3857 metres). It is the
output of the format adapter and of the draw interaction, and the only
thing the feature layer ever holds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry


@dataclass(frozen=True, slots=True)
class Extent:
    """Axis-aligned bounding box ``(min_x, min_y, max_x, max_y)``."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_bounds(cls, bounds: tuple[float, float, float, float]) -> Extent:
        """Build from a shapely-style ``bounds`` tuple."""
        min_x, min_y, max_x, max_y = bounds
        return cls(min_x, min_y, max_x, max_y)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def expanded(self, dx: float, dy: float | None = None) -> Extent:
        """Return a copy grown by *dx* horizontally and *dy* vertically on each side."""
        if dy is None:
            dy = dx
        return Extent(self.min_x - dx, self.min_y - dy, self.max_x + dx, self.max_y + dy)

    def contains(self, other: Extent, *, tolerance: float = 0.0) -> bool:
        """Whether *other* lies fully inside this extent."""
        return (
            self.min_x - tolerance <= other.min_x
            and self.min_y - tolerance <= other.min_y
            and other.max_x <= self.max_x + tolerance
            and other.max_y <= self.max_y + tolerance
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


@dataclass(frozen=True, slots=True, eq=False)
class Feature:
    """A single editable shape in the display frame.

    Attributes:
        geometry: Shapely ``Point``, ``LineString`` or ``Polygon`` in
            EPSG:3857 metres.
        properties: Properties carried over from a GeoJSON ``Feature``
            input. Never written back; the widget emits bare geometry.

    Features compare and hash by identity: each draw or modify produces a
    new one, and the layer tracks which instance it holds.
    """

    geometry: BaseGeometry
    properties: dict[str, object] = field(default_factory=dict)

    @property
    def geometry_type(self) -> str:
        """GeoJSON family name (``"Point"``, ``"LineString"``, ``"Polygon"``)."""
        return self.geometry.geom_type

    @property
    def extent(self) -> Extent:
        """Bounding box of the geometry in the display frame."""
        return Extent.from_bounds(self.geometry.bounds)

    @property
    def vertex_count(self) -> int:
        """Number of positions (exterior ring with its closing position for polygons)."""
        if self.geometry_type == "Polygon":
            return len(self.geometry.exterior.coords)
        return len(self.geometry.coords)

    def with_geometry(self, geometry: BaseGeometry) -> Feature:
        """Return a copy holding *geometry* and the same properties."""
        return Feature(geometry=geometry, properties=dict(self.properties))

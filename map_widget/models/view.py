"""Data model for the map viewport.

Zoom and resolution follow the Web Mercator tiling scheme: zoom 0 shows
the whole world in one 256 px tile, and every zoom step halves the
metres-per-pixel resolution.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from map_widget.core.constants import MAX_RESOLUTION
from map_widget.models.feature import Extent


@dataclass(frozen=True, slots=True)
class ViewState:
    """Viewport center (display frame) and zoom level.

    Attributes:
        center: ``(x, y)`` in EPSG:3857 metres.
        zoom: Zoom level, fractional values allowed.
    """

    center: tuple[float, float] = (0.0, 0.0)
    zoom: float = 0.0

    @classmethod
    def from_resolution(cls, center: tuple[float, float], resolution: float) -> ViewState:
        """Build a view from metres-per-pixel instead of zoom."""
        return cls(center=center, zoom=zoom_for_resolution(resolution))

    @property
    def resolution(self) -> float:
        """Metres per pixel at this zoom."""
        return resolution_for_zoom(self.zoom)

    def visible_extent(self, size: tuple[int, int]) -> Extent:
        """Display-frame extent covered by a viewport of *size* ``(width, height)`` px."""
        half_w = size[0] * self.resolution / 2
        half_h = size[1] * self.resolution / 2
        cx, cy = self.center
        return Extent(cx - half_w, cy - half_h, cx + half_w, cy + half_h)

    def to_dict(self) -> dict[str, object]:
        return {"center": list(self.center), "zoom": self.zoom}


def resolution_for_zoom(zoom: float) -> float:
    """Metres per pixel at *zoom*."""
    return MAX_RESOLUTION / 2**zoom


def zoom_for_resolution(resolution: float) -> float:
    """Zoom level giving *resolution* metres per pixel."""
    return math.log2(MAX_RESOLUTION / resolution)

"""Frame transforms between the storage and display projections.

Both transformers are built once per process and always use
``(x, y) == (lon, lat)`` axis order.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from map_widget.core.constants import (
    DISPLAY_PROJECTION,
    STORAGE_PROJECTION,
    WEB_MERCATOR_HALF_WIDTH_M,
)

if TYPE_CHECKING:
    from pyproj import Transformer
    from shapely.geometry.base import BaseGeometry


@lru_cache(maxsize=1)
def transformers() -> tuple[Transformer, Transformer]:
    """Return the ``(storage -> display, display -> storage)`` transformer pair."""
    from pyproj import Transformer

    to_display = Transformer.from_crs(STORAGE_PROJECTION, DISPLAY_PROJECTION, always_xy=True)
    to_storage = Transformer.from_crs(DISPLAY_PROJECTION, STORAGE_PROJECTION, always_xy=True)
    return to_display, to_storage


def project_to_display(lon: float, lat: float) -> tuple[float, float]:
    """Project a storage-frame ``(lon, lat)`` to display-frame metres."""
    x, y = transformers()[0].transform(lon, lat)
    return (x, y)


def project_to_storage(x: float, y: float) -> tuple[float, float]:
    """Unproject display-frame metres to storage-frame ``(lon, lat)``."""
    lon, lat = transformers()[1].transform(x, y)
    return (lon, lat)


def clamp_to_world(x: float, y: float) -> tuple[float, float]:
    """Pull a display-frame coordinate back inside the Web Mercator square.

    Outside the square the inverse projection wraps longitudes across the
    antimeridian and yields latitudes the storage format rejects.
    """
    limit = WEB_MERCATOR_HALF_WIDTH_M
    return (min(max(x, -limit), limit), min(max(y, -limit), limit))


def transform_geometry(geom: BaseGeometry, transformer: Transformer) -> BaseGeometry:
    """Apply *transformer* to every vertex of a shapely geometry."""
    import shapely

    return shapely.transform(geom, transformer.transform, interleaved=False)

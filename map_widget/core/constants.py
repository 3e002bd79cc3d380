"""Shared widget constants.

Reference frames, viewport defaults and the fit parameters used when an
existing geometry is shown on mount.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Reference frames
# ---------------------------------------------------------------------------

STORAGE_PROJECTION: str = "EPSG:4326"
"""Frame of persisted geometry text (longitude/latitude degrees)."""

DISPLAY_PROJECTION: str = "EPSG:3857"
"""Frame of the rendering surface (Web Mercator metres)."""

# ---------------------------------------------------------------------------
# Geometry families
# ---------------------------------------------------------------------------

POINT = "Point"
LINE_STRING = "LineString"
POLYGON = "Polygon"

GEOMETRY_TYPES: frozenset[str] = frozenset({POINT, LINE_STRING, POLYGON})

# ---------------------------------------------------------------------------
# Field defaults
# ---------------------------------------------------------------------------

DEFAULT_GEOMETRY_TYPE = POLYGON
DEFAULT_LATITUDE = 0.0
DEFAULT_LONGITUDE = 0.0
DEFAULT_ZOOM = 2.0
DEFAULT_DECIMALS = 7
DEFAULT_HEIGHT = "400px"

MIN_ZOOM = 0.0
MAX_ZOOM = 28.0
MAX_DECIMALS = 15

# ---------------------------------------------------------------------------
# View fitting
# ---------------------------------------------------------------------------

FIT_PADDING: tuple[int, int, int, int] = (80, 80, 80, 80)
"""Pixel inset (top, right, bottom, left) applied when fitting a feature."""

FIT_MAX_ZOOM = 16.0
"""Upper zoom bound when fitting, keeps points and tiny shapes in context."""

DEFAULT_VIEWPORT_SIZE: tuple[int, int] = (800, 400)
"""Viewport (width, height) in pixels when the engine reports none."""

# ---------------------------------------------------------------------------
# Web Mercator tiling
# ---------------------------------------------------------------------------

WEB_MERCATOR_HALF_WIDTH_M = 20037508.342789244
TILE_SIZE_PX = 256
MAX_RESOLUTION = 2 * WEB_MERCATOR_HALF_WIDTH_M / TILE_SIZE_PX
"""Metres per pixel at zoom 0."""

# WGS 84 coordinate bounds
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0

MAX_MERCATOR_LATITUDE = 85.0511287798066
"""Latitude where Web Mercator reaches its square bounds."""

# ---------------------------------------------------------------------------
# Base map
# ---------------------------------------------------------------------------

OSM_TILE_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTRIBUTION = "© OpenStreetMap contributors"

"""Initial viewport computation.

The map opens either at the configured center and zoom, or, when the
field already holds a geometry, fitted to that geometry's extent. The two
are mutually exclusive: an existing feature always wins.

Fitting works like a tile map's ``fit``: the extent must fit inside the
viewport minus a pixel padding on each side, and the zoom is capped so a
point or a tiny shape does not open at street-level-and-beyond.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from map_widget.core.constants import (
    DEFAULT_VIEWPORT_SIZE,
    FIT_MAX_ZOOM,
    FIT_PADDING,
    MIN_ZOOM,
)
from map_widget.models.view import ViewState, resolution_for_zoom, zoom_for_resolution
from map_widget.utils.projection import project_to_display

if TYPE_CHECKING:
    from map_widget.core.config import FieldConfig
    from map_widget.models.feature import Extent, Feature

logger = logging.getLogger("map_widget.view")


def initial_view(
    config: FieldConfig,
    initial_feature: Feature | None,
    *,
    size: tuple[int, int] = DEFAULT_VIEWPORT_SIZE,
) -> ViewState:
    """Compute the viewport the map opens with.

    Args:
        config: Field configuration (center and zoom are read only when
            there is no initial feature).
        initial_feature: The feature parsed from the field value, if any.
        size: Viewport ``(width, height)`` in pixels.

    Returns:
        The initial ``ViewState``. Pure: the same inputs always give the
        same view.
    """
    if initial_feature is None:
        center = project_to_display(config.longitude, config.latitude)
        view = ViewState(center=center, zoom=config.zoom)
        logger.debug(
            "Initial view from config | lon=%.6f | lat=%.6f | zoom=%.2f",
            config.longitude,
            config.latitude,
            config.zoom,
        )
        return view

    view = fit_extent(initial_feature.extent, size)
    logger.debug(
        "Initial view fitted | type=%s | zoom=%.2f | center=(%.1f, %.1f)",
        initial_feature.geometry_type,
        view.zoom,
        *view.center,
    )
    return view


def fit_extent(
    extent: Extent,
    size: tuple[int, int],
    *,
    padding: tuple[int, int, int, int] = FIT_PADDING,
    max_zoom: float = FIT_MAX_ZOOM,
    min_zoom: float = MIN_ZOOM,
) -> ViewState:
    """Return the view that shows *extent* inside the padded viewport.

    Args:
        extent: Display-frame extent to show.
        size: Viewport ``(width, height)`` in pixels.
        padding: Pixel inset ``(top, right, bottom, left)``.
        max_zoom: Zoom never exceeds this (degenerate extents land here).
        min_zoom: Zoom never goes below this.

    Returns:
        A ``ViewState`` whose visible extent contains *extent* grown by the
        padding, unless *min_zoom* prevents zooming out far enough.
    """
    top, right, bottom, left = padding
    # A viewport smaller than its padding still gets one usable pixel
    inner_width = max(size[0] - left - right, 1)
    inner_height = max(size[1] - top - bottom, 1)

    resolution = max(extent.width / inner_width, extent.height / inner_height)
    resolution = max(resolution, resolution_for_zoom(max_zoom))
    resolution = min(resolution, resolution_for_zoom(min_zoom))

    # Keep the extent centered in the padded area, not the full viewport
    cx, cy = extent.center
    cx += (right - left) / 2 * resolution
    cy += (top - bottom) / 2 * resolution

    zoom = min(max(zoom_for_resolution(resolution), min_zoom), max_zoom)
    return ViewState(center=(cx, cy), zoom=zoom)

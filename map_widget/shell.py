"""Presentation shell for the map control.

Styling constants for the editable feature and the container the map
engine renders into. Nothing here carries edit logic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from map_widget.core.constants import DEFAULT_HEIGHT

COLOR_STROKE = "#3a69c7"
COLOR_FILL = "#3a69c744"

DEFAULT_HEIGHT_PX = 400

_PX_LENGTH = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*px\s*$")


@dataclass(frozen=True, slots=True)
class FeatureStyle:
    """Stroke and fill for the editable feature.

    Points render as a circle with ``point_radius`` and
    ``point_stroke_width``; lines and polygon outlines use
    ``stroke_width``.
    """

    stroke_color: str = COLOR_STROKE
    fill_color: str = COLOR_FILL
    stroke_width: int = 3
    point_radius: int = 5
    point_stroke_width: int = 2


FEATURE_STYLE = FeatureStyle()


@dataclass(frozen=True, slots=True)
class ContainerSpec:
    """What the host renders around the map surface."""

    class_name: str
    css: str
    height: str


def container_css(height: str = DEFAULT_HEIGHT) -> str:
    return f"padding: 0; overflow: hidden; height: {height};"


def render_container(height: str = DEFAULT_HEIGHT, class_name_wrapper: str = "") -> ContainerSpec:
    """Describe the map container for the host to render."""
    class_name = " ".join(part for part in (class_name_wrapper, "map-widget") if part)
    return ContainerSpec(class_name=class_name, css=container_css(height), height=height)


def height_to_pixels(height: str, default: int = DEFAULT_HEIGHT_PX) -> int:
    """Pixel height for a CSS length; non-pixel units fall back to *default*."""
    match = _PX_LENGTH.match(height or "")
    if match is None:
        return default
    return max(int(float(match.group(1))), 1)

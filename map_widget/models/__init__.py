"""Data models.

- Feature: One editable shape carried in the display frame
- Extent: Axis-aligned bounding box in the display frame
- ViewState: Map viewport center and zoom
"""

from map_widget.models.feature import Extent, Feature
from map_widget.models.view import ViewState

__all__ = [
    "Extent",
    "Feature",
    "ViewState",
]

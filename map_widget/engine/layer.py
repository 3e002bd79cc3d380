"""Editable feature layer.

Owns the single feature shown and edited on the map. There is no
collection to clear and refill: ``replace`` swaps the held feature in one
step, so no observer can ever see an empty layer between two edits.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from map_widget.shell import FEATURE_STYLE, FeatureStyle

if TYPE_CHECKING:
    from map_widget.models.feature import Extent, Feature

logger = logging.getLogger("map_widget.engine.layer")


class FeatureLayer:
    """Single-slot vector layer.

    Attributes:
        style: Rendering style for the held feature.
        revision: Incremented on every change, for engines that redraw
            lazily.
    """

    def __init__(self, feature: Feature | None = None, *, style: FeatureStyle = FEATURE_STYLE) -> None:
        self._feature = feature
        self.style = style
        self.revision = 0

    @property
    def feature(self) -> Feature | None:
        return self._feature

    @property
    def features(self) -> list[Feature]:
        """The held feature as a list (empty or one element)."""
        return [self._feature] if self._feature is not None else []

    @property
    def extent(self) -> Extent | None:
        """Extent of the held feature, ``None`` when empty."""
        return self._feature.extent if self._feature is not None else None

    def replace(self, feature: Feature) -> Feature | None:
        """Hold *feature* instead of the current one; return the previous feature."""
        previous = self._feature
        self._feature = feature
        self.revision += 1
        logger.debug(
            "Layer feature replaced | type=%s | had_previous=%s | revision=%d",
            feature.geometry_type,
            previous is not None,
            self.revision,
        )
        return previous

    def clear(self) -> None:
        if self._feature is not None:
            self._feature = None
            self.revision += 1

    def __len__(self) -> int:
        return 0 if self._feature is None else 1

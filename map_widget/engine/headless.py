"""In-process map engine.

Keeps the layer stack, viewport and armed interactions in memory and does
the pixel/coordinate maths a browser map would do, without drawing
anything. The base map is described (tile URL and attribution) but never
fetched. This is the default engine and the one the test suite drives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from map_widget.core.constants import DEFAULT_VIEWPORT_SIZE
from map_widget.engine.base import EngineConfig, MapEngine
from map_widget.models.view import ViewState

if TYPE_CHECKING:
    from map_widget.engine.interactions import Interaction
    from map_widget.engine.layer import FeatureLayer

logger = logging.getLogger("map_widget.engine.headless")

HEADLESS = "headless"


@dataclass(frozen=True, slots=True)
class TileLayer:
    """Base-map layer description."""

    url: str
    attribution: str


class HeadlessMapEngine(MapEngine):
    """Default map engine.

    The view starts at ``(0, 0)``, zoom 2, until the control sets the
    computed initial view.
    """

    def __init__(
        self,
        target: str,
        feature_layer: FeatureLayer,
        config: EngineConfig | None = None,
    ) -> None:
        super().__init__(target, feature_layer, config or EngineConfig())
        self._base_layer = TileLayer(url=self._config.tile_url, attribution=self._config.attribution)
        self._view = ViewState(center=(0.0, 0.0), zoom=2.0)
        self._interactions: list[Interaction] = []
        self._disposed = False
        logger.info(
            "Map engine created | engine=%s | target=%s | size=%dx%d",
            self.name,
            target,
            *self.size,
        )

    @property
    def layers(self) -> list[object]:
        return [self._base_layer, self._feature_layer]

    def get_view(self) -> ViewState:
        return self._view

    def set_view(self, view: ViewState) -> None:
        self._ensure_live()
        self._view = view

    def add_interaction(self, interaction: Interaction) -> None:
        self._ensure_live()
        if interaction in self._interactions:
            return
        self._interactions.append(interaction)
        interaction.set_map(self)

    def remove_interaction(self, interaction: Interaction) -> None:
        if interaction not in self._interactions:
            return
        self._interactions.remove(interaction)
        interaction.set_map(None)

    @property
    def interactions(self) -> list[Interaction]:
        return list(self._interactions)

    def coordinate_from_pixel(self, pixel: tuple[float, float]) -> tuple[float, float]:
        width, height = self.size
        resolution = self._view.resolution
        cx, cy = self._view.center
        # Pixel y grows downwards, map y grows upwards
        return (
            cx + (pixel[0] - width / 2) * resolution,
            cy - (pixel[1] - height / 2) * resolution,
        )

    def pixel_from_coordinate(self, coordinate: tuple[float, float]) -> tuple[float, float]:
        width, height = self.size
        resolution = self._view.resolution
        cx, cy = self._view.center
        return (
            width / 2 + (coordinate[0] - cx) / resolution,
            height / 2 - (coordinate[1] - cy) / resolution,
        )

    def dispose(self) -> None:
        if self._disposed:
            return
        for interaction in list(self._interactions):
            self.remove_interaction(interaction)
        self._disposed = True
        logger.info("Map engine disposed | engine=%s | target=%s", self.name, self.target)

    @property
    def disposed(self) -> bool:
        return self._disposed


def get_default_map(
    target: str,
    layer: FeatureLayer,
    *,
    size: tuple[int, int] = DEFAULT_VIEWPORT_SIZE,
) -> HeadlessMapEngine:
    """Build the default engine: OSM base map under *layer*, sized *size*."""
    return HeadlessMapEngine(target, layer, EngineConfig(name=HEADLESS, size=size))

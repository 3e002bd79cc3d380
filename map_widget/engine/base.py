"""MapEngine abstract base class.

Defines the capabilities the map control needs from a rendering engine:
a viewport, a layer stack, pixel/coordinate projection and a place to
arm input interactions. The control talks exclusively to this interface;
it never knows which concrete engine is behind it.

Lifecycle:
    1. Construct with a DOM-like ``target``, the feature layer and an
       ``EngineConfig``.
    2. ``set_view(view)`` and ``add_interaction(...)`` during mount.
    3. ``remove_interaction(...)`` and ``dispose()`` at unmount.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from map_widget.core.constants import (
    DEFAULT_VIEWPORT_SIZE,
    OSM_ATTRIBUTION,
    OSM_TILE_URL,
)
from map_widget.core.exceptions import EngineError

if TYPE_CHECKING:
    from map_widget.engine.interactions import Interaction
    from map_widget.engine.layer import FeatureLayer
    from map_widget.models.view import ViewState


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Configuration for a map engine instance.

    Attributes:
        name: Engine name used in log lines (e.g. ``"headless"``).
        tile_url: Base-map tile URL template with ``{z}/{x}/{y}`` slots.
        attribution: Attribution text for the base map.
        size: Viewport ``(width, height)`` in pixels.
        wrap_x: Whether features repeat across the antimeridian.
        extra_params: Engine-specific options.
    """

    name: str = "headless"
    tile_url: str = OSM_TILE_URL
    attribution: str = OSM_ATTRIBUTION
    size: tuple[int, int] = DEFAULT_VIEWPORT_SIZE
    wrap_x: bool = False
    extra_params: dict[str, str] = field(default_factory=dict)


class MapEngine(abc.ABC):
    """Abstract base class for map engines.

    The constructor receives the render target, the editable feature layer
    and an ``EngineConfig``. Concrete engines add the base map beneath the
    feature layer.
    """

    def __init__(self, target: str, feature_layer: FeatureLayer, config: EngineConfig) -> None:
        self._target = target
        self._feature_layer = feature_layer
        self._config = config

    @property
    def name(self) -> str:
        """Return the engine name from configuration."""
        return self._config.name

    @property
    def target(self) -> str:
        """Identifier of the container the engine renders into."""
        return self._target

    @property
    def config(self) -> EngineConfig:
        """Return the engine configuration (read-only)."""
        return self._config

    @property
    def feature_layer(self) -> FeatureLayer:
        """The layer holding the editable feature."""
        return self._feature_layer

    @property
    def size(self) -> tuple[int, int]:
        """Viewport ``(width, height)`` in pixels."""
        return self._config.size

    # ------------------------------------------------------------------
    # Abstract methods: every engine implements these
    # ------------------------------------------------------------------

    @property
    @abc.abstractmethod
    def layers(self) -> list[object]:
        """Layer stack, bottom first."""

    @abc.abstractmethod
    def get_view(self) -> ViewState:
        """Return the current viewport."""

    @abc.abstractmethod
    def set_view(self, view: ViewState) -> None:
        """Replace the current viewport.

        Raises:
            EngineError: If the engine has been disposed.
        """

    @abc.abstractmethod
    def add_interaction(self, interaction: Interaction) -> None:
        """Arm *interaction* on the map surface.

        Raises:
            EngineError: If the engine has been disposed.
        """

    @abc.abstractmethod
    def remove_interaction(self, interaction: Interaction) -> None:
        """Disarm *interaction*. Removing an unknown interaction is a no-op."""

    @property
    @abc.abstractmethod
    def interactions(self) -> list[Interaction]:
        """Interactions currently armed, in the order they were added."""

    @abc.abstractmethod
    def coordinate_from_pixel(self, pixel: tuple[float, float]) -> tuple[float, float]:
        """Convert a viewport pixel ``(x, y)`` to a display-frame coordinate."""

    @abc.abstractmethod
    def pixel_from_coordinate(self, coordinate: tuple[float, float]) -> tuple[float, float]:
        """Convert a display-frame coordinate to a viewport pixel ``(x, y)``."""

    @abc.abstractmethod
    def dispose(self) -> None:
        """Release the engine. Safe to call more than once."""

    @property
    @abc.abstractmethod
    def disposed(self) -> bool:
        """Whether ``dispose`` has run."""

    def _ensure_live(self) -> None:
        if self.disposed:
            msg = f"Map engine {self.name!r} on target {self.target!r} is disposed"
            raise EngineError(msg)

"""Draw and modify interactions.

Interactions turn user gestures on the map surface into features. They
publish lifecycle events to listeners registered with ``on`` and removed
with ``un``:

- ``Draw`` emits ``drawstart`` on the first vertex, ``drawend`` with the
  finished feature, and ``drawabort`` when the sketch is discarded.
- ``Modify`` emits ``modifystart`` and ``modifyend`` around each vertex
  move on the layer's feature.

Listeners run synchronously, in registration order, on the caller's
thread.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from map_widget.core.constants import GEOMETRY_TYPES, LINE_STRING, POINT, POLYGON
from map_widget.core.exceptions import InteractionError
from map_widget.models.feature import Feature
from map_widget.utils.projection import clamp_to_world

if TYPE_CHECKING:
    from collections.abc import Callable

    from shapely.geometry.base import BaseGeometry

    from map_widget.engine.base import MapEngine
    from map_widget.engine.layer import FeatureLayer

logger = logging.getLogger("map_widget.engine.interactions")

DRAW_START = "drawstart"
DRAW_END = "drawend"
DRAW_ABORT = "drawabort"
MODIFY_START = "modifystart"
MODIFY_END = "modifyend"

# Vertices needed before a sketch can finish
MIN_SKETCH_VERTICES: dict[str, int] = {POINT: 1, LINE_STRING: 2, POLYGON: 3}

Coordinate = tuple[float, float]


@dataclass(frozen=True, slots=True)
class InteractionEvent:
    """Payload passed to interaction listeners."""

    type: str
    feature: Feature | None = None


class Interaction:
    """Base class providing listener registration and map binding."""

    #: Event types this interaction emits.
    event_types: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._listeners: dict[int, tuple[str, Callable[[InteractionEvent], None]]] = {}
        self._keys = itertools.count(1)
        self._map: MapEngine | None = None
        self.active = True

    @property
    def map(self) -> MapEngine | None:
        return self._map

    def set_map(self, engine: MapEngine | None) -> None:
        """Bind to (or, with ``None``, unbind from) a map engine."""
        self._map = engine

    def on(self, event_type: str, listener: Callable[[InteractionEvent], None]) -> int:
        """Register *listener* for *event_type*; return a key for ``un``.

        Raises:
            ValueError: If this interaction never emits *event_type*.
        """
        if event_type not in self.event_types:
            msg = f"{type(self).__name__} does not emit {event_type!r}"
            raise ValueError(msg)
        key = next(self._keys)
        self._listeners[key] = (event_type, listener)
        logger.debug(
            "Listener registered | interaction=%s | event=%s | key=%d",
            type(self).__name__,
            event_type,
            key,
        )
        return key

    def un(self, key: int) -> None:
        """Remove a listener registered with ``on``. Unknown keys are ignored."""
        self._listeners.pop(key, None)

    def listener_count(self, event_type: str | None = None) -> int:
        return sum(
            1 for registered, _ in self._listeners.values()
            if event_type is None or registered == event_type
        )

    def dispatch(self, event: InteractionEvent) -> None:
        for registered, listener in list(self._listeners.values()):
            if registered == event.type:
                listener(event)

    def _ensure_active(self) -> None:
        if not self.active:
            msg = f"{type(self).__name__} interaction is not active"
            raise InteractionError(msg)


class Draw(Interaction):
    """Sketch a new feature of one geometry family.

    Vertices are display-frame coordinates, given directly or as viewport
    pixels resolved through the bound map. A Point finishes on its first
    vertex; lines and polygons finish on ``finish_drawing``. Vertices off
    the edge of the world are pulled back onto it.
    """

    event_types = (DRAW_START, DRAW_END, DRAW_ABORT)

    def __init__(self, geometry_type: str) -> None:
        super().__init__()
        if geometry_type not in GEOMETRY_TYPES:
            msg = f"Cannot draw geometry type {geometry_type!r}"
            raise InteractionError(msg, recoverable=False)
        self.geometry_type = geometry_type
        self._sketch: list[Coordinate] = []

    @property
    def drawing(self) -> bool:
        """Whether a sketch is in progress."""
        return bool(self._sketch)

    @property
    def sketch_coordinates(self) -> list[Coordinate]:
        return list(self._sketch)

    def append_coordinate(self, coordinate: Coordinate) -> Feature | None:
        """Add a vertex; return the finished feature when this completes a Point."""
        self._ensure_active()
        if not self._sketch:
            self.dispatch(InteractionEvent(DRAW_START))
        self._sketch.append(clamp_to_world(float(coordinate[0]), float(coordinate[1])))
        if self.geometry_type == POINT:
            return self.finish_drawing()
        return None

    def append_pixel(self, pixel: tuple[float, float]) -> Feature | None:
        """Add a vertex at a viewport pixel.

        Raises:
            InteractionError: If the interaction is not on a map.
        """
        if self._map is None:
            msg = "Draw interaction is not attached to a map"
            raise InteractionError(msg)
        return self.append_coordinate(self._map.coordinate_from_pixel(pixel))

    def finish_drawing(self) -> Feature:
        """Complete the sketch and emit ``drawend``.

        Raises:
            InteractionError: If the sketch has too few vertices.
        """
        self._ensure_active()
        needed = MIN_SKETCH_VERTICES[self.geometry_type]
        if len(self._sketch) < needed:
            msg = (
                f"{self.geometry_type} needs at least {needed} vertices, "
                f"sketch has {len(self._sketch)}"
            )
            raise InteractionError(msg)

        feature = Feature(geometry=_sketch_geometry(self.geometry_type, self._sketch))
        self._sketch = []
        logger.debug(
            "Draw finished | type=%s | vertices=%d",
            self.geometry_type,
            feature.vertex_count,
        )
        self.dispatch(InteractionEvent(DRAW_END, feature))
        return feature

    def abort_drawing(self) -> None:
        """Discard the sketch in progress, if any."""
        if self._sketch:
            self._sketch = []
            self.dispatch(InteractionEvent(DRAW_ABORT))

    def set_map(self, engine: MapEngine | None) -> None:
        if engine is None:
            self._sketch = []
        super().set_map(engine)


class Modify(Interaction):
    """Drag vertices of the feature held by a layer."""

    event_types = (MODIFY_START, MODIFY_END)

    def __init__(self, layer: FeatureLayer) -> None:
        super().__init__()
        self.layer = layer

    def move_vertex(self, index: int, coordinate: Coordinate) -> Feature:
        """Move vertex *index* of the layer's feature to *coordinate*.

        Polygon indices address the exterior ring without its closing
        position; moving vertex 0 keeps the ring closed. A *coordinate*
        off the edge of the world is pulled back onto it.

        Returns:
            The modified feature, now held by the layer.

        Raises:
            InteractionError: If the layer is empty or *index* is out of range.
        """
        self._ensure_active()
        feature = self.layer.feature
        if feature is None:
            msg = "No feature to modify"
            raise InteractionError(msg)

        point = clamp_to_world(float(coordinate[0]), float(coordinate[1]))
        modified = feature.with_geometry(_move_vertex(feature.geometry, index, point))
        self.dispatch(InteractionEvent(MODIFY_START, feature))
        self.layer.replace(modified)
        self.dispatch(InteractionEvent(MODIFY_END, modified))
        return modified


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------


def _sketch_geometry(geometry_type: str, sketch: list[Coordinate]) -> BaseGeometry:
    from shapely.geometry import LineString, Point, Polygon

    if geometry_type == POINT:
        return Point(sketch[0])
    if geometry_type == LINE_STRING:
        return LineString(sketch)
    return Polygon(sketch)


def _move_vertex(geometry: BaseGeometry, index: int, point: Coordinate) -> BaseGeometry:
    from shapely.geometry import LineString, Point, Polygon

    if geometry.geom_type == POINT:
        _check_index(index, 1)
        return Point(point)

    if geometry.geom_type == LINE_STRING:
        coords = list(geometry.coords)
        _check_index(index, len(coords))
        coords[index] = point
        return LineString(coords)

    ring = list(geometry.exterior.coords)
    # Last position repeats the first
    _check_index(index, len(ring) - 1)
    ring[index] = point
    if index == 0:
        ring[-1] = point
    holes = [list(interior.coords) for interior in geometry.interiors]
    return Polygon(ring, holes=holes or None)


def _check_index(index: int, count: int) -> None:
    if not 0 <= index < count:
        msg = f"Vertex index {index} out of range for {count} vertices"
        raise InteractionError(msg)

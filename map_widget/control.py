"""Map control: the widget's mount boundary.

Ties the format adapter, view initializer, map engine and edit controller
together for one field instance.

Mount sequence:
    1. Resolve the format adapter and map engine factories (host
       overrides first, defaults otherwise).
    2. Parse the field's current value. An unreadable value is logged and
       kept on ``load_error``; the map still opens, empty and editable.
    3. Build the feature layer holding at most that feature.
    4. Create the engine with the layer, sized from the container height,
       and set the initial view.
    5. Attach the edit controller.

Everything acquired during mount is released by ``unmount``, and by mount
itself if a later step fails. The control is also a context manager.
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, ClassVar

from map_widget.controller import EditController
from map_widget.core.config import ConfigValidationError, FieldConfig
from map_widget.core.constants import DEFAULT_HEIGHT, DEFAULT_VIEWPORT_SIZE
from map_widget.core.exceptions import FormatError
from map_widget.engine.headless import get_default_map
from map_widget.engine.layer import FeatureLayer
from map_widget.formats.geojson import get_default_format
from map_widget.shell import height_to_pixels, render_container
from map_widget.view import initial_view

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from map_widget.engine.base import MapEngine
    from map_widget.formats.base import GeometryFormat
    from map_widget.models.feature import Feature
    from map_widget.models.view import ViewState
    from map_widget.shell import ContainerSpec

    FormatFactory = Callable[[FieldConfig], GeometryFormat]
    EngineFactory = Callable[[str, FeatureLayer], MapEngine]

logger = logging.getLogger("map_widget.control")


class MapControl:
    """Geometry-editing field control.

    Args:
        on_change: Called with serialized geometry text on each committed
            edit. Required.
        value: Current serialized geometry, ``""`` for none.
        field: Field configuration: a ``FieldConfig``, or any object with
            ``get(key, default)``.
        height: CSS height of the map container.
        class_name_wrapper: Extra CSS class the host applies to the
            container.
        format_factory: Builds the format adapter from the field config.
        engine_factory: Builds the map engine from ``(target, layer)``.

    Raises:
        ConfigValidationError: If ``on_change`` is not callable or the
            field configuration is invalid.
    """

    default_format_factory: ClassVar[FormatFactory | None] = None
    default_engine_factory: ClassVar[EngineFactory | None] = None

    def __init__(
        self,
        on_change: Callable[[str], None],
        value: str = "",
        field: object | None = None,
        height: str = DEFAULT_HEIGHT,
        class_name_wrapper: str = "",
        *,
        format_factory: FormatFactory | None = None,
        engine_factory: EngineFactory | None = None,
    ) -> None:
        if not callable(on_change):
            raise ConfigValidationError("on_change", on_change, "is required and must be callable")

        self.on_change = on_change
        self.value = value or ""
        self.config = field if isinstance(field, FieldConfig) else FieldConfig.from_field(field)
        self.height = height
        self.class_name_wrapper = class_name_wrapper
        self._format_factory = format_factory or self.default_format_factory
        self._engine_factory = engine_factory or self.default_engine_factory

        self.format: GeometryFormat | None = None
        self.layer: FeatureLayer | None = None
        self.engine: MapEngine | None = None
        self.view: ViewState | None = None
        self.controller: EditController | None = None
        self.load_error: FormatError | None = None
        self._resources: contextlib.ExitStack | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def mounted(self) -> bool:
        return self._resources is not None

    def mount(self, target: str = "map") -> MapControl:
        """Create the map in *target* and arm editing. No-op if already mounted."""
        if self.mounted:
            return self

        with contextlib.ExitStack() as stack:
            fmt = self._resolve_format()
            feature = self._read_initial_value(fmt)
            layer = FeatureLayer(feature)

            engine = self._resolve_engine(target, layer)
            stack.callback(engine.dispose)

            view = initial_view(self.config, feature, size=engine.size)
            engine.set_view(view)

            controller = EditController(engine, layer, fmt, self.config, self.on_change)
            controller.attach()
            stack.callback(controller.detach)

            self._resources = stack.pop_all()

        self.format = fmt
        self.layer = layer
        self.engine = engine
        self.view = view
        self.controller = controller
        logger.info(
            "Map control mounted | target=%s | type=%s | has_value=%s | zoom=%.2f",
            target,
            self.config.type,
            feature is not None,
            view.zoom,
        )
        return self

    def unmount(self) -> None:
        """Detach interactions and dispose the engine. Idempotent."""
        if self._resources is None:
            return
        resources, self._resources = self._resources, None
        target = self.engine.target if self.engine is not None else ""
        try:
            resources.close()
        finally:
            self.controller = None
            self.engine = None
            self.layer = None
            self.format = None
            self.view = None
        logger.info("Map control unmounted | target=%s", target)

    def __enter__(self) -> MapControl:
        return self.mount()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unmount()

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def render(self) -> ContainerSpec:
        """Describe the container the host renders the map into."""
        return render_container(self.height, self.class_name_wrapper)

    @property
    def feature(self) -> Feature | None:
        """The feature currently on the map, ``None`` when unmounted or empty."""
        return self.layer.feature if self.layer is not None else None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_format(self) -> GeometryFormat:
        if self._format_factory is not None:
            return self._format_factory(self.config)
        return get_default_format(self.config)

    def _resolve_engine(self, target: str, layer: FeatureLayer) -> MapEngine:
        if self._engine_factory is not None:
            return self._engine_factory(target, layer)
        size = (DEFAULT_VIEWPORT_SIZE[0], height_to_pixels(self.height))
        return get_default_map(target, layer, size=size)

    def _read_initial_value(self, fmt: GeometryFormat) -> Feature | None:
        self.load_error = None
        try:
            return fmt.read_feature(self.value)
        except FormatError as exc:
            self.load_error = exc
            logger.warning(
                "Ignoring unreadable field value | code=%s | stage=%s | error=%s",
                exc.code,
                exc.stage,
                exc.message,
            )
            return None


def with_map_control(
    get_format: FormatFactory | None = None,
    get_map: EngineFactory | None = None,
) -> type[MapControl]:
    """Return a ``MapControl`` class bound to host-supplied factories.

    Args:
        get_format: Builds the format adapter from the field config.
        get_map: Builds the map engine from ``(target, layer)``, e.g. to
            use another base tile source.
    """

    class BoundMapControl(MapControl):
        default_format_factory = staticmethod(get_format) if get_format is not None else None
        default_engine_factory = staticmethod(get_map) if get_map is not None else None

    return BoundMapControl

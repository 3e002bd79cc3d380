"""Tests for the map control lifecycle (mount, edit, unmount)."""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from map_widget.control import MapControl, with_map_control
from map_widget.core.config import ConfigValidationError, FieldConfig
from map_widget.core.constants import MAX_MERCATOR_LATITUDE
from map_widget.core.exceptions import EngineError, FormatError, GeometryTypeMismatchError
from map_widget.engine import FeatureLayer, HeadlessMapEngine
from map_widget.formats.geojson import GeoJSONFormat, parse
from map_widget.utils.projection import project_to_display
from tests.conftest import BERLIN, LINE_GEOJSON, POINT_GEOJSON, POLYGON_GEOJSON

BERLIN_FIELD = {"type": "Point", "latitude": 52.52, "longitude": 13.405, "zoom": 9}


class TestConstruction:
    """Arguments are validated before anything is mounted."""

    def test_on_change_required(self) -> None:
        with pytest.raises(ConfigValidationError, match="on_change"):
            MapControl(None)  # type: ignore[arg-type]

    def test_field_from_mapping(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, field={"type": "LineString", "decimals": 4})
        assert control.config == FieldConfig(type="LineString", decimals=4)

    def test_field_config_passed_through(self, on_change: MagicMock, point_config: FieldConfig) -> None:
        assert MapControl(on_change, field=point_config).config is point_config

    def test_invalid_field_rejected(self, on_change: MagicMock) -> None:
        with pytest.raises(ConfigValidationError, match="type"):
            MapControl(on_change, field={"type": "Circle"})

    def test_not_mounted_until_mount(self, on_change: MagicMock) -> None:
        control = MapControl(on_change)
        assert not control.mounted
        assert control.engine is None
        assert control.feature is None


class TestMount:
    """Initial value, initial view and armed interactions."""

    def test_existing_point_fitted(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, value=POINT_GEOJSON, field=BERLIN_FIELD).mount()
        assert control.view.zoom == pytest.approx(16.0)
        assert control.view.center == pytest.approx(project_to_display(*BERLIN))
        assert control.engine.get_view() == control.view
        assert len(control.layer) == 1
        assert control.load_error is None

    def test_existing_polygon_fitted(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, value=POLYGON_GEOJSON, field={"type": "Polygon"}).mount()
        assert 10 < control.view.zoom < 16
        assert control.feature.geometry_type == "Polygon"

    def test_empty_value_uses_config_view(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, field=BERLIN_FIELD).mount()
        assert control.feature is None
        assert control.view.zoom == 9
        assert control.view.center == pytest.approx(project_to_display(13.405, 52.52))

    def test_malformed_value_recovered(self, on_change: MagicMock, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="map_widget.control"):
            control = MapControl(on_change, value="{not json", field=BERLIN_FIELD).mount()
        assert isinstance(control.load_error, FormatError)
        assert control.feature is None
        assert control.view.zoom == 9
        assert control.controller.attached
        assert "GEOMETRY_FORMAT_INVALID" in caplog.text
        on_change.assert_not_called()

    def test_type_mismatch_recovered(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, value=LINE_GEOJSON, field={"type": "Point"}).mount()
        assert isinstance(control.load_error, GeometryTypeMismatchError)
        assert control.feature is None

    def test_mount_does_not_call_host(self, on_change: MagicMock) -> None:
        MapControl(on_change, value=POINT_GEOJSON, field=BERLIN_FIELD).mount()
        on_change.assert_not_called()

    def test_mount_twice_is_noop(self, on_change: MagicMock) -> None:
        control = MapControl(on_change).mount()
        engine = control.engine
        control.mount()
        assert control.engine is engine

    def test_height_sizes_viewport(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, height="300px").mount()
        assert control.engine.size == (800, 300)

    def test_non_pixel_height_uses_default(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, height="50vh").mount()
        assert control.engine.size == (800, 400)

    def test_target_passed_to_engine(self, on_change: MagicMock) -> None:
        control = MapControl(on_change).mount("location-map")
        assert control.engine.target == "location-map"


class TestEditing:
    """End-to-end edits through the mounted control."""

    def test_draw_reaches_host(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, field={"type": "Point", "decimals": 5}).mount()
        control.controller.draw.append_coordinate(project_to_display(*BERLIN))
        on_change.assert_called_once_with('{"type":"Point","coordinates":[13.40495,52.52001]}')

    def test_draw_replaces_initial_value(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, value=POINT_GEOJSON, field=BERLIN_FIELD).mount()
        control.controller.draw.append_coordinate((0.0, 0.0))
        assert len(control.layer) == 1
        assert parse(on_change.call_args.args[0]).geometry.coords[0] == pytest.approx((0.0, 0.0))

    def test_draw_after_load_error(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, value="[]", field={"type": "Point"}).mount()
        control.controller.draw.append_coordinate((0.0, 0.0))
        on_change.assert_called_once()


class TestReload:
    """Every value handed to the host mounts again unchanged."""

    @pytest.mark.parametrize("decimals", [0, 7, 15])
    def test_draw_past_world_top_reloads(self, on_change: MagicMock, decimals: int) -> None:
        field = {"type": "Point", "zoom": 0, "decimals": decimals}
        control = MapControl(on_change, field=field).mount()
        # Top rows of a zoom-0 viewport lie above the Web Mercator square
        control.controller.draw.append_pixel((400, 5))
        emitted = on_change.call_args.args[0]

        reloaded = MapControl(MagicMock(), value=emitted, field=field).mount()
        assert reloaded.load_error is None
        lon, lat = json.loads(emitted)["coordinates"]
        assert lon == 0
        assert 85 <= lat <= MAX_MERCATOR_LATITUDE

    def test_line_across_antimeridian_reloads(self, on_change: MagicMock) -> None:
        field = {"type": "LineString"}
        control = MapControl(on_change, field=field).mount()
        draw = control.controller.draw
        draw.append_coordinate((19.9e6, 0.0))
        draw.append_coordinate((20.2e6, 0.0))
        draw.finish_drawing()
        emitted = on_change.call_args.args[0]

        longitudes = [lon for lon, _ in json.loads(emitted)["coordinates"]]
        assert longitudes[0] > 178
        assert longitudes[1] == pytest.approx(180.0)

        reloaded = MapControl(MagicMock(), value=emitted, field=field).mount()
        assert reloaded.load_error is None
        assert reloaded.feature.geometry.length < 300_000
        assert reloaded.feature.geometry.length == pytest.approx(
            control.feature.geometry.length, abs=0.1
        )


class TestUnmount:
    """Teardown releases everything mount acquired."""

    def test_unmount_disposes_engine(self, on_change: MagicMock) -> None:
        control = MapControl(on_change).mount()
        engine = control.engine
        draw = control.controller.draw
        control.unmount()
        assert engine.disposed
        assert engine.interactions == []
        assert draw.listener_count() == 0
        assert not control.mounted
        assert control.engine is None
        assert control.controller is None

    def test_unmount_twice(self, on_change: MagicMock) -> None:
        control = MapControl(on_change).mount()
        control.unmount()
        control.unmount()

    def test_unmount_before_mount(self, on_change: MagicMock) -> None:
        MapControl(on_change).unmount()

    def test_remount(self, on_change: MagicMock) -> None:
        control = MapControl(on_change).mount()
        first = control.engine
        control.unmount()
        control.mount()
        assert control.engine is not first
        assert not control.engine.disposed

    def test_no_callback_after_unmount(self, on_change: MagicMock) -> None:
        control = MapControl(on_change, field={"type": "Point"}).mount()
        draw = control.controller.draw
        control.unmount()
        draw.append_coordinate((0.0, 0.0))
        on_change.assert_not_called()

    def test_context_manager(self, on_change: MagicMock) -> None:
        with MapControl(on_change) as control:
            assert control.mounted
            engine = control.engine
        assert engine.disposed
        assert not control.mounted

    def test_failed_set_view_disposes_engine(self, on_change: MagicMock) -> None:
        engines: list[HeadlessMapEngine] = []

        def factory(target: str, layer: FeatureLayer) -> HeadlessMapEngine:
            engine = HeadlessMapEngine(target, layer)
            engines.append(engine)
            return engine

        control = MapControl(on_change, engine_factory=factory)
        with patch.object(HeadlessMapEngine, "set_view", side_effect=EngineError("no surface")), \
                pytest.raises(EngineError, match="no surface"):
            control.mount()
        assert engines[0].disposed
        assert not control.mounted
        assert control.engine is None

    def test_failed_attach_disposes_engine(self, on_change: MagicMock) -> None:
        control = MapControl(on_change)
        with patch("map_widget.control.EditController.attach", side_effect=RuntimeError("boom")), \
                patch.object(HeadlessMapEngine, "dispose", autospec=True) as dispose, \
                pytest.raises(RuntimeError, match="boom"):
            control.mount()
        dispose.assert_called_once()
        assert not control.mounted


class TestRender:
    """Container description handed to the host."""

    def test_render_container(self, on_change: MagicMock) -> None:
        spec = MapControl(on_change, height="300px", class_name_wrapper="cms-field").render()
        assert spec.class_name == "cms-field map-widget"
        assert spec.css == "padding: 0; overflow: hidden; height: 300px;"

    def test_render_default(self, on_change: MagicMock) -> None:
        spec = MapControl(on_change).render()
        assert spec.class_name == "map-widget"
        assert spec.height == "400px"


class TestWithMapControl:
    """Host-supplied factories."""

    def test_factories_used(self, on_change: MagicMock) -> None:
        get_format = MagicMock(side_effect=lambda config: GeoJSONFormat(config.type))
        get_map = MagicMock(side_effect=lambda target, layer: HeadlessMapEngine(target, layer))
        control_cls = with_map_control(get_format=get_format, get_map=get_map)

        control = control_cls(on_change, value=POINT_GEOJSON, field={"type": "Point"}).mount()

        get_format.assert_called_once_with(control.config)
        get_map.assert_called_once()
        target, layer = get_map.call_args.args
        assert target == "map"
        assert layer is control.layer
        assert control.feature is not None

    def test_defaults_when_omitted(self, on_change: MagicMock) -> None:
        control = with_map_control()(on_change).mount()
        assert isinstance(control.format, GeoJSONFormat)
        assert control.engine.name == "headless"

    def test_bound_class_is_map_control(self) -> None:
        assert issubclass(with_map_control(), MapControl)

    def test_instance_factory_overrides_bound(self, on_change: MagicMock) -> None:
        bound = MagicMock(side_effect=lambda config: GeoJSONFormat(config.type))
        own = MagicMock(side_effect=lambda config: GeoJSONFormat(config.type))
        with_map_control(get_format=bound)(on_change, format_factory=own).mount()
        own.assert_called_once()
        bound.assert_not_called()

"""Shared pytest fixtures for the map widget test suite."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from map_widget.core.config import FieldConfig
from map_widget.engine.headless import HeadlessMapEngine
from map_widget.engine.layer import FeatureLayer

# ---------------------------------------------------------------------------
# Reference geometries (storage frame, lon/lat)
# ---------------------------------------------------------------------------

BERLIN = (13.404954, 52.520008)

POINT_GEOJSON = '{"type":"Point","coordinates":[13.404954,52.520008]}'

LINE_GEOJSON = (
    '{"type":"LineString","coordinates":[[-0.1276,51.5072],[2.3522,48.8566],[4.9041,52.3676]]}'
)

# Yakima Valley orchard block, roughly rectangular
POLYGON_GEOJSON = (
    '{"type":"Polygon","coordinates":[[[-120.521,46.604],[-120.521,46.613],'
    '[-120.508,46.613],[-120.508,46.604],[-120.521,46.604]]]}'
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def on_change() -> MagicMock:
    """Host change callback spy."""
    return MagicMock(name="on_change")


@pytest.fixture()
def point_config() -> FieldConfig:
    return FieldConfig(type="Point")


@pytest.fixture()
def polygon_config() -> FieldConfig:
    return FieldConfig(type="Polygon")


@pytest.fixture()
def layer() -> FeatureLayer:
    """An empty editable layer."""
    return FeatureLayer()


@pytest.fixture()
def engine(layer: FeatureLayer) -> HeadlessMapEngine:
    """A headless engine rendering *layer* into an 800x400 viewport."""
    return HeadlessMapEngine("map", layer)

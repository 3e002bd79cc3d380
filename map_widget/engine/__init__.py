"""Map engine adapters.

The map control drives a rendering engine through a small capability
interface (Strategy pattern):
- MapEngine: Abstract base class defining the interface
- HeadlessMapEngine: In-process engine with viewport maths, no drawing
- FeatureLayer: Single-slot layer holding the editable feature
- Draw / Modify: Input interactions armed on the map surface

Hosts that render through another map library pass their own engine
builder to ``with_map_control(get_map=...)``.
"""

from map_widget.engine.base import EngineConfig, MapEngine
from map_widget.engine.headless import HEADLESS, HeadlessMapEngine, get_default_map
from map_widget.engine.interactions import (
    DRAW_ABORT,
    DRAW_END,
    DRAW_START,
    MODIFY_END,
    MODIFY_START,
    Draw,
    Interaction,
    InteractionEvent,
    Modify,
)
from map_widget.engine.layer import FeatureLayer

__all__ = [
    "DRAW_ABORT",
    "DRAW_END",
    "DRAW_START",
    "HEADLESS",
    "MODIFY_END",
    "MODIFY_START",
    "Draw",
    "EngineConfig",
    "FeatureLayer",
    "HeadlessMapEngine",
    "Interaction",
    "InteractionEvent",
    "MapEngine",
    "Modify",
    "get_default_map",
]

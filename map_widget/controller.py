"""Edit controller: wires draw and modify interactions to the host.

Two interactions are armed together on the map surface:

- **Draw** sketches a new feature of the configured family. On
  completion the layer's feature is replaced by the drawn one, the new
  geometry is serialized with the configured precision and the host's
  change callback is called once. This is the write path to the host.
- **Modify** drags vertices of the current feature. The layer always
  reflects the drag; the host hears about it only when the field sets
  ``commit_on_modify``.

The controller never validates geometry between completion and callback
beyond what the format serializer does, and it cannot cancel a sketch in
progress; that is left to the engine's own conventions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from map_widget.engine.interactions import DRAW_END, MODIFY_END, Draw, Modify

if TYPE_CHECKING:
    from collections.abc import Callable

    from map_widget.core.config import FieldConfig
    from map_widget.engine.base import MapEngine
    from map_widget.engine.interactions import InteractionEvent
    from map_widget.engine.layer import FeatureLayer
    from map_widget.formats.base import GeometryFormat
    from map_widget.models.feature import Feature

logger = logging.getLogger("map_widget.controller")


class EditController:
    """Arms draw/modify on an engine and reports committed edits.

    Args:
        engine: Map engine the interactions are added to.
        layer: The single-slot editable layer.
        fmt: Adapter used to serialize committed geometry.
        config: Field configuration (geometry type, decimals,
            commit-on-modify toggle).
        on_change: Host callback receiving serialized geometry text.
    """

    def __init__(
        self,
        engine: MapEngine,
        layer: FeatureLayer,
        fmt: GeometryFormat,
        config: FieldConfig,
        on_change: Callable[[str], None],
    ) -> None:
        self.engine = engine
        self.layer = layer
        self.format = fmt
        self.config = config
        self.on_change = on_change
        self.draw: Draw | None = None
        self.modify: Modify | None = None
        self._listener_keys: list[tuple[Draw | Modify, int]] = []

    @property
    def attached(self) -> bool:
        return self.draw is not None

    def attach(self) -> None:
        """Arm draw and modify on the engine. Calling it twice is a no-op."""
        if self.attached:
            return

        draw = Draw(self.config.type)
        modify = Modify(self.layer)
        self.engine.add_interaction(draw)
        try:
            self.engine.add_interaction(modify)
        except Exception:
            self.engine.remove_interaction(draw)
            raise

        self._listener_keys = [
            (draw, draw.on(DRAW_END, self._handle_draw_end)),
            (modify, modify.on(MODIFY_END, self._handle_modify_end)),
        ]
        self.draw = draw
        self.modify = modify
        logger.info(
            "Edit interactions attached | target=%s | type=%s | commit_on_modify=%s",
            self.engine.target,
            self.config.type,
            self.config.commit_on_modify,
        )

    def detach(self) -> None:
        """Unregister listeners and remove both interactions. Idempotent."""
        for interaction, key in self._listener_keys:
            interaction.un(key)
        self._listener_keys = []

        for interaction in (self.draw, self.modify):
            if interaction is not None:
                self.engine.remove_interaction(interaction)
        if self.attached:
            logger.info("Edit interactions detached | target=%s", self.engine.target)
        self.draw = None
        self.modify = None

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _handle_draw_end(self, event: InteractionEvent) -> None:
        feature = event.feature
        if feature is None:
            return
        self.layer.replace(feature)
        self._commit(feature, "draw")

    def _handle_modify_end(self, event: InteractionEvent) -> None:
        if not self.config.commit_on_modify or event.feature is None:
            logger.debug("Modify not committed | target=%s", self.engine.target)
            return
        self._commit(event.feature, "modify")

    def _commit(self, feature: Feature, source: str) -> None:
        serialized = self.format.write_geometry(feature, decimals=self.config.decimals)
        logger.info(
            "Geometry committed | source=%s | type=%s | decimals=%d | length=%d",
            source,
            feature.geometry_type,
            self.config.decimals,
            len(serialized),
        )
        self.on_change(serialized)

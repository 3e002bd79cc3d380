"""GeometryFormat abstract base class.

Defines the contract between the map control and the text format used to
persist the edited geometry. The control only ever calls these two
methods, so a host can plug in a different format through the
``format_factory`` extension point without touching edit semantics.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from map_widget.models.feature import Feature


class GeometryFormat(abc.ABC):
    """Abstract base class for geometry text adapters.

    Implementations hold their storage and display frames fixed for their
    whole lifetime.
    """

    @abc.abstractmethod
    def read_feature(self, text: str) -> Feature | None:
        """Read serialized geometry text into a display-frame feature.

        Args:
            text: Serialized geometry in the storage frame. Empty or blank
                text means "no value".

        Returns:
            The parsed ``Feature``, or ``None`` for empty input.

        Raises:
            FormatError: If non-empty text is not a readable geometry.
        """

    @abc.abstractmethod
    def write_geometry(self, feature: Feature, *, decimals: int) -> str:
        """Serialize a feature's geometry back to storage-frame text.

        Args:
            feature: The feature to write (display frame).
            decimals: Decimal digits kept on every coordinate.

        Returns:
            Serialized geometry text.
        """

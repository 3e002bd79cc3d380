"""Field configuration for the map widget.

The host hands the widget a field object exposing ``get(key, default)``
(a plain ``dict`` qualifies) or, in CMS setups, the YAML snippet that
declares the field. Both are turned into one immutable ``FieldConfig``
that lists every recognised option with its default.

Fail-fast validation:
    ``FieldConfig`` raises ``ConfigValidationError`` from ``__post_init__``
    when a value is out of range, and the alternate constructors raise it
    when a value cannot be coerced to the declared type.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from map_widget.core.constants import (
    DEFAULT_DECIMALS,
    DEFAULT_GEOMETRY_TYPE,
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    DEFAULT_ZOOM,
    GEOMETRY_TYPES,
    MAX_DECIMALS,
    MAX_LONGITUDE,
    MAX_MERCATOR_LATITUDE,
    MAX_ZOOM,
    MIN_LONGITUDE,
    MIN_ZOOM,
)
from map_widget.core.exceptions import ValidationError


class ConfigValidationError(ValidationError):
    """Raised when a field option is missing its type or out of range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid field option {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class FieldConfig:
    """Immutable widget configuration.

    Built once when the control is constructed and read for its lifetime.

    Attributes:
        type: Geometry family the user draws (``Point``, ``LineString``
            or ``Polygon``).
        latitude: Initial view center latitude in degrees.
        longitude: Initial view center longitude in degrees.
        zoom: Initial zoom level.
        decimals: Decimal digits kept on every output coordinate.
        commit_on_modify: Whether dragging vertices of the current feature
            also reports the new geometry to the host.
    """

    type: str = DEFAULT_GEOMETRY_TYPE
    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE
    zoom: float = DEFAULT_ZOOM
    decimals: int = DEFAULT_DECIMALS
    commit_on_modify: bool = False

    def __post_init__(self) -> None:
        _validate(self)

    @classmethod
    def from_field(cls, field: Any | None) -> FieldConfig:
        """Build a config from a host field object.

        Args:
            field: Anything with a ``get(key, default)`` accessor, such as
                a ``dict`` or an immutable map supplied by the host.
                ``None`` yields the defaults.

        Raises:
            ConfigValidationError: If an option cannot be coerced or is
                out of range.
        """
        if field is None:
            return cls()
        if not callable(getattr(field, "get", None)):
            raise ConfigValidationError(
                "field", field, "must expose get(key, default)"
            )

        return cls(
            type=_coerce_str("type", field.get("type", DEFAULT_GEOMETRY_TYPE)),
            latitude=_coerce_float("latitude", field.get("latitude", DEFAULT_LATITUDE)),
            longitude=_coerce_float("longitude", field.get("longitude", DEFAULT_LONGITUDE)),
            zoom=_coerce_float("zoom", field.get("zoom", DEFAULT_ZOOM)),
            decimals=_coerce_int("decimals", field.get("decimals", DEFAULT_DECIMALS)),
            commit_on_modify=_coerce_bool(
                "commit_on_modify", field.get("commit_on_modify", False)
            ),
        )

    @classmethod
    def from_yaml(cls, text: str) -> FieldConfig:
        """Build a config from a YAML field declaration.

        Accepts the mapping a CMS config file declares for the field, e.g.::

            name: location
            widget: map
            type: Point
            decimals: 5

        Keys the widget does not use (``name``, ``label``, ``widget``) are
        ignored.

        Raises:
            ConfigValidationError: If the document is not a mapping or an
                option is invalid.
        """
        import yaml

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigValidationError("field", text, f"not valid YAML: {exc}") from exc

        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigValidationError("field", data, "YAML document must be a mapping")
        return cls.from_field(data)

    def to_dict(self) -> dict[str, object]:
        """Serialise to the same keys ``from_field`` reads."""
        return {
            "type": self.type,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "zoom": self.zoom,
            "decimals": self.decimals,
            "commit_on_modify": self.commit_on_modify,
        }


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _coerce_str(key: str, raw: object) -> str:
    if not isinstance(raw, str):
        raise ConfigValidationError(key, raw, "must be a string")
    return raw


def _coerce_float(key: str, raw: object) -> float:
    if isinstance(raw, bool):
        raise ConfigValidationError(key, raw, "must be a number")
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigValidationError(key, raw, "must be a number") from exc
    if not math.isfinite(value):
        raise ConfigValidationError(key, raw, "must be finite")
    return value


def _coerce_int(key: str, raw: object) -> int:
    value = _coerce_float(key, raw)
    if not value.is_integer():
        raise ConfigValidationError(key, raw, "must be a whole number")
    return int(value)


def _coerce_bool(key: str, raw: object) -> bool:
    if not isinstance(raw, bool):
        raise ConfigValidationError(key, raw, "must be true or false")
    return raw


def _validate(config: FieldConfig) -> None:
    """Validate option ranges.  Raises ``ConfigValidationError``."""
    if config.type not in GEOMETRY_TYPES:
        raise ConfigValidationError(
            "type",
            config.type,
            f"must be one of {', '.join(sorted(GEOMETRY_TYPES))}",
        )

    if not -MAX_MERCATOR_LATITUDE <= config.latitude <= MAX_MERCATOR_LATITUDE:
        raise ConfigValidationError(
            "latitude",
            config.latitude,
            f"must be within +/-{MAX_MERCATOR_LATITUDE:.4f} (degrees, Web Mercator limit)",
        )

    if not MIN_LONGITUDE <= config.longitude <= MAX_LONGITUDE:
        raise ConfigValidationError(
            "longitude",
            config.longitude,
            f"must be between {MIN_LONGITUDE} and {MAX_LONGITUDE} (degrees)",
        )

    if not MIN_ZOOM <= config.zoom <= MAX_ZOOM:
        raise ConfigValidationError(
            "zoom",
            config.zoom,
            f"must be between {MIN_ZOOM:g} and {MAX_ZOOM:g}",
        )

    if not 0 <= config.decimals <= MAX_DECIMALS:
        raise ConfigValidationError(
            "decimals",
            config.decimals,
            f"must be between 0 and {MAX_DECIMALS}",
        )

"""Widget exception taxonomy.

Every domain exception inherits from ``WidgetError`` and carries structured
context fields so the host can decide whether a fault is recoverable and log
it consistently.

Taxonomy categories
-------------------
- ``ValidationError``:  bad input (geometry text, field configuration).
- ``EngineError``:      the map engine could not be created or driven.
- ``InteractionError``: a draw/modify gesture was used incorrectly.

Every exception exposes ``to_error_dict()`` for a stable structured payload.
"""

from __future__ import annotations


class WidgetError(Exception):
    """Base exception for all widget-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Component where the error occurred
            (e.g. ``"format"``, ``"config"``, ``"engine"``).
        code: Machine-readable error code (e.g. ``"GEOMETRY_FORMAT_INVALID"``).
        recoverable: Whether the control can keep running after the fault.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        recoverable: bool = False,
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.recoverable = recoverable
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, EngineError):
            return "engine"
        if isinstance(self, InteractionError):
            return "interaction"
        return "widget"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "recoverable": self.recoverable,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(WidgetError):
    """Input validation failure."""


class EngineError(WidgetError):
    """Map engine creation or operation failure."""

    default_stage = "engine"
    default_code = "ENGINE_ERROR"


class InteractionError(WidgetError):
    """Draw or modify gesture used out of sequence."""

    default_stage = "interaction"
    default_code = "INTERACTION_ERROR"

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Format errors
# ---------------------------------------------------------------------------


class FormatError(ValidationError):
    """Serialized geometry text could not be read.

    Recoverable: the control falls back to an empty editable map.
    """

    default_stage = "format"
    default_code = "GEOMETRY_FORMAT_INVALID"

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class GeometryTypeMismatchError(FormatError):
    """Geometry text is valid but of a different family than configured."""

    default_code = "GEOMETRY_TYPE_MISMATCH"

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected} geometry, got {actual}")

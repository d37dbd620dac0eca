"""Exception taxonomy for the ROI engine.

Non-convergent metrics are not exceptions; see ``roi_engine.models.outcome``.
"""

from __future__ import annotations

from typing import Any, Optional


class ROIEngineError(Exception):
    """Base class for all engine errors."""


class ValidationError(ROIEngineError, ValueError):
    """Malformed or out-of-range input, rejected before any computation."""

    def __init__(self, field: str, value: Any, message: str) -> None:
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"{field}={value!r}: {message}")

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "value": self.value, "message": self.message}


class ConfigurationError(ROIEngineError):
    """Missing or invalid benchmark, threshold or settings configuration."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class StateTransitionError(ROIEngineError):
    """An ROI calculation was asked to move to a state it cannot reach."""

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move calculation from '{current}' to '{requested}'")

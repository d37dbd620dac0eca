"""Convert engine dataclasses into JSON-ready structures."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .outcome import NonConvergent


def to_jsonable(obj: Any) -> Any:
    """Recursively convert dataclasses, enums and datetimes.

    Non-convergent metrics keep an explicit ``non_convergent`` marker so
    consumers never mistake them for numbers.
    """
    if isinstance(obj, NonConvergent):
        return {
            "non_convergent": True,
            "metric": obj.metric,
            "reason": obj.reason.value,
            "detail": obj.detail,
        }
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj

"""Tagged sentinel for metrics without a well-defined numeric answer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .enums import NonConvergenceReason


@dataclass(frozen=True)
class NonConvergent:
    """Marks a metric that has no numeric value (never pays back, zero cost, ...).

    Dependent computations check for it with ``is_defined`` instead of
    treating it as an ordinary number.
    """

    metric: str
    reason: NonConvergenceReason
    detail: str = ""


Metric = Union[float, NonConvergent]


def is_defined(value: Metric) -> bool:
    return not isinstance(value, NonConvergent)


def value_or(value: Metric, default: float) -> float:
    """Return the numeric value, or ``default`` for a non-convergent metric."""
    if isinstance(value, NonConvergent):
        return default
    return value


def propagate(metric: str, source: NonConvergent) -> NonConvergent:
    """Derive a sentinel for ``metric`` from a non-convergent input."""
    return NonConvergent(
        metric=metric,
        reason=NonConvergenceReason.UPSTREAM,
        detail=f"{source.metric}: {source.reason.value}",
    )


def percent_change(metric: str, baseline: float, actual: float) -> Metric:
    """``(baseline - actual) / baseline * 100``; undefined for a zero baseline."""
    if baseline == 0:
        return NonConvergent(
            metric=metric,
            reason=NonConvergenceReason.ZERO_BASELINE,
            detail="baseline is zero",
        )
    return (baseline - actual) / baseline * 100

"""Compare computed ROI results against industry reference values."""

from __future__ import annotations

import logging
import math
from dataclasses import fields
from typing import Sequence

from roi_engine.errors import ConfigurationError
from roi_engine.models.enums import NonConvergenceReason
from roi_engine.models.outcome import Metric, NonConvergent, is_defined, propagate
from roi_engine.models.roi import (
    BenchmarkComparison,
    IndustryAverages,
    MetricComparison,
    ROIResults,
)

logger = logging.getLogger(__name__)

# result metric -> (benchmark field, higher is better, label)
_COMPARED_METRICS: tuple[tuple[str, str, bool, str], ...] = (
    ("simple_roi", "roi_percentage", True, "ROI"),
    ("payback_period", "payback_period", False, "Payback period"),
    ("error_reduction", "error_reduction", True, "Error reduction"),
    ("productivity_increase", "productivity_increase", True, "Productivity increase"),
)

_OPPORTUNITY_HINTS = {
    "simple_roi": "raise task volume or trim recurring software spend",
    "payback_period": "phase the implementation to start saving sooner",
    "error_reduction": "add validation steps to the automated path",
    "productivity_increase": "remove remaining manual hand-offs in the workflow",
}


class BenchmarkComparator:
    """Pure lookup/diff against a benchmark reference row."""

    def __init__(self, margin: float = 0.10) -> None:
        if not math.isfinite(margin) or not (0 <= margin < 1):
            raise ConfigurationError(f"benchmark margin must be in [0, 1), got {margin}")
        self.margin = margin

    def compare(
        self,
        results: ROIResults,
        industry_averages: IndustryAverages,
        industry: str = "custom",
        best_practices: Sequence[str] = (),
    ) -> BenchmarkComparison:
        self._check_averages(industry_averages)

        comparisons: list[MetricComparison] = []
        opportunities: list[str] = []
        for metric, benchmark_field, higher_is_better, label in _COMPARED_METRICS:
            benchmark = getattr(industry_averages, benchmark_field)
            if benchmark is None:
                continue
            comparison = self._compare_metric(
                metric, getattr(results, metric), benchmark, higher_is_better
            )
            comparisons.append(comparison)
            if comparison.underperforms:
                opportunities.append(self._describe(comparison, label, industry))

        if opportunities:
            logger.info("%d metrics trail the %s benchmark", len(opportunities), industry)
        return BenchmarkComparison(
            industry=industry,
            industry_averages=industry_averages,
            comparisons=tuple(comparisons),
            best_practices=tuple(best_practices),
            improvement_opportunities=tuple(opportunities),
        )

    def _compare_metric(
        self,
        metric: str,
        actual: Metric,
        benchmark: float,
        higher_is_better: bool,
    ) -> MetricComparison:
        gap: Metric
        if not is_defined(actual):
            gap = propagate(f"{metric}_gap", actual)
            # A result that never pays back trails any benchmark
            underperforms = actual.reason is NonConvergenceReason.NEVER_PAYS_BACK
        elif benchmark == 0:
            gap = NonConvergent(
                metric=f"{metric}_gap",
                reason=NonConvergenceReason.ZERO_BASELINE,
                detail="benchmark value is zero",
            )
            underperforms = actual < 0 if higher_is_better else actual > 0
        else:
            delta = actual - benchmark if higher_is_better else benchmark - actual
            gap = delta / abs(benchmark) * 100
            underperforms = gap < -self.margin * 100

        return MetricComparison(
            metric=metric,
            actual=actual,
            benchmark=benchmark,
            gap_percent=gap,
            higher_is_better=higher_is_better,
            underperforms=underperforms,
        )

    @staticmethod
    def _describe(comparison: MetricComparison, label: str, industry: str) -> str:
        hint = _OPPORTUNITY_HINTS[comparison.metric]
        if not is_defined(comparison.actual):
            return f"{label} never reaches the {industry} benchmark of {comparison.benchmark:.1f}; {hint}."
        return (
            f"{label} of {comparison.actual:.1f} trails the {industry} benchmark of "
            f"{comparison.benchmark:.1f}; {hint}."
        )

    @staticmethod
    def _check_averages(averages: IndustryAverages) -> None:
        for f in fields(averages):
            value = getattr(averages, f.name)
            if value is None and f.name in ("error_reduction", "productivity_increase"):
                continue
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigurationError(f"benchmark '{f.name}' must be a finite number, got {value!r}")
        if averages.payback_period <= 0:
            raise ConfigurationError(
                f"benchmark 'payback_period' must be positive, got {averages.payback_period}"
            )

"""ROICalculation aggregate root and post-measurement validation data."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from roi_engine.errors import StateTransitionError, ValidationError

from .enums import CalculationStatus, CalculationType, NonConvergenceReason
from .outcome import Metric, NonConvergent, is_defined
from .roi import (
    BenchmarkComparison,
    RiskAssessment,
    ROIAssumptions,
    ROIInputs,
    ROIResults,
    SensitivityAnalysis,
)

# Forward-only lifecycle; archive is reachable from every live state.
_TRANSITIONS: dict[CalculationStatus, set[CalculationStatus]] = {
    CalculationStatus.DRAFT: {CalculationStatus.VALIDATED, CalculationStatus.ARCHIVED},
    CalculationStatus.VALIDATED: {CalculationStatus.PUBLISHED, CalculationStatus.ARCHIVED},
    CalculationStatus.PUBLISHED: {CalculationStatus.ARCHIVED},
    CalculationStatus.ARCHIVED: set(),
}


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class ActualResults:
    """Measured outcomes; only the fields that were measured are set."""

    monthly_savings: Optional[float] = None
    annual_savings: Optional[float] = None
    implementation_cost: Optional[float] = None
    monthly_operating_cost: Optional[float] = None
    payback_period: Optional[float] = None
    simple_roi: Optional[float] = None
    hours_per_month: Optional[float] = None
    tasks_per_month: Optional[float] = None
    error_reduction: Optional[float] = None
    productivity_increase: Optional[float] = None

    def measured(self) -> dict[str, float]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class MetricVariance:
    metric: str
    predicted: Metric
    actual: float
    variance: Metric  # percentage, relative to the prediction


@dataclass(frozen=True)
class ValidationData:
    actual_results: ActualResults
    period_start: datetime
    period_end: datetime
    variances: tuple[MetricVariance, ...]
    lessons_learned: tuple[str, ...] = ()
    adjustment_recommendations: tuple[str, ...] = ()


def compute_variances(results: ROIResults, actual: ActualResults) -> tuple[MetricVariance, ...]:
    """Compare every measured metric against its prediction."""
    variances: list[MetricVariance] = []
    for name, actual_value in actual.measured().items():
        predicted = getattr(results, name)
        if not is_defined(predicted):
            variance: Metric = NonConvergent(
                metric=f"{name}_variance",
                reason=NonConvergenceReason.UPSTREAM,
                detail=f"prediction is {predicted.reason.value}",
            )
        elif predicted == 0:
            variance = NonConvergent(
                metric=f"{name}_variance",
                reason=NonConvergenceReason.ZERO_BASELINE,
                detail="predicted value is zero",
            )
        else:
            variance = (actual_value - predicted) / abs(predicted) * 100
        variances.append(
            MetricVariance(metric=name, predicted=predicted, actual=actual_value, variance=variance)
        )
    return tuple(variances)


@dataclass
class ROICalculation:
    """Binds one workflow's inputs, results and analyses to its lifecycle.

    Numeric content is frozen at creation; only ``status`` and the validation
    fields change afterwards. A re-calculation produces a new record.
    """

    organization_id: str
    workflow_id: str
    user_id: str
    inputs: ROIInputs
    assumptions: ROIAssumptions
    results: ROIResults
    risk_assessment: RiskAssessment
    calculation_type: CalculationType = CalculationType.DETAILED
    sensitivity_analysis: Optional[SensitivityAnalysis] = None
    benchmark_comparison: Optional[BenchmarkComparison] = None
    validation_data: Optional[ValidationData] = None
    status: CalculationStatus = CalculationStatus.DRAFT
    id: str = field(default_factory=lambda: str(uuid4()))
    calculated_at: datetime = field(default_factory=_utcnow)
    validated_at: Optional[datetime] = None
    validated_by: Optional[str] = None
    updated_at: datetime = field(default_factory=_utcnow)

    def _transition(self, target: CalculationStatus) -> None:
        if target not in _TRANSITIONS[self.status]:
            raise StateTransitionError(self.status.value, target.value)
        self.status = target
        self.updated_at = _utcnow()

    def validate(self, validated_by: str) -> None:
        self._transition(CalculationStatus.VALIDATED)
        self.validated_by = validated_by
        self.validated_at = self.updated_at

    def publish(self) -> None:
        self._transition(CalculationStatus.PUBLISHED)

    def archive(self) -> None:
        self._transition(CalculationStatus.ARCHIVED)

    def attach_validation(
        self,
        actual: ActualResults,
        period_start: datetime,
        period_end: datetime,
        lessons_learned: tuple[str, ...] = (),
        adjustment_recommendations: tuple[str, ...] = (),
    ) -> ValidationData:
        """Record measured outcomes for a completed measurement period."""
        if self.status is CalculationStatus.ARCHIVED:
            raise StateTransitionError(self.status.value, "validation attached")
        if period_end <= period_start:
            raise ValidationError("period_end", period_end.isoformat(), "must be after period_start")
        if not actual.measured():
            raise ValidationError("actual_results", None, "at least one measured metric is required")

        self.validation_data = ValidationData(
            actual_results=actual,
            period_start=period_start,
            period_end=period_end,
            variances=compute_variances(self.results, actual),
            lessons_learned=tuple(lessons_learned),
            adjustment_recommendations=tuple(adjustment_recommendations),
        )
        self.updated_at = _utcnow()
        return self.validation_data

"""Business metric samples, aggregations, dashboards and alerts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from .enums import (
    AlertActionType,
    AlertImpact,
    AlertSeverity,
    AlertType,
    BusinessMetricType,
    ImpactTier,
    InsightType,
    MeasurementPeriod,
    Priority,
    RecommendationCategory,
    ThresholdOperator,
    TrendDirection,
    ValidationStatus,
    WorkflowStatus,
)
from .outcome import Metric


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Samples
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BusinessMetricMetadata:
    calculation_method: str = ""
    data_source: str = ""
    validation_status: ValidationStatus = ValidationStatus.PENDING
    impact_level: ImpactTier = ImpactTier.MEDIUM
    related_metrics: tuple[str, ...] = ()
    seasonality_factor: Optional[float] = None
    external_factors: tuple[str, ...] = ()


@dataclass(frozen=True)
class BusinessMetric:
    """One timestamped measurement. Later samples supersede, never edit."""

    organization_id: str
    workflow_id: str
    metric_type: BusinessMetricType
    metric_value: float
    metric_unit: str
    measured_at: datetime
    user_id: str = ""
    measurement_period: MeasurementPeriod = MeasurementPeriod.MONTHLY
    baseline_value: Optional[float] = None
    target_value: Optional[float] = None
    actual_value: Optional[float] = None
    trend: TrendDirection = TrendDirection.STABLE
    confidence_level: float = 100.0  # 0-100
    metadata: BusinessMetricMetadata = field(default_factory=BusinessMetricMetadata)
    tags: tuple[str, ...] = ()
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class BusinessMetricsFilter:
    organization_id: Optional[str] = None
    workflow_ids: tuple[str, ...] = ()
    metric_types: tuple[BusinessMetricType, ...] = ()
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    tags: tuple[str, ...] = ()
    impact_levels: tuple[ImpactTier, ...] = ()
    validation_statuses: tuple[ValidationStatus, ...] = ()


@dataclass(frozen=True)
class TimeSeriesData:
    timestamp: datetime
    value: float


# ---------------------------------------------------------------------------
# Aggregations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Percentiles:
    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    p95: float = 0.0


@dataclass(frozen=True)
class MetricAggregation:
    """Statistical summary of a series. Check ``count`` before trusting averages."""

    sum: float = 0.0
    average: float = 0.0
    min: float = 0.0
    max: float = 0.0
    count: int = 0
    median: float = 0.0
    standard_deviation: float = 0.0
    percentiles: Percentiles = field(default_factory=Percentiles)


@dataclass(frozen=True)
class PeriodAggregation:
    period: MeasurementPeriod
    period_start: datetime
    aggregation: MetricAggregation


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkflowBusinessMetrics:
    monthly_savings: float
    hours_per_month: float
    roi_percentage: float
    payback_period: Metric
    risk_score: float
    implementation_cost: float = 0.0
    monthly_operating_cost: float = 0.0


@dataclass(frozen=True)
class WorkflowPerformanceMetrics:
    uptime: float  # percentage
    execution_count: int
    success_rate: float  # percentage
    average_execution_time: float  # seconds


@dataclass(frozen=True)
class WorkflowMetric:
    workflow_id: str
    workflow_name: str
    category: str
    status: WorkflowStatus
    business_metrics: WorkflowBusinessMetrics
    performance_metrics: WorkflowPerformanceMetrics
    last_updated: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class TrendPoint:
    date: datetime
    value: float
    target: Optional[float] = None


@dataclass(frozen=True)
class BusinessTrend:
    metric_type: BusinessMetricType
    period: MeasurementPeriod
    data_points: tuple[TrendPoint, ...]
    trend_direction: TrendDirection = TrendDirection.STABLE
    change_rate: Metric = 0.0  # percentage change between the last two points


@dataclass(frozen=True)
class BusinessSummary:
    total_workflows: int
    active_workflows: int
    total_monthly_savings: float
    total_hours_saved: float  # per month
    average_roi: float
    average_payback_period: Metric
    total_implementation_cost: float
    total_monthly_operating_cost: float
    overall_efficiency_gain: float
    risk_score: float


@dataclass(frozen=True)
class CategoryROI:
    category: str
    workflows: int
    total_roi: float
    average_roi: float


@dataclass(frozen=True)
class BusinessInsight:
    type: InsightType
    title: str
    description: str
    impact: ImpactTier
    confidence: float  # 0-100
    potential_value: float = 0.0
    recommended_actions: tuple[str, ...] = ()
    related_workflows: tuple[str, ...] = ()
    id: str = field(default_factory=lambda: str(uuid4()))


@dataclass(frozen=True)
class ExpectedBenefit:
    financial: float = 0.0
    hours_saved: float = 0.0
    risk_reduction: float = 0.0


@dataclass(frozen=True)
class BusinessRecommendation:
    category: RecommendationCategory
    priority: Priority
    title: str
    description: str
    expected_benefit: ExpectedBenefit
    implementation_effort: ImpactTier = ImpactTier.MEDIUM
    related_workflows: tuple[str, ...] = ()
    id: str = field(default_factory=lambda: str(uuid4()))


@dataclass(frozen=True)
class BusinessDashboard:
    """Disposable snapshot for one organization at one point in time."""

    organization_id: str
    summary: BusinessSummary
    workflow_metrics: tuple[WorkflowMetric, ...]
    trends: tuple[BusinessTrend, ...]
    roi_by_category: tuple[CategoryROI, ...]
    insights: tuple[BusinessInsight, ...]
    recommendations: tuple[BusinessRecommendation, ...]
    alerts: tuple["BusinessAlert", ...]
    generated_at: datetime = field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AlertThreshold:
    metric: str
    operator: ThresholdOperator
    value: float


@dataclass(frozen=True)
class AlertAction:
    type: AlertActionType
    label: str
    url: Optional[str] = None


@dataclass(frozen=True)
class AlertRule:
    """A threshold plus the alert it raises. Severity is never derived.

    ``actions`` replaces the default view/investigate actions when set.
    """

    threshold: AlertThreshold
    alert_type: AlertType
    severity: AlertSeverity
    workflow_id: Optional[str] = None
    title: Optional[str] = None
    expected_value: Optional[float] = None
    impact: Optional[AlertImpact] = None
    actions: tuple[AlertAction, ...] = ()


@dataclass
class AlertData:
    current_value: float
    threshold: float
    expected_value: Optional[float] = None
    impact: Optional[AlertImpact] = None


@dataclass
class ThresholdSnapshot:
    metric: str
    operator: ThresholdOperator
    value: float
    current_value: float


@dataclass
class BusinessAlert:
    """Append-only except ``acknowledged``/``resolved_at`` and the live reading."""

    type: AlertType
    severity: AlertSeverity
    title: str
    description: str
    data: AlertData
    threshold: ThresholdSnapshot
    workflow_id: Optional[str] = None
    actions: tuple[AlertAction, ...] = ()
    acknowledged: bool = False
    resolved_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None

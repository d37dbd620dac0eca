"""Immutable input and result structures for workflow ROI calculations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .enums import BusinessStability, ImpactTier, RiskLevel, TaskFrequency
from .outcome import Metric


@dataclass(frozen=True)
class SoftwareCosts:
    """Recurring monthly software spend attributable to the workflow."""

    platform_subscription: float = 0.0
    third_party_integrations: float = 0.0
    infrastructure_costs: float = 0.0
    security_tools: float = 0.0
    monitoring_tools: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.platform_subscription
            + self.third_party_integrations
            + self.infrastructure_costs
            + self.security_tools
            + self.monitoring_tools
        )


@dataclass(frozen=True)
class TrainingCosts:
    initial_training: float = 0.0  # one-time
    ongoing_training: float = 0.0  # monthly
    certification_costs: float = 0.0  # annual
    knowledge_transfer: float = 0.0  # one-time


@dataclass(frozen=True)
class ErrorRates:
    """Error rates as percentages in [0, 100]."""

    manual: float = 0.0
    automated: float = 0.0


@dataclass(frozen=True)
class BusinessValue:
    revenue_impact: float = 0.0  # monthly revenue attributable to the workflow
    competitive_advantage: float = 0.0  # 0-100


@dataclass(frozen=True)
class ROIInputs:
    """Operational inputs for a single workflow. Times are in minutes."""

    manual_time_per_task: float
    task_frequency: TaskFrequency
    tasks_per_period: float
    employee_hourly_rate: float
    automated_time_per_task: float = 0.0
    implementation_hours: float = 8.0
    implementation_rate: Optional[float] = None  # defaults to employee_hourly_rate
    ongoing_maintenance_hours: float = 0.0  # monthly
    software_costs: SoftwareCosts = field(default_factory=SoftwareCosts)
    training_costs: TrainingCosts = field(default_factory=TrainingCosts)
    error_rate: ErrorRates = field(default_factory=ErrorRates)
    rework_cost: float = 0.0
    compliance_risk: float = 0.0  # annual cost of non-compliance
    business_value: BusinessValue = field(default_factory=BusinessValue)
    scalability_factor: float = 1.0

    @property
    def effective_implementation_rate(self) -> float:
        if self.implementation_rate is None:
            return self.employee_hourly_rate
        return self.implementation_rate


@dataclass(frozen=True)
class ROIAssumptions:
    """Macro parameters for NPV, IRR and multi-year projections (percentages)."""

    inflation_rate: float = 3.0
    discount_rate: float = 10.0
    growth_rate: float = 0.0
    technology_lifespan: float = 5.0  # years
    employee_turnover_rate: float = 0.0  # share of trained staff replaced each year
    error_cost_escalation: float = 0.0
    compliance_risk_probability: float = 0.0  # chance the compliance cost is incurred
    business_stability: BusinessStability = BusinessStability.STABLE


@dataclass(frozen=True)
class YearProjection:
    """Single year in the multi-year projection."""

    year: int
    gross_savings: float
    operating_cost: float
    net_savings: float
    cumulative_net_savings: float


@dataclass(frozen=True)
class ROIResults:
    """Derived financial, time, efficiency, quality and strategic metrics."""

    # Financial
    gross_monthly_savings: float
    monthly_savings: float
    annual_savings: float
    implementation_cost: float
    monthly_operating_cost: float
    net_present_value: float
    internal_rate_of_return: Metric

    # Time
    payback_period: Metric  # months
    time_to_value: int  # days
    break_even_month: Metric

    # ROI, percentages
    simple_roi: Metric
    annual_roi: Metric
    three_year_roi: Metric
    five_year_roi: Metric

    # Efficiency
    tasks_per_month: float
    hours_per_month: float
    time_saved_per_task: float
    error_reduction: Metric
    productivity_increase: Metric

    # Quality
    accuracy_improvement: Metric
    consistency_score: float
    compliance_improvement: Metric

    # Strategic
    scalability_score: float
    risk_reduction: Metric
    competitive_advantage: float

    year_projections: tuple[YearProjection, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class SensitivityVariable:
    """A perturbable input; ``name`` is an ``ROIInputs`` field path."""

    name: str
    min_value: float
    max_value: float
    base_value: Optional[float] = None
    impact: Optional[ImpactTier] = None
    roi_at_min: Optional[Metric] = None
    roi_at_max: Optional[Metric] = None
    impact_on_roi: Optional[Metric] = None  # change in simple ROI per unit


@dataclass(frozen=True)
class SensitivityScenarios:
    optimistic: ROIResults
    pessimistic: ROIResults
    most_likely: ROIResults


@dataclass(frozen=True)
class SensitivityAnalysis:
    variables: tuple[SensitivityVariable, ...]
    scenarios: SensitivityScenarios


@dataclass(frozen=True)
class RiskFactor:
    factor: str
    probability: float  # 0-1
    impact: float  # financial impact before mitigation
    residual_risk: float  # financial impact after mitigation
    mitigation: str = ""


@dataclass(frozen=True)
class RiskCategories:
    """Category scores, each 0-100."""

    technical: float = 0.0
    financial: float = 0.0
    operational: float = 0.0
    strategic: float = 0.0


@dataclass(frozen=True)
class RiskAssessment:
    overall_risk_score: float  # 0-100
    risk_level: RiskLevel
    risk_categories: RiskCategories
    risk_factors: tuple[RiskFactor, ...]
    factor_adjustment: float
    mitigation_strategies: tuple[str, ...] = ()
    contingency_plans: tuple[str, ...] = ()


@dataclass(frozen=True)
class IndustryAverages:
    roi_percentage: float
    payback_period: float  # months
    adoption_rate: float  # percentage
    error_reduction: Optional[float] = None
    productivity_increase: Optional[float] = None


@dataclass(frozen=True)
class MetricComparison:
    metric: str
    actual: Metric
    benchmark: float
    gap_percent: Metric  # positive means better than benchmark
    higher_is_better: bool
    underperforms: bool


@dataclass(frozen=True)
class BenchmarkComparison:
    industry: str
    industry_averages: IndustryAverages
    comparisons: tuple[MetricComparison, ...]
    best_practices: tuple[str, ...] = ()
    improvement_opportunities: tuple[str, ...] = ()

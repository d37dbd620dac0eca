from .business import (
    AlertAction,
    AlertData,
    AlertRule,
    AlertThreshold,
    BusinessAlert,
    BusinessDashboard,
    BusinessInsight,
    BusinessMetric,
    BusinessMetricMetadata,
    BusinessMetricsFilter,
    BusinessRecommendation,
    BusinessSummary,
    BusinessTrend,
    CategoryROI,
    ExpectedBenefit,
    MetricAggregation,
    PeriodAggregation,
    Percentiles,
    ThresholdSnapshot,
    TimeSeriesData,
    TrendPoint,
    WorkflowBusinessMetrics,
    WorkflowMetric,
    WorkflowPerformanceMetrics,
)
from .calculation import ActualResults, MetricVariance, ROICalculation, ValidationData
from .outcome import Metric, NonConvergent, is_defined, value_or
from .roi import (
    BenchmarkComparison,
    BusinessValue,
    ErrorRates,
    IndustryAverages,
    MetricComparison,
    RiskAssessment,
    RiskCategories,
    RiskFactor,
    ROIAssumptions,
    ROIInputs,
    ROIResults,
    SensitivityAnalysis,
    SensitivityScenarios,
    SensitivityVariable,
    SoftwareCosts,
    TrainingCosts,
    YearProjection,
)
from .serialize import to_jsonable

__all__ = [
    "ActualResults",
    "AlertAction",
    "AlertData",
    "AlertRule",
    "AlertThreshold",
    "BenchmarkComparison",
    "BusinessAlert",
    "BusinessDashboard",
    "BusinessInsight",
    "BusinessMetric",
    "BusinessMetricMetadata",
    "BusinessMetricsFilter",
    "BusinessRecommendation",
    "BusinessSummary",
    "BusinessTrend",
    "BusinessValue",
    "CategoryROI",
    "ErrorRates",
    "ExpectedBenefit",
    "IndustryAverages",
    "Metric",
    "MetricAggregation",
    "MetricComparison",
    "MetricVariance",
    "NonConvergent",
    "PeriodAggregation",
    "Percentiles",
    "RiskAssessment",
    "RiskCategories",
    "RiskFactor",
    "ROIAssumptions",
    "ROICalculation",
    "ROIInputs",
    "ROIResults",
    "SensitivityAnalysis",
    "SensitivityScenarios",
    "SensitivityVariable",
    "SoftwareCosts",
    "ThresholdSnapshot",
    "TimeSeriesData",
    "TrainingCosts",
    "TrendPoint",
    "ValidationData",
    "WorkflowBusinessMetrics",
    "WorkflowMetric",
    "WorkflowPerformanceMetrics",
    "YearProjection",
    "is_defined",
    "to_jsonable",
    "value_or",
]

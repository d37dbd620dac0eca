from .aggregator import aggregate, aggregate_samples, aggregate_time_series, filter_metrics, trend_from_samples
from .alerts import AlertEvaluator, default_summary_rules, default_workflow_rules, threshold_breached
from .calculator import CoreCalculator, validate_assumptions, validate_inputs
from .dashboard import DashboardBuilder
from .risk import RiskAssessor, estimate_category_scores, risk_level
from .sensitivity import SensitivityAnalyzer
from .service import ROIEngine

__all__ = [
    "AlertEvaluator",
    "CoreCalculator",
    "DashboardBuilder",
    "ROIEngine",
    "RiskAssessor",
    "SensitivityAnalyzer",
    "aggregate",
    "aggregate_samples",
    "aggregate_time_series",
    "default_summary_rules",
    "default_workflow_rules",
    "estimate_category_scores",
    "filter_metrics",
    "risk_level",
    "threshold_breached",
    "trend_from_samples",
    "validate_assumptions",
    "validate_inputs",
]

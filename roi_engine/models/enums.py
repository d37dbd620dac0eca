from enum import Enum


class TaskFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class CalculationType(str, Enum):
    SIMPLE = "simple"
    DETAILED = "detailed"
    COMPARATIVE = "comparative"


class CalculationStatus(str, Enum):
    DRAFT = "draft"
    VALIDATED = "validated"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class BusinessStability(str, Enum):
    STABLE = "stable"
    GROWING = "growing"
    DECLINING = "declining"
    VOLATILE = "volatile"


class BusinessMetricType(str, Enum):
    ROI = "roi"
    TIME_SAVED = "time_saved"
    COST_REDUCTION = "cost_reduction"
    EFFICIENCY_GAIN = "efficiency_gain"
    ERROR_REDUCTION = "error_reduction"
    REVENUE_INCREASE = "revenue_increase"
    PROCESS_SPEED = "process_speed"
    CUSTOMER_SATISFACTION = "customer_satisfaction"
    EMPLOYEE_PRODUCTIVITY = "employee_productivity"
    COMPLIANCE_SCORE = "compliance_score"


class MeasurementPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class ValidationStatus(str, Enum):
    VALIDATED = "validated"
    PENDING = "pending"
    DISPUTED = "disputed"


class ImpactTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ThresholdOperator(str, Enum):
    GT = "gt"
    LT = "lt"
    EQ = "eq"
    GTE = "gte"
    LTE = "lte"


class AlertType(str, Enum):
    WORKFLOW_FAILURE = "workflow_failure"
    ROI_DROP = "roi_drop"
    COST_SPIKE = "cost_spike"
    SECURITY_RISK = "security_risk"
    COMPLIANCE_ISSUE = "compliance_issue"
    OPPORTUNITY = "opportunity"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AlertImpact(str, Enum):
    COST = "cost"
    TIME = "time"
    REVENUE = "revenue"
    QUALITY = "quality"


class AlertActionType(str, Enum):
    VIEW = "view"
    FIX = "fix"
    OPTIMIZE = "optimize"
    INVESTIGATE = "investigate"
    DISMISS = "dismiss"


class WorkflowStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"
    MAINTENANCE = "maintenance"


class InsightType(str, Enum):
    OPTIMIZATION = "optimization"
    RISK = "risk"
    OPPORTUNITY = "opportunity"
    TREND = "trend"


class RecommendationCategory(str, Enum):
    COST_OPTIMIZATION = "cost_optimization"
    EFFICIENCY = "efficiency"
    RISK_MITIGATION = "risk_mitigation"
    GROWTH = "growth"
    COMPLIANCE = "compliance"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class NonConvergenceReason(str, Enum):
    NEVER_PAYS_BACK = "never_pays_back"
    ZERO_COST = "zero_cost"
    ZERO_BASELINE = "zero_baseline"
    NO_SIGN_CHANGE = "no_sign_change"
    ITERATION_LIMIT = "iteration_limit"
    DEGENERATE_RANGE = "degenerate_range"
    UPSTREAM = "upstream"

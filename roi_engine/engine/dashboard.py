"""Dashboard assembly: a pure fold over already-computed workflow metrics."""

from __future__ import annotations

import copy
import logging
from collections import defaultdict
from dataclasses import replace
from typing import Optional, Sequence

from roi_engine.config import Settings, get_settings
from roi_engine.errors import ConfigurationError
from roi_engine.models.business import (
    BusinessAlert,
    BusinessDashboard,
    BusinessInsight,
    BusinessRecommendation,
    BusinessSummary,
    BusinessTrend,
    CategoryROI,
    ExpectedBenefit,
    WorkflowMetric,
)
from roi_engine.models.enums import (
    ImpactTier,
    InsightType,
    NonConvergenceReason,
    Priority,
    RecommendationCategory,
    TrendDirection,
    WorkflowStatus,
)
from roi_engine.models.outcome import Metric, NonConvergent, is_defined

logger = logging.getLogger(__name__)

HIGH_RISK_SCORE = 70.0
HIGH_ROI_PERCENTAGE = 200.0
LOW_UPTIME_PERCENTAGE = 90.0
# Operating cost above this share of monthly savings is worth a look
OPERATING_COST_SHARE = 0.30


class DashboardBuilder:
    """Builds a ``BusinessDashboard`` snapshot. Performs no I/O."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        if self.settings.trend_down_threshold >= self.settings.trend_up_threshold:
            raise ConfigurationError(
                "trend_down_threshold must be below trend_up_threshold "
                f"({self.settings.trend_down_threshold} >= {self.settings.trend_up_threshold})"
            )

    def build(
        self,
        workflow_metrics: Sequence[WorkflowMetric],
        trends: Sequence[BusinessTrend],
        organization_id: str = "",
        alerts: Sequence[BusinessAlert] = (),
    ) -> BusinessDashboard:
        classified = tuple(self.classify_trend(t) for t in trends)
        workflows = tuple(workflow_metrics)
        dashboard = BusinessDashboard(
            organization_id=organization_id,
            summary=self.summarize(workflows),
            workflow_metrics=workflows,
            trends=classified,
            roi_by_category=self.roi_by_category(workflows),
            insights=self.insights(workflows, classified),
            recommendations=self.recommendations(workflows),
            # Copies: the evaluator keeps refreshing its own alerts in place
            alerts=tuple(copy.deepcopy(alert) for alert in alerts),
        )
        logger.info(
            "Dashboard built for %s: %d workflows, %d trends, %d insights",
            organization_id or "<unscoped>",
            len(workflows),
            len(classified),
            len(dashboard.insights),
        )
        return dashboard

    # ------------------------------------------------------------------
    # Trends
    # ------------------------------------------------------------------

    def classify_trend(self, trend: BusinessTrend) -> BusinessTrend:
        """Set direction and change rate from the two most recent points."""
        points = tuple(sorted(trend.data_points, key=lambda p: p.date))
        if len(points) < 2:
            return replace(
                trend, data_points=points, trend_direction=TrendDirection.STABLE, change_rate=0.0
            )

        previous, latest = points[-2].value, points[-1].value
        change: Metric
        if previous == 0:
            change = NonConvergent(
                metric="change_rate",
                reason=NonConvergenceReason.ZERO_BASELINE,
                detail="previous data point is zero",
            )
            if latest > 0:
                direction = TrendDirection.UP
            elif latest < 0:
                direction = TrendDirection.DOWN
            else:
                direction = TrendDirection.STABLE
        else:
            change = (latest - previous) / abs(previous) * 100
            if change > self.settings.trend_up_threshold:
                direction = TrendDirection.UP
            elif change < self.settings.trend_down_threshold:
                direction = TrendDirection.DOWN
            else:
                direction = TrendDirection.STABLE

        return replace(trend, data_points=points, trend_direction=direction, change_rate=change)

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    @staticmethod
    def summarize(workflows: Sequence[WorkflowMetric]) -> BusinessSummary:
        count = len(workflows)
        business = [w.business_metrics for w in workflows]

        paybacks = [b.payback_period for b in business if is_defined(b.payback_period)]
        average_payback: Metric
        if paybacks:
            average_payback = sum(paybacks) / len(paybacks)
        elif count:
            average_payback = NonConvergent(
                metric="average_payback_period",
                reason=NonConvergenceReason.NEVER_PAYS_BACK,
                detail="no workflow pays back",
            )
        else:
            average_payback = 0.0

        executions = sum(w.performance_metrics.execution_count for w in workflows)
        if executions > 0:
            efficiency = (
                sum(
                    w.performance_metrics.success_rate * w.performance_metrics.execution_count
                    for w in workflows
                )
                / executions
            )
        elif count:
            efficiency = sum(w.performance_metrics.success_rate for w in workflows) / count
        else:
            efficiency = 0.0

        saving_weights = [max(b.monthly_savings, 0.0) for b in business]
        total_weight = sum(saving_weights)
        if total_weight > 0:
            risk = sum(b.risk_score * w for b, w in zip(business, saving_weights)) / total_weight
        elif count:
            risk = sum(b.risk_score for b in business) / count
        else:
            risk = 0.0

        return BusinessSummary(
            total_workflows=count,
            active_workflows=sum(1 for w in workflows if w.status is WorkflowStatus.ACTIVE),
            total_monthly_savings=sum(b.monthly_savings for b in business),
            total_hours_saved=sum(b.hours_per_month for b in business),
            average_roi=sum(b.roi_percentage for b in business) / count if count else 0.0,
            average_payback_period=average_payback,
            total_implementation_cost=sum(b.implementation_cost for b in business),
            total_monthly_operating_cost=sum(b.monthly_operating_cost for b in business),
            overall_efficiency_gain=efficiency,
            risk_score=risk,
        )

    @staticmethod
    def roi_by_category(workflows: Sequence[WorkflowMetric]) -> tuple[CategoryROI, ...]:
        grouped: dict[str, list[float]] = defaultdict(list)
        for w in workflows:
            grouped[w.category].append(w.business_metrics.roi_percentage)
        return tuple(
            CategoryROI(
                category=category,
                workflows=len(rois),
                total_roi=sum(rois),
                average_roi=sum(rois) / len(rois),
            )
            for category, rois in sorted(grouped.items())
        )

    # ------------------------------------------------------------------
    # Insights and recommendations
    # ------------------------------------------------------------------

    @staticmethod
    def insights(
        workflows: Sequence[WorkflowMetric],
        trends: Sequence[BusinessTrend],
    ) -> tuple[BusinessInsight, ...]:
        found: list[BusinessInsight] = []

        for trend in trends:
            if trend.trend_direction is not TrendDirection.DOWN:
                continue
            rate = f"{trend.change_rate:.1f}%" if is_defined(trend.change_rate) else "sharply"
            found.append(
                BusinessInsight(
                    type=InsightType.TREND,
                    title=f"Declining {trend.metric_type.value.replace('_', ' ')}",
                    description=f"The latest {trend.period.value} value fell {rate} from the previous period.",
                    impact=ImpactTier.MEDIUM,
                    confidence=75.0,
                    recommended_actions=("Review recent workflow changes", "Check input data quality"),
                )
            )

        risky = [w for w in workflows if w.business_metrics.risk_score > HIGH_RISK_SCORE]
        if risky:
            found.append(
                BusinessInsight(
                    type=InsightType.RISK,
                    title=f"{len(risky)} high-risk workflow(s)",
                    description="Risk score above "
                    f"{HIGH_RISK_SCORE:g} for: {', '.join(w.workflow_name for w in risky)}.",
                    impact=ImpactTier.HIGH,
                    confidence=80.0,
                    potential_value=sum(w.business_metrics.monthly_savings for w in risky),
                    recommended_actions=("Add monitoring and manual fallbacks", "Review error handling"),
                    related_workflows=tuple(w.workflow_id for w in risky),
                )
            )

        strong = [w for w in workflows if w.business_metrics.roi_percentage > HIGH_ROI_PERCENTAGE]
        if strong:
            found.append(
                BusinessInsight(
                    type=InsightType.OPPORTUNITY,
                    title="High-ROI automations to replicate",
                    description=f"{len(strong)} workflow(s) return more than {HIGH_ROI_PERCENTAGE:g}% ROI.",
                    impact=ImpactTier.HIGH,
                    confidence=70.0,
                    potential_value=sum(w.business_metrics.monthly_savings for w in strong),
                    recommended_actions=("Apply the same pattern to similar processes",),
                    related_workflows=tuple(w.workflow_id for w in strong),
                )
            )
        return tuple(found)

    @staticmethod
    def recommendations(workflows: Sequence[WorkflowMetric]) -> tuple[BusinessRecommendation, ...]:
        found: list[BusinessRecommendation] = []
        for w in workflows:
            b = w.business_metrics
            if w.performance_metrics.uptime < LOW_UPTIME_PERCENTAGE:
                found.append(
                    BusinessRecommendation(
                        category=RecommendationCategory.EFFICIENCY,
                        priority=Priority.HIGH,
                        title=f"Optimize {w.workflow_name}",
                        description=f"Uptime is {w.performance_metrics.uptime:.1f}%; "
                        "stabilizing this workflow recovers lost savings.",
                        expected_benefit=ExpectedBenefit(
                            financial=b.monthly_savings * 0.2,
                            hours_saved=b.hours_per_month * 0.1,
                            risk_reduction=15.0,
                        ),
                        implementation_effort=ImpactTier.MEDIUM,
                        related_workflows=(w.workflow_id,),
                    )
                )
            if b.roi_percentage > HIGH_ROI_PERCENTAGE:
                found.append(
                    BusinessRecommendation(
                        category=RecommendationCategory.GROWTH,
                        priority=Priority.MEDIUM,
                        title=f"Expand {w.workflow_name}",
                        description=f"ROI of {b.roi_percentage:.0f}% makes this a template for similar processes.",
                        expected_benefit=ExpectedBenefit(
                            financial=b.monthly_savings * 0.5,
                            hours_saved=b.hours_per_month * 0.5,
                        ),
                        implementation_effort=ImpactTier.HIGH,
                        related_workflows=(w.workflow_id,),
                    )
                )
            if b.monthly_savings > 0 and b.monthly_operating_cost > b.monthly_savings * OPERATING_COST_SHARE:
                found.append(
                    BusinessRecommendation(
                        category=RecommendationCategory.COST_OPTIMIZATION,
                        priority=Priority.LOW,
                        title=f"Reduce operating cost of {w.workflow_name}",
                        description="Operating cost exceeds "
                        f"{OPERATING_COST_SHARE:.0%} of monthly savings.",
                        expected_benefit=ExpectedBenefit(financial=b.monthly_operating_cost * 0.25),
                        implementation_effort=ImpactTier.LOW,
                        related_workflows=(w.workflow_id,),
                    )
                )
        return tuple(found)

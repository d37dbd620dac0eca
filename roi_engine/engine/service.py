"""Engine facade: the four public entry points wired to their components."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional, Sequence

from roi_engine.benchmarks import BenchmarkComparator, BenchmarkTable, get_industry_benchmark, load_benchmarks
from roi_engine.config import Settings, get_settings
from roi_engine.engine.aggregator import aggregate
from roi_engine.engine.alerts import AlertEvaluator, default_summary_rules, default_workflow_rules
from roi_engine.engine.calculator import CoreCalculator
from roi_engine.engine.dashboard import DashboardBuilder
from roi_engine.engine.risk import RiskAssessor, estimate_category_scores
from roi_engine.engine.sensitivity import SensitivityAnalyzer
from roi_engine.hooks.notifications import NotificationSink
from roi_engine.models.business import (
    AlertRule,
    BusinessAlert,
    BusinessDashboard,
    BusinessTrend,
    MetricAggregation,
    WorkflowMetric,
)
from roi_engine.models.calculation import ROICalculation
from roi_engine.models.enums import CalculationType
from roi_engine.models.roi import (
    RiskCategories,
    RiskFactor,
    ROIAssumptions,
    ROIInputs,
    SensitivityVariable,
)

logger = logging.getLogger(__name__)


class ROIEngine:
    """Computes ROI calculations, aggregations, dashboards and alerts.

    Everything except the alert registry is stateless; the engine never
    persists what it returns.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        benchmarks: Optional[BenchmarkTable] = None,
        sink: Optional[NotificationSink] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.calculator = CoreCalculator(self.settings)
        self.sensitivity = SensitivityAnalyzer(self.calculator)
        self.risk = RiskAssessor(self.settings)
        self.comparator = BenchmarkComparator(self.settings.benchmark_margin)
        self.dashboards = DashboardBuilder(self.settings)
        self.alerts = AlertEvaluator(sink, self.settings.resolved_alert_retention)
        self._benchmarks = benchmarks
        self._benchmarks_lock = threading.Lock()

    @property
    def benchmarks(self) -> BenchmarkTable:
        with self._benchmarks_lock:
            if self._benchmarks is None:
                self._benchmarks = load_benchmarks(self.settings.benchmark_file)
                logger.info(
                    "Loaded benchmarks v%s (%d industries)",
                    self._benchmarks.version,
                    len(self._benchmarks.industries),
                )
            return self._benchmarks

    def compute_roi(
        self,
        inputs: ROIInputs,
        assumptions: ROIAssumptions,
        sensitivity_variables: Optional[Sequence[SensitivityVariable]] = None,
        *,
        organization_id: str = "",
        workflow_id: str = "",
        user_id: str = "",
        industry: Optional[str] = None,
        risk_categories: Optional[RiskCategories] = None,
        risk_factors: Sequence[RiskFactor] = (),
        calculation_type: Optional[CalculationType] = None,
    ) -> ROICalculation:
        """Run the full pipeline for one workflow and return a draft calculation.

        Validation failures raise before anything is computed; metrics
        without a numeric answer come back as ``NonConvergent`` markers.
        """
        results = self.calculator.compute(inputs, assumptions)

        sensitivity = None
        if sensitivity_variables:
            sensitivity = self.sensitivity.analyze(inputs, assumptions, sensitivity_variables)

        categories = risk_categories or estimate_category_scores(inputs, results, assumptions)
        risk_assessment = self.risk.assess(
            categories,
            risk_factors,
            exposure_reference=results.implementation_cost,
        )

        industry_id = (industry or self.settings.default_industry).lower()
        benchmark = get_industry_benchmark(self.benchmarks, industry_id)
        comparison = self.comparator.compare(
            results,
            benchmark.to_averages(),
            industry=industry_id,
            best_practices=benchmark.best_practices,
        )

        if calculation_type is None:
            calculation_type = CalculationType.DETAILED if sensitivity else CalculationType.SIMPLE

        calculation = ROICalculation(
            organization_id=organization_id,
            workflow_id=workflow_id,
            user_id=user_id,
            inputs=inputs,
            assumptions=assumptions,
            results=results,
            risk_assessment=risk_assessment,
            calculation_type=calculation_type,
            sensitivity_analysis=sensitivity,
            benchmark_comparison=comparison,
        )
        logger.info(
            "ROI calculation %s for workflow=%s industry=%s risk=%s",
            calculation.id,
            workflow_id or "<none>",
            industry_id,
            risk_assessment.risk_level.value,
        )
        return calculation

    def aggregate_metrics(self, series: Iterable[float]) -> MetricAggregation:
        return aggregate(series)

    def build_dashboard(
        self,
        workflow_metrics: Sequence[WorkflowMetric],
        trends: Sequence[BusinessTrend],
        organization_id: str = "",
        evaluate_default_rules: bool = True,
    ) -> BusinessDashboard:
        """Build a dashboard, optionally running the standard alert rules.

        Per-workflow health rules run first, then the organization-level
        expansion rule. Alerts go through the shared evaluator, so repeated
        dashboards refresh open alerts rather than duplicating them.
        """
        alerts: list[BusinessAlert] = []
        if evaluate_default_rules:
            rules = [r for workflow in workflow_metrics for r in default_workflow_rules(workflow)]
            rules.extend(default_summary_rules(self.dashboards.summarize(workflow_metrics)))
            for metric_name, value, rule in rules:
                alert = self.alerts.evaluate(metric_name, value, rule)
                if alert is not None:
                    alerts.append(alert)
        return self.dashboards.build(
            workflow_metrics,
            trends,
            organization_id=organization_id,
            alerts=alerts,
        )

    def evaluate_alert(
        self,
        metric_name: str,
        current_value: float,
        rule: AlertRule,
    ) -> Optional[BusinessAlert]:
        return self.alerts.evaluate(metric_name, current_value, rule)

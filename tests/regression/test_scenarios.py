"""Regression tests: reference scenarios with known answers.

These pin the headline figures so formula changes that move them are caught.
"""

import pytest

from roi_engine.models import AlertRule, AlertThreshold, NonConvergent, ROIInputs
from roi_engine.models.enums import AlertSeverity, AlertType, NonConvergenceReason, TaskFrequency


class TestScenarioA:
    """100 weekly tasks cut from 60 to 5 minutes, 40h implementation at $100/h."""

    def test_monthly_tasks(self, engine, scenario_a, assumptions):
        results = engine.compute_roi(scenario_a, assumptions).results
        assert results.tasks_per_month == pytest.approx(433.3, rel=1e-2)

    def test_monthly_savings(self, engine, scenario_a, assumptions):
        results = engine.compute_roi(scenario_a, assumptions).results
        assert results.monthly_savings == pytest.approx(9930, rel=1e-2)

    def test_implementation_cost(self, engine, scenario_a, assumptions):
        results = engine.compute_roi(scenario_a, assumptions).results
        assert results.implementation_cost == 4000

    def test_payback_period(self, engine, scenario_a, assumptions):
        results = engine.compute_roi(scenario_a, assumptions).results
        assert results.payback_period == pytest.approx(0.40, abs=0.01)

    def test_benchmark_and_risk_attached(self, engine, scenario_a, assumptions):
        calculation = engine.compute_roi(scenario_a, assumptions, industry="finance")
        assert calculation.benchmark_comparison.industry == "finance"
        assert 0 <= calculation.risk_assessment.overall_risk_score <= 100


class TestScenarioB:
    def test_empty_series(self, engine):
        aggregation = engine.aggregate_metrics([])
        assert aggregation.sum == 0
        assert aggregation.count == 0
        assert aggregation.average == 0
        p = aggregation.percentiles
        assert (p.p25, p.p50, p.p75, p.p90, p.p95) == (0, 0, 0, 0, 0)


class TestScenarioC:
    def test_repeat_breach_updates_same_alert(self, engine, sink):
        rule = AlertRule(
            threshold=AlertThreshold(metric="errorRate", operator="gt", value=5),
            alert_type=AlertType.WORKFLOW_FAILURE,
            severity=AlertSeverity.WARNING,
            workflow_id="wf-c",
        )
        first = engine.evaluate_alert("errorRate", 7, rule)
        second = engine.evaluate_alert("errorRate", 7.5, rule)

        assert first is not None
        assert second.id == first.id
        assert second.data.current_value == 7.5
        assert len(engine.alerts.open_alerts()) == 1
        assert len(sink.alerts) == 1


class TestScenarioD:
    def test_zero_implementation_cost(self, engine, assumptions):
        inputs = ROIInputs(
            manual_time_per_task=60,
            automated_time_per_task=5,
            task_frequency=TaskFrequency.WEEKLY,
            tasks_per_period=100,
            employee_hourly_rate=25,
            implementation_hours=0,
        )
        results = engine.compute_roi(inputs, assumptions).results
        assert results.implementation_cost == 0
        assert isinstance(results.simple_roi, NonConvergent)
        assert results.simple_roi.reason is NonConvergenceReason.ZERO_COST

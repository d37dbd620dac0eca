"""Shared test fixtures for the ROI engine test suite."""

from datetime import datetime, timezone

import pytest

from roi_engine.benchmarks import load_benchmarks
from roi_engine.config import Settings
from roi_engine.engine import CoreCalculator, ROIEngine
from roi_engine.models import (
    ErrorRates,
    ROIAssumptions,
    ROIInputs,
    SoftwareCosts,
    WorkflowBusinessMetrics,
    WorkflowMetric,
    WorkflowPerformanceMetrics,
)
from roi_engine.models.enums import TaskFrequency, WorkflowStatus


class RecordingSink:
    """Notification sink that keeps every alert it is handed."""

    def __init__(self):
        self.alerts = []

    def notify(self, alert):
        self.alerts.append(alert)


def make_workflow(
    workflow_id="wf-1",
    name="Invoice intake",
    category="finance",
    status=WorkflowStatus.ACTIVE,
    monthly_savings=1000.0,
    hours_per_month=40.0,
    roi=150.0,
    payback=3.0,
    risk_score=30.0,
    implementation_cost=3000.0,
    monthly_operating_cost=100.0,
    uptime=99.0,
    executions=100,
    success_rate=98.0,
) -> WorkflowMetric:
    """Helper to create a WorkflowMetric with minimal boilerplate."""
    return WorkflowMetric(
        workflow_id=workflow_id,
        workflow_name=name,
        category=category,
        status=status,
        business_metrics=WorkflowBusinessMetrics(
            monthly_savings=monthly_savings,
            hours_per_month=hours_per_month,
            roi_percentage=roi,
            payback_period=payback,
            risk_score=risk_score,
            implementation_cost=implementation_cost,
            monthly_operating_cost=monthly_operating_cost,
        ),
        performance_metrics=WorkflowPerformanceMetrics(
            uptime=uptime,
            execution_count=executions,
            success_rate=success_rate,
            average_execution_time=12.0,
        ),
        last_updated=datetime(2024, 6, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def calculator(settings) -> CoreCalculator:
    return CoreCalculator(settings)


@pytest.fixture
def assumptions() -> ROIAssumptions:
    return ROIAssumptions()


@pytest.fixture
def scenario_a() -> ROIInputs:
    """Weekly task automation: 100 tasks/week, 60 -> 5 minutes, $25/h.

    Implementation is 40 hours at $100/h with no error, training or
    software costs.
    """
    return ROIInputs(
        manual_time_per_task=60,
        automated_time_per_task=5,
        task_frequency=TaskFrequency.WEEKLY,
        tasks_per_period=100,
        employee_hourly_rate=25,
        implementation_hours=40,
        implementation_rate=100,
    )


@pytest.fixture
def modest_workflow() -> ROIInputs:
    """Slow-to-recover automation whose IRR lies inside the search bounds."""
    return ROIInputs(
        manual_time_per_task=60,
        automated_time_per_task=30,
        task_frequency=TaskFrequency.WEEKLY,
        tasks_per_period=10,
        employee_hourly_rate=25,
        implementation_hours=160,
        implementation_rate=100,
    )


@pytest.fixture
def detailed_workflow() -> ROIInputs:
    """Workflow with operating costs and error rates populated."""
    return ROIInputs(
        manual_time_per_task=30,
        automated_time_per_task=3,
        task_frequency=TaskFrequency.DAILY,
        tasks_per_period=20,
        employee_hourly_rate=40,
        implementation_hours=80,
        implementation_rate=120,
        ongoing_maintenance_hours=2,
        software_costs=SoftwareCosts(platform_subscription=200, monitoring_tools=50),
        error_rate=ErrorRates(manual=10, automated=2),
        rework_cost=15,
    )


@pytest.fixture
def benchmarks():
    return load_benchmarks()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def engine(settings, benchmarks, sink) -> ROIEngine:
    return ROIEngine(settings, benchmarks=benchmarks, sink=sink)

"""Tests for FastAPI endpoints: ROI, aggregation, dashboard, alerts, health."""

import inspect
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from roi_engine import main
from roi_engine.main import app

SCENARIO_A = {
    "manual_time_per_task": 60,
    "automated_time_per_task": 5,
    "task_frequency": "weekly",
    "tasks_per_period": 100,
    "employee_hourly_rate": 25,
    "implementation_hours": 40,
    "implementation_rate": 100,
}


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _workflow(workflow_id: str, uptime: float = 99.0, roi: float = 150.0) -> dict:
    return {
        "workflow_id": workflow_id,
        "workflow_name": "Invoice intake",
        "category": "finance",
        "status": "active",
        "business_metrics": {
            "monthly_savings": 1000,
            "hours_per_month": 40,
            "roi_percentage": roi,
            "payback_period": 3,
            "risk_score": 30,
        },
        "performance_metrics": {
            "uptime": uptime,
            "execution_count": 100,
            "success_rate": 98,
            "average_execution_time": 12,
        },
    }


def _rule(workflow_id: str) -> dict:
    return {
        "threshold": {"metric": "errorRate", "operator": "gt", "value": 5},
        "alert_type": "workflow_failure",
        "severity": "warning",
        "workflow_id": workflow_id,
    }


class TestROIEndpoint:
    @pytest.mark.asyncio
    async def test_scenario_a(self):
        async with _client() as client:
            resp = await client.post("/api/roi", json={"inputs": SCENARIO_A, "workflow_id": "wf-a"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "draft"
        assert data["results"]["implementation_cost"] == 4000
        assert data["results"]["payback_period"] == pytest.approx(0.40, abs=0.01)
        assert data["benchmark_comparison"]["industry"] == "technology"
        assert data["sensitivity_analysis"] is None
        assert data["calculation_type"] == "simple"

    @pytest.mark.asyncio
    async def test_with_sensitivity(self):
        body = {
            "inputs": SCENARIO_A,
            "industry": "retail",
            "sensitivity_variables": [
                {"name": "employee_hourly_rate", "min_value": 20, "max_value": 30},
            ],
        }
        async with _client() as client:
            resp = await client.post("/api/roi", json=body)
        assert resp.status_code == 200
        scenarios = resp.json()["sensitivity_analysis"]["scenarios"]
        assert scenarios["optimistic"]["simple_roi"] > scenarios["pessimistic"]["simple_roi"]
        assert resp.json()["calculation_type"] == "detailed"

    @pytest.mark.asyncio
    async def test_zero_cost_returns_tagged_sentinel(self):
        body = {"inputs": {**SCENARIO_A, "implementation_hours": 0}}
        async with _client() as client:
            resp = await client.post("/api/roi", json=body)
        assert resp.status_code == 200
        simple_roi = resp.json()["results"]["simple_roi"]
        assert simple_roi["non_convergent"] is True
        assert simple_roi["reason"] == "zero_cost"

    @pytest.mark.asyncio
    async def test_invalid_input_is_422_with_field(self):
        body = {"inputs": {**SCENARIO_A, "employee_hourly_rate": -1}}
        async with _client() as client:
            resp = await client.post("/api/roi", json=body)
        assert resp.status_code == 422
        assert resp.json()["field"] == "employee_hourly_rate"
        assert resp.json()["value"] == -1

    @pytest.mark.asyncio
    async def test_unknown_industry_is_500(self):
        body = {"inputs": SCENARIO_A, "industry": "aerospace"}
        async with _client() as client:
            resp = await client.post("/api/roi", json=body)
        assert resp.status_code == 500
        assert "aerospace" in resp.json()["detail"]


class TestAggregateEndpoint:
    @pytest.mark.asyncio
    async def test_empty_series(self):
        async with _client() as client:
            resp = await client.post("/api/metrics/aggregate", json={"series": []})
        assert resp.status_code == 200
        aggregation = resp.json()["aggregation"]
        assert aggregation["count"] == 0
        assert aggregation["sum"] == 0
        assert aggregation["percentiles"]["p95"] == 0

    @pytest.mark.asyncio
    async def test_series_and_periods(self):
        body = {
            "series": [1, 2, 3, 4],
            "points": [
                {"timestamp": "2024-01-05T00:00:00Z", "value": 10},
                {"timestamp": "2024-02-05T00:00:00Z", "value": 20},
            ],
            "period": "monthly",
        }
        async with _client() as client:
            resp = await client.post("/api/metrics/aggregate", json=body)
        assert resp.json()["aggregation"]["average"] == 2.5
        assert len(resp.json()["periods"]) == 2


class TestDashboardEndpoint:
    @pytest.mark.asyncio
    async def test_dashboard_with_default_alerts(self):
        failing = f"wf-{uuid4()}"
        body = {
            "organization_id": "org-1",
            "workflow_metrics": [_workflow(f"wf-{uuid4()}"), _workflow(failing, uptime=50)],
            "trends": [
                {
                    "metric_type": "roi",
                    "period": "monthly",
                    "data_points": [
                        {"date": "2024-01-01T00:00:00Z", "value": 100},
                        {"date": "2024-02-01T00:00:00Z", "value": 110},
                    ],
                }
            ],
        }
        async with _client() as client:
            resp = await client.post("/api/dashboard", json=body)
        assert resp.status_code == 200
        data = resp.json()
        assert data["summary"]["total_workflows"] == 2
        assert data["trends"][0]["trend_direction"] == "up"
        assert [a["workflow_id"] for a in data["alerts"]] == [failing, None]
        assert data["alerts"][-1]["type"] == "opportunity"


class TestAlertEndpoints:
    @pytest.mark.asyncio
    async def test_evaluate_then_update(self):
        workflow_id = f"wf-{uuid4()}"
        async with _client() as client:
            first = await client.post(
                "/api/alerts/evaluate", json={"metric": "errorRate", "current_value": 7, "rule": _rule(workflow_id)}
            )
            second = await client.post(
                "/api/alerts/evaluate", json={"metric": "errorRate", "current_value": 7.5, "rule": _rule(workflow_id)}
            )
        assert first.json()["alert"]["id"] == second.json()["alert"]["id"]
        assert second.json()["alert"]["data"]["current_value"] == 7.5

    @pytest.mark.asyncio
    async def test_no_breach(self):
        async with _client() as client:
            resp = await client.post(
                "/api/alerts/evaluate", json={"metric": "errorRate", "current_value": 2, "rule": _rule("wf-x")}
            )
        assert resp.json() == {"alert": None}

    @pytest.mark.asyncio
    async def test_acknowledge_and_resolve(self):
        workflow_id = f"wf-{uuid4()}"
        async with _client() as client:
            created = await client.post(
                "/api/alerts/evaluate", json={"metric": "errorRate", "current_value": 9, "rule": _rule(workflow_id)}
            )
            alert_id = created.json()["alert"]["id"]
            acked = await client.post(f"/api/alerts/{alert_id}/acknowledge")
            resolved = await client.post(f"/api/alerts/{alert_id}/resolve")
            open_alerts = await client.get("/api/alerts")
        assert acked.json()["acknowledged"] is True
        assert resolved.json()["resolved_at"] is not None
        assert alert_id not in [a["id"] for a in open_alerts.json()["alerts"]]

    @pytest.mark.asyncio
    async def test_unknown_alert_is_404(self):
        async with _client() as client:
            resp = await client.post("/api/alerts/does-not-exist/acknowledge")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_metric_mismatch_is_500(self):
        async with _client() as client:
            resp = await client.post(
                "/api/alerts/evaluate", json={"metric": "uptime", "current_value": 9, "rule": _rule("wf-y")}
            )
        assert resp.status_code == 500


class TestHandlers:
    @pytest.mark.parametrize(
        "handler",
        [
            main.compute_roi,
            main.aggregate_metrics,
            main.build_dashboard,
            main.evaluate_alert,
            main.list_open_alerts,
            main.acknowledge_alert,
            main.resolve_alert,
        ],
    )
    def test_engine_handlers_run_in_threadpool(self, handler):
        assert not inspect.iscoroutinefunction(handler)


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self):
        async with _client() as client:
            resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

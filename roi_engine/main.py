"""FastAPI application for the ROI engine: REST endpoints over ROIEngine."""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from roi_engine.config import get_settings
from roi_engine.engine import ROIEngine, aggregate_time_series
from roi_engine.errors import ConfigurationError, ValidationError
from roi_engine.models import (
    AlertRule,
    BusinessTrend,
    RiskCategories,
    RiskFactor,
    ROIAssumptions,
    ROIInputs,
    SensitivityVariable,
    TimeSeriesData,
    WorkflowMetric,
    to_jsonable,
)
from roi_engine.models.enums import CalculationType, MeasurementPeriod

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="ROI Engine API", version="0.1.0")

# CORS: allow the dashboard dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Singleton engine; holds the open-alert registry
engine = ROIEngine(settings)


class ROIRequest(BaseModel):
    inputs: ROIInputs
    assumptions: ROIAssumptions = Field(default_factory=ROIAssumptions)
    sensitivity_variables: Optional[list[SensitivityVariable]] = None
    organization_id: str = ""
    workflow_id: str = ""
    user_id: str = ""
    industry: Optional[str] = None
    risk_categories: Optional[RiskCategories] = None
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    calculation_type: Optional[CalculationType] = None


class AggregateRequest(BaseModel):
    series: list[float] = Field(default_factory=list)
    points: list[TimeSeriesData] = Field(default_factory=list)
    period: Optional[MeasurementPeriod] = None


class DashboardRequest(BaseModel):
    organization_id: str = ""
    workflow_metrics: list[WorkflowMetric] = Field(default_factory=list)
    trends: list[BusinessTrend] = Field(default_factory=list)
    evaluate_default_rules: bool = True


class EvaluateAlertRequest(BaseModel):
    metric: str
    current_value: float
    rule: AlertRule


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    return str(value)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "field": exc.field, "value": _json_safe(exc.value)},
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc), "source": exc.source})


# Engine work is CPU-bound; plain def handlers run in the threadpool
@app.post("/api/roi")
def compute_roi(body: ROIRequest):
    """Compute a draft ROI calculation for one workflow."""
    calculation = engine.compute_roi(
        body.inputs,
        body.assumptions,
        body.sensitivity_variables,
        organization_id=body.organization_id,
        workflow_id=body.workflow_id,
        user_id=body.user_id,
        industry=body.industry,
        risk_categories=body.risk_categories,
        risk_factors=body.risk_factors,
        calculation_type=body.calculation_type,
    )
    return to_jsonable(calculation)


@app.post("/api/metrics/aggregate")
def aggregate_metrics(body: AggregateRequest):
    """Summarize a series; with ``period`` also bucket ``points`` by period."""
    response: dict[str, Any] = {"aggregation": to_jsonable(engine.aggregate_metrics(body.series))}
    if body.period is not None:
        response["periods"] = to_jsonable(aggregate_time_series(body.points, body.period))
    return response


@app.post("/api/dashboard")
def build_dashboard(body: DashboardRequest):
    dashboard = engine.build_dashboard(
        body.workflow_metrics,
        body.trends,
        organization_id=body.organization_id,
        evaluate_default_rules=body.evaluate_default_rules,
    )
    return to_jsonable(dashboard)


@app.post("/api/alerts/evaluate")
def evaluate_alert(body: EvaluateAlertRequest):
    """Return the raised or refreshed alert, or ``{"alert": null}``."""
    alert = engine.evaluate_alert(body.metric, body.current_value, body.rule)
    return {"alert": to_jsonable(alert)}


@app.get("/api/alerts")
def list_open_alerts():
    return {"alerts": to_jsonable(engine.alerts.open_alerts())}


@app.post("/api/alerts/{alert_id}/acknowledge")
def acknowledge_alert(alert_id: str):
    try:
        alert = engine.alerts.acknowledge(alert_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Alert not found")
    return to_jsonable(alert)


@app.post("/api/alerts/{alert_id}/resolve")
def resolve_alert(alert_id: str):
    try:
        alert = engine.alerts.resolve(alert_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Alert not found")
    return to_jsonable(alert)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}

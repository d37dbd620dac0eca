"""Threshold alert evaluation with per-(type, workflow) deduplication."""

from __future__ import annotations

import logging
import math
import operator
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Optional

from roi_engine.errors import ConfigurationError, ValidationError
from roi_engine.hooks.notifications import LoggingNotificationSink, NotificationSink
from roi_engine.models.business import (
    AlertAction,
    AlertData,
    AlertRule,
    AlertThreshold,
    BusinessAlert,
    BusinessSummary,
    ThresholdSnapshot,
    WorkflowMetric,
)
from roi_engine.models.enums import (
    AlertActionType,
    AlertImpact,
    AlertSeverity,
    AlertType,
    ThresholdOperator,
)

logger = logging.getLogger(__name__)

# Applied literally; EQ is exact float equality, callers pre-round if needed.
_OPERATORS: dict[ThresholdOperator, Callable[[float, float], bool]] = {
    ThresholdOperator.GT: operator.gt,
    ThresholdOperator.LT: operator.lt,
    ThresholdOperator.EQ: operator.eq,
    ThresholdOperator.GTE: operator.ge,
    ThresholdOperator.LTE: operator.le,
}

_OPERATOR_SYMBOLS = {
    ThresholdOperator.GT: ">",
    ThresholdOperator.LT: "<",
    ThresholdOperator.EQ: "==",
    ThresholdOperator.GTE: ">=",
    ThresholdOperator.LTE: "<=",
}

WORKFLOW_UPTIME_THRESHOLD = 80.0
WORKFLOW_EXPECTED_UPTIME = 95.0
LOW_ROI_THRESHOLD = 50.0
EXPECTED_ROI = 100.0
EXPANSION_WORKFLOW_LIMIT = 5.0
EXPANSION_SAVINGS_THRESHOLD = 1000.0


def threshold_breached(current_value: float, threshold: AlertThreshold) -> bool:
    return _OPERATORS[ThresholdOperator(threshold.operator)](current_value, threshold.value)


def _describe(metric: str, current_value: float, threshold: AlertThreshold) -> str:
    symbol = _OPERATOR_SYMBOLS[ThresholdOperator(threshold.operator)]
    return f"{metric} is {current_value:g} ({symbol} threshold {threshold.value:g})"


class AlertEvaluator:
    """Evaluates threshold rules and keeps at most one open alert per tag.

    Only the ``resolved_retention`` most recently resolved alerts stay
    retrievable; older ones are forgotten.
    """

    def __init__(
        self,
        sink: Optional[NotificationSink] = None,
        resolved_retention: int = 1000,
    ) -> None:
        if resolved_retention < 0:
            raise ConfigurationError(
                f"resolved_retention cannot be negative, got {resolved_retention}", source="settings"
            )
        self._sink = sink or LoggingNotificationSink()
        self._alerts: dict[str, BusinessAlert] = {}
        self._open: dict[tuple[AlertType, Optional[str]], str] = {}
        self._resolved: deque[str] = deque()
        self._resolved_retention = resolved_retention
        self._lock = threading.Lock()

    def evaluate(
        self,
        metric_name: str,
        current_value: float,
        rule: AlertRule,
    ) -> Optional[BusinessAlert]:
        """Return the alert for a breached threshold, or None.

        A breach while an unresolved alert with the same (type, workflow)
        exists refreshes that alert instead of raising a second one.
        """
        if metric_name != rule.threshold.metric:
            raise ConfigurationError(
                f"rule watches '{rule.threshold.metric}' but was evaluated for '{metric_name}'"
            )
        if not math.isfinite(current_value):
            raise ValidationError("current_value", current_value, "must be a finite number")
        if not threshold_breached(current_value, rule.threshold):
            return None

        key = (AlertType(rule.alert_type), rule.workflow_id)
        now = datetime.now(tz=timezone.utc)
        with self._lock:
            open_id = self._open.get(key)
            if open_id is not None:
                alert = self._alerts[open_id]
                alert.data.current_value = current_value
                alert.threshold.current_value = current_value
                alert.description = _describe(metric_name, current_value, rule.threshold)
                alert.updated_at = now
                logger.info("Alert %s refreshed: %s=%g", alert.id, metric_name, current_value)
                return alert

            alert = self._new_alert(metric_name, current_value, rule, now)
            self._alerts[alert.id] = alert
            self._open[key] = alert.id

        self._sink.notify(alert)
        return alert

    def acknowledge(self, alert_id: str) -> BusinessAlert:
        with self._lock:
            alert = self._alerts[alert_id]
            alert.acknowledged = True
            alert.updated_at = datetime.now(tz=timezone.utc)
        return alert

    def resolve(self, alert_id: str, resolved_at: Optional[datetime] = None) -> BusinessAlert:
        """Close an alert; the next breach for its tag raises a fresh one."""
        with self._lock:
            alert = self._alerts[alert_id]
            if alert.resolved_at is None:
                alert.resolved_at = resolved_at or datetime.now(tz=timezone.utc)
                alert.updated_at = alert.resolved_at
                self._open.pop((alert.type, alert.workflow_id), None)
                self._resolved.append(alert.id)
                while len(self._resolved) > self._resolved_retention:
                    evicted = self._resolved.popleft()
                    self._alerts.pop(evicted, None)
                    logger.debug("Alert %s evicted from history", evicted)
        return alert

    def get(self, alert_id: str) -> BusinessAlert:
        with self._lock:
            return self._alerts[alert_id]

    def open_alerts(self) -> list[BusinessAlert]:
        with self._lock:
            return [self._alerts[alert_id] for alert_id in self._open.values()]

    @staticmethod
    def _new_alert(
        metric_name: str,
        current_value: float,
        rule: AlertRule,
        now: datetime,
    ) -> BusinessAlert:
        alert_type = AlertType(rule.alert_type)
        title = rule.title or f"{alert_type.value.replace('_', ' ').title()}: {metric_name}"
        actions: list[AlertAction] = list(rule.actions)
        if not actions:
            if rule.workflow_id:
                actions.append(
                    AlertAction(
                        type=AlertActionType.VIEW,
                        label="View Workflow",
                        url=f"/workflows/{rule.workflow_id}",
                    )
                )
            actions.append(AlertAction(type=AlertActionType.INVESTIGATE, label="Investigate"))

        return BusinessAlert(
            type=alert_type,
            severity=AlertSeverity(rule.severity),
            title=title,
            description=_describe(metric_name, current_value, rule.threshold),
            workflow_id=rule.workflow_id,
            data=AlertData(
                current_value=current_value,
                threshold=rule.threshold.value,
                expected_value=rule.expected_value,
                impact=rule.impact,
            ),
            threshold=ThresholdSnapshot(
                metric=rule.threshold.metric,
                operator=ThresholdOperator(rule.threshold.operator),
                value=rule.threshold.value,
                current_value=current_value,
            ),
            actions=tuple(actions),
            created_at=now,
            updated_at=now,
        )


def default_workflow_rules(workflow: WorkflowMetric) -> list[tuple[str, float, AlertRule]]:
    """Standard health rules for one workflow as (metric, value, rule) triples."""
    rules: list[tuple[str, float, AlertRule]] = [
        (
            "uptime",
            workflow.performance_metrics.uptime,
            AlertRule(
                threshold=AlertThreshold(
                    metric="uptime", operator=ThresholdOperator.LT, value=WORKFLOW_UPTIME_THRESHOLD
                ),
                alert_type=AlertType.WORKFLOW_FAILURE,
                severity=AlertSeverity.ERROR,
                workflow_id=workflow.workflow_id,
                title=f"Workflow Failure: {workflow.workflow_name}",
                expected_value=WORKFLOW_EXPECTED_UPTIME,
                impact=AlertImpact.COST,
            ),
        )
    ]
    # Low ROI only matters for workflows that save something at all
    if workflow.business_metrics.monthly_savings > 0:
        rules.append(
            (
                "roi_percentage",
                workflow.business_metrics.roi_percentage,
                AlertRule(
                    threshold=AlertThreshold(
                        metric="roi_percentage", operator=ThresholdOperator.LT, value=LOW_ROI_THRESHOLD
                    ),
                    alert_type=AlertType.ROI_DROP,
                    severity=AlertSeverity.WARNING,
                    workflow_id=workflow.workflow_id,
                    title=f"Low ROI: {workflow.workflow_name}",
                    expected_value=EXPECTED_ROI,
                    impact=AlertImpact.REVENUE,
                ),
            )
        )
    return rules


def default_summary_rules(summary: BusinessSummary) -> list[tuple[str, float, AlertRule]]:
    """Organization-level rules: few workflows that already save well can expand."""
    if summary.total_monthly_savings <= EXPANSION_SAVINGS_THRESHOLD:
        return []
    return [
        (
            "total_workflows",
            float(summary.total_workflows),
            AlertRule(
                threshold=AlertThreshold(
                    metric="total_workflows", operator=ThresholdOperator.LT, value=EXPANSION_WORKFLOW_LIMIT
                ),
                alert_type=AlertType.OPPORTUNITY,
                severity=AlertSeverity.INFO,
                title="Automation Expansion Opportunity",
                impact=AlertImpact.REVENUE,
                actions=(AlertAction(type=AlertActionType.VIEW, label="Browse Templates", url="/templates"),),
            ),
        )
    ]

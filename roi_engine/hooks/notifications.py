"""Notification sinks: how new alerts leave the engine."""

from __future__ import annotations

import logging
from typing import Protocol

from roi_engine.models.business import BusinessAlert

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Delivery capability injected by the host application."""

    def notify(self, alert: BusinessAlert) -> None: ...


class LoggingNotificationSink:
    """Default sink: records each new alert in the application log."""

    def notify(self, alert: BusinessAlert) -> None:
        logger.warning(
            "Alert raised [%s/%s] %s (workflow=%s)",
            alert.type.value,
            alert.severity.value,
            alert.title,
            alert.workflow_id,
        )

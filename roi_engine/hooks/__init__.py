from .notifications import LoggingNotificationSink, NotificationSink

__all__ = ["LoggingNotificationSink", "NotificationSink"]

from .analytics_sink import AnalyticsSink, LoggingAnalyticsSink
from .notification_sender import LoggingNotificationSender, NotificationSender

__all__ = [
    "AnalyticsSink",
    "LoggingAnalyticsSink",
    "LoggingNotificationSender",
    "NotificationSender",
]

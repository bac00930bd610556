from .notification_service import NotificationService, NotificationTypes

__all__ = [
    "NotificationService",
    "NotificationTypes",
]

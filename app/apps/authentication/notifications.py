"""
Transient user-facing notifications (the toasts shown after auth actions)
"""
import logging
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str  # "success" or "error"
    message: str


class Notifier:
    """Collects notifications raised while handling one request."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def success(self, message: str) -> None:
        logger.info(f"Notify success: {message}")
        self.notifications.append(Notification("success", message))

    def error(self, message: str) -> None:
        logger.warning(f"Notify error: {message}")
        self.notifications.append(Notification("error", message))

    def drain(self) -> List[Notification]:
        notifications, self.notifications = self.notifications, []
        return notifications

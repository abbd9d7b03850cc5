"""Notification sinks and the messages the coordinator sends to them."""
import logging
from typing import List

from ..errors import TooManyFiles
from ..models import Notification, RejectReason, Severity

logger = logging.getLogger(__name__)

_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


def too_many_files(error: TooManyFiles) -> Notification:
    return Notification(Severity.ERROR, "Too many images", str(error))


def rejected(filename: str, reason: RejectReason, max_bytes: int) -> Notification:
    if reason is RejectReason.TOO_LARGE:
        limit_mb = max_bytes / (1024 * 1024)
        return Notification(
            Severity.ERROR,
            "File too large",
            f"{filename} is larger than {limit_mb:g}MB. Please choose a smaller image.",
        )
    return Notification(
        Severity.ERROR,
        "Invalid file type",
        f"{filename} is not an allowed file type.",
    )


def fallback(filename: str) -> Notification:
    return Notification(
        Severity.WARNING,
        "Upload warning",
        f"{filename} uploaded as preview only. Save again to persist.",
    )


def batch_failed() -> Notification:
    return Notification(
        Severity.ERROR,
        "Upload failed",
        "Failed to upload images. Please try again.",
    )


class LoggingNotificationSink:
    """Writes notifications to a logger."""

    def __init__(self, log: logging.Logger = logger):
        self._log = log

    def notify(self, notification: Notification) -> None:
        self._log.log(
            _LEVELS[notification.severity],
            "%s: %s",
            notification.title,
            notification.message,
        )


class CollectingNotificationSink:
    """Keeps every notification in order."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def titles(self) -> List[str]:
        return [n.title for n in self.notifications]

    def clear(self) -> None:
        self.notifications.clear()

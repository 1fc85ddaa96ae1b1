"""User-visible notifications.

The editing surface renders whatever lands in :class:`Notifier`; every
mutating operation posts exactly one success or error notification.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import CmsError

logger = logging.getLogger(__name__)


class Level(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """One message for the user.

    Attributes:
        level: Severity used for styling
        message: Text to display
        error: The underlying error for error notifications
    """

    level: Level
    message: str
    error: CmsError | None = None

    @property
    def recoverable(self) -> bool:
        """Whether retrying the operation may succeed."""
        return self.level is Level.ERROR


class Notifier:
    """Collect notifications in the order they were posted."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def success(self, message: str) -> Notification:
        return self._post(Notification(Level.SUCCESS, message))

    def info(self, message: str) -> Notification:
        return self._post(Notification(Level.INFO, message))

    def error(self, message: str, error: CmsError | None = None) -> Notification:
        if error is not None:
            message = f"{message}: {error}"
        return self._post(Notification(Level.ERROR, message, error))

    def _post(self, notification: Notification) -> Notification:
        if notification.level is Level.ERROR:
            logger.warning(notification.message)
        else:
            logger.info(notification.message)
        self.notifications.append(notification)
        return notification

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.level is Level.ERROR]

    def clear(self) -> None:
        self.notifications.clear()

"""
Driver notification senders.
"""

import threading
from typing import NamedTuple, Optional, Protocol

import structlog


class Notifier(Protocol):
    def notify(self, driver_id: str, title: str, body: str) -> None: ...


class Notification(NamedTuple):
    driver_id: str
    title: str
    body: str


class LoggingNotifier:
    """Writes notifications to the structured log instead of sending them."""

    def __init__(self, logger: Optional[structlog.BoundLogger] = None) -> None:
        self.logger = logger or structlog.get_logger(component="notifier")

    def notify(self, driver_id: str, title: str, body: str) -> None:
        self.logger.info("driver_notified", driver_id=driver_id, title=title, body=body)


class RecordingNotifier:
    """Keeps every notification in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.sent: list[Notification] = []

    def notify(self, driver_id: str, title: str, body: str) -> None:
        with self._lock:
            self.sent.append(Notification(driver_id, title, body))

    def for_driver(self, driver_id: str) -> list[Notification]:
        with self._lock:
            return [n for n in self.sent if n.driver_id == driver_id]

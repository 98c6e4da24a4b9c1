"""
Push notifications from the core to the presentation layer.

Components never talk to a UI channel directly; they publish through a
`NotificationHub` and whatever presentation layer is attached subscribes.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

log = logging.getLogger(__name__)


class Notification(str, Enum):
    """Notification channels, named after the presentation-layer events."""

    PANE_CREATED = "pane:created"
    PANE_CLOSED = "pane:closed"
    PANE_STATE_UPDATED = "pane:stateUpdated"
    PANE_FOCUS_CHANGED = "pane:focusChanged"
    DOWNLOAD_STARTED = "download:started"
    DOWNLOAD_PROGRESS = "download:progress"
    DOWNLOAD_COMPLETED = "download:completed"
    DOWNLOAD_FAILED = "download:failed"


Listener = Callable[[Notification, Any], None]


class NotificationHub:
    """Fan-out of notifications to every subscribed listener, in subscription order."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Adds a listener and returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, notification: Notification, payload: Any = None) -> None:
        for listener in list(self._listeners):
            try:
                listener(notification, payload)
            except Exception:
                log.exception(f"Listener failed while handling '{notification.value}'")


class NotificationRecorder:
    """A listener that keeps every notification it receives, in order."""

    def __init__(self) -> None:
        self.received: list[tuple[Notification, Any]] = []

    def __call__(self, notification: Notification, payload: Any) -> None:
        self.received.append((notification, payload))

    def of(self, notification: Notification) -> list[Any]:
        """Returns the payloads received on one channel."""
        return [p for n, p in self.received if n is notification]

    def clear(self) -> None:
        self.received.clear()

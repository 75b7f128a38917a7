"""User-facing notices, routed through a channel instead of a global alert.

Endpoint helpers publish a Notice after a mutation succeeds or fails. Whoever
owns the output (the CLI, a UI, a test) subscribes to the channel or drains
its queue; publishers never talk to a display directly.

Usage::

    channel = NotificationChannel()
    channel.subscribe(lambda notice: print(notice.title))
    channel.publish(Notice.success("Saved", "Draft saved successfully"))
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

SEVERITIES = ("success", "error", "info", "warning", "confirm")

# Success toasts dismiss themselves after this long
DEFAULT_SUCCESS_TIMER_MS = 3000


@dataclass(frozen=True)
class Notice:
    """One notification: severity, title, optional body and dismiss timer."""
    severity: str
    title: str
    body: Optional[str] = None
    timer_ms: Optional[int] = None
    requires_confirmation: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if self.severity not in SEVERITIES:
            raise ValueError(
                f"Unknown severity '{self.severity}'. Must be one of: {', '.join(SEVERITIES)}"
            )

    @classmethod
    def success(cls, title: str, body: Optional[str] = None,
                timer_ms: Optional[int] = DEFAULT_SUCCESS_TIMER_MS) -> "Notice":
        return cls("success", title, body, timer_ms)

    @classmethod
    def error(cls, title: str, body: Optional[str] = None) -> "Notice":
        return cls("error", title, body)

    @classmethod
    def info(cls, title: str, body: Optional[str] = None) -> "Notice":
        return cls("info", title, body)

    @classmethod
    def warning(cls, title: str, body: Optional[str] = None) -> "Notice":
        return cls("warning", title, body)

    @classmethod
    def confirm(cls, title: str, body: Optional[str] = None) -> "Notice":
        """A notice the owner must acknowledge before a destructive action."""
        return cls("confirm", title, body, requires_confirmation=True)


Subscriber = Callable[[Notice], None]


class NotificationChannel:
    """Thread-safe fan-out of notices to subscribers, plus a pending queue.

    Every published notice is queued until drain() is called, whether or not
    anyone is subscribed. Subscribers are called synchronously in
    subscription order; a failing subscriber is logged and skipped.
    """

    def __init__(self, maxlen: int = 100) -> None:
        self._pending: deque[Notice] = deque(maxlen=maxlen)
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback*; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, notice: Notice) -> None:
        with self._lock:
            self._pending.append(notice)
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(notice)
            except Exception:
                logger.exception("Notification subscriber failed for %r", notice.title)

    def drain(self) -> List[Notice]:
        """Return and clear all queued notices, oldest first."""
        with self._lock:
            notices = list(self._pending)
            self._pending.clear()
        return notices


def log_subscriber(log: logging.Logger = logger) -> Subscriber:
    """Subscriber that writes notices to *log* at a level matching severity."""
    levels = {
        "success": logging.INFO,
        "info": logging.INFO,
        "confirm": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def _emit(notice: Notice) -> None:
        message = notice.title if not notice.body else f"{notice.title}: {notice.body}"
        log.log(levels[notice.severity], message)

    return _emit

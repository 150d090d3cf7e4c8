"""In-memory notification queue with auto-expiry.

The store owns every :class:`Notification`; renderers subscribe and get
an immutable snapshot after each change.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable

from pyhabibbi._constants import DEFAULT_NOTIFICATION_DURATION_MS
from pyhabibbi.models.notification import Notification, Severity

_logger = logging.getLogger(__name__)

Snapshot = tuple[Notification, ...]


class NotificationStore:
    """Ordered queue of transient UI messages.

    Usage::

        store = NotificationStore()
        nid = store.show("Customer saved", "success")
        store.remove(nid)

    Countdowns run on the running asyncio loop.  Outside a loop
    notifications are still queued but stay until dismissed.
    """

    def __init__(
        self,
        *,
        default_duration_ms: int = DEFAULT_NOTIFICATION_DURATION_MS,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._default_duration_ms = default_duration_ms
        self._loop = loop
        self._ids = itertools.count(1)
        self._items: dict[int, Notification] = {}
        self._timers: dict[int, asyncio.TimerHandle] = {}
        self._subscribers: list[Callable[[Snapshot], None]] = []

    @property
    def notifications(self) -> Snapshot:
        return tuple(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, notification_id: object) -> bool:
        return notification_id in self._items

    def get(self, notification_id: int) -> Notification | None:
        return self._items.get(notification_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def show(
        self,
        message: str,
        severity: Severity | str = Severity.SUCCESS,
        duration: int | None = None,
    ) -> int:
        """Queue a notification and return its id.

        ``duration`` is in milliseconds; ``0`` keeps it until removed and
        ``None`` uses the store default.
        """
        duration_ms = self._default_duration_ms if duration is None else max(0, int(duration))
        notification_id = next(self._ids)
        self._items[notification_id] = Notification(
            id=notification_id,
            message=message,
            severity=Severity(severity),
            duration_ms=duration_ms,
        )
        if duration_ms > 0:
            self._schedule_expiry(notification_id, duration_ms)
        self._publish()
        return notification_id

    def success(self, message: str, duration: int | None = None) -> int:
        return self.show(message, Severity.SUCCESS, duration)

    def error(self, message: str, duration: int | None = None) -> int:
        return self.show(message, Severity.ERROR, duration)

    def warning(self, message: str, duration: int | None = None) -> int:
        return self.show(message, Severity.WARNING, duration)

    def info(self, message: str, duration: int | None = None) -> int:
        return self.show(message, Severity.INFO, duration)

    def remove(self, notification_id: int) -> None:
        """Dismiss a notification; unknown ids are ignored."""
        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()
        if self._items.pop(notification_id, None) is not None:
            self._publish()

    def clear(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        if self._items:
            self._items.clear()
            self._publish()

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[[Snapshot], None]) -> Callable[[], None]:
        """Call *callback* with the new snapshot after every change.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _schedule_expiry(self, notification_id: int, duration_ms: int) -> None:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                _logger.debug("No running loop; notification %s will not auto-expire", notification_id)
                return
        self._timers[notification_id] = loop.call_later(duration_ms / 1000, self._expire, notification_id)

    def _expire(self, notification_id: int) -> None:
        self._timers.pop(notification_id, None)
        self.remove(notification_id)

    def _publish(self) -> None:
        snapshot = self.notifications
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                _logger.exception("Notification subscriber %r failed", callback)

"""Single-threaded typed publish/subscribe."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from pyhabibbi.state.events import SyncEvent

_logger = logging.getLogger(__name__)

E = TypeVar("E", bound=SyncEvent)


class EventBus:
    """Deliver events to handlers registered for their type.

    A handler registered for a base class also receives its subclasses,
    so ``subscribe(SyncEvent, ...)`` sees everything.  A failing handler
    is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[SyncEvent], list[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        """Register *handler*; the returned function unregisters it."""
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def publish(self, event: SyncEvent) -> int:
        """Deliver *event*; returns how many handlers ran without error."""
        delivered = 0
        for event_type in type(event).__mro__:
            for handler in list(self._handlers.get(event_type, ())):
                try:
                    handler(event)
                except Exception:
                    _logger.exception("Handler %r failed for %s", handler, type(event).__name__)
                    continue
                delivered += 1
        return delivered

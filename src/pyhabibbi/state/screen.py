"""Fetch/mutate/refresh cycle for a management list.

Each management view (customers, suppliers, users) is a
:class:`ListScreen`: it loads a collection, reconciles it, shows it
through the active filter and turns every failure into exactly one
notification.

State machine::

    IDLE -> LOADING -> LOADED | FAILED
    LOADED | FAILED -> LOADING      (retry, or refresh after a mutation)

Loads are fenced by a generation counter: a response that arrives after a
newer load started is discarded, so a refresh issued after a write can
never be overwritten by an older in-flight read.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from pyhabibbi.exceptions import HabibbiError, HabibbiValidationError
from pyhabibbi.state.notifications import NotificationStore
from pyhabibbi.state.reconcile import RecordFilter, apply_filter, reconcile

_logger = logging.getLogger(__name__)

R = TypeVar("R")
D = TypeVar("D")

RecordId = int | str

_GENERIC_ERROR = "Unknown error"


class ScreenState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class ResourceBinding(Generic[R, D]):
    """Backend operations and labels a screen is built on."""

    singular: str
    plural: str
    fetch: Callable[[], Awaitable[list[R]]]
    create: Callable[[D], Awaitable[R | None]]
    update: Callable[[RecordId, D], Awaitable[R | None]]
    delete: Callable[[RecordId], Awaitable[None]]
    id_field: str = "id"
    legacy_id_field: str | None = None


def describe_error(exc: BaseException) -> str:
    """Most specific user-facing text for *exc*.

    API errors already carry the backend's error string and transport
    errors the underlying network message.
    """
    return str(exc).strip() or _GENERIC_ERROR


class ListScreen(Generic[R, D]):
    """One management list with its editor and notifications."""

    def __init__(
        self,
        binding: ResourceBinding[R, D],
        notifications: NotificationStore,
        *,
        refresh_delay: float = 0.0,
        notification_duration_ms: int | None = None,
    ) -> None:
        self._binding = binding
        self._notifications = notifications
        self._refresh_delay = refresh_delay
        self._duration = notification_duration_ms
        self._state = ScreenState.IDLE
        self._records: list[R] = []
        self._visible: list[R] = []
        self._filter = RecordFilter()
        self._error: str | None = None
        self._generation = 0
        self._inflight: asyncio.Task[bool] | None = None
        self._editor_open = False
        self._editing: R | None = None

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> ScreenState:
        return self._state

    @property
    def records(self) -> list[R]:
        """Reconciled records as displayed (filter applied)."""
        return list(self._visible)

    @property
    def all_records(self) -> list[R]:
        """Reconciled records ignoring the filter."""
        return list(self._records)

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_empty(self) -> bool:
        return not self._visible

    @property
    def record_filter(self) -> RecordFilter:
        return self._filter

    @property
    def editor_open(self) -> bool:
        return self._editor_open

    @property
    def editing(self) -> R | None:
        """Record being edited; ``None`` while creating."""
        return self._editing

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, *, force: bool = False) -> bool:
        """Fetch and reconcile the collection.

        A call made while another load is in flight joins it instead of
        issuing a second request, unless ``force`` is set; a forced load
        supersedes the in-flight one.  Returns ``True`` when this call's
        response was applied.
        """
        inflight = self._inflight
        if inflight is not None and not inflight.done() and not force:
            return await asyncio.shield(inflight)

        self._generation += 1
        generation = self._generation
        self._state = ScreenState.LOADING
        self._error = None
        self._records = []
        self._visible = []

        task = asyncio.ensure_future(self._fetch(generation))
        self._inflight = task
        return await task

    async def _fetch(self, generation: int) -> bool:
        try:
            fetched = await self._binding.fetch()
        except HabibbiError as exc:
            if generation != self._generation:
                _logger.debug("Ignoring stale %s failure: %s", self._binding.plural, exc)
                return False
            message = describe_error(exc)
            _logger.warning("Loading %s failed: %s", self._binding.plural, message)
            self._state = ScreenState.FAILED
            self._error = message
            self._records = []
            self._visible = []
            self._notify_error(f"Error loading {self._binding.plural}: {message}")
            return False

        if generation != self._generation:
            _logger.debug(
                "Discarding stale %s response (generation %d, current %d)",
                self._binding.plural,
                generation,
                self._generation,
            )
            return False

        self._records = reconcile(
            fetched,
            id_field=self._binding.id_field,
            legacy_field=self._binding.legacy_id_field,
        )
        self._state = ScreenState.LOADED
        self._refresh_view()
        _logger.debug("Loaded %d %s", len(self._records), self._binding.plural)
        return True

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def set_filter(self, record_filter: RecordFilter) -> list[R]:
        self._filter = record_filter
        self._refresh_view()
        return self.records

    def clear_filter(self) -> list[R]:
        return self.set_filter(RecordFilter())

    def _refresh_view(self) -> None:
        self._visible = apply_filter(
            self._records,
            self._filter,
            id_field=self._binding.id_field,
            legacy_field=self._binding.legacy_id_field,
        )

    # ------------------------------------------------------------------
    # Editor
    # ------------------------------------------------------------------

    def open_editor(self, record: R | None = None) -> None:
        self._editor_open = True
        self._editing = record

    def close_editor(self) -> None:
        self._editor_open = False
        self._editing = None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(self, draft: D) -> bool:
        return await self._mutate(
            lambda: self._binding.create(draft),
            success=f"{self._binding.singular.capitalize()} created successfully",
            fallback=f"Error creating {self._binding.singular}",
        )

    async def update(self, record_id: RecordId, draft: D) -> bool:
        return await self._mutate(
            lambda: self._binding.update(record_id, draft),
            success=f"{self._binding.singular.capitalize()} updated successfully",
            fallback=f"Error updating {self._binding.singular}",
        )

    async def delete(self, record_id: RecordId) -> bool:
        return await self._mutate(
            lambda: self._binding.delete(record_id),
            success=f"{self._binding.singular.capitalize()} deleted successfully",
            fallback=f"Error deleting {self._binding.singular}",
        )

    async def _mutate(
        self,
        operation: Callable[[], Awaitable[object]],
        *,
        success: str,
        fallback: str,
    ) -> bool:
        try:
            await operation()
        except HabibbiValidationError as exc:
            self._notifications.warning(str(exc), self._duration)
            return False
        except HabibbiError as exc:
            message = str(exc).strip() or fallback
            _logger.warning("%s: %s", fallback, message)
            self._notify_error(message)
            return False

        self._notifications.success(success, self._duration)
        self.close_editor()
        if self._refresh_delay > 0:
            await asyncio.sleep(self._refresh_delay)
        await self.load(force=True)
        return True

    def _notify_error(self, message: str) -> None:
        self._notifications.error(message, self._duration)

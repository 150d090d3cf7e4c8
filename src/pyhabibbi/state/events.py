"""Typed synchronization events.

Every state change that other views must observe is published as one of
these events on an :class:`~pyhabibbi.state.bus.EventBus`.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pyhabibbi.models.cash import CashState, Tender


class EventOrigin(StrEnum):
    LOCAL = "local"
    """Produced in this process."""
    REMOTE = "remote"
    """Picked up from shared storage written by another process."""


class SyncEvent(BaseModel):
    """Base for everything published on the bus."""

    model_config = ConfigDict(frozen=True)

    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    origin: EventOrigin = EventOrigin.LOCAL


class StorageChanged(SyncEvent):
    """A storage key was written or removed.

    ``new_value`` is the serialized value (``None`` after removal), so
    listeners that only watch storage can rebuild the state themselves.
    """

    key: str
    new_value: str | None = None
    old_value: str | None = None


class CashSaleRecorded(SyncEvent):
    """A sale was added to the open cash register."""

    sale_total: float
    tender: Tender
    cash_state: CashState


class CashRegisterChanged(SyncEvent):
    """The register was opened, closed, reset or got a manual movement."""

    cash_state: CashState | None

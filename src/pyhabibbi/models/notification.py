"""Transient UI notification model."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Severity(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_TITLES: dict[Severity, str] = {
    Severity.SUCCESS: "Success",
    Severity.ERROR: "Error",
    Severity.WARNING: "Warning",
    Severity.INFO: "Info",
}


class Notification(BaseModel):
    """A message queued for display.

    ``duration_ms == 0`` means the notification stays until dismissed.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    message: str
    severity: Severity = Severity.SUCCESS
    duration_ms: int = Field(default=4000, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def title(self) -> str:
        return _TITLES[self.severity]

    @property
    def is_persistent(self) -> bool:
        return self.duration_ms == 0


def render_notification(notification: Notification) -> str:
    """Format a notification as a single console line."""
    return f"[{notification.title}] {notification.message}"

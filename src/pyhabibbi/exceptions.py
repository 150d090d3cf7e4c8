"""Custom exception hierarchy for pyhabibbi."""

from __future__ import annotations


class HabibbiError(Exception):
    """Base exception for all pyhabibbi errors."""


class HabibbiConfigError(HabibbiError):
    """Invalid or missing configuration."""


class HabibbiTransportError(HabibbiError):
    """HTTP-level failure (network, timeout, 5xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class HabibbiApiError(HabibbiError):
    """Backend answered with an envelope whose ``success`` is not ``true``.

    ``str(exc)`` is the backend's own error string when it sent one, so it
    can be shown to the user as-is.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)


class HabibbiNotFoundError(HabibbiApiError):
    """The requested record does not exist (HTTP 404)."""


class HabibbiValidationError(HabibbiError):
    """Client-side validation failed; nothing was sent to the backend."""

    def __init__(self, message: str, *, field: str = "") -> None:
        self.field = field
        super().__init__(message)

"""Client configuration for pyhabibbi."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyhabibbi._constants import (
    BASE_URL,
    DEFAULT_CASH_STATE_KEY,
    DEFAULT_NOTIFICATION_DURATION_MS,
    DEFAULT_REQUEST_TIMEOUT,
)
from pyhabibbi.exceptions import HabibbiConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise HabibbiConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class HabibbiConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend base URL, without trailing slash.
    request_timeout : float
        Total timeout for a single HTTP request, in seconds.
    notification_duration_ms : int
        Default lifetime of a notification raised by a screen.
        ``0`` keeps notifications until dismissed.
    refresh_delay : float
        Seconds to wait after a successful mutation before re-fetching
        the list.  Stale responses are already discarded by generation
        fencing, so this only matters for backends with a visible
        write-then-read lag.
    cache_bust : bool
        Append ``_t=<epoch ms>`` to list requests.
    cash_state_key : str
        Storage key holding the persisted cash-register state.
    cash_state_path : str or None
        JSON file backing the cash-register storage.  ``None`` keeps the
        state in memory (single process only).
    api_trace_enabled : bool
        Log redacted request and response bodies at DEBUG level.
    """

    base_url: str = BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    notification_duration_ms: int = DEFAULT_NOTIFICATION_DURATION_MS
    refresh_delay: float = 0.0
    cache_bust: bool = True
    cash_state_key: str = DEFAULT_CASH_STATE_KEY
    cash_state_path: str | None = None
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.base_url:
            raise HabibbiConfigError("base_url must be non-empty")
        if self.request_timeout <= 0:
            raise HabibbiConfigError("request_timeout must be positive")
        if self.notification_duration_ms < 0:
            raise HabibbiConfigError("notification_duration_ms must be >= 0")
        if self.refresh_delay < 0:
            raise HabibbiConfigError("refresh_delay must be >= 0")
        # Normalise so endpoint paths can always be appended verbatim.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> HabibbiConfig:
        """Create configuration from ``HABIBBI_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "HABIBBI_BASE_URL": "base_url",
            "HABIBBI_CASH_STATE_KEY": "cash_state_key",
            "HABIBBI_CASH_STATE_PATH": "cash_state_path",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMBER_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "HABIBBI_REQUEST_TIMEOUT": ("request_timeout", float),
            "HABIBBI_NOTIFICATION_DURATION_MS": ("notification_duration_ms", int),
            "HABIBBI_REFRESH_DELAY": ("refresh_delay", float),
        }
        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        if "cache_bust" not in overrides:
            config_kwargs["cache_bust"] = _env_bool(env.get("HABIBBI_CACHE_BUST"), True)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("HABIBBI_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

"""JSON-over-HTTP transport for the Habibbi backend."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyhabibbi._constants import USER_AGENT
from pyhabibbi._redact import redact_for_log
from pyhabibbi.config import HabibbiConfig
from pyhabibbi.exceptions import HabibbiTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Implementations return ``(status_code, decoded_json_body)`` for every
    response below 500 and raise :class:`HabibbiTransportError` otherwise.
    Envelope interpretation is left to the endpoint layer.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> tuple[int, Any]:
        ...


class JsonTransport:
    """aiohttp transport speaking the backend's JSON envelope dialect."""

    def __init__(self, config: HabibbiConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> tuple[int, Any]:
        """Send one request and decode the JSON body.

        Responses with status < 500 are returned even when the status is
        an error (400, 404, ...) because the backend explains those in the
        envelope's ``error`` field.
        """
        url = f"{self._config.base_url}{endpoint}"
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": USER_AGENT,
        }

        _logger.debug("%s %s params=%s", method, url, dict(params or {}))
        if self._config.api_trace_enabled and json_body is not None:
            _logger.debug("%s %s body=%s", method, url, redact_for_log(dict(json_body)))

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
        except asyncio.TimeoutError as exc:
            raise HabibbiTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout:g}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise HabibbiTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except UnicodeDecodeError as exc:
            raise HabibbiTransportError(
                f"Invalid response body from {endpoint}: {exc.reason} at byte {exc.start}",
                endpoint=endpoint,
            ) from exc

        if status >= 500:
            raise HabibbiTransportError(
                f"HTTP {status} from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            )

        try:
            body = json.loads(text) if text.strip() else None
        except json.JSONDecodeError as exc:
            raise HabibbiTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> %s", method, url, status)
        if self._config.api_trace_enabled:
            _logger.debug("%s %s response=%s", method, url, redact_for_log(body))
        return status, body

"""Shared helpers for Habibbi endpoint modules.

This module centralizes the most repeated patterns:
- building list query parameters (cache busting)
- sending a request through the transport
- interpreting the ``{success, data, error, message}`` envelope

It is internal to pyhabibbi and may change at any time.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from pyhabibbi._constants import CACHE_BUST_PARAM
from pyhabibbi._transport import Transport
from pyhabibbi.exceptions import HabibbiApiError, HabibbiNotFoundError


def list_params(*, cache_bust: bool, now_ms: int | None = None) -> dict[str, str]:
    """Query parameters for a collection GET."""
    if not cache_bust:
        return {}
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return {CACHE_BUST_PARAM: str(now_ms)}


def unwrap_envelope(*, endpoint: str, status: int, body: Any) -> Any:
    """Return ``data`` from a successful envelope, raise otherwise.

    Only ``success is True`` counts as success; a 200 with
    ``success: false`` (or no ``success`` at all) is still a failure.
    """
    if not isinstance(body, Mapping):
        raise HabibbiApiError(
            f"{endpoint} returned an unexpected response (HTTP {status})",
            code="invalid_envelope",
            endpoint=endpoint,
            status_code=status,
        )

    if body.get("success") is True:
        return body.get("data")

    message = body.get("error") or body.get("message") or f"{endpoint} failed (HTTP {status})"
    error_cls = HabibbiNotFoundError if status == 404 else HabibbiApiError
    raise error_cls(
        str(message),
        code=str(status),
        endpoint=endpoint,
        status_code=status,
    )


async def call_json(
    transport: Transport,
    method: str,
    endpoint: str,
    *,
    params: Mapping[str, str] | None = None,
    json_body: Mapping[str, Any] | None = None,
) -> Any:
    """Send a request and return the envelope's ``data``."""
    status, body = await transport.request(method, endpoint, params=params, json_body=json_body)
    return unwrap_envelope(endpoint=endpoint, status=status, body=body)

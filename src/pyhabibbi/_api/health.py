"""Backend liveness probe.

``/api/health`` is the one endpoint that does not use the success
envelope; it answers ``{"status": "OK", "message", "timestamp", "version"}``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pyhabibbi._constants import HEALTH_ENDPOINT
from pyhabibbi._transport import Transport
from pyhabibbi.exceptions import HabibbiApiError


async def check_health(transport: Transport) -> dict[str, Any]:
    status, body = await transport.request("GET", HEALTH_ENDPOINT)
    if not isinstance(body, Mapping) or str(body.get("status", "")).upper() != "OK":
        raise HabibbiApiError(
            f"Backend is not healthy (HTTP {status})",
            code="unhealthy",
            endpoint=HEALTH_ENDPOINT,
            status_code=status,
        )
    return dict(body)

"""CRUD endpoints shared by customers, suppliers and users.

All three resources expose the same REST shape::

    GET    /api/<resource>?_t=<ms>
    GET    /api/<resource>/<id>
    POST   /api/<resource>
    PUT    /api/<resource>/<id>
    DELETE /api/<resource>/<id>
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import ValidationError

from pyhabibbi._api._common import call_json, list_params
from pyhabibbi._transport import Transport
from pyhabibbi.config import HabibbiConfig
from pyhabibbi.exceptions import HabibbiApiError
from pyhabibbi.models._base import HabibbiBaseModel

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=HabibbiBaseModel)


def _parse_one(model: type[M], data: Any, endpoint: str) -> M | None:
    """Parse one backend object; ``None`` when *data* is not an object.

    A payload the model rejects raises :class:`HabibbiApiError` with code
    ``invalid_record``, so callers only ever handle pyhabibbi errors.
    """
    if not isinstance(data, Mapping):
        return None
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise HabibbiApiError(
            f"{endpoint} returned an invalid {model.__name__} ({location}: {error['msg']})",
            code="invalid_record",
            endpoint=endpoint,
        ) from exc


def _parse_echo(model: type[M], data: Any, endpoint: str) -> M | None:
    try:
        return _parse_one(model, data, endpoint)
    except HabibbiApiError as exc:
        _logger.warning("Write to %s succeeded but its echo is unusable: %s", endpoint, exc)
        return None


async def list_records(
    config: HabibbiConfig,
    transport: Transport,
    endpoint: str,
    model: type[M],
) -> list[M]:
    """Fetch a whole collection.

    Non-object and unparseable items are skipped; a missing ``data`` is
    an empty list.
    """
    data = await call_json(
        transport,
        "GET",
        endpoint,
        params=list_params(cache_bust=config.cache_bust),
    )
    items = data if isinstance(data, list) else []
    records: list[M] = []
    for item in items:
        try:
            parsed = _parse_one(model, item, endpoint)
        except HabibbiApiError as exc:
            _logger.warning("Skipping invalid item from %s: %s", endpoint, exc)
            continue
        if parsed is None:
            _logger.debug("Skipping non-object item from %s: %r", endpoint, item)
            continue
        records.append(parsed)
    return records


async def get_record(
    transport: Transport,
    endpoint: str,
    record_id: int | str,
    model: type[M],
) -> M:
    """Fetch one record by id.

    Raises :class:`HabibbiApiError` (code ``invalid_record``) when the
    backend returns an object the model rejects.
    """
    path = f"{endpoint}/{record_id}"
    data = await call_json(transport, "GET", path)
    parsed = _parse_one(model, data, path)
    if parsed is None:
        return model.model_validate({"id": record_id})
    return parsed


async def create_record(
    transport: Transport,
    endpoint: str,
    payload: Mapping[str, Any],
    model: type[M],
) -> M | None:
    """Create a record.

    Returns the stored record when the backend echoes it back, else ``None``.
    """
    data = await call_json(transport, "POST", endpoint, json_body=payload)
    return _parse_echo(model, data, endpoint)


async def update_record(
    transport: Transport,
    endpoint: str,
    record_id: int | str,
    payload: Mapping[str, Any],
    model: type[M],
) -> M | None:
    """Update a record; same return convention as :func:`create_record`."""
    data = await call_json(transport, "PUT", f"{endpoint}/{record_id}", json_body=payload)
    return _parse_echo(model, data, f"{endpoint}/{record_id}")


async def delete_record(
    transport: Transport,
    endpoint: str,
    record_id: int | str,
) -> None:
    await call_json(transport, "DELETE", f"{endpoint}/{record_id}")

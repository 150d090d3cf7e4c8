"""Sales endpoints and purchase-history enrichment."""

from __future__ import annotations

import asyncio
import logging

from pyhabibbi._api.records import get_record, list_records
from pyhabibbi._constants import SALES_ENDPOINT
from pyhabibbi._transport import Transport
from pyhabibbi.config import HabibbiConfig
from pyhabibbi.exceptions import HabibbiError
from pyhabibbi.models.sale import Sale

_logger = logging.getLogger(__name__)


async def fetch_sales(config: HabibbiConfig, transport: Transport) -> list[Sale]:
    """List sale headers (no line items)."""
    return await list_records(config, transport, SALES_ENDPOINT, Sale)


async def fetch_sale(transport: Transport, sale_id: int | str) -> Sale:
    """Fetch one sale joined with its ``detalles``."""
    return await get_record(transport, SALES_ENDPOINT, sale_id, Sale)


async def _with_details(transport: Transport, header: Sale) -> Sale:
    if header.id is None:
        return header
    try:
        detailed = await fetch_sale(transport, header.id)
    except HabibbiError as exc:
        _logger.warning("Sale %s detail unavailable, keeping header only: %s", header.id, exc)
        return header.model_copy(update={"items": []})
    # The detail payload may omit id_cliente.
    if detailed.customer_id is None and header.customer_id is not None:
        detailed = detailed.model_copy(update={"customer_id": header.customer_id})
    return detailed


async def fetch_customer_history(
    config: HabibbiConfig,
    transport: Transport,
    customer_id: int,
) -> list[Sale]:
    """Return a customer's sales, newest first, each joined with its items.

    Detail lookups run concurrently.  A failed lookup degrades to the
    header with empty line items instead of failing the whole history.
    """
    headers = [sale for sale in await fetch_sales(config, transport) if sale.customer_id == customer_id]
    enriched = await asyncio.gather(*(_with_details(transport, header) for header in headers))
    return sorted(
        enriched,
        key=lambda sale: sale.date.timestamp() if sale.date is not None else float("-inf"),
        reverse=True,
    )

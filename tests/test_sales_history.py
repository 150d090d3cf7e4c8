from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pyhabibbi.client import HabibbiClient
from pyhabibbi.config import HabibbiConfig
from pyhabibbi.exceptions import HabibbiTransportError

_SALES = [
    {"id_venta": 10, "id_cliente": 1, "fecha": "2025-03-01 09:15:00", "total": 4500, "metodo_pago": "efectivo"},
    {"id_venta": 11, "id_cliente": 2, "fecha": "2025-03-01 10:00:00", "total": 1200},
    {"id_venta": 12, "id_cliente": 1, "fecha": "2025-03-02 17:40:00", "total": 3000},
    {"id_venta": 13, "id_cliente": 1, "fecha": "2025-02-27 08:05:00", "total": 2500},
]

_DETAILS = {
    10: {
        "id_venta": 10,
        "fecha": "2025-03-01 09:15:00",
        "total": 4500,
        "detalles": [
            {"id_producto": 3, "producto_nombre": "Latte", "cantidad": 2, "precio_unitario": 1500, "subtotal": 3000},
            {"id_producto": 8, "producto_nombre": "Croissant", "cantidad": 1, "precio_unitario": 1500},
        ],
    },
    12: {
        "id_venta": 12,
        "id_cliente": 1,
        "fecha": "2025-03-02 17:40:00",
        "total": 3000,
        "detalles": [{"producto_nombre": "Mocha", "cantidad": 1, "precio_unitario": 3000, "subtotal": 3000}],
    },
}


class _SalesTransport:
    def __init__(self, details: dict[int, Any] | None = None) -> None:
        self.details = _DETAILS if details is None else {**_DETAILS, **details}
        self.detail_requests: list[str] = []

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> tuple[int, Any]:
        assert method == "GET"
        if endpoint == "/api/ventas":
            return 200, {"success": True, "data": _SALES}
        self.detail_requests.append(endpoint)
        sale_id = int(endpoint.rsplit("/", 1)[1])
        if sale_id not in self.details:
            raise HabibbiTransportError("Network Error", endpoint=endpoint)
        return 200, {"success": True, "data": self.details[sale_id]}


@pytest.mark.asyncio
async def test_customer_history_is_enriched_and_newest_first() -> None:
    transport = _SalesTransport()

    async with HabibbiClient(HabibbiConfig(), transport=transport) as client:
        history = await client.get_customer_history(1)

    assert [sale.id for sale in history] == [12, 10, 13]
    assert sorted(transport.detail_requests) == ["/api/ventas/10", "/api/ventas/12", "/api/ventas/13"]

    latest, middle, oldest = history
    assert [item.product_name for item in latest.items] == ["Mocha"]
    assert [item.product_name for item in middle.items] == ["Latte", "Croissant"]
    assert middle.items[0].subtotal == 3000
    # Detail payload without id_cliente keeps the header's customer.
    assert middle.customer_id == 1


@pytest.mark.asyncio
async def test_failed_detail_falls_back_to_header_without_items() -> None:
    transport = _SalesTransport()

    async with HabibbiClient(HabibbiConfig(), transport=transport) as client:
        history = await client.get_customer_history(1)

    fallback = history[-1]
    assert fallback.id == 13
    assert fallback.total == 2500
    assert fallback.items == []


@pytest.mark.asyncio
async def test_unparseable_detail_falls_back_to_header_without_items() -> None:
    transport = _SalesTransport({12: {"id_venta": 12, "detalles": [{"cantidad": "n/a"}]}})

    async with HabibbiClient(HabibbiConfig(), transport=transport) as client:
        history = await client.get_customer_history(1)

    assert [sale.id for sale in history] == [12, 10, 13]
    latest = history[0]
    assert latest.items == []
    assert latest.total == 3000
    assert [item.product_name for item in history[1].items] == ["Latte", "Croissant"]


@pytest.mark.asyncio
async def test_customer_without_sales_has_empty_history() -> None:
    async with HabibbiClient(HabibbiConfig(), transport=_SalesTransport()) as client:
        assert await client.get_customer_history(99) == []

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import pytest

from pyhabibbi.client import HabibbiClient
from pyhabibbi.config import HabibbiConfig
from pyhabibbi.exceptions import HabibbiApiError, HabibbiTransportError
from pyhabibbi.models.notification import Severity
from pyhabibbi.models.requests import CustomerDraft
from pyhabibbi.state.notifications import NotificationStore
from pyhabibbi.state.reconcile import RecordFilter, SortOrder
from pyhabibbi.state.screen import ListScreen, ResourceBinding, ScreenState


class _FakeTransport:
    """Answers from a ``(method, endpoint) -> response`` table.

    A response is ``(status, body)`` or an exception to raise.
    """

    def __init__(self, responses: dict[tuple[str, str], Any]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, str, Mapping[str, Any] | None]] = []

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> tuple[int, Any]:
        self.calls.append((method, endpoint, json_body))
        response = self.responses[(method, endpoint)]
        if isinstance(response, Exception):
            raise response
        return response


def _client(transport: _FakeTransport) -> HabibbiClient:
    return HabibbiClient(HabibbiConfig(cache_bust=False), transport=transport)


def _envelope(data: Any) -> tuple[int, Any]:
    return 200, {"success": True, "data": data}


@pytest.mark.asyncio
async def test_duplicate_identifier_is_displayed_once() -> None:
    transport = _FakeTransport(
        {
            ("GET", "/api/clientes"): _envelope(
                [
                    {"id": 7, "nombre": "Ana"},
                    {"id": 8, "nombre": "Luis"},
                    {"id_cliente": 7, "nombre": "Ana duplicate"},
                ]
            )
        }
    )
    notifications = NotificationStore()
    async with _client(transport) as client:
        screen = client.customer_screen(notifications)
        assert await screen.load() is True

    assert screen.state == ScreenState.LOADED
    assert [c.name for c in screen.records] == ["Ana", "Luis"]
    assert len(notifications) == 0


@pytest.mark.asyncio
async def test_network_error_produces_exactly_one_error_notification() -> None:
    transport = _FakeTransport(
        {("GET", "/api/clientes"): HabibbiTransportError("Network Error", endpoint="/api/clientes")}
    )
    notifications = NotificationStore()
    async with _client(transport) as client:
        screen = client.customer_screen(notifications)
        assert await screen.load() is False

    assert screen.state == ScreenState.FAILED
    assert screen.records == []
    assert screen.is_empty
    assert screen.error == "Network Error"
    assert len(notifications) == 1
    (notification,) = notifications.notifications
    assert notification.severity == Severity.ERROR
    assert "Network Error" in notification.message


@pytest.mark.asyncio
async def test_success_false_envelope_is_a_failure_even_on_http_200() -> None:
    transport = _FakeTransport(
        {("GET", "/api/proveedores"): (200, {"success": False, "error": "Database unavailable"})}
    )
    notifications = NotificationStore()
    async with _client(transport) as client:
        screen = client.supplier_screen(notifications)
        await screen.load()

    assert screen.state == ScreenState.FAILED
    assert [n.message for n in notifications.notifications] == ["Error loading suppliers: Database unavailable"]


@pytest.mark.asyncio
async def test_validation_failure_never_reaches_the_network() -> None:
    transport = _FakeTransport({})
    notifications = NotificationStore()
    async with _client(transport) as client:
        screen = client.customer_screen(notifications)
        created = await screen.create(CustomerDraft(name="Ana", email="not-an-email"))

    assert created is False
    assert transport.calls == []
    (notification,) = notifications.notifications
    assert notification.severity == Severity.WARNING
    assert "email" in notification.message


@pytest.mark.asyncio
async def test_successful_mutation_notifies_closes_editor_and_refreshes() -> None:
    transport = _FakeTransport(
        {
            ("POST", "/api/clientes"): _envelope({"id": 9, "nombre": "Nuevo"}),
            ("GET", "/api/clientes"): _envelope([{"id": 9, "nombre": "Nuevo"}]),
        }
    )
    notifications = NotificationStore()
    async with _client(transport) as client:
        screen = client.customer_screen(notifications)
        screen.open_editor()
        assert await screen.create(CustomerDraft(name="  Nuevo ", rut="12.345.678-9")) is True

    assert not screen.editor_open
    assert [method for method, _endpoint, _body in transport.calls] == ["POST", "GET"]
    assert transport.calls[0][2] == {"nombre": "Nuevo", "rut": "12.345.678-9"}
    assert [c.name for c in screen.records] == ["Nuevo"]
    assert [n.message for n in notifications.notifications] == ["Customer created successfully"]


@pytest.mark.asyncio
async def test_backend_rejection_uses_backend_error_string() -> None:
    transport = _FakeTransport(
        {("DELETE", "/api/usuarios/3"): (400, {"success": False, "error": "Cannot delete the last admin"})}
    )
    notifications = NotificationStore()
    async with _client(transport) as client:
        screen = client.user_screen(notifications)
        screen.open_editor()
        assert await screen.delete(3) is False

    assert screen.editor_open
    (notification,) = notifications.notifications
    assert notification.severity == Severity.ERROR
    assert notification.message == "Cannot delete the last admin"


class _ControlledFetch:
    """Fetch function whose calls block until released."""

    def __init__(self) -> None:
        self.calls = 0
        self.pending: list[tuple[asyncio.Event, list[dict[str, Any]]]] = []

    async def __call__(self) -> list[dict[str, Any]]:
        self.calls += 1
        gate = asyncio.Event()
        slot: list[dict[str, Any]] = []
        self.pending.append((gate, slot))
        await gate.wait()
        return slot

    def release(self, index: int, rows: list[dict[str, Any]]) -> None:
        gate, slot = self.pending[index]
        slot.extend(rows)
        gate.set()


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


async def _unused(*_args: Any) -> None:
    raise AssertionError("not expected")


def _binding(fetch: Any) -> ResourceBinding[dict[str, Any], Any]:
    return ResourceBinding(
        singular="customer",
        plural="customers",
        fetch=fetch,
        create=_unused,
        update=_unused,
        delete=_unused,
    )


@pytest.mark.asyncio
async def test_stale_response_is_discarded_after_newer_load() -> None:
    fetch = _ControlledFetch()
    screen: ListScreen[dict[str, Any], Any] = ListScreen(_binding(fetch), NotificationStore())

    first = asyncio.create_task(screen.load())
    await _settle()
    second = asyncio.create_task(screen.load(force=True))
    await _settle()
    assert fetch.calls == 2

    fetch.release(1, [{"id": 1, "name": "fresh"}])
    assert await second is True
    fetch.release(0, [{"id": 1, "name": "stale"}])
    assert await first is False

    assert screen.records == [{"id": 1, "name": "fresh"}]
    assert screen.state == ScreenState.LOADED


@pytest.mark.asyncio
async def test_concurrent_loads_join_the_in_flight_request() -> None:
    fetch = _ControlledFetch()
    screen: ListScreen[dict[str, Any], Any] = ListScreen(_binding(fetch), NotificationStore())

    first = asyncio.create_task(screen.load())
    await _settle()
    assert screen.state == ScreenState.LOADING
    second = asyncio.create_task(screen.load())
    await _settle()

    fetch.release(0, [{"id": 2, "name": "only"}])

    assert await first is True
    assert await second is True
    assert fetch.calls == 1


@pytest.mark.asyncio
async def test_filter_is_reapplied_after_refresh() -> None:
    rows = [
        {"id": 1, "name": "Carla"},
        {"id": 2, "name": "ana"},
        {"id": 3, "name": "Bruno"},
    ]

    async def _fetch() -> list[dict[str, Any]]:
        return list(rows)

    screen: ListScreen[dict[str, Any], Any] = ListScreen(_binding(_fetch), NotificationStore())
    await screen.load()

    visible = screen.set_filter(RecordFilter(order=SortOrder.ASC))
    assert [r["name"] for r in visible] == ["ana", "Bruno", "Carla"]

    rows.append({"id": 4, "name": "Alberto"})
    await screen.load()
    assert [r["name"] for r in screen.records] == ["Alberto", "ana", "Bruno", "Carla"]

    screen.clear_filter()
    assert [r["id"] for r in screen.records] == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_failed_screen_can_retry() -> None:
    outcomes: list[Any] = [HabibbiApiError("Server busy"), [{"id": 1, "name": "back"}]]

    async def _fetch() -> list[dict[str, Any]]:
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    notifications = NotificationStore()
    screen: ListScreen[dict[str, Any], Any] = ListScreen(_binding(_fetch), notifications)

    assert await screen.load() is False
    assert screen.state == ScreenState.FAILED
    assert await screen.load() is True
    assert screen.state == ScreenState.LOADED
    assert screen.error is None
    assert len(notifications) == 1

from __future__ import annotations

import itertools
import logging
import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from pyhabibbi.cash import CashRegister, JsonFileStorage, MemoryStorage, SaleSimulator
from pyhabibbi.config import HabibbiConfig
from pyhabibbi.exceptions import HabibbiValidationError
from pyhabibbi.models.cash import MovementKind, Tender
from pyhabibbi.state.bus import EventBus
from pyhabibbi.state.events import (
    CashRegisterChanged,
    CashSaleRecorded,
    EventOrigin,
    StorageChanged,
    SyncEvent,
)


def _dt() -> datetime:
    return datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _register(bus: EventBus, storage: MemoryStorage | JsonFileStorage | None = None) -> CashRegister:
    ids = itertools.count(1)
    return CashRegister(
        storage if storage is not None else MemoryStorage(bus),
        bus,
        clock=_dt,
        id_factory=lambda: f"mov-{next(ids)}",
    )


def test_simulated_cash_sale_updates_state_and_emits_both_events() -> None:
    bus = EventBus()
    simulator = SaleSimulator(_register(bus))
    simulator.initialize(75000)

    sales: list[CashSaleRecorded] = []
    storage_events: list[StorageChanged] = []
    bus.subscribe(CashSaleRecorded, sales.append)
    bus.subscribe(StorageChanged, storage_events.append)

    assert simulator.simulate(2500, "cash") is True

    state = simulator.inspect()
    assert state is not None
    assert state.cash_on_hand == 77500
    assert state.total_sales == 2500
    assert state.cash_sales == 2500
    assert len(state.movements) == 1
    assert state.movements[0].kind == MovementKind.SALE
    assert state.movements[0].id == "mov-1"

    assert len(sales) == 1
    assert sales[0].sale_total == 2500
    assert sales[0].cash_state.model_dump() == state.model_dump()

    assert len(storage_events) == 1
    assert storage_events[0].key == "cash_state"
    assert storage_events[0].origin == EventOrigin.LOCAL
    assert storage_events[0].new_value is not None
    assert json.loads(storage_events[0].new_value)["cashOnHand"] == 77500


def test_card_sale_does_not_touch_cash_on_hand() -> None:
    bus = EventBus()
    register = _register(bus)
    register.initialize(1000)

    state = register.record_sale(300, Tender.CARD)

    assert state is not None
    assert state.cash_on_hand == 1000
    assert state.card_sales == 300
    assert state.total_sales == 300


def test_simulate_without_state_returns_false_and_emits_nothing() -> None:
    bus = EventBus()
    events: list[SyncEvent] = []
    bus.subscribe(SyncEvent, events.append)
    simulator = SaleSimulator(_register(bus))

    assert simulator.simulate() is False
    assert simulator.inspect() is None
    assert events == []


def test_simulate_on_closed_register_leaves_state_unchanged() -> None:
    bus = EventBus()
    register = _register(bus)
    simulator = SaleSimulator(register)
    register.initialize(5000)
    closed = register.close()
    assert closed is not None

    events: list[SyncEvent] = []
    bus.subscribe(SyncEvent, events.append)

    assert simulator.simulate(2500) is False
    state = register.state()
    assert state is not None
    assert state.model_dump() == closed.model_dump()
    assert events == []


def test_open_close_records_difference_and_resets_totals() -> None:
    bus = EventBus()
    register = _register(bus)
    changes: list[CashRegisterChanged] = []
    bus.subscribe(CashRegisterChanged, changes.append)

    opened = register.open(75000)
    assert opened.movements[0].kind == MovementKind.OPENING
    with pytest.raises(HabibbiValidationError):
        register.open(100)

    register.record_sale(2500)
    after_expense = register.add_movement("Change for supplier", -500)
    assert after_expense is not None
    assert after_expense.cash_on_hand == 77000
    assert after_expense.expected_cash == 77500

    closed = register.close()

    assert closed is not None
    assert not closed.is_open
    assert closed.total_sales == 0
    assert closed.cash_on_hand == 0
    closing = closed.movements[-1]
    assert closing.kind == MovementKind.CLOSING
    assert closing.difference == -500
    assert [m.kind for m in closed.movements] == [
        MovementKind.OPENING,
        MovementKind.SALE,
        MovementKind.EXPENSE,
        MovementKind.CLOSING,
    ]
    assert len(changes) == 3
    assert register.close() is None


def test_invalid_amounts_are_rejected() -> None:
    register = _register(EventBus())
    register.initialize(0)

    with pytest.raises(HabibbiValidationError):
        register.record_sale(0)
    with pytest.raises(HabibbiValidationError):
        register.add_movement("  ", 10)
    with pytest.raises(HabibbiValidationError):
        register.initialize(-1)


def test_reset_clears_key_and_notifies() -> None:
    bus = EventBus()
    simulator = SaleSimulator(_register(bus))
    simulator.initialize()
    storage_events: list[StorageChanged] = []
    changes: list[CashRegisterChanged] = []
    bus.subscribe(StorageChanged, storage_events.append)
    bus.subscribe(CashRegisterChanged, changes.append)

    simulator.reset()

    assert simulator.inspect() is None
    assert storage_events[0].new_value is None
    assert changes[0].cash_state is None


def test_malformed_state_is_treated_as_missing() -> None:
    bus = EventBus()
    storage = MemoryStorage()
    storage.set_item("cash_state", "{not json")
    register = _register(bus, storage)

    assert register.state() is None
    assert SaleSimulator(register).simulate() is False


def test_failing_handler_does_not_block_other_handlers() -> None:
    bus = EventBus()
    received: list[CashSaleRecorded] = []

    def _broken(_event: CashSaleRecorded) -> None:
        raise RuntimeError("view crashed")

    bus.subscribe(CashSaleRecorded, _broken)
    bus.subscribe(CashSaleRecorded, received.append)
    register = _register(bus)
    register.initialize(100)

    register.record_sale(50)

    assert len(received) == 1


def test_file_storage_shares_state_between_processes(tmp_path: Path) -> None:
    path = tmp_path / "cash.json"
    bus_a, bus_b = EventBus(), EventBus()
    storage_a = JsonFileStorage(path, bus_a)
    storage_b = JsonFileStorage(path, bus_b)
    register_a = _register(bus_a, storage_a)
    register_b = _register(bus_b, storage_b)

    remote: list[StorageChanged] = []
    bus_b.subscribe(StorageChanged, remote.append)

    SaleSimulator(register_a).initialize(75000)
    assert SaleSimulator(register_a).simulate(2500) is True

    events = storage_b.poll()

    assert len(events) == 1
    assert remote == events
    assert events[0].origin == EventOrigin.REMOTE
    state_b = register_b.state()
    assert state_b is not None
    assert state_b.cash_on_hand == 77500
    assert storage_a.poll() == []
    assert storage_b.poll() == []


def test_from_config_wires_storage_to_the_register_bus(tmp_path: Path) -> None:
    bus = EventBus()
    storage_events: list[StorageChanged] = []
    bus.subscribe(StorageChanged, storage_events.append)
    register = CashRegister.from_config(HabibbiConfig(cash_state_path=str(tmp_path / "cash.json")), bus)

    simulator = SaleSimulator(register)
    simulator.initialize()
    assert simulator.simulate() is True

    assert register.bus is bus
    assert len(storage_events) == 2
    assert (tmp_path / "cash.json").is_file()


def test_from_config_without_path_keeps_state_in_memory() -> None:
    register = CashRegister.from_config(HabibbiConfig(cash_state_key="till-1"))
    seen: list[StorageChanged] = []
    register.subscribe(StorageChanged, seen.append)

    register.initialize(100)

    assert [event.key for event in seen] == ["till-1"]


def test_storage_on_another_bus_is_reported(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="pyhabibbi.cash.register"):
        CashRegister(MemoryStorage(), EventBus())

    assert "does not publish on the register's bus" in caplog.text

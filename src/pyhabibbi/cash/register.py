"""Cash-register state service.

:class:`CashRegister` is the only writer of the persisted cash state.
Views never read storage directly: they subscribe to the register's bus
and receive :class:`CashSaleRecorded`, :class:`CashRegisterChanged` and
the storage layer's :class:`StorageChanged` events.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import ValidationError

from pyhabibbi._constants import DEFAULT_CASH_STATE_KEY
from pyhabibbi.cash.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from pyhabibbi.config import HabibbiConfig
from pyhabibbi.exceptions import HabibbiValidationError
from pyhabibbi.models.cash import CashMovement, CashState, MovementKind, Tender
from pyhabibbi.state.bus import E, EventBus
from pyhabibbi.state.events import CashRegisterChanged, CashSaleRecorded

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _movement_id() -> str:
    return secrets.token_hex(8)


class CashRegister:
    """Owner of the persisted :class:`CashState`."""

    def __init__(
        self,
        storage: KeyValueStorage,
        bus: EventBus,
        *,
        key: str = DEFAULT_CASH_STATE_KEY,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _movement_id,
    ) -> None:
        self._storage = storage
        self._bus = bus
        self._key = key
        self._clock = clock
        self._id_factory = id_factory
        if getattr(storage, "bus", None) is not bus:
            _logger.warning(
                "Cash storage does not publish on the register's bus; "
                "StorageChanged events will not reach its subscribers"
            )

    @classmethod
    def from_config(cls, config: HabibbiConfig, bus: EventBus | None = None) -> CashRegister:
        """Build a register and its storage on one bus.

        ``config.cash_state_path`` selects :class:`JsonFileStorage`;
        without it the state lives in :class:`MemoryStorage`.
        """
        bus = bus if bus is not None else EventBus()
        storage: KeyValueStorage
        if config.cash_state_path:
            storage = JsonFileStorage(config.cash_state_path, bus)
        else:
            storage = MemoryStorage(bus)
        return cls(storage, bus, key=config.cash_state_key)

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def key(self) -> str:
        return self._key

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        return self._bus.subscribe(event_type, handler)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def state(self) -> CashState | None:
        """Current persisted state, or ``None`` when nothing usable is stored."""
        text = self._storage.get_item(self._key)
        if text is None:
            return None
        try:
            return CashState.from_json(text)
        except ValidationError:
            _logger.warning("Ignoring malformed cash state under %r", self._key)
            return None

    @property
    def is_open(self) -> bool:
        state = self.state()
        return state is not None and state.is_open

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, opening_float: float) -> CashState:
        """Write a fresh open state with zeroed totals and no movements."""
        _check_non_negative(opening_float, "opening_float")
        state = CashState(
            is_open=True,
            opened_at=self._clock(),
            opening_float=opening_float,
            cash_on_hand=opening_float,
        )
        self._persist(state)
        self._bus.publish(CashRegisterChanged(cash_state=state))
        return state

    def open(self, opening_float: float) -> CashState:
        """Open the register, journaling the opening float."""
        _check_non_negative(opening_float, "opening_float")
        if self.is_open:
            raise HabibbiValidationError("The cash register is already open")
        now = self._clock()
        state = CashState(
            is_open=True,
            opened_at=now,
            opening_float=opening_float,
            cash_on_hand=opening_float,
            movements=[
                CashMovement(
                    id=self._id_factory(),
                    kind=MovementKind.OPENING,
                    description="Register opened",
                    amount=opening_float,
                    timestamp=now,
                )
            ],
        )
        self._persist(state)
        self._bus.publish(CashRegisterChanged(cash_state=state))
        return state

    def close(self) -> CashState | None:
        """Close the register; ``None`` when it was not open.

        The closing movement records the actual cash on hand and its
        difference from the expected amount.  Totals reset to zero and
        the movement journal is kept.
        """
        state = self.state()
        if state is None or not state.is_open:
            return None
        now = self._clock()
        closing = CashMovement(
            id=self._id_factory(),
            kind=MovementKind.CLOSING,
            description="Register closed",
            amount=state.cash_on_hand,
            timestamp=now,
            difference=state.cash_on_hand - state.expected_cash,
        )
        closed = CashState(
            is_open=False,
            closed_at=now,
            movements=[*state.movements, closing],
        )
        self._persist(closed)
        self._bus.publish(CashRegisterChanged(cash_state=closed))
        return closed

    def reset(self) -> None:
        """Forget the persisted state."""
        self._storage.remove_item(self._key)
        self._bus.publish(CashRegisterChanged(cash_state=None))

    # ------------------------------------------------------------------
    # Movements
    # ------------------------------------------------------------------

    def record_sale(self, amount: float, tender: Tender | str = Tender.CASH) -> CashState | None:
        """Add a sale to the open register.

        Returns the new state, or ``None`` (and changes nothing) when the
        register is not open.
        """
        if amount <= 0:
            raise HabibbiValidationError("Sale amount must be positive", field="amount")
        tender = Tender(tender)
        state = self.state()
        if state is None or not state.is_open:
            _logger.info("Sale of %s ignored: cash register is not open", amount)
            return None

        updated = state.model_copy(
            update={
                "cash_on_hand": state.cash_on_hand + (amount if tender == Tender.CASH else 0),
                "cash_sales": state.cash_sales + (amount if tender == Tender.CASH else 0),
                "card_sales": state.card_sales + (amount if tender == Tender.CARD else 0),
                "total_sales": state.total_sales + amount,
                "movements": [
                    *state.movements,
                    CashMovement(
                        id=self._id_factory(),
                        kind=MovementKind.SALE,
                        description=f"Sale ({tender.value})",
                        amount=amount,
                        timestamp=self._clock(),
                        tender=tender,
                    ),
                ],
            }
        )
        self._persist(updated)
        self._bus.publish(CashSaleRecorded(sale_total=amount, tender=tender, cash_state=updated))
        return updated

    def add_movement(self, description: str, amount: float) -> CashState | None:
        """Manual cash in (positive) or out (negative); ``None`` when closed."""
        description = description.strip()
        if not description:
            raise HabibbiValidationError("Movement description is required", field="description")
        if amount == 0:
            raise HabibbiValidationError("Movement amount must not be zero", field="amount")
        state = self.state()
        if state is None or not state.is_open:
            return None

        updated = state.model_copy(
            update={
                "cash_on_hand": state.cash_on_hand + amount,
                "movements": [
                    *state.movements,
                    CashMovement(
                        id=self._id_factory(),
                        kind=MovementKind.INCOME if amount > 0 else MovementKind.EXPENSE,
                        description=description,
                        amount=amount,
                        timestamp=self._clock(),
                    ),
                ],
            }
        )
        self._persist(updated)
        self._bus.publish(CashRegisterChanged(cash_state=updated))
        return updated

    def _persist(self, state: CashState) -> None:
        self._storage.set_item(self._key, state.to_json())


def _check_non_negative(value: float, field: str) -> None:
    if value < 0:
        raise HabibbiValidationError(f"{field} must not be negative", field=field)

"""Sale simulator for checking that every view observes the same cash state.

Typical session::

    simulator.initialize(75000)
    simulator.simulate(2500, "cash")   # True
    simulator.inspect().cash_on_hand   # 77500.0
"""

from __future__ import annotations

import logging

from pyhabibbi._constants import DEFAULT_OPENING_FLOAT
from pyhabibbi.cash.register import CashRegister
from pyhabibbi.models.cash import CashState, Tender

_logger = logging.getLogger(__name__)


class SaleSimulator:
    """Fabricate register activity through a :class:`CashRegister`."""

    def __init__(self, register: CashRegister) -> None:
        self._register = register

    def simulate(self, amount: float = 2500, tender: Tender | str = Tender.CASH) -> bool:
        """Record a fake sale; ``False`` when the register is not open."""
        state = self._register.record_sale(amount, tender)
        if state is None:
            _logger.info("Simulated sale rejected: cash register is not open")
            return False
        _logger.info(
            "Simulated %s sale of %s recorded (cash on hand %s, total sales %s)",
            Tender(tender).value,
            amount,
            state.cash_on_hand,
            state.total_sales,
        )
        return True

    def initialize(self, opening_float: float = DEFAULT_OPENING_FLOAT) -> CashState:
        state = self._register.initialize(opening_float)
        _logger.info("Test register initialized with %s", opening_float)
        return state

    def reset(self) -> None:
        self._register.reset()
        _logger.info("Test register state cleared")

    def inspect(self) -> CashState | None:
        return self._register.state()

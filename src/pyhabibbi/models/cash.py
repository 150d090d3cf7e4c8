"""Cash-register state persisted for cross-view synchronization.

The serialized form uses camelCase keys (``cashOnHand``, ``totalSales``)
because every consumer, in this process or another one, reads the same
JSON document from storage.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Tender(StrEnum):
    CASH = "cash"
    CARD = "card"


class MovementKind(StrEnum):
    OPENING = "opening"
    SALE = "sale"
    INCOME = "income"
    EXPENSE = "expense"
    CLOSING = "closing"


class _CashModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class CashMovement(_CashModel):
    """One line of the register's movement journal."""

    id: str
    kind: MovementKind
    description: str = ""
    amount: float = 0.0
    timestamp: datetime
    tender: Tender | None = None
    difference: float | None = None
    """Actual minus expected cash; closing movements only."""


class CashState(_CashModel):
    """Snapshot of the cash register."""

    is_open: bool = False
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    opening_float: float = 0.0
    cash_on_hand: float = 0.0
    cash_sales: float = 0.0
    card_sales: float = 0.0
    total_sales: float = 0.0
    movements: list[CashMovement] = Field(default_factory=list)

    @property
    def expected_cash(self) -> float:
        """Cash the drawer should hold if only sales moved money."""
        return self.opening_float + self.cash_sales

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, text: str) -> CashState:
        return cls.model_validate_json(text)

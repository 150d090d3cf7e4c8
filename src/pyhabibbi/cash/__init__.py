"""Cash-register state shared between views and processes."""

from pyhabibbi.cash.register import CashRegister
from pyhabibbi.cash.simulator import SaleSimulator
from pyhabibbi.cash.storage import JsonFileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "CashRegister",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SaleSimulator",
]

"""pyhabibbi - Async Python client and state layer for the Habibbi Café admin API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyhabibbi")
except PackageNotFoundError:
    __version__ = "0+local"
from pyhabibbi.cash import CashRegister, JsonFileStorage, MemoryStorage, SaleSimulator
from pyhabibbi.client import HabibbiClient
from pyhabibbi.config import HabibbiConfig
from pyhabibbi.exceptions import (
    HabibbiApiError,
    HabibbiConfigError,
    HabibbiError,
    HabibbiNotFoundError,
    HabibbiTransportError,
    HabibbiValidationError,
)
from pyhabibbi.models import (
    CashState,
    Customer,
    CustomerDraft,
    Notification,
    Sale,
    SaleItem,
    Severity,
    Supplier,
    SupplierDraft,
    Tender,
    User,
    UserDraft,
)
from pyhabibbi.state.bus import EventBus
from pyhabibbi.state.events import CashRegisterChanged, CashSaleRecorded, EventOrigin, StorageChanged
from pyhabibbi.state.notifications import NotificationStore
from pyhabibbi.state.reconcile import RecordFilter, reconcile
from pyhabibbi.state.screen import ListScreen, ScreenState

__all__ = [
    "__version__",
    "CashRegister",
    "CashRegisterChanged",
    "CashSaleRecorded",
    "CashState",
    "Customer",
    "CustomerDraft",
    "EventBus",
    "EventOrigin",
    "HabibbiApiError",
    "HabibbiClient",
    "HabibbiConfig",
    "HabibbiConfigError",
    "HabibbiError",
    "HabibbiNotFoundError",
    "HabibbiTransportError",
    "HabibbiValidationError",
    "JsonFileStorage",
    "ListScreen",
    "MemoryStorage",
    "Notification",
    "NotificationStore",
    "RecordFilter",
    "Sale",
    "SaleItem",
    "SaleSimulator",
    "ScreenState",
    "Severity",
    "StorageChanged",
    "Supplier",
    "SupplierDraft",
    "Tender",
    "User",
    "UserDraft",
    "reconcile",
]

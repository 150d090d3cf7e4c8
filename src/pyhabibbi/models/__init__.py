"""Data models for Habibbi backend records and client-side state."""

from pyhabibbi.models._base import BackendDatetime, HabibbiBaseModel, parse_backend_datetime
from pyhabibbi.models.cash import CashMovement, CashState, MovementKind, Tender
from pyhabibbi.models.customer import Customer
from pyhabibbi.models.notification import Notification, Severity, render_notification
from pyhabibbi.models.requests import CustomerDraft, SupplierDraft, UserDraft
from pyhabibbi.models.sale import Sale, SaleItem
from pyhabibbi.models.supplier import Supplier
from pyhabibbi.models.user import User

__all__ = [
    "BackendDatetime",
    "CashMovement",
    "CashState",
    "Customer",
    "CustomerDraft",
    "HabibbiBaseModel",
    "MovementKind",
    "Notification",
    "Sale",
    "SaleItem",
    "Severity",
    "Supplier",
    "SupplierDraft",
    "Tender",
    "User",
    "UserDraft",
    "parse_backend_datetime",
    "render_notification",
]

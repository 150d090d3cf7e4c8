"""High-level async client for the Habibbi Café administration API."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pyhabibbi._api import health as _health_api
from pyhabibbi._api import records as _records_api
from pyhabibbi._api import sales as _sales_api
from pyhabibbi._constants import CUSTOMERS_ENDPOINT, SUPPLIERS_ENDPOINT, USERS_ENDPOINT
from pyhabibbi._transport import JsonTransport, Transport
from pyhabibbi.config import HabibbiConfig
from pyhabibbi.exceptions import HabibbiError
from pyhabibbi.models.customer import Customer
from pyhabibbi.models.requests import CustomerDraft, SupplierDraft, UserDraft
from pyhabibbi.models.sale import Sale
from pyhabibbi.models.supplier import Supplier
from pyhabibbi.models.user import User
from pyhabibbi.state.notifications import NotificationStore
from pyhabibbi.state.screen import ListScreen, RecordId, ResourceBinding
from pyhabibbi.validation import validate_customer, validate_supplier, validate_user

_logger = logging.getLogger(__name__)


class HabibbiClient:
    """Async client for the Habibbi backend.

    Usage::

        async with HabibbiClient(HabibbiConfig.from_env()) as client:
            customers = await client.get_customers()

    Drafts are validated before any request is built, so a
    :class:`~pyhabibbi.exceptions.HabibbiValidationError` never costs a
    round trip.
    """

    def __init__(
        self,
        config: HabibbiConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config if config is not None else HabibbiConfig.from_env()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    @property
    def config(self) -> HabibbiConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> HabibbiClient:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = JsonTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise HabibbiError("Client not initialized. Use 'async with HabibbiClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    async def get_customers(self) -> list[Customer]:
        return await _records_api.list_records(self._config, self._require_transport(), CUSTOMERS_ENDPOINT, Customer)

    async def get_customer(self, customer_id: RecordId) -> Customer:
        return await _records_api.get_record(self._require_transport(), CUSTOMERS_ENDPOINT, customer_id, Customer)

    async def create_customer(self, draft: CustomerDraft) -> Customer | None:
        validate_customer(draft)
        return await _records_api.create_record(
            self._require_transport(), CUSTOMERS_ENDPOINT, draft.to_payload(), Customer
        )

    async def update_customer(self, customer_id: RecordId, draft: CustomerDraft) -> Customer | None:
        validate_customer(draft)
        return await _records_api.update_record(
            self._require_transport(), CUSTOMERS_ENDPOINT, customer_id, draft.to_payload(), Customer
        )

    async def delete_customer(self, customer_id: RecordId) -> None:
        await _records_api.delete_record(self._require_transport(), CUSTOMERS_ENDPOINT, customer_id)

    # ------------------------------------------------------------------
    # Suppliers
    # ------------------------------------------------------------------

    async def get_suppliers(self) -> list[Supplier]:
        return await _records_api.list_records(self._config, self._require_transport(), SUPPLIERS_ENDPOINT, Supplier)

    async def get_supplier(self, supplier_id: RecordId) -> Supplier:
        return await _records_api.get_record(self._require_transport(), SUPPLIERS_ENDPOINT, supplier_id, Supplier)

    async def create_supplier(self, draft: SupplierDraft) -> Supplier | None:
        validate_supplier(draft)
        return await _records_api.create_record(
            self._require_transport(), SUPPLIERS_ENDPOINT, draft.to_payload(), Supplier
        )

    async def update_supplier(self, supplier_id: RecordId, draft: SupplierDraft) -> Supplier | None:
        validate_supplier(draft)
        return await _records_api.update_record(
            self._require_transport(), SUPPLIERS_ENDPOINT, supplier_id, draft.to_payload(), Supplier
        )

    async def delete_supplier(self, supplier_id: RecordId) -> None:
        await _records_api.delete_record(self._require_transport(), SUPPLIERS_ENDPOINT, supplier_id)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_users(self) -> list[User]:
        return await _records_api.list_records(self._config, self._require_transport(), USERS_ENDPOINT, User)

    async def get_user(self, user_id: RecordId) -> User:
        return await _records_api.get_record(self._require_transport(), USERS_ENDPOINT, user_id, User)

    async def create_user(self, draft: UserDraft) -> User | None:
        validate_user(draft, creating=True)
        return await _records_api.create_record(self._require_transport(), USERS_ENDPOINT, draft.to_payload(), User)

    async def update_user(self, user_id: RecordId, draft: UserDraft) -> User | None:
        validate_user(draft, creating=False)
        return await _records_api.update_record(
            self._require_transport(), USERS_ENDPOINT, user_id, draft.to_payload(), User
        )

    async def delete_user(self, user_id: RecordId) -> None:
        await _records_api.delete_record(self._require_transport(), USERS_ENDPOINT, user_id)

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    async def get_sales(self) -> list[Sale]:
        return await _sales_api.fetch_sales(self._config, self._require_transport())

    async def get_sale(self, sale_id: RecordId) -> Sale:
        return await _sales_api.fetch_sale(self._require_transport(), sale_id)

    async def get_customer_history(self, customer_id: int) -> list[Sale]:
        """Sales for one customer, newest first, with their line items."""
        return await _sales_api.fetch_customer_history(self._config, self._require_transport(), customer_id)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def check_health(self) -> dict[str, Any]:
        return await _health_api.check_health(self._require_transport())

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------

    def _screen(self, binding: ResourceBinding[Any, Any], notifications: NotificationStore) -> ListScreen[Any, Any]:
        return ListScreen(
            binding,
            notifications,
            refresh_delay=self._config.refresh_delay,
            notification_duration_ms=self._config.notification_duration_ms,
        )

    def customer_screen(self, notifications: NotificationStore) -> ListScreen[Customer, CustomerDraft]:
        binding: ResourceBinding[Customer, CustomerDraft] = ResourceBinding(
            singular="customer",
            plural="customers",
            fetch=self.get_customers,
            create=self.create_customer,
            update=self.update_customer,
            delete=self.delete_customer,
        )
        return self._screen(binding, notifications)

    def supplier_screen(self, notifications: NotificationStore) -> ListScreen[Supplier, SupplierDraft]:
        binding: ResourceBinding[Supplier, SupplierDraft] = ResourceBinding(
            singular="supplier",
            plural="suppliers",
            fetch=self.get_suppliers,
            create=self.create_supplier,
            update=self.update_supplier,
            delete=self.delete_supplier,
        )
        return self._screen(binding, notifications)

    def user_screen(self, notifications: NotificationStore) -> ListScreen[User, UserDraft]:
        binding: ResourceBinding[User, UserDraft] = ResourceBinding(
            singular="user",
            plural="users",
            fetch=self.get_users,
            create=self.create_user,
            update=self.update_user,
            delete=self.delete_user,
        )
        return self._screen(binding, notifications)

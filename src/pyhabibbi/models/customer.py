"""Customer model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyhabibbi.models._base import BackendDatetime, HabibbiBaseModel


class Customer(HabibbiBaseModel):
    """A café customer as listed by ``/api/clientes``."""

    id: int | None = Field(default=None, validation_alias=AliasChoices("id", "id_cliente"))
    """Backend identifier (``id`` or legacy ``id_cliente``)."""
    name: str = Field(default="", validation_alias=AliasChoices("nombre", "name"))
    phone: str = Field(default="", validation_alias=AliasChoices("telefono", "phone"))
    email: str = Field(default="", validation_alias=AliasChoices("correo", "email"))
    rut: str = Field(default="", validation_alias=AliasChoices("rut"))
    """Chilean tax id, free-form as typed by the cashier."""
    address: str = Field(default="", validation_alias=AliasChoices("direccion", "address"))
    registered_at: BackendDatetime = Field(
        default=None,
        validation_alias=AliasChoices("fecha_registro", "fechaRegistro", "registered_at"),
    )

"""Supplier model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyhabibbi.models._base import HabibbiBaseModel


class Supplier(HabibbiBaseModel):
    """A supplier as listed by ``/api/proveedores``."""

    id: int | None = Field(default=None, validation_alias=AliasChoices("id", "id_proveedor"))
    name: str = Field(default="", validation_alias=AliasChoices("nombre", "name"))
    phone: str = Field(default="", validation_alias=AliasChoices("telefono", "phone"))
    email: str = Field(default="", validation_alias=AliasChoices("email", "correo"))
    address: str = Field(default="", validation_alias=AliasChoices("direccion", "address"))

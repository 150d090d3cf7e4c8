"""Pydantic request models for create/update entrypoints.

These models provide a consistent "normalize → validate → send" flow:
the model strips whitespace, :mod:`pyhabibbi.validation` applies the
form rules, and ``to_payload()`` renders the backend's field names.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class _Draft(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    #: English field name -> backend key.
    _PAYLOAD_KEYS: ClassVar[dict[str, str]] = {}

    def to_payload(self) -> dict[str, Any]:
        """Render the backend body, omitting fields left unset."""
        payload: dict[str, Any] = {}
        for field_name, value in self.model_dump(exclude_none=True).items():
            payload[self._PAYLOAD_KEYS.get(field_name, field_name)] = value
        return payload


class CustomerDraft(_Draft):
    """Customer form contents."""

    _PAYLOAD_KEYS: ClassVar[dict[str, str]] = {
        "name": "nombre",
        "phone": "telefono",
        "email": "correo",
        "rut": "rut",
        "address": "direccion",
    }

    name: str = ""
    phone: str | None = None
    email: str | None = None
    rut: str | None = None
    address: str | None = None


class SupplierDraft(_Draft):
    """Supplier form contents."""

    _PAYLOAD_KEYS: ClassVar[dict[str, str]] = {
        "name": "nombre",
        "phone": "telefono",
        "email": "email",
        "address": "direccion",
    }

    name: str = ""
    phone: str | None = None
    email: str | None = None
    address: str | None = None


class UserDraft(_Draft):
    """User form contents.

    ``password`` may be left empty on update to keep the current one.
    """

    _PAYLOAD_KEYS: ClassVar[dict[str, str]] = {
        "name": "nombre",
        "last_name": "apellido",
        "email": "correo",
        "password": "clave",
        "role": "rol",
        "active": "activo",
    }

    name: str = ""
    last_name: str | None = None
    email: str = ""
    password: str | None = None
    role: str = "vendedor"
    active: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if not payload.get("clave"):
            payload.pop("clave", None)
        if "activo" in payload:
            payload["activo"] = 1 if payload["activo"] else 0
        return payload

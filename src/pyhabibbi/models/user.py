"""Back-office user model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyhabibbi.models._base import BackendBool, BackendDatetime, HabibbiBaseModel


class User(HabibbiBaseModel):
    """A staff account as listed by ``/api/usuarios``.

    The password hash is never returned by the backend, so it has no
    field here.
    """

    id: int | None = Field(default=None, validation_alias=AliasChoices("id", "id_usuario"))
    name: str = Field(default="", validation_alias=AliasChoices("nombre", "name"))
    last_name: str = Field(default="", validation_alias=AliasChoices("apellido", "last_name"))
    email: str = Field(default="", validation_alias=AliasChoices("correo", "email"))
    role: str = Field(default="vendedor", validation_alias=AliasChoices("rol", "role"))
    """``admin`` or ``vendedor``."""
    active: BackendBool = Field(default=True, validation_alias=AliasChoices("activo", "active"))
    created_at: BackendDatetime = Field(
        default=None,
        validation_alias=AliasChoices("fecha_creacion", "created_at"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

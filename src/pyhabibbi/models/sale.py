"""Sale header and line-item models."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyhabibbi.models._base import BackendDatetime, HabibbiBaseModel


class SaleItem(HabibbiBaseModel):
    """One line of ``detalle_venta``."""

    product_id: int | None = Field(default=None, validation_alias=AliasChoices("id_producto", "product_id"))
    product_name: str = Field(
        default="",
        validation_alias=AliasChoices("producto_nombre", "nombre", "product_name"),
    )
    quantity: float = Field(default=0.0, validation_alias=AliasChoices("cantidad", "quantity"))
    unit_price: float | None = Field(
        default=None,
        validation_alias=AliasChoices("precio_unitario", "precio", "unit_price"),
    )
    subtotal: float | None = Field(default=None, validation_alias=AliasChoices("subtotal"))


class Sale(HabibbiBaseModel):
    """A sale header, optionally joined with its line items.

    The list endpoint returns headers only; ``items`` is populated from
    ``/api/ventas/{id}`` by purchase-history enrichment.
    """

    id: int | None = Field(default=None, validation_alias=AliasChoices("id", "id_venta"))
    customer_id: int | None = Field(default=None, validation_alias=AliasChoices("id_cliente", "customer_id"))
    customer_name: str = Field(default="", validation_alias=AliasChoices("cliente", "customer_name"))
    seller: str = Field(default="", validation_alias=AliasChoices("vendedor", "seller"))
    date: BackendDatetime = Field(default=None, validation_alias=AliasChoices("fecha", "date"))
    total: float = Field(default=0.0, validation_alias=AliasChoices("total"))
    payment_method: str = Field(default="", validation_alias=AliasChoices("metodo_pago", "payment_method"))
    items: list[SaleItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("detalles", "items", "productos"),
    )

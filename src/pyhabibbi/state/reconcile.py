"""Identifier-based list reconciliation.

Backend list endpoints occasionally return the same row twice, and
filters may be re-applied to a collection that was already reconciled.
:func:`reconcile` turns any of those into a display-ready list where each
identifier appears once, keeping the first occurrence and the input
order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator

from pyhabibbi.exceptions import HabibbiValidationError

_logger = logging.getLogger(__name__)

R = TypeVar("R")


def normalize_identifier(value: Any) -> str | None:
    """Map ``7``, ``7.0``, ``"7"`` and ``" 7 "`` to the same key."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    key = str(value).strip()
    return key or None


def _field_value(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def resolve_identifier(record: Any, id_field: str = "id", legacy_field: str | None = None) -> str | None:
    """Return the record's normalized identifier, or ``None`` when it has none.

    ``id_field`` is checked first; ``legacy_field`` is the fallback.
    """
    for name in (id_field, legacy_field):
        if name is None:
            continue
        key = normalize_identifier(_field_value(record, name))
        if key is not None:
            return key
    return None


def reconcile(
    records: Iterable[R],
    *,
    id_field: str = "id",
    legacy_field: str | None = None,
    strict: bool = False,
) -> list[R]:
    """Deduplicate *records* by identifier; first occurrence wins.

    Records without an identifier are dropped (and counted in a WARNING
    log) unless ``strict`` is set, in which case the first one raises
    :class:`HabibbiValidationError`.
    """
    unique: dict[str, R] = {}
    dropped = 0
    for record in records:
        key = resolve_identifier(record, id_field, legacy_field)
        if key is None:
            if strict:
                raise HabibbiValidationError(f"Record without {id_field!r}: {record!r}", field=id_field)
            dropped += 1
            continue
        if key not in unique:
            unique[key] = record

    if dropped:
        _logger.warning("Dropped %d record(s) without an identifier", dropped)
    return list(unique.values())


# ------------------------------------------------------------------
# Search / sort filter
# ------------------------------------------------------------------


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


#: Fields searched when the filter targets ``any`` field.
DEFAULT_SEARCH_FIELDS: tuple[str, ...] = ("name", "phone", "email")


class RecordFilter(BaseModel):
    """Search text, target field and sort order for a displayed list.

    ``field="any"`` searches every field in ``search_fields`` and sorts by
    ``name``.  ``order=None`` keeps the backend order.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    query: str = ""
    field: str = "any"
    order: SortOrder | None = None
    search_fields: tuple[str, ...] = DEFAULT_SEARCH_FIELDS

    @field_validator("field")
    @classmethod
    def _field_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("field must be non-empty")
        return value

    @property
    def is_active(self) -> bool:
        return bool(self.query) or self.order is not None

    @property
    def sort_field(self) -> str:
        return "name" if self.field == "any" else self.field

    def matches(self, record: Any) -> bool:
        if not self.query:
            return True
        needle = self.query.lower()
        fields: Sequence[str] = self.search_fields if self.field == "any" else (self.field,)
        for name in fields:
            value = _field_value(record, name)
            if value is not None and needle in str(value).lower():
                return True
        return False

    def apply(self, records: Iterable[R]) -> list[R]:
        selected = [record for record in records if self.matches(record)]
        if self.order is not None:
            sort_field = self.sort_field
            selected.sort(
                key=lambda record: str(_field_value(record, sort_field) or "").lower(),
                reverse=self.order == SortOrder.DESC,
            )
        return selected


def apply_filter(
    records: Iterable[R],
    record_filter: RecordFilter,
    *,
    id_field: str = "id",
    legacy_field: str | None = None,
) -> list[R]:
    """Filter/sort *records*, then reconcile the result again."""
    if not record_filter.is_active:
        return reconcile(records, id_field=id_field, legacy_field=legacy_field)
    return reconcile(record_filter.apply(records), id_field=id_field, legacy_field=legacy_field)

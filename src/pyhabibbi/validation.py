"""Client-side form validation.

Every rule here runs before a request is built; a failure raises
:class:`HabibbiValidationError` and nothing reaches the backend.
"""

from __future__ import annotations

import re

from pyhabibbi._constants import USER_ROLES
from pyhabibbi.exceptions import HabibbiValidationError
from pyhabibbi.models.requests import CustomerDraft, SupplierDraft, UserDraft

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^[\d\s\-+()]+$")
_RUT_STRIP_RE = re.compile(r"[^0-9kK]")


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def is_valid_phone(value: str) -> bool:
    return bool(_PHONE_RE.match(value))


def is_valid_rut(value: str) -> bool:
    """Loose RUT check: 7 to 9 digits (``k`` allowed) once dots and dashes go."""
    significant = _RUT_STRIP_RE.sub("", value)
    return 7 <= len(significant) <= 9


def _require_name(name: str) -> None:
    if not name:
        raise HabibbiValidationError("Name is required", field="name")


def _check_contact(email: str | None, phone: str | None) -> None:
    if email and not is_valid_email(email):
        raise HabibbiValidationError("Please enter a valid email address", field="email")
    if phone and not is_valid_phone(phone):
        raise HabibbiValidationError("Please enter a valid phone number", field="phone")


def validate_customer(draft: CustomerDraft) -> None:
    _require_name(draft.name)
    _check_contact(draft.email, draft.phone)
    if draft.rut and not is_valid_rut(draft.rut):
        raise HabibbiValidationError("RUT must have 7 to 9 digits", field="rut")


def validate_supplier(draft: SupplierDraft) -> None:
    _require_name(draft.name)
    _check_contact(draft.email, draft.phone)


def validate_user(draft: UserDraft, *, creating: bool) -> None:
    _require_name(draft.name)
    if not draft.email:
        raise HabibbiValidationError("Email is required", field="email")
    if not is_valid_email(draft.email):
        raise HabibbiValidationError("Please enter a valid email address", field="email")
    if draft.role not in USER_ROLES:
        raise HabibbiValidationError('Role must be "admin" or "vendedor"', field="role")
    if creating and not draft.password:
        raise HabibbiValidationError("Password is required", field="password")

"""Helpers for safe debug logging.

Request traces carry two kinds of sensitive values: secrets (user
passwords travel as ``clave``, the backend may echo tokens) which are
dropped entirely, and customer personal data (RUT, email, phone) which
is masked so traces stay useful for matching rows.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SECRET_MARKERS: tuple[str, ...] = ("password", "clave", "contrasena", "token", "authorization", "cookie")

_PERSONAL_KEYS: frozenset[str] = frozenset({"rut", "correo", "email", "telefono", "phone"})

_MAX_DEPTH = 20


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


def is_secret_key(key: str) -> bool:
    """``True`` for keys such as ``clave``, ``newPassword`` or ``access_token``."""
    normalized = _normalize_key(key)
    return any(marker in normalized for marker in _SECRET_MARKERS)


def mask_value(value: Any) -> str:
    """Keep the last two characters of *value*, mask the rest."""
    text = str(value)
    if len(text) <= 2:
        return "*" * len(text)
    return "*" * (len(text) - 2) + text[-2:]


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* that is safe to emit in DEBUG logs."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for raw_key, item in value.items():
            key = str(raw_key)
            if is_secret_key(key):
                redacted[key] = "<redacted>"
            elif _normalize_key(key) in _PERSONAL_KEYS and item not in (None, ""):
                redacted[key] = mask_value(item)
            else:
                redacted[key] = redact_for_log(item, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]

    if value is None or isinstance(value, (bool, int, float)):
        return value

    return repr(value)

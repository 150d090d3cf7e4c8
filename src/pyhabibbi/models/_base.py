"""Base model for Habibbi backend records.

Every record model inherits from :class:`HabibbiBaseModel` which
provides:

* ``populate_by_name`` so records can be built from the backend's
  Spanish keys (via ``AliasChoices``) or from the English field names.
* A ``model_validator(mode="before")`` that drops ``None`` and blank
  strings so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def parse_backend_datetime(value: Any) -> datetime | None:
    """Coerce the backend's ``YYYY-MM-DD[ HH:MM:SS]`` strings to UTC datetimes.

    Values that are not a real date become ``None`` so the record keeps
    its other fields.
    """
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    text = str(value).strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        # MySQL zero dates ("0000-00-00 00:00:00") and other unusable values.
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_backend_bool(value: Any) -> Any:
    """MySQL ``TINYINT`` flags arrive as ``0``/``1`` or ``"0"``/``"1"``."""
    if isinstance(value, str) and value.strip() in {"0", "1"}:
        return value.strip() == "1"
    return value


BackendDatetime = Annotated[datetime | None, BeforeValidator(parse_backend_datetime)]
BackendBool = Annotated[bool, BeforeValidator(parse_backend_bool)]


class HabibbiBaseModel(BaseModel):
    """Base for records returned by the backend."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original backend record."""

    @model_validator(mode="before")
    @classmethod
    def _clean_backend_values(cls, values: Any) -> Any:
        """Drop nulls and blank strings, and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = {
            key: value
            for key, value in values.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }
        # Explicit raw= wins over the auto-stash.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned

"""Key-value storage holding JSON-encoded values.

Writes publish a :class:`StorageChanged` event on the bus, so listeners
that only watch storage stay in step with listeners of domain events.
:class:`JsonFileStorage` can be shared by several processes;
:meth:`JsonFileStorage.poll` turns writes made elsewhere into
``REMOTE`` events.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pyhabibbi.exceptions import HabibbiError
from pyhabibbi.state.bus import EventBus
from pyhabibbi.state.events import EventOrigin, StorageChanged

_logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """String-to-string storage with change notification."""

    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage:
    """Process-local storage."""

    def __init__(self, bus: EventBus | None = None) -> None:
        self._bus = bus
        self._items: dict[str, str] = {}

    @property
    def bus(self) -> EventBus | None:
        return self._bus

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        old = self._items.get(key)
        self._items[key] = value
        _publish(self._bus, key, value, old)

    def remove_item(self, key: str) -> None:
        old = self._items.pop(key, None)
        if old is not None:
            _publish(self._bus, key, None, old)


class JsonFileStorage:
    """Storage backed by a single JSON object on disk.

    Every read goes to the file, so another process's writes are visible
    immediately.  Read-modify-write is not locked across processes.
    """

    def __init__(self, path: str | os.PathLike[str], bus: EventBus | None = None) -> None:
        self._path = Path(path)
        self._bus = bus
        self._last_seen: dict[str, str] = self._read()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def bus(self) -> EventBus | None:
        return self._bus

    def _read(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise HabibbiError(f"Cannot read storage file {self._path}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Storage file %s is not valid JSON; treating it as empty", self._path)
            return {}
        if not isinstance(data, dict):
            _logger.warning("Storage file %s does not hold an object; treating it as empty", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle, separators=(",", ":"))
            os.replace(tmp_name, self._path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise HabibbiError(f"Cannot write storage file {self._path}: {exc}") from exc
        self._last_seen = dict(items)

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        old = items.get(key)
        items[key] = value
        self._write(items)
        _publish(self._bus, key, value, old)

    def remove_item(self, key: str) -> None:
        items = self._read()
        old = items.pop(key, None)
        if old is None:
            return
        self._write(items)
        _publish(self._bus, key, None, old)

    def poll(self) -> list[StorageChanged]:
        """Publish ``REMOTE`` events for keys changed by other processes."""
        current = self._read()
        events: list[StorageChanged] = []
        for key in sorted(set(current) | set(self._last_seen)):
            old = self._last_seen.get(key)
            new = current.get(key)
            if old == new:
                continue
            event = StorageChanged(key=key, new_value=new, old_value=old, origin=EventOrigin.REMOTE)
            events.append(event)
            if self._bus is not None:
                self._bus.publish(event)
        self._last_seen = current
        return events


def _publish(bus: EventBus | None, key: str, new: str | None, old: str | None) -> None:
    if bus is None:
        return
    bus.publish(StorageChanged(key=key, new_value=new, old_value=old))

"""Synchronous string key-value media used by the repositories."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import Dict, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ..models import KeyValueEntry
from ..utils.errors import StorageError

LOGGER = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Contract shared by every storage medium.

    ``lock`` is re-entrant and must be held by callers across any
    read-modify-write sequence on a single key.
    """

    lock: threading.RLock

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local dictionary medium with an optional byte quota."""

    def __init__(self, *, quota_bytes: int | None = None) -> None:
        self.lock = threading.RLock()
        self._data: Dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def _usage_with(self, key: str, value: str) -> int:
        total = 0
        for existing_key, existing_value in self._data.items():
            if existing_key == key:
                continue
            total += len(existing_key) + len(existing_value)
        return total + len(key) + len(value)

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            usage = self._usage_with(key, value)
            if usage > self._quota_bytes:
                raise StorageError(
                    "quota_exceeded",
                    f"Storing {key!r} would exceed the {self._quota_bytes} byte quota",
                    key=key,
                    extra={"usage": usage, "quota": self._quota_bytes},
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SQLKeyValueStore:
    """Medium persisting each key as a row of the ``kv_entry`` table."""

    def __init__(self, engine: Engine) -> None:
        self.lock = threading.RLock()
        self._engine = engine

    def get(self, key: str) -> str | None:
        try:
            with Session(self._engine) as session:
                entry = session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as exc:
            LOGGER.error("Failed to read key %s: %s", key, exc)
            raise StorageError("read_failed", f"Unable to read {key!r}", key=key) from exc

    def set(self, key: str, value: str) -> None:
        try:
            with Session(self._engine) as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    entry = KeyValueEntry(key=key, value=value)
                else:
                    entry.value = value
                    entry.updated_at = datetime.now(UTC)
                session.add(entry)
                session.commit()
        except SQLAlchemyError as exc:
            LOGGER.error("Failed to write key %s: %s", key, exc)
            raise StorageError("write_failed", f"Unable to write {key!r}", key=key) from exc

    def remove(self, key: str) -> None:
        try:
            with Session(self._engine) as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    return
                session.delete(entry)
                session.commit()
        except SQLAlchemyError as exc:
            LOGGER.error("Failed to remove key %s: %s", key, exc)
            raise StorageError("remove_failed", f"Unable to remove {key!r}", key=key) from exc


def store_reachable(store: KeyValueStore) -> bool:
    """Return whether a read against ``store`` succeeds."""

    try:
        store.get("documents")
    except StorageError as exc:
        LOGGER.warning("Key-value store unreachable: %s", exc)
        return False
    return True


__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SQLKeyValueStore",
    "store_reachable",
]

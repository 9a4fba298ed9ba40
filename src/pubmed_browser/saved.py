"""Saved-paper bookmarks persisted through a key-value store."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from pubmed_browser.models import SAVED_KEY, Record

logger = logging.getLogger(__name__)


class PersistenceCorruption(ValueError):
    """The stored saved set could not be decoded."""


class KeyValueStore(Protocol):
    """Minimal durable string store (get/set)."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> bool: ...


def decode_saved_payload(raw: str) -> list[Record]:
    """Decode a stored JSON array of records.

    Entries that are not objects or lack a pmid are skipped; for duplicate
    pmids the first occurrence wins.

    Raises:
        PersistenceCorruption: If the payload is not JSON or not a list.
    """
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PersistenceCorruption(f"saved set is not valid JSON: {exc}") from exc
    if not isinstance(parsed, list):
        raise PersistenceCorruption(f"saved set is a {type(parsed).__name__}, not a list")

    records: list[Record] = []
    seen: set[str] = set()
    for item in parsed:
        if not isinstance(item, dict):
            continue
        record = Record.from_dict(item)
        if record is None or record.pmid in seen:
            continue
        seen.add(record.pmid)
        records.append(record)
    return records


def encode_saved_payload(records: list[Record]) -> str:
    return json.dumps([record.to_dict() for record in records], ensure_ascii=False)


class SavedStore:
    """The user's bookmarked records, most recently added first.

    Owns the in-memory sequence; every mutation rewrites the whole set
    under SAVED_KEY before returning.
    """

    def __init__(self, store: KeyValueStore, key: str = SAVED_KEY) -> None:
        self._store = store
        self._key = key
        self._records: list[Record] = []
        self.last_persist_ok = True

    def load_all(self) -> list[Record]:
        """Load the saved set from the store, replacing any in-memory state.

        A missing or corrupt payload yields an empty set.
        """
        raw = self._store.get(self._key)
        records: list[Record] = []
        if raw:
            try:
                records = decode_saved_payload(raw)
            except PersistenceCorruption as exc:
                logger.debug("Discarding corrupt saved set: %s", exc)
        self._records = records
        return list(self._records)

    @property
    def records(self) -> tuple[Record, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def contains(self, pmid: str) -> bool:
        return any(record.pmid == pmid for record in self._records)

    def add(self, record: Record) -> bool:
        """Prepend a record unless its pmid is already saved.

        Returns True if the record was added.
        """
        if self.contains(record.pmid):
            return False
        self._records.insert(0, record)
        self._persist()
        return True

    def remove(self, pmid: str) -> bool:
        """Drop every record with this pmid. Returns True if any were removed."""
        before = len(self._records)
        self._records = [record for record in self._records if record.pmid != pmid]
        self._persist()
        return len(self._records) != before

    def _persist(self) -> None:
        self.last_persist_ok = self._store.set(self._key, encode_saved_payload(self._records))
        if not self.last_persist_ok:
            logger.warning("Saved set could not be persisted (%d records)", len(self._records))


__all__ = [
    "KeyValueStore",
    "PersistenceCorruption",
    "SavedStore",
    "decode_saved_payload",
    "encode_saved_payload",
]

"""Record source backed by the profile's local store.

Used whenever no session is active. Writes go straight to the store and
are visible to the next read; there is no pending state.

Each collection is one JSON list under its storage key. Entries that are
not objects, or that fail validation, are skipped on read but left in
place on write, so a bad entry never takes the rest of the list with it.
"""

import logging
from typing import Any, List

from pydantic import ValidationError

from relcrm.crm.adapters.base import BaseRecordSource, RecordNotFoundError
from relcrm.crm.collections import Collection
from relcrm.crm.ids import make_record_id, now_iso
from relcrm.crm.models import RecordModel
from relcrm.storage.local_store import LocalStore

logger = logging.getLogger(__name__)


def normalize_records(collection: Collection, raw: Any) -> List[RecordModel]:
    """Turn a stored collection value into records, dropping unreadable entries.

    Args:
        collection: Collection the value belongs to
        raw: Decoded store value (expected to be a list of objects)

    Returns:
        Readable records, in stored order
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning(f"Ignoring non-list value stored for {collection.storage_key}")
        return []

    records: List[RecordModel] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping non-object entry {index} in {collection.storage_key}")
            continue
        try:
            records.append(collection.model.from_record(entry))
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed entry {index} in {collection.storage_key}: "
                f"{e.error_count()} validation error(s)"
            )
    return records


def raw_records(store: LocalStore, collection: Collection) -> List[dict]:
    """Stored entries of a collection that are objects, unvalidated."""
    raw = store.get(collection.storage_key, [])
    if not isinstance(raw, list):
        return []
    return [entry for entry in raw if isinstance(entry, dict)]


class LocalRecordSource(BaseRecordSource):
    """Record source reading and writing the local store."""

    source_name = "local"

    def __init__(self, store: LocalStore, collection: Collection):
        """Initialize the local source.

        Args:
            store: The profile's local store. REQUIRED.
            collection: Collection this source serves
        """
        if store is None:
            raise TypeError("LocalRecordSource requires a LocalStore instance.")
        super().__init__(collection)
        self.store = store

    @property
    def key(self) -> str:
        return self.collection.storage_key

    def _stored(self) -> List[Any]:
        raw = self.store.get(self.key, [])
        return raw if isinstance(raw, list) else []

    def list(self) -> List[RecordModel]:
        """List records from the store, normalised."""
        return normalize_records(self.collection, self.store.get(self.key, []))

    def create(self, record: RecordModel) -> RecordModel:
        """Assign id and timestamps, then append to the collection."""
        self._check_model(record)
        now = now_iso()
        existing_ids = [
            str(entry.get("id")) for entry in self._stored() if isinstance(entry, dict)
        ]
        created = record.model_copy(
            update={"id": make_record_id(existing_ids), "created_at": now}
        ).stamped(now)

        self.store.set(self.key, lambda current: _as_list(current) + [created.to_record()], [])
        logger.debug(f"Created local {self.collection.singular} {created.id}")
        return created

    def update(self, record_id: str, record: RecordModel) -> RecordModel:
        """Replace the stored record, keeping its id and creation time."""
        self._check_model(record)
        existing = self.get(record_id)
        if existing is None:
            raise RecordNotFoundError(self.collection, record_id)

        updated = record.model_copy(
            update={"id": record_id, "created_at": existing.created_at or record.created_at}
        ).stamped(now_iso())
        encoded = updated.to_record()

        def replace(current: Any) -> List[Any]:
            return [
                encoded if isinstance(entry, dict) and entry.get("id") == record_id else entry
                for entry in _as_list(current)
            ]

        self.store.set(self.key, replace, [])
        logger.debug(f"Updated local {self.collection.singular} {record_id}")
        return updated

    def delete(self, record_id: str) -> None:
        """Remove the record from the collection."""
        stored = self._stored()
        if not any(isinstance(e, dict) and e.get("id") == record_id for e in stored):
            raise RecordNotFoundError(self.collection, record_id)

        self.store.set(
            self.key,
            lambda current: [
                entry
                for entry in _as_list(current)
                if not (isinstance(entry, dict) and entry.get("id") == record_id)
            ],
            [],
        )
        logger.debug(f"Deleted local {self.collection.singular} {record_id}")


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []

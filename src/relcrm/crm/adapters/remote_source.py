"""Record source backed by the remote record service.

Used whenever a session is active. Reads go through the shared query cache
under the collection's name. A successful create, update or delete
invalidates that key; the written record is never merged into the cached
list, so the next read comes from the service.

Writes are not serialised against each other. A failed write raises and
leaves the cache untouched.
"""

import logging
from typing import List

from relcrm.crm.adapters.base import BaseRecordSource, RecordSourceError
from relcrm.crm.adapters.local_source import normalize_records
from relcrm.crm.adapters.remote_service import RemoteRecordService
from relcrm.crm.cache import QueryCache, QueryState
from relcrm.crm.collections import Collection
from relcrm.crm.models import RecordModel

logger = logging.getLogger(__name__)


class RemoteRecordSource(BaseRecordSource):
    """Record source reading through the cache and writing to the service."""

    source_name = "remote"

    def __init__(self, service: RemoteRecordService, cache: QueryCache, collection: Collection):
        super().__init__(collection)
        self.service = service
        self.cache = cache

    @property
    def query_key(self) -> str:
        """Cache key for this collection's list query."""
        return self.collection.value

    @property
    def query_state(self) -> QueryState:
        """Loading/error/staleness state of the list query."""
        return self.cache.state(self.query_key)

    def list(self) -> List[RecordModel]:
        """List records, served from cache while fresh."""
        records = self.cache.fetch(self.query_key, lambda: self.service.list(self.collection))
        return normalize_records(self.collection, records)

    def create(self, record: RecordModel) -> RecordModel:
        """Create on the service, then invalidate the list query."""
        self._check_model(record)
        stored = self.service.create(self.collection, _draft(record))
        self.cache.invalidate(self.query_key)
        logger.debug(f"Created remote {self.collection.singular} {stored.get('id')}")
        return self.collection.model.from_record(stored)

    def update(self, record_id: str, record: RecordModel) -> RecordModel:
        """Replace on the service, then invalidate the list query."""
        self._check_model(record)
        stored = self.service.update(self.collection, record_id, _draft(record))
        self.cache.invalidate(self.query_key)
        logger.debug(f"Updated remote {self.collection.singular} {record_id}")
        return self.collection.model.from_record(stored)

    def delete(self, record_id: str) -> None:
        """Delete on the service, then invalidate the list query."""
        if not self.service.delete(self.collection, record_id):
            raise RecordSourceError(
                f"Service did not delete {self.collection.singular} '{record_id}'"
            )
        self.cache.invalidate(self.query_key)


def _draft(record: RecordModel) -> dict:
    """Record body for a write; server-generated fields are left to the service."""
    body = record.to_record()
    body.pop("id", None)
    body.pop("createdAt", None)
    return body

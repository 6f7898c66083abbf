"""Record source interface shared by the local and remote variants.

A record source is the single data-access abstraction views use for one
collection. ``DataSourceSelector`` picks the variant once per access:

- LocalRecordSource: reads and writes the profile's local store
- RemoteRecordSource: reads through the query cache, writes to the remote
  service and invalidates the cache afterwards

Updates always carry the full record; there is no field-level patching.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from relcrm.crm.collections import Collection
from relcrm.crm.models import RecordModel


class RecordSourceError(Exception):
    """Base exception for record source errors."""

    pass


class RecordNotFoundError(RecordSourceError):
    """Raised when an update or delete names an id the collection lacks."""

    def __init__(self, collection: Collection, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record '{record_id}' in {collection.value}")


@runtime_checkable
class RecordSource(Protocol):
    """Protocol every record source implements."""

    collection: Collection

    def list(self) -> List[RecordModel]:
        """List every readable record in the collection.

        Records are normalised on read; entries that cannot be read are
        left out rather than failing the whole list.
        """
        ...

    def get(self, record_id: str) -> Optional[RecordModel]:
        """Find one record by id, or None."""
        ...

    def create(self, record: RecordModel) -> RecordModel:
        """Store a new record and return it with ``id`` and ``created_at`` set."""
        ...

    def update(self, record_id: str, record: RecordModel) -> RecordModel:
        """Replace a record in full and return the stored version."""
        ...

    def delete(self, record_id: str) -> None:
        """Delete a record permanently."""
        ...


class BaseRecordSource(ABC):
    """Abstract base class for record sources."""

    source_name: str = "base"

    def __init__(self, collection: Collection):
        self.collection = collection

    @abstractmethod
    def list(self) -> List[RecordModel]:
        """List records."""
        pass

    def get(self, record_id: str) -> Optional[RecordModel]:
        """Find one record by id."""
        for record in self.list():
            if record.id == record_id:
                return record
        return None

    @abstractmethod
    def create(self, record: RecordModel) -> RecordModel:
        """Create a record."""
        pass

    @abstractmethod
    def update(self, record_id: str, record: RecordModel) -> RecordModel:
        """Replace a record."""
        pass

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Delete a record."""
        pass

    def _check_model(self, record: RecordModel) -> None:
        expected = self.collection.model
        if not isinstance(record, expected):
            raise TypeError(
                f"{self.collection.value} expects {expected.__name__}, "
                f"got {type(record).__name__}"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(collection={self.collection.value!r})"

"""Record sources: the local and remote variants behind one interface.

- LocalRecordSource: profile's local store, used while signed out
- RemoteRecordSource: remote record service through the query cache
- RemoteRecordService: typed client for the service's HTTP API
"""

from relcrm.crm.adapters.base import (
    BaseRecordSource,
    RecordNotFoundError,
    RecordSource,
    RecordSourceError,
)
from relcrm.crm.adapters.local_source import LocalRecordSource, normalize_records
from relcrm.crm.adapters.remote_service import RemoteRecordService, SyncResult
from relcrm.crm.adapters.remote_source import RemoteRecordSource

__all__ = [
    "RecordSource",
    "BaseRecordSource",
    "RecordSourceError",
    "RecordNotFoundError",
    "LocalRecordSource",
    "RemoteRecordSource",
    "RemoteRecordService",
    "SyncResult",
    "normalize_records",
]

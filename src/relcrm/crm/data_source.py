"""Data source selection: one decision point for local vs remote records.

``DataSourceSelector.source(collection)`` returns a ``LocalRecordSource``
while no session is active and a ``RemoteRecordSource`` while one is.
Callers hold on to the returned source for the duration of one access and
never branch on the session themselves.

The two stores are never merged. When the session changes hands the
remote query cache is cleared, so one user's cached reads are never served
to another.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from relcrm.crm.adapters.base import RecordSource
from relcrm.crm.adapters.local_source import LocalRecordSource
from relcrm.crm.adapters.remote_service import RemoteRecordService
from relcrm.crm.adapters.remote_source import RemoteRecordSource
from relcrm.crm.cache import QueryCache, QueryState
from relcrm.crm.collections import Collection
from relcrm.session import SessionContext
from relcrm.storage.local_store import LocalStore

logger = logging.getLogger(__name__)


class DataSourceSelector:
    """Chooses the authoritative record source per collection access."""

    def __init__(
        self,
        session: SessionContext,
        local_store: LocalStore,
        remote_service: Optional[RemoteRecordService],
        cache: Optional[QueryCache] = None,
    ):
        """Initialize the selector.

        Args:
            session: Session context deciding which source is authoritative
            local_store: The profile's local store
            remote_service: Remote service client (required once signed in)
            cache: Query cache for remote reads (a fresh one if omitted)
        """
        self.session = session
        self.local_store = local_store
        self.remote_service = remote_service
        self.cache = cache or QueryCache()
        self._user_id: Optional[str] = session.user.id if session.user else None
        self._unsubscribe = session.subscribe(self._on_session_changed)

    @property
    def mode(self) -> str:
        """``"remote"`` while signed in, ``"local"`` otherwise."""
        return "remote" if self.session.is_active else "local"

    def source(self, collection: Collection) -> RecordSource:
        """Record source for one access to ``collection``.

        Raises:
            RuntimeError: If signed in but no remote service is configured
        """
        if not self.session.is_active:
            return LocalRecordSource(self.local_store, collection)

        if self.remote_service is None:
            raise RuntimeError(
                "Signed in but no remote record service is configured. "
                "Set RELCRM_API_BASE_URL."
            )
        return RemoteRecordSource(self.remote_service, self.cache, collection)

    def sources(self) -> Dict[Collection, RecordSource]:
        """One source per collection, all chosen under the same session state."""
        return {collection: self.source(collection) for collection in Collection}

    def query_state(self, collection: Collection) -> Optional[QueryState]:
        """Loading/error state of a collection's remote query (None while local)."""
        if not self.session.is_active:
            return None
        return self.cache.state(collection.value)

    def invalidate_all(self) -> None:
        """Discard every cached remote read (e.g. after a bulk sync)."""
        self.cache.invalidate_all()

    def loading_collections(self) -> List[Collection]:
        """Collections with a remote fetch in flight."""
        return [c for c in Collection if self.cache.state(c.value).is_loading]

    def close(self) -> None:
        """Stop observing the session."""
        self._unsubscribe()

    def _on_session_changed(self, session: SessionContext) -> None:
        user_id = session.user.id if session.user else None
        if user_id != self._user_id:
            logger.debug("Session changed hands; clearing remote query cache")
            self.cache.clear()
        self._user_id = user_id

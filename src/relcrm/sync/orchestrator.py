"""Sync orchestrator: one-time upload of local records after sign-in.

State machine:

    idle -> confirming -> syncing -> succeeded -> idle
                 |            |
                 v            v
               idle        failed -> syncing (retry) | idle (abandon)

The first time a user signs in while the local store holds records, the
orchestrator enters ``confirming`` and persists the ``hasShownSync`` flag,
so the prompt is never offered automatically again on this profile. A
manual ``request_sync()`` re-enters ``confirming`` regardless of the flag.

Syncing sends the three local collections in exactly one bulk request.
Local records are never modified or deleted, whatever the outcome; the
service owns merge and dedup policy.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from relcrm.connectors.base import ConnectorError
from relcrm.crm.adapters.local_source import raw_records
from relcrm.crm.adapters.remote_service import RemoteRecordService
from relcrm.crm.collections import Collection
from relcrm.session import SessionContext
from relcrm.storage.local_store import LocalStore

logger = logging.getLogger(__name__)

NO_LOCAL_DATA = "No local data found to sync"
SYNC_FAILED = "Sync failed"

ProgressCallback = Callable[[int], None]


class SyncState(str, Enum):
    """Orchestrator state."""

    IDLE = "idle"
    CONFIRMING = "confirming"
    SYNCING = "syncing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SyncStateError(Exception):
    """Raised when a transition is not allowed from the current state."""

    def __init__(self, action: str, state: SyncState):
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} while sync is {state.value}")


@dataclass
class SyncCounts:
    """Number of local records per collection."""

    contacts: int = 0
    companies: int = 0
    tasks: int = 0

    @property
    def total(self) -> int:
        return self.contacts + self.companies + self.tasks

    def as_dict(self) -> Dict[str, int]:
        return {"contacts": self.contacts, "companies": self.companies, "tasks": self.tasks}


class SyncOrchestrator:
    """Drives the local-to-remote sync prompt and upload."""

    FLAG_KEY = "hasShownSync"

    def __init__(
        self,
        local_store: LocalStore,
        remote_service: Optional[RemoteRecordService],
        session: SessionContext,
        on_complete: Optional[Callable[[], None]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """Initialize the orchestrator.

        Args:
            local_store: The profile's local store (read only, apart from the flag)
            remote_service: Service receiving the bulk upload
            session: Session whose changes may trigger the prompt
            on_complete: Called after a successful sync (e.g. to invalidate
                cached remote reads)
            on_progress: Called with 0, 25, 75 and 100 as the sync advances
        """
        self.local_store = local_store
        self.remote_service = remote_service
        self.session = session
        self.on_complete = on_complete
        self.on_progress = on_progress

        self.state = SyncState.IDLE
        self.progress = 0
        self.error: Optional[str] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    # =========================================================================
    # Session observation
    # =========================================================================

    def attach(self) -> "SyncOrchestrator":
        """Start observing session changes."""
        if self._unsubscribe is None:
            self._unsubscribe = self.session.subscribe(self.on_session_changed)
        return self

    def detach(self) -> None:
        """Stop observing session changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_session_changed(self, session: SessionContext) -> None:
        """Offer the sync prompt on first sign-in with local data.

        Signing out while the prompt is open closes it.
        """
        if not session.is_active:
            if self.state == SyncState.CONFIRMING:
                self._transition(SyncState.IDLE)
            return

        if self.state != SyncState.IDLE or self.has_shown_prompt():
            return
        if self.pending_counts().total == 0:
            return

        self.local_store.set(self.FLAG_KEY, True)
        self._transition(SyncState.CONFIRMING)

    # =========================================================================
    # Local data
    # =========================================================================

    def pending_counts(self) -> SyncCounts:
        """Counts of local records that a sync would upload."""
        return SyncCounts(
            contacts=len(raw_records(self.local_store, Collection.CONTACTS)),
            companies=len(raw_records(self.local_store, Collection.COMPANIES)),
            tasks=len(raw_records(self.local_store, Collection.TASKS)),
        )

    def has_shown_prompt(self) -> bool:
        """Whether the one-time prompt has been offered on this profile."""
        return bool(self.local_store.get(self.FLAG_KEY, False))

    def reset_prompt_flag(self) -> None:
        """Forget that the prompt was offered, so the next sign-in offers it again."""
        self.local_store.delete(self.FLAG_KEY)

    # =========================================================================
    # Transitions
    # =========================================================================

    def request_sync(self) -> None:
        """Open the prompt on demand, ignoring the one-time flag.

        Raises:
            SyncStateError: If a sync is running or the prompt is already open
            RuntimeError: If nobody is signed in
        """
        if self.state in (SyncState.CONFIRMING, SyncState.SYNCING):
            raise SyncStateError("request a sync", self.state)
        if not self.session.is_active:
            raise RuntimeError("Sign in before syncing local data")
        self.error = None
        self._transition(SyncState.CONFIRMING)

    def confirm(self) -> SyncState:
        """Accept the prompt and run the sync. Returns the resulting state."""
        self._require(SyncState.CONFIRMING, "confirm")
        return self._run()

    def decline(self) -> None:
        """Dismiss the prompt without transferring anything."""
        self._require(SyncState.CONFIRMING, "decline")
        self._transition(SyncState.IDLE)

    def retry(self) -> SyncState:
        """Run the sync again after a failure. Returns the resulting state."""
        self._require(SyncState.FAILED, "retry")
        return self._run()

    def abandon(self) -> None:
        """Give up after a failure."""
        self._require(SyncState.FAILED, "abandon")
        self.error = None
        self._transition(SyncState.IDLE)

    def acknowledge(self) -> None:
        """Close the prompt after a successful sync."""
        self._require(SyncState.SUCCEEDED, "acknowledge")
        self._transition(SyncState.IDLE)

    # =========================================================================
    # Sync run
    # =========================================================================

    def _run(self) -> SyncState:
        self._transition(SyncState.SYNCING)
        self.error = None
        self._report(0)

        contacts = raw_records(self.local_store, Collection.CONTACTS)
        companies = raw_records(self.local_store, Collection.COMPANIES)
        tasks = raw_records(self.local_store, Collection.TASKS)

        if not (contacts or companies or tasks):
            return self._fail(NO_LOCAL_DATA)
        if self.remote_service is None:
            return self._fail("Remote service is not configured")

        self._report(25)
        try:
            result = self.remote_service.sync(contacts, companies, tasks)
        except ConnectorError as e:
            return self._fail(str(e) or SYNC_FAILED)
        self._report(75)

        if not result.success:
            return self._fail(SYNC_FAILED)

        self._report(100)
        self._transition(SyncState.SUCCEEDED)
        logger.info(
            f"Synced {len(contacts)} contacts, {len(companies)} companies, {len(tasks)} tasks"
        )
        if self.on_complete is not None:
            self.on_complete()
        return self.state

    def _fail(self, message: str) -> SyncState:
        self.error = message
        logger.warning(f"Sync failed: {message}")
        self._transition(SyncState.FAILED)
        return self.state

    def _report(self, value: int) -> None:
        self.progress = value
        if self.on_progress is not None:
            self.on_progress(value)

    def _require(self, expected: SyncState, action: str) -> None:
        if self.state != expected:
            raise SyncStateError(action, self.state)

    def _transition(self, state: SyncState) -> None:
        logger.info(f"Sync state: {self.state.value} -> {state.value}")
        self.state = state

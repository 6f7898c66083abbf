"""Session state: who is signed in and which bearer credential to send.

``SessionContext`` is an explicit value handed to every collaborator that
needs it (the remote service's auth strategy, the data source selector, the
sync orchestrator). Its lifecycle:

- ``restore()`` at startup loads a persisted credential, if any
- ``begin()`` on sign-in, ``update_token()`` on credential refresh
- ``end()`` on sign-out

Every change notifies subscribers with the context itself.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

if TYPE_CHECKING:
    from relcrm.storage.local_store import LocalStore

logger = logging.getLogger(__name__)

SESSION_KEY = "crm-session"

SessionListener = Callable[["SessionContext"], None]


@dataclass
class User:
    """Signed-in user as reported by the identity provider."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Name for display, falling back to the email address."""
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.email


@dataclass
class Session:
    """An authenticated session."""

    user: User
    access_token: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for persistence."""
        return {"user": asdict(self.user), "access_token": self.access_token}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Session"]:
        """Rebuild a persisted session, or None if the data is unusable."""
        if not isinstance(data, dict):
            return None
        user = data.get("user")
        token = data.get("access_token")
        if not isinstance(user, dict) or not token:
            return None
        try:
            return cls(user=User(**user), access_token=str(token))
        except TypeError:
            return None


class SessionContext:
    """Current session plus change notification.

    When constructed with a store, the session is persisted under
    ``crm-session`` so later runs start signed in.
    """

    def __init__(self, store: Optional["LocalStore"] = None):
        self._store = store
        self._session: Optional[Session] = None
        self._listeners: List[SessionListener] = []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def session(self) -> Optional[Session]:
        """The active session, if any."""
        return self._session

    @property
    def is_active(self) -> bool:
        """Whether a user is signed in."""
        return self._session is not None

    @property
    def user(self) -> Optional[User]:
        """The signed-in user, if any."""
        return self._session.user if self._session else None

    @property
    def access_token(self) -> Optional[str]:
        """Bearer credential of the active session, if any."""
        return self._session.access_token if self._session else None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def restore(self) -> bool:
        """Load a persisted session. Returns True if one was restored.

        Listeners are notified when a session is restored.
        """
        if self._store is None:
            return False
        restored = Session.from_dict(self._store.get(SESSION_KEY))
        if restored is None:
            return False
        self._session = restored
        logger.info(f"Restored session for {restored.user.email}")
        self._notify()
        return True

    def begin(self, session: Session) -> None:
        """Start a session (sign-in)."""
        self._session = session
        self._persist()
        logger.info(f"Session started for {session.user.email}")
        self._notify()

    def update_token(self, access_token: str) -> None:
        """Replace the bearer credential of the active session."""
        if self._session is None:
            raise RuntimeError("No active session to update")
        self._session = Session(user=self._session.user, access_token=access_token)
        self._persist()
        self._notify()

    def end(self) -> None:
        """Tear down the session (sign-out)."""
        if self._session is None:
            return
        email = self._session.user.email
        self._session = None
        if self._store is not None:
            self._store.delete(SESSION_KEY)
        logger.info(f"Session ended for {email}")
        self._notify()

    # =========================================================================
    # Change notification
    # =========================================================================

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _persist(self) -> None:
        if self._store is not None and self._session is not None:
            self._store.set(SESSION_KEY, self._session.to_dict())

"""Query cache for remote collection reads.

Results are cached per query key (the collection name). Each key tracks:

- the last completed result (last-completed-wins)
- whether that result is stale
- how many fetches are in flight, exposed as ``is_loading``
- the error of the last failed fetch, if the fetch after it has not succeeded

Invalidation bumps the key's generation and marks it stale. A fetch that
started under an older generation still hands its result to its caller,
but the stored entry stays stale, so the next read refetches. That is what
gives read-your-writes: a read issued after a write completes never serves
a result fetched before the write's invalidation.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class QueryState:
    """Cached state of one query key."""

    data: Optional[Any] = None
    error: Optional[Exception] = None
    is_stale: bool = True
    generation: int = 0
    in_flight: int = 0
    fetch_count: int = 0

    @property
    def is_loading(self) -> bool:
        """Whether any fetch for this key is still running."""
        return self.in_flight > 0

    @property
    def has_data(self) -> bool:
        return self.data is not None


@dataclass(frozen=True)
class FetchToken:
    """Handle for one in-flight fetch."""

    key: str
    generation: int
    epoch: int = 0


class QueryCache:
    """Per-key cache with generation-based invalidation."""

    def __init__(self):
        self._states: Dict[str, QueryState] = {}
        self._epoch = 0

    def state(self, key: str) -> QueryState:
        """State for a key (created empty on first use)."""
        return self._states.setdefault(key, QueryState())

    def fetch(self, key: str, fetcher: Callable[[], T]) -> T:
        """Return fresh cached data for ``key`` or run ``fetcher``.

        Errors from the fetcher are recorded on the key's state and re-raised.
        """
        state = self.state(key)
        if state.has_data and not state.is_stale:
            return state.data

        token = self.begin(key)
        try:
            data = fetcher()
        except Exception as exc:
            self.fail(token, exc)
            raise
        self.complete(token, data)
        return data

    def begin(self, key: str) -> FetchToken:
        """Mark a fetch as started."""
        state = self.state(key)
        state.in_flight += 1
        return FetchToken(key=key, generation=state.generation, epoch=self._epoch)

    def complete(self, token: FetchToken, data: Any) -> None:
        """Store a completed fetch's result."""
        if token.epoch != self._epoch:
            return
        state = self.state(token.key)
        state.in_flight = max(0, state.in_flight - 1)
        state.fetch_count += 1
        state.data = data
        state.error = None
        state.is_stale = token.generation != state.generation
        if state.is_stale:
            logger.debug(f"Fetch for '{token.key}' finished after invalidation; kept stale")

    def fail(self, token: FetchToken, error: Exception) -> None:
        """Record a failed fetch. Previously cached data is kept."""
        if token.epoch != self._epoch:
            return
        state = self.state(token.key)
        state.in_flight = max(0, state.in_flight - 1)
        state.error = error

    def invalidate(self, key: str) -> None:
        """Mark a key stale so its next read refetches."""
        state = self.state(key)
        state.generation += 1
        state.is_stale = True

    def invalidate_all(self) -> None:
        """Mark every key stale."""
        for key in list(self._states):
            self.invalidate(key)

    def clear(self) -> None:
        """Forget everything (used when the session changes hands)."""
        self._epoch += 1
        self._states = {}

"""Durable local key/value store backed by SQLite.

One store per profile. Each key maps to a JSON-encoded value:
- crm-contacts / crm-companies / crm-tasks: lists of records
- hasShownSync: one-time sync prompt flag
- crm-session: persisted session credential

Reads of a missing or undecodable key return the caller's default instead
of raising. Writes commit before ``set`` returns.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, Union

if TYPE_CHECKING:
    from relcrm.profile import ProfileContext

logger = logging.getLogger(__name__)

Updater = Callable[[Any], Any]


class LocalStore:
    """SQLite-backed key/value store for one profile.

    Supports context manager protocol for automatic cleanup:
        with LocalStore.for_profile(profile) as store:
            store.set("crm-contacts", [])
    """

    def __init__(self, db_path: Path):
        """Open (and create if needed) the store.

        Args:
            db_path: Path to the SQLite file. REQUIRED.

        Raises:
            TypeError: If db_path is None.
        """
        if db_path is None:
            raise TypeError(
                "LocalStore requires explicit db_path. "
                "Use LocalStore.for_profile(profile) or pass db_path explicitly."
            )
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._closed = False
        self._init_tables()

    @classmethod
    def for_profile(cls, profile: "ProfileContext") -> "LocalStore":
        """Open the store belonging to a profile directory."""
        return cls(db_path=profile.store_path)

    def __enter__(self) -> "LocalStore":
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager, ensuring cleanup."""
        self.close()

    def close(self) -> None:
        """Mark the store closed. Each operation opens its own connection."""
        self._closed = True

    def _connect(self) -> sqlite3.Connection:
        if self._closed:
            raise RuntimeError(f"LocalStore at {self.db_path} is closed")
        return sqlite3.connect(self.db_path)

    def _init_tables(self) -> None:
        """Initialize the key/value table."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.commit()

    # =========================================================================
    # Key/value operations
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Read and decode a value.

        Args:
            key: Storage key
            default: Returned when the key is missing or its value is corrupt

        Returns:
            The decoded value, or ``default``
        """
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()

        if row is None:
            return default

        try:
            return json.loads(row[0])
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupt value for key '{key}': {e}")
            return default

    def set(self, key: str, value: Union[Any, Updater], default: Any = None) -> Any:
        """Write a value, or apply an updater to the current value.

        Args:
            key: Storage key
            value: New value, or a callable receiving the current value
                (``default`` when missing or corrupt) and returning the new one
            default: Current value assumed by an updater for a missing key

        Returns:
            The value that was stored
        """
        new_value = value(self.get(key, default)) if callable(value) else value
        encoded = json.dumps(new_value, ensure_ascii=False)
        now = datetime.now(timezone.utc).isoformat()

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = excluded.updated_at
                """,
                (key, encoded, now),
            )
            conn.commit()

        return new_value

    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
            return cursor.rowcount > 0

    def keys(self) -> List[str]:
        """List stored keys in sorted order."""
        with self._connect() as conn:
            rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        return [row[0] for row in rows]

    def get_raw(self, key: str) -> Any:
        """Return the stored text for a key without decoding (None if missing)."""
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_raw(self, key: str, text: str) -> None:
        """Store text for a key verbatim. Used to repair or inspect profiles."""
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = excluded.updated_at
                """,
                (key, text, now),
            )
            conn.commit()

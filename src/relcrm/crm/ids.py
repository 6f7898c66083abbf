"""Identifier and timestamp generation for locally created records.

Local ids are the creation time in epoch milliseconds, as text. When that
value is already taken in the collection (two records created within the
same millisecond) the next free integer is used, so ids stay unique within
a collection. Records created by the remote service keep the ids it assigns.
"""

import time
from datetime import datetime, timezone
from typing import Iterable, Optional


def now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def today_iso() -> str:
    """Current UTC date as ``YYYY-MM-DD``."""
    return datetime.now(timezone.utc).date().isoformat()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp or date string.

    Returns None for empty or unparseable values. Naive results are taken
    to be UTC.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def make_record_id(existing_ids: Iterable[str] = (), now_ms: Optional[int] = None) -> str:
    """Generate a record id unique among ``existing_ids``.

    Args:
        existing_ids: Ids already used in the target collection
        now_ms: Epoch milliseconds to use (defaults to the current time)

    Returns:
        Id like "1760875200123"
    """
    taken = set(existing_ids)
    candidate = now_ms if now_ms is not None else int(time.time() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)

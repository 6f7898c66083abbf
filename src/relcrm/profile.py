"""Profile context: the local directory one user's offline data lives in.

A profile plays the role a browser profile plays for a web client. It owns
the durable local store and is never shared between users or machines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ProfileContext:
    """Paths for a profile directory.

    Attributes:
        root_dir: Root directory for this profile
        store_path: Path to the local store file (derived from root)
    """

    root_dir: Path
    store_path: Path = field(init=False)

    def __post_init__(self):
        """Derive paths from root directory."""
        self.root_dir = Path(self.root_dir).expanduser().resolve()
        self.store_path = self.root_dir / "profile.sqlite"

    def ensure_directories(self) -> None:
        """Create the profile directory."""
        self.root_dir.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        """Whether the profile has a local store yet."""
        return self.store_path.exists()

    def __repr__(self) -> str:
        """String representation of profile context."""
        return f"ProfileContext(root_dir={self.root_dir})"

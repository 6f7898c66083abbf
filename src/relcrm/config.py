"""Configuration and environment handling for relcrm."""

import os
from pathlib import Path

from dotenv import load_dotenv


class RemoteConfig:
    """Remote record service and identity provider settings."""

    def __init__(self):
        self.api_base_url: str = os.getenv("RELCRM_API_BASE_URL", "")
        self.auth_url: str = os.getenv("RELCRM_AUTH_URL", "")
        # Public key sent as the bearer credential while signed out
        self.anon_key: str = os.getenv("RELCRM_ANON_KEY", "")
        self.connect_timeout_s: float = float(os.getenv("RELCRM_CONNECT_TIMEOUT_S", "10"))
        self.read_timeout_s: float = float(os.getenv("RELCRM_READ_TIMEOUT_S", "30"))

    @property
    def is_configured(self) -> bool:
        """Whether a remote service URL has been set."""
        return bool(self.api_base_url)


class Config:
    """Central configuration object."""

    def __init__(self):
        # Load .env file if it exists
        env_path = Path(__file__).parent.parent.parent / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        self.project_root = Path(__file__).parent.parent.parent

        # Profile directory (holds the durable local store)
        self.profile_dir: Path = Path(
            os.getenv("RELCRM_PROFILE_DIR", str(Path.home() / ".relcrm"))
        ).expanduser()

        # Logging
        self.log_level: str = os.getenv("RELCRM_LOG_LEVEL", "WARNING")

        self.remote = RemoteConfig()

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.profile_dir.mkdir(parents=True, exist_ok=True)


# Global config instance
config = Config()

"""Shared configuration classes for docsync.

This module defines the configuration used by the remote repository, the
local store and the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_API_BASE_URL = "http://localhost:8888"
API_BASE_URL_ENV = "DOCSYNC_API_BASE_URL"


def default_data_dir() -> Path:
    """Default directory for the local store and the embedded backend."""
    return Path.home() / ".docsync"


@dataclass
class ServiceConfig:
    """Configuration for local persistence and the storage API.

    Attributes:
        api_base_url: Base URL of the storage API (e.g. "https://api.example.com").
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
        data_dir: Directory holding documents.db and the embedded backend.
        persist_passwords: Keep document passwords next to their records so a
            protected document can be re-saved without asking again.
    """

    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = 30.0
    verify_ssl: bool = True
    data_dir: Path = field(default_factory=default_data_dir)
    persist_passwords: bool = True

    def __post_init__(self) -> None:
        """Normalize base URL and data directory."""
        self.api_base_url = self.api_base_url.rstrip("/")
        self.data_dir = Path(self.data_dir).expanduser()

    @property
    def local_db_path(self) -> Path:
        """SQLite file of the local document store."""
        return self.data_dir / "documents.db"

    @property
    def embedded_db_path(self) -> Path:
        """SQLite file of the embedded OrbitDB backend."""
        return self.data_dir / "orbitdb.db"

    @property
    def is_secure(self) -> bool:
        """True when the API is reached over HTTPS."""
        return self.api_base_url.startswith("https://")

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> ServiceConfig:
        """Create from a config file dictionary, applying the env override.

        Unknown keys are ignored.
        """
        config = cls()
        if data.get("api_base_url"):
            config.api_base_url = str(data["api_base_url"]).rstrip("/")
        if data.get("timeout") is not None:
            config.timeout = float(str(data["timeout"]))
        if data.get("verify_ssl") is not None:
            config.verify_ssl = bool(data["verify_ssl"])
        if data.get("data_dir"):
            config.data_dir = Path(str(data["data_dir"])).expanduser()
        if data.get("persist_passwords") is not None:
            config.persist_passwords = bool(data["persist_passwords"])

        env_url = os.environ.get(API_BASE_URL_ENV)
        if env_url:
            config.api_base_url = env_url.rstrip("/")
        return config

"""Tests for core configuration classes."""

from __future__ import annotations

from pathlib import Path

import pytest

from docsync.core.config import (
    API_BASE_URL_ENV,
    DEFAULT_API_BASE_URL,
    ServiceConfig,
)


class TestServiceConfig:
    """Tests for ServiceConfig class."""

    def test_defaults(self) -> None:
        """Should have sensible defaults."""
        config = ServiceConfig()
        assert config.api_base_url == DEFAULT_API_BASE_URL
        assert config.timeout == 30.0
        assert config.verify_ssl is True
        assert config.persist_passwords is True
        assert config.data_dir == Path.home() / ".docsync"

    def test_url_trailing_slash_removed(self) -> None:
        """Should strip trailing slash from the API URL."""
        config = ServiceConfig(api_base_url="https://api.example.com/")
        assert config.api_base_url == "https://api.example.com"

    def test_data_dir_expanded(self) -> None:
        """Should expand ~ in the data directory."""
        config = ServiceConfig(data_dir=Path("~/docs"))
        assert config.data_dir == Path.home() / "docs"

    def test_database_paths(self, tmp_path: Path) -> None:
        """Local and embedded databases should live in the data directory."""
        config = ServiceConfig(data_dir=tmp_path)
        assert config.local_db_path == tmp_path / "documents.db"
        assert config.embedded_db_path == tmp_path / "orbitdb.db"

    def test_is_secure(self) -> None:
        """HTTPS URLs should be reported as secure."""
        assert ServiceConfig(api_base_url="https://api.example.com").is_secure
        assert not ServiceConfig(api_base_url="http://localhost:8888").is_secure


class TestFromDict:
    """Tests for building ServiceConfig from a config file dictionary."""

    @pytest.fixture(autouse=True)
    def no_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Make sure the environment does not leak into tests."""
        monkeypatch.delenv(API_BASE_URL_ENV, raising=False)

    def test_empty_dict_uses_defaults(self) -> None:
        """Should fall back to defaults."""
        config = ServiceConfig.from_dict({})
        assert config.api_base_url == DEFAULT_API_BASE_URL

    def test_reads_all_keys(self, tmp_path: Path) -> None:
        """Should read every known key."""
        config = ServiceConfig.from_dict(
            {
                "api_base_url": "https://api.example.com/",
                "timeout": 5,
                "verify_ssl": False,
                "data_dir": str(tmp_path),
                "persist_passwords": False,
            }
        )
        assert config.api_base_url == "https://api.example.com"
        assert config.timeout == 5.0
        assert config.verify_ssl is False
        assert config.data_dir == tmp_path
        assert config.persist_passwords is False

    def test_ignores_unknown_keys(self) -> None:
        """Unknown keys should not raise."""
        config = ServiceConfig.from_dict({"theme": "dark"})
        assert config.timeout == 30.0

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """DOCSYNC_API_BASE_URL should win over the config file."""
        monkeypatch.setenv(API_BASE_URL_ENV, "https://env.example.com/")
        config = ServiceConfig.from_dict({"api_base_url": "https://file.example.com"})
        assert config.api_base_url == "https://env.example.com"

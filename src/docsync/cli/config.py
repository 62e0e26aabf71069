"""Configuration utilities for docsync CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from docsync.core.config import ServiceConfig
from docsync.core.credentials import KeyringCredentials


def get_config_dir() -> Path:
    """Get the configuration directory for docsync.

    Returns:
        Path to ~/.docsync or equivalent.
    """
    return Path.home() / ".docsync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def get_service_config() -> ServiceConfig:
    """Build the service configuration from the config file.

    The data directory defaults to the configuration directory.
    """
    data = load_config()
    data.setdefault("data_dir", str(get_config_dir()))
    return ServiceConfig.from_dict(data)


def get_credentials() -> KeyringCredentials:
    """Credential provider backed by the OS keyring."""
    return KeyringCredentials()

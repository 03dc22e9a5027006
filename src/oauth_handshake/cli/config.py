"""CLI configuration with XDG-compliant paths and environment variable overrides."""

import json
import logging
import os
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from oauth_handshake.config import ProviderConfig
from oauth_handshake.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def _default_config_dir() -> Path:
    """Get XDG-compliant config directory for provider credentials.

    Uses XDG_CONFIG_HOME if set, otherwise ~/.config/oauth-handshake.
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "oauth-handshake"
    return Path.home() / ".config" / "oauth-handshake"


def _default_data_dir() -> Path:
    """Get XDG-compliant data directory for tokens.

    Uses XDG_DATA_HOME if set, otherwise ~/.local/share/oauth-handshake.
    """
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data) / "oauth-handshake"
    return Path.home() / ".local" / "share" / "oauth-handshake"


@dataclass
class CLIConfig:
    """Configuration passed through Typer context.

    Attributes:
        provider: Provider id selecting credentials and token files.
        verbose: Enable verbose output.
        config_dir: Directory for configuration files (credentials).
        data_dir: Directory for data files (tokens).

    Directory Structure:
        config_dir/
        └── <provider>.json         # Consumer credentials and endpoints

        data_dir/
        └── <provider>-token.json   # Access grant from the last login
    """

    provider: str = "default"
    verbose: bool = False
    config_dir: Path = field(default_factory=_default_config_dir)
    data_dir: Path = field(default_factory=_default_data_dir)

    @property
    def token_path(self) -> Path:
        """Get the token file path for the current provider."""
        return self.data_dir / f"{self.provider}-token.json"

    @property
    def credentials_path(self) -> Path:
        """Get the credentials file path for the current provider."""
        return self.config_dir / f"{self.provider}.json"

    def load_provider_config(self) -> ProviderConfig:
        """Load provider settings from file with environment variable overrides.

        Loading priority:
        1. Load from the provider's config file (<provider>.json)
        2. Override individual values with <PROVIDER>_* environment variables

        Raises:
            ConfigurationError: If a required setting is missing from both
        """
        data: dict[str, str | None] = {}

        if self.credentials_path.exists():
            try:
                with self.credentials_path.open() as f:
                    data = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning("Failed to read %s: %s", self.credentials_path, e)

        prefix = self.provider.upper().replace("-", "_")
        for name in (
            "consumer_key",
            "consumer_secret",
            "request_token_url",
            "authorize_url",
            "authenticate_url",
            "access_token_url",
        ):
            if env_value := os.environ.get(f"{prefix}_{name.upper()}"):
                data[name] = env_value
        if env_version := os.environ.get(f"{prefix}_OAUTH_VERSION"):
            data["version"] = env_version

        try:
            return ProviderConfig.from_mapping(self.provider, data)
        except ConfigurationError as e:
            msg = f"{e.message}. Set {prefix}_* environment variables or create {self.credentials_path}"
            raise ConfigurationError(msg, setting=e.setting) from None

    def save_provider_config(self, config: ProviderConfig) -> None:
        """Save provider settings to the provider's config file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        data = {
            "consumer_key": config.consumer_key,
            "consumer_secret": config.consumer_secret,
            "request_token_url": config.request_token_url,
            "authorize_url": config.authorize_url,
            "access_token_url": config.access_token_url,
            "version": str(config.version),
        }
        if config.authenticate_url:
            data["authenticate_url"] = config.authenticate_url

        with self.credentials_path.open("w") as f:
            json.dump(data, f, indent=2)

        # Set restrictive permissions (owner read/write only)
        self.credentials_path.chmod(0o600)

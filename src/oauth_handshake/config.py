"""Configuration management for OAuth 1 providers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from oauth_handshake.exceptions import ConfigurationError


class OAuth1Version(StrEnum):
    """OAuth 1 protocol editions.

    CORE_10 passes the callback URL on the authorization redirect;
    CORE_10_REVISION_A (1.0a) registers it with the request token and
    requires a verifier on the access token exchange.
    """

    CORE_10 = "1.0"
    CORE_10_REVISION_A = "1.0a"


def _get_config_dir() -> Path:
    """Get XDG-compliant config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "oauth-handshake"
    return Path.home() / ".config" / "oauth-handshake"


_REQUIRED = (
    "consumer_key",
    "consumer_secret",
    "request_token_url",
    "authorize_url",
    "access_token_url",
)


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Client credentials and endpoints for one OAuth 1 provider."""

    provider_id: str
    consumer_key: str
    consumer_secret: str
    request_token_url: str
    authorize_url: str
    access_token_url: str
    authenticate_url: str | None = None
    version: OAuth1Version = OAuth1Version.CORE_10_REVISION_A

    @property
    def effective_authenticate_url(self) -> str:
        """Authenticate URL, falling back to the authorize URL."""
        return self.authenticate_url or self.authorize_url

    @classmethod
    def from_mapping(cls, provider_id: str, data: dict[str, str | None]) -> ProviderConfig:
        """Build a config from a plain mapping, validating required keys."""
        missing = [name for name in _REQUIRED if not data.get(name)]
        if missing:
            msg = f"Missing configuration for provider '{provider_id}': {', '.join(missing)}"
            raise ConfigurationError(msg, setting=missing[0])

        version = data.get("version") or OAuth1Version.CORE_10_REVISION_A
        try:
            version = OAuth1Version(version)
        except ValueError:
            msg = f"Unsupported OAuth version for provider '{provider_id}': {version}"
            raise ConfigurationError(msg, setting="version") from None

        return cls(
            provider_id=provider_id,
            consumer_key=data["consumer_key"],  # type: ignore[arg-type]
            consumer_secret=data["consumer_secret"],  # type: ignore[arg-type]
            request_token_url=data["request_token_url"],  # type: ignore[arg-type]
            authorize_url=data["authorize_url"],  # type: ignore[arg-type]
            access_token_url=data["access_token_url"],  # type: ignore[arg-type]
            authenticate_url=data.get("authenticate_url") or None,
            version=version,
        )

    @classmethod
    def from_env(cls, provider_id: str) -> ProviderConfig:
        """Create config from environment variables.

        Expected env vars, prefixed with the upper-cased provider id:
        - <PROVIDER>_CONSUMER_KEY
        - <PROVIDER>_CONSUMER_SECRET
        - <PROVIDER>_REQUEST_TOKEN_URL
        - <PROVIDER>_AUTHORIZE_URL
        - <PROVIDER>_ACCESS_TOKEN_URL
        - <PROVIDER>_AUTHENTICATE_URL (optional)
        - <PROVIDER>_OAUTH_VERSION (optional, "1.0" or "1.0a")
        """
        prefix = provider_id.upper().replace("-", "_")
        data = {name: os.environ.get(f"{prefix}_{name.upper()}") for name in _REQUIRED}
        data["authenticate_url"] = os.environ.get(f"{prefix}_AUTHENTICATE_URL")
        data["version"] = os.environ.get(f"{prefix}_OAUTH_VERSION")
        return cls.from_mapping(provider_id, data)

    @classmethod
    def from_file(cls, provider_id: str, path: Path | None = None) -> ProviderConfig:
        """Load config from JSON file.

        Default path: ~/.config/oauth-handshake/<provider_id>.json
        """
        if path is None:
            path = _get_config_dir() / f"{provider_id}.json"

        if not path.exists():
            msg = f"Config file not found: {path}"
            raise ConfigurationError(msg)

        with path.open() as f:
            data = json.load(f)

        return cls.from_mapping(provider_id, data)

    @classmethod
    def load(cls, provider_id: str) -> ProviderConfig:
        """Load config from environment or file (env takes precedence)."""
        try:
            return cls.from_env(provider_id)
        except ConfigurationError:
            return cls.from_file(provider_id)

"""Flow factory for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from oauth_handshake.auth import CredentialStore
from oauth_handshake.connect import OAuth1ConnectionFactory
from oauth_handshake.flow import ExchangeFlow

if TYPE_CHECKING:
    from oauth_handshake.cli.config import CLIConfig


def get_flow(config: CLIConfig) -> ExchangeFlow:
    """Create an ExchangeFlow for the CLI's selected provider.

    Credential loading priority:
    1. Provider config file (~/.config/oauth-handshake/<provider>.json)
    2. Environment variables override file values (<PROVIDER>_CONSUMER_KEY, ...)

    The CLI has no web session to round-trip, so no return parameters
    are echoed into the callback URL.
    """
    provider_config = config.load_provider_config()
    return ExchangeFlow(OAuth1ConnectionFactory(provider_config))


def get_credential_store(config: CLIConfig) -> CredentialStore:
    """Credential store for the selected provider (in XDG_DATA_HOME)."""
    return CredentialStore(path=config.token_path)

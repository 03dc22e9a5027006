"""Client side of delegated-authentication handshakes.

Drives the three-legged OAuth 1 exchange against a provider and formats
bearer credentials for the OAuth 2 editions.

Example:
    from oauth_handshake import (
        ExchangeFlow,
        InboundRequest,
        OAuth1ConnectionFactory,
        ProviderConfig,
        SessionTokenStore,
        Suspend,
    )

    config = ProviderConfig.load("twitter")
    flow = ExchangeFlow(OAuth1ConnectionFactory(config), return_to_url_parameters=["next"])

    # Inside a web handler, once per request
    result = await flow.obtain_or_continue(
        InboundRequest.from_url(str(request.url)),
        SessionTokenStore(request.session),
    )
    if isinstance(result, Suspend):
        return RedirectResponse(result.authorization_url)
    connection = result.connection  # provider_id, access_token, secret, ...
"""

from oauth_handshake.api import APIClient
from oauth_handshake.auth import CredentialStore, OAuth1Operations, OAuth1Signer
from oauth_handshake.config import OAuth1Version, ProviderConfig
from oauth_handshake.connect import (
    ConnectionFactory,
    ConnectionFactoryRegistry,
    OAuth1ConnectionFactory,
)
from oauth_handshake.exceptions import (
    APIError,
    AuthError,
    ConfigurationError,
    HandshakeError,
    MissingSessionTokenError,
    ProviderCallError,
    RateLimitError,
)
from oauth_handshake.flow import Completed, ExchangeFlow, FlowResult, InboundRequest, Suspend
from oauth_handshake.models import (
    AccessGrant,
    AuthorizedRequestToken,
    ConnectionData,
    RequestToken,
    UserProfile,
)
from oauth_handshake.oauth2 import BearerSigner, OAuth2Version
from oauth_handshake.session import OAUTH_TOKEN_ATTRIBUTE, SessionTokenStore, TemporaryTokenStore

__version__ = "0.1.0"

__all__ = [
    # Flow
    "Completed",
    "ExchangeFlow",
    "FlowResult",
    "InboundRequest",
    "Suspend",
    # Providers
    "ConnectionFactory",
    "ConnectionFactoryRegistry",
    "OAuth1ConnectionFactory",
    "OAuth1Operations",
    "OAuth1Version",
    "ProviderConfig",
    # Session
    "OAUTH_TOKEN_ATTRIBUTE",
    "SessionTokenStore",
    "TemporaryTokenStore",
    # Signing and API access
    "APIClient",
    "BearerSigner",
    "OAuth1Signer",
    "OAuth2Version",
    "CredentialStore",
    # Models
    "AccessGrant",
    "AuthorizedRequestToken",
    "ConnectionData",
    "RequestToken",
    "UserProfile",
    # Exceptions
    "APIError",
    "AuthError",
    "ConfigurationError",
    "HandshakeError",
    "MissingSessionTokenError",
    "ProviderCallError",
    "RateLimitError",
]

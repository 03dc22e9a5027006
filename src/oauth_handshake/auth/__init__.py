"""OAuth 1 provider operations and grant storage."""

from oauth_handshake.auth.oauth1 import OAuth1Operations, OAuth1Signer, ProviderOperations
from oauth_handshake.auth.tokens import CredentialStore

__all__ = ["CredentialStore", "OAuth1Operations", "OAuth1Signer", "ProviderOperations"]

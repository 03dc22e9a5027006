"""Signed provider API access."""

from oauth_handshake.api.base import APIClient, RequestSigner

__all__ = ["APIClient", "RequestSigner"]

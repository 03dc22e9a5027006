"""Shared fixtures: provider configs and stub provider collaborators."""

from __future__ import annotations

import pytest

from oauth_handshake.config import OAuth1Version, ProviderConfig
from oauth_handshake.exceptions import ProviderCallError
from oauth_handshake.models.auth import AccessGrant, AuthorizedRequestToken, RequestToken
from oauth_handshake.models.connect import ConnectionData


class StubOperations:
    """Deterministic stand-in for a provider's OAuth 1 endpoints."""

    def __init__(
        self,
        *,
        version: OAuth1Version = OAuth1Version.CORE_10_REVISION_A,
        request_tokens: list[RequestToken] | None = None,
        grant: AccessGrant | None = None,
        fail_request_token: bool = False,
        fail_exchange: bool = False,
    ) -> None:
        self._version = version
        self._request_tokens = request_tokens or [RequestToken(value="rt1", secret="s1")]
        self.grant = grant or AccessGrant(value="ac1", secret="as1")
        self.fail_request_token = fail_request_token
        self.fail_exchange = fail_exchange
        self.callback_urls: list[str] = []
        self.exchanged: list[AuthorizedRequestToken] = []

    @property
    def version(self) -> OAuth1Version:
        return self._version

    async def fetch_request_token(
        self, callback_url: str, extra_params: dict[str, str] | None = None
    ) -> RequestToken:
        self.callback_urls.append(callback_url)
        if self.fail_request_token:
            raise ProviderCallError("Failed to get request token: 401", stage="request_token")
        index = min(len(self.callback_urls), len(self._request_tokens)) - 1
        return self._request_tokens[index]

    def build_authorize_url(
        self, token_value: str, extra_params: dict[str, str] | None = None
    ) -> str:
        return self._url("https://provider.test/oauth/authorize", token_value, extra_params)

    def build_authenticate_url(
        self, token_value: str, extra_params: dict[str, str] | None = None
    ) -> str:
        return self._url("https://provider.test/oauth/authenticate", token_value, extra_params)

    async def exchange_for_access_token(
        self,
        authorized: AuthorizedRequestToken,
        extra_params: dict[str, str] | None = None,
    ) -> AccessGrant:
        self.exchanged.append(authorized)
        if self.fail_exchange:
            raise ProviderCallError("Failed to get access token: 401", stage="access_token")
        return self.grant

    @staticmethod
    def _url(base: str, token_value: str, extra_params: dict[str, str] | None) -> str:
        url = f"{base}?oauth_token={token_value}"
        for name, value in (extra_params or {}).items():
            url += f"&{name}={value}"
        return url


class StubConnectionFactory:
    """Connection factory wrapping StubOperations."""

    def __init__(self, operations: StubOperations, provider_id: str = "example") -> None:
        self._operations = operations
        self._provider_id = provider_id

    @property
    def provider_id(self) -> str:
        return self._provider_id

    @property
    def operations(self) -> StubOperations:
        return self._operations

    async def create_identity(self, grant: AccessGrant) -> ConnectionData:
        return ConnectionData(
            provider_id=self.provider_id,
            provider_user_id="user-42",
            access_token=grant.value,
            secret=grant.secret,
        )


@pytest.fixture
def config() -> ProviderConfig:
    """Create a test provider configuration."""
    return ProviderConfig(
        provider_id="example",
        consumer_key="test_key",
        consumer_secret="test_secret",
        request_token_url="https://provider.test/oauth/request_token",
        authorize_url="https://provider.test/oauth/authorize",
        access_token_url="https://provider.test/oauth/access_token",
    )


@pytest.fixture
def operations() -> StubOperations:
    return StubOperations()


@pytest.fixture
def factory(operations: StubOperations) -> StubConnectionFactory:
    return StubConnectionFactory(operations)


@pytest.fixture
def make_factory():
    """Build a stub connection factory with custom provider behaviour."""

    def _make(**kwargs) -> StubConnectionFactory:
        return StubConnectionFactory(StubOperations(**kwargs))

    return _make

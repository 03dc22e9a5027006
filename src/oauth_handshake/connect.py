"""Connection factories turning access grants into connected identities."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from oauth_handshake.api.base import APIClient
from oauth_handshake.auth.oauth1 import OAuth1Operations, OAuth1Signer, ProviderOperations
from oauth_handshake.exceptions import ConfigurationError
from oauth_handshake.models.connect import ConnectionData, UserProfile

if TYPE_CHECKING:
    import httpx

    from oauth_handshake.config import ProviderConfig
    from oauth_handshake.models.auth import AccessGrant

logger = logging.getLogger(__name__)

ProfileLoader = Callable[[APIClient], Awaitable[UserProfile]]


@runtime_checkable
class ConnectionFactory(Protocol):
    """Everything an exchange flow needs to know about one provider."""

    @property
    def provider_id(self) -> str: ...

    @property
    def operations(self) -> ProviderOperations: ...

    async def create_identity(self, grant: AccessGrant) -> ConnectionData: ...


class OAuth1ConnectionFactory:
    """Connection factory for an OAuth 1 provider.

    Usage:
        factory = OAuth1ConnectionFactory(
            config,
            api_base_url="https://api.example.com/1.1",
            profile_loader=load_profile,
        )

    Without a profile loader the connection data carries only the grant.
    """

    def __init__(
        self,
        config: ProviderConfig | None,
        *,
        operations: ProviderOperations | None = None,
        api_base_url: str | None = None,
        profile_loader: ProfileLoader | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if config is None:
            raise ConfigurationError("Provider configuration is required", setting="config")
        if profile_loader is not None and not api_base_url:
            raise ConfigurationError(
                "api_base_url is required when a profile loader is set",
                setting="api_base_url",
            )
        self.config = config
        self._operations = operations or OAuth1Operations(config, http_client)
        self.api_base_url = api_base_url
        self.profile_loader = profile_loader
        self._http_client = http_client

    @property
    def provider_id(self) -> str:
        return self.config.provider_id

    @property
    def operations(self) -> ProviderOperations:
        return self._operations

    def api_client(self, grant: AccessGrant) -> APIClient:
        """API client signing requests with ``grant``."""
        return APIClient(
            self.api_base_url or "",
            OAuth1Signer(self.config, grant),
            self._http_client,
        )

    async def create_identity(self, grant: AccessGrant) -> ConnectionData:
        """Build connection data for ``grant``, fetching the profile if configured."""
        data = ConnectionData(
            provider_id=self.provider_id,
            access_token=grant.value,
            secret=grant.secret,
        )
        if self.profile_loader is None:
            return data

        profile = await self.profile_loader(self.api_client(grant))
        logger.debug("Loaded %s profile for user %s", self.provider_id, profile.id)
        return data.model_copy(
            update={
                "provider_user_id": profile.id,
                "display_name": profile.name,
                "profile_url": profile.profile_url,
                "image_url": profile.image_url,
            }
        )


class ConnectionFactoryRegistry:
    """Maps provider ids to their configured connection factories."""

    def __init__(self, factories: list[ConnectionFactory] | None = None) -> None:
        self._factories: dict[str, ConnectionFactory] = {}
        for factory in factories or []:
            self.register(factory)

    def register(self, factory: ConnectionFactory) -> None:
        if factory.provider_id in self._factories:
            msg = f"A connection factory for '{factory.provider_id}' is already registered"
            raise ConfigurationError(msg, setting="provider_id")
        self._factories[factory.provider_id] = factory

    def get(self, provider_id: str) -> ConnectionFactory:
        try:
            return self._factories[provider_id]
        except KeyError:
            msg = f"No connection factory registered for '{provider_id}'"
            raise ConfigurationError(msg, setting="provider_id") from None

    def provider_ids(self) -> list[str]:
        return sorted(self._factories)

    def __iter__(self) -> Iterator[ConnectionFactory]:
        return iter(self._factories.values())

    def __len__(self) -> int:
        return len(self._factories)

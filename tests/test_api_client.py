"""Tests for the signed API client: responses, retries and pooling."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from oauth_handshake.api.base import APIClient
from oauth_handshake.exceptions import APIError, RateLimitError
from oauth_handshake.oauth2 import BearerSigner, OAuth2Version

BASE_URL = "https://api.provider.test/1"


def make_client(handler) -> tuple[APIClient, httpx.AsyncClient]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return APIClient(BASE_URL, BearerSigner("abc123"), http_client), http_client


@pytest.fixture
def no_sleep():
    """Skip tenacity's waits between retries."""
    with patch.object(APIClient.request.retry, "sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestHandleResponse:
    """Tests for APIClient._handle_response."""

    @pytest.fixture
    def api(self) -> APIClient:
        return APIClient(BASE_URL, MagicMock())

    def test_returns_json_on_success(self, api: APIClient) -> None:
        """Should return parsed JSON on 2xx response."""
        result = api._handle_response(httpx.Response(200, json={"id": 1}))

        assert result == {"id": 1}

    def test_returns_empty_dict_on_204(self, api: APIClient) -> None:
        """Should return empty dict on 204 No Content."""
        assert api._handle_response(httpx.Response(204)) == {}

    def test_includes_retry_after_header(self, api: APIClient) -> None:
        """Should include Retry-After header in rate limit error."""
        response = httpx.Response(429, headers={"Retry-After": "30"})

        with pytest.raises(RateLimitError) as exc_info:
            api._handle_response(response)

        assert exc_info.value.status_code == 429
        assert exc_info.value.retry_after == 30

    def test_uses_error_string(self, api: APIClient) -> None:
        """A string 'error' field becomes the message."""
        response = httpx.Response(401, json={"error": "invalid_token"})

        with pytest.raises(APIError) as exc_info:
            api._handle_response(response)

        assert exc_info.value.message == "invalid_token"
        assert exc_info.value.response_body == {"error": "invalid_token"}

    def test_uses_nested_error_message(self, api: APIClient) -> None:
        """A nested error object's message becomes the message."""
        response = httpx.Response(400, json={"error": {"message": "Bad request"}})

        with pytest.raises(APIError) as exc_info:
            api._handle_response(response)

        assert exc_info.value.message == "Bad request"

    def test_handles_non_json_error_response(self, api: APIClient) -> None:
        """Should handle error response that isn't JSON."""
        response = httpx.Response(500, content=b"Internal Server Error")

        with pytest.raises(APIError) as exc_info:
            api._handle_response(response)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "API error: 500"
        assert exc_info.value.response_body is None


class TestSignedRequests:
    """Tests for request construction."""

    async def test_sends_signer_headers(self) -> None:
        """Every request should carry the signer's Authorization header."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        api, http_client = make_client(handler)
        await api.get("/me", params={"fields": "name", "skip": None})

        assert seen[0].headers["Authorization"] == "BEARER abc123"
        assert seen[0].headers["Accept"] == "application/json"
        assert str(seen[0].url) == f"{BASE_URL}/me?fields=name"
        await http_client.aclose()

    async def test_edition_controls_header(self) -> None:
        """The bearer edition picked for the provider shapes the header."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        api = APIClient(BASE_URL, BearerSigner("abc123", OAuth2Version.DRAFT_10), http_client)
        await api.post("/posts", {"text": "hi"})

        assert seen[0].headers["Authorization"] == "OAuth abc123"
        assert seen[0].headers["Content-Type"] == "application/json"
        await http_client.aclose()

    async def test_signer_sees_query_params(self) -> None:
        """Query parameters are passed to the signer as strings."""
        signer = MagicMock()
        signer.sign_request.return_value = {}
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda _: httpx.Response(200, json={}))
        )
        api = APIClient(BASE_URL, signer, http_client)

        await api.get("/search", params={"q": "x", "count": 5})

        signer.sign_request.assert_called_once_with(
            "GET", f"{BASE_URL}/search", {"q": "x", "count": "5"}
        )
        await http_client.aclose()

    async def test_uses_per_request_client_without_pool(self) -> None:
        """Without a shared client, a temporary one is created."""
        api = APIClient(BASE_URL, BearerSigner("abc123"))
        transport = httpx.MockTransport(lambda _: httpx.Response(200, json={"ok": True}))
        real_client = httpx.AsyncClient

        with patch(
            "oauth_handshake.api.base.httpx.AsyncClient",
            side_effect=lambda **kwargs: real_client(transport=transport, **kwargs),
        ) as factory:
            result = await api.get("/ping")

        assert result == {"ok": True}
        factory.assert_called_once_with(timeout=30.0)


class TestRateLimitRetry:
    """Tests for automatic retry on rate limit errors."""

    async def test_retries_on_rate_limit_and_succeeds(self, no_sleep) -> None:
        """Should retry when rate limit (429) is returned and succeed after."""
        call_count = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                return httpx.Response(429, headers={"Retry-After": "7"})
            return httpx.Response(200, json={"id": 1})

        api, http_client = make_client(handler)
        result = await api.get("/me")

        assert call_count == 3
        assert result == {"id": 1}
        no_sleep.assert_awaited_with(7.0)
        await http_client.aclose()

    async def test_retries_without_retry_after_header(self, no_sleep) -> None:
        """Should back off exponentially when no Retry-After header is sent."""
        call_count = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                return httpx.Response(429)
            return httpx.Response(200, json={})

        api, http_client = make_client(handler)
        await api.get("/me")

        assert call_count == 2
        assert no_sleep.await_args.args[0] >= 2
        await http_client.aclose()

    async def test_raises_after_max_retries(self, no_sleep) -> None:
        """Should raise RateLimitError after max retries exhausted."""
        call_count = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal call_count
            call_count += 1
            return httpx.Response(429)

        api, http_client = make_client(handler)
        with pytest.raises(RateLimitError):
            await api.get("/me")

        assert call_count == 5
        await http_client.aclose()

    async def test_does_not_retry_other_errors(self, no_sleep) -> None:
        """Should not retry on non-rate-limit errors."""
        call_count = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal call_count
            call_count += 1
            return httpx.Response(401, json={"error": "invalid_token"})

        api, http_client = make_client(handler)
        with pytest.raises(APIError) as exc_info:
            await api.get("/me")

        assert call_count == 1
        assert exc_info.value.status_code == 401
        await http_client.aclose()

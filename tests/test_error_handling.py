"""Tests for error handling and exception classes."""

import pytest

from oauth_handshake.exceptions import (
    APIError,
    AuthError,
    ConfigurationError,
    HandshakeError,
    MissingSessionTokenError,
    ProviderCallError,
    RateLimitError,
)


class TestExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_handshake_error_is_base(self) -> None:
        """All exceptions should inherit from HandshakeError."""
        assert issubclass(ConfigurationError, HandshakeError)
        assert issubclass(AuthError, HandshakeError)
        assert issubclass(ProviderCallError, HandshakeError)
        assert issubclass(MissingSessionTokenError, HandshakeError)
        assert issubclass(APIError, HandshakeError)
        assert issubclass(RateLimitError, HandshakeError)

    def test_handshake_failures_are_auth_errors(self) -> None:
        """Both handshake failure kinds can be caught as AuthError."""
        assert issubclass(ProviderCallError, AuthError)
        assert issubclass(MissingSessionTokenError, AuthError)

    def test_rate_limit_inherits_from_api_error(self) -> None:
        """RateLimitError should be an APIError."""
        assert issubclass(RateLimitError, APIError)


class TestHandshakeError:
    """Tests for base HandshakeError."""

    def test_stores_message(self) -> None:
        """Should store the error message."""
        error = HandshakeError("Something went wrong")

        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_stores_setting(self) -> None:
        """Should name the missing setting."""
        error = ConfigurationError("Missing key", setting="consumer_key")

        assert error.setting == "consumer_key"

    def test_setting_is_optional(self) -> None:
        assert ConfigurationError("Missing").setting is None


class TestProviderCallError:
    """Tests for ProviderCallError."""

    def test_stores_stage_and_response(self) -> None:
        """Should keep the failing stage and the provider's reply."""
        error = ProviderCallError(
            "Failed to get request token: 401",
            stage="request_token",
            status_code=401,
            response_body="oauth_problem=consumer_key_unknown",
        )

        assert error.stage == "request_token"
        assert error.status_code == 401
        assert error.response_body == "oauth_problem=consumer_key_unknown"

    def test_response_details_are_optional(self) -> None:
        """Transport failures have no status code or body."""
        error = ProviderCallError("Connection refused", stage="access_token")

        assert error.status_code is None
        assert error.response_body is None

    def test_can_catch_as_auth_error(self) -> None:
        with pytest.raises(AuthError):
            raise ProviderCallError("boom", stage="access_token")


class TestMissingSessionTokenError:
    """Tests for MissingSessionTokenError."""

    def test_stores_key_and_stage(self) -> None:
        """Should record the session key and the access token stage."""
        error = MissingSessionTokenError("No token", key="oauthToken")

        assert error.key == "oauthToken"
        assert error.stage == "access_token"


class TestAPIError:
    """Tests for APIError."""

    def test_stores_status_code(self) -> None:
        """Should store the HTTP status code."""
        error = APIError("Not found", status_code=404)

        assert error.status_code == 404
        assert error.message == "Not found"

    def test_stores_error_code_and_body(self) -> None:
        """Should store optional error code and response body."""
        body = {"error": {"code": "123", "message": "Details"}}
        error = APIError("Error", status_code=400, error_code="123", response_body=body)

        assert error.error_code == "123"
        assert error.response_body == body


class TestRateLimitError:
    """Tests for RateLimitError."""

    def test_defaults_to_429(self) -> None:
        """Should default status code to 429."""
        error = RateLimitError("Rate limited")

        assert error.status_code == 429
        assert error.retry_after is None

    def test_stores_retry_after(self) -> None:
        """Should store Retry-After value."""
        assert RateLimitError("Rate limited", retry_after=60).retry_after == 60

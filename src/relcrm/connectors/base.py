"""Core connector abstractions for the remote record service.

Defines the pieces every HTTP call to the remote service relies on:
- AuthStrategy: how the bearer credential is attached to a request
- RequestPolicy: timeouts and default headers
- ConnectorError hierarchy: typed exceptions mapped from HTTP failures

Timeouts are owned here, by the transport. Nothing above this layer adds
its own.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

# =============================================================================
# Authentication Strategies
# =============================================================================


class AuthType(str, Enum):
    """Type of authentication strategy."""

    NONE = "none"
    API_KEY = "api_key"
    BEARER_TOKEN = "bearer_token"


@dataclass
class AuthStrategy:
    """Base authentication strategy (data holder)."""

    auth_type: AuthType = AuthType.NONE

    def is_configured(self) -> bool:
        """Check if authentication is properly configured."""
        return True

    def get_headers(self) -> Dict[str, str]:
        """Get authentication headers for requests."""
        return {}


@dataclass
class ApiKeyAuth(AuthStrategy):
    """Static API key authentication.

    Typical usage: apikey: <key> for the identity provider.
    """

    auth_type: AuthType = field(default=AuthType.API_KEY, init=False)
    api_key: str = ""
    header_name: str = "Authorization"
    header_prefix: str = "Bearer"

    def is_configured(self) -> bool:
        """Check if API key is set."""
        return bool(self.api_key)

    def get_headers(self) -> Dict[str, str]:
        """Get authorization header."""
        if not self.api_key:
            return {}
        if self.header_prefix:
            return {self.header_name: f"{self.header_prefix} {self.api_key}"}
        return {self.header_name: self.api_key}


@dataclass
class BearerTokenAuth(AuthStrategy):
    """Bearer authentication with a token resolved at request time.

    The token provider is called for every request, so a credential change
    (sign-in, refresh, sign-out) is picked up without rebuilding the client.
    When the provider yields nothing, the fallback token is sent instead.
    """

    auth_type: AuthType = field(default=AuthType.BEARER_TOKEN, init=False)
    token_provider: Callable[[], Optional[str]] = lambda: None
    fallback_token: str = ""

    def current_token(self) -> Optional[str]:
        """Token that the next request will carry."""
        return self.token_provider() or self.fallback_token or None

    def is_configured(self) -> bool:
        """Check if any token is available."""
        return self.current_token() is not None

    def get_headers(self) -> Dict[str, str]:
        """Get authorization header."""
        token = self.current_token()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Request Policy
# =============================================================================


@dataclass
class RequestPolicy:
    """Policy for HTTP requests: timeouts and headers.

    Every request is made once. Retrying is left to the caller (the sync
    prompt offers it to the user).
    """

    # Timeouts
    connect_timeout: float = 10.0  # seconds
    read_timeout: float = 30.0  # seconds
    total_timeout: float = 60.0  # seconds

    # Headers
    user_agent: str = "relcrm/1.0"
    default_headers: Dict[str, str] = field(
        default_factory=lambda: {"Content-Type": "application/json"}
    )


# =============================================================================
# Connector Error Hierarchy
# =============================================================================


class ConnectorError(Exception):
    """Base exception for connector errors."""

    def __init__(
        self,
        message: str,
        connector_name: str = "",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.connector_name = connector_name
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)


class ConnectionError(ConnectorError):
    """Failed to connect to the service."""

    pass


class TimeoutError(ConnectorError):
    """Request timed out."""

    def __init__(
        self,
        message: str = "Request timed out",
        connector_name: str = "",
        timeout_seconds: Optional[float] = None,
    ):
        super().__init__(message, connector_name, {"timeout_seconds": timeout_seconds})
        self.timeout_seconds = timeout_seconds


class AuthenticationError(ConnectorError):
    """Authentication failed (invalid credentials, expired token, etc.)."""

    pass


class AuthorizationError(ConnectorError):
    """Authorized but not permitted (insufficient permissions)."""

    pass


class RateLimitError(ConnectorError):
    """Rate limit exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        connector_name: str = "",
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, connector_name, {"retry_after": retry_after}, status_code=429)
        self.retry_after = retry_after


class ValidationError(ConnectorError):
    """Request validation failed (bad data, missing fields, etc.)."""

    pass


class ResourceNotFoundError(ConnectorError):
    """Requested resource not found."""

    pass


class ConflictError(ConnectorError):
    """Resource conflict (duplicate, version mismatch, etc.)."""

    pass


class ServiceUnavailableError(ConnectorError):
    """Service is temporarily unavailable."""

    pass


class ResponseFormatError(ConnectorError):
    """Response body could not be decoded or had an unexpected shape."""

    pass

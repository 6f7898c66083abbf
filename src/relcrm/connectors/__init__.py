"""Connector layer for the remote record service and identity provider.

Key components:
- AuthStrategy: Authentication abstraction (ApiKeyAuth, BearerTokenAuth)
- RequestPolicy: Timeouts and default headers
- HTTPClient: httpx wrapper with policy enforcement and error mapping
"""

from .base import (
    ApiKeyAuth,
    AuthenticationError,
    AuthorizationError,
    AuthStrategy,
    AuthType,
    BearerTokenAuth,
    ConflictError,
    ConnectionError,
    ConnectorError,
    RateLimitError,
    RequestPolicy,
    ResourceNotFoundError,
    ResponseFormatError,
    ServiceUnavailableError,
    TimeoutError,
    ValidationError,
)
from .http_client import HTTPClient, HTTPResponse

__all__ = [
    # Auth
    "AuthType",
    "AuthStrategy",
    "ApiKeyAuth",
    "BearerTokenAuth",
    # Policy
    "RequestPolicy",
    # Errors
    "ConnectorError",
    "ConnectionError",
    "TimeoutError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitError",
    "ValidationError",
    "ResourceNotFoundError",
    "ConflictError",
    "ServiceUnavailableError",
    "ResponseFormatError",
    # HTTP client
    "HTTPClient",
    "HTTPResponse",
]

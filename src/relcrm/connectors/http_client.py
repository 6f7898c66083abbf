"""HTTP client wrapper.

Wraps httpx with RequestPolicy enforcement:
- Configurable timeouts
- Error mapping to ConnectorError hierarchy

Each request is attempted once; nothing here retries.

This is a thin wrapper - actual HTTP calls use httpx.
Tests pass an ``httpx.MockTransport`` instead of hitting the network.
"""

import json as json_module
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .base import (
    AuthenticationError,
    AuthorizationError,
    AuthStrategy,
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

logger = logging.getLogger(__name__)


@dataclass
class HTTPResponse:
    """Simplified HTTP response wrapper.

    Used to provide consistent interface regardless of underlying HTTP library.
    """

    status_code: int
    headers: Dict[str, str]
    body: bytes
    json_data: Optional[Any] = None
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        """Check if status code indicates success (2xx)."""
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Get JSON data (parsed body)."""
        if self.json_data is not None:
            return self.json_data
        try:
            self.json_data = json_module.loads(self.body)
        except ValueError as e:
            raise ResponseFormatError(
                f"Response is not valid JSON: {e}", status_code=self.status_code
            ) from e
        return self.json_data


def _error_message(status_code: int, body: bytes) -> str:
    """Extract the service's error message from a failed response.

    The service reports failures as ``{"error": "..."}``. Anything else
    falls back to ``HTTP <status>``.
    """
    try:
        payload = json_module.loads(body) if body else None
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return f"HTTP {status_code}"


class HTTPClient:
    """HTTP client for one service.

    Wraps httpx with RequestPolicy enforcement.
    """

    def __init__(
        self,
        auth: Optional[AuthStrategy] = None,
        policy: Optional[RequestPolicy] = None,
        base_url: str = "",
        connector_name: str = "http_client",
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize HTTP client.

        Args:
            auth: Authentication strategy for requests
            policy: Request policy (timeouts, retries)
            base_url: Base URL for all requests
            connector_name: Name reported on raised errors
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.auth = auth
        self.policy = policy or RequestPolicy()
        self.base_url = base_url.rstrip("/")
        self.connector_name = connector_name
        self._transport = transport

    def _build_headers(self, extra_headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Build request headers including auth and defaults."""
        headers = {"User-Agent": self.policy.user_agent}
        headers.update(self.policy.default_headers)

        if self.auth:
            headers.update(self.auth.get_headers())

        if extra_headers:
            headers.update(extra_headers)

        return headers

    def _get_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _map_error(
        self,
        status_code: int,
        body: bytes,
        headers: Dict[str, str],
    ) -> ConnectorError:
        """Map HTTP status code to appropriate ConnectorError."""
        message = _error_message(status_code, body)
        name = self.connector_name

        if status_code == 401:
            return AuthenticationError(message, connector_name=name, status_code=status_code)
        elif status_code == 403:
            return AuthorizationError(message, connector_name=name, status_code=status_code)
        elif status_code == 404:
            return ResourceNotFoundError(message, connector_name=name, status_code=status_code)
        elif status_code == 409:
            return ConflictError(message, connector_name=name, status_code=status_code)
        elif status_code in (400, 422):
            return ValidationError(message, connector_name=name, status_code=status_code)
        elif status_code == 429:
            retry_after = headers.get("retry-after") or headers.get("Retry-After")
            try:
                retry_seconds = float(retry_after) if retry_after else None
            except ValueError:
                retry_seconds = None
            return RateLimitError(message, connector_name=name, retry_after=retry_seconds)
        elif status_code >= 500:
            return ServiceUnavailableError(message, connector_name=name, status_code=status_code)
        else:
            return ConnectorError(message, connector_name=name, status_code=status_code)

    def _transport_error(self, exc: httpx.HTTPError, url: str) -> ConnectorError:
        """Map an httpx transport failure to a ConnectorError."""
        if isinstance(exc, httpx.TimeoutException):
            return TimeoutError(
                f"Request timed out after {self.policy.read_timeout}s",
                connector_name=self.connector_name,
                timeout_seconds=self.policy.read_timeout,
            )
        if isinstance(exc, httpx.ConnectError):
            return ConnectionError(
                f"Failed to connect to {url}: {exc}", connector_name=self.connector_name
            )
        return ConnectorError(f"HTTP error: {exc}", connector_name=self.connector_name)

    def _execute_request(
        self,
        method: str,
        url: str,
        request_headers: Dict[str, str],
        timeout: httpx.Timeout,
        json: Optional[Any],
        params: Optional[Dict[str, Any]],
    ) -> HTTPResponse:
        """Execute a single HTTP request."""
        start_time = time.monotonic()
        with httpx.Client(timeout=timeout, transport=self._transport) as client:
            response = client.request(
                method=method,
                url=url,
                json=json,
                params=params,
                headers=request_headers,
            )
        elapsed = time.monotonic() - start_time
        return HTTPResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
            elapsed_seconds=elapsed,
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        raise_for_status: bool = True,
    ) -> HTTPResponse:
        """Make one HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: URL path (relative to base_url)
            json: JSON body to send
            params: Query parameters
            headers: Additional headers
            raise_for_status: Raise exception on non-2xx status

        Returns:
            HTTPResponse with status, headers, and body

        Raises:
            ConnectorError: On HTTP errors (if raise_for_status=True)
            TimeoutError: On request timeout
            ConnectionError: On connection failure
        """
        url = self._get_url(path)
        request_headers = self._build_headers(headers)
        timeout = httpx.Timeout(
            connect=self.policy.connect_timeout,
            read=self.policy.read_timeout,
            write=self.policy.read_timeout,
            pool=self.policy.total_timeout,
        )

        try:
            result = self._execute_request(method, url, request_headers, timeout, json, params)
        except httpx.HTTPError as e:
            error = self._transport_error(e, url)
            logger.warning(f"{method} {path} failed: {error}")
            raise error from e

        if raise_for_status and not result.ok:
            error = self._map_error(result.status_code, result.body, result.headers)
            logger.warning(f"{method} {path} failed: {error}")
            raise error

        return result

    def get(self, path: str, **kwargs) -> HTTPResponse:
        """HTTP GET request."""
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> HTTPResponse:
        """HTTP POST request."""
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> HTTPResponse:
        """HTTP PUT request."""
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs) -> HTTPResponse:
        """HTTP DELETE request."""
        return self.request("DELETE", path, **kwargs)

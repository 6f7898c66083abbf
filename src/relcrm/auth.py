"""Sign-in, sign-up and sign-out.

The identity provider is an external collaborator behind the
``IdentityProvider`` protocol. ``PasswordGrantIdentityProvider`` talks to a
token endpoint that accepts the password grant:

    POST {auth_url}/token?grant_type=password
         {"email": ..., "password": ...}
    -> {"access_token": ..., "user": {"id", "email", "user_metadata": {...}}}

``Authenticator`` ties the provider, the record service's sign-up endpoint
and the ``SessionContext`` together. Failures come back as
``AuthResult(success=False, error=...)`` rather than exceptions, and never
touch stored records.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from relcrm.config import RemoteConfig
from relcrm.connectors.base import ApiKeyAuth, ConnectorError, RequestPolicy
from relcrm.connectors.http_client import HTTPClient
from relcrm.crm.adapters.remote_service import RemoteRecordService
from relcrm.session import Session, SessionContext, User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass
class AuthResult:
    """Outcome of a sign-in or sign-up attempt."""

    success: bool
    error: Optional[str] = None


class IdentityError(Exception):
    """Raised by an identity provider when credentials are rejected."""

    pass


class IdentityProvider(Protocol):
    """Exchanges credentials for a session."""

    def sign_in_with_password(self, email: str, password: str) -> Session:
        """Return a session, or raise IdentityError."""
        ...

    def sign_out(self, access_token: str) -> None:
        """Revoke a session's credential (best effort)."""
        ...


class PasswordGrantIdentityProvider:
    """Identity provider speaking the password-grant token endpoint."""

    connector_name = "identity"

    def __init__(self, client: HTTPClient):
        self.client = client

    @classmethod
    def from_config(
        cls, remote: RemoteConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> "PasswordGrantIdentityProvider":
        """Build a provider for the configured auth URL and anonymous key."""
        policy = RequestPolicy(
            connect_timeout=remote.connect_timeout_s,
            read_timeout=remote.read_timeout_s,
        )
        client = HTTPClient(
            auth=ApiKeyAuth(api_key=remote.anon_key, header_name="apikey", header_prefix=""),
            policy=policy,
            base_url=remote.auth_url,
            connector_name=cls.connector_name,
            transport=transport,
        )
        return cls(client)

    def sign_in_with_password(self, email: str, password: str) -> Session:
        response = self.client.post(
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            raise_for_status=False,
        )
        payload = response.json() if response.body else {}
        if not response.ok:
            raise IdentityError(_provider_message(payload, response.status_code))

        token = payload.get("access_token") if isinstance(payload, dict) else None
        user = payload.get("user") if isinstance(payload, dict) else None
        if not token or not isinstance(user, dict):
            raise IdentityError("Sign in failed. Please try again.")
        return Session(user=_user_from_payload(user), access_token=str(token))

    def sign_out(self, access_token: str) -> None:
        self.client.post(
            "/logout",
            headers={"Authorization": f"Bearer {access_token}"},
            raise_for_status=False,
        )


def _provider_message(payload: Any, status_code: int) -> str:
    if isinstance(payload, dict):
        for key in ("error_description", "msg", "message", "error"):
            if payload.get(key):
                return str(payload[key])
    return f"HTTP {status_code}"


def _user_from_payload(user: Dict[str, Any]) -> User:
    metadata = user.get("user_metadata") or {}
    return User(
        id=str(user.get("id", "")),
        email=str(user.get("email", "")),
        first_name=metadata.get("firstName"),
        last_name=metadata.get("lastName"),
    )


def validate_signup(password: str, confirm_password: str) -> Optional[str]:
    """Return a user-facing error for an unacceptable password, else None."""
    if password != confirm_password:
        return "Passwords do not match"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


class Authenticator:
    """Signs users in and out, updating the session context."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        remote_service: Optional[RemoteRecordService],
        session: SessionContext,
    ):
        """Initialize the authenticator.

        Args:
            identity_provider: Provider exchanging credentials for sessions
            remote_service: Record service hosting the sign-up endpoint
            session: Session context to update
        """
        self.identity_provider = identity_provider
        self.remote_service = remote_service
        self.session = session

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password."""
        try:
            session = self.identity_provider.sign_in_with_password(email, password)
        except IdentityError as e:
            logger.info(f"Sign in rejected for {email}: {e}")
            return AuthResult(success=False, error=str(e))
        except ConnectorError as e:
            logger.warning(f"Sign in failed for {email}: {e}")
            return AuthResult(success=False, error="Sign in failed. Please try again.")

        self.session.begin(session)
        return AuthResult(success=True)

    def sign_up(
        self,
        email: str,
        password: str,
        confirm_password: str,
        first_name: str,
        last_name: str,
    ) -> AuthResult:
        """Create an account, then sign in with the same credentials."""
        problem = validate_signup(password, confirm_password)
        if problem:
            return AuthResult(success=False, error=problem)
        if self.remote_service is None:
            return AuthResult(success=False, error="Remote service is not configured")

        try:
            result = self.remote_service.signup(email, password, first_name, last_name)
        except ConnectorError as e:
            logger.warning(f"Sign up failed for {email}: {e}")
            return AuthResult(success=False, error=str(e) or "Sign up failed. Please try again.")

        if not result.get("user"):
            return AuthResult(success=False, error="Failed to create account")
        return self.sign_in(email, password)

    def sign_out(self) -> None:
        """End the session. Provider errors are logged, the session ends regardless."""
        token = self.session.access_token
        if token:
            try:
                self.identity_provider.sign_out(token)
            except ConnectorError as e:
                logger.warning(f"Sign out request failed: {e}")
        self.session.end()

"""Test configuration and fixtures."""

import json
import logging
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Any, Dict, Generator, List, Optional

import httpx
import pytest

from relcrm.config import RemoteConfig
from relcrm.profile import ProfileContext
from relcrm.session import Session, SessionContext, User
from relcrm.storage.local_store import LocalStore

API_BASE_URL = "https://api.test/server"
AUTH_URL = "https://auth.test/auth/v1"
ANON_KEY = "anon-key"

SINGULAR = {"contacts": "contact", "companies": "company", "tasks": "task"}


def _close_loggers():
    """Detach handlers the CLI adds so tests don't leak output between runs."""
    logger = logging.getLogger("relcrm")
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)


class FakeRemote:
    """In-memory stand-in for the remote record service and identity provider.

    Records are held in wire (snake_case) form, exactly as the service
    would store them. Every request is kept in ``requests``.
    """

    def __init__(self):
        self.records: Dict[str, List[Dict[str, Any]]] = {name: [] for name in SINGULAR}
        self.requests: List[httpx.Request] = []
        self.sync_payloads: List[Dict[str, Any]] = []
        self.sync_response: Dict[str, Any] = {"success": True, "message": "Synced"}
        self.failures: Dict[str, int] = {}
        self.users: Dict[str, Dict[str, Any]] = {
            "ada@example.com": {"password": "secret1", "first_name": "Ada", "last_name": "Lovelace"}
        }
        self._next_id = 1

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def fail(self, path_prefix: str, status: int = 503) -> None:
        """Make requests whose path starts with ``path_prefix`` fail."""
        self.failures[path_prefix] = status

    def heal(self) -> None:
        self.failures.clear()

    def requests_to(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    # =========================================================================
    # Dispatch
    # =========================================================================

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        for prefix, status in self.failures.items():
            if path.startswith(prefix):
                return httpx.Response(status, json={"error": f"{prefix} unavailable"})

        body = json.loads(request.content) if request.content else None
        if request.url.host == "auth.test":
            return self._handle_auth(request, body)
        parts = [p for p in path.split("/") if p][1:]  # drop "server"
        return self._handle_service(request.method, parts, body)

    def _handle_auth(self, request: httpx.Request, body: Any) -> httpx.Response:
        if request.url.path.endswith("/logout"):
            return httpx.Response(204)

        user = self.users.get(body.get("email"))
        if request.url.params.get("grant_type") != "password" or not user:
            return httpx.Response(
                400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"}
            )
        if user["password"] != body.get("password"):
            return httpx.Response(
                400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"}
            )
        email = body["email"]
        return httpx.Response(
            200,
            json={
                "access_token": f"token-{email}",
                "user": {
                    "id": f"user-{email}",
                    "email": email,
                    "user_metadata": {
                        "firstName": user["first_name"],
                        "lastName": user["last_name"],
                    },
                },
            },
        )

    def _handle_service(self, method: str, parts: List[str], body: Any) -> httpx.Response:
        if parts == ["health"]:
            return httpx.Response(200, json={"status": "ok"})

        if parts == ["sync"] and method == "POST":
            self.sync_payloads.append(body)
            return httpx.Response(200, json=self.sync_response)

        if parts == ["auth", "signup"] and method == "POST":
            if body["email"] in self.users:
                return httpx.Response(400, json={"error": "User already registered"})
            self.users[body["email"]] = {
                "password": body["password"],
                "first_name": body["firstName"],
                "last_name": body["lastName"],
            }
            return httpx.Response(
                200, json={"user": {"id": f"user-{body['email']}", "email": body["email"]}}
            )

        collection = parts[0] if parts else ""
        if collection not in self.records:
            return httpx.Response(404, json={"error": "Unknown endpoint"})
        items = self.records[collection]
        singular = SINGULAR[collection]

        if len(parts) == 1 and method == "GET":
            return httpx.Response(200, json={collection: items})

        if len(parts) == 1 and method == "POST":
            record = dict(body, id=f"srv-{self._next_id}", created_at="2026-10-19T09:00:00.000Z")
            self._next_id += 1
            items.append(record)
            return httpx.Response(201, json={singular: record})

        record_id = parts[1]
        index = next((i for i, r in enumerate(items) if r.get("id") == record_id), None)
        if index is None:
            return httpx.Response(404, json={"error": f"{singular} not found"})

        if method == "PUT":
            record = dict(body, id=record_id, created_at=items[index].get("created_at"))
            items[index] = record
            return httpx.Response(200, json={singular: record})

        if method == "DELETE":
            del items[index]
            return httpx.Response(200, json={"success": True})

        return httpx.Response(405, json={"error": "Method not allowed"})


@pytest.fixture
def temp_profile() -> Generator[ProfileContext, None, None]:
    """Provide a profile in a temporary directory."""
    with TemporaryDirectory(ignore_cleanup_errors=True) as tmpdir:
        profile = ProfileContext(Path(tmpdir) / "profile")
        profile.ensure_directories()
        yield profile
        _close_loggers()


@pytest.fixture
def store(temp_profile) -> Generator[LocalStore, None, None]:
    """Provide an open local store for the temporary profile."""
    local_store = LocalStore.for_profile(temp_profile)
    yield local_store
    local_store.close()


@pytest.fixture
def remote_config() -> RemoteConfig:
    """Remote settings pointing at the fake service."""
    remote = RemoteConfig()
    remote.api_base_url = API_BASE_URL
    remote.auth_url = AUTH_URL
    remote.anon_key = ANON_KEY
    return remote


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def session(store) -> SessionContext:
    """A signed-out session context persisting to the temporary store."""
    return SessionContext(store)


def make_session(email: str = "ada@example.com", token: Optional[str] = None) -> Session:
    """Build a session the way the identity provider would."""
    return Session(
        user=User(id=f"user-{email}", email=email, first_name="Ada", last_name="Lovelace"),
        access_token=token or f"token-{email}",
    )


@pytest.fixture
def session_factory():
    """Factory building sessions for a given email."""
    return make_session


@pytest.fixture
def remote_service(session, remote_config, fake_remote):
    """Record service client talking to the fake service as ``session``."""
    from relcrm.crm.adapters.remote_service import RemoteRecordService

    return RemoteRecordService.for_session(
        session, remote_config, transport=fake_remote.transport()
    )

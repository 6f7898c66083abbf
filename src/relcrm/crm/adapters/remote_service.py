"""Client for the remote record service.

Endpoints (relative to the service base URL):

    GET    /{collection}         -> {"<collection>": [record, ...]}
    POST   /{collection}         -> {"<singular>": record}
    PUT    /{collection}/{id}    -> {"<singular>": record}
    DELETE /{collection}/{id}    -> {"success": bool}
    POST   /sync                 -> {"success": bool, "message": str}
    POST   /auth/signup          -> {"user": {...}}
    GET    /health

Request bodies are encoded to wire (snake_case) names and response bodies
decoded back through the collection's ``FieldMap``. The service is the
source of truth for generated fields (id, created_at) and owns merge and
dedup policy for bulk sync.

Errors from the transport propagate as ``ConnectorError`` subclasses.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from relcrm.config import RemoteConfig
from relcrm.connectors.base import (
    BearerTokenAuth,
    RequestPolicy,
    ResponseFormatError,
)
from relcrm.connectors.http_client import HTTPClient
from relcrm.crm.collections import Collection
from relcrm.session import SessionContext

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of a bulk sync call."""

    success: bool
    message: str = ""


class RemoteRecordService:
    """Typed wrapper around the remote record service's HTTP API."""

    connector_name = "record_service"

    def __init__(self, client: HTTPClient):
        """Initialize the service client.

        Args:
            client: HTTP client configured with the service base URL and auth
        """
        self.client = client

    @classmethod
    def for_session(
        cls,
        session: SessionContext,
        remote: RemoteConfig,
        policy: Optional[RequestPolicy] = None,
        **client_kwargs: Any,
    ) -> "RemoteRecordService":
        """Build a service whose requests carry the session's bearer token.

        While signed out, the public anonymous key is sent instead.
        """
        if policy is None:
            policy = RequestPolicy(
                connect_timeout=remote.connect_timeout_s,
                read_timeout=remote.read_timeout_s,
            )
        auth = BearerTokenAuth(
            token_provider=lambda: session.access_token,
            fallback_token=remote.anon_key,
        )
        client = HTTPClient(
            auth=auth,
            policy=policy,
            base_url=remote.api_base_url,
            connector_name=cls.connector_name,
            **client_kwargs,
        )
        return cls(client)

    # =========================================================================
    # Collection CRUD
    # =========================================================================

    def list(self, collection: Collection) -> List[Dict[str, Any]]:
        """Fetch every record of a collection, in record (camelCase) form."""
        payload = self._json(self.client.get(f"/{collection.value}"))
        items = payload.get(collection.value) if isinstance(payload, dict) else None
        if items is None:
            return []
        if not isinstance(items, list):
            raise ResponseFormatError(
                f"Expected a list under '{collection.value}'",
                connector_name=self.connector_name,
            )
        return [
            collection.field_map.decode(item) if isinstance(item, dict) else item
            for item in items
        ]

    def create(self, collection: Collection, record: Dict[str, Any]) -> Dict[str, Any]:
        """Create a record; returns the stored record from the service."""
        body = collection.field_map.encode(record)
        payload = self._json(self.client.post(f"/{collection.value}", json=body))
        return self._single(collection, payload)

    def update(
        self, collection: Collection, record_id: str, record: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Replace a record; returns the stored record from the service."""
        body = collection.field_map.encode(record)
        payload = self._json(
            self.client.put(f"/{collection.value}/{quote(record_id, safe='')}", json=body)
        )
        return self._single(collection, payload)

    def delete(self, collection: Collection, record_id: str) -> bool:
        """Delete a record. Returns the service's success flag."""
        payload = self._json(
            self.client.delete(f"/{collection.value}/{quote(record_id, safe='')}")
        )
        return bool(payload.get("success", True)) if isinstance(payload, dict) else True

    # =========================================================================
    # Bulk sync, sign-up, health
    # =========================================================================

    def sync(
        self,
        contacts: Sequence[Dict[str, Any]],
        companies: Sequence[Dict[str, Any]],
        tasks: Sequence[Dict[str, Any]],
    ) -> SyncResult:
        """Upload local collections in one request.

        The client does not retry per record; the service alone decides how
        uploaded records merge with what it already holds.
        """
        body = {
            Collection.CONTACTS.value: [Collection.CONTACTS.field_map.encode(r) for r in contacts],
            Collection.COMPANIES.value: [Collection.COMPANIES.field_map.encode(r) for r in companies],
            Collection.TASKS.value: [Collection.TASKS.field_map.encode(r) for r in tasks],
        }
        payload = self._json(self.client.post("/sync", json=body))
        if not isinstance(payload, dict):
            raise ResponseFormatError(
                "Sync response is not an object", connector_name=self.connector_name
            )
        return SyncResult(
            success=bool(payload.get("success")),
            message=str(payload.get("message") or ""),
        )

    def signup(self, email: str, password: str, first_name: str, last_name: str) -> Dict[str, Any]:
        """Create an account. Returns the service's response body."""
        payload = self._json(
            self.client.post(
                "/auth/signup",
                json={
                    "email": email,
                    "password": password,
                    "firstName": first_name,
                    "lastName": last_name,
                },
            )
        )
        return payload if isinstance(payload, dict) else {}

    def health_check(self) -> bool:
        """Check the service responds to its health endpoint."""
        response = self.client.get("/health", raise_for_status=False)
        return response.ok

    # =========================================================================
    # Helpers
    # =========================================================================

    def _json(self, response) -> Any:
        if not response.body:
            return {}
        return response.json()

    def _single(self, collection: Collection, payload: Any) -> Dict[str, Any]:
        item = payload.get(collection.singular) if isinstance(payload, dict) else None
        if not isinstance(item, dict):
            raise ResponseFormatError(
                f"Expected an object under '{collection.singular}'",
                connector_name=self.connector_name,
            )
        return collection.field_map.decode(item)

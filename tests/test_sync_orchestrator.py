"""Tests for the sync orchestrator.

Verifies that sync:
- Offers the prompt once per profile, on sign-in with local data
- Sends exactly one bulk request with every local record
- Never modifies the local collections
- Can be retried after a failure
"""

import pytest

from relcrm.sync import SyncOrchestrator, SyncState, SyncStateError


@pytest.fixture
def local_data(store):
    """Two contacts, one company and no tasks in the local store."""
    store.set(
        "crm-contacts",
        [
            {"id": "1", "firstName": "Ada", "lastName": "Lovelace", "lastContact": "2026-10-01"},
            {"id": "2", "firstName": "Grace", "lastName": "Hopper"},
        ],
    )
    store.set("crm-companies", [{"id": "3", "name": "Acme", "size": "small"}])
    return store


@pytest.fixture
def completions():
    return []


@pytest.fixture
def orchestrator(store, remote_service, session, completions):
    orchestrator = SyncOrchestrator(
        store, remote_service, session, on_complete=lambda: completions.append(True)
    ).attach()
    yield orchestrator
    orchestrator.detach()


class TestPrompt:
    """Tests for when the prompt is offered."""

    def test_sign_in_with_local_data_prompts(self, local_data, orchestrator, session, session_factory):
        """First sign-in with local data enters confirming and sets the flag."""
        session.begin(session_factory())

        assert orchestrator.state == SyncState.CONFIRMING
        assert local_data.get("hasShownSync") is True
        assert orchestrator.pending_counts().as_dict() == {
            "contacts": 2,
            "companies": 1,
            "tasks": 0,
        }

    def test_no_prompt_without_local_data(self, store, orchestrator, session, session_factory):
        """Nothing to sync means no prompt, and the flag stays unset."""
        session.begin(session_factory())

        assert orchestrator.state == SyncState.IDLE
        assert not orchestrator.has_shown_prompt()

    def test_prompt_offered_only_once(
        self, local_data, orchestrator, session, session_factory, fake_remote
    ):
        """Sign-in, decline, sign-out, sign-in again: no second prompt, no transfer."""
        session.begin(session_factory())
        orchestrator.decline()
        session.end()
        session.begin(session_factory())

        assert orchestrator.state == SyncState.IDLE
        assert fake_remote.sync_payloads == []

    def test_flag_survives_new_orchestrator(self, local_data, remote_service, session, session_factory):
        """The flag is persisted in the profile, not held in memory."""
        first = SyncOrchestrator(local_data, remote_service, session).attach()
        session.begin(session_factory())
        first.decline()
        first.detach()
        session.end()

        second = SyncOrchestrator(local_data, remote_service, session).attach()
        session.begin(session_factory())

        assert second.state == SyncState.IDLE

    def test_sign_out_closes_prompt(self, local_data, orchestrator, session, session_factory):
        """Signing out while confirming returns to idle."""
        session.begin(session_factory())
        session.end()

        assert orchestrator.state == SyncState.IDLE

    def test_reset_prompt_flag(self, local_data, orchestrator, session, session_factory):
        """After a reset the next sign-in prompts again."""
        session.begin(session_factory())
        orchestrator.decline()
        session.end()
        orchestrator.reset_prompt_flag()

        session.begin(session_factory())

        assert orchestrator.state == SyncState.CONFIRMING


class TestSyncRun:
    """Tests for confirm/retry and the bulk request."""

    def test_confirm_sends_one_bulk_request(
        self, local_data, orchestrator, session, session_factory, fake_remote, completions
    ):
        """Two contacts, one company, no tasks go up in a single call."""
        session.begin(session_factory())
        contacts_before = local_data.get_raw("crm-contacts")
        companies_before = local_data.get_raw("crm-companies")

        assert orchestrator.confirm() == SyncState.SUCCEEDED

        assert len(fake_remote.requests_to("POST", "/server/sync")) == 1
        payload = fake_remote.sync_payloads[0]
        assert [c["first_name"] for c in payload["contacts"]] == ["Ada", "Grace"]
        assert payload["contacts"][0]["last_contact"] == "2026-10-01"
        assert [c["name"] for c in payload["companies"]] == ["Acme"]
        assert payload["tasks"] == []

        assert local_data.get_raw("crm-contacts") == contacts_before
        assert local_data.get_raw("crm-companies") == companies_before
        assert completions == [True]

    def test_progress_stages(self, local_data, store, remote_service, session, session_factory):
        """Progress is reported at 0, 25, 75 and 100."""
        seen = []
        orchestrator = SyncOrchestrator(
            store, remote_service, session, on_progress=seen.append
        ).attach()
        session.begin(session_factory())

        orchestrator.confirm()

        assert seen == [0, 25, 75, 100]

    def test_service_failure_then_retry(
        self, local_data, orchestrator, session, session_factory, fake_remote
    ):
        """A failed sync is recorded, leaves data alone and can be retried."""
        session.begin(session_factory())
        before = local_data.get_raw("crm-contacts")
        fake_remote.fail("/server/sync", 503)

        assert orchestrator.confirm() == SyncState.FAILED
        assert orchestrator.error == "/server/sync unavailable"
        assert local_data.get_raw("crm-contacts") == before

        fake_remote.heal()
        assert orchestrator.retry() == SyncState.SUCCEEDED
        assert len(fake_remote.sync_payloads) == 1

    def test_unsuccessful_response_fails(
        self, local_data, orchestrator, session, session_factory, fake_remote, completions
    ):
        """success: false is a failure with a generic message."""
        fake_remote.sync_response = {"success": False}
        session.begin(session_factory())

        assert orchestrator.confirm() == SyncState.FAILED
        assert orchestrator.error == "Sync failed"
        assert completions == []

    def test_abandon_after_failure(self, local_data, orchestrator, session, session_factory, fake_remote):
        """Abandoning returns to idle without deleting anything."""
        fake_remote.fail("/server/sync")
        session.begin(session_factory())
        orchestrator.confirm()

        orchestrator.abandon()

        assert orchestrator.state == SyncState.IDLE
        assert len(local_data.get("crm-contacts")) == 2

    def test_empty_local_data_fails(self, store, orchestrator, session, session_factory, fake_remote):
        """A manual sync with nothing stored fails without a request."""
        session.begin(session_factory())
        orchestrator.request_sync()

        assert orchestrator.confirm() == SyncState.FAILED
        assert orchestrator.error == "No local data found to sync"
        assert fake_remote.sync_payloads == []

    def test_acknowledge_after_success(self, local_data, orchestrator, session, session_factory):
        """A succeeded sync returns to idle when acknowledged."""
        session.begin(session_factory())
        orchestrator.confirm()
        orchestrator.acknowledge()

        assert orchestrator.state == SyncState.IDLE


class TestManualSync:
    """Tests for request_sync and invalid transitions."""

    def test_manual_request_ignores_flag(self, local_data, orchestrator, session, session_factory):
        """The manual trigger opens the prompt even after it was shown once."""
        session.begin(session_factory())
        orchestrator.decline()

        orchestrator.request_sync()

        assert orchestrator.state == SyncState.CONFIRMING

    def test_manual_request_requires_session(self, local_data, orchestrator):
        """Nothing can be synced while signed out."""
        with pytest.raises(RuntimeError):
            orchestrator.request_sync()

    @pytest.mark.parametrize("action", ["confirm", "decline", "retry", "abandon", "acknowledge"])
    def test_invalid_transitions_from_idle(self, orchestrator, action):
        """Transitions outside their state raise SyncStateError."""
        with pytest.raises(SyncStateError):
            getattr(orchestrator, action)()

    def test_request_while_confirming_raises(self, local_data, orchestrator, session, session_factory):
        """The prompt cannot be opened twice."""
        session.begin(session_factory())

        with pytest.raises(SyncStateError):
            orchestrator.request_sync()

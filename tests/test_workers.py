# Tests for the notification and dispatch workers
# Created: 2026-09-19

import json
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi import FastAPI

from mission_control import FileMissionControlStore, MissionControlManager
from mission_control.api import mount_routers
from mission_control.client import SECRET_HEADER, MissionControlClient
from mission_control.kv import (
    DEFAULT_AUTOMATION_CONFIG,
    PROBE_LAST_DISPATCH_RESULT_KEY,
    PROBE_LAST_DISPATCH_STARTED_KEY,
    WATCHER_LEASE_KEY,
)
from mission_control.workers import DispatchWorker, NotificationWorker
from mission_control.workers.delivery import WebhookRelay

# ============================================================================
# Fixtures
# ============================================================================


def _mock_client(**config_overrides):
    client = MagicMock(spec=MissionControlClient)
    for name in (
        "get_automation_config",
        "acquire_lease",
        "release_lease",
        "claim_notification",
        "mark_delivered",
        "mark_attempt_failed",
        "claim_dispatch",
        "complete_dispatch",
        "fail_dispatch",
        "set_setting",
    ):
        setattr(client, name, AsyncMock())
    client.get_automation_config.return_value = {
        **DEFAULT_AUTOMATION_CONFIG,
        **config_overrides,
    }
    client.acquire_lease.return_value = {"acquired": True, "owner": "runner-1", "expires_at": 1}
    return client


def _relay(handler, secret=None):
    return WebhookRelay(
        "http://gateway.local/hook", secret=secret, transport=httpx.MockTransport(handler)
    )


def _ok_handler(sent):
    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={"run_id": "run-42", "preview": "On it"})

    return handler


def _failing_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(502, text="bad gateway")


NOTIFICATION_CLAIM = {
    "notification_id": "n1",
    "target_agent_id": "a1",
    "target_session_key": "agent:developer:main",
    "content": "You were   mentioned\nin hq",
}

DISPATCH_CLAIM = {
    "dispatch_id": "d1",
    "task_id": "t1",
    "prompt": "Go",
    "target_agent_id": "a1",
    "target_session_key": "agent:developer:main",
    "task_title": "Build feature",
    "task_description": "Details",
}


# ============================================================================
# Relay
# ============================================================================


class TestWebhookRelay:
    @pytest.mark.asyncio
    async def test_send_posts_json_with_secret(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"run_id": "r"})

        result = await _relay(handler, secret="abc").send({"hello": "world"})
        assert result == {"run_id": "r"}
        assert seen["body"] == {"hello": "world"}
        assert seen["headers"][SECRET_HEADER] == "abc"

    @pytest.mark.asyncio
    async def test_send_body_shapes(self):
        empty = _relay(lambda r: httpx.Response(204))
        text = _relay(lambda r: httpx.Response(200, text="accepted"))
        listing = _relay(lambda r: httpx.Response(200, json=[1, 2]))
        assert await empty.send({}) == {}
        assert await text.send({}) == {"text": "accepted"}
        assert await listing.send({}) == {"data": [1, 2]}

    @pytest.mark.asyncio
    async def test_send_raises_on_error_status(self):
        with pytest.raises(httpx.HTTPStatusError):
            await _relay(_failing_handler).send({})


# ============================================================================
# Notification worker
# ============================================================================


class TestNotificationWorker:
    @pytest.mark.asyncio
    async def test_delivers_batch(self):
        client = _mock_client()
        client.claim_notification.side_effect = [NOTIFICATION_CLAIM, None]
        sent = []
        worker = NotificationWorker(client, _relay(_ok_handler(sent)), "runner-1")

        assert await worker.run_cycle() == 1
        assert sent == [
            {
                "notification_id": "n1",
                "agent_id": "a1",
                "session_key": "agent:developer:main",
                "message": "You were mentioned in hq",
            }
        ]
        client.mark_delivered.assert_awaited_once_with("n1")
        client.acquire_lease.assert_awaited_once_with(WATCHER_LEASE_KEY, "runner-1", 8000)

    @pytest.mark.asyncio
    async def test_batch_size_limits_claims(self):
        client = _mock_client(notification_batch_size=2)
        client.claim_notification.side_effect = [
            {**NOTIFICATION_CLAIM, "notification_id": f"n{i}"} for i in range(5)
        ]
        worker = NotificationWorker(client, _relay(_ok_handler([])), "runner-1")

        assert await worker.run_cycle() == 2
        assert client.claim_notification.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_session_key_fails_attempt(self):
        client = _mock_client()
        client.claim_notification.side_effect = [
            {**NOTIFICATION_CLAIM, "target_session_key": None},
            None,
        ]
        sent = []
        worker = NotificationWorker(client, _relay(_ok_handler(sent)), "runner-1")

        assert await worker.run_cycle() == 0
        assert sent == []
        client.mark_attempt_failed.assert_awaited_once_with(
            "n1", "Agent has no session key: a1"
        )

    @pytest.mark.asyncio
    async def test_relay_failure_records_error(self):
        client = _mock_client()
        client.claim_notification.side_effect = [NOTIFICATION_CLAIM, None]
        worker = NotificationWorker(client, _relay(_failing_handler), "runner-1")

        assert await worker.run_cycle() == 0
        client.mark_delivered.assert_not_awaited()
        notification_id, error = client.mark_attempt_failed.await_args.args
        assert notification_id == "n1"
        assert "502" in error

    @pytest.mark.asyncio
    async def test_long_content_is_trimmed(self):
        client = _mock_client()
        client.claim_notification.side_effect = [
            {**NOTIFICATION_CLAIM, "content": "x" * 500},
            None,
        ]
        sent = []
        worker = NotificationWorker(client, _relay(_ok_handler(sent)), "runner-1")

        await worker.run_cycle()
        assert len(sent[0]["message"]) == 320
        assert sent[0]["message"].endswith("...")

    @pytest.mark.asyncio
    async def test_same_notification_not_retried_in_one_cycle(self):
        client = _mock_client()
        client.claim_notification.side_effect = [NOTIFICATION_CLAIM, NOTIFICATION_CLAIM]
        worker = NotificationWorker(client, _relay(_failing_handler), "runner-1")

        assert await worker.run_cycle() == 0
        assert client.claim_notification.await_count == 2
        client.mark_attempt_failed.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failures_released_after_batch(self):
        client = _mock_client()
        order = []
        client.claim_notification.side_effect = [
            {**NOTIFICATION_CLAIM, "notification_id": "bad", "target_session_key": None},
            NOTIFICATION_CLAIM,
            None,
        ]
        client.mark_delivered.side_effect = lambda nid: order.append(("delivered", nid))
        client.mark_attempt_failed.side_effect = lambda nid, err: order.append(("failed", nid))
        worker = NotificationWorker(client, _relay(_ok_handler([])), "runner-1")

        assert await worker.run_cycle() == 1
        assert order == [("delivered", "n1"), ("failed", "bad")]

    @pytest.mark.asyncio
    async def test_disabled_delivery_skips_everything(self):
        client = _mock_client(notification_delivery_enabled=False)
        worker = NotificationWorker(client, _relay(_ok_handler([])), "runner-1")

        assert await worker.run_cycle() == 0
        client.acquire_lease.assert_not_awaited()
        client.claim_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_follower_does_not_claim(self):
        client = _mock_client()
        client.acquire_lease.return_value = {"acquired": False, "owner": "other", "expires_at": 9}
        worker = NotificationWorker(client, _relay(_ok_handler([])), "runner-1")

        assert await worker.run_cycle() == 0
        client.claim_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_run_once_releases_lease(self):
        client = _mock_client()
        client.claim_notification.return_value = None
        worker = NotificationWorker(client, _relay(_ok_handler([])), "runner-1")

        await worker.run(run_once=True)
        client.release_lease.assert_awaited_once_with(WATCHER_LEASE_KEY, "runner-1")

    @pytest.mark.asyncio
    async def test_config_refresh_keeps_previous_on_error(self):
        client = _mock_client(notification_batch_size=3)
        worker = NotificationWorker(client, _relay(_ok_handler([])), "runner-1", refresh_ms=0)

        assert (await worker.refresh_config())["notification_batch_size"] == 3
        client.get_automation_config.side_effect = httpx.ConnectError("down")
        assert (await worker.refresh_config())["notification_batch_size"] == 3

    @pytest.mark.asyncio
    async def test_config_refresh_is_cached(self):
        client = _mock_client()
        worker = NotificationWorker(client, _relay(_ok_handler([])), "runner-1")

        await worker.refresh_config()
        await worker.refresh_config()
        assert client.get_automation_config.await_count == 1
        await worker.refresh_config(force=True)
        assert client.get_automation_config.await_count == 2


@pytest.fixture
def temp_store_path():
    """Create a temporary directory for test storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def manager(temp_store_path, monkeypatch):
    store = FileMissionControlStore(temp_store_path)
    manager = MissionControlManager(store)

    import mission_control.manager as manager_module
    import mission_control.store as store_module

    monkeypatch.setattr(store_module, "_store_instance", store)
    monkeypatch.setattr(manager_module, "_manager_instance", manager)
    return manager


def _api_client():
    app = FastAPI()
    mount_routers(app)
    return MissionControlClient("http://testserver", transport=httpx.ASGITransport(app=app))


class TestNotificationWorkerQueue:
    """Worker against the real claim queue."""

    @pytest.mark.asyncio
    async def test_failing_notification_does_not_starve_older_ones(self, manager):
        good = await manager.create_agent(name="Good", role="Writer", session_key="agent:good:main")
        bad = await manager.create_agent(name="Bad", role="Writer", session_key="agent:bad:main")
        older = await manager.notifications.create_notification(good.id, "Older update")
        newest = await manager.notifications.create_notification(bad.id, "Newest update")

        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if body["session_key"] == "agent:bad:main":
                return httpx.Response(502, text="session gone")
            sent.append(body)
            return httpx.Response(200, json={})

        worker = NotificationWorker(_api_client(), _relay(handler), "runner-1")

        assert await worker.run_cycle() == 1
        assert [body["notification_id"] for body in sent] == [older.id]

        delivered = await manager.notifications.get_notification(older.id)
        assert delivered.delivered is True

        failed = await manager.notifications.get_notification(newest.id)
        assert failed.delivered is False
        assert failed.attempts == 1
        assert failed.claimed_at is None
        assert "502" in failed.error

    @pytest.mark.asyncio
    async def test_failed_notification_retried_next_cycle(self, manager):
        agent = await manager.create_agent(name="Bad", role="Writer", session_key="agent:bad:main")
        notification = await manager.notifications.create_notification(agent.id, "Ping")

        worker = NotificationWorker(_api_client(), _relay(_failing_handler), "runner-1")

        await worker.run_cycle()
        await worker.run_cycle()
        stored = await manager.notifications.get_notification(notification.id)
        assert stored.attempts == 2


# ============================================================================
# Dispatch worker
# ============================================================================


def _probe_values(client, key):
    return [c.args[1] for c in client.set_setting.await_args_list if c.args[0] == key]


class TestDispatchWorker:
    @pytest.mark.asyncio
    async def test_dispatch_success(self):
        client = _mock_client()
        client.claim_dispatch.return_value = DISPATCH_CLAIM
        sent = []
        worker = DispatchWorker(client, _relay(_ok_handler(sent)), "runner-1")

        assert await worker.run_cycle() == 1
        assert sent[0]["dispatch_id"] == "d1"
        assert sent[0]["session_key"] == "agent:developer:main"
        assert sent[0]["prompt"] == "Go"
        client.complete_dispatch.assert_awaited_once_with(
            "d1", run_id="run-42", result_preview="On it"
        )

        [started] = _probe_values(client, PROBE_LAST_DISPATCH_STARTED_KEY)
        assert started["task_title"] == "Build feature"
        assert started["runner"] == "runner-1"

        [result] = _probe_values(client, PROBE_LAST_DISPATCH_RESULT_KEY)
        assert result["status"] == "success"
        assert result["run_id"] == "run-42"
        assert result["error"] is None

    @pytest.mark.asyncio
    async def test_dispatch_default_preview(self):
        client = _mock_client()
        client.claim_dispatch.return_value = DISPATCH_CLAIM
        worker = DispatchWorker(client, _relay(lambda r: httpx.Response(204)), "runner-1")

        await worker.run_cycle()
        client.complete_dispatch.assert_awaited_once_with(
            "d1", run_id=None, result_preview="Runner accepted the dispatch."
        )

    @pytest.mark.asyncio
    async def test_dispatch_failure(self):
        client = _mock_client()
        client.claim_dispatch.return_value = DISPATCH_CLAIM
        worker = DispatchWorker(client, _relay(_failing_handler), "runner-1")

        assert await worker.run_cycle() == 1
        client.complete_dispatch.assert_not_awaited()
        dispatch_id, error = client.fail_dispatch.await_args.args
        assert dispatch_id == "d1"
        assert "502" in error

        [result] = _probe_values(client, PROBE_LAST_DISPATCH_RESULT_KEY)
        assert result["status"] == "failed"
        assert "502" in result["error"]

    @pytest.mark.asyncio
    async def test_nothing_to_claim(self):
        client = _mock_client()
        client.claim_dispatch.return_value = None
        worker = DispatchWorker(client, _relay(_ok_handler([])), "runner-1")

        assert await worker.run_cycle() == 0
        client.set_setting.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_auto_dispatch_disabled(self):
        client = _mock_client(auto_dispatch_enabled=False)
        worker = DispatchWorker(client, _relay(_ok_handler([])), "runner-1")

        assert await worker.run_cycle() == 0
        client.claim_dispatch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_loop_survives_cycle_errors(self):
        client = _mock_client()
        client.claim_dispatch.side_effect = httpx.ConnectError("down")
        worker = DispatchWorker(client, _relay(_ok_handler([])), "runner-1")

        await worker.run(run_once=True)
        client.claim_dispatch.assert_awaited_once()

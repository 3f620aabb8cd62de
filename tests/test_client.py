# Tests for MissionControlClient against the in-process API
# Created: 2026-09-19

import tempfile
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI

from mission_control import FileMissionControlStore, MissionControlManager
from mission_control.api import mount_routers
from mission_control.client import SECRET_HEADER, MissionControlClient
from mission_control.config import Settings
from mission_control.kv import PROBE_LAST_REPORT_CHAT_KEY, WATCHER_LEASE_KEY


@pytest.fixture
def temp_store_path():
    """Create a temporary directory for test storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def manager(temp_store_path, monkeypatch):
    store = FileMissionControlStore(temp_store_path)
    manager = MissionControlManager(store)

    import mission_control.config as config_module
    import mission_control.manager as manager_module
    import mission_control.store as store_module

    monkeypatch.setattr(store_module, "_store_instance", store)
    monkeypatch.setattr(manager_module, "_manager_instance", manager)
    monkeypatch.setattr(
        config_module, "get_settings", lambda: Settings(webhook_secret="s3cret")
    )
    return manager


@pytest.fixture
def client(manager):
    app = FastAPI()
    mount_routers(app)
    return MissionControlClient(
        "http://testserver", secret="s3cret", transport=httpx.ASGITransport(app=app)
    )


class TestAgents:
    @pytest.mark.asyncio
    async def test_seed_and_lookup(self, client):
        assert await client.seed() == {"projects": 1, "agents": 5}
        agents = await client.list_agents()
        assert len(agents) == 5

        name = agents[0]["name"]
        assert (await client.get_agent_by_name(name))["id"] == agents[0]["id"]
        assert await client.get_agent_by_name("Nobody") is None

    @pytest.mark.asyncio
    async def test_heartbeat_unknown_agent_raises(self, client):
        with pytest.raises(httpx.HTTPStatusError):
            await client.heartbeat("Nobody", "active", "hi")


class TestQueues:
    @pytest.mark.asyncio
    async def test_notification_roundtrip(self, client, manager):
        agent = await manager.create_agent(
            name="Forge", role="Developer", session_key="agent:developer:main"
        )
        await client.send_message("general", "@forge ping")

        claim = await client.claim_notification("runner-1", 30000)
        assert claim["target_agent_id"] == agent.id
        await client.mark_attempt_failed(claim["notification_id"], "gateway down")
        claim = await client.claim_notification("runner-1")
        await client.mark_delivered(claim["notification_id"])
        assert await client.claim_notification("runner-1") is None

    @pytest.mark.asyncio
    async def test_dispatch_roundtrip(self, client, manager):
        task = await manager.create_task(title="Ship it")
        dispatch_id = await client.enqueue_dispatch(task.id, "user", idempotency_key="k")
        assert await client.enqueue_dispatch(task.id, "user", idempotency_key="k") == dispatch_id

        claim = await client.claim_dispatch("runner-1")
        assert claim["dispatch_id"] == dispatch_id
        await client.complete_dispatch(dispatch_id, run_id="run-1", result_preview="done")

        dispatch = await manager.dispatches.get_dispatch(dispatch_id)
        assert dispatch.run_id == "run-1"
        assert await client.claim_dispatch("runner-1") is None


class TestSettings:
    @pytest.mark.asyncio
    async def test_settings_and_leases(self, client, manager):
        config = await client.get_automation_config()
        assert config["auto_dispatch_enabled"] is True

        await client.set_setting(PROBE_LAST_REPORT_CHAT_KEY, {"agent": "Forge"})
        assert await manager.settings.get_value(PROBE_LAST_REPORT_CHAT_KEY) == {"agent": "Forge"}

        lease = await client.acquire_lease(WATCHER_LEASE_KEY, "w1", 5000)
        assert lease["acquired"] is True
        assert await client.release_lease(WATCHER_LEASE_KEY, "w2") is False
        assert await client.release_lease(WATCHER_LEASE_KEY, "w1") is True

        overview = await client.ops_overview()
        assert overview["reports"]["last_report_chat"] == {"agent": "Forge"}


class TestRunnerEvents:
    @pytest.mark.asyncio
    async def test_post_event_sends_secret(self, client, manager):
        result = await client.post_event({"run_id": "run-1", "action": "start", "prompt": "Go"})
        assert result["ok"] is True
        assert (await manager.get_task(result["task_id"])).title == "Go"

    @pytest.mark.asyncio
    async def test_post_event_wrong_secret(self, client):
        client.secret = "wrong"
        with pytest.raises(httpx.HTTPStatusError) as exc:
            await client.post_event({"run_id": "run-1", "action": "start"})
        assert exc.value.response.status_code == 401

    @pytest.mark.asyncio
    async def test_secret_header_name(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.headers)
            return httpx.Response(200, json={"ok": True, "task_id": None})

        client = MissionControlClient(
            "http://mc.local", secret="abc", transport=httpx.MockTransport(handler)
        )
        await client.post_event({"run_id": "r", "action": "progress"})
        assert seen[SECRET_HEADER] == "abc"

# Tests for the operations overview
# Created: 2026-09-19

import tempfile
from pathlib import Path

import pytest

from mission_control.kv import (
    PROBE_LAST_DISPATCH_RESULT_KEY,
    PROBE_LAST_REPORT_CHAT_KEY,
    WATCHER_LEASE_KEY,
)
from mission_control.manager import MissionControlManager
from mission_control.models import now_ms
from mission_control.ops import RECENT_WINDOW_MS
from mission_control.store import FileMissionControlStore


@pytest.fixture
def temp_store_path():
    """Create a temporary directory for test storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def manager(temp_store_path):
    return MissionControlManager(FileMissionControlStore(temp_store_path))


class TestOverview:
    @pytest.mark.asyncio
    async def test_empty_overview(self, manager):
        overview = await manager.ops.overview()
        assert overview["agents"] == {"total": 0, "active": 0, "blocked": 0, "idle": 0}
        assert overview["dispatch"]["pending"] == 0
        assert overview["dispatch"]["recent_24h"] == {"completed": 0, "failed": 0, "cancelled": 0}
        assert overview["dispatch"]["last_started"] is None
        assert overview["notifications"] == {"undelivered": 0}
        assert overview["reports"] == {"last_report_chat": None}
        assert overview["watcher"] == {
            "owner": None,
            "expires_at": 0,
            "is_healthy": False,
            "ms_until_expiry": 0,
        }

    @pytest.mark.asyncio
    async def test_agent_counts(self, manager):
        await manager.create_agent(name="A", role="r", status="active")
        await manager.create_agent(name="B", role="r", status="blocked")
        await manager.create_agent(name="C", role="r", status="idle")

        agents = (await manager.ops.overview())["agents"]
        assert agents == {"total": 3, "active": 1, "blocked": 1, "idle": 1}

    @pytest.mark.asyncio
    async def test_dispatch_counts(self, manager):
        task = await manager.create_task(title="x")
        svc = manager.dispatches
        await svc.enqueue(task.id, "user")
        running = await svc.enqueue(task.id, "user")
        await svc.set_status(running, "running")
        done = await svc.enqueue(task.id, "user")
        await svc.complete(done)
        failed = await svc.enqueue(task.id, "user")
        await svc.fail(failed, "boom")

        old = await svc.enqueue(task.id, "user")
        await svc.complete(old)
        stale = await svc.get_dispatch(old)
        stale.finished_at = now_ms() - RECENT_WINDOW_MS - 1000
        await manager.store.save("task_dispatches", stale)

        dispatch = (await manager.ops.overview())["dispatch"]
        assert dispatch["pending"] == 1
        assert dispatch["running"] == 1
        assert dispatch["recent_24h"] == {"completed": 1, "failed": 1, "cancelled": 0}

    @pytest.mark.asyncio
    async def test_probes_and_notifications(self, manager):
        await manager.settings.set_setting(PROBE_LAST_DISPATCH_RESULT_KEY, {"status": "success"})
        await manager.settings.set_setting(PROBE_LAST_REPORT_CHAT_KEY, {"agent": "Forge"})
        await manager.notifications.create_notification("a1", "one")
        delivered = await manager.notifications.create_notification("a1", "two")
        await manager.notifications.mark_delivered(delivered.id)

        overview = await manager.ops.overview()
        assert overview["dispatch"]["last_result"] == {"status": "success"}
        assert overview["reports"]["last_report_chat"] == {"agent": "Forge"}
        assert overview["notifications"]["undelivered"] == 1

    @pytest.mark.asyncio
    async def test_watcher_health(self, manager):
        await manager.settings.acquire_lease(WATCHER_LEASE_KEY, "worker-1", 60000)
        watcher = (await manager.ops.overview())["watcher"]
        assert watcher["owner"] == "worker-1"
        assert watcher["is_healthy"] is True
        assert 0 < watcher["ms_until_expiry"] <= 60000

        await manager.settings.set_setting(
            WATCHER_LEASE_KEY, {"owner": "worker-1", "expires_at": now_ms() - 5}
        )
        watcher = (await manager.ops.overview())["watcher"]
        assert watcher["is_healthy"] is False
        assert watcher["ms_until_expiry"] == 0

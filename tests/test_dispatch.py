# Tests for the task dispatch queue
# Created: 2026-09-19

import tempfile
from pathlib import Path

import pytest

from mission_control.errors import NotFoundError
from mission_control.manager import MissionControlManager
from mission_control.models import ActivityType, DispatchStatus, TaskStatus
from mission_control.store import FileMissionControlStore


@pytest.fixture
def temp_store_path():
    """Create a temporary directory for test storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def manager(temp_store_path):
    return MissionControlManager(FileMissionControlStore(temp_store_path))


async def _assigned_task(manager):
    agent = await manager.create_agent(
        name="Forge", role="Developer", session_key="agent:developer:main"
    )
    task = await manager.create_task(title="Build feature", assignee_ids=[agent.id])
    return agent, task


class TestEnqueue:
    @pytest.mark.asyncio
    async def test_enqueue_and_pending(self, manager):
        task = await manager.create_task(title="x")
        assert await manager.dispatches.has_pending() is False
        dispatch_id = await manager.dispatches.enqueue(task.id, requested_by="user")
        assert await manager.dispatches.has_pending() is True

        dispatch = await manager.dispatches.get_dispatch(dispatch_id)
        assert dispatch.status == DispatchStatus.PENDING
        assert dispatch.requested_by == "user"

    @pytest.mark.asyncio
    async def test_idempotency_key(self, manager):
        task = await manager.create_task(title="x")
        first = await manager.dispatches.enqueue(task.id, "user", idempotency_key="k1")
        second = await manager.dispatches.enqueue(task.id, "user", idempotency_key="k1")
        third = await manager.dispatches.enqueue(task.id, "user", idempotency_key="k2")
        assert first == second
        assert third != first
        assert len(await manager.dispatches.list_for_task(task.id)) == 2


class TestClaim:
    @pytest.mark.asyncio
    async def test_claim_next_starts_dispatch(self, manager):
        agent, task = await _assigned_task(manager)
        dispatch_id = await manager.dispatches.enqueue(task.id, "user", prompt="Go")

        claim = await manager.dispatches.claim_next("runner-1")
        assert claim["dispatch_id"] == dispatch_id
        assert claim["target_agent_id"] == agent.id
        assert claim["target_session_key"] == "agent:developer:main"
        assert claim["task_title"] == "Build feature"
        assert claim["prompt"] == "Go"

        dispatch = await manager.dispatches.get_dispatch(dispatch_id)
        assert dispatch.status == DispatchStatus.RUNNING
        assert dispatch.runner == "runner-1"

        updated = await manager.get_task(task.id)
        assert updated.status == TaskStatus.IN_PROGRESS

        activity = (await manager.activities.for_task(task.id))[0]
        assert activity.type == ActivityType.DISPATCH_STARTED
        assert activity.message == "Dispatch started: Forge"

        assert await manager.dispatches.claim_next("runner-2") is None

    @pytest.mark.asyncio
    async def test_claim_does_not_move_review_task(self, manager):
        _, task = await _assigned_task(manager)
        await manager.update_task(task.id, status="review")
        await manager.dispatches.enqueue(task.id, "user")
        await manager.dispatches.claim_next("runner-1")
        assert (await manager.get_task(task.id)).status == TaskStatus.REVIEW

    @pytest.mark.asyncio
    async def test_claim_for_task(self, manager):
        a = await manager.create_task(title="a")
        b = await manager.create_task(title="b")
        await manager.dispatches.enqueue(a.id, "user")
        b_dispatch = await manager.dispatches.enqueue(b.id, "user")

        claim = await manager.dispatches.claim_for_task("runner-1", b.id)
        assert claim["dispatch_id"] == b_dispatch
        assert await manager.dispatches.claim_for_task("runner-1", b.id) is None


class TestResults:
    @pytest.mark.asyncio
    async def test_complete(self, manager):
        _, task = await _assigned_task(manager)
        dispatch_id = await manager.dispatches.enqueue(task.id, "user")
        await manager.dispatches.claim_next("runner-1")
        await manager.dispatches.complete(dispatch_id, run_id="run-1", result_preview="ok")

        dispatch = await manager.dispatches.get_dispatch(dispatch_id)
        assert dispatch.status == DispatchStatus.COMPLETED
        assert dispatch.run_id == "run-1"
        assert dispatch.finished_at is not None

    @pytest.mark.asyncio
    async def test_fail_truncates_error(self, manager):
        _, task = await _assigned_task(manager)
        dispatch_id = await manager.dispatches.enqueue(task.id, "user")
        await manager.dispatches.fail(dispatch_id, "e" * 6000)

        dispatch = await manager.dispatches.get_dispatch(dispatch_id)
        assert dispatch.status == DispatchStatus.FAILED
        assert len(dispatch.error) == 5000

        activity = (await manager.activities.for_task(task.id))[0]
        assert activity.message == "Dispatch failed"
        assert len(activity.metadata["error"]) == 500

    @pytest.mark.asyncio
    async def test_missing_ids(self, manager):
        await manager.dispatches.complete("missing")
        await manager.dispatches.fail("missing", "boom")
        with pytest.raises(NotFoundError):
            await manager.dispatches.cancel("missing")
        with pytest.raises(NotFoundError):
            await manager.dispatches.set_status("missing", "running")

    @pytest.mark.asyncio
    async def test_cancel_for_task(self, manager):
        _, task = await _assigned_task(manager)
        running = await manager.dispatches.enqueue(task.id, "user")
        await manager.dispatches.claim_next("runner-1")
        pending = await manager.dispatches.enqueue(task.id, "user")

        result = await manager.dispatches.cancel_for_task(task.id)
        assert result == {"cancelled": 2}
        for dispatch_id in (running, pending):
            dispatch = await manager.dispatches.get_dispatch(dispatch_id)
            assert dispatch.status == DispatchStatus.CANCELLED
            assert dispatch.error.startswith("Stopped manually at ")

        activity = (await manager.activities.for_task(task.id))[0]
        assert activity.message == "Cancelled 2 active dispatch lane(s)"
        assert await manager.dispatches.cancel_for_task(task.id) == {"cancelled": 0}

    @pytest.mark.asyncio
    async def test_cancel_for_task_with_reason(self, manager):
        task = await manager.create_task(title="x")
        dispatch_id = await manager.dispatches.enqueue(task.id, "user")
        await manager.dispatches.cancel_for_task(task.id, "Superseded")
        assert (await manager.dispatches.get_dispatch(dispatch_id)).error == "Superseded"


class TestDispatchState:
    @pytest.mark.asyncio
    async def test_dispatch_states(self, manager):
        a = await manager.create_task(title="a")
        b = await manager.create_task(title="b")
        a_dispatch = await manager.dispatches.enqueue(a.id, "user")
        b_dispatch = await manager.dispatches.enqueue(b.id, "user")
        await manager.dispatches.complete(b_dispatch)

        state = await manager.get_dispatch_state(a.id)
        assert state["id"] == a_dispatch
        assert state["status"] == "pending"
        assert await manager.get_dispatch_state(b.id) is None

        states = await manager.list_dispatch_states()
        assert [s["task_id"] for s in states] == [a.id]

    @pytest.mark.asyncio
    async def test_set_status(self, manager):
        task = await manager.create_task(title="x")
        dispatch_id = await manager.dispatches.enqueue(task.id, "user")
        await manager.dispatches.set_status(dispatch_id, "running")
        assert (await manager.dispatches.get_dispatch(dispatch_id)).status == DispatchStatus.RUNNING

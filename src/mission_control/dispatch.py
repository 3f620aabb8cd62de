"""Task dispatch queue for Mission Control.

Created: 2026-09-15

A dispatch records the hand-off of a task to an external runner:

    pending -> running -> completed | failed | cancelled

Claiming a dispatch also moves its task into ``in_progress``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from mission_control.activities import ActivityService
from mission_control.errors import NotFoundError
from mission_control.models import (
    ActivityType,
    DispatchStatus,
    TaskDispatch,
    TaskStatus,
    clamp,
    now_ms,
)
from mission_control.store import FileMissionControlStore, get_mission_control_store

logger = logging.getLogger(__name__)

COLLECTION = "task_dispatches"

ACTIVE_STATUSES = (DispatchStatus.PENDING, DispatchStatus.RUNNING)
MAX_ERROR_CHARS = 5000
MAX_ACTIVITY_ERROR_CHARS = 500


def _state_summary(dispatch: TaskDispatch) -> dict[str, Any]:
    return {
        "id": dispatch.id,
        "task_id": dispatch.task_id,
        "status": dispatch.status.value,
        "requested_at": dispatch.requested_at,
        "started_at": dispatch.started_at,
        "target_agent_id": dispatch.target_agent_id,
    }


class DispatchService:
    """Enqueue, claim and settle task dispatches."""

    def __init__(
        self,
        store: FileMissionControlStore | None = None,
        activities: ActivityService | None = None,
    ):
        self._store = store or get_mission_control_store()
        self._activities = activities or ActivityService(self._store)

    # =========================================================================
    # Queries
    # =========================================================================

    async def has_pending(self) -> bool:
        rows = await self._store.rows(COLLECTION)
        return any(d.status == DispatchStatus.PENDING for d in rows)

    async def get_dispatch(self, dispatch_id: str) -> TaskDispatch | None:
        return await self._store.get(COLLECTION, dispatch_id)

    async def list_for_task(self, task_id: str, limit: int = 20) -> list[TaskDispatch]:
        """Dispatches of a task, newest first."""
        take = clamp(limit, 1, 200)
        rows = await self._store.rows(COLLECTION)
        return [d for d in reversed(rows) if d.task_id == task_id][:take]

    async def get_dispatch_state(self, task_id: str) -> dict[str, Any] | None:
        """The most recently requested active dispatch of a task."""
        rows = await self._store.rows(COLLECTION)
        active = [d for d in rows if d.task_id == task_id and d.status in ACTIVE_STATUSES]
        if not active:
            return None
        latest = max(active, key=lambda d: d.requested_at)
        return _state_summary(latest)

    async def list_dispatch_states(self) -> list[dict[str, Any]]:
        """One active dispatch summary per task, latest request wins."""
        rows = await self._store.rows(COLLECTION)
        active = [d for d in rows if d.status in ACTIVE_STATUSES]
        active.sort(key=lambda d: d.requested_at, reverse=True)

        seen: set[str] = set()
        states = []
        for dispatch in active:
            if dispatch.task_id in seen:
                continue
            seen.add(dispatch.task_id)
            states.append(_state_summary(dispatch))
        return states

    # =========================================================================
    # Mutations
    # =========================================================================

    async def enqueue(
        self,
        task_id: str,
        requested_by: str,
        target_agent_id: str | None = None,
        prompt: str | None = None,
        idempotency_key: str | None = None,
    ) -> str:
        """Queue a dispatch and return its id.

        Reusing an idempotency key returns the id of the first dispatch.
        """
        async with self._store.lock:
            if idempotency_key:
                existing = await self._store.find_first(
                    COLLECTION, lambda d: d.idempotency_key == idempotency_key
                )
                if existing:
                    return existing.id

            dispatch = TaskDispatch(
                task_id=task_id,
                target_agent_id=target_agent_id,
                requested_by=requested_by,
                prompt=prompt,
                idempotency_key=idempotency_key,
            )
            await self._store.insert(COLLECTION, dispatch)

        logger.info(f"Dispatch {dispatch.id} queued for task {task_id} by {requested_by}")
        return dispatch.id

    async def claim_next(self, runner_id: str) -> dict[str, Any] | None:
        """Claim the oldest pending dispatch."""
        async with self._store.lock:
            rows = await self._store.rows(COLLECTION)
            pending = [d for d in rows if d.status == DispatchStatus.PENDING]
            if not pending:
                return None
            chosen = min(pending, key=lambda d: d.requested_at)
            return await self._start(chosen, runner_id)

    async def claim_for_task(self, runner_id: str, task_id: str) -> dict[str, Any] | None:
        """Claim the oldest pending dispatch of one task."""
        async with self._store.lock:
            rows = await self._store.rows(COLLECTION)
            pending = [
                d for d in rows if d.task_id == task_id and d.status == DispatchStatus.PENDING
            ]
            if not pending:
                return None
            chosen = min(pending, key=lambda d: d.requested_at)
            return await self._start(chosen, runner_id)

    async def _start(self, dispatch: TaskDispatch, runner_id: str) -> dict[str, Any]:
        """Mark ``dispatch`` running. Caller holds the store lock."""
        now = now_ms()
        dispatch.status = DispatchStatus.RUNNING
        dispatch.runner = runner_id
        dispatch.started_at = now
        await self._store.save(COLLECTION, dispatch)

        task = await self._store.get("tasks", dispatch.task_id)
        if task and task.status in (TaskStatus.INBOX, TaskStatus.ASSIGNED):
            task.status = TaskStatus.IN_PROGRESS
            task.started_at = task.started_at or now
            await self._store.save("tasks", task)

        target_agent_id = dispatch.target_agent_id
        if target_agent_id is None and task and task.assignee_ids:
            target_agent_id = task.assignee_ids[0]
        agent = await self._store.get("agents", target_agent_id)

        await self._activities.log(
            ActivityType.DISPATCH_STARTED,
            f"Dispatch started: {agent.name}" if agent else "Dispatch started",
            task_id=dispatch.task_id,
            agent_id=target_agent_id,
        )
        logger.info(f"Runner {runner_id} claimed dispatch {dispatch.id}")

        return {
            "dispatch_id": dispatch.id,
            "task_id": dispatch.task_id,
            "prompt": dispatch.prompt,
            "target_agent_id": target_agent_id,
            "target_session_key": agent.session_key if agent else None,
            "task_title": task.title if task else None,
            "task_description": task.description if task else None,
        }

    async def complete(
        self,
        dispatch_id: str,
        run_id: str | None = None,
        result_preview: str | None = None,
    ) -> None:
        """Mark a dispatch completed. Unknown ids are ignored."""
        dispatch = await self._store.get(COLLECTION, dispatch_id)
        if dispatch is None:
            return
        dispatch.status = DispatchStatus.COMPLETED
        dispatch.run_id = run_id
        dispatch.result_preview = result_preview
        dispatch.finished_at = now_ms()
        dispatch.error = None
        await self._store.save(COLLECTION, dispatch)

        await self._activities.log(
            ActivityType.DISPATCH_COMPLETED,
            "Dispatch completed",
            task_id=dispatch.task_id,
            agent_id=dispatch.target_agent_id,
        )

    async def fail(self, dispatch_id: str, error: str) -> None:
        """Mark a dispatch failed. Unknown ids are ignored."""
        dispatch = await self._store.get(COLLECTION, dispatch_id)
        if dispatch is None:
            return
        dispatch.status = DispatchStatus.FAILED
        dispatch.error = error[:MAX_ERROR_CHARS]
        dispatch.finished_at = now_ms()
        await self._store.save(COLLECTION, dispatch)

        await self._activities.log(
            ActivityType.DISPATCH_COMPLETED,
            "Dispatch failed",
            task_id=dispatch.task_id,
            agent_id=dispatch.target_agent_id,
            metadata={"error": error[:MAX_ACTIVITY_ERROR_CHARS]},
        )
        logger.warning(f"Dispatch {dispatch_id} failed: {error[:200]}")

    async def _require(self, dispatch_id: str) -> TaskDispatch:
        dispatch = await self._store.get(COLLECTION, dispatch_id)
        if dispatch is None:
            raise NotFoundError("Dispatch", dispatch_id)
        return dispatch

    async def cancel(self, dispatch_id: str) -> None:
        dispatch = await self._require(dispatch_id)
        dispatch.status = DispatchStatus.CANCELLED
        dispatch.finished_at = now_ms()
        await self._store.save(COLLECTION, dispatch)

    async def cancel_for_task(self, task_id: str, reason: str | None = None) -> dict[str, int]:
        """Cancel every pending or running dispatch of a task."""
        now = now_ms()
        rows = await self._store.rows(COLLECTION)
        active = [d for d in rows if d.task_id == task_id and d.status in ACTIVE_STATUSES]
        if not active:
            return {"cancelled": 0}

        reason = (reason or "").strip()
        if not reason:
            stamp = datetime.fromtimestamp(now / 1000, tz=timezone.utc)
            reason = f"Stopped manually at {stamp.isoformat(timespec='milliseconds')}"

        for dispatch in active:
            dispatch.status = DispatchStatus.CANCELLED
            dispatch.error = reason
            dispatch.finished_at = now
            await self._store.save(COLLECTION, dispatch)

        await self._activities.log(
            ActivityType.DISPATCH_COMPLETED,
            f"Cancelled {len(active)} active dispatch lane(s)",
            task_id=task_id,
        )
        logger.info(f"Cancelled {len(active)} dispatch(es) for task {task_id}")
        return {"cancelled": len(active)}

    async def set_status(self, dispatch_id: str, status: DispatchStatus | str) -> None:
        dispatch = await self._require(dispatch_id)
        dispatch.status = DispatchStatus(status)
        await self._store.save(COLLECTION, dispatch)

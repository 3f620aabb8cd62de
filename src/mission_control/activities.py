"""Activity feed for Mission Control.

Created: 2026-09-15
"""

from __future__ import annotations

import logging
from typing import Any

from mission_control.models import Activity, ActivityType, clamp, now_ms
from mission_control.store import FileMissionControlStore, get_mission_control_store

logger = logging.getLogger(__name__)

COLLECTION = "activities"


class ActivityService:
    """Append to and query the activity feed."""

    def __init__(self, store: FileMissionControlStore | None = None):
        self._store = store or get_mission_control_store()

    async def _newest_first(self) -> list[Activity]:
        return list(reversed(await self._store.rows(COLLECTION)))

    async def recent(self, limit: int = 100) -> list[Activity]:
        """The newest ``limit`` activities, returned oldest first."""
        take = clamp(limit, 1, 500)
        newest = (await self._newest_first())[:take]
        newest.reverse()
        return newest

    async def for_task(self, task_id: str, limit: int = 50) -> list[Activity]:
        rows = [a for a in await self._newest_first() if a.task_id == task_id]
        return rows[: max(0, limit)]

    async def for_agent(self, agent_id: str, limit: int = 50) -> list[Activity]:
        rows = [a for a in await self._newest_first() if a.agent_id == agent_id]
        return rows[: max(0, limit)]

    async def list_filtered(
        self,
        limit: int = 80,
        type: ActivityType | str | None = None,
        agent_id: str | None = None,
    ) -> list[Activity]:
        """Take the newest ``limit`` activities, then filter them."""
        take = clamp(limit, 1, 200)
        rows = (await self._newest_first())[:take]
        if type:
            wanted = ActivityType(type)
            rows = [a for a in rows if a.type == wanted]
        if agent_id:
            rows = [a for a in rows if a.agent_id == agent_id]
        return rows

    async def log(
        self,
        type: ActivityType | str,
        message: str,
        task_id: str | None = None,
        agent_id: str | None = None,
        project_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        created_at: int | None = None,
    ) -> Activity:
        """Append an activity to the feed."""
        activity = Activity(
            type=ActivityType(type),
            message=message.strip(),
            task_id=task_id,
            agent_id=agent_id,
            project_id=project_id,
            metadata=metadata,
            created_at=created_at if created_at is not None else now_ms(),
        )
        await self._store.insert(COLLECTION, activity)
        logger.debug(f"Activity: [{activity.type.value}] {activity.message}")
        return activity

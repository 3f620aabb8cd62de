# Activities router: the activity feed.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from mission_control.manager import get_mission_control_manager
from mission_control.models import ActivityType

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Activities"])


class LogActivityRequest(BaseModel):
    type: ActivityType
    message: str = Field(..., min_length=1)
    task_id: str | None = None
    agent_id: str | None = None
    project_id: str | None = None
    metadata: dict[str, Any] | None = None


@router.get("/activities")
async def list_activities(
    limit: int = Query(80, ge=1, le=200),
    type: ActivityType | None = None,
    agent_id: str | None = None,
) -> dict[str, Any]:
    """Newest activities, filtered after the limit is applied."""
    manager = get_mission_control_manager()
    rows = await manager.activities.list_filtered(limit=limit, type=type, agent_id=agent_id)
    return {"activities": [a.to_dict() for a in rows], "count": len(rows)}


@router.get("/activities/recent")
async def recent_activities(limit: int = Query(100, ge=1, le=500)) -> dict[str, Any]:
    """The newest activities in chronological order."""
    manager = get_mission_control_manager()
    rows = await manager.activities.recent(limit)
    return {"activities": [a.to_dict() for a in rows], "count": len(rows)}


@router.post("/activities")
async def log_activity(request: LogActivityRequest) -> dict[str, Any]:
    manager = get_mission_control_manager()
    activity = await manager.activities.log(**request.model_dump())
    return {"activity": activity.to_dict()}


@router.get("/tasks/{task_id}/activities")
async def activities_for_task(task_id: str, limit: int = Query(50, ge=1)) -> dict[str, Any]:
    manager = get_mission_control_manager()
    rows = await manager.activities.for_task(task_id, limit)
    return {"activities": [a.to_dict() for a in rows], "count": len(rows)}


@router.get("/agents/{agent_id}/activities")
async def activities_for_agent(agent_id: str, limit: int = Query(50, ge=1)) -> dict[str, Any]:
    manager = get_mission_control_manager()
    rows = await manager.activities.for_agent(agent_id, limit)
    return {"activities": [a.to_dict() for a in rows], "count": len(rows)}

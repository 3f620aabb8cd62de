# Subscriptions router: who follows which task thread.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from mission_control.api.schemas.common import IdResponse, OkResponse
from mission_control.api.schemas.tasks import SubscribeRequest, UnsubscribeRequest
from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Subscriptions"])


@router.get("/tasks/{task_id}/subscriptions")
async def list_for_task(task_id: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    subs = await manager.list_subscriptions_for_task(task_id)
    return {"subscriptions": [s.to_dict() for s in subs], "count": len(subs)}


@router.get("/agents/{agent_id}/subscriptions")
async def list_for_agent(agent_id: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    subs = await manager.list_subscriptions_for_agent(agent_id)
    return {"subscriptions": [s.to_dict() for s in subs], "count": len(subs)}


@router.post("/subscriptions", response_model=IdResponse)
async def subscribe(request: SubscribeRequest):
    """Subscribe an agent; repeated calls return the same id."""
    manager = get_mission_control_manager()
    sub_id = await manager.subscribe(request.task_id, request.agent_id, request.reason)
    return IdResponse(id=sub_id)


@router.post("/subscriptions/unsubscribe", response_model=OkResponse)
async def unsubscribe(request: UnsubscribeRequest):
    manager = get_mission_control_manager()
    removed = await manager.unsubscribe(request.task_id, request.agent_id)
    return OkResponse(ok=removed)

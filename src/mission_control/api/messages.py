# Messages router: channel chat and task threads.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Query

from mission_control.api.schemas.messages import SendMessageRequest
from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Messages"])


@router.get("/messages")
async def list_messages(
    channel: str = Query(..., min_length=1),
    limit: int = Query(50, ge=1, le=500),
) -> dict[str, Any]:
    """Newest messages of a channel, oldest first."""
    manager = get_mission_control_manager()
    messages = await manager.list_messages(channel, limit=limit)
    return {"messages": messages, "count": len(messages)}


@router.get("/messages/latest")
async def latest_for_channel(channel: str = Query(..., min_length=1)) -> dict[str, Any]:
    manager = get_mission_control_manager()
    message = await manager.latest_for_channel(channel)
    return {"message": message.to_dict() if message else None}


@router.get("/messages/latest-user")
async def latest_user_for_channel(
    channel: str = Query(..., min_length=1),
    scan_limit: int = Query(80, ge=1, le=200),
) -> dict[str, Any]:
    """Newest message written by the human user."""
    manager = get_mission_control_manager()
    message = await manager.latest_user_for_channel(channel, scan_limit=scan_limit)
    return {"message": message.to_dict() if message else None}


@router.post("/messages")
async def send_message(request: SendMessageRequest) -> dict[str, Any]:
    """Post a message; @mentions and thread subscribers are notified."""
    manager = get_mission_control_manager()
    message = await manager.send_message(
        channel=request.channel,
        content=request.content,
        from_agent_id=request.from_agent_id,
        task_id=request.task_id,
        from_user=request.from_user,
    )
    return {"message": message.to_dict()}

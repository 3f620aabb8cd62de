# Notifications router: the queue and its delivery claims.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from mission_control.api.schemas.common import OkResponse
from mission_control.api.schemas.queue import (
    ClaimNotificationRequest,
    CreateNotificationRequest,
    FailAttemptRequest,
)
from mission_control.errors import NotFoundError
from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notifications"])


@router.get("/notifications/undelivered")
async def get_undelivered(limit: int = Query(100, ge=1, le=200)) -> dict[str, Any]:
    manager = get_mission_control_manager()
    rows = await manager.notifications.get_undelivered(limit)
    return {"notifications": [n.to_dict() for n in rows], "count": len(rows)}


@router.get("/notifications/has-undelivered")
async def has_undelivered() -> dict[str, Any]:
    manager = get_mission_control_manager()
    return {"has_undelivered": await manager.notifications.has_undelivered()}


@router.get("/agents/{agent_id}/notifications")
async def get_for_agent(agent_id: str, include_delivered: bool = False) -> dict[str, Any]:
    manager = get_mission_control_manager()
    rows = await manager.notifications.get_for_agent(agent_id, include_delivered)
    return {"notifications": [n.to_dict() for n in rows], "count": len(rows)}


@router.post("/notifications")
async def create_notification(request: CreateNotificationRequest) -> dict[str, Any]:
    manager = get_mission_control_manager()
    notification = await manager.notifications.create_notification(**request.model_dump())
    return {"notification": notification.to_dict()}


@router.post("/notifications/claim")
async def claim_next(request: ClaimNotificationRequest) -> dict[str, Any]:
    """Claim the next deliverable notification (``claim`` is null when none)."""
    manager = get_mission_control_manager()
    claim = await manager.notifications.claim_next(request.runner_id, request.claim_ttl_ms)
    return {"claim": claim}


@router.post("/notifications/{notification_id}/delivered", response_model=OkResponse)
async def mark_delivered(notification_id: str):
    manager = get_mission_control_manager()
    try:
        await manager.notifications.mark_delivered(notification_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Notification not found")
    return OkResponse()


@router.post("/notifications/{notification_id}/failed", response_model=OkResponse)
async def mark_attempt_failed(notification_id: str, request: FailAttemptRequest):
    manager = get_mission_control_manager()
    try:
        await manager.notifications.mark_attempt_failed(notification_id, request.error)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Notification not found")
    return OkResponse()

# Dispatches router: task hand-offs to runners.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from mission_control.api.schemas.common import IdResponse, OkResponse
from mission_control.api.schemas.queue import (
    CancelForTaskRequest,
    ClaimDispatchRequest,
    CompleteDispatchRequest,
    DispatchStatusRequest,
    EnqueueDispatchRequest,
    FailDispatchRequest,
)
from mission_control.errors import NotFoundError
from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dispatches"])


@router.get("/dispatches/has-pending")
async def has_pending() -> dict[str, Any]:
    manager = get_mission_control_manager()
    return {"has_pending": await manager.dispatches.has_pending()}


@router.post("/dispatches", response_model=IdResponse)
async def enqueue(request: EnqueueDispatchRequest):
    """Queue a dispatch; an already-used idempotency key returns the first id."""
    manager = get_mission_control_manager()
    if not await manager.get_task(request.task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    dispatch_id = await manager.dispatches.enqueue(**request.model_dump())
    return IdResponse(id=dispatch_id)


@router.post("/dispatches/claim")
async def claim(request: ClaimDispatchRequest) -> dict[str, Any]:
    """Claim the oldest pending dispatch, optionally for one task."""
    manager = get_mission_control_manager()
    if request.task_id:
        claimed = await manager.dispatches.claim_for_task(request.runner_id, request.task_id)
    else:
        claimed = await manager.dispatches.claim_next(request.runner_id)
    return {"claim": claimed}


@router.get("/dispatches/{dispatch_id}")
async def get_dispatch(dispatch_id: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    dispatch = await manager.dispatches.get_dispatch(dispatch_id)
    if not dispatch:
        raise HTTPException(status_code=404, detail="Dispatch not found")
    return {"dispatch": dispatch.to_dict()}


@router.post("/dispatches/{dispatch_id}/complete", response_model=OkResponse)
async def complete(dispatch_id: str, request: CompleteDispatchRequest):
    manager = get_mission_control_manager()
    await manager.dispatches.complete(dispatch_id, request.run_id, request.result_preview)
    return OkResponse()


@router.post("/dispatches/{dispatch_id}/fail", response_model=OkResponse)
async def fail(dispatch_id: str, request: FailDispatchRequest):
    manager = get_mission_control_manager()
    await manager.dispatches.fail(dispatch_id, request.error)
    return OkResponse()


@router.post("/dispatches/{dispatch_id}/cancel", response_model=OkResponse)
async def cancel(dispatch_id: str):
    manager = get_mission_control_manager()
    try:
        await manager.dispatches.cancel(dispatch_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Dispatch not found")
    return OkResponse()


@router.put("/dispatches/{dispatch_id}/status", response_model=OkResponse)
async def set_status(dispatch_id: str, request: DispatchStatusRequest):
    manager = get_mission_control_manager()
    try:
        await manager.dispatches.set_status(dispatch_id, request.status)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Dispatch not found")
    return OkResponse()


@router.get("/tasks/{task_id}/dispatches")
async def list_for_task(task_id: str, limit: int = Query(20, ge=1, le=200)) -> dict[str, Any]:
    manager = get_mission_control_manager()
    rows = await manager.dispatches.list_for_task(task_id, limit)
    return {"dispatches": [d.to_dict() for d in rows], "count": len(rows)}


@router.post("/tasks/{task_id}/dispatches/cancel")
async def cancel_for_task(task_id: str, request: CancelForTaskRequest) -> dict[str, Any]:
    """Stop every active dispatch of a task."""
    manager = get_mission_control_manager()
    return await manager.dispatches.cancel_for_task(task_id, request.reason)

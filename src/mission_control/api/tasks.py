# Tasks router: kanban CRUD plus planning and dispatch state.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from mission_control.api.schemas.common import OkResponse
from mission_control.api.schemas.tasks import CreateTaskRequest, UpdateTaskRequest
from mission_control.errors import NotFoundError
from mission_control.manager import get_mission_control_manager
from mission_control.models import TaskStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tasks"])


@router.get("/tasks")
async def list_tasks(
    status: TaskStatus | None = None,
    project_id: str | None = None,
    limit: int = Query(200, ge=1, le=500),
) -> dict[str, Any]:
    """List tasks newest first."""
    manager = get_mission_control_manager()
    tasks = await manager.list_tasks(status=status, project_id=project_id, limit=limit)
    return {"tasks": [t.to_dict() for t in tasks], "count": len(tasks)}


@router.post("/tasks")
async def create_task(request: CreateTaskRequest) -> dict[str, Any]:
    """Create a new task."""
    manager = get_mission_control_manager()
    task = await manager.create_task(
        title=request.title,
        description=request.description,
        priority=request.priority,
        project_id=request.project_id,
        assignee_ids=request.assignee_ids,
        tags=request.tags,
        created_by=request.created_by,
    )
    return {"task": task.to_dict()}


@router.get("/tasks/dispatch-states")
async def list_dispatch_states() -> dict[str, Any]:
    """Active dispatch per task, for kanban badges."""
    manager = get_mission_control_manager()
    states = await manager.list_dispatch_states()
    return {"states": states, "count": len(states)}


@router.get("/tasks/{task_id}")
async def get_task(task_id: str) -> dict[str, Any]:
    """Get a task by ID."""
    manager = get_mission_control_manager()
    task = await manager.get_task(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"task": task.to_dict()}


@router.patch("/tasks/{task_id}")
async def update_task(task_id: str, request: UpdateTaskRequest) -> dict[str, Any]:
    """Update a task's fields."""
    manager = get_mission_control_manager()
    task = await manager.update_task(task_id, **request.model_dump(exclude_unset=True))
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"task": task.to_dict()}


@router.delete("/tasks/{task_id}", response_model=OkResponse)
async def delete_task(task_id: str):
    """Delete a task and its subscriptions."""
    manager = get_mission_control_manager()
    try:
        await manager.delete_task(task_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")
    return OkResponse()


@router.get("/tasks/{task_id}/planning")
async def get_planning(task_id: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    planning = await manager.get_planning(task_id)
    if planning is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"planning": planning}


@router.get("/tasks/{task_id}/dispatch-state")
async def get_dispatch_state(task_id: str) -> dict[str, Any]:
    """Most recent pending or running dispatch of a task (or null)."""
    manager = get_mission_control_manager()
    return {"state": await manager.get_dispatch_state(task_id)}

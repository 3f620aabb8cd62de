# Projects router.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from mission_control.api.schemas.messages import CreateProjectRequest
from mission_control.errors import DuplicateNameError
from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Projects"])


@router.get("/projects")
async def list_projects() -> dict[str, Any]:
    manager = get_mission_control_manager()
    projects = await manager.list_projects()
    return {"projects": [p.to_dict() for p in projects], "count": len(projects)}


@router.post("/projects")
async def create_project(request: CreateProjectRequest) -> dict[str, Any]:
    """Create a project with a unique name."""
    manager = get_mission_control_manager()
    try:
        project = await manager.create_project(
            name=request.name,
            color=request.color,
            description=request.description,
            icon=request.icon,
        )
    except DuplicateNameError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"project": project.to_dict()}


@router.get("/projects/{project_id}")
async def get_project(project_id: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    project = await manager.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return {"project": project.to_dict()}

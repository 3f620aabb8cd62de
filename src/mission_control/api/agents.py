# Agents router: roster CRUD and report heartbeats.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from mission_control.api.schemas.agents import (
    CreateAgentRequest,
    HeartbeatRequest,
    UpdateAgentRequest,
    UpdateModelRequest,
)
from mission_control.api.schemas.common import OkResponse
from mission_control.errors import DuplicateNameError, NotFoundError
from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Agents"])


@router.get("/agents")
async def list_agents(role: str | None = None) -> dict[str, Any]:
    """List all agents sorted by name, optionally filtered by role."""
    manager = get_mission_control_manager()
    if role:
        agents = await manager.list_agents_by_role(role)
    else:
        agents = await manager.list_agents()
    return {"agents": [a.to_dict() for a in agents], "count": len(agents)}


@router.post("/agents")
async def create_agent(request: CreateAgentRequest) -> dict[str, Any]:
    """Create a new agent."""
    manager = get_mission_control_manager()
    try:
        agent = await manager.create_agent(
            name=request.name,
            role=request.role,
            level=request.level,
            status=request.status,
            session_key=request.session_key,
            avatar=request.avatar,
            system_prompt=request.system_prompt,
            character=request.character,
            lore=request.lore,
            models=request.models.model_dump() if request.models else None,
        )
    except DuplicateNameError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"agent": agent.to_dict()}


@router.post("/agents/heartbeat")
async def record_heartbeat(request: HeartbeatRequest) -> dict[str, Any]:
    """Record a heartbeat from an agent's report script."""
    manager = get_mission_control_manager()
    try:
        agent = await manager.record_heartbeat(
            request.agent_name, status=request.status, message=request.message
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Agent not found")
    return {"agent": agent.to_dict() if agent else None}


@router.get("/agents/by-name/{name}")
async def get_agent_by_name(name: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    agent = await manager.get_agent_by_name(name)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return {"agent": agent.to_dict()}


@router.get("/agents/by-session/{session_key}")
async def get_agent_by_session_key(session_key: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    agent = await manager.get_agent_by_session_key(session_key)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return {"agent": agent.to_dict()}


@router.get("/agents/{agent_id}")
async def get_agent(agent_id: str) -> dict[str, Any]:
    """Get an agent by ID."""
    manager = get_mission_control_manager()
    agent = await manager.get_agent(agent_id)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return {"agent": agent.to_dict()}


@router.patch("/agents/{agent_id}")
async def update_agent(agent_id: str, request: UpdateAgentRequest) -> dict[str, Any]:
    """Update an agent's details."""
    manager = get_mission_control_manager()
    try:
        agent = await manager.update_agent(agent_id, **request.model_dump(exclude_unset=True))
    except DuplicateNameError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return {"agent": agent.to_dict()}


@router.delete("/agents/{agent_id}", response_model=OkResponse)
async def delete_agent(agent_id: str):
    """Delete an agent."""
    manager = get_mission_control_manager()
    try:
        await manager.delete_agent(agent_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Agent not found")
    return OkResponse()


@router.put("/agents/{agent_id}/models")
async def update_agent_model(agent_id: str, request: UpdateModelRequest) -> dict[str, Any]:
    """Switch one of an agent's models."""
    manager = get_mission_control_manager()
    try:
        agent = await manager.update_agent_model(
            agent_id, request.model_type, request.model_name
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Agent not found")
    return {"agent": agent.to_dict()}

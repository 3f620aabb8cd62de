# Agent schemas.
# Created: 2026-09-17

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from mission_control.models import AgentLevel, AgentStatus


class ModelConfigBody(BaseModel):
    thinking: str
    execution: str | None = None
    heartbeat: str
    fallback: str


class CreateAgentRequest(BaseModel):
    """Request to create a new agent."""

    name: str = Field(..., min_length=1, max_length=50)
    role: str = Field(..., min_length=1, max_length=100)
    level: AgentLevel | None = None
    status: AgentStatus | None = None
    session_key: str | None = None
    avatar: str | None = None
    system_prompt: str | None = None
    character: str | None = None
    lore: str | None = None
    models: ModelConfigBody | None = None


class UpdateAgentRequest(BaseModel):
    """Request to update an agent. Only provided fields change."""

    name: str | None = Field(None, min_length=1, max_length=50)
    role: str | None = None
    level: AgentLevel | None = None
    status: AgentStatus | None = None
    current_task_id: str | None = None
    session_key: str | None = None
    avatar: str | None = None
    system_prompt: str | None = None
    character: str | None = None
    lore: str | None = None
    models: ModelConfigBody | None = None


class UpdateModelRequest(BaseModel):
    model_type: Literal["thinking", "execution", "heartbeat", "fallback"]
    model_name: str = Field(..., min_length=1)


class HeartbeatRequest(BaseModel):
    """Heartbeat posted by an agent's report script."""

    agent_name: str = Field(..., min_length=1)
    status: AgentStatus = AgentStatus.ACTIVE
    message: str = ""

# Task and subscription schemas.
# Created: 2026-09-17

from __future__ import annotations

from pydantic import BaseModel, Field

from mission_control.models import PlanningStatus, SubscriptionReason, TaskPriority, TaskStatus


class CreateTaskRequest(BaseModel):
    """Request to create a new task."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    project_id: str | None = None
    assignee_ids: list[str] = Field(default_factory=list)
    tags: list[str] | None = None
    created_by: str = "user"


class UpdateTaskRequest(BaseModel):
    """Request to update a task. Only provided fields change."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    project_id: str | None = None
    assignee_ids: list[str] | None = None
    tags: list[str] | None = None
    planning_status: PlanningStatus | None = None
    planning_questions: list[str] | None = None
    planning_draft: str | None = None


class SubscribeRequest(BaseModel):
    task_id: str
    agent_id: str
    reason: SubscriptionReason = SubscriptionReason.MANUAL


class UnsubscribeRequest(BaseModel):
    task_id: str
    agent_id: str

# Notification and dispatch schemas.
# Created: 2026-09-17

from __future__ import annotations

from pydantic import BaseModel, Field

from mission_control.models import DispatchStatus


class CreateNotificationRequest(BaseModel):
    target_agent_id: str
    content: str = Field(..., min_length=1)
    source_task_id: str | None = None
    source_message_id: str | None = None


class ClaimNotificationRequest(BaseModel):
    """Claim the next deliverable notification."""

    runner_id: str = Field(..., min_length=1)
    claim_ttl_ms: int | None = None


class FailAttemptRequest(BaseModel):
    error: str


class EnqueueDispatchRequest(BaseModel):
    """Queue a task for a runner."""

    task_id: str
    requested_by: str = Field(..., min_length=1)
    target_agent_id: str | None = None
    prompt: str | None = None
    idempotency_key: str | None = None


class ClaimDispatchRequest(BaseModel):
    runner_id: str = Field(..., min_length=1)
    task_id: str | None = None


class CompleteDispatchRequest(BaseModel):
    run_id: str | None = None
    result_preview: str | None = None


class FailDispatchRequest(BaseModel):
    error: str


class CancelForTaskRequest(BaseModel):
    reason: str | None = None


class DispatchStatusRequest(BaseModel):
    status: DispatchStatus

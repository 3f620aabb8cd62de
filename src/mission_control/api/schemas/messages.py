# Message, document and project schemas.
# Created: 2026-09-17

from __future__ import annotations

from pydantic import BaseModel, Field

from mission_control.models import DocumentType


class SendMessageRequest(BaseModel):
    """Request to post a message to a channel."""

    channel: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    from_agent_id: str | None = None
    task_id: str | None = None
    from_user: bool | None = None


class CreateDocumentRequest(BaseModel):
    """Request to create a document."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = ""
    type: DocumentType
    created_by: str = Field(..., min_length=1)
    path: str | None = None
    task_id: str | None = None
    project_id: str | None = None
    agent_id: str | None = None
    message_id: str | None = None


class CreateProjectRequest(BaseModel):
    """Request to create a project."""

    name: str = Field(..., min_length=1, max_length=100)
    color: str = "#3b82f6"
    description: str | None = None
    icon: str | None = None

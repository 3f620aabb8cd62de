# Documents router: deliverables, notes and their task context.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from mission_control.api.schemas.messages import CreateDocumentRequest
from mission_control.manager import get_mission_control_manager
from mission_control.models import DocumentType

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Documents"])


@router.get("/documents")
async def list_documents(type: DocumentType | None = None) -> dict[str, Any]:
    """List documents newest first, optionally by type."""
    manager = get_mission_control_manager()
    documents = await manager.list_documents(type)
    return {"documents": [d.to_dict() for d in documents], "count": len(documents)}


@router.post("/documents")
async def create_document(request: CreateDocumentRequest) -> dict[str, Any]:
    """Create a document."""
    manager = get_mission_control_manager()
    document = await manager.create_document(**request.model_dump())
    return {"document": document.to_dict()}


@router.get("/documents/{document_id}")
async def get_document(document_id: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    document = await manager.get_document(document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return {"document": document.to_dict()}


@router.get("/documents/{document_id}/context")
async def get_document_with_context(document_id: str) -> dict[str, Any]:
    """A document with its author, task and conversation."""
    manager = get_mission_control_manager()
    document = await manager.get_document_with_context(document_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return {"document": document}


@router.get("/tasks/{task_id}/documents")
async def list_documents_for_task(task_id: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    documents = await manager.list_documents_for_task(task_id)
    return {"documents": [d.to_dict() for d in documents], "count": len(documents)}


@router.get("/tasks/{task_id}/has-deliverable")
async def has_deliverable(task_id: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    return {"has_deliverable": await manager.has_deliverable(task_id)}

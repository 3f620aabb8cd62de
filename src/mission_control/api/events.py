# Runner event webhook: lifecycle events posted by the agent runner hook.
# Created: 2026-09-17
#
# Mounted at the root (``/openclaw/event``) rather than under /api/v1 since
# the hook's URL is configured on the runner side.

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from mission_control.api.deps import require_webhook_secret
from mission_control.api.schemas.events import RunnerEvent
from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Runner Events"])


@router.post("/openclaw/event", dependencies=[Depends(require_webhook_secret)])
async def receive_event(event: RunnerEvent) -> dict[str, Any]:
    manager = get_mission_control_manager()
    try:
        task_id = await manager.events.receive_event(
            run_id=event.run_id,
            action=event.action,
            session_key=event.session_key,
            agent_id=event.agent_id,
            timestamp=event.timestamp,
            prompt=event.prompt,
            source=event.source,
            message=event.message,
            response=event.response,
            error=event.error,
            document=event.document.model_dump() if event.document else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "task_id": task_id}

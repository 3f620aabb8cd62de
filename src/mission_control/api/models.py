# Models router: the model catalog reported by the runner.
# Created: 2026-09-17

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from mission_control.manager import get_mission_control_manager

router = APIRouter(tags=["Models"])


@router.get("/models")
async def list_available_models() -> dict[str, Any]:
    manager = get_mission_control_manager()
    models = await manager.settings.list_available_models()
    return {"models": models, "count": len(models)}

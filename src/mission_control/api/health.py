# Health router.
# Created: 2026-09-17

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from mission_control import __version__
from mission_control.manager import get_mission_control_manager

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health() -> dict[str, Any]:
    manager = get_mission_control_manager()
    return {
        "status": "ok",
        "version": __version__,
        "stats": await manager.get_stats(),
    }

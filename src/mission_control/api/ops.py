# Ops router: overview for the status dashboard and seeding.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Ops"])


@router.get("/ops/overview")
async def overview() -> dict[str, Any]:
    """Agent, dispatch, notification and watcher health in one payload."""
    manager = get_mission_control_manager()
    return await manager.ops.overview()


@router.post("/ops/seed")
async def seed() -> dict[str, Any]:
    """Insert the default project and squad where missing."""
    manager = get_mission_control_manager()
    return {"seeded": await manager.seed()}

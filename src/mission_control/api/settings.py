# Settings router: key/value settings and leases.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from mission_control.api.schemas.common import IdResponse, OkResponse
from mission_control.api.schemas.settings import (
    AcquireLeaseRequest,
    AutomationConfigUpdate,
    ReleaseLeaseRequest,
    SetSettingRequest,
)
from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Settings"])


@router.get("/settings")
async def list_settings() -> dict[str, Any]:
    manager = get_mission_control_manager()
    rows = await manager.settings.list_settings()
    return {"settings": [s.to_dict() for s in rows], "count": len(rows)}


@router.get("/settings/automation")
async def get_automation_config() -> dict[str, Any]:
    manager = get_mission_control_manager()
    return {"config": await manager.settings.get_automation_config()}


@router.patch("/settings/automation")
async def update_automation_config(request: AutomationConfigUpdate) -> dict[str, Any]:
    """Partially update the automation config; out-of-range values are clamped."""
    manager = get_mission_control_manager()
    config = await manager.settings.update_automation_config(
        **request.model_dump(exclude_unset=True)
    )
    return {"config": config}


@router.get("/settings/{key:path}")
async def get_setting(key: str) -> dict[str, Any]:
    manager = get_mission_control_manager()
    row = await manager.settings.get_setting(key)
    if not row:
        raise HTTPException(status_code=404, detail="Setting not found")
    return {"setting": row.to_dict()}


@router.put("/settings/{key:path}", response_model=IdResponse)
async def set_setting(key: str, request: SetSettingRequest):
    manager = get_mission_control_manager()
    setting_id = await manager.settings.set_setting(key, request.value)
    return IdResponse(id=setting_id)


@router.post("/leases/{key:path}/acquire")
async def acquire_lease(key: str, request: AcquireLeaseRequest) -> dict[str, Any]:
    """Take or renew a lease; ``acquired`` is false while another owner holds it."""
    manager = get_mission_control_manager()
    return await manager.settings.acquire_lease(key, request.owner, request.ttl_ms)


@router.post("/leases/{key:path}/release", response_model=OkResponse)
async def release_lease(key: str, request: ReleaseLeaseRequest):
    manager = get_mission_control_manager()
    released = await manager.settings.release_lease(key, request.owner)
    return OkResponse(ok=released)

# Auth profiles router: provider credentials known to the runner.
# Created: 2026-09-17

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from mission_control.api.schemas.common import OkResponse
from mission_control.api.schemas.settings import SyncProfilesRequest
from mission_control.errors import NotFoundError
from mission_control.manager import get_mission_control_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth Profiles"])


@router.get("/auth-profiles")
async def list_profiles() -> dict[str, Any]:
    manager = get_mission_control_manager()
    profiles = await manager.auth_profiles.list_profiles()
    return {"profiles": [p.to_dict() for p in profiles], "count": len(profiles)}


@router.get("/auth-profiles/active")
async def get_active_profile() -> dict[str, Any]:
    manager = get_mission_control_manager()
    profile = await manager.auth_profiles.get_active_profile()
    return {"profile": profile.to_dict() if profile else None}


@router.post("/auth-profiles/seed")
async def seed_profiles() -> dict[str, Any]:
    manager = get_mission_control_manager()
    return {"seeded": await manager.auth_profiles.seed_profiles()}


@router.post("/auth-profiles/sync")
async def sync_profiles(request: SyncProfilesRequest) -> dict[str, Any]:
    """Replace stored profiles with the runner's list."""
    manager = get_mission_control_manager()
    profiles = await manager.auth_profiles.sync_profiles(
        [p.model_dump() for p in request.profiles],
        request.preferred_active_profile_id,
    )
    return {"profiles": [p.to_dict() for p in profiles], "count": len(profiles)}


@router.post("/auth-profiles/{profile_id}/activate", response_model=OkResponse)
async def set_active_profile(profile_id: str):
    manager = get_mission_control_manager()
    try:
        await manager.auth_profiles.set_active_profile(profile_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Auth profile not found")
    return OkResponse()

# Settings, lease and auth profile schemas.
# Created: 2026-09-17

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SetSettingRequest(BaseModel):
    value: Any = None


class AutomationConfigUpdate(BaseModel):
    """Partial automation config update. Only provided fields change."""

    auto_dispatch_enabled: bool | None = None
    notification_delivery_enabled: bool | None = None
    notification_batch_size: float | None = None
    heartbeat_enabled: bool | None = None
    heartbeat_max_notifications: float | None = None
    heartbeat_max_tasks: float | None = None
    heartbeat_max_activities: float | None = None
    heartbeat_require_chat_update: bool | None = None


class AcquireLeaseRequest(BaseModel):
    owner: str = Field(..., min_length=1)
    ttl_ms: float = 8000


class ReleaseLeaseRequest(BaseModel):
    owner: str = Field(..., min_length=1)


class AuthProfileBody(BaseModel):
    email: str = ""
    provider: str = ""
    profile_id: str = ""


class SyncProfilesRequest(BaseModel):
    profiles: list[AuthProfileBody]
    preferred_active_profile_id: str | None = None

# Common API response schemas.
# Created: 2026-09-17

from __future__ import annotations

from pydantic import BaseModel


class APIResponse(BaseModel):
    """Base response wrapper."""

    model_config = {"from_attributes": True}


class OkResponse(APIResponse):
    """Simple success response."""

    ok: bool = True


class IdResponse(APIResponse):
    """Id of a created or touched record."""

    id: str

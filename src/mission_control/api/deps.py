# Shared FastAPI dependencies for the API layer.
# Created: 2026-09-17

from __future__ import annotations

import hmac

from fastapi import Header, HTTPException


async def require_webhook_secret(
    x_mission_control_secret: str | None = Header(default=None),
) -> None:
    """Reject runner events without the shared secret, when one is configured."""
    from mission_control.config import get_settings

    secret = get_settings().webhook_secret
    if not secret:
        return
    if not x_mission_control_secret or not hmac.compare_digest(
        x_mission_control_secret, secret
    ):
        raise HTTPException(status_code=401, detail="unauthorized")

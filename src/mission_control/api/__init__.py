# Mission Control REST API router aggregation.
# Created: 2026-09-17
#
# mount_routers(app) registers all domain routers at /api/v1/ and the runner
# event webhook at the root.

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# Domain routers, imported lazily inside mount_routers().
_ROUTERS: list[tuple[str, str, str, str]] = [
    # (module_path, attr_name, tag, prefix)
    ("mission_control.api.health", "router", "Health", API_PREFIX),
    ("mission_control.api.agents", "router", "Agents", API_PREFIX),
    ("mission_control.api.tasks", "router", "Tasks", API_PREFIX),
    ("mission_control.api.messages", "router", "Messages", API_PREFIX),
    ("mission_control.api.documents", "router", "Documents", API_PREFIX),
    ("mission_control.api.projects", "router", "Projects", API_PREFIX),
    ("mission_control.api.activities", "router", "Activities", API_PREFIX),
    ("mission_control.api.subscriptions", "router", "Subscriptions", API_PREFIX),
    ("mission_control.api.notifications", "router", "Notifications", API_PREFIX),
    ("mission_control.api.dispatches", "router", "Dispatches", API_PREFIX),
    ("mission_control.api.settings", "router", "Settings", API_PREFIX),
    ("mission_control.api.auth_profiles", "router", "Auth Profiles", API_PREFIX),
    ("mission_control.api.models", "router", "Models", API_PREFIX),
    ("mission_control.api.ops", "router", "Ops", API_PREFIX),
    ("mission_control.api.events", "router", "Runner Events", ""),
]


def mount_routers(app: FastAPI) -> None:
    """Mount all domain routers on *app*.

    Each router is mounted at ``/api/v1/<path>``; the runner event webhook
    keeps its root path ``/openclaw/event``.
    """
    import importlib

    from fastapi import APIRouter

    for module_path, attr_name, tag, prefix in _ROUTERS:
        try:
            mod = importlib.import_module(module_path)
            router: APIRouter = getattr(mod, attr_name)
            app.include_router(router, prefix=prefix)
            logger.debug("Mounted router: %s (%s)", module_path, tag)
        except Exception:
            logger.warning("Failed to mount router %s", module_path, exc_info=True)

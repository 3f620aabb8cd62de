"""Operations overview for Mission Control.

Created: 2026-09-16

One read-only snapshot of system health: agent counts, the dispatch queue,
undelivered notifications, probe markers and the watcher leader lease.
"""

from __future__ import annotations

import logging
from typing import Any

from mission_control.kv import (
    PROBE_LAST_DISPATCH_RESULT_KEY,
    PROBE_LAST_DISPATCH_STARTED_KEY,
    PROBE_LAST_REPORT_CHAT_KEY,
    WATCHER_LEASE_KEY,
    SettingsService,
    parse_lease,
)
from mission_control.models import AgentStatus, DispatchStatus, now_ms
from mission_control.store import FileMissionControlStore, get_mission_control_store

logger = logging.getLogger(__name__)

RECENT_WINDOW_MS = 24 * 60 * 60 * 1000
RECENT_SCAN_SIZE = 250
UNDELIVERED_COUNT_CAP = 500


class OpsService:
    def __init__(
        self,
        store: FileMissionControlStore | None = None,
        settings: SettingsService | None = None,
    ):
        self._store = store or get_mission_control_store()
        self._settings = settings or SettingsService(self._store)

    async def overview(self) -> dict[str, Any]:
        now = now_ms()
        cutoff = now - RECENT_WINDOW_MS

        agents = await self._store.rows("agents")
        active = sum(1 for a in agents if a.status == AgentStatus.ACTIVE)
        blocked = sum(1 for a in agents if a.status == AgentStatus.BLOCKED)

        dispatches = await self._store.rows("task_dispatches")

        def by_status(status: DispatchStatus) -> list:
            return [d for d in dispatches if d.status == status]

        def recent_count(status: DispatchStatus) -> int:
            newest = sorted(by_status(status), key=lambda d: d.requested_at, reverse=True)
            return sum(
                1
                for d in newest[:RECENT_SCAN_SIZE]
                if d.finished_at is not None and d.finished_at >= cutoff
            )

        notifications = await self._store.rows("notifications")
        undelivered = sum(1 for n in notifications if not n.delivered)

        lease = parse_lease(await self._settings.get_value(WATCHER_LEASE_KEY))
        expires_at = lease["expires_at"]

        return {
            "now": now,
            "agents": {
                "total": len(agents),
                "active": active,
                "blocked": blocked,
                "idle": max(0, len(agents) - active - blocked),
            },
            "dispatch": {
                "pending": len(by_status(DispatchStatus.PENDING)),
                "running": len(by_status(DispatchStatus.RUNNING)),
                "recent_24h": {
                    "completed": recent_count(DispatchStatus.COMPLETED),
                    "failed": recent_count(DispatchStatus.FAILED),
                    "cancelled": recent_count(DispatchStatus.CANCELLED),
                },
                "last_started": await self._settings.get_value(PROBE_LAST_DISPATCH_STARTED_KEY),
                "last_result": await self._settings.get_value(PROBE_LAST_DISPATCH_RESULT_KEY),
            },
            "notifications": {"undelivered": min(undelivered, UNDELIVERED_COUNT_CAP)},
            "reports": {
                "last_report_chat": await self._settings.get_value(PROBE_LAST_REPORT_CHAT_KEY),
            },
            "watcher": {
                "owner": lease["owner"],
                "expires_at": expires_at,
                "is_healthy": bool(lease["owner"]) and expires_at > now,
                "ms_until_expiry": expires_at - now if expires_at > now else 0,
            },
        }

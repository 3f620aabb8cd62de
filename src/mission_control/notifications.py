"""Notification queue for Mission Control.

Created: 2026-09-15

Notifications are produced by task assignment, @mentions and thread
updates, and consumed by runner processes:

1. ``claim_next`` hands one undelivered notification to a runner and stamps
   the claim. Claims older than the claim TTL can be taken over.
2. The runner delivers it and calls ``mark_delivered``, or records the
   failure with ``mark_attempt_failed`` which releases the claim.
"""

from __future__ import annotations

import logging
from typing import Any

from mission_control.errors import NotFoundError
from mission_control.models import Notification, clamp, now_ms
from mission_control.store import FileMissionControlStore, get_mission_control_store

logger = logging.getLogger(__name__)

COLLECTION = "notifications"

DEFAULT_CLAIM_TTL_MS = 60_000
MIN_CLAIM_TTL_MS = 5_000
MAX_CLAIM_TTL_MS = 10 * 60_000
CLAIM_SCAN_SIZE = 50
MAX_ERROR_CHARS = 500


class NotificationService:
    """Create, list and claim notifications."""

    def __init__(self, store: FileMissionControlStore | None = None):
        self._store = store or get_mission_control_store()

    async def _undelivered_newest_first(self) -> list[Notification]:
        rows = await self._store.rows(COLLECTION)
        return [n for n in reversed(rows) if not n.delivered]

    async def get_undelivered(self, limit: int = 100) -> list[Notification]:
        """Newest undelivered notifications."""
        take = clamp(limit, 1, 200)
        return (await self._undelivered_newest_first())[:take]

    async def has_undelivered(self) -> bool:
        return bool(await self._undelivered_newest_first())

    async def get_for_agent(
        self, agent_id: str, include_delivered: bool = False
    ) -> list[Notification]:
        """Newest 200 notifications for an agent, undelivered only by default."""
        rows = await self._store.rows(COLLECTION)
        mine = [n for n in reversed(rows) if n.target_agent_id == agent_id][:200]
        if include_delivered:
            return mine
        return [n for n in mine if not n.delivered]

    async def get_notification(self, notification_id: str) -> Notification | None:
        return await self._store.get(COLLECTION, notification_id)

    async def create_notification(
        self,
        target_agent_id: str,
        content: str,
        source_task_id: str | None = None,
        source_message_id: str | None = None,
    ) -> Notification:
        """Queue a notification for an agent."""
        notification = Notification(
            target_agent_id=target_agent_id,
            content=content,
            source_task_id=source_task_id,
            source_message_id=source_message_id,
        )
        await self._store.insert(COLLECTION, notification)
        logger.debug(f"Queued notification {notification.id} for agent {target_agent_id}")
        return notification

    async def claim_next(
        self, runner_id: str, claim_ttl_ms: int | None = None
    ) -> dict[str, Any] | None:
        """Claim the next deliverable notification for ``runner_id``.

        Scans the newest undelivered notifications and takes the first one
        that is unclaimed or whose claim has outlived the TTL.

        Returns:
            ``{notification_id, target_agent_id, target_session_key, content}``
            or None when nothing is claimable.
        """
        ttl_ms = clamp(
            DEFAULT_CLAIM_TTL_MS if claim_ttl_ms is None else claim_ttl_ms,
            MIN_CLAIM_TTL_MS,
            MAX_CLAIM_TTL_MS,
        )
        async with self._store.lock:
            now = now_ms()
            candidates = (await self._undelivered_newest_first())[:CLAIM_SCAN_SIZE]
            chosen = None
            for notification in candidates:
                claimed_at = notification.claimed_at or 0
                if claimed_at == 0 or claimed_at < now - ttl_ms:
                    chosen = notification
                    break
            if chosen is None:
                return None

            chosen.claimed_by = runner_id
            chosen.claimed_at = now
            chosen.attempts += 1
            chosen.error = None
            await self._store.save(COLLECTION, chosen)

        agent = await self._store.get("agents", chosen.target_agent_id)
        logger.info(
            f"Runner {runner_id} claimed notification {chosen.id} "
            f"(attempt {chosen.attempts})"
        )
        return {
            "notification_id": chosen.id,
            "target_agent_id": chosen.target_agent_id,
            "target_session_key": agent.session_key if agent else None,
            "content": chosen.content,
        }

    async def _require(self, notification_id: str) -> Notification:
        notification = await self._store.get(COLLECTION, notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        return notification

    async def mark_delivered(self, notification_id: str) -> None:
        """Mark a notification delivered and release its claim."""
        notification = await self._require(notification_id)
        notification.delivered = True
        notification.delivered_at = now_ms()
        notification.claimed_by = None
        notification.claimed_at = None
        notification.error = None
        await self._store.save(COLLECTION, notification)

    async def mark_attempt_failed(self, notification_id: str, error: str) -> None:
        """Release the claim and remember why delivery failed."""
        notification = await self._require(notification_id)
        notification.claimed_by = None
        notification.claimed_at = None
        notification.error = error[:MAX_ERROR_CHARS]
        await self._store.save(COLLECTION, notification)
        logger.warning(f"Notification {notification_id} delivery failed: {error[:200]}")

"""Notification delivery worker.

Created: 2026-09-18

Each cycle:
1. Refresh the automation config and skip while delivery is disabled
2. Take or renew the ``watcher:leader`` lease; only the leader delivers
3. Claim up to ``notification_batch_size`` notifications
4. Relay each one to the delivery webhook and record the outcome
"""

import logging

from mission_control.client import MissionControlClient
from mission_control.kv import WATCHER_LEASE_KEY
from mission_control.models import truncate
from mission_control.workers.base import BaseWorker
from mission_control.workers.delivery import MAX_DELIVERY_CHARS, WebhookRelay

logger = logging.getLogger(__name__)


class NotificationWorker(BaseWorker):
    name = "notify"

    def __init__(
        self,
        client: MissionControlClient,
        relay: WebhookRelay,
        runner_id: str,
        poll_ms: int = 5000,
        refresh_ms: int = 30000,
        claim_ttl_ms: int = 60000,
        lease_ttl_ms: int = 8000,
    ):
        super().__init__(client, runner_id, poll_ms=poll_ms, refresh_ms=refresh_ms)
        self.relay = relay
        self.claim_ttl_ms = claim_ttl_ms
        self.lease_ttl_ms = lease_ttl_ms
        self._is_leader = False

    async def _hold_lease(self) -> bool:
        lease = await self.client.acquire_lease(
            WATCHER_LEASE_KEY, self.runner_id, self.lease_ttl_ms
        )
        acquired = bool(lease.get("acquired"))
        if acquired and not self._is_leader:
            logger.info(f"[notify] {self.runner_id} is now the delivery leader")
        elif not acquired and self._is_leader:
            logger.warning(f"[notify] lost leadership to {lease.get('owner')}")
        elif not acquired:
            logger.debug(f"[notify] lease held by {lease.get('owner')}, standing by")
        self._is_leader = acquired
        return acquired

    async def run_cycle(self) -> int:
        """Deliver one batch. Returns the number of delivered notifications.

        Failed attempts keep their claim until the batch ends so later claims
        move on to older notifications; each notification is tried at most
        once per cycle.
        """
        config = await self.refresh_config()
        if not config.get("notification_delivery_enabled", True):
            self.log_disabled("notification delivery")
            return 0

        if not await self._hold_lease():
            return 0

        batch_size = max(1, int(config.get("notification_batch_size", 10)))
        delivered = 0
        attempted: set[str] = set()
        failures: list[tuple[str, str]] = []
        for _ in range(batch_size):
            claim = await self.client.claim_notification(self.runner_id, self.claim_ttl_ms)
            if claim is None or claim["notification_id"] in attempted:
                break
            attempted.add(claim["notification_id"])
            error = await self._deliver(claim)
            if error is None:
                delivered += 1
            else:
                failures.append((claim["notification_id"], error))

        for notification_id, error in failures:
            await self.client.mark_attempt_failed(notification_id, error)

        if delivered or failures:
            logger.info(
                f"[notify] delivered={delivered} failed={len(failures)} batch={batch_size}"
            )
        return delivered

    async def _deliver(self, claim: dict) -> str | None:
        """Relay one claimed notification. Returns the error on failure."""
        notification_id = claim["notification_id"]
        session_key = claim.get("target_session_key")
        if not session_key:
            error = f"Agent has no session key: {claim.get('target_agent_id')}"
            logger.warning(f"[retry] {notification_id}: {error}")
            return error

        message = truncate(claim.get("content") or "", MAX_DELIVERY_CHARS)
        try:
            await self.relay.send(
                {
                    "notification_id": notification_id,
                    "agent_id": claim.get("target_agent_id"),
                    "session_key": session_key,
                    "message": message,
                }
            )
        except Exception as e:
            logger.error(f"[retry] {session_key} delivery failed: {e}")
            return str(e) or type(e).__name__

        await self.client.mark_delivered(notification_id)
        logger.info(f"[delivered] {session_key} <- {message[:80]}")
        return None

    async def on_stop(self) -> None:
        if not self._is_leader:
            return
        try:
            await self.client.release_lease(WATCHER_LEASE_KEY, self.runner_id)
        except Exception as e:
            logger.warning(f"[notify] failed to release lease: {e}")
        self._is_leader = False

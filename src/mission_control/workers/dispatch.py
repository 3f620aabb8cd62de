"""Dispatch relay worker.

Created: 2026-09-18

Claims pending dispatches and hands them to the runner webhook. The webhook
answers with ``{"run_id": ..., "preview": ...}`` on success; any error fails
the dispatch. Start and result markers are written to the ``probe:*``
settings read by the ops overview.
"""

import logging
from typing import Any

from mission_control.client import MissionControlClient
from mission_control.kv import PROBE_LAST_DISPATCH_RESULT_KEY, PROBE_LAST_DISPATCH_STARTED_KEY
from mission_control.models import now_ms, truncate
from mission_control.workers.base import BaseWorker
from mission_control.workers.delivery import WebhookRelay

logger = logging.getLogger(__name__)


class DispatchWorker(BaseWorker):
    name = "dispatch"

    def __init__(
        self,
        client: MissionControlClient,
        relay: WebhookRelay,
        runner_id: str,
        poll_ms: int = 5000,
        refresh_ms: int = 30000,
    ):
        super().__init__(client, runner_id, poll_ms=poll_ms, refresh_ms=refresh_ms)
        self.relay = relay

    async def run_cycle(self) -> int:
        """Handle at most one dispatch. Returns 1 when one was handled."""
        config = await self.refresh_config()
        if not config.get("auto_dispatch_enabled", True):
            self.log_disabled("auto dispatch")
            return 0

        claim = await self.client.claim_dispatch(self.runner_id)
        if claim is None:
            return 0

        await self._handle(claim)
        return 1

    async def _handle(self, claim: dict[str, Any]) -> None:
        started_at = now_ms()
        dispatch_id = claim["dispatch_id"]
        title = truncate(claim.get("task_title") or "", 140)

        await self.client.set_setting(
            PROBE_LAST_DISPATCH_STARTED_KEY,
            {
                "at": started_at,
                "dispatch_id": dispatch_id,
                "task_id": claim.get("task_id"),
                "task_title": title,
                "target_agent_id": claim.get("target_agent_id"),
                "runner": self.runner_id,
            },
        )
        logger.info(f"[dispatch] started {dispatch_id} task={claim.get('task_id')}")

        try:
            response = await self.relay.send(
                {
                    "dispatch_id": dispatch_id,
                    "task_id": claim.get("task_id"),
                    "agent_id": claim.get("target_agent_id"),
                    "session_key": claim.get("target_session_key"),
                    "task_title": claim.get("task_title"),
                    "task_description": claim.get("task_description"),
                    "prompt": claim.get("prompt"),
                }
            )
        except Exception as e:
            error = str(e) or type(e).__name__
            await self.client.fail_dispatch(dispatch_id, error)
            await self._write_result(claim, title, "failed", started_at, error=error)
            logger.error(f"[dispatch] {dispatch_id} failed: {error}")
            return

        run_id = response.get("run_id")
        preview = truncate(
            str(response.get("preview") or response.get("text") or "Runner accepted the dispatch."),
            800,
        )
        await self.client.complete_dispatch(dispatch_id, run_id=run_id, result_preview=preview)
        await self._write_result(claim, title, "success", started_at, run_id=run_id, preview=preview)
        logger.info(f"[dispatch] {dispatch_id} completed run={run_id}")

    async def _write_result(
        self,
        claim: dict[str, Any],
        title: str,
        status: str,
        started_at: int,
        run_id: str | None = None,
        preview: str = "",
        error: str | None = None,
    ) -> None:
        now = now_ms()
        await self.client.set_setting(
            PROBE_LAST_DISPATCH_RESULT_KEY,
            {
                "at": now,
                "duration_ms": now - started_at,
                "dispatch_id": claim["dispatch_id"],
                "task_id": claim.get("task_id"),
                "task_title": title,
                "status": status,
                "run_id": run_id,
                "preview": truncate(preview, 400),
                "error": truncate(error, 800) if error else None,
                "runner": self.runner_id,
            },
        )

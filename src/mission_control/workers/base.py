"""Polling worker base.

Created: 2026-09-18

Workers run a cycle every poll interval until stopped. The automation config
is re-read at most every ``refresh_ms``; a failed refresh keeps the previous
values. A failing cycle is logged and the loop carries on.
"""

import asyncio
import logging
from typing import Any

from mission_control.client import MissionControlClient
from mission_control.kv import DEFAULT_AUTOMATION_CONFIG
from mission_control.models import now_ms

logger = logging.getLogger(__name__)

DISABLED_LOG_INTERVAL_MS = 30_000


class BaseWorker:
    """Shared loop, stop handling and config refresh."""

    name = "worker"

    def __init__(
        self,
        client: MissionControlClient,
        runner_id: str,
        poll_ms: int = 5000,
        refresh_ms: int = 30000,
    ):
        self.client = client
        self.runner_id = runner_id
        self.poll_ms = poll_ms
        self.refresh_ms = refresh_ms
        self.config: dict[str, Any] = dict(DEFAULT_AUTOMATION_CONFIG)
        self._last_refresh_at = 0
        self._last_disabled_log_at = 0
        self._stop = asyncio.Event()

    async def refresh_config(self, force: bool = False) -> dict[str, Any]:
        now = now_ms()
        if not force and now - self._last_refresh_at < self.refresh_ms:
            return self.config
        self._last_refresh_at = now
        try:
            self.config = await self.client.get_automation_config()
        except Exception as e:
            logger.error(f"[{self.name}] failed to load automation config, keeping previous: {e}")
        return self.config

    def log_disabled(self, what: str) -> None:
        """Log a disabled switch at most every 30 seconds."""
        now = now_ms()
        if now - self._last_disabled_log_at >= DISABLED_LOG_INTERVAL_MS:
            logger.info(f"[{self.name}] {what} disabled by automation config")
            self._last_disabled_log_at = now

    async def run_cycle(self) -> int:
        raise NotImplementedError

    async def on_stop(self) -> None:
        """Hook run once when the loop exits."""

    def stop(self) -> None:
        self._stop.set()

    async def run(self, run_once: bool = False) -> None:
        """Run cycles until ``stop()`` is called (or once with ``run_once``)."""
        logger.info(f"[{self.name}] started poll={self.poll_ms}ms runner={self.runner_id}")
        try:
            while not self._stop.is_set():
                try:
                    await self.run_cycle()
                except Exception:
                    logger.exception(f"[{self.name}] loop error")
                if run_once:
                    break
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=self.poll_ms / 1000)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self.on_stop()
            logger.info(f"[{self.name}] stopped")

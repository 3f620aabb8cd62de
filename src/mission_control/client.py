# Mission Control Client: async HTTP client for the REST API.
# Created: 2026-09-18
#
# Used by the report CLI and the delivery/dispatch workers, which talk to a
# running server rather than opening the JSON store themselves.

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
SECRET_HEADER = "x-mission-control-secret"


class MissionControlClient:
    """HTTP client for the Mission Control API.

    Args:
        base_url: Server root, e.g. ``http://127.0.0.1:8787``.
        secret: Shared webhook secret, sent on runner event posts.
        transport: Optional httpx transport (tests pass an ASGI or mock one).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        secret: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15,
    ):
        self.base_url = base_url.rstrip("/")
        self.secret = secret
        self._transport = transport
        self._timeout = timeout

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        prefix: str = API_PREFIX,
    ) -> Any:
        headers = {}
        if self.secret:
            headers[SECRET_HEADER] = self.secret
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        async with httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=self._timeout,
        ) as client:
            resp = await client.request(
                method, f"{prefix}{path}", json=json, params=params, headers=headers
            )
            resp.raise_for_status()
            return resp.json()

    # =========================================================================
    # Agents
    # =========================================================================

    async def list_agents(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/agents")
        return data["agents"]

    async def get_agent_by_name(self, name: str) -> dict[str, Any] | None:
        try:
            data = await self._request("GET", f"/agents/by-name/{name}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise
        return data["agent"]

    async def heartbeat(self, agent_name: str, status: str, message: str = "") -> None:
        """Record an agent heartbeat."""
        await self._request(
            "POST",
            "/agents/heartbeat",
            json={"agent_name": agent_name, "status": status, "message": message},
        )

    # =========================================================================
    # Messages
    # =========================================================================

    async def send_message(
        self,
        channel: str,
        content: str,
        from_agent_id: str | None = None,
        task_id: str | None = None,
        from_user: bool | None = None,
    ) -> dict[str, Any]:
        data = await self._request(
            "POST",
            "/messages",
            json={
                "channel": channel,
                "content": content,
                "from_agent_id": from_agent_id,
                "task_id": task_id,
                "from_user": from_user,
            },
        )
        return data["message"]

    # =========================================================================
    # Notifications
    # =========================================================================

    async def claim_notification(
        self, runner_id: str, claim_ttl_ms: int | None = None
    ) -> dict[str, Any] | None:
        data = await self._request(
            "POST",
            "/notifications/claim",
            json={"runner_id": runner_id, "claim_ttl_ms": claim_ttl_ms},
        )
        return data["claim"]

    async def mark_delivered(self, notification_id: str) -> None:
        await self._request("POST", f"/notifications/{notification_id}/delivered")

    async def mark_attempt_failed(self, notification_id: str, error: str) -> None:
        await self._request(
            "POST", f"/notifications/{notification_id}/failed", json={"error": error}
        )

    # =========================================================================
    # Dispatches
    # =========================================================================

    async def enqueue_dispatch(
        self,
        task_id: str,
        requested_by: str,
        target_agent_id: str | None = None,
        prompt: str | None = None,
        idempotency_key: str | None = None,
    ) -> str:
        data = await self._request(
            "POST",
            "/dispatches",
            json={
                "task_id": task_id,
                "requested_by": requested_by,
                "target_agent_id": target_agent_id,
                "prompt": prompt,
                "idempotency_key": idempotency_key,
            },
        )
        return data["id"]

    async def claim_dispatch(
        self, runner_id: str, task_id: str | None = None
    ) -> dict[str, Any] | None:
        data = await self._request(
            "POST", "/dispatches/claim", json={"runner_id": runner_id, "task_id": task_id}
        )
        return data["claim"]

    async def complete_dispatch(
        self,
        dispatch_id: str,
        run_id: str | None = None,
        result_preview: str | None = None,
    ) -> None:
        await self._request(
            "POST",
            f"/dispatches/{dispatch_id}/complete",
            json={"run_id": run_id, "result_preview": result_preview},
        )

    async def fail_dispatch(self, dispatch_id: str, error: str) -> None:
        await self._request("POST", f"/dispatches/{dispatch_id}/fail", json={"error": error})

    # =========================================================================
    # Settings and leases
    # =========================================================================

    async def get_automation_config(self) -> dict[str, Any]:
        data = await self._request("GET", "/settings/automation")
        return data["config"]

    async def set_setting(self, key: str, value: Any) -> str:
        data = await self._request("PUT", f"/settings/{key}", json={"value": value})
        return data["id"]

    async def acquire_lease(self, key: str, owner: str, ttl_ms: int) -> dict[str, Any]:
        return await self._request(
            "POST", f"/leases/{key}/acquire", json={"owner": owner, "ttl_ms": ttl_ms}
        )

    async def release_lease(self, key: str, owner: str) -> bool:
        data = await self._request("POST", f"/leases/{key}/release", json={"owner": owner})
        return data["ok"]

    # =========================================================================
    # Ops and runner events
    # =========================================================================

    async def ops_overview(self) -> dict[str, Any]:
        return await self._request("GET", "/ops/overview")

    async def seed(self) -> dict[str, int]:
        data = await self._request("POST", "/ops/seed")
        return data["seeded"]

    async def post_event(self, event: dict[str, Any]) -> dict[str, Any]:
        """Post a runner lifecycle event to the webhook."""
        return await self._request("POST", "/openclaw/event", json=event, prefix="")

"""Webhook relay used by the workers.

Created: 2026-09-18

Notifications and dispatches leave Mission Control as JSON POSTs to a
configured webhook; whatever sits behind it (an agent runner gateway, a chat
bridge) takes it from there.
"""

import logging
from typing import Any

import httpx

from mission_control.client import SECRET_HEADER

logger = logging.getLogger(__name__)

MAX_DELIVERY_CHARS = 320


class WebhookRelay:
    """POST JSON payloads to a webhook.

    Non-2xx responses raise ``httpx.HTTPStatusError``.
    """

    def __init__(
        self,
        url: str,
        secret: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.url = url
        self.secret = secret
        self._transport = transport
        self._timeout = timeout

    async def send(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send ``payload`` and return the decoded response body."""
        headers = {SECRET_HEADER: self.secret} if self.secret else {}
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            resp = await client.post(self.url, json=payload, headers=headers)
            resp.raise_for_status()

        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError:
            return {"text": resp.text}
        return body if isinstance(body, dict) else {"data": body}

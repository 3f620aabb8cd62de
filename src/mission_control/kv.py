"""Key/value settings, automation config and leases.

Created: 2026-09-15

Settings rows hold arbitrary JSON values under a unique key. A few keys are
structured:

- ``automation:config``: switches and batch sizes read by the workers
- ``watcher:leader``: the leader lease shared by worker processes
- ``openclaw:models:available``: the model catalog reported by the runner
- ``probe:*``: last-seen markers written by workers and report scripts
"""

from __future__ import annotations

import logging
import math
from typing import Any

from mission_control.models import Setting, clamp, now_ms
from mission_control.store import FileMissionControlStore, get_mission_control_store

logger = logging.getLogger(__name__)

COLLECTION = "settings"

AUTOMATION_CONFIG_KEY = "automation:config"
WATCHER_LEASE_KEY = "watcher:leader"
AVAILABLE_MODELS_KEY = "openclaw:models:available"
PROBE_LAST_DISPATCH_STARTED_KEY = "probe:last_dispatch_started"
PROBE_LAST_DISPATCH_RESULT_KEY = "probe:last_dispatch_result"
PROBE_LAST_REPORT_CHAT_KEY = "probe:last_report_chat_write"

DEFAULT_AUTOMATION_CONFIG: dict[str, Any] = {
    "auto_dispatch_enabled": True,
    "notification_delivery_enabled": True,
    "notification_batch_size": 10,
    "heartbeat_enabled": True,
    "heartbeat_max_notifications": 3,
    "heartbeat_max_tasks": 3,
    "heartbeat_max_activities": 4,
    "heartbeat_require_chat_update": False,
}

# Integer fields and their allowed range
AUTOMATION_INT_BOUNDS: dict[str, tuple[int, int]] = {
    "notification_batch_size": (1, 50),
    "heartbeat_max_notifications": (1, 20),
    "heartbeat_max_tasks": (1, 20),
    "heartbeat_max_activities": (1, 30),
}

DEFAULT_LEASE_TTL_MS = 8000
MIN_LEASE_TTL_MS = 1000
MAX_LEASE_TTL_MS = 120_000


def normalize_bool(value: Any, fallback: bool) -> bool:
    return value if isinstance(value, bool) else fallback


def normalize_int(value: Any, fallback: int, low: int, high: int) -> int:
    """Round half-up and clamp; anything but a finite number gives ``fallback``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    if not math.isfinite(value):
        return fallback
    return clamp(math.floor(value + 0.5), low, high)


def parse_automation_config(value: Any) -> dict[str, Any]:
    raw = value if isinstance(value, dict) else {}
    config = {}
    for name, default in DEFAULT_AUTOMATION_CONFIG.items():
        if name in AUTOMATION_INT_BOUNDS:
            low, high = AUTOMATION_INT_BOUNDS[name]
            config[name] = normalize_int(raw.get(name), default, low, high)
        else:
            config[name] = normalize_bool(raw.get(name), default)
    return config


def parse_lease(value: Any) -> dict[str, Any]:
    raw = value if isinstance(value, dict) else {}
    owner = raw.get("owner")
    expires_at = raw.get("expires_at")
    valid_expiry = (
        isinstance(expires_at, (int, float))
        and not isinstance(expires_at, bool)
        and math.isfinite(expires_at)
    )
    return {
        "owner": owner if isinstance(owner, str) and owner else None,
        "expires_at": expires_at if valid_expiry else 0,
    }


def parse_available_models(value: Any) -> list[dict[str, str]]:
    raw = value if isinstance(value, dict) else {}
    entries = raw.get("models")
    if not isinstance(entries, list):
        return []

    models = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        model_id = entry.get("id")
        model_id = model_id.strip() if isinstance(model_id, str) else ""
        if not model_id:
            continue
        name = entry.get("name")
        name = name.strip() if isinstance(name, str) else ""
        models.append({"id": model_id, "name": name or model_id})
    models.sort(key=lambda m: m["name"].lower())
    return models


class SettingsService:
    """Key/value settings with a few structured helpers on top."""

    def __init__(self, store: FileMissionControlStore | None = None):
        self._store = store or get_mission_control_store()

    # =========================================================================
    # Plain key/value
    # =========================================================================

    async def get_setting(self, key: str) -> Setting | None:
        return await self._store.find_first(COLLECTION, lambda s: s.key == key)

    async def get_value(self, key: str, default: Any = None) -> Any:
        row = await self.get_setting(key)
        return row.value if row else default

    async def list_settings(self) -> list[Setting]:
        rows = await self._store.rows(COLLECTION)
        return sorted(rows, key=lambda s: s.key)

    async def _upsert(self, key: str, value: Any) -> Setting:
        row = await self.get_setting(key)
        if row:
            row.value = value
            await self._store.save(COLLECTION, row)
            return row
        row = Setting(key=key, value=value)
        await self._store.insert(COLLECTION, row)
        return row

    async def set_setting(self, key: str, value: Any) -> str:
        """Create or replace a setting and return its id."""
        async with self._store.lock:
            row = await self._upsert(key, value)
        return row.id

    # =========================================================================
    # Automation config
    # =========================================================================

    async def get_automation_config(self) -> dict[str, Any]:
        return parse_automation_config(await self.get_value(AUTOMATION_CONFIG_KEY))

    async def update_automation_config(self, **changes: Any) -> dict[str, Any]:
        """Apply a partial update. Unknown keys and None values are ignored."""
        async with self._store.lock:
            config = parse_automation_config(await self.get_value(AUTOMATION_CONFIG_KEY))
            for name, value in changes.items():
                if value is None or name not in config:
                    continue
                if name in AUTOMATION_INT_BOUNDS:
                    low, high = AUTOMATION_INT_BOUNDS[name]
                    config[name] = normalize_int(value, config[name], low, high)
                else:
                    config[name] = normalize_bool(value, config[name])
            await self._upsert(AUTOMATION_CONFIG_KEY, config)

        logger.info(f"Automation config updated: {config}")
        return config

    # =========================================================================
    # Leases
    # =========================================================================

    async def acquire_lease(self, key: str, owner: str, ttl_ms: Any) -> dict[str, Any]:
        """Take or renew the lease at ``key`` for ``owner``.

        Succeeds when the lease is free, expired, ownerless or already held by
        ``owner``.
        """
        ttl = normalize_int(ttl_ms, DEFAULT_LEASE_TTL_MS, MIN_LEASE_TTL_MS, MAX_LEASE_TTL_MS)
        async with self._store.lock:
            now = now_ms()
            existing = await self.get_setting(key)
            lease = parse_lease(existing.value if existing else None)
            can_acquire = (
                existing is None
                or lease["owner"] == owner
                or lease["expires_at"] <= now
                or lease["owner"] is None
            )
            if not can_acquire:
                return {
                    "acquired": False,
                    "owner": lease["owner"],
                    "expires_at": lease["expires_at"],
                }

            expires_at = now + ttl
            await self._upsert(key, {"owner": owner, "expires_at": expires_at, "renewed_at": now})

        if lease["owner"] != owner:
            logger.info(f"Lease {key} acquired by {owner}")
        return {"acquired": True, "owner": owner, "expires_at": expires_at}

    async def release_lease(self, key: str, owner: str) -> bool:
        """Release the lease if ``owner`` currently holds it."""
        async with self._store.lock:
            existing = await self.get_setting(key)
            if existing is None:
                return False
            if parse_lease(existing.value)["owner"] != owner:
                return False
            await self._upsert(key, {"owner": None, "expires_at": 0, "released_at": now_ms()})

        logger.info(f"Lease {key} released by {owner}")
        return True

    # =========================================================================
    # Model catalog
    # =========================================================================

    async def list_available_models(self) -> list[dict[str, str]]:
        return parse_available_models(await self.get_value(AVAILABLE_MODELS_KEY))

"""Model-provider auth profiles.

Created: 2026-09-16

At most one profile is active at a time. The runner reports the logins it
knows about through ``sync_profiles``.
"""

from __future__ import annotations

import logging
from typing import Any

from mission_control.errors import NotFoundError
from mission_control.models import AuthProfile
from mission_control.store import FileMissionControlStore, get_mission_control_store

logger = logging.getLogger(__name__)

COLLECTION = "auth_profiles"

DEFAULT_PROFILES = [
    {
        "email": "default",
        "provider": "openai-codex",
        "profile_id": "openai-codex:default",
        "is_active": True,
    },
    {
        "email": "default",
        "provider": "google",
        "profile_id": "google:default",
        "is_active": False,
    },
    {
        "email": "default",
        "provider": "kimi-code",
        "profile_id": "kimi-code:default",
        "is_active": False,
    },
]


class AuthProfileService:
    def __init__(self, store: FileMissionControlStore | None = None):
        self._store = store or get_mission_control_store()

    async def list_profiles(self) -> list[AuthProfile]:
        return await self._store.rows(COLLECTION)

    async def get_active_profile(self) -> AuthProfile | None:
        return await self._store.find_first(COLLECTION, lambda p: p.is_active)

    async def seed_profiles(self) -> int:
        """Insert the default profiles into an empty collection."""
        async with self._store.lock:
            if await self._store.rows(COLLECTION):
                return 0
            for data in DEFAULT_PROFILES:
                await self._store.insert(COLLECTION, AuthProfile.from_dict(data))
        return len(DEFAULT_PROFILES)

    async def set_active_profile(self, profile_id: str) -> None:
        """Activate one profile and deactivate all others.

        Raises:
            NotFoundError: ``profile_id`` is not a known profile.
        """
        async with self._store.lock:
            rows = await self._store.rows(COLLECTION)
            if not any(p.id == profile_id for p in rows):
                raise NotFoundError("Auth profile", profile_id)
            for profile in rows:
                is_target = profile.id == profile_id
                if profile.is_active != is_target:
                    profile.is_active = is_target
                    await self._store.save(COLLECTION, profile)
        logger.info(f"Active auth profile set to {profile_id}")

    async def sync_profiles(
        self,
        profiles: list[dict[str, Any]],
        preferred_active_profile_id: str | None = None,
    ) -> list[AuthProfile]:
        """Replace the stored profiles with the runner's list.

        Incoming entries are keyed by ``profile_id``; later duplicates win and
        entries without a profile id or provider are skipped. An empty list
        leaves the stored profiles untouched.
        """
        incoming: dict[str, dict[str, Any]] = {}
        for profile in profiles:
            if not profile.get("profile_id") or not profile.get("provider"):
                continue
            incoming[profile["profile_id"]] = profile

        async with self._store.lock:
            existing = await self._store.rows(COLLECTION)
            if not incoming:
                return existing

            by_profile_id = {p.profile_id: p for p in existing}
            current_active = next((p for p in existing if p.is_active), None)

            if preferred_active_profile_id in incoming:
                active_id = preferred_active_profile_id
            elif current_active and current_active.profile_id in incoming:
                active_id = current_active.profile_id
            else:
                active_id = next(iter(incoming))

            for pid, profile in incoming.items():
                row = by_profile_id.get(pid)
                if row is None:
                    row = AuthProfile(
                        email=profile.get("email", ""),
                        provider=profile["provider"],
                        profile_id=pid,
                        is_active=pid == active_id,
                    )
                    await self._store.insert(COLLECTION, row)
                    continue
                changed = (
                    row.email != profile.get("email", "")
                    or row.provider != profile["provider"]
                    or row.is_active != (pid == active_id)
                )
                if changed:
                    row.email = profile.get("email", "")
                    row.provider = profile["provider"]
                    row.is_active = pid == active_id
                    await self._store.save(COLLECTION, row)

            for row in existing:
                if row.profile_id not in incoming:
                    await self._store.delete(COLLECTION, row.id)

            result = await self._store.rows(COLLECTION)

        logger.info(f"Synced {len(incoming)} auth profile(s); active={active_id}")
        return result

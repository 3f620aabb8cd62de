"""File-based Mission Control store.

Created: 2026-09-14

Storage layout:
~/.mission-control/
    agents.json              # Agent roster
    tasks.json               # Kanban tasks
    messages.json            # Channel and task-thread messages
    activities.json          # Activity feed
    documents.json           # Documents and deliverables
    projects.json            # Projects
    notifications.json       # Notification queue
    task_subscriptions.json  # Who follows which task
    task_dispatches.json     # Dispatch records
    settings.json            # Key/value settings, leases, probes
    auth_profiles.json       # Model-provider logins

Design notes:
- Single JSON file per collection, loaded into memory at start
- Dict insertion order is creation order; "newest first" means reversed rows
- Atomic writes using temp file + rename
- ``lock`` serializes mutations that read and then write (claims, leases,
  unique names). Methods holding it must not call each other.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from mission_control.models import (
    Activity,
    AgentProfile,
    AuthProfile,
    Document,
    Message,
    Notification,
    Project,
    Setting,
    Task,
    TaskDispatch,
    TaskSubscription,
    now_ms,
)

logger = logging.getLogger(__name__)

COLLECTIONS: dict[str, type] = {
    "agents": AgentProfile,
    "tasks": Task,
    "messages": Message,
    "activities": Activity,
    "documents": Document,
    "projects": Project,
    "notifications": Notification,
    "task_subscriptions": TaskSubscription,
    "task_dispatches": TaskDispatch,
    "settings": Setting,
    "auth_profiles": AuthProfile,
}


class FileMissionControlStore:
    """File-based storage for every Mission Control collection.

    Keeps each collection as an ordered in-memory dict keyed by id and
    rewrites the collection's JSON file after each change.
    """

    def __init__(self, base_path: Path | None = None):
        """Initialize the store.

        Args:
            base_path: Directory for storage files. Defaults to the configured
                data directory.
        """
        if base_path is None:
            from mission_control.config import get_config_dir

            base_path = get_config_dir()

        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.lock = asyncio.Lock()

        self._data: dict[str, dict[str, Any]] = {name: {} for name in COLLECTIONS}

        # Load existing data
        self._load_all()

    # =========================================================================
    # File I/O Helpers
    # =========================================================================

    def _path_for(self, collection: str) -> Path:
        return self.base_path / f"{collection}.json"

    def _load_json(self, path: Path) -> list[dict[str, Any]]:
        """Load a JSON file, returning empty list if not found."""
        if not path.exists():
            return []
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Error loading {path}: {e}")
            return []

    def _save_json(self, path: Path, data: list[dict[str, Any]]) -> None:
        """Save data to JSON file atomically."""
        temp_path = path.with_suffix(".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(path)
        except OSError as e:
            logger.error(f"Error saving {path}: {e}")
            if temp_path.exists():
                temp_path.unlink()

    def _load_all(self) -> None:
        """Load all collections from files into memory."""
        for name, model in COLLECTIONS.items():
            for data in self._load_json(self._path_for(name)):
                record = model.from_dict(data)
                self._data[name][record.id] = record

        logger.info(
            f"Mission Control loaded: {len(self._data['agents'])} agents, "
            f"{len(self._data['tasks'])} tasks, {len(self._data['messages'])} messages"
        )

    def _persist(self, collection: str) -> None:
        """Persist one collection to its file."""
        data = [r.to_dict() for r in self._data[collection].values()]
        self._save_json(self._path_for(collection), data)

    def _table(self, collection: str) -> dict[str, Any]:
        try:
            return self._data[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    # =========================================================================
    # Record Operations
    # =========================================================================

    async def insert(self, collection: str, record: Any) -> str:
        """Insert a new record at the end of its collection."""
        self._table(collection)[record.id] = record
        self._persist(collection)
        return record.id

    async def save(self, collection: str, record: Any) -> str:
        """Save or update a record. Updating keeps its creation position."""
        if hasattr(record, "updated_at"):
            record.updated_at = now_ms()
        self._table(collection)[record.id] = record
        self._persist(collection)
        return record.id

    async def get(self, collection: str, record_id: str | None) -> Any | None:
        """Get a record by ID."""
        if not record_id:
            return None
        return self._table(collection).get(record_id)

    async def delete(self, collection: str, record_id: str) -> bool:
        """Delete a record."""
        table = self._table(collection)
        if record_id in table:
            del table[record_id]
            self._persist(collection)
            return True
        return False

    async def rows(self, collection: str) -> list[Any]:
        """All records of a collection in creation order."""
        return list(self._table(collection).values())

    async def find_first(self, collection: str, predicate: Callable[[Any], bool]) -> Any | None:
        """First record (in creation order) matching ``predicate``."""
        for record in self._table(collection).values():
            if predicate(record):
                return record
        return None

    # =========================================================================
    # Utility Operations
    # =========================================================================

    async def get_stats(self) -> dict[str, Any]:
        """Record count per collection."""
        return {name: {"total": len(table)} for name, table in self._data.items()}

    async def clear_all(self) -> None:
        """Clear all data. Use with caution!"""
        for name, table in self._data.items():
            table.clear()
            self._persist(name)

        logger.warning("Mission Control data cleared!")


# =========================================================================
# Factory Function
# =========================================================================

_store_instance: FileMissionControlStore | None = None


def get_mission_control_store(base_path: Path | None = None) -> FileMissionControlStore:
    """Get or create the Mission Control store singleton.

    Args:
        base_path: Optional custom storage path. Only used on first call.

    Returns:
        The FileMissionControlStore instance.
    """
    global _store_instance
    if _store_instance is None:
        _store_instance = FileMissionControlStore(base_path)
    return _store_instance


def reset_mission_control_store() -> None:
    """Reset the store singleton (for testing)."""
    global _store_instance
    _store_instance = None

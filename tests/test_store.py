# Tests for the Mission Control JSON file store
# Created: 2026-09-19

import json
import tempfile
from pathlib import Path

import pytest

from mission_control.models import AgentProfile, Setting, Task
from mission_control.store import FileMissionControlStore


@pytest.fixture
def temp_store_path():
    """Create a temporary directory for test storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_store_path):
    return FileMissionControlStore(temp_store_path)


class TestStore:
    """Tests for FileMissionControlStore."""

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store):
        agent = AgentProfile(name="Forge", role="Developer")
        await store.insert("agents", agent)
        assert await store.get("agents", agent.id) is agent

    @pytest.mark.asyncio
    async def test_get_missing_or_empty_id(self, store):
        assert await store.get("agents", "nope") is None
        assert await store.get("agents", None) is None
        assert await store.get("agents", "") is None

    @pytest.mark.asyncio
    async def test_unknown_collection(self, store):
        with pytest.raises(ValueError):
            await store.rows("widgets")

    @pytest.mark.asyncio
    async def test_rows_keep_creation_order(self, store):
        first = Task(title="first")
        second = Task(title="second")
        await store.insert("tasks", first)
        await store.insert("tasks", second)

        first.title = "first, edited"
        await store.save("tasks", first)

        titles = [t.title for t in await store.rows("tasks")]
        assert titles == ["first, edited", "second"]

    @pytest.mark.asyncio
    async def test_save_stamps_updated_at(self, store):
        setting = Setting(key="k", value=1, updated_at=0)
        await store.insert("settings", setting)
        await store.save("settings", setting)
        assert setting.updated_at > 0

    @pytest.mark.asyncio
    async def test_delete(self, store):
        task = Task(title="gone")
        await store.insert("tasks", task)
        assert await store.delete("tasks", task.id) is True
        assert await store.delete("tasks", task.id) is False
        assert await store.rows("tasks") == []

    @pytest.mark.asyncio
    async def test_find_first(self, store):
        await store.insert("agents", AgentProfile(name="A"))
        b = AgentProfile(name="B")
        await store.insert("agents", b)
        assert await store.find_first("agents", lambda a: a.name == "B") is b
        assert await store.find_first("agents", lambda a: a.name == "C") is None

    @pytest.mark.asyncio
    async def test_persistence(self, temp_store_path):
        store = FileMissionControlStore(temp_store_path)
        agent = AgentProfile(name="Persisted", role="Tester")
        await store.insert("agents", agent)

        data = json.loads((temp_store_path / "agents.json").read_text(encoding="utf-8"))
        assert data[0]["name"] == "Persisted"

        reloaded = FileMissionControlStore(temp_store_path)
        restored = await reloaded.get("agents", agent.id)
        assert restored is not None
        assert restored.name == "Persisted"

    @pytest.mark.asyncio
    async def test_corrupt_file_loads_empty(self, temp_store_path):
        (temp_store_path / "tasks.json").write_text("{not json", encoding="utf-8")
        store = FileMissionControlStore(temp_store_path)
        assert await store.rows("tasks") == []

    @pytest.mark.asyncio
    async def test_stats_and_clear_all(self, store):
        await store.insert("tasks", Task(title="x"))
        stats = await store.get_stats()
        assert stats["tasks"]["total"] == 1
        assert stats["agents"]["total"] == 0

        await store.clear_all()
        assert (await store.get_stats())["tasks"]["total"] == 0

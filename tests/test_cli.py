# Tests for the mission-control command line
# Created: 2026-09-19

import asyncio
import tempfile
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI

import mission_control.__main__ as cli
from mission_control import FileMissionControlStore, MissionControlManager
from mission_control.api import mount_routers
from mission_control.client import MissionControlClient
from mission_control.config import Settings
from mission_control.kv import PROBE_LAST_REPORT_CHAT_KEY
from mission_control.models import AgentStatus


@pytest.fixture
def temp_store_path():
    """Create a temporary directory for test storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def manager(temp_store_path, monkeypatch):
    store = FileMissionControlStore(temp_store_path)
    manager = MissionControlManager(store)

    import mission_control.manager as manager_module
    import mission_control.store as store_module

    monkeypatch.setattr(store_module, "_store_instance", store)
    monkeypatch.setattr(manager_module, "_manager_instance", manager)
    return manager


@pytest.fixture
def settings(manager, monkeypatch):
    """CLI wired to an in-process API server."""
    settings = Settings(
        api_url="http://testserver", delivery_webhook_url=None, dispatch_webhook_url=None
    )
    app = FastAPI()
    mount_routers(app)

    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    monkeypatch.setattr(
        cli,
        "_build_client",
        lambda s: MissionControlClient(s.api_url, transport=httpx.ASGITransport(app=app)),
    )
    return settings


def _add_agent(manager, name="Forge"):
    return asyncio.run(manager.create_agent(name=name, role="Developer"))


class TestParser:
    def test_heartbeat_arguments(self):
        args = cli.build_parser().parse_args(
            ["report", "heartbeat", "Forge", "blocked", "Waiting", "on", "CI"]
        )
        assert args.command == "report"
        assert args.action == "heartbeat"
        assert args.agent == "Forge"
        assert args.status == "blocked"
        assert args.message == ["Waiting", "on", "CI"]

    def test_heartbeat_defaults_to_active(self):
        args = cli.build_parser().parse_args(["report", "heartbeat", "Forge"])
        assert args.status == AgentStatus.ACTIVE.value
        assert args.message == []

    def test_serve_and_worker_flags(self):
        args = cli.build_parser().parse_args(["serve", "--port", "9000", "--dev"])
        assert (args.host, args.port, args.dev) == (None, 9000, True)
        assert cli.build_parser().parse_args(["dispatch-worker", "--once"]).once is True

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_chat_requires_message(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["report", "chat", "Forge"])


class TestCommands:
    def test_seed(self, settings, manager):
        assert cli.main(["seed"]) == 0
        assert len(asyncio.run(manager.list_agents())) == 5

    def test_status(self, settings):
        assert cli.main(["status"]) == 0

    def test_report_heartbeat(self, settings, manager):
        agent = _add_agent(manager)
        assert cli.main(["report", "heartbeat", "Forge", "blocked", "CI", "is", "red"]) == 0
        updated = asyncio.run(manager.get_agent(agent.id))
        assert updated.status == AgentStatus.BLOCKED

    def test_report_chat(self, settings, manager):
        agent = _add_agent(manager)
        assert cli.main(["report", "chat", "Forge", "Draft", "is", "ready"]) == 0

        latest = asyncio.run(manager.latest_for_channel("hq"))
        assert latest.content == "Draft is ready"
        assert latest.from_agent_id == agent.id

        probe = asyncio.run(manager.settings.get_value(PROBE_LAST_REPORT_CHAT_KEY))
        assert probe["agent"] == "Forge"
        assert probe["preview"] == "Draft is ready"

    def test_report_unknown_agent(self, settings):
        assert cli.main(["report", "chat", "Nobody", "hello"]) == 1

    def test_workers_need_webhook_url(self, settings):
        assert cli.main(["notify-worker", "--once"]) == 2
        assert cli.main(["dispatch-worker", "--once"]) == 2

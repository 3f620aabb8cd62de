"""Mission Control entry point.

Changes:
  - 2026-09-19: Added ``report`` subcommand (heartbeat / chat) for agent scripts.
  - 2026-09-18: Added ``notify-worker`` and ``dispatch-worker`` daemons.
  - 2026-09-17: Added ``serve``, ``status`` and ``seed`` subcommands.
"""

import argparse
import asyncio
import json
import logging

from rich.console import Console

from mission_control import __version__
from mission_control.client import MissionControlClient
from mission_control.config import Settings, get_settings
from mission_control.kv import PROBE_LAST_REPORT_CHAT_KEY
from mission_control.logging_setup import setup_logging
from mission_control.models import AgentStatus, now_ms, truncate

logger = logging.getLogger(__name__)

console = Console()


def _build_client(settings: Settings) -> MissionControlClient:
    return MissionControlClient(settings.api_url, secret=settings.webhook_secret)


async def run_status(settings: Settings) -> int:
    """Print the ops overview as JSON."""
    overview = await _build_client(settings).ops_overview()
    console.print_json(json.dumps(overview))
    return 0


async def run_seed(settings: Settings) -> int:
    seeded = await _build_client(settings).seed()
    console.print(f"Seeded {seeded['projects']} project(s) and {seeded['agents']} agent(s)")
    return 0


async def run_report(settings: Settings, args: argparse.Namespace) -> int:
    """Report a heartbeat or a chat line on behalf of an agent."""
    client = _build_client(settings)
    agent = await client.get_agent_by_name(args.agent)
    if agent is None:
        console.print(f"[red]Agent not found: {args.agent}[/red]")
        return 1

    if args.action == "heartbeat":
        message = " ".join(args.message)
        await client.heartbeat(agent["name"], args.status, message)
        console.print(f"Heartbeat sent: {args.status}")
        return 0

    message = " ".join(args.message).strip()
    if not message:
        console.print("[red]Nothing to send[/red]")
        return 1
    await client.send_message("hq", message, from_agent_id=agent["id"])
    await client.set_setting(
        PROBE_LAST_REPORT_CHAT_KEY,
        {
            "at": now_ms(),
            "agent": agent["name"],
            "preview": truncate(message, 140),
        },
    )
    console.print(f'Chat sent: "{message}"')
    return 0


async def run_notify_worker(settings: Settings, run_once: bool) -> int:
    from mission_control.workers import NotificationWorker
    from mission_control.workers.delivery import WebhookRelay

    if not settings.delivery_webhook_url:
        logger.error("MISSION_CONTROL_DELIVERY_WEBHOOK_URL is not set")
        return 2
    worker = NotificationWorker(
        _build_client(settings),
        WebhookRelay(settings.delivery_webhook_url, secret=settings.webhook_secret),
        runner_id=settings.runner_id,
        poll_ms=settings.notification_poll_ms,
        refresh_ms=settings.automation_refresh_ms,
        claim_ttl_ms=settings.notification_claim_ttl_ms,
        lease_ttl_ms=settings.watcher_lease_ttl_ms,
    )
    await worker.run(run_once=run_once)
    return 0


async def run_dispatch_worker(settings: Settings, run_once: bool) -> int:
    from mission_control.workers import DispatchWorker
    from mission_control.workers.delivery import WebhookRelay

    if not settings.dispatch_webhook_url:
        logger.error("MISSION_CONTROL_DISPATCH_WEBHOOK_URL is not set")
        return 2
    worker = DispatchWorker(
        _build_client(settings),
        WebhookRelay(settings.dispatch_webhook_url, secret=settings.webhook_secret),
        runner_id=settings.runner_id,
        poll_ms=settings.dispatch_poll_ms,
        refresh_ms=settings.automation_refresh_ms,
    )
    await worker.run(run_once=run_once)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mission-control",
        description="Mission Control - coordination hub for a squad of AI agents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mission-control serve                         Start the API server
  mission-control notify-worker                 Deliver queued notifications
  mission-control dispatch-worker --once        Relay one pending dispatch
  mission-control status                        Print the ops overview
  mission-control report heartbeat Forge active "Working on the login flow"
  mission-control report chat Quill "Draft is ready for review"
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Start the API server")
    serve.add_argument("--host", default=None, help="Bind address (default: settings)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: settings)")
    serve.add_argument("--dev", action="store_true", help="Auto-reload on code changes")

    for name, help_text in (
        ("notify-worker", "Deliver notifications to the delivery webhook"),
        ("dispatch-worker", "Relay task dispatches to the runner webhook"),
    ):
        worker = sub.add_parser(name, help=help_text)
        worker.add_argument("--once", action="store_true", help="Run one cycle and exit")

    sub.add_parser("status", help="Print the ops overview as JSON")
    sub.add_parser("seed", help="Insert the default project and squad")

    report = sub.add_parser("report", help="Report on behalf of an agent")
    report_sub = report.add_subparsers(dest="action", required=True)
    heartbeat = report_sub.add_parser("heartbeat", help="Send a heartbeat")
    heartbeat.add_argument("agent")
    heartbeat.add_argument(
        "status",
        nargs="?",
        default=AgentStatus.ACTIVE.value,
        choices=[s.value for s in AgentStatus],
    )
    heartbeat.add_argument("message", nargs="*")
    chat = report_sub.add_parser("chat", help="Post a message to the hq channel")
    chat.add_argument("agent")
    chat.add_argument("message", nargs="+")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(level=settings.log_level)

    try:
        if args.command == "serve":
            from mission_control.serve import run_server

            run_server(
                host=args.host or settings.web_host,
                port=args.port or settings.web_port,
                dev=args.dev,
            )
            return 0
        if args.command == "notify-worker":
            return asyncio.run(run_notify_worker(settings, args.once or settings.run_once))
        if args.command == "dispatch-worker":
            return asyncio.run(run_dispatch_worker(settings, args.once or settings.run_once))
        if args.command == "status":
            return asyncio.run(run_status(settings))
        if args.command == "seed":
            return asyncio.run(run_seed(settings))
        return asyncio.run(run_report(settings, args))
    except KeyboardInterrupt:
        logger.info("Mission Control stopped.")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Lifecycle events from the agent runner.

Created: 2026-09-16

The runner's hook posts one event per lifecycle step of a run:

- ``start``: a run began; creates an in-progress task if none is linked
- ``progress``: a status line, posted to the task thread
- ``end``: the run finished; the task is marked done
- ``error``: the run failed; the task goes to review
- ``document``: the run produced a document

Events are linked to a task by run id, or by a ``mission:<task id>`` token in
the session key.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

from mission_control.activities import ActivityService
from mission_control.models import (
    ActivityType,
    AgentProfile,
    Document,
    DocumentType,
    Message,
    Task,
    TaskStatus,
    now_ms,
)
from mission_control.store import FileMissionControlStore, get_mission_control_store

logger = logging.getLogger(__name__)

EVENT_ACTIONS = ("start", "progress", "end", "error", "document")

SESSION_TASK_PATTERN = re.compile(
    r"mission[:-]([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})",
    re.IGNORECASE,
)


def summarize_prompt(prompt: str, max_chars: int = 90) -> str:
    """First line of a prompt, cut to ``max_chars``."""
    first = prompt.strip().split("\n")[0]
    if len(first) <= max_chars:
        return first
    return first[: max_chars - 3] + "..."


def format_duration(ms: int) -> str:
    seconds = max(0, ms // 1000)
    minutes = seconds // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def task_id_from_session_key(session_key: str | None) -> str | None:
    if not session_key:
        return None
    match = SESSION_TASK_PATTERN.search(session_key)
    return match.group(1).lower() if match else None


def normalize_document_type(value: str | None) -> DocumentType:
    normalized = (value or "").strip().lower()
    if normalized == "md":
        return DocumentType.MARKDOWN
    try:
        return DocumentType(normalized)
    except ValueError:
        return DocumentType.NOTE


def parse_event_time(timestamp: str | None, fallback: int) -> int:
    """ISO-8601 timestamp to epoch ms; unparseable values give ``fallback``."""
    if not timestamp:
        return fallback
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Ignoring unparseable event timestamp: {timestamp}")
        return fallback
    return int(parsed.timestamp() * 1000)


class RunnerEventService:
    """Apply runner lifecycle events to tasks, messages and documents."""

    def __init__(
        self,
        store: FileMissionControlStore | None = None,
        activities: ActivityService | None = None,
    ):
        self._store = store or get_mission_control_store()
        self._activities = activities or ActivityService(self._store)

    async def _find_task(
        self, run_id: str, session_key: str | None, event_time: int
    ) -> Task | None:
        task = await self._store.find_first("tasks", lambda t: t.run_id == run_id)
        if task is not None:
            return task

        token = task_id_from_session_key(session_key)
        task = await self._store.get("tasks", token) if token else None
        if task is not None:
            task.session_key = session_key
            task.run_id = run_id
            task.last_event_at = event_time
            await self._store.save("tasks", task)
        return task

    async def _find_agent(
        self, session_key: str | None, agent_id: str | None
    ) -> AgentProfile | None:
        agent = None
        if session_key:
            agent = await self._store.find_first(
                "agents", lambda a: a.session_key == session_key
            )
        if agent is None and agent_id:
            marker = f"agent:{agent_id}:"
            agent = await self._store.find_first("agents", lambda a: marker in a.session_key)
        return agent

    async def _post(self, task: Task, agent: AgentProfile | None, content: str, at: int) -> Message:
        message = Message(
            channel=f"task:{task.id}",
            content=content,
            task_id=task.id,
            from_agent_id=agent.id if agent else None,
            from_user=False,
            created_at=at,
        )
        await self._store.insert("messages", message)
        return message

    async def receive_event(
        self,
        run_id: str,
        action: str,
        session_key: str | None = None,
        agent_id: str | None = None,
        timestamp: str | None = None,
        prompt: str | None = None,
        source: str | None = None,
        message: str | None = None,
        response: str | None = None,
        error: str | None = None,
        document: dict[str, Any] | None = None,
    ) -> str | None:
        """Apply one runner event.

        Returns:
            The id of the task the event was applied to, if any.
        """
        if action not in EVENT_ACTIONS:
            raise ValueError(f"Unknown event action: {action}")

        event_time = parse_event_time(timestamp, now_ms())
        task = await self._find_task(run_id, session_key, event_time)
        agent = await self._find_agent(session_key, agent_id)
        from_agent_id = agent.id if agent else None

        if task is None and action == "start":
            title = summarize_prompt(prompt or f"OpenClaw run {run_id[:8]}")
            task = Task(
                title=title,
                description=prompt or f"OpenClaw lifecycle run {run_id}",
                status=TaskStatus.IN_PROGRESS,
                assignee_ids=[agent.id] if agent else [],
                created_by="openclaw",
                session_key=session_key,
                run_id=run_id,
                source=source,
                started_at=event_time,
                last_event_at=event_time,
                created_at=event_time,
                updated_at=event_time,
            )
            await self._store.insert("tasks", task)
            await self._activities.log(
                ActivityType.TASK_CREATED,
                f'OpenClaw started "{title}"',
                task_id=task.id,
                agent_id=from_agent_id,
                created_at=event_time,
            )
            logger.info(f"Run {run_id} started task {task.id}")

        if task is None and action != "document":
            logger.debug(f"Dropping {action} event for unknown run {run_id}")
            return None
        if task is not None and task.status == TaskStatus.ARCHIVED:
            return None

        if task is not None:
            task.last_event_at = event_time
            task.session_key = session_key or task.session_key
            task.run_id = run_id
            task.source = source or task.source
            await self._store.save("tasks", task)

        if action == "progress":
            if message:
                await self._post(task, agent, message, event_time)
        elif action == "end":
            duration = format_duration(event_time - (task.started_at or task.created_at))
            content = f"Completed in {duration}"
            if response:
                content = f"{content}\n\n{response}"
            task.status = TaskStatus.DONE
            task.completed_at = event_time
            await self._store.save("tasks", task)
            await self._post(task, agent, content, event_time)
            await self._activities.log(
                ActivityType.TASK_UPDATED,
                f'OpenClaw completed "{task.title}" in {duration}',
                task_id=task.id,
                agent_id=from_agent_id,
                created_at=event_time,
            )
        elif action == "error":
            task.status = TaskStatus.REVIEW
            await self._store.save("tasks", task)
            await self._post(task, agent, f"Error: {error or 'Unknown OpenClaw error'}", event_time)
            await self._activities.log(
                ActivityType.TASK_UPDATED,
                f'OpenClaw error for "{task.title}"',
                task_id=task.id,
                agent_id=from_agent_id,
                created_at=event_time,
            )
            logger.warning(f"Run {run_id} reported an error on task {task.id}")
        elif action == "document" and document:
            await self._store_document(task, agent, agent_id, document, event_time)

        return task.id if task else None

    async def _store_document(
        self,
        task: Task | None,
        agent: AgentProfile | None,
        agent_id: str | None,
        document: dict[str, Any],
        event_time: int,
    ) -> None:
        created_by = agent.name if agent else (agent_id or "OpenClaw")
        doc_type = normalize_document_type(document.get("type"))
        title = document.get("title", "")
        path = document.get("path")

        message_id = None
        if task is not None:
            content = f'Document created: "{title}"\n\nType: {doc_type.value}'
            if path:
                content += f"\nPath: {path}"
            message_id = (await self._post(task, agent, content, event_time)).id

        await self._store.insert(
            "documents",
            Document(
                title=title,
                content=document.get("content", ""),
                type=doc_type,
                path=path,
                task_id=task.id if task else None,
                project_id=task.project_id if task else None,
                agent_id=agent.id if agent else None,
                message_id=message_id,
                created_by=created_by,
                created_at=event_time,
                updated_at=event_time,
            ),
        )

        summary = f'{created_by} created document "{title}"'
        if task is not None:
            summary += f' for "{task.title}"'
        await self._activities.log(
            ActivityType.DOCUMENT_CREATED,
            summary,
            task_id=task.id if task else None,
            agent_id=agent.id if agent else None,
            project_id=task.project_id if task else None,
            created_at=event_time,
        )

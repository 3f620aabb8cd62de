"""Mission Control manager.

Created: 2026-09-15

High-level operations for Mission Control.

Combines storage operations with the coordination rules:
- Creating agents and projects with unique names
- Task lifecycle with assignee subscriptions and notifications
- Channel chat with @mention fan-out and thread updates
- Documents with their task context
- Seeding the default project and squad

Queue-like concerns live in their own services, reachable as attributes:
``activities``, ``notifications``, ``dispatches``, ``settings``,
``auth_profiles``, ``ops`` and ``events``.
"""

from __future__ import annotations

import logging
from typing import Any

from mission_control.activities import ActivityService
from mission_control.auth_profiles import AuthProfileService
from mission_control.dispatch import DispatchService
from mission_control.errors import DuplicateNameError, NotFoundError
from mission_control.events import RunnerEventService
from mission_control.kv import SettingsService
from mission_control.models import (
    ActivityType,
    AgentLevel,
    AgentProfile,
    AgentStatus,
    Document,
    DocumentType,
    Message,
    ModelConfig,
    PlanningStatus,
    Project,
    SubscriptionReason,
    Task,
    TaskPriority,
    TaskStatus,
    TaskSubscription,
    clamp,
    now_ms,
    parse_mentions,
    random_session_key,
    task_id_from_channel,
    truncate,
)
from mission_control.notifications import NotificationService
from mission_control.ops import OpsService
from mission_control.store import (
    FileMissionControlStore,
    get_mission_control_store,
)

logger = logging.getLogger(__name__)

MODEL_TYPES = ("thinking", "execution", "heartbeat", "fallback")

AGENT_FIELDS = {
    "name",
    "role",
    "level",
    "status",
    "current_task_id",
    "session_key",
    "avatar",
    "system_prompt",
    "character",
    "lore",
    "models",
}

TASK_FIELDS = {
    "title",
    "description",
    "status",
    "priority",
    "project_id",
    "assignee_ids",
    "tags",
    "planning_status",
    "planning_questions",
    "planning_draft",
}


def _is_user_authored(message: Message) -> bool:
    return message.from_user is True or (not message.from_agent_id and message.from_user is not False)


class MissionControlManager:
    """High-level manager for Mission Control operations.

    Provides convenient methods that handle:
    - Activity logging for all changes
    - Notification creation for assignments and @mentions
    - Subscription bookkeeping for task threads
    """

    def __init__(self, store: FileMissionControlStore | None = None):
        """Initialize the manager.

        Args:
            store: Optional store instance. Uses singleton if not provided.
        """
        self._store = store or get_mission_control_store()
        self.activities = ActivityService(self._store)
        self.notifications = NotificationService(self._store)
        self.dispatches = DispatchService(self._store, self.activities)
        self.settings = SettingsService(self._store)
        self.auth_profiles = AuthProfileService(self._store)
        self.ops = OpsService(self._store, self.settings)
        self.events = RunnerEventService(self._store, self.activities)

    @property
    def store(self) -> FileMissionControlStore:
        return self._store

    # =========================================================================
    # Agent Operations
    # =========================================================================

    async def list_agents(self) -> list[AgentProfile]:
        """All agents sorted by name."""
        agents = await self._store.rows("agents")
        return sorted(agents, key=lambda a: a.name)

    async def get_agent(self, agent_id: str) -> AgentProfile | None:
        return await self._store.get("agents", agent_id)

    async def get_agent_by_name(self, name: str) -> AgentProfile | None:
        """Get an agent by exact name."""
        return await self._store.find_first("agents", lambda a: a.name == name)

    async def get_agent_by_session_key(self, session_key: str) -> AgentProfile | None:
        return await self._store.find_first("agents", lambda a: a.session_key == session_key)

    async def list_agents_by_role(self, role: str) -> list[AgentProfile]:
        return [a for a in await self._store.rows("agents") if a.role == role]

    async def create_agent(
        self,
        name: str,
        role: str,
        level: AgentLevel | str | None = None,
        status: AgentStatus | str | None = None,
        session_key: str | None = None,
        avatar: str | None = None,
        system_prompt: str | None = None,
        character: str | None = None,
        lore: str | None = None,
        models: ModelConfig | dict[str, Any] | None = None,
    ) -> AgentProfile:
        """Create a new agent and log the activity.

        Args:
            name: Display name, unique across agents
            role: Job title (e.g., "Squad Lead")
            level: Autonomy level
            status: Initial status, idle by default
            session_key: Runner session key; generated when omitted
            models: Model configuration; defaults when omitted

        Returns:
            The created AgentProfile

        Raises:
            DuplicateNameError: An agent with this name already exists.
        """
        if isinstance(models, dict):
            models = ModelConfig.from_dict(models)

        async with self._store.lock:
            if await self.get_agent_by_name(name):
                raise DuplicateNameError("Agent", name)

            now = now_ms()
            agent = AgentProfile(
                name=name,
                role=role,
                level=AgentLevel(level) if level else None,
                status=AgentStatus(status) if status else AgentStatus.IDLE,
                session_key=session_key or random_session_key(now),
                avatar=avatar,
                system_prompt=system_prompt,
                character=character,
                lore=lore,
                models=models or ModelConfig(),
                created_at=now,
                updated_at=now,
            )
            await self._store.insert("agents", agent)

        await self.activities.log(
            ActivityType.AGENT_STATUS_CHANGED,
            f"Agent created: {name} ({role})",
            agent_id=agent.id,
        )
        logger.info(f"Created agent: {name} ({role})")
        return agent

    async def update_agent(self, agent_id: str, **fields: Any) -> AgentProfile | None:
        """Patch an agent. Missing agents are ignored.

        Raises:
            DuplicateNameError: Renaming onto another agent's name.
        """
        unknown = set(fields) - AGENT_FIELDS
        if unknown:
            raise ValueError(f"Unknown agent fields: {sorted(unknown)}")

        async with self._store.lock:
            agent = await self.get_agent(agent_id)
            if agent is None:
                return None

            new_name = fields.get("name")
            if new_name and new_name != agent.name:
                other = await self.get_agent_by_name(new_name)
                if other and other.id != agent.id:
                    raise DuplicateNameError("Agent", new_name)

            old_status = agent.status
            for key, value in fields.items():
                if value is None:
                    continue
                if key == "status":
                    value = AgentStatus(value)
                elif key == "level":
                    value = AgentLevel(value)
                elif key == "models" and isinstance(value, dict):
                    value = ModelConfig.from_dict(value)
                setattr(agent, key, value)
            await self._store.save("agents", agent)

        if fields.get("status") is not None and agent.status != old_status:
            await self.activities.log(
                ActivityType.AGENT_STATUS_CHANGED,
                f"Agent {agent.name} status: {old_status.value} -> {agent.status.value}",
                agent_id=agent.id,
            )
        return agent

    async def delete_agent(self, agent_id: str) -> None:
        agent = await self.get_agent(agent_id)
        if agent is None:
            raise NotFoundError("Agent", agent_id)
        await self._store.delete("agents", agent_id)
        await self.activities.log(
            ActivityType.AGENT_STATUS_CHANGED,
            f"Agent deleted: {agent.name}",
            agent_id=agent_id,
        )
        logger.info(f"Deleted agent: {agent.name}")

    async def update_agent_model(
        self, agent_id: str, model_type: str, model_name: str
    ) -> AgentProfile:
        """Set one of the agent's thinking/execution/heartbeat/fallback models."""
        if model_type not in MODEL_TYPES:
            raise ValueError(f"Unknown model type: {model_type}")
        agent = await self.get_agent(agent_id)
        if agent is None:
            raise NotFoundError("Agent", agent_id)

        setattr(agent.models, model_type, model_name)
        await self._store.save("agents", agent)
        await self.activities.log(
            ActivityType.AGENT_STATUS_CHANGED,
            f"Agent {agent.name} {model_type} model updated",
            agent_id=agent_id,
        )
        return agent

    async def record_heartbeat(
        self,
        agent_name: str,
        status: AgentStatus | str = AgentStatus.ACTIVE,
        message: str = "",
    ) -> AgentProfile:
        """Heartbeat from an agent's report script.

        Sets the agent's status and, when given, logs the status message.
        """
        agent = await self.get_agent_by_name(agent_name)
        if agent is None:
            raise NotFoundError("Agent", agent_name)

        updated = await self.update_agent(agent.id, status=AgentStatus(status or "active"))
        if message.strip():
            await self.activities.log(
                ActivityType.AGENT_STATUS_CHANGED,
                f"{agent.name}: {truncate(message, 200)}",
                agent_id=agent.id,
            )
        return updated

    # =========================================================================
    # Task Operations
    # =========================================================================

    async def get_task(self, task_id: str) -> Task | None:
        return await self._store.get("tasks", task_id)

    async def list_tasks(
        self,
        status: TaskStatus | str | None = None,
        project_id: str | None = None,
        limit: int = 200,
    ) -> list[Task]:
        """List tasks newest first. A status filter takes precedence."""
        take = clamp(limit, 1, 500)
        tasks = list(reversed(await self._store.rows("tasks")))
        if status:
            wanted = TaskStatus(status)
            tasks = [t for t in tasks if t.status == wanted]
        elif project_id:
            tasks = [t for t in tasks if t.project_id == project_id]
        return tasks[:take]

    async def create_task(
        self,
        title: str,
        description: str = "",
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        project_id: str | None = None,
        assignee_ids: list[str] | None = None,
        tags: list[str] | None = None,
        created_by: str = "user",
    ) -> Task:
        """Create a new task with activity logging.

        Tasks with assignees start as ``assigned``, others in the ``inbox``.
        Every assignee is subscribed to the thread and notified.
        """
        assignee_ids = list(assignee_ids or [])
        task = Task(
            title=title,
            description=description,
            status=TaskStatus.ASSIGNED if assignee_ids else TaskStatus.INBOX,
            priority=TaskPriority(priority),
            project_id=project_id,
            assignee_ids=assignee_ids,
            created_by=created_by,
            tags=tags,
        )
        await self._store.insert("tasks", task)

        await self.activities.log(ActivityType.TASK_CREATED, title, task_id=task.id)

        for agent_id in assignee_ids:
            await self.subscribe(task.id, agent_id, SubscriptionReason.ASSIGNED)
            await self.notifications.create_notification(
                agent_id,
                f'New task assigned: "{title}"',
                source_task_id=task.id,
            )

        logger.info(f"Created task: {title}")
        return task

    async def update_task(self, task_id: str, **fields: Any) -> Task | None:
        """Patch a task. Missing tasks are ignored.

        Changing only the assignees moves the task between ``inbox`` and
        ``assigned``. New assignees are subscribed and notified.
        """
        unknown = set(fields) - TASK_FIELDS
        if unknown:
            raise ValueError(f"Unknown task fields: {sorted(unknown)}")

        task = await self.get_task(task_id)
        if task is None:
            return None

        previous_title = task.title
        current_assignees = list(task.assignee_ids)
        next_assignees = fields.get("assignee_ids")
        if next_assignees is None:
            next_assignees = current_assignees
        added = [a for a in dict.fromkeys(next_assignees) if a not in current_assignees]

        status = fields.get("status")
        resolved = TaskStatus(status) if status is not None else None
        if resolved is None and fields.get("assignee_ids") is not None:
            if next_assignees and task.status == TaskStatus.INBOX:
                resolved = TaskStatus.ASSIGNED
            elif not next_assignees and task.status == TaskStatus.ASSIGNED:
                resolved = TaskStatus.INBOX
        status_changed = resolved is not None and resolved != task.status

        for key, value in fields.items():
            if value is None or key == "status":
                continue
            if key == "priority":
                value = TaskPriority(value)
            elif key == "planning_status":
                value = PlanningStatus(value)
            setattr(task, key, value)
        if resolved is not None:
            task.status = resolved
            if resolved == TaskStatus.DONE and task.completed_at is None:
                task.completed_at = now_ms()
        await self._store.save("tasks", task)

        for agent_id in added:
            await self.subscribe(task_id, agent_id, SubscriptionReason.ASSIGNED)
            await self.notifications.create_notification(
                agent_id,
                f'You were assigned to "{previous_title}" by Mission Control.',
                source_task_id=task_id,
            )

        activity_type = (
            ActivityType.TASK_COMPLETED
            if status_changed and resolved == TaskStatus.DONE
            else ActivityType.TASK_UPDATED
        )
        await self.activities.log(activity_type, previous_title, task_id=task_id)
        return task

    async def delete_task(self, task_id: str) -> None:
        """Delete a task together with its subscriptions."""
        task = await self.get_task(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        await self._store.delete("tasks", task_id)
        for sub in await self.list_subscriptions_for_task(task_id):
            await self._store.delete("task_subscriptions", sub.id)
        logger.info(f"Deleted task: {task.title}")

    async def get_planning(self, task_id: str) -> dict[str, Any] | None:
        task = await self.get_task(task_id)
        if task is None:
            return None
        return {
            "task_id": task.id,
            "planning_status": task.planning_status.value,
            "planning_questions": task.planning_questions,
            "planning_draft": task.planning_draft,
        }

    async def get_dispatch_state(self, task_id: str) -> dict[str, Any] | None:
        return await self.dispatches.get_dispatch_state(task_id)

    async def list_dispatch_states(self) -> list[dict[str, Any]]:
        return await self.dispatches.list_dispatch_states()

    # =========================================================================
    # Message Operations
    # =========================================================================

    async def _channel_rows_newest_first(self, channel: str) -> list[Message]:
        rows = await self._store.rows("messages")
        return [m for m in reversed(rows) if m.channel == channel]

    async def list_messages(self, channel: str, limit: int = 50) -> list[dict[str, Any]]:
        """Newest ``limit`` messages of a channel, returned oldest first.

        A ``task:<id>`` channel without messages falls back to messages
        attached to that task. Rows carry ``text`` and the sender ``agent``.
        """
        take = clamp(limit, 1, 500)
        messages = (await self._channel_rows_newest_first(channel))[:take]

        if not messages:
            task_id = task_id_from_channel(channel)
            if task_id and await self.get_task(task_id):
                rows = await self._store.rows("messages")
                messages = [m for m in reversed(rows) if m.task_id == task_id][:take]

        messages.reverse()
        agents: dict[str, AgentProfile | None] = {}
        out = []
        for message in messages:
            sender = message.from_agent_id
            if sender and sender not in agents:
                agents[sender] = await self.get_agent(sender)
            agent = agents.get(sender) if sender else None
            out.append(
                {
                    **message.to_dict(),
                    "text": message.content,
                    "agent": agent.to_dict() if agent else None,
                }
            )
        return out

    async def latest_for_channel(self, channel: str) -> Message | None:
        rows = await self._channel_rows_newest_first(channel)
        return rows[0] if rows else None

    async def latest_user_for_channel(self, channel: str, scan_limit: int = 80) -> Message | None:
        """Newest user-authored message among the last ``scan_limit``."""
        take = clamp(scan_limit, 1, 200)
        for message in (await self._channel_rows_newest_first(channel))[:take]:
            if _is_user_authored(message):
                return message
        return None

    async def send_message(
        self,
        channel: str,
        content: str,
        from_agent_id: str | None = None,
        task_id: str | None = None,
        from_user: bool | None = None,
    ) -> Message:
        """Post a message to a channel.

        Extracts @mentions and creates notifications:
        - ``@all`` reaches every agent but the sender, user messages only
        - ``@name`` reaches that agent unless it is the sender
        - agent-authored mentions in ``hq`` notify nobody
        - user messages on a task thread reach the remaining subscribers
        """
        mentions = parse_mentions(content)
        is_hq = channel == "hq"

        if task_id is None:
            token = task_id_from_channel(channel)
            if token and await self.get_task(token):
                task_id = token
        if from_user is None:
            from_user = not from_agent_id

        message = Message(
            channel=channel,
            content=content,
            task_id=task_id,
            from_agent_id=from_agent_id,
            from_user=from_user,
            mentions=mentions,
        )
        await self._store.insert("messages", message)

        await self.activities.log(
            ActivityType.MESSAGE_SENT,
            truncate(content, 120),
            task_id=task_id,
            agent_id=from_agent_id,
        )

        if task_id and from_agent_id:
            await self.subscribe(task_id, from_agent_id, SubscriptionReason.COMMENTED)

        notified: set[str] = set()

        if mentions and (not is_hq or from_user):
            agents = await self._store.rows("agents")
            for tag in mentions:
                if tag == "@all":
                    if not from_user:
                        continue
                    for agent in agents:
                        if from_agent_id and agent.id == from_agent_id:
                            continue
                        await self._notify_mentioned(
                            agent.id,
                            f"Mentioned in {channel}: {content}",
                            message,
                            notified,
                        )
                    continue

                name = tag[1:].lower()
                target = next((a for a in agents if a.name.lower() == name), None)
                if target is None:
                    continue
                if from_agent_id and target.id == from_agent_id:
                    continue
                await self._notify_mentioned(
                    target.id,
                    f"You were mentioned in {channel}: {content}",
                    message,
                    notified,
                )

        if task_id and from_user:
            for sub in await self.list_subscriptions_for_task(task_id):
                if from_agent_id and sub.agent_id == from_agent_id:
                    continue
                if sub.agent_id in notified:
                    continue
                await self.notifications.create_notification(
                    sub.agent_id,
                    f"New thread update in {channel}: {content}",
                    source_task_id=task_id,
                    source_message_id=message.id,
                )

        return message

    async def _notify_mentioned(
        self, agent_id: str, content: str, message: Message, notified: set[str]
    ) -> None:
        notified.add(agent_id)
        if message.task_id:
            await self.subscribe(message.task_id, agent_id, SubscriptionReason.MENTIONED)
        await self.notifications.create_notification(
            agent_id,
            content,
            source_task_id=message.task_id,
            source_message_id=message.id,
        )

    # =========================================================================
    # Document Operations
    # =========================================================================

    async def create_document(
        self,
        title: str,
        content: str,
        type: DocumentType | str,
        created_by: str,
        path: str | None = None,
        task_id: str | None = None,
        project_id: str | None = None,
        agent_id: str | None = None,
        message_id: str | None = None,
    ) -> Document:
        """Create a new document and log the activity."""
        document = Document(
            title=title,
            content=content,
            type=DocumentType(type),
            path=path,
            task_id=task_id,
            project_id=project_id,
            agent_id=agent_id,
            message_id=message_id,
            created_by=created_by,
        )
        await self._store.insert("documents", document)

        await self.activities.log(
            ActivityType.DOCUMENT_CREATED,
            f"Document created: {title}",
            task_id=task_id,
            agent_id=agent_id,
            project_id=project_id,
        )
        return document

    async def get_document(self, document_id: str) -> Document | None:
        return await self._store.get("documents", document_id)

    async def list_documents_for_task(self, task_id: str) -> list[Document]:
        rows = await self._store.rows("documents")
        return [d for d in reversed(rows) if d.task_id == task_id][:200]

    async def list_documents(self, type: DocumentType | str | None = None) -> list[Document]:
        docs = list(reversed(await self._store.rows("documents")))
        if type:
            wanted = DocumentType(type)
            docs = [d for d in docs if d.type == wanted]
        return docs

    async def has_deliverable(self, task_id: str) -> bool:
        rows = await self._store.rows("documents")
        return any(d.task_id == task_id and d.type == DocumentType.DELIVERABLE for d in rows)

    async def get_document_with_context(self, document_id: str) -> dict[str, Any] | None:
        """A document with its author, task, origin message and task thread."""
        document = await self.get_document(document_id)
        if document is None:
            return None

        agent = await self.get_agent(document.agent_id) if document.agent_id else None
        task = await self.get_task(document.task_id) if document.task_id else None
        origin = (
            await self._store.get("messages", document.message_id)
            if document.message_id
            else None
        )

        conversation = []
        if document.task_id:
            for msg in await self._store.rows("messages"):
                if msg.task_id != document.task_id:
                    continue
                sender = await self.get_agent(msg.from_agent_id) if msg.from_agent_id else None
                conversation.append(
                    {
                        "id": msg.id,
                        "content": msg.content,
                        "created_at": msg.created_at,
                        "agent_name": sender.name if sender else None,
                        "agent_avatar": sender.avatar if sender else None,
                        "from_user": bool(msg.from_user),
                    }
                )

        return {
            **document.to_dict(),
            "created_by": document.created_by or (agent.name if agent else "Unknown"),
            "agent_name": agent.name if agent else None,
            "agent_avatar": agent.avatar if agent else None,
            "agent_role": agent.role if agent else None,
            "task_title": task.title if task else None,
            "task_status": task.status.value if task else None,
            "task_description": task.description if task else None,
            "origin_message": origin.content if origin else None,
            "conversation_messages": conversation,
        }

    # =========================================================================
    # Project Operations
    # =========================================================================

    async def list_projects(self) -> list[Project]:
        return sorted(await self._store.rows("projects"), key=lambda p: p.name)

    async def get_project(self, project_id: str) -> Project | None:
        return await self._store.get("projects", project_id)

    async def create_project(
        self,
        name: str,
        color: str,
        description: str | None = None,
        icon: str | None = None,
    ) -> Project:
        """Create a project. Names are unique."""
        async with self._store.lock:
            if await self._store.find_first("projects", lambda p: p.name == name):
                raise DuplicateNameError("Project", name)
            project = Project(name=name, color=color, description=description, icon=icon)
            await self._store.insert("projects", project)
        logger.info(f"Created project: {name}")
        return project

    # =========================================================================
    # Subscription Operations
    # =========================================================================

    async def list_subscriptions_for_task(self, task_id: str) -> list[TaskSubscription]:
        rows = await self._store.rows("task_subscriptions")
        return [s for s in rows if s.task_id == task_id]

    async def list_subscriptions_for_agent(self, agent_id: str) -> list[TaskSubscription]:
        rows = await self._store.rows("task_subscriptions")
        return [s for s in rows if s.agent_id == agent_id]

    async def subscribe(
        self,
        task_id: str,
        agent_id: str,
        reason: SubscriptionReason | str = SubscriptionReason.MANUAL,
    ) -> str:
        """Subscribe an agent to a task thread; returns the existing id if any."""
        async with self._store.lock:
            existing = await self._store.find_first(
                "task_subscriptions",
                lambda s: s.task_id == task_id and s.agent_id == agent_id,
            )
            if existing:
                return existing.id
            sub = TaskSubscription(
                task_id=task_id, agent_id=agent_id, reason=SubscriptionReason(reason)
            )
            await self._store.insert("task_subscriptions", sub)
        return sub.id

    async def unsubscribe(self, task_id: str, agent_id: str) -> bool:
        async with self._store.lock:
            existing = await self._store.find_first(
                "task_subscriptions",
                lambda s: s.task_id == task_id and s.agent_id == agent_id,
            )
            if existing is None:
                return False
            await self._store.delete("task_subscriptions", existing.id)
        return True

    # =========================================================================
    # Seeding
    # =========================================================================

    async def seed(self) -> dict[str, int]:
        """Insert the default project and squad where missing."""
        from mission_control.seed import SEED_AGENTS, SEED_PROJECT

        projects = 0
        agents = 0
        async with self._store.lock:
            if not await self._store.find_first(
                "projects", lambda p: p.name == SEED_PROJECT["name"]
            ):
                await self._store.insert("projects", Project.from_dict(SEED_PROJECT))
                projects += 1

            for data in SEED_AGENTS:
                if await self.get_agent_by_name(data["name"]):
                    continue
                await self._store.insert("agents", AgentProfile.from_dict(data))
                agents += 1

        logger.info(f"Seeded {projects} project(s) and {agents} agent(s)")
        return {"projects": projects, "agents": agents}

    # =========================================================================
    # Utility
    # =========================================================================

    async def get_stats(self) -> dict[str, Any]:
        return await self._store.get_stats()


# =========================================================================
# Factory Function
# =========================================================================

_manager_instance: MissionControlManager | None = None


def get_mission_control_manager() -> MissionControlManager:
    """Get or create the Mission Control manager singleton."""
    global _manager_instance
    if _manager_instance is None:
        _manager_instance = MissionControlManager()
    return _manager_instance


def reset_mission_control_manager() -> None:
    """Reset the manager singleton (for testing)."""
    global _manager_instance
    _manager_instance = None

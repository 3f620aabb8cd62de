"""Mission Control data models.

Created: 2026-09-14

These models define the records kept in the Mission Control store:
- Agent profiles (identity, status, model configuration)
- Tasks (kanban work items with planning state)
- Messages (channel chat, task threads)
- Activities (audit trail/feed)
- Documents (deliverables, notes)
- Projects
- Notifications (queued for delivery to agents, claimable by runners)
- Task subscriptions (who follows a task thread)
- Task dispatches (hand-offs of a task to a runner)
- Settings (key/value, also used for leases and probes)
- Auth profiles

Design notes:
- Dataclasses with explicit to_dict/from_dict for JSON persistence
- IDs are UUID strings
- Timestamps are integer milliseconds since the epoch
- Status enums are str-valued so they serialize as plain strings
"""

import random
import re
import string
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ============================================================================
# Enums
# ============================================================================


class AgentStatus(str, Enum):
    """Agent operational status."""

    IDLE = "idle"
    ACTIVE = "active"
    BLOCKED = "blocked"
    OFFLINE = "offline"


class AgentLevel(str, Enum):
    """Agent autonomy level."""

    LEAD = "LEAD"  # Squad lead
    INT = "INT"  # Integrator
    SPC = "SPC"  # Specialist


class TaskStatus(str, Enum):
    """Kanban column of a task."""

    INBOX = "inbox"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    TESTING = "testing"
    REVIEW = "review"
    DONE = "done"
    BLOCKED = "blocked"
    ARCHIVED = "archived"


class TaskPriority(str, Enum):
    """Task priority level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class PlanningStatus(str, Enum):
    """Where a task stands in the planning conversation."""

    NONE = "none"
    QUESTIONS = "questions"
    READY = "ready"
    APPROVED = "approved"


class ActivityType(str, Enum):
    """Types of activities for the feed."""

    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_COMPLETED = "task_completed"
    MESSAGE_SENT = "message_sent"
    AGENT_STATUS_CHANGED = "agent_status_changed"
    DOCUMENT_CREATED = "document_created"
    DISPATCH_STARTED = "dispatch_started"
    DISPATCH_COMPLETED = "dispatch_completed"
    TESTING_RESULT = "testing_result"
    PLANNING_UPDATE = "planning_update"
    SUBAGENT_UPDATE = "subagent_update"
    WORKFLOW_TRIGGERED = "workflow_triggered"
    SQUAD_FORMED = "squad_formed"
    INTEGRATION_CONNECTED = "integration_connected"


class DocumentType(str, Enum):
    """Types of shared documents."""

    DELIVERABLE = "deliverable"
    RESEARCH = "research"
    SPEC = "spec"
    NOTE = "note"
    MARKDOWN = "markdown"


class SubscriptionReason(str, Enum):
    """Why an agent follows a task thread."""

    ASSIGNED = "assigned"
    MENTIONED = "mentioned"
    COMMENTED = "commented"
    MANUAL = "manual"


class DispatchStatus(str, Enum):
    """Lifecycle of a task dispatch."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class VerificationStatus(str, Enum):
    """Outcome of the runner's verification step."""

    PASS = "pass"
    FAIL = "fail"
    NOT_RUN = "not_run"
    UNKNOWN = "unknown"


# ============================================================================
# Helper Functions
# ============================================================================

MENTION_PATTERN = re.compile(r"@([a-zA-Z0-9_]+)")

_BASE36 = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """Generate a unique ID."""
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)


def random_session_key(now: int | None = None) -> str:
    """Session key for agents created without one."""
    stamp = now if now is not None else now_ms()
    suffix = "".join(random.choice(_BASE36) for _ in range(8))
    return f"agent-{stamp}-{suffix}"


def clamp(value: int, low: int, high: int) -> int:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


def truncate(text: str, max_chars: int) -> str:
    """Collapse whitespace and cut to ``max_chars`` with a trailing ellipsis."""
    clean = re.sub(r"\s+", " ", text.strip())
    if len(clean) <= max_chars:
        return clean
    return clean[: max(0, max_chars - 3)] + "..."


def parse_mentions(content: str) -> list[str]:
    """Extract unique ``@name`` tokens, lower-cased, in first-seen order."""
    seen: list[str] = []
    for match in MENTION_PATTERN.finditer(content):
        tag = match.group(0).lower()
        if tag not in seen:
            seen.append(tag)
    return seen


def task_id_from_channel(channel: str | None) -> str | None:
    """Return the task id encoded in a ``task:<id>`` channel name."""
    if not channel or not channel.startswith("task:"):
        return None
    return channel[len("task:") :]


def _enum_or_none(enum_cls: type[Enum], value: Any) -> Any:
    return enum_cls(value) if value is not None else None


# ============================================================================
# Data Models
# ============================================================================


@dataclass
class ModelConfig:
    """Which models an agent uses for each kind of work."""

    thinking: str = "openai-codex/gpt-5.2"
    execution: str | None = "openai-codex/gpt-5.2"
    heartbeat: str = "google/gemini-2.5-flash"
    fallback: str = "openai-codex/gpt-5.2"

    def to_dict(self) -> dict[str, Any]:
        return {
            "thinking": self.thinking,
            "execution": self.execution,
            "heartbeat": self.heartbeat,
            "fallback": self.fallback,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ModelConfig":
        if not data:
            return cls()
        return cls(
            thinking=data.get("thinking", ""),
            execution=data.get("execution"),
            heartbeat=data.get("heartbeat", ""),
            fallback=data.get("fallback", ""),
        )


@dataclass
class AgentProfile:
    """
    Represents an AI agent on the roster.

    Attributes:
        id: Unique identifier
        name: Display name, unique across agents
        role: Job title/function (e.g., "Squad Lead", "Writer")
        level: Autonomy level (optional)
        status: Current operational status
        current_task_id: Task being worked on (if any)
        session_key: Key of the runner session that receives this agent's messages
        avatar: Avatar URL
        system_prompt: Extra system instructions for the runner
        character: Personality notes
        lore: Background notes
        models: Model configuration
        created_at: Creation time (ms)
        updated_at: Last modification time (ms)
    """

    id: str = field(default_factory=generate_id)
    name: str = ""
    role: str = ""
    level: AgentLevel | None = None
    status: AgentStatus = AgentStatus.IDLE
    current_task_id: str | None = None
    session_key: str = ""
    avatar: str | None = None
    system_prompt: str | None = None
    character: str | None = None
    lore: str | None = None
    models: ModelConfig = field(default_factory=ModelConfig)
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "level": self.level.value if self.level else None,
            "status": self.status.value,
            "current_task_id": self.current_task_id,
            "session_key": self.session_key,
            "avatar": self.avatar,
            "system_prompt": self.system_prompt,
            "character": self.character,
            "lore": self.lore,
            "models": self.models.to_dict(),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AgentProfile":
        """Create from dictionary."""
        return cls(
            id=data.get("id", generate_id()),
            name=data.get("name", ""),
            role=data.get("role", ""),
            level=_enum_or_none(AgentLevel, data.get("level")),
            status=AgentStatus(data.get("status", "idle")),
            current_task_id=data.get("current_task_id"),
            session_key=data.get("session_key", ""),
            avatar=data.get("avatar"),
            system_prompt=data.get("system_prompt"),
            character=data.get("character"),
            lore=data.get("lore"),
            models=ModelConfig.from_dict(data.get("models")),
            created_at=data.get("created_at", now_ms()),
            updated_at=data.get("updated_at", now_ms()),
        )


@dataclass
class Task:
    """
    Represents a work item on the kanban board.

    Attributes:
        id: Unique identifier
        title: Short summary
        description: Full details
        status: Kanban column
        priority: Urgency level
        project_id: Owning project (if any)
        assignee_ids: Agents assigned to the task
        created_by: Who created it ("user", "openclaw", an agent name...)
        tags: Categorization tags
        session_key: Runner session working on the task
        run_id: Runner run id reported by lifecycle events
        source: Where the run came from
        started_at: When work began (ms)
        last_event_at: Last runner event (ms)
        completed_at: First time the task reached done (ms)
        planning_status: Planning conversation state
        planning_questions: Open planning questions
        planning_draft: Current plan draft
        metadata: Estimates and review bookkeeping
        created_at: Creation time (ms)
        updated_at: Last modification time (ms)
    """

    id: str = field(default_factory=generate_id)
    title: str = ""
    description: str = ""
    status: TaskStatus = TaskStatus.INBOX
    priority: TaskPriority = TaskPriority.MEDIUM
    project_id: str | None = None
    assignee_ids: list[str] = field(default_factory=list)
    created_by: str = "user"
    tags: list[str] | None = None
    session_key: str | None = None
    run_id: str | None = None
    source: str | None = None
    started_at: int | None = None
    last_event_at: int | None = None
    completed_at: int | None = None
    planning_status: PlanningStatus = PlanningStatus.NONE
    planning_questions: list[str] = field(default_factory=list)
    planning_draft: str = ""
    metadata: dict[str, Any] | None = None
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "project_id": self.project_id,
            "assignee_ids": self.assignee_ids,
            "created_by": self.created_by,
            "tags": self.tags,
            "session_key": self.session_key,
            "run_id": self.run_id,
            "source": self.source,
            "started_at": self.started_at,
            "last_event_at": self.last_event_at,
            "completed_at": self.completed_at,
            "planning_status": self.planning_status.value,
            "planning_questions": self.planning_questions,
            "planning_draft": self.planning_draft,
            "metadata": self.metadata,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Create from dictionary."""
        return cls(
            id=data.get("id", generate_id()),
            title=data.get("title", ""),
            description=data.get("description", ""),
            status=TaskStatus(data.get("status", "inbox")),
            priority=TaskPriority(data.get("priority", "medium")),
            project_id=data.get("project_id"),
            assignee_ids=data.get("assignee_ids", []),
            created_by=data.get("created_by", "user"),
            tags=data.get("tags"),
            session_key=data.get("session_key"),
            run_id=data.get("run_id"),
            source=data.get("source"),
            started_at=data.get("started_at"),
            last_event_at=data.get("last_event_at"),
            completed_at=data.get("completed_at"),
            planning_status=PlanningStatus(data.get("planning_status", "none")),
            planning_questions=data.get("planning_questions", []),
            planning_draft=data.get("planning_draft", ""),
            metadata=data.get("metadata"),
            created_at=data.get("created_at", now_ms()),
            updated_at=data.get("updated_at", now_ms()),
        )


@dataclass
class Message:
    """
    A chat message in a channel.

    Channels are free-form names; ``hq`` is the squad room and ``task:<id>``
    is the thread of a task.

    Attributes:
        id: Unique identifier
        channel: Channel name
        content: Message text (can contain @mentions)
        task_id: Task the message belongs to (if any)
        from_agent_id: Sending agent, None for the human user
        from_user: Whether the human user wrote it
        mentions: Extracted @mentions, lower-cased with the leading @
        metadata: Edit/reply/attachment bookkeeping
        created_at: When sent (ms)
    """

    id: str = field(default_factory=generate_id)
    channel: str = ""
    content: str = ""
    task_id: str | None = None
    from_agent_id: str | None = None
    from_user: bool | None = None
    mentions: list[str] = field(default_factory=list)
    metadata: dict[str, Any] | None = None
    created_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "channel": self.channel,
            "content": self.content,
            "task_id": self.task_id,
            "from_agent_id": self.from_agent_id,
            "from_user": self.from_user,
            "mentions": self.mentions,
            "metadata": self.metadata,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        """Create from dictionary."""
        return cls(
            id=data.get("id", generate_id()),
            channel=data.get("channel", ""),
            content=data.get("content", ""),
            task_id=data.get("task_id"),
            from_agent_id=data.get("from_agent_id"),
            from_user=data.get("from_user"),
            mentions=data.get("mentions", []),
            metadata=data.get("metadata"),
            created_at=data.get("created_at", now_ms()),
        )


@dataclass
class Activity:
    """
    An entry in the activity feed.

    Attributes:
        id: Unique identifier
        type: Type of activity
        message: Human-readable description
        agent_id: Agent involved (if any)
        task_id: Related task (if any)
        project_id: Related project (if any)
        metadata: Additional context data
        created_at: When it happened (ms)
    """

    id: str = field(default_factory=generate_id)
    type: ActivityType = ActivityType.TASK_CREATED
    message: str = ""
    agent_id: str | None = None
    task_id: str | None = None
    project_id: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "type": self.type.value,
            "message": self.message,
            "agent_id": self.agent_id,
            "task_id": self.task_id,
            "project_id": self.project_id,
            "metadata": self.metadata,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Activity":
        """Create from dictionary."""
        return cls(
            id=data.get("id", generate_id()),
            type=ActivityType(data.get("type", "task_created")),
            message=data.get("message", ""),
            agent_id=data.get("agent_id"),
            task_id=data.get("task_id"),
            project_id=data.get("project_id"),
            metadata=data.get("metadata"),
            created_at=data.get("created_at", now_ms()),
        )


@dataclass
class Document:
    """
    A shared document produced by an agent or the user.

    Attributes:
        id: Unique identifier
        title: Document title
        content: Full content (usually markdown)
        type: Document category
        path: File path on the runner's machine (if any)
        task_id: Associated task
        project_id: Associated project
        agent_id: Authoring agent
        message_id: Thread message announcing the document
        created_by: Author display name
        created_at: Creation time (ms)
        updated_at: Last modification time (ms)
    """

    id: str = field(default_factory=generate_id)
    title: str = ""
    content: str = ""
    type: DocumentType = DocumentType.NOTE
    path: str | None = None
    task_id: str | None = None
    project_id: str | None = None
    agent_id: str | None = None
    message_id: str | None = None
    created_by: str = ""
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "type": self.type.value,
            "path": self.path,
            "task_id": self.task_id,
            "project_id": self.project_id,
            "agent_id": self.agent_id,
            "message_id": self.message_id,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        """Create from dictionary."""
        return cls(
            id=data.get("id", generate_id()),
            title=data.get("title", ""),
            content=data.get("content", ""),
            type=DocumentType(data.get("type", "note")),
            path=data.get("path"),
            task_id=data.get("task_id"),
            project_id=data.get("project_id"),
            agent_id=data.get("agent_id"),
            message_id=data.get("message_id"),
            created_by=data.get("created_by", ""),
            created_at=data.get("created_at", now_ms()),
            updated_at=data.get("updated_at", now_ms()),
        )


@dataclass
class Project:
    """A named grouping of tasks and documents."""

    id: str = field(default_factory=generate_id)
    name: str = ""
    description: str | None = None
    color: str = "#3b82f6"
    icon: str | None = None
    settings: dict[str, Any] | None = None
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "icon": self.icon,
            "settings": self.settings,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        return cls(
            id=data.get("id", generate_id()),
            name=data.get("name", ""),
            description=data.get("description"),
            color=data.get("color", "#3b82f6"),
            icon=data.get("icon"),
            settings=data.get("settings"),
            created_at=data.get("created_at", now_ms()),
            updated_at=data.get("updated_at", now_ms()),
        )


@dataclass
class Notification:
    """
    A message queued for delivery to an agent.

    A runner process claims a notification, tries to deliver it and then
    either marks it delivered or records the failed attempt. A claim older
    than the claim TTL can be taken over by another runner.

    Attributes:
        id: Unique identifier
        target_agent_id: Agent to notify
        content: Notification text
        source_task_id: Related task
        source_message_id: Message that triggered it
        delivered: Whether it reached the agent
        delivered_at: Delivery time (ms)
        error: Last delivery error
        attempts: Number of claims so far
        claimed_by: Runner currently holding the claim
        claimed_at: When the claim was taken (ms)
        created_at: Creation time (ms)
    """

    id: str = field(default_factory=generate_id)
    target_agent_id: str = ""
    content: str = ""
    source_task_id: str | None = None
    source_message_id: str | None = None
    delivered: bool = False
    delivered_at: int | None = None
    error: str | None = None
    attempts: int = 0
    claimed_by: str | None = None
    claimed_at: int | None = None
    created_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "target_agent_id": self.target_agent_id,
            "content": self.content,
            "source_task_id": self.source_task_id,
            "source_message_id": self.source_message_id,
            "delivered": self.delivered,
            "delivered_at": self.delivered_at,
            "error": self.error,
            "attempts": self.attempts,
            "claimed_by": self.claimed_by,
            "claimed_at": self.claimed_at,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Notification":
        """Create from dictionary."""
        return cls(
            id=data.get("id", generate_id()),
            target_agent_id=data.get("target_agent_id", ""),
            content=data.get("content", ""),
            source_task_id=data.get("source_task_id"),
            source_message_id=data.get("source_message_id"),
            delivered=data.get("delivered", False),
            delivered_at=data.get("delivered_at"),
            error=data.get("error"),
            attempts=data.get("attempts", 0),
            claimed_by=data.get("claimed_by"),
            claimed_at=data.get("claimed_at"),
            created_at=data.get("created_at", now_ms()),
        )


@dataclass
class TaskSubscription:
    """An agent following a task thread."""

    id: str = field(default_factory=generate_id)
    task_id: str = ""
    agent_id: str = ""
    reason: SubscriptionReason = SubscriptionReason.MANUAL
    created_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "agent_id": self.agent_id,
            "reason": self.reason.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskSubscription":
        return cls(
            id=data.get("id", generate_id()),
            task_id=data.get("task_id", ""),
            agent_id=data.get("agent_id", ""),
            reason=SubscriptionReason(data.get("reason", "manual")),
            created_at=data.get("created_at", now_ms()),
        )


@dataclass
class TaskDispatch:
    """
    A record of handing a task to a runner.

    Attributes:
        id: Unique identifier
        task_id: Task being dispatched
        target_agent_id: Agent that should run it (defaults to first assignee)
        requested_by: Who asked for the dispatch
        prompt: Extra instructions for the run
        idempotency_key: Dedup key; enqueueing twice returns the first dispatch
        status: Lifecycle status
        runner: Runner that claimed it
        run_id: Runner run id
        result_preview: Short result summary
        verification_status: Outcome of the runner's verification
        verification_summary: Verification details
        verification_command: Command used to verify
        error: Failure or cancellation reason
        requested_at: Enqueue time (ms)
        started_at: Claim time (ms)
        finished_at: Completion/failure/cancel time (ms)
    """

    id: str = field(default_factory=generate_id)
    task_id: str = ""
    target_agent_id: str | None = None
    requested_by: str = ""
    prompt: str | None = None
    idempotency_key: str | None = None
    status: DispatchStatus = DispatchStatus.PENDING
    runner: str | None = None
    run_id: str | None = None
    result_preview: str | None = None
    verification_status: VerificationStatus | None = VerificationStatus.NOT_RUN
    verification_summary: str | None = None
    verification_command: str | None = None
    error: str | None = None
    requested_at: int = field(default_factory=now_ms)
    started_at: int | None = None
    finished_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "task_id": self.task_id,
            "target_agent_id": self.target_agent_id,
            "requested_by": self.requested_by,
            "prompt": self.prompt,
            "idempotency_key": self.idempotency_key,
            "status": self.status.value,
            "runner": self.runner,
            "run_id": self.run_id,
            "result_preview": self.result_preview,
            "verification_status": (
                self.verification_status.value if self.verification_status else None
            ),
            "verification_summary": self.verification_summary,
            "verification_command": self.verification_command,
            "error": self.error,
            "requested_at": self.requested_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskDispatch":
        """Create from dictionary."""
        return cls(
            id=data.get("id", generate_id()),
            task_id=data.get("task_id", ""),
            target_agent_id=data.get("target_agent_id"),
            requested_by=data.get("requested_by", ""),
            prompt=data.get("prompt"),
            idempotency_key=data.get("idempotency_key"),
            status=DispatchStatus(data.get("status", "pending")),
            runner=data.get("runner"),
            run_id=data.get("run_id"),
            result_preview=data.get("result_preview"),
            verification_status=_enum_or_none(
                VerificationStatus, data.get("verification_status")
            ),
            verification_summary=data.get("verification_summary"),
            verification_command=data.get("verification_command"),
            error=data.get("error"),
            requested_at=data.get("requested_at", now_ms()),
            started_at=data.get("started_at"),
            finished_at=data.get("finished_at"),
        )


@dataclass
class Setting:
    """A key/value setting. Values are arbitrary JSON."""

    id: str = field(default_factory=generate_id)
    key: str = ""
    value: Any = None
    updated_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Setting":
        return cls(
            id=data.get("id", generate_id()),
            key=data.get("key", ""),
            value=data.get("value"),
            updated_at=data.get("updated_at", now_ms()),
        )


@dataclass
class AuthProfile:
    """A model-provider login the runner can use. At most one is active."""

    id: str = field(default_factory=generate_id)
    email: str = ""
    provider: str = ""
    profile_id: str = ""
    is_active: bool = False
    last_login_at: int | None = None
    created_at: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "provider": self.provider,
            "profile_id": self.profile_id,
            "is_active": self.is_active,
            "last_login_at": self.last_login_at,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthProfile":
        return cls(
            id=data.get("id", generate_id()),
            email=data.get("email", ""),
            provider=data.get("provider", ""),
            profile_id=data.get("profile_id", ""),
            is_active=data.get("is_active", False),
            last_login_at=data.get("last_login_at"),
            created_at=data.get("created_at", now_ms()),
        )

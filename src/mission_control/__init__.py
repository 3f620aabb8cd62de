"""Mission Control - a coordination hub for a squad of AI agents.

Created: 2026-09-15

Mission Control is the shared workspace where a human operator and a team of
agents collaborate. Features:

- Agent profiles with roles, levels, status and per-agent model choices
- Kanban tasks (inbox -> assigned -> in_progress -> review -> done)
- Channel chat and task threads with @mentions and subscriptions
- A notification queue drained by a delivery worker with claim leases
- A dispatch queue that hands tasks to agent runners
- Activity feed, documents, projects and key/value settings
- Runner lifecycle events that keep tasks in sync with agent runs

Usage:
    from mission_control import get_mission_control_manager

    manager = get_mission_control_manager()

    agent = await manager.create_agent(name="Forge", role="Developer")
    task = await manager.create_task(
        title="Fix the login flow",
        assignee_ids=[agent.id],
    )
    await manager.send_message(
        channel=f"task:{task.id}",
        content="@forge can you take a look?",
        from_user=True,
    )
"""

__version__ = "0.1.0"

# Manager
from mission_control.manager import (
    MissionControlManager,
    get_mission_control_manager,
    reset_mission_control_manager,
)

# Models
from mission_control.models import (
    Activity,
    ActivityType,
    AgentLevel,
    AgentProfile,
    AgentStatus,
    Document,
    DocumentType,
    DispatchStatus,
    Message,
    Notification,
    Project,
    Task,
    TaskDispatch,
    TaskPriority,
    TaskStatus,
)

# Store
from mission_control.store import (
    FileMissionControlStore,
    get_mission_control_store,
    reset_mission_control_store,
)

__all__ = [
    "__version__",
    # Models
    "AgentProfile",
    "AgentStatus",
    "AgentLevel",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "TaskDispatch",
    "DispatchStatus",
    "Message",
    "Activity",
    "ActivityType",
    "Document",
    "DocumentType",
    "Notification",
    "Project",
    # Store
    "FileMissionControlStore",
    "get_mission_control_store",
    "reset_mission_control_store",
    # Manager
    "MissionControlManager",
    "get_mission_control_manager",
    "reset_mission_control_manager",
]

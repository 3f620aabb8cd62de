"""Background workers that drain the notification and dispatch queues."""

from mission_control.workers.dispatch import DispatchWorker
from mission_control.workers.notifications import NotificationWorker

__all__ = ["DispatchWorker", "NotificationWorker"]

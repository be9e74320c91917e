from taskflow.models.collections import EntityCollection
from taskflow.models.entities import Project, Task, TaskComment, TaskSummary, Team, TeamMember
from taskflow.models.notifications import Notification, NotificationPreference, NotificationType

__all__ = [
    "EntityCollection",
    "Notification",
    "NotificationPreference",
    "NotificationType",
    "Project",
    "Task",
    "TaskComment",
    "TaskSummary",
    "Team",
    "TeamMember",
]

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from taskflow.core.time import utcnow


class NotificationType(str, Enum):
    # admin
    USER_REGISTERED = "user_registered"
    PROJECT_CREATED = "project_created"
    PROJECT_COMPLETED = "project_completed"
    SYSTEM_ALERT = "system_alert"
    ROLE_CHANGED = "role_changed"

    # project manager
    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"
    TASK_OVERDUE = "task_overdue"
    PROJECT_DEADLINE = "project_deadline"
    TEAM_CREATED = "team_created"
    MEMBER_JOINED = "member_joined"

    # team member
    TASK_ASSIGNED_TO_ME = "task_assigned_to_me"
    TASK_COMPLETED_BY_ME = "task_completed_by_me"
    TASK_OVERDUE_FOR_ME = "task_overdue_for_me"
    DEADLINE_APPROACHING = "deadline_approaching"
    COMMENT_ADDED = "comment_added"
    ADDED_TO_TEAM = "added_to_team"


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    type: str = Field(index=True)
    title: str
    message: str
    read: bool = Field(default=False, index=True)
    link: str | None = None
    data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    # Display cross-references
    project_name: str | None = None
    task_name: str | None = None
    user_name: str | None = None

    created_at: datetime = Field(default_factory=utcnow, index=True)


class NotificationPreference(SQLModel, table=True):
    __tablename__ = "notification_preferences"

    user_id: int = Field(primary_key=True)
    role: str | None = None
    prefs: dict[str, bool] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow)

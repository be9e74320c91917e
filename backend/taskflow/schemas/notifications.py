from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlmodel import Field, SQLModel


class NotificationRead(SQLModel):
    id: int
    user_id: int | None = None
    type: str
    title: str
    message: str
    read: bool = False
    link: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    project_name: str | None = None
    task_name: str | None = None
    user_name: str | None = None
    created_at: datetime
    time: str | None = None


class UnreadCount(SQLModel):
    count: int


class NotificationPrefsResult(SQLModel):
    message: str
    prefs: dict[str, bool]

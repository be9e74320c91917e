from __future__ import annotations

from datetime import date, datetime

from sqlmodel import Field, SQLModel

from taskflow.core.time import utcnow

TASK_PENDING = "pending"
TASK_IN_PROGRESS = "in-progress"
TASK_COMPLETED = "completed"

PROJECT_ACTIVE = "active"
PROJECT_COMPLETED = "completed"

MEMBER_ACTIVE = "active"

PRIORITY_HIGH = "high"


def clamp_progress(value: float | int | None) -> int:
    if value is None:
        return 0
    return max(0, min(100, int(value)))


def status_for_progress(progress: int) -> str:
    """Task status is a function of progress: 0, 1-99, 100."""
    progress = clamp_progress(progress)
    if progress >= 100:
        return TASK_COMPLETED
    if progress > 0:
        return TASK_IN_PROGRESS
    return TASK_PENDING


class TeamMember(SQLModel):
    id: int
    name: str
    email: str
    role: str = ""
    team: str | None = None  # display name of the member's team
    status: str = Field(default=MEMBER_ACTIVE)
    skills: list[str] = Field(default_factory=list)
    efficiency: int = 0
    tasks_completed: int = 0
    join_date: date | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Team(SQLModel):
    id: int
    name: str
    description: str = ""
    lead_id: int | None = None
    member_ids: list[int] = Field(default_factory=list)
    performance: int | None = None
    color: str = "#4DA5AD"

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class TaskSummary(SQLModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0


class Project(SQLModel):
    id: int
    name: str
    description: str = ""
    status: str = Field(default=PROJECT_ACTIVE)
    progress: int = 0
    start_date: date | None = None
    deadline: date
    team_id: int | None = None
    team_member_ids: list[int] = Field(default_factory=list)

    # Cached aggregate; recomputed from the live task collection.
    tasks: TaskSummary = Field(default_factory=TaskSummary)

    budget: float = 0
    spent: float = 0
    priority: str = "medium"
    manager: str | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class TaskComment(SQLModel):
    author: str
    text: str
    created_at: datetime = Field(default_factory=utcnow)


class Task(SQLModel):
    id: int
    title: str
    description: str = ""
    project_id: int
    assignee_id: int | None = None
    priority: str = "medium"
    deadline: date | None = None
    progress: int = 0
    status: str = Field(default=TASK_PENDING)
    estimated_hours: float = 0
    actual_hours: float = 0
    team_id: int | None = None
    tags: list[str] = Field(default_factory=list)
    comments: list[TaskComment] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def is_overdue(self, today: date) -> bool:
        return (
            self.deadline is not None
            and self.deadline < today
            and self.status != TASK_COMPLETED
        )

from __future__ import annotations

from datetime import date
from typing import Literal

from sqlmodel import Field, SQLModel

from taskflow.models.entities import Project, Team

MemberStatus = Literal["active", "inactive"]
ProjectStatus = Literal["active", "completed"]
TaskStatus = Literal["pending", "in-progress", "completed"]
Priority = Literal["low", "medium", "high"]


class TeamMemberCreate(SQLModel):
    name: str
    email: str
    role: str = ""
    team: str | None = None
    skills: list[str] = Field(default_factory=list)
    efficiency: int = Field(default=0, ge=0, le=100)
    join_date: date | None = None


class TeamMemberUpdate(SQLModel):
    name: str | None = None
    email: str | None = None
    role: str | None = None
    skills: list[str] | None = None
    efficiency: int | None = Field(default=None, ge=0, le=100)
    tasks_completed: int | None = Field(default=None, ge=0)


class MemberStatusUpdate(SQLModel):
    status: MemberStatus


class TeamCreate(SQLModel):
    name: str
    description: str = ""
    lead_id: int | None = None
    member_ids: list[int] = Field(default_factory=list)
    color: str = "#4DA5AD"


class TeamUpdate(SQLModel):
    name: str | None = None
    description: str | None = None
    lead_id: int | None = None
    performance: int | None = Field(default=None, ge=0, le=100)
    color: str | None = None


class TeamMembershipChange(SQLModel):
    member_id: int


class TeamRead(Team):
    lead_name: str | None = None
    member_count: int = 0


class ProjectCreate(SQLModel):
    name: str
    description: str = ""
    start_date: date | None = None
    deadline: date
    team_id: int | None = None
    budget: float = Field(default=0, ge=0)
    priority: Priority = "medium"
    manager: str | None = None


class ProjectUpdate(SQLModel):
    name: str | None = None
    description: str | None = None
    status: ProjectStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    start_date: date | None = None
    deadline: date | None = None
    team_id: int | None = None
    budget: float | None = Field(default=None, ge=0)
    spent: float | None = Field(default=None, ge=0)
    priority: Priority | None = None
    manager: str | None = None


class ProjectRead(Project):
    team_name: str | None = None


class TaskCreate(SQLModel):
    title: str
    description: str = ""
    project_id: int
    assignee_id: int | None = None
    priority: Priority = "medium"
    deadline: date | None = None
    estimated_hours: float = Field(default=0, ge=0)
    tags: list[str] = Field(default_factory=list)


class TaskUpdate(SQLModel):
    title: str | None = None
    description: str | None = None
    priority: Priority | None = None
    deadline: date | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    actual_hours: float | None = Field(default=None, ge=0)
    tags: list[str] | None = None


class TaskStatusUpdate(SQLModel):
    status: TaskStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)


class TaskProgressUpdate(SQLModel):
    progress: int = Field(ge=0, le=100)


class TaskAssign(SQLModel):
    member_id: int


class TaskCommentCreate(SQLModel):
    text: str = Field(min_length=1)

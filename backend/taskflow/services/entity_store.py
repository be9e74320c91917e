"""Entity store over the team member, team, project and task collections.

Each collection is read and written wholesale through a
``CollectionRepository``. Reads fail soft: a broken medium or undecodable
payload is logged and the last collection successfully read or written for
that key is returned instead (or an empty list). Availability of the
dashboards wins over strict consistency here.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, TypeVar

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from taskflow.core.errors import NotFoundError
from taskflow.core.logging import get_logger
from taskflow.core.time import utcnow, utctoday
from taskflow.db.repositories import CollectionRepository, StorageError
from taskflow.models.entities import (
    MEMBER_ACTIVE,
    PROJECT_ACTIVE,
    TASK_COMPLETED,
    TASK_IN_PROGRESS,
    TASK_PENDING,
    Project,
    Task,
    TaskComment,
    TaskSummary,
    Team,
    TeamMember,
    clamp_progress,
    status_for_progress,
)
from taskflow.services.fixtures import demo_collection

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)

_LOAD_ERRORS = (StorageError, OSError, SQLAlchemyError)


class StorageKey(str, Enum):
    TEAM_MEMBERS = "teamMembers"
    TEAMS = "teams"
    PROJECTS = "managerProjects"
    TASKS = "managerTasks"


@dataclass(frozen=True, slots=True)
class EntitySnapshot:
    members: list[TeamMember] = field(default_factory=list)
    teams: list[Team] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    def member(self, member_id: int | None) -> TeamMember | None:
        return next((m for m in self.members if m.id == member_id), None)

    def team(self, team_id: int | None) -> Team | None:
        return next((t for t in self.teams if t.id == team_id), None)

    def project(self, project_id: int | None) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)


def summarize_tasks(tasks: Sequence[Task], *, today: date) -> TaskSummary:
    completed = sum(1 for t in tasks if t.status == TASK_COMPLETED)
    return TaskSummary(
        total=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        overdue=sum(1 for t in tasks if t.is_overdue(today)),
    )


def progress_for_status(status: str, current: int) -> int:
    """Progress implied by an explicit status change."""
    if status == TASK_COMPLETED:
        return 100
    if status == TASK_PENDING:
        return 0
    if status == TASK_IN_PROGRESS:
        return current if 0 < current < 100 else 50
    raise ValueError(f"Unknown task status: {status}")


def _find(items: Sequence[ModelT], item_id: int | None) -> ModelT | None:
    return next((item for item in items if getattr(item, "id") == item_id), None)


def _require(items: Sequence[ModelT], item_id: int | None, entity: str) -> ModelT:
    item = _find(items, item_id)
    if item is None:
        raise NotFoundError(entity, item_id)
    return item


class EntityStore:
    def __init__(
        self,
        repository: CollectionRepository,
        *,
        seed: bool = True,
        clock_ms: Callable[[], int] | None = None,
    ):
        self.repository = repository
        self.seed = seed
        self._clock_ms = clock_ms or (lambda: int(time.time() * 1000))
        self._last_good: dict[str, list[dict[str, Any]]] = {}

    # ------------------------------------------------------------------
    # Persistence plumbing
    # ------------------------------------------------------------------

    def _fallback(self, key: StorageKey, model: type[ModelT]) -> list[ModelT]:
        raw = self._last_good.get(key.value, [])
        return [model.model_validate(item) for item in raw]

    def _load(self, key: StorageKey, model: type[ModelT]) -> list[ModelT]:
        try:
            raw = self.repository.load(key.value)
        except _LOAD_ERRORS as exc:
            logger.warning("store.load.failed key=%s error=%s", key.value, exc)
            return self._fallback(key, model)

        if raw is None:
            raw = demo_collection(key.value) if self.seed else []
            if raw:
                logger.info("store.seeded key=%s count=%d", key.value, len(raw))
                self._persist(key, raw)

        try:
            items = [model.model_validate(item) for item in raw]
        except ValidationError as exc:
            logger.warning(
                "store.load.corrupt key=%s errors=%d", key.value, exc.error_count()
            )
            return self._fallback(key, model)

        self._last_good[key.value] = raw
        return items

    def _persist(self, key: StorageKey, raw: list[dict[str, Any]]) -> None:
        self._last_good[key.value] = raw
        try:
            self.repository.save(key.value, raw)
        except _LOAD_ERRORS as exc:
            logger.warning("store.save.failed key=%s error=%s", key.value, exc)

    def _save(self, key: StorageKey, items: Sequence[SQLModel]) -> None:
        self._persist(key, [item.model_dump(mode="json") for item in items])

    def _next_id(self, items: Sequence[SQLModel]) -> int:
        highest = max((getattr(item, "id") for item in items), default=0)
        return max(self._clock_ms(), highest + 1)

    # ------------------------------------------------------------------
    # Collection accessors
    # ------------------------------------------------------------------

    def get_team_members(self) -> list[TeamMember]:
        return self._load(StorageKey.TEAM_MEMBERS, TeamMember)

    def save_team_members(self, members: Sequence[TeamMember]) -> None:
        self._save(StorageKey.TEAM_MEMBERS, members)

    def get_teams(self) -> list[Team]:
        return self._load(StorageKey.TEAMS, Team)

    def save_teams(self, teams: Sequence[Team]) -> None:
        self._save(StorageKey.TEAMS, teams)

    def get_projects(self) -> list[Project]:
        return self._load(StorageKey.PROJECTS, Project)

    def save_projects(self, projects: Sequence[Project]) -> None:
        self._save(StorageKey.PROJECTS, projects)

    def get_tasks(self) -> list[Task]:
        return self._load(StorageKey.TASKS, Task)

    def save_tasks(self, tasks: Sequence[Task]) -> None:
        self._save(StorageKey.TASKS, tasks)

    def snapshot(self, *, today: date | None = None) -> EntitySnapshot:
        """All four collections, with project task summaries taken from live tasks."""
        today = today or utctoday()
        tasks = self.get_tasks()
        projects = self.get_projects()
        for project in projects:
            project.tasks = summarize_tasks(
                [t for t in tasks if t.project_id == project.id], today=today
            )
        return EntitySnapshot(
            members=self.get_team_members(),
            teams=self.get_teams(),
            projects=projects,
            tasks=tasks,
        )

    # ------------------------------------------------------------------
    # Team members
    # ------------------------------------------------------------------

    def get_team_member(self, member_id: int) -> TeamMember | None:
        return _find(self.get_team_members(), member_id)

    def create_team_member(self, data: dict[str, Any]) -> TeamMember:
        members = self.get_team_members()
        now = utcnow()
        member = TeamMember.model_validate(
            {
                "status": MEMBER_ACTIVE,
                **data,
                "id": self._next_id(members),
                "created_at": now,
                "updated_at": now,
            }
        )
        members.append(member)
        self.save_team_members(members)
        return member

    def update_team_member(self, member_id: int, changes: dict[str, Any]) -> TeamMember:
        members = self.get_team_members()
        member = _require(members, member_id, "team member")
        for key, value in changes.items():
            setattr(member, key, value)
        member.updated_at = utcnow()
        self.save_team_members(members)
        return member

    def set_member_status(self, member_id: int, status: str) -> TeamMember:
        # Members are deactivated, never deleted.
        return self.update_team_member(member_id, {"status": status})

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def get_team(self, team_id: int) -> Team | None:
        return _find(self.get_teams(), team_id)

    def team_lead(self, team: Team) -> TeamMember | None:
        if team.lead_id is None:
            return None
        return self.get_team_member(team.lead_id)

    def team_members_details(self, team_id: int) -> list[TeamMember]:
        team = self.get_team(team_id)
        if team is None:
            return []
        members = self.get_team_members()
        return [m for mid in team.member_ids if (m := _find(members, mid)) is not None]

    def create_team(self, data: dict[str, Any]) -> Team:
        teams = self.get_teams()
        members = self.get_team_members()
        member_ids = list(dict.fromkeys(data.get("member_ids") or []))
        for member_id in member_ids:
            _require(members, member_id, "team member")
        if data.get("lead_id") is not None:
            _require(members, data["lead_id"], "team member")

        now = utcnow()
        team = Team.model_validate(
            {
                **data,
                "id": self._next_id(teams),
                "member_ids": member_ids,
                "created_at": now,
                "updated_at": now,
            }
        )
        teams.append(team)
        self.save_teams(teams)

        if member_ids:
            for member in members:
                if member.id in member_ids:
                    member.team = team.name
                    member.updated_at = now
            self.save_team_members(members)
        return team

    def update_team(self, team_id: int, changes: dict[str, Any]) -> Team:
        teams = self.get_teams()
        team = _require(teams, team_id, "team")
        if changes.get("lead_id") is not None:
            _require(self.get_team_members(), changes["lead_id"], "team member")
        old_name = team.name
        for key, value in changes.items():
            setattr(team, key, value)
        team.updated_at = utcnow()
        self.save_teams(teams)

        if team.name != old_name:
            members = self.get_team_members()
            for member in members:
                if member.team == old_name:
                    member.team = team.name
            self.save_team_members(members)
        return team

    def delete_team(self, team_id: int) -> None:
        teams = self.get_teams()
        team = _require(teams, team_id, "team")
        self.save_teams([t for t in teams if t.id != team_id])

        members = self.get_team_members()
        for member in members:
            if member.team == team.name:
                member.team = None
        self.save_team_members(members)

        projects = self.get_projects()
        if any(p.team_id == team_id for p in projects):
            for project in projects:
                if project.team_id == team_id:
                    project.team_id = None
            self.save_projects(projects)

        tasks = self.get_tasks()
        if any(t.team_id == team_id for t in tasks):
            for task in tasks:
                if task.team_id == team_id:
                    task.team_id = None
            self.save_tasks(tasks)

    def add_member_to_team(self, team_id: int, member_id: int) -> Team:
        """Move a member into a team; a member belongs to at most one team."""
        teams = self.get_teams()
        team = _require(teams, team_id, "team")
        members = self.get_team_members()
        member = _require(members, member_id, "team member")

        now = utcnow()
        for other in teams:
            if other.id != team_id and member_id in other.member_ids:
                other.member_ids = [mid for mid in other.member_ids if mid != member_id]
                other.updated_at = now
        if member_id not in team.member_ids:
            team.member_ids.append(member_id)
            team.updated_at = now
        self.save_teams(teams)

        member.team = team.name
        member.updated_at = now
        self.save_team_members(members)
        return team

    def remove_member_from_team(self, team_id: int, member_id: int) -> Team:
        teams = self.get_teams()
        team = _require(teams, team_id, "team")
        members = self.get_team_members()
        member = _require(members, member_id, "team member")

        team.member_ids = [mid for mid in team.member_ids if mid != member_id]
        if team.lead_id == member_id:
            team.lead_id = None
        team.updated_at = utcnow()
        self.save_teams(teams)

        if member.team == team.name:
            member.team = None
            member.updated_at = team.updated_at
            self.save_team_members(members)
        return team

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def get_project(self, project_id: int) -> Project | None:
        return _find(self.get_projects(), project_id)

    def projects_by_team(self, team_id: int) -> list[Project]:
        return [p for p in self.get_projects() if p.team_id == team_id]

    def project_team_members(self, project_id: int) -> list[TeamMember]:
        project = self.get_project(project_id)
        if project is None:
            return []
        return [m for m in self.get_team_members() if m.id in project.team_member_ids]

    def create_project(self, data: dict[str, Any]) -> Project:
        team_member_ids: list[int] = []
        if data.get("team_id") is not None:
            team = self.get_team(data["team_id"])
            if team is None:
                raise NotFoundError("team", data["team_id"])
            team_member_ids = list(team.member_ids)

        projects = self.get_projects()
        now = utcnow()
        project = Project.model_validate(
            {
                "spent": 0,
                **data,
                "id": self._next_id(projects),
                "status": PROJECT_ACTIVE,
                "progress": clamp_progress(data.get("progress", 0)),
                "team_member_ids": team_member_ids,
                "tasks": TaskSummary(),
                "created_at": now,
                "updated_at": now,
            }
        )
        projects.append(project)
        self.save_projects(projects)
        return project

    def update_project(self, project_id: int, changes: dict[str, Any]) -> Project:
        projects = self.get_projects()
        project = _require(projects, project_id, "project")
        if changes.get("team_id") is not None and changes["team_id"] != project.team_id:
            team = self.get_team(changes["team_id"])
            if team is None:
                raise NotFoundError("team", changes["team_id"])
            project.team_member_ids = list(team.member_ids)
        for key, value in changes.items():
            setattr(project, key, value)
        project.progress = clamp_progress(project.progress)
        project.updated_at = utcnow()
        self.save_projects(projects)
        return project

    def delete_project(self, project_id: int) -> None:
        projects = self.get_projects()
        _require(projects, project_id, "project")
        self.save_projects([p for p in projects if p.id != project_id])

        tasks = self.get_tasks()
        remaining = [t for t in tasks if t.project_id != project_id]
        if len(remaining) != len(tasks):
            logger.info(
                "store.project.cascade project_id=%s tasks_removed=%d",
                project_id,
                len(tasks) - len(remaining),
            )
            self.save_tasks(remaining)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def get_task(self, task_id: int) -> Task | None:
        return _find(self.get_tasks(), task_id)

    def tasks_by_project(self, project_id: int) -> list[Task]:
        return [t for t in self.get_tasks() if t.project_id == project_id]

    def tasks_by_assignee(self, member_id: int) -> list[Task]:
        return [t for t in self.get_tasks() if t.assignee_id == member_id]

    def tasks_by_team(self, team_id: int) -> list[Task]:
        return [t for t in self.get_tasks() if t.team_id == team_id]

    def task_summary(self, project_id: int, *, today: date | None = None) -> TaskSummary:
        return summarize_tasks(self.tasks_by_project(project_id), today=today or utctoday())

    def _refresh_task_summaries(self, tasks: Sequence[Task], project_ids: set[int]) -> None:
        projects = self.get_projects()
        today = utctoday()
        touched = False
        for project in projects:
            if project.id in project_ids:
                project.tasks = summarize_tasks(
                    [t for t in tasks if t.project_id == project.id], today=today
                )
                touched = True
        if touched:
            self.save_projects(projects)

    def create_task(self, data: dict[str, Any]) -> Task:
        project = self.get_project(data.get("project_id"))
        if project is None:
            raise NotFoundError("project", data.get("project_id"))
        if data.get("assignee_id") is not None and self.get_team_member(data["assignee_id"]) is None:
            raise NotFoundError("team member", data["assignee_id"])

        tasks = self.get_tasks()
        progress = clamp_progress(data.get("progress", 0))
        now = utcnow()
        task = Task.model_validate(
            {
                "team_id": project.team_id,
                **data,
                "id": self._next_id(tasks),
                "progress": progress,
                "status": status_for_progress(progress),
                "comments": [],
                "created_at": now,
                "updated_at": now,
            }
        )
        tasks.append(task)
        self.save_tasks(tasks)
        self._refresh_task_summaries(tasks, {task.project_id})
        return task

    def update_task(self, task_id: int, changes: dict[str, Any]) -> Task:
        tasks = self.get_tasks()
        task = _require(tasks, task_id, "task")
        changes = dict(changes)
        if changes.get("assignee_id") is not None:
            if self.get_team_member(changes["assignee_id"]) is None:
                raise NotFoundError("team member", changes["assignee_id"])
        if changes.get("project_id") is not None and changes["project_id"] != task.project_id:
            if self.get_project(changes["project_id"]) is None:
                raise NotFoundError("project", changes["project_id"])

        if "progress" in changes:
            changes["progress"] = clamp_progress(changes["progress"])
            changes.pop("status", None)
        elif changes.get("status") is not None:
            changes["progress"] = progress_for_status(changes.pop("status"), task.progress)

        touched = {task.project_id}
        for key, value in changes.items():
            setattr(task, key, value)
        task.status = status_for_progress(task.progress)
        task.updated_at = utcnow()
        touched.add(task.project_id)

        self.save_tasks(tasks)
        self._refresh_task_summaries(tasks, touched)
        return task

    def update_task_progress(self, task_id: int, progress: int) -> Task:
        return self.update_task(task_id, {"progress": progress})

    def assign_task(self, task_id: int, member_id: int) -> Task:
        return self.update_task(task_id, {"assignee_id": member_id})

    def add_task_comment(self, task_id: int, *, author: str, text: str) -> Task:
        tasks = self.get_tasks()
        task = _require(tasks, task_id, "task")
        task.comments.append(TaskComment(author=author, text=text))
        task.updated_at = utcnow()
        self.save_tasks(tasks)
        return task

    def delete_task(self, task_id: int) -> None:
        tasks = self.get_tasks()
        task = _require(tasks, task_id, "task")
        remaining = [t for t in tasks if t.id != task_id]
        self.save_tasks(remaining)
        self._refresh_task_summaries(remaining, {task.project_id})

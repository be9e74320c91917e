from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from taskflow.api.deps import (
    ACTOR_DEP,
    PRIVILEGED_DEP,
    STORE_DEP,
    ActorContext,
)
from taskflow.core.logging import get_logger
from taskflow.db.session import get_session
from taskflow.models.entities import PROJECT_COMPLETED, Project, Task
from taskflow.models.notifications import NotificationType
from taskflow.schemas.common import OkResponse
from taskflow.schemas.entities import ProjectCreate, ProjectRead, ProjectUpdate
from taskflow.services.entity_store import EntitySnapshot, EntityStore
from taskflow.services.notifications import NotificationDraft, create_bulk_notifications

router = APIRouter(prefix="/projects", tags=["projects"])
logger = get_logger(__name__)


def _to_project_read(snapshot: EntitySnapshot, project: Project) -> ProjectRead:
    team = snapshot.team(project.team_id)
    return ProjectRead.model_validate(
        {**project.model_dump(), "team_name": team.name if team else None}
    )


def _live(store: EntityStore, project_id: int) -> tuple[EntitySnapshot, Project]:
    snapshot = store.snapshot()
    project = snapshot.project(project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return snapshot, project


@router.get("", response_model=list[ProjectRead])
def list_projects(
    team_id: int | None = None,
    store: EntityStore = STORE_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> list[ProjectRead]:
    snapshot = store.snapshot()
    projects = snapshot.projects
    if team_id is not None:
        projects = [p for p in projects if p.team_id == team_id]
    return [_to_project_read(snapshot, p) for p in projects]


@router.get("/{project_id}", response_model=ProjectRead)
def get_project(
    project_id: int, store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP
) -> ProjectRead:
    snapshot, project = _live(store, project_id)
    return _to_project_read(snapshot, project)


@router.get("/{project_id}/tasks", response_model=list[Task])
def list_project_tasks(
    project_id: int, store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP
) -> list[Task]:
    if store.get_project(project_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return store.tasks_by_project(project_id)


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    store: EntityStore = STORE_DEP,
    session: Session = Depends(get_session),
    actor: ActorContext = PRIVILEGED_DEP,
) -> ProjectRead:
    project = store.create_project(payload.model_dump())

    logger.info("project.created project_id=%s actor=%s", project.id, actor.user_id)
    create_bulk_notifications(
        session,
        (
            NotificationDraft(
                user_id=member_id,
                type=NotificationType.PROJECT_CREATED,
                title="New project",
                message=f"You were added to project {project.name}.",
                link=f"/projects/{project.id}",
                project_name=project.name,
                user_name=actor.name,
            )
            for member_id in project.team_member_ids
        ),
    )
    return _to_project_read(store.snapshot(), project)


@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    store: EntityStore = STORE_DEP,
    session: Session = Depends(get_session),
    actor: ActorContext = PRIVILEGED_DEP,
) -> ProjectRead:
    before = store.get_project(project_id)
    project = store.update_project(project_id, payload.model_dump(exclude_unset=True))

    if before is not None and before.status != PROJECT_COMPLETED and project.status == PROJECT_COMPLETED:
        create_bulk_notifications(
            session,
            (
                NotificationDraft(
                    user_id=member_id,
                    type=NotificationType.PROJECT_COMPLETED,
                    title="Project completed",
                    message=f"{project.name} was marked as completed.",
                    link=f"/projects/{project.id}",
                    project_name=project.name,
                )
                for member_id in project.team_member_ids
            ),
        )
    snapshot, project = _live(store, project_id)
    return _to_project_read(snapshot, project)


@router.delete("/{project_id}", response_model=OkResponse)
def delete_project(
    project_id: int, store: EntityStore = STORE_DEP, actor: ActorContext = PRIVILEGED_DEP
) -> OkResponse:
    store.delete_project(project_id)
    logger.info("project.deleted project_id=%s actor=%s", project_id, actor.user_id)
    return OkResponse(message="Project deleted")

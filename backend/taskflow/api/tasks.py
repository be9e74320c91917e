from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from taskflow.api.deps import ACTOR_DEP, PRIVILEGED_DEP, STORE_DEP, ActorContext
from taskflow.core.errors import ForbiddenError
from taskflow.core.logging import get_logger
from taskflow.db.session import get_session
from taskflow.models.entities import TASK_COMPLETED, Task
from taskflow.models.notifications import NotificationType
from taskflow.schemas.common import OkResponse
from taskflow.schemas.entities import (
    TaskAssign,
    TaskCommentCreate,
    TaskCreate,
    TaskProgressUpdate,
    TaskStatusUpdate,
    TaskUpdate,
)
from taskflow.services.entity_store import EntityStore
from taskflow.services.notifications import NotificationDraft, create_notification

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = get_logger(__name__)

SESSION_DEP = Depends(get_session)


def _get_task_or_404(store: EntityStore, task_id: int) -> Task:
    task = store.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


def _guard_ownership(actor: ActorContext, task: Task) -> None:
    """Team members may only touch tasks assigned to them."""
    if actor.is_privileged or task.assignee_id == actor.user_id:
        return
    raise ForbiddenError("Not authorized: task is not assigned to you")


def _notify_assignee(
    session: Session,
    task: Task,
    *,
    ntype: NotificationType,
    title: str,
    message: str,
    actor: ActorContext,
    store: EntityStore,
) -> None:
    if task.assignee_id is None or task.assignee_id == actor.user_id:
        return
    project = store.get_project(task.project_id)
    create_notification(
        session,
        NotificationDraft(
            user_id=task.assignee_id,
            type=ntype,
            title=title,
            message=message,
            link=f"/tasks/{task.id}",
            data={"task_id": task.id, "project_id": task.project_id},
            project_name=project.name if project else None,
            task_name=task.title,
            user_name=actor.name,
        ),
    )


@router.get("", response_model=list[Task])
def list_tasks(
    assignee_id: int | None = None,
    store: EntityStore = STORE_DEP,
    actor: ActorContext = PRIVILEGED_DEP,
) -> list[Task]:
    if assignee_id is not None:
        return store.tasks_by_assignee(assignee_id)
    return store.get_tasks()


@router.get("/mine", response_model=list[Task])
def list_my_tasks(store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP) -> list[Task]:
    return store.tasks_by_assignee(actor.user_id)


@router.get("/project/{project_id}", response_model=list[Task])
def list_tasks_by_project(
    project_id: int, store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP
) -> list[Task]:
    return store.tasks_by_project(project_id)


@router.get("/{task_id}", response_model=Task)
def get_task(task_id: int, store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP) -> Task:
    task = _get_task_or_404(store, task_id)
    _guard_ownership(actor, task)
    return task


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    store: EntityStore = STORE_DEP,
    session: Session = SESSION_DEP,
    actor: ActorContext = PRIVILEGED_DEP,
) -> Task:
    task = store.create_task(payload.model_dump())

    logger.info("task.created task_id=%s project_id=%s actor=%s", task.id, task.project_id, actor.user_id)
    _notify_assignee(
        session,
        task,
        ntype=NotificationType.TASK_ASSIGNED_TO_ME,
        title="New task assigned",
        message=f"You have been assigned: {task.title}",
        actor=actor,
        store=store,
    )
    return task


@router.patch("/{task_id}", response_model=Task)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    store: EntityStore = STORE_DEP,
    actor: ActorContext = PRIVILEGED_DEP,
) -> Task:
    return store.update_task(task_id, payload.model_dump(exclude_unset=True))


def _apply_progress_change(
    *,
    task: Task,
    changes: dict,
    store: EntityStore,
    session: Session,
    actor: ActorContext,
) -> Task:
    was_completed = task.status == TASK_COMPLETED
    updated = store.update_task(task.id, changes)
    if not was_completed and updated.status == TASK_COMPLETED:
        logger.info("task.completed task_id=%s actor=%s", updated.id, actor.user_id)
        _notify_assignee(
            session,
            updated,
            ntype=NotificationType.TASK_COMPLETED_BY_ME,
            title="Task completed",
            message=f"{updated.title} was marked as completed.",
            actor=actor,
            store=store,
        )
    return updated


@router.put("/{task_id}/status", response_model=Task)
def update_task_status(
    task_id: int,
    payload: TaskStatusUpdate,
    store: EntityStore = STORE_DEP,
    session: Session = SESSION_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> Task:
    task = _get_task_or_404(store, task_id)
    _guard_ownership(actor, task)
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="status or progress is required",
        )
    return _apply_progress_change(
        task=task, changes=changes, store=store, session=session, actor=actor
    )


@router.put("/{task_id}/progress", response_model=Task)
def update_task_progress(
    task_id: int,
    payload: TaskProgressUpdate,
    store: EntityStore = STORE_DEP,
    session: Session = SESSION_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> Task:
    task = _get_task_or_404(store, task_id)
    _guard_ownership(actor, task)
    return _apply_progress_change(
        task=task,
        changes={"progress": payload.progress},
        store=store,
        session=session,
        actor=actor,
    )


@router.put("/{task_id}/assign", response_model=Task)
def assign_task(
    task_id: int,
    payload: TaskAssign,
    store: EntityStore = STORE_DEP,
    session: Session = SESSION_DEP,
    actor: ActorContext = PRIVILEGED_DEP,
) -> Task:
    task = store.assign_task(task_id, payload.member_id)
    _notify_assignee(
        session,
        task,
        ntype=NotificationType.TASK_ASSIGNED_TO_ME,
        title="Task assigned",
        message=f"You have been assigned: {task.title}",
        actor=actor,
        store=store,
    )
    return task


@router.post("/{task_id}/comments", response_model=Task, status_code=status.HTTP_201_CREATED)
def add_task_comment(
    task_id: int,
    payload: TaskCommentCreate,
    store: EntityStore = STORE_DEP,
    session: Session = SESSION_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> Task:
    task = store.add_task_comment(task_id, author=actor.display_name, text=payload.text)

    snippet = payload.text.strip().replace("\n", " ")
    if len(snippet) > 180:
        snippet = snippet[:177] + "..."
    _notify_assignee(
        session,
        task,
        ntype=NotificationType.COMMENT_ADDED,
        title="New comment",
        message=f"New comment on {task.title}: {snippet}",
        actor=actor,
        store=store,
    )
    return task


@router.delete("/{task_id}", response_model=OkResponse)
def delete_task(
    task_id: int, store: EntityStore = STORE_DEP, actor: ActorContext = PRIVILEGED_DEP
) -> OkResponse:
    store.delete_task(task_id)
    return OkResponse(message="Task deleted")

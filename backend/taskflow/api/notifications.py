"""Per-user notification inbox: paginated list, unread count and read state."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, cast

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlmodel import Session, col, select

from taskflow.api.deps import ACTOR_DEP, ActorContext
from taskflow.core.logging import get_logger
from taskflow.core.time import format_time_ago, utcnow
from taskflow.db.pagination import paginate
from taskflow.db.session import get_session
from taskflow.models.notifications import Notification
from taskflow.schemas.common import OkResponse
from taskflow.schemas.notifications import NotificationRead, UnreadCount
from taskflow.schemas.pagination import NotificationListPage

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = get_logger(__name__)

SESSION_DEP = Depends(get_session)
UNREAD_ONLY_QUERY = Query(default=False, alias="unreadOnly")


def _to_read(notification: Notification, *, now: datetime) -> NotificationRead:
    return NotificationRead.model_validate(
        {
            **notification.model_dump(),
            "time": format_time_ago(notification.created_at, now=now),
        }
    )


def _owned_or_404(session: Session, actor: ActorContext, notification_id: int) -> Notification:
    notification = session.get(Notification, notification_id)
    if notification is None or notification.user_id != actor.user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification


@router.get("", response_model=NotificationListPage[NotificationRead])
def list_notifications(
    unread_only: bool = UNREAD_ONLY_QUERY,
    session: Session = SESSION_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> NotificationListPage[NotificationRead]:
    statement = select(Notification).where(col(Notification.user_id) == actor.user_id)
    if unread_only:
        statement = statement.where(col(Notification.read).is_(False))
    statement = statement.order_by(
        col(Notification.created_at).desc(), col(Notification.id).desc()
    )
    now = utcnow()

    def _transform(items: Sequence[Any]) -> Sequence[Any]:
        notifications = cast(Sequence[Notification], items)
        return [_to_read(n, now=now) for n in notifications]

    return paginate(session, statement, transformer=_transform)


@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(
    session: Session = SESSION_DEP, actor: ActorContext = ACTOR_DEP
) -> UnreadCount:
    count = session.exec(
        select(func.count())
        .select_from(Notification)
        .where(col(Notification.user_id) == actor.user_id)
        .where(col(Notification.read).is_(False))
    ).one()
    return UnreadCount(count=count)


@router.put("/read-all", response_model=OkResponse)
def mark_all_read(session: Session = SESSION_DEP, actor: ActorContext = ACTOR_DEP) -> OkResponse:
    unread = list(
        session.exec(
            select(Notification)
            .where(col(Notification.user_id) == actor.user_id)
            .where(col(Notification.read).is_(False))
        )
    )
    for notification in unread:
        notification.read = True
        session.add(notification)
    session.commit()
    logger.info("notifications.read_all user_id=%s updated=%d", actor.user_id, len(unread))
    return OkResponse(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=OkResponse)
def mark_read(
    notification_id: int,
    session: Session = SESSION_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> OkResponse:
    notification = _owned_or_404(session, actor, notification_id)
    if not notification.read:
        notification.read = True
        session.add(notification)
        session.commit()
    return OkResponse(message="Notification marked as read")


@router.delete("/{notification_id}", response_model=OkResponse)
def delete_notification(
    notification_id: int,
    session: Session = SESSION_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> OkResponse:
    notification = _owned_or_404(session, actor, notification_id)
    session.delete(notification)
    session.commit()
    return OkResponse(message="Notification deleted")

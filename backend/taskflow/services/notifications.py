"""Server-side notification creation and per-user preferences."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from taskflow.core.logging import get_logger
from taskflow.core.time import utcnow
from taskflow.models.notifications import Notification, NotificationPreference, NotificationType

logger = get_logger(__name__)

ROLE_ADMIN = "ADMIN"
ROLE_PROJECT_MANAGER = "PROJECT_MANAGER"
ROLE_TEAM_MEMBER = "TEAM_MEMBER"

_BASE_PREFS = {
    "emailNotifications": True,
    "inAppNotifications": True,
}

_ROLE_PREFS: dict[str, dict[str, bool]] = {
    ROLE_ADMIN: {
        "userRegistered": True,
        "projectCreated": True,
        "projectCompleted": True,
        "systemAlerts": True,
        "roleChanged": True,
    },
    ROLE_PROJECT_MANAGER: {
        "taskAssigned": True,
        "taskCompleted": True,
        "taskOverdue": True,
        "projectDeadline": True,
        "teamCreated": True,
        "memberJoined": True,
        "projectUpdates": True,
        "deadlineReminders": True,
    },
    ROLE_TEAM_MEMBER: {
        "taskAssignedToMe": True,
        "taskCompletedByMe": True,
        "taskOverdueForMe": True,
        "deadlineApproaching": True,
        "commentAdded": True,
        "addedToTeam": True,
    },
}

# Preference flag that gates each notification type, where one exists.
_TYPE_PREF_FLAG = {
    NotificationType.USER_REGISTERED: "userRegistered",
    NotificationType.PROJECT_CREATED: "projectCreated",
    NotificationType.PROJECT_COMPLETED: "projectCompleted",
    NotificationType.SYSTEM_ALERT: "systemAlerts",
    NotificationType.ROLE_CHANGED: "roleChanged",
    NotificationType.TASK_ASSIGNED: "taskAssigned",
    NotificationType.TASK_COMPLETED: "taskCompleted",
    NotificationType.TASK_OVERDUE: "taskOverdue",
    NotificationType.PROJECT_DEADLINE: "projectDeadline",
    NotificationType.TEAM_CREATED: "teamCreated",
    NotificationType.MEMBER_JOINED: "memberJoined",
    NotificationType.TASK_ASSIGNED_TO_ME: "taskAssignedToMe",
    NotificationType.TASK_COMPLETED_BY_ME: "taskCompletedByMe",
    NotificationType.TASK_OVERDUE_FOR_ME: "taskOverdueForMe",
    NotificationType.DEADLINE_APPROACHING: "deadlineApproaching",
    NotificationType.COMMENT_ADDED: "commentAdded",
    NotificationType.ADDED_TO_TEAM: "addedToTeam",
}


def normalize_role(role: str | None) -> str:
    """``project-manager``, ``Project_Manager`` and friends -> ``PROJECT_MANAGER``."""
    return (role or "").strip().upper().replace("-", "_")


def default_prefs(role: str | None) -> dict[str, bool]:
    normalized = normalize_role(role)
    role_key = normalized if normalized in _ROLE_PREFS else ROLE_TEAM_MEMBER
    return {**_BASE_PREFS, **_ROLE_PREFS[role_key]}


def get_prefs(session: Session, *, user_id: int, role: str | None) -> dict[str, bool]:
    """Stored preferences, falling back to (and saving) the role defaults."""
    row = session.get(NotificationPreference, user_id)
    if row is not None and row.prefs:
        return dict(row.prefs)
    prefs = default_prefs(role)
    save_prefs(session, user_id=user_id, role=role, prefs=prefs)
    return prefs


def save_prefs(
    session: Session, *, user_id: int, role: str | None, prefs: dict[str, bool]
) -> dict[str, bool]:
    row = session.get(NotificationPreference, user_id)
    if row is None:
        row = NotificationPreference(user_id=user_id, role=role, prefs=dict(prefs))
    else:
        row.prefs = dict(prefs)
        row.role = role or row.role
        row.updated_at = utcnow()
    session.add(row)
    session.commit()
    return dict(row.prefs)


def _enabled(session: Session, user_id: int, ntype: NotificationType) -> bool:
    row = session.get(NotificationPreference, user_id)
    if row is None or not row.prefs:
        return True
    if row.prefs.get("inAppNotifications") is False:
        return False
    flag = _TYPE_PREF_FLAG.get(ntype)
    return flag is None or row.prefs.get(flag, True) is not False


@dataclass(frozen=True, slots=True)
class NotificationDraft:
    user_id: int
    type: NotificationType
    title: str
    message: str
    link: str | None = None
    data: dict[str, Any] | None = None
    project_name: str | None = None
    task_name: str | None = None
    user_name: str | None = None

    def to_model(self) -> Notification:
        return Notification(
            user_id=self.user_id,
            type=self.type.value,
            title=self.title,
            message=self.message,
            link=self.link,
            data=dict(self.data or {}),
            project_name=self.project_name,
            task_name=self.task_name,
            user_name=self.user_name,
            read=False,
        )


def create_notification(session: Session, draft: NotificationDraft) -> Notification | None:
    """Best effort: a failure is logged and never breaks the calling write."""
    if not _enabled(session, draft.user_id, draft.type):
        logger.info(
            "notify.skipped user_id=%s type=%s reason=prefs", draft.user_id, draft.type.value
        )
        return None
    notification = draft.to_model()
    try:
        session.add(notification)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("notify.create.failed user_id=%s error=%s", draft.user_id, exc)
        return None
    session.refresh(notification)
    return notification


def create_bulk_notifications(session: Session, drafts: Iterable[NotificationDraft]) -> int:
    rows = [d.to_model() for d in drafts if _enabled(session, d.user_id, d.type)]
    if not rows:
        return 0
    try:
        session.add_all(rows)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("notify.bulk.failed count=%d error=%s", len(rows), exc)
        return 0
    return len(rows)

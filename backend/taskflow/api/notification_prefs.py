from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlmodel import Session

from taskflow.api.deps import ACTOR_DEP, ActorContext
from taskflow.core.logging import get_logger
from taskflow.db.session import get_session
from taskflow.schemas.notifications import NotificationPrefsResult
from taskflow.services.notifications import default_prefs, get_prefs, save_prefs

router = APIRouter(prefix="/notification-prefs", tags=["notifications"])
logger = get_logger(__name__)

SESSION_DEP = Depends(get_session)


@router.get("", response_model=NotificationPrefsResult)
def read_prefs(
    session: Session = SESSION_DEP, actor: ActorContext = ACTOR_DEP
) -> NotificationPrefsResult:
    prefs = get_prefs(session, user_id=actor.user_id, role=actor.role)
    return NotificationPrefsResult(message="Notification preferences", prefs=prefs)


@router.put("", response_model=NotificationPrefsResult)
def update_prefs(
    payload: dict[str, Any] | None = Body(default=None),
    session: Session = SESSION_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> NotificationPrefsResult:
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Preferences are required",
        )
    invalid = sorted(key for key, value in payload.items() if not isinstance(value, bool))
    if invalid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Preference values must be booleans: {', '.join(invalid)}",
        )

    current = get_prefs(session, user_id=actor.user_id, role=actor.role)
    prefs = save_prefs(
        session, user_id=actor.user_id, role=actor.role, prefs={**current, **payload}
    )
    logger.info("notification_prefs.updated user_id=%s keys=%s", actor.user_id, len(payload))
    return NotificationPrefsResult(message="Preferences updated", prefs=prefs)


@router.post("/reset", response_model=NotificationPrefsResult)
def reset_prefs(
    session: Session = SESSION_DEP, actor: ActorContext = ACTOR_DEP
) -> NotificationPrefsResult:
    prefs = save_prefs(
        session, user_id=actor.user_id, role=actor.role, prefs=default_prefs(actor.role)
    )
    return NotificationPrefsResult(message="Preferences reset to defaults", prefs=prefs)

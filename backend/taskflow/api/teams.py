from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from taskflow.api.deps import ACTOR_DEP, PRIVILEGED_DEP, STORE_DEP, ActorContext
from taskflow.core.logging import get_logger
from taskflow.db.session import get_session
from taskflow.models.entities import Team, TeamMember
from taskflow.models.notifications import NotificationType
from taskflow.schemas.common import OkResponse
from taskflow.schemas.entities import TeamCreate, TeamMembershipChange, TeamRead, TeamUpdate
from taskflow.services.entity_store import EntityStore
from taskflow.services.notifications import NotificationDraft, create_notification

router = APIRouter(prefix="/teams", tags=["teams"])
logger = get_logger(__name__)


def _to_team_read(store: EntityStore, team: Team) -> TeamRead:
    lead = store.team_lead(team)
    return TeamRead.model_validate(
        {
            **team.model_dump(),
            "lead_name": lead.name if lead else None,
            "member_count": len(team.member_ids),
        }
    )


@router.get("", response_model=list[TeamRead])
def list_teams(store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP) -> list[TeamRead]:
    return [_to_team_read(store, team) for team in store.get_teams()]


@router.get("/{team_id}", response_model=TeamRead)
def get_team(
    team_id: int, store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP
) -> TeamRead:
    team = store.get_team(team_id)
    if team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return _to_team_read(store, team)


@router.get("/{team_id}/members", response_model=list[TeamMember])
def list_team_members(
    team_id: int, store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP
) -> list[TeamMember]:
    if store.get_team(team_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return store.team_members_details(team_id)


@router.post("", response_model=TeamRead, status_code=status.HTTP_201_CREATED)
def create_team(
    payload: TeamCreate, store: EntityStore = STORE_DEP, actor: ActorContext = PRIVILEGED_DEP
) -> TeamRead:
    team = store.create_team(payload.model_dump())
    logger.info("team.created team_id=%s actor=%s", team.id, actor.user_id)
    return _to_team_read(store, team)


@router.patch("/{team_id}", response_model=TeamRead)
def update_team(
    team_id: int,
    payload: TeamUpdate,
    store: EntityStore = STORE_DEP,
    actor: ActorContext = PRIVILEGED_DEP,
) -> TeamRead:
    team = store.update_team(team_id, payload.model_dump(exclude_unset=True))
    return _to_team_read(store, team)


@router.delete("/{team_id}", response_model=OkResponse)
def delete_team(
    team_id: int, store: EntityStore = STORE_DEP, actor: ActorContext = PRIVILEGED_DEP
) -> OkResponse:
    store.delete_team(team_id)
    logger.info("team.deleted team_id=%s actor=%s", team_id, actor.user_id)
    return OkResponse(message="Team deleted")


@router.post("/{team_id}/members", response_model=TeamRead)
def add_team_member(
    team_id: int,
    payload: TeamMembershipChange,
    store: EntityStore = STORE_DEP,
    session: Session = Depends(get_session),
    actor: ActorContext = PRIVILEGED_DEP,
) -> TeamRead:
    team = store.add_member_to_team(team_id, payload.member_id)
    create_notification(
        session,
        NotificationDraft(
            user_id=payload.member_id,
            type=NotificationType.ADDED_TO_TEAM,
            title="Added to team",
            message=f"You were added to {team.name}.",
            link=f"/teams/{team.id}",
            user_name=actor.name,
        ),
    )
    return _to_team_read(store, team)


@router.delete("/{team_id}/members/{member_id}", response_model=TeamRead)
def remove_team_member(
    team_id: int,
    member_id: int,
    store: EntityStore = STORE_DEP,
    actor: ActorContext = PRIVILEGED_DEP,
) -> TeamRead:
    team = store.remove_member_from_team(team_id, member_id)
    return _to_team_read(store, team)

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from taskflow.api.deps import ACTOR_DEP, PRIVILEGED_DEP, STORE_DEP, ActorContext
from taskflow.models.entities import TeamMember
from taskflow.schemas.entities import MemberStatusUpdate, TeamMemberCreate, TeamMemberUpdate
from taskflow.services.entity_store import EntityStore

router = APIRouter(prefix="/members", tags=["members"])


@router.get("", response_model=list[TeamMember])
def list_members(
    status_filter: str | None = Query(default=None, alias="status"),
    store: EntityStore = STORE_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> list[TeamMember]:
    members = store.get_team_members()
    if status_filter:
        members = [m for m in members if m.status == status_filter]
    return members


@router.get("/{member_id}", response_model=TeamMember)
def get_member(
    member_id: int,
    store: EntityStore = STORE_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> TeamMember:
    member = store.get_team_member(member_id)
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team member not found")
    return member


@router.post("", response_model=TeamMember, status_code=status.HTTP_201_CREATED)
def create_member(
    payload: TeamMemberCreate,
    store: EntityStore = STORE_DEP,
    actor: ActorContext = PRIVILEGED_DEP,
) -> TeamMember:
    return store.create_team_member(payload.model_dump())


@router.patch("/{member_id}", response_model=TeamMember)
def update_member(
    member_id: int,
    payload: TeamMemberUpdate,
    store: EntityStore = STORE_DEP,
    actor: ActorContext = PRIVILEGED_DEP,
) -> TeamMember:
    return store.update_team_member(member_id, payload.model_dump(exclude_unset=True))


@router.patch("/{member_id}/status", response_model=TeamMember)
def set_member_status(
    member_id: int,
    payload: MemberStatusUpdate,
    store: EntityStore = STORE_DEP,
    actor: ActorContext = PRIVILEGED_DEP,
) -> TeamMember:
    return store.set_member_status(member_id, payload.status)

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from taskflow.core.config import settings
from taskflow.core.logging import get_logger
from taskflow.db.repositories import (
    CollectionRepository,
    InMemoryRepository,
    JsonFileRepository,
    SqlCollectionRepository,
)
from taskflow.db.session import engine
from taskflow.services.entity_store import EntityStore
from taskflow.services.metrics import MetricsConfig
from taskflow.services.notifications import (
    ROLE_ADMIN,
    ROLE_PROJECT_MANAGER,
    ROLE_TEAM_MEMBER,
    normalize_role,
)

logger = get_logger(__name__)

PRIVILEGED_ROLES = frozenset({ROLE_ADMIN, ROLE_PROJECT_MANAGER})

_store: EntityStore | None = None


def build_repository() -> CollectionRepository:
    backend = settings.storage_backend.strip().lower()
    if backend == "memory":
        return InMemoryRepository()
    if backend == "json":
        return JsonFileRepository(settings.storage_dir)
    if backend != "sql":
        logger.warning("store.backend.unknown backend=%s fallback=sql", backend)
    return SqlCollectionRepository(engine)


def get_store() -> EntityStore:
    global _store
    if _store is None:
        _store = EntityStore(build_repository(), seed=settings.seed_demo_data)
    return _store


def get_metrics_config() -> MetricsConfig:
    return MetricsConfig.from_settings(settings)


@dataclass(frozen=True, slots=True)
class ActorContext:
    user_id: int
    role: str
    name: str | None = None

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    @property
    def display_name(self) -> str:
        return self.name or f"user:{self.user_id}"


def _verify_token(authorization: str | None) -> bool:
    expected = settings.local_auth_token
    if not expected:
        return True
    scheme, _, token = (authorization or "").partition(" ")
    return scheme.lower() == "bearer" and token == expected


def get_actor(
    authorization: str | None = Header(default=None),
    x_actor_id: int | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
    x_actor_name: str | None = Header(default=None),
) -> ActorContext:
    if not _verify_token(authorization):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    if x_actor_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-Id header is required",
        )
    return ActorContext(
        user_id=x_actor_id,
        role=normalize_role(x_actor_role) or ROLE_TEAM_MEMBER,
        name=x_actor_name,
    )


def require_roles(*roles: str) -> Callable[..., ActorContext]:
    allowed = frozenset(normalize_role(r) for r in roles)

    def _dependency(actor: ActorContext = Depends(get_actor)) -> ActorContext:
        if actor.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden: insufficient role",
            )
        return actor

    return _dependency


STORE_DEP = Depends(get_store)
ACTOR_DEP = Depends(get_actor)
METRICS_CONFIG_DEP = Depends(get_metrics_config)
PRIVILEGED_DEP = Depends(require_roles(ROLE_ADMIN, ROLE_PROJECT_MANAGER))

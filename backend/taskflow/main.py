from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi_pagination import add_pagination

from taskflow.api.analytics import router as analytics_router
from taskflow.api.members import router as members_router
from taskflow.api.notification_prefs import router as notification_prefs_router
from taskflow.api.notifications import router as notifications_router
from taskflow.api.projects import router as projects_router
from taskflow.api.tasks import router as tasks_router
from taskflow.api.teams import router as teams_router
from taskflow.core.config import settings
from taskflow.core.errors import ForbiddenError, NotFoundError
from taskflow.core.logging import configure_logging, get_logger
from taskflow.db.session import init_db

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.log_level)
    init_db()
    logger.info(
        "app.startup environment=%s storage_backend=%s",
        settings.environment,
        settings.storage_backend,
    )
    yield
    logger.info("app.shutdown")


app = FastAPI(title="TaskFlow API", version="0.1.0", lifespan=lifespan)


@app.exception_handler(NotFoundError)
async def _not_found_handler(_: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ForbiddenError)
async def _forbidden_handler(_: Request, exc: ForbiddenError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


@app.get("/healthz")
def health() -> dict[str, bool]:
    return {"ok": True}


api_router = APIRouter(prefix="/api")
api_router.include_router(members_router)
api_router.include_router(teams_router)
api_router.include_router(projects_router)
api_router.include_router(tasks_router)
api_router.include_router(analytics_router)
api_router.include_router(notifications_router)
api_router.include_router(notification_prefs_router)

app.include_router(api_router)
add_pagination(app)

"""Async client for the notification feed.

``NotificationApiClient`` wraps the REST endpoints. ``NotificationFeed`` holds
the local view a bell dropdown or notifications page renders: the loaded
page, the unread badge count and a load state. Read-state mutations are
optimistic and never rolled back; the next unread-count poll reconciles the
badge with the server.
"""

from __future__ import annotations

import asyncio
import math
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from pydantic import ValidationError

from taskflow.core.config import settings
from taskflow.core.logging import get_logger
from taskflow.schemas.notifications import NotificationRead

logger = get_logger(__name__)


class NotificationApiError(Exception):
    """Transport or HTTP failure talking to the notification API."""


class FeedState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class NotificationPage:
    notifications: list[NotificationRead]
    page: int
    limit: int
    total: int
    pages: int


class NotificationApiClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._headers = {"Accept": "application/json", **(headers or {})}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_s, connect=5.0),
            headers={"User-Agent": "taskflow-notification-feed/1.0"},
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = await self._client.request(method, url, headers=self._headers, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationApiError(f"{method} {path} failed: {exc}") from exc
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            raise NotificationApiError(f"{method} {path} returned invalid JSON") from exc

    async def list_notifications(
        self, *, page: int = 1, limit: int = 20, unread_only: bool = False
    ) -> NotificationPage:
        params = {"page": page, "limit": limit}
        if unread_only:
            params["unreadOnly"] = "true"
        data = await self._request("GET", "/notifications", params=params)

        raw = data.get("notifications") if isinstance(data, dict) else None
        meta = (data.get("pagination") if isinstance(data, dict) else None) or {}
        if not isinstance(raw, list):
            raise NotificationApiError("GET /notifications returned no notification list")
        if not isinstance(meta, dict):
            raise NotificationApiError("GET /notifications returned malformed pagination")
        try:
            items = [NotificationRead.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise NotificationApiError("GET /notifications returned malformed items") from exc

        try:
            total = int(meta.get("total", len(items)))
            return NotificationPage(
                notifications=items,
                page=int(meta.get("page", page)),
                limit=int(meta.get("limit", limit)),
                total=total,
                pages=int(meta.get("pages", math.ceil(total / limit) if limit else 0)),
            )
        except (TypeError, ValueError) as exc:
            raise NotificationApiError("GET /notifications returned malformed pagination") from exc

    async def unread_count(self) -> int:
        data = await self._request("GET", "/notifications/unread-count")
        try:
            return int(data["count"])
        except (KeyError, TypeError, ValueError) as exc:
            raise NotificationApiError("GET /notifications/unread-count returned no count") from exc

    async def mark_read(self, notification_id: int) -> None:
        await self._request("PUT", f"/notifications/{notification_id}/read")

    async def mark_all_read(self) -> None:
        await self._request("PUT", "/notifications/read-all")

    async def delete(self, notification_id: int) -> None:
        await self._request("DELETE", f"/notifications/{notification_id}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class NotificationFeed:
    """Local notification state for one UI surface.

    Unread-count responses carry the generation they were requested in. Any
    newer request or optimistic mutation bumps the generation, and a response
    older than the newest applied generation is dropped, so a slow poll can
    not resurrect a badge the user just cleared.
    """

    def __init__(
        self,
        api: NotificationApiClient,
        *,
        page_size: int | None = None,
        poll_interval: float | None = None,
    ):
        self.api = api
        self.page_size = page_size or settings.notification_page_size
        self.poll_interval = poll_interval or settings.notification_poll_interval_seconds

        self.state = FeedState.IDLE
        self.error: str | None = None
        self.notifications: list[NotificationRead] = []
        self.unread_count = 0
        self.page = 1
        self.total = 0
        self.pages = 0

        self._last_fetch: tuple[int, int, bool] | None = None
        self._generation = 0
        self._applied_generation = 0
        self._poll_task: asyncio.Task[None] | None = None

    async def __aenter__(self) -> NotificationFeed:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- fetching -----------------------------------------------------------

    async def fetch_page(
        self, page: int = 1, page_size: int | None = None, *, unread_only: bool = False
    ) -> None:
        limit = page_size or self.page_size
        self._last_fetch = (page, limit, unread_only)
        self.state = FeedState.LOADING
        try:
            result = await self.api.list_notifications(
                page=page, limit=limit, unread_only=unread_only
            )
        except NotificationApiError as exc:
            self.state = FeedState.ERROR
            self.error = str(exc)
            logger.warning("feed.fetch.failed page=%s error=%s", page, exc)
            return

        self.notifications = result.notifications
        self.page = result.page
        self.total = result.total
        self.pages = result.pages
        self.error = None
        self.state = FeedState.READY

    async def retry(self) -> None:
        page, limit, unread_only = self._last_fetch or (1, self.page_size, False)
        await self.fetch_page(page, limit, unread_only=unread_only)

    def _bump(self) -> int:
        self._generation += 1
        return self._generation

    async def refresh_unread_count(self) -> int | None:
        generation = self._bump()
        try:
            count = await self.api.unread_count()
        except NotificationApiError as exc:
            logger.warning("feed.unread.failed error=%s", exc)
            return None
        if generation < self._applied_generation:
            logger.debug(
                "feed.unread.stale generation=%d applied=%d",
                generation,
                self._applied_generation,
            )
            return None
        self._applied_generation = generation
        self.unread_count = count
        return count

    # -- polling ------------------------------------------------------------

    async def _poll_loop(self) -> None:
        while True:
            await self.refresh_unread_count()
            await asyncio.sleep(self.poll_interval)

    def start_polling(self) -> asyncio.Task[None]:
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._poll_loop())
        return self._poll_task

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def stop_polling(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def aclose(self) -> None:
        await self.stop_polling()
        await self.api.aclose()

    # -- optimistic mutations -------------------------------------------------

    def _apply_local(self, unread_count: int) -> None:
        self.unread_count = max(0, unread_count)
        self._applied_generation = self._bump()

    async def mark_read(self, notification_id: int) -> None:
        item = next((n for n in self.notifications if n.id == notification_id), None)
        if item is not None and not item.read:
            item.read = True
            self._apply_local(self.unread_count - 1)
        try:
            await self.api.mark_read(notification_id)
        except NotificationApiError as exc:
            logger.warning("feed.mark_read.failed id=%s error=%s", notification_id, exc)

    async def mark_all_read(self) -> None:
        for item in self.notifications:
            item.read = True
        self._apply_local(0)
        try:
            await self.api.mark_all_read()
        except NotificationApiError as exc:
            logger.warning("feed.mark_all_read.failed error=%s", exc)

    async def delete(self, notification_id: int) -> None:
        item = next((n for n in self.notifications if n.id == notification_id), None)
        if item is not None:
            self.notifications = [n for n in self.notifications if n.id != notification_id]
            self.total = max(0, self.total - 1)
            if not item.read:
                self._apply_local(self.unread_count - 1)
        try:
            await self.api.delete(notification_id)
        except NotificationApiError as exc:
            logger.warning("feed.delete.failed id=%s error=%s", notification_id, exc)

# ruff: noqa

import asyncio

import httpx

from taskflow.integrations.notification_feed import (
    FeedState,
    NotificationApiClient,
    NotificationFeed,
)

BASE_URL = "http://taskflow.test/api"


def _item(id_: int, *, read: bool = False) -> dict:
    return {
        "id": id_,
        "user_id": 7,
        "type": "task_assigned_to_me",
        "title": f"Notification {id_}",
        "message": "You have been assigned a task",
        "read": read,
        "created_at": "2026-10-19T10:00:00",
        "time": "just now",
    }


def _page(items: list[dict], *, page: int = 1, limit: int = 20) -> dict:
    return {
        "notifications": items,
        "pagination": {"page": page, "limit": limit, "total": len(items), "pages": 1},
    }


def _feed(handler, **kwargs) -> tuple[NotificationFeed, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    api = NotificationApiClient(BASE_URL, token="secret", client=http)
    return NotificationFeed(api, **kwargs), http


def test_fetch_page_sends_auth_and_paging_params():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_page([_item(1), _item(2, read=True)], page=2, limit=5))

    async def scenario():
        feed, http = _feed(handler)
        async with http:
            await feed.fetch_page(2, 5, unread_only=True)
        return feed

    feed = asyncio.run(scenario())
    assert feed.state == FeedState.READY
    assert [n.id for n in feed.notifications] == [1, 2]
    assert feed.page == 2
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.url.params["page"] == "2"
    assert request.url.params["limit"] == "5"
    assert request.url.params["unreadOnly"] == "true"


def test_fetch_failure_sets_error_state_and_retry_recovers():
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            return httpx.Response(500, json={"detail": "boom"})
        return httpx.Response(200, json=_page([_item(1)]))

    async def scenario():
        feed, http = _feed(handler)
        async with http:
            await feed.fetch_page(3)
            states = [feed.state, feed.error]
            await feed.retry()
        return feed, states

    feed, (failed_state, error) = asyncio.run(scenario())
    assert failed_state == FeedState.ERROR
    assert error
    assert feed.state == FeedState.READY
    assert feed.error is None
    assert calls["n"] == 2


def test_mark_all_read_is_applied_before_server_confirms():
    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path == "/api/notifications":
                return httpx.Response(200, json=_page([_item(1), _item(2), _item(3)]))
            if path == "/api/notifications/unread-count":
                return httpx.Response(200, json={"count": 3})
            if path == "/api/notifications/read-all":
                started.set()
                await release.wait()
                return httpx.Response(200, json={"ok": True})
            return httpx.Response(404)

        feed, http = _feed(handler)
        async with http:
            await feed.fetch_page()
            await feed.refresh_unread_count()
            assert feed.unread_count == 3

            pending = asyncio.create_task(feed.mark_all_read())
            await started.wait()
            during = (feed.unread_count, [n.read for n in feed.notifications])
            release.set()
            await pending
        return during

    unread, flags = asyncio.run(scenario())
    assert unread == 0
    assert flags == [True, True, True]


def test_failed_mark_read_is_not_rolled_back():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/notifications":
            return httpx.Response(200, json=_page([_item(1), _item(2)]))
        if request.url.path == "/api/notifications/unread-count":
            return httpx.Response(200, json={"count": 2})
        return httpx.Response(503)

    async def scenario():
        feed, http = _feed(handler)
        async with http:
            await feed.fetch_page()
            await feed.refresh_unread_count()
            await feed.mark_read(1)
            await feed.delete(2)
        return feed

    feed = asyncio.run(scenario())
    assert feed.unread_count == 0
    assert [n.id for n in feed.notifications] == [1]
    assert feed.notifications[0].read is True


def test_stale_unread_count_does_not_overwrite_optimistic_update():
    async def scenario():
        count_started = asyncio.Event()
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/notifications/unread-count":
                count_started.set()
                await release.wait()
                return httpx.Response(200, json={"count": 5})
            return httpx.Response(200, json={"ok": True})

        feed, http = _feed(handler)
        async with http:
            feed.unread_count = 5
            poll = asyncio.create_task(feed.refresh_unread_count())
            await count_started.wait()
            await feed.mark_all_read()
            release.set()
            result = await poll
        return feed, result

    feed, result = asyncio.run(scenario())
    assert result is None
    assert feed.unread_count == 0


def test_stop_polling_cancels_the_loop():
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(200, json={"count": calls["n"]})

    async def scenario():
        feed, http = _feed(handler, poll_interval=0.01)
        async with http:
            feed.start_polling()
            while calls["n"] < 2:
                await asyncio.sleep(0.01)
            assert feed.polling
            await feed.stop_polling()
            stopped_at = calls["n"]
            await asyncio.sleep(0.05)
        return feed, stopped_at

    feed, stopped_at = asyncio.run(scenario())
    assert not feed.polling
    assert calls["n"] == stopped_at
    assert feed.unread_count >= 1


def test_malformed_pagination_is_an_api_error():
    bodies = [
        {"notifications": [_item(1)], "pagination": "oops"},
        {"notifications": [_item(1)], "pagination": [1, 2]},
        {"notifications": [_item(1)], "pagination": {"total": "many"}},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=bodies.pop(0))

    async def scenario():
        feed, http = _feed(handler)
        outcomes = []
        async with http:
            for _ in range(3):
                await feed.fetch_page(1)
                outcomes.append((feed.state, feed.error))
        return outcomes

    for state, error in asyncio.run(scenario()):
        assert state == FeedState.ERROR
        assert "malformed pagination" in error


def test_missing_pagination_falls_back_to_request_params():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"notifications": [_item(1), _item(2)]})

    async def scenario():
        feed, http = _feed(handler)
        async with http:
            await feed.fetch_page(1, 10)
        return feed

    feed = asyncio.run(scenario())
    assert feed.state == FeedState.READY
    assert feed.total == 2
    assert feed.pages == 1

"""
Regression tests for issues found during code review.

1. Unique constraint violations must return 409 (not 500)
2. Mutations must revalidate the cached home feed
3. The feed must not issue one query per post (X-Query-Count)
4. CORS must not set allow_credentials=true with allow_origins=*
5. Back-to-back toggles alternate liked/unliked and keep at most one like
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache, page_key
from app.config import settings
from app.models import Like
from app.services import like_service, post_service


# ---------------------------------------------------------------------------
# 1. Unique constraint violations -> 409
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_duplicate_user_returns_409(async_client: AsyncClient):
    payload = {"username": "dup_user", "email": "dup1@example.com"}
    resp1 = await async_client.post("/api/v1/users", json=payload)
    assert resp1.status_code == 201

    payload2 = {"username": "dup_user", "email": "dup2@example.com"}
    resp2 = await async_client.post("/api/v1/users", json=payload2)
    assert resp2.status_code == 409


@pytest.mark.asyncio
async def test_duplicate_email_returns_409(async_client: AsyncClient):
    await async_client.post("/api/v1/users", json={
        "username": "emailuser1", "email": "same@example.com",
    })
    resp = await async_client.post("/api/v1/users", json={
        "username": "emailuser2", "email": "same@example.com",
    })
    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# 2. Route revalidation
# ---------------------------------------------------------------------------

class _RecordingCache:
    """Stands in for Redis: remembers sets and revalidated paths."""

    def __init__(self) -> None:
        self.store: dict = {}
        self.revalidated: list[str] = []

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ttl=None):
        self.store[key] = value

    async def revalidate_path(self, path):
        self.revalidated.append(path)
        prefix = f"page:{path}:"
        for key in [k for k in self.store if k.startswith(prefix)]:
            del self.store[key]


@pytest.mark.asyncio
async def test_mutations_revalidate_home_feed(db_session: AsyncSession, make_user, monkeypatch):
    fake = _RecordingCache()
    monkeypatch.setattr(post_service, "cache", fake)
    monkeypatch.setattr(like_service, "cache", fake)

    alice = await make_user("alice")
    created = await post_service.create_post(db_session, alice.id, "first")
    assert fake.revalidated == [settings.HOME_PATH]

    feed = await post_service.get_posts(db_session)
    assert len(feed.posts) == 1
    assert page_key(settings.HOME_PATH, "posts") in fake.store

    await like_service.toggle_like(db_session, alice.id, created.post.id)
    assert fake.revalidated == [settings.HOME_PATH, settings.HOME_PATH]
    assert fake.store == {}

    feed = await post_service.get_posts(db_session)
    assert feed.posts[0].like_count == 1


@pytest.mark.asyncio
async def test_failed_mutation_does_not_revalidate(db_session: AsyncSession, monkeypatch):
    fake = _RecordingCache()
    monkeypatch.setattr(post_service, "cache", fake)

    result = await post_service.delete_post(db_session, 1, 99999)
    assert result.success is False
    assert fake.revalidated == []


@pytest.mark.asyncio
async def test_revalidate_path_without_redis_is_noop():
    cache._redis = None
    before = cache.stats["revalidations"]
    await cache.revalidate_path("/")
    assert cache.stats["revalidations"] == before + 1


# ---------------------------------------------------------------------------
# 3. Feed query count does not grow with the number of posts
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_feed_query_count_is_constant(async_client: AsyncClient, make_user, auth_headers):
    alice = await make_user("alice")
    headers = auth_headers(alice)

    await async_client.post("/api/v1/posts", json={"content": "one"}, headers=headers)
    resp = await async_client.get("/api/v1/posts")
    single = int(resp.headers["x-query-count"])
    assert single > 0

    for i in range(4):
        post = await async_client.post("/api/v1/posts", json={"content": f"more {i}"}, headers=headers)
        post_id = post.json()["post"]["id"]
        await async_client.post(
            f"/api/v1/posts/{post_id}/comments", json={"content": "c"}, headers=headers
        )
    resp = await async_client.get("/api/v1/posts")
    assert len(resp.json()["posts"]) == 5
    assert int(resp.headers["x-query-count"]) == single


# ---------------------------------------------------------------------------
# 4. CORS headers
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cors_no_credentials_with_wildcard_origin(async_client: AsyncClient):
    resp = await async_client.options(
        "/api/v1/posts",
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "GET",
        },
    )
    cred_header = resp.headers.get("access-control-allow-credentials", "").lower()
    assert cred_header != "true", (
        "CORS must not combine allow_origins=* with allow_credentials=true"
    )


# ---------------------------------------------------------------------------
# 5. Back-to-back toggles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_toggle_like_sequence_over_http(
    async_client: AsyncClient, db_session: AsyncSession, make_user, auth_headers
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    post = await async_client.post("/api/v1/posts", json={"content": "x"}, headers=auth_headers(alice))
    post_id = post.json()["post"]["id"]

    results = []
    for _ in range(2):
        resp = await async_client.post(f"/api/v1/posts/{post_id}/like", headers=auth_headers(bob))
        assert resp.status_code == 200
        results.append(resp.json()["liked"])
    assert results == [True, False]

    await async_client.post(f"/api/v1/posts/{post_id}/like", headers=auth_headers(bob))
    count = (
        await db_session.execute(
            select(func.count()).select_from(Like).where(Like.post_id == post_id)
        )
    ).scalar_one()
    assert count == 1

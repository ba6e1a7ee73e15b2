from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy import update

from idea_forum.models import Category, Post, PostReply
from idea_forum.models.base import utcnow


@pytest_asyncio.fixture
async def category(session):
    cat = Category(name="General", slug="general", color="#3b82f6")
    session.add(cat)
    await session.commit()
    return cat.id


@pytest.fixture
def make_post(api, category):
    async def _make(author, title="Hello World", **fields):
        body = {"title": title, "content": "First post", "category_id": category}
        body.update(fields)
        resp = await api.post("post.create", user=author, **body)
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _make


async def test_create_post(make_post, users, category):
    post = await make_post(users.alice)
    assert post["slug"] == "hello-world"
    assert post["view_count"] == 0
    assert post["is_pinned"] is False
    assert post["category"]["id"] == category
    assert post["author"]["username"] == "alice"
    assert post["counts"] == {"replies": 0, "votes": 0}


async def test_create_post_slug_collision(make_post, users):
    await make_post(users.alice)
    second = await make_post(users.bob)
    assert second["slug"] == "hello-world-1"


async def test_create_post_missing_category(api, users):
    resp = await api.post("post.create", user=users.alice, title="Lost", content="...", category_id=999)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Category not found"


async def test_get_all_pinned_first(api, users, make_post, session):
    old = await make_post(users.alice, title="Old")
    pinned = await make_post(users.alice, title="Pinned")
    new = await make_post(users.alice, title="New")
    await session.execute(update(Post).where(Post.id == pinned["id"]).values(is_pinned=True))
    await session.commit()

    page = (await api.get("post.getAll")).json()
    assert [p["id"] for p in page["items"]] == [pinned["id"], new["id"], old["id"]]

    first = (await api.get("post.getAll", limit=1)).json()
    assert [p["id"] for p in first["items"]] == [pinned["id"]]
    assert first["next_cursor"] == new["id"]

    rest = (await api.get("post.getAll", limit=5, cursor=first["next_cursor"])).json()
    assert [p["id"] for p in rest["items"]] == [new["id"], old["id"]]
    assert rest["next_cursor"] is None


async def test_get_all_by_category(api, users, make_post, session):
    other = Category(name="Other", slug="other", color="#000000")
    session.add(other)
    await session.commit()
    await make_post(users.alice, title="Elsewhere", category_id=other.id)
    mine = await make_post(users.alice, title="Here")

    page = (await api.get("post.getAll", category_id=mine["category_id"])).json()
    assert [p["id"] for p in page["items"]] == [mine["id"]]


async def test_get_by_slug_counts_every_read(api, users, make_post):
    await make_post(users.alice)

    first = (await api.get("post.getBySlug", slug="hello-world")).json()
    second = (await api.get("post.getBySlug", slug="hello-world")).json()
    assert first["view_count"] == 1
    assert second["view_count"] == 2
    assert second["author"]["role"] == "USER"
    assert second["category"]["slug"] == "general"


async def test_get_by_slug_missing(api, users):
    resp = await api.get("post.getBySlug", slug="missing")
    assert resp.status_code == 404


async def test_get_by_slug_reply_threads(api, users, make_post, session):
    post = await make_post(users.alice)
    now = utcnow()
    top = PostReply(content="top", post_id=post["id"], author_id=users.bob, created_at=now)
    session.add(top)
    await session.flush()
    session.add_all(
        [
            PostReply(
                content="child",
                post_id=post["id"],
                author_id=users.admin,
                parent_id=top.id,
                created_at=now + timedelta(seconds=1),
            ),
            PostReply(
                content="later",
                post_id=post["id"],
                author_id=users.carol,
                created_at=now + timedelta(seconds=2),
            ),
        ]
    )
    await session.commit()

    detail = (await api.get("post.getBySlug", slug=post["slug"])).json()
    assert [r["content"] for r in detail["replies"]] == ["top", "later"]
    assert [c["content"] for c in detail["replies"][0]["children"]] == ["child"]
    assert detail["replies"][0]["children"][0]["author"]["role"] == "ADMIN"


async def test_vote_toggle(api, users, make_post):
    post = await make_post(users.alice)

    async def vote(kind):
        resp = await api.post("post.vote", user=users.bob, post_id=post["id"], type=kind)
        assert resp.status_code == 200
        return resp.json()["action"]

    assert await vote("UP") == "created"
    assert await vote("DOWN") == "updated"
    assert await vote("DOWN") == "removed"
    assert await vote("UP") == "created"

    detail = (await api.get("post.getBySlug", slug=post["slug"])).json()
    assert [(v["user_id"], v["type"]) for v in detail["votes"]] == [(users.bob, "UP")]


async def test_vote_missing_post(api, users):
    resp = await api.post("post.vote", user=users.bob, post_id=999, type="UP")
    assert resp.status_code == 404


async def test_get_latest(api, users, make_post):
    assert (await api.get("post.getLatest", user=users.alice)).json() is None

    await make_post(users.alice, title="Earlier")
    latest = await make_post(users.alice, title="Later")
    await make_post(users.bob, title="Somebody else")

    resp = await api.get("post.getLatest", user=users.alice)
    assert resp.json()["id"] == latest["id"]
    assert (await api.get("post.getLatest")).status_code == 401


async def test_get_all_cursor_inside_pinned_block(api, users, make_post, session):
    loose = await make_post(users.alice, title="Loose")
    first_pin = await make_post(users.alice, title="First pin")
    second_pin = await make_post(users.alice, title="Second pin")
    await session.execute(
        update(Post).where(Post.id.in_([first_pin["id"], second_pin["id"]])).values(is_pinned=True)
    )
    await session.commit()

    first = (await api.get("post.getAll", limit=1)).json()
    assert [p["id"] for p in first["items"]] == [second_pin["id"]]
    assert first["next_cursor"] == first_pin["id"]

    rest = (await api.get("post.getAll", limit=1, cursor=first["next_cursor"])).json()
    assert [p["id"] for p in rest["items"]] == [first_pin["id"]]
    assert rest["next_cursor"] == loose["id"]

    last = (await api.get("post.getAll", limit=1, cursor=rest["next_cursor"])).json()
    assert [p["id"] for p in last["items"]] == [loose["id"]]
    assert last["next_cursor"] is None


async def test_get_all_rejects_unknown_cursor(api, users):
    resp = await api.get("post.getAll", cursor=4242)
    assert resp.status_code == 400

from sqlalchemy import func, select

from idea_forum.models import Comment


async def _comment(api, user, idea_id, content, parent_id=None):
    body = {"idea_id": idea_id, "content": content}
    if parent_id is not None:
        body["parent_id"] = parent_id
    return await api.post("comment.create", user=user, **body)


async def test_create_top_level_and_reply(api, users, make_idea):
    idea = await make_idea(users.alice)

    top = await _comment(api, users.bob, idea["id"], "Great idea")
    assert top.status_code == 200
    top = top.json()
    assert top["parent_id"] is None
    assert top["author"]["username"] == "bob"
    assert top["replies"] == []

    reply = (await _comment(api, users.alice, idea["id"], "Thanks!", parent_id=top["id"])).json()
    assert reply["parent_id"] == top["id"]

    thread = (await api.get("comment.getById", id=top["id"])).json()
    assert [r["id"] for r in thread["replies"]] == [reply["id"]]


async def test_get_by_idea_oldest_first(api, users, make_idea):
    idea = await make_idea(users.alice)
    first = (await _comment(api, users.bob, idea["id"], "first")).json()
    second = (await _comment(api, users.carol, idea["id"], "second")).json()
    await _comment(api, users.alice, idea["id"], "reply b", parent_id=first["id"])
    await _comment(api, users.carol, idea["id"], "reply a", parent_id=first["id"])

    threads = (await api.get("comment.getByIdea", idea_id=idea["id"])).json()
    assert [t["id"] for t in threads] == [first["id"], second["id"]]
    assert [r["content"] for r in threads[0]["replies"]] == ["reply b", "reply a"]
    assert threads[1]["replies"] == []


async def test_create_on_missing_idea(api, users):
    resp = await _comment(api, users.bob, 999, "hello?")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Idea not found"


async def test_reply_to_missing_parent(api, users, make_idea):
    idea = await make_idea(users.alice)
    resp = await _comment(api, users.bob, idea["id"], "orphan", parent_id=999)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Parent comment not found"


async def test_reply_across_ideas_rejected(api, users, make_idea):
    one = await make_idea(users.alice, title="One")
    two = await make_idea(users.alice, title="Two")
    top = (await _comment(api, users.bob, one["id"], "on one")).json()

    resp = await _comment(api, users.carol, two["id"], "wrong thread", parent_id=top["id"])
    assert resp.status_code == 400
    assert resp.json()["code"] == "BAD_REQUEST"


async def test_reply_to_reply_rejected(api, users, make_idea):
    idea = await make_idea(users.alice)
    top = (await _comment(api, users.bob, idea["id"], "top")).json()
    reply = (await _comment(api, users.carol, idea["id"], "reply", parent_id=top["id"])).json()

    resp = await _comment(api, users.bob, idea["id"], "too deep", parent_id=reply["id"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Replies cannot be replied to"


async def test_create_rejects_empty_content(api, users, make_idea):
    idea = await make_idea(users.alice)
    resp = await _comment(api, users.bob, idea["id"], "")
    assert resp.status_code == 422


async def test_update_by_author(api, users, make_idea):
    idea = await make_idea(users.alice)
    top = (await _comment(api, users.bob, idea["id"], "typo")).json()

    resp = await api.post("comment.update", user=users.bob, id=top["id"], content="fixed")
    assert resp.status_code == 200
    assert resp.json()["content"] == "fixed"

    resp = await api.post("comment.update", user=users.alice, id=top["id"], content="hijack")
    assert resp.status_code == 403
    assert resp.json()["message"] == "You can only edit your own comments"


async def test_update_missing_comment(api, users):
    resp = await api.post("comment.update", user=users.bob, id=42, content="nope")
    assert resp.status_code == 404


async def test_delete_removes_replies(api, users, make_idea, session):
    idea = await make_idea(users.alice)
    top = (await _comment(api, users.bob, idea["id"], "top")).json()
    await _comment(api, users.alice, idea["id"], "reply 1", parent_id=top["id"])
    await _comment(api, users.carol, idea["id"], "reply 2", parent_id=top["id"])
    keep = (await _comment(api, users.carol, idea["id"], "keep me")).json()

    resp = await api.post("comment.delete", user=users.alice, id=top["id"])
    assert resp.status_code == 403

    resp = await api.post("comment.delete", user=users.bob, id=top["id"])
    assert resp.json() == {"success": True}

    remaining = await session.execute(select(Comment.id).where(Comment.idea_id == idea["id"]))
    assert remaining.scalars().all() == [keep["id"]]
    assert (await api.get("comment.getById", id=top["id"])).status_code == 404


async def test_delete_reply_keeps_parent(api, users, make_idea, session):
    idea = await make_idea(users.alice)
    top = (await _comment(api, users.bob, idea["id"], "top")).json()
    reply = (await _comment(api, users.carol, idea["id"], "reply", parent_id=top["id"])).json()

    await api.post("comment.delete", user=users.carol, id=reply["id"])

    count = await session.scalar(select(func.count(Comment.id)).where(Comment.idea_id == idea["id"]))
    assert count == 1
    assert (await api.get("comment.getById", id=top["id"])).json()["replies"] == []

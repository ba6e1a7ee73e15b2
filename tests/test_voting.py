import asyncio
import random

from sqlalchemy import func, select

from idea_forum.models import Idea, Vote, VoteType
from idea_forum.voting import plan_vote


def test_plan_vote_create():
    plan = plan_vote(None, VoteType.UP)
    assert plan.action == "created"
    assert (plan.upvotes_delta, plan.downvotes_delta) == (1, 0)


def test_plan_vote_same_type_toggles_off():
    plan = plan_vote(VoteType.DOWN, VoteType.DOWN)
    assert plan.action == "removed"
    assert (plan.upvotes_delta, plan.downvotes_delta) == (0, -1)


def test_plan_vote_switch():
    plan = plan_vote(VoteType.UP, VoteType.DOWN)
    assert plan.action == "updated"
    assert (plan.upvotes_delta, plan.downvotes_delta) == (-1, 1)


async def _live_counts(session, idea_id):
    rows = await session.execute(
        select(Vote.type, func.count(Vote.id)).where(Vote.idea_id == idea_id).group_by(Vote.type)
    )
    counts = {t: n for t, n in rows.all()}
    return counts.get(VoteType.UP, 0), counts.get(VoteType.DOWN, 0)


async def test_two_up_votes_then_switch(api, users, make_idea):
    idea = await make_idea(users.alice)

    r1 = await api.post("idea.vote", user=users.bob, idea_id=idea["id"], type="UP")
    r2 = await api.post("idea.vote", user=users.carol, idea_id=idea["id"], type="UP")
    assert r1.json()["action"] == "created"
    assert r2.json() == {"action": "created", "upvotes": 2, "downvotes": 0}

    r3 = await api.post("idea.vote", user=users.bob, idea_id=idea["id"], type="DOWN")
    assert r3.json() == {"action": "updated", "upvotes": 1, "downvotes": 1}

    detail = (await api.get("idea.getById", id=idea["id"])).json()
    assert (detail["upvotes"], detail["downvotes"]) == (1, 1)
    votes = {v["user_id"]: v["type"] for v in detail["votes"]}
    assert votes == {users.bob: "DOWN", users.carol: "UP"}


async def test_same_vote_twice_toggles_off(api, users, make_idea, session):
    idea = await make_idea(users.alice)

    await api.post("idea.vote", user=users.bob, idea_id=idea["id"], type="DOWN")
    resp = await api.post("idea.vote", user=users.bob, idea_id=idea["id"], type="DOWN")

    assert resp.json() == {"action": "removed", "upvotes": 0, "downvotes": 0}
    assert await _live_counts(session, idea["id"]) == (0, 0)


async def test_vote_on_own_idea_forbidden(api, users, make_idea):
    idea = await make_idea(users.alice)
    resp = await api.post("idea.vote", user=users.alice, idea_id=idea["id"], type="UP")
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"


async def test_vote_on_missing_idea(api, users):
    resp = await api.post("idea.vote", user=users.bob, idea_id=999, type="UP")
    assert resp.status_code == 404


async def test_vote_requires_caller(api, users, make_idea):
    idea = await make_idea(users.alice)
    resp = await api.post("idea.vote", idea_id=idea["id"], type="UP")
    assert resp.status_code == 401


async def test_counters_match_live_votes_after_random_sequence(api, users, make_idea, session):
    ideas = [await make_idea(users.admin, title=f"Idea {i}") for i in range(3)]
    voters = [users.alice, users.bob, users.carol]
    rng = random.Random(7)

    for _ in range(60):
        idea = rng.choice(ideas)
        resp = await api.post(
            "idea.vote", user=rng.choice(voters), idea_id=idea["id"], type=rng.choice(["UP", "DOWN"])
        )
        assert resp.status_code == 200

    for idea in ideas:
        row = (
            await session.execute(select(Idea.upvotes, Idea.downvotes).where(Idea.id == idea["id"]))
        ).one()
        assert (row.upvotes, row.downvotes) == await _live_counts(session, idea["id"])
        per_user = await session.execute(
            select(Vote.user_id, func.count(Vote.id)).where(Vote.idea_id == idea["id"]).group_by(Vote.user_id)
        )
        assert all(n == 1 for _, n in per_user.all())


async def test_simultaneous_votes_from_different_users(api, users, make_idea, session):
    idea = await make_idea(users.admin)

    responses = await asyncio.gather(
        *(
            api.post("idea.vote", user=voter, idea_id=idea["id"], type="UP")
            for voter in (users.alice, users.bob, users.carol)
        )
    )

    assert [r.status_code for r in responses] == [200, 200, 200]
    assert {r.json()["action"] for r in responses} == {"created"}
    detail = (await api.get("idea.getById", id=idea["id"])).json()
    assert (detail["upvotes"], detail["downvotes"]) == (3, 0)
    assert len(detail["votes"]) == 3
    assert await _live_counts(session, idea["id"]) == (3, 0)


async def test_simultaneous_duplicate_vote_keeps_counters_consistent(api, users, make_idea, session):
    idea = await make_idea(users.alice)

    responses = await asyncio.gather(
        api.post("idea.vote", user=users.bob, idea_id=idea["id"], type="UP"),
        api.post("idea.vote", user=users.bob, idea_id=idea["id"], type="UP"),
    )

    statuses = sorted(r.status_code for r in responses)
    # either the second insert hits the unique pair, or it ran after the first and toggled it off
    assert statuses in ([200, 409], [200, 200])
    conflicts = [r.json() for r in responses if r.status_code == 409]
    assert all(c["code"] == "CONFLICT" for c in conflicts)

    row = (
        await session.execute(select(Idea.upvotes, Idea.downvotes).where(Idea.id == idea["id"]))
    ).one()
    live = await _live_counts(session, idea["id"])
    assert (row.upvotes, row.downvotes) == live
    assert live in ((1, 0), (0, 0))
    if statuses == [200, 409]:
        assert live == (1, 0)

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from sqlalchemy import Row, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from idea_forum.models import Idea, PostVote, Vote, VoteType


async def get_vote(session: AsyncSession, *, user_id: int, idea_id: int) -> Optional[Vote]:
    stmt = select(Vote).where(Vote.user_id == user_id, Vote.idea_id == idea_id).with_for_update()
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_post_vote(session: AsyncSession, *, user_id: int, post_id: int) -> Optional[PostVote]:
    stmt = select(PostVote).where(PostVote.user_id == user_id, PostVote.post_id == post_id).with_for_update()
    return (await session.execute(stmt)).scalar_one_or_none()


def _live_count(vote_type: VoteType) -> Any:
    return (
        select(func.count(Vote.id))
        .where(Vote.idea_id == Idea.id, Vote.type == vote_type)
        .correlate(Idea)
        .scalar_subquery()
    )


async def find_counter_drift(session: AsyncSession) -> List[Row[Any]]:
    """Ideas whose counters disagree with their live vote rows.

    Rows are ``(id, upvotes, downvotes, live_up, live_down)``.
    """
    live_up = _live_count(VoteType.UP).label("live_up")
    live_down = _live_count(VoteType.DOWN).label("live_down")
    inner = select(Idea.id, Idea.upvotes, Idea.downvotes, live_up, live_down).subquery()
    stmt = (
        select(inner)
        .where(or_(inner.c.upvotes != inner.c.live_up, inner.c.downvotes != inner.c.live_down))
        .order_by(inner.c.id)
    )
    return list((await session.execute(stmt)).all())


async def recount_counters(session: AsyncSession, idea_ids: Sequence[int]) -> int:
    """Rewrite counters from the vote rows; returns the number of ideas touched."""
    if not idea_ids:
        return 0
    res = await session.execute(
        update(Idea)
        .where(Idea.id.in_(list(idea_ids)))
        .values(upvotes=_live_count(VoteType.UP), downvotes=_live_count(VoteType.DOWN))
        .execution_options(synchronize_session=False)
    )
    return int(res.rowcount or 0)

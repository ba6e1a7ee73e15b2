from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy import Row
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from idea_forum.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from idea_forum.models import Idea, IdeaCategory, Interest, Vote, VoteType
from idea_forum.repositories import comments as comments_repo
from idea_forum.repositories import ideas as ideas_repo
from idea_forum.repositories import votes as votes_repo
from idea_forum.schemas import (
    CommentOut,
    IdeaCard,
    IdeaCounts,
    IdeaCreate,
    IdeaDetail,
    IdeaOut,
    IdeaPage,
    IdeaUpdate,
    IdeaVoteResult,
    InterestOut,
    MyInterestOut,
    SuccessResponse,
    UserProfile,
    VoteOut,
)
from idea_forum.voting import plan_vote


logger = logging.getLogger("idea_forum.services.ideas")


def idea_card(row: Row[Any]) -> IdeaCard:
    idea, comments, votes, interests = row
    counts = IdeaCounts(comments=int(comments or 0), votes=int(votes or 0), interests=int(interests or 0))
    return IdeaCard.model_validate(idea).model_copy(update={"counts": counts})


async def _card_or_404(session: AsyncSession, idea_id: int) -> IdeaCard:
    row = await ideas_repo.get_idea_card(session, idea_id)
    if row is None:
        raise NotFoundError("Idea not found")
    return idea_card(row)


async def list_ideas(
    session: AsyncSession,
    *,
    limit: int = 10,
    cursor: Optional[int] = None,
    category: Optional[IdeaCategory] = None,
    wants_team: Optional[bool] = None,
    search: Optional[str] = None,
) -> IdeaPage:
    rows, next_cursor = await ideas_repo.list_ideas(
        session,
        limit=limit,
        cursor=cursor,
        category=category,
        wants_team=wants_team,
        search=search,
    )
    return IdeaPage(items=[idea_card(r) for r in rows], next_cursor=next_cursor)


async def get_idea(session: AsyncSession, idea_id: int) -> IdeaDetail:
    idea = await ideas_repo.get_idea_detail(session, idea_id)
    if idea is None:
        raise NotFoundError("Idea not found")
    threads = await comments_repo.list_threads(session, idea_id)
    interests = await ideas_repo.list_interests_for_idea(session, idea_id)
    return IdeaDetail(
        **IdeaOut.model_validate(idea).model_dump(),
        author=UserProfile.model_validate(idea.author),
        comments=[CommentOut.model_validate(c) for c in threads],
        votes=[VoteOut.model_validate(v) for v in sorted(idea.votes, key=lambda v: v.id)],
        interests=[InterestOut.model_validate(i) for i in interests],
    )


async def create_idea(session: AsyncSession, data: IdeaCreate, *, author_id: int) -> IdeaCard:
    idea = Idea(
        title=data.title,
        description=data.description,
        category=data.category,
        tags=list(data.tags),
        wants_team=data.wants_team,
        needed_skills=list(data.needed_skills),
        upvotes=0,
        downvotes=0,
        author_id=author_id,
    )
    session.add(idea)
    await session.commit()
    logger.info("idea.create", extra={"idea_id": idea.id, "author_id": author_id})
    return await _card_or_404(session, idea.id)


async def update_idea(session: AsyncSession, data: IdeaUpdate, *, user_id: int) -> IdeaCard:
    idea = await ideas_repo.get_idea(session, data.id)
    if idea is None:
        raise NotFoundError("Idea not found")
    if idea.author_id != user_id:
        raise ForbiddenError("You can only edit your own ideas")
    changes = data.model_dump(exclude_unset=True, exclude={"id"})
    cleared = sorted(k for k, v in changes.items() if v is None)
    if cleared:
        raise BadRequestError(f"Cannot clear required fields: {', '.join(cleared)}")
    for key, value in changes.items():
        setattr(idea, key, value)
    await session.commit()
    logger.info("idea.update", extra={"idea_id": idea.id, "fields": sorted(changes)})
    return await _card_or_404(session, idea.id)


async def vote(session: AsyncSession, idea_id: int, vote_type: VoteType, *, user_id: int) -> IdeaVoteResult:
    """Create, switch or toggle off the caller's vote and move the counters with it.

    The vote row change and the counter update share one transaction, and the
    counters move by SQL-side increments so concurrent voters on the same idea
    cannot lose each other's updates.
    """
    author_id = await ideas_repo.get_author_id(session, idea_id)
    if author_id is None:
        raise NotFoundError("Idea not found")
    if author_id == user_id:
        raise ForbiddenError("You cannot vote on your own idea")

    existing = await votes_repo.get_vote(session, user_id=user_id, idea_id=idea_id)
    plan = plan_vote(existing.type if existing is not None else None, vote_type)
    try:
        if existing is None:
            session.add(Vote(type=vote_type, user_id=user_id, idea_id=idea_id))
            await session.flush()
        elif plan.action == "removed":
            await session.delete(existing)
            await session.flush()
        else:
            existing.type = vote_type
            await session.flush()
        await ideas_repo.apply_counter_deltas(
            session, idea_id, upvotes=plan.upvotes_delta, downvotes=plan.downvotes_delta
        )
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.warning("idea.vote:conflict", extra={"idea_id": idea_id, "user_id": user_id})
        raise ConflictError("A vote for this idea is already being recorded")

    upvotes, downvotes = await ideas_repo.get_counters(session, idea_id)
    logger.info(
        f"idea.vote:{plan.action}",
        extra={"idea_id": idea_id, "user_id": user_id, "type": vote_type.value, "upvotes": upvotes, "downvotes": downvotes},
    )
    return IdeaVoteResult(action=plan.action, upvotes=upvotes, downvotes=downvotes)


async def show_interest(
    session: AsyncSession, idea_id: int, *, user_id: int, message: Optional[str] = None
) -> InterestOut:
    author_id = await ideas_repo.get_author_id(session, idea_id)
    if author_id is None:
        raise NotFoundError("Idea not found")
    if author_id == user_id:
        raise ForbiddenError("You cannot show interest in your own idea")
    if await ideas_repo.get_interest(session, user_id=user_id, idea_id=idea_id) is not None:
        raise ConflictError("You have already shown interest in this idea")

    interest = Interest(idea_id=idea_id, user_id=user_id, message=message)
    session.add(interest)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("You have already shown interest in this idea")
    logger.info("idea.interest:created", extra={"idea_id": idea_id, "user_id": user_id})
    return InterestOut.model_validate(await ideas_repo.get_interest_with_user(session, interest.id))


async def remove_interest(session: AsyncSession, idea_id: int, *, user_id: int) -> SuccessResponse:
    interest = await ideas_repo.get_interest(session, user_id=user_id, idea_id=idea_id)
    if interest is None:
        raise NotFoundError("Interest not found")
    await session.delete(interest)
    await session.commit()
    logger.info("idea.interest:removed", extra={"idea_id": idea_id, "user_id": user_id})
    return SuccessResponse()


async def get_interested_users(session: AsyncSession, idea_id: int) -> List[InterestOut]:
    interests = await ideas_repo.list_interests_for_idea(session, idea_id)
    return [InterestOut.model_validate(i) for i in interests]


async def get_my_ideas(session: AsyncSession, *, user_id: int) -> List[IdeaCard]:
    return [idea_card(r) for r in await ideas_repo.list_ideas_by_author(session, user_id)]


async def get_my_interests(session: AsyncSession, *, user_id: int) -> List[MyInterestOut]:
    interests = await ideas_repo.list_interests_for_user(session, user_id)
    cards = await ideas_repo.list_ideas_by_ids(session, {i.idea_id for i in interests})
    return [
        MyInterestOut(id=i.id, message=i.message, created_at=i.created_at, idea=idea_card(cards[i.idea_id]))
        for i in interests
        if i.idea_id in cards
    ]

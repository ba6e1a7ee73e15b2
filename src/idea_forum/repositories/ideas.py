from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import ColumnElement, Row, Select, String, column, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from idea_forum.errors import BadRequestError
from idea_forum.models import Comment, Idea, IdeaCategory, Interest, Vote
from idea_forum.repositories.pagination import at_or_after, split_page


def _count_columns() -> list[Any]:
    comments = (
        select(func.count(Comment.id)).where(Comment.idea_id == Idea.id).correlate(Idea).scalar_subquery()
    )
    votes = select(func.count(Vote.id)).where(Vote.idea_id == Idea.id).correlate(Idea).scalar_subquery()
    interests = (
        select(func.count(Interest.id)).where(Interest.idea_id == Idea.id).correlate(Idea).scalar_subquery()
    )
    return [comments.label("comments_count"), votes.label("votes_count"), interests.label("interests_count")]


def _tag_matches(dialect: str, search: str) -> ColumnElement[bool]:
    """Any single tag of the idea contains ``search``, case-insensitively."""
    elements = func.jsonb_array_elements_text if dialect == "postgresql" else func.json_each
    tag = elements(Idea.tags).table_valued(column("value", String)).alias("tag")
    return select(tag.c.value).where(tag.c.value.icontains(search, autoescape=True)).exists()


def _cards() -> Select[Any]:
    """Ideas with their author and comment/vote/interest counts, newest first."""
    return (
        select(Idea, *_count_columns())
        .options(selectinload(Idea.author))
        .order_by(Idea.created_at.desc(), Idea.id.desc())
        .execution_options(populate_existing=True)
    )


async def get_idea(session: AsyncSession, idea_id: int) -> Optional[Idea]:
    res = await session.execute(select(Idea).where(Idea.id == idea_id))
    return res.scalar_one_or_none()


async def get_author_id(session: AsyncSession, idea_id: int) -> Optional[int]:
    res = await session.execute(select(Idea.author_id).where(Idea.id == idea_id))
    return res.scalar_one_or_none()


async def list_ideas(
    session: AsyncSession,
    *,
    limit: int = 10,
    cursor: Optional[int] = None,
    category: Optional[IdeaCategory] = None,
    wants_team: Optional[bool] = None,
    search: Optional[str] = None,
) -> tuple[List[Row[Any]], Optional[int]]:
    stmt = _cards()
    if category is not None:
        stmt = stmt.where(Idea.category == category)
    if wants_team is not None:
        stmt = stmt.where(Idea.wants_team == wants_team)
    if search:
        stmt = stmt.where(
            or_(
                Idea.title.icontains(search, autoescape=True),
                Idea.description.icontains(search, autoescape=True),
                _tag_matches(session.get_bind().dialect.name, search),
            )
        )
    if cursor is not None:
        anchor = (await session.execute(select(Idea.created_at, Idea.id).where(Idea.id == cursor))).first()
        if anchor is None:
            raise BadRequestError(f"Invalid cursor: {cursor}")
        stmt = stmt.where(at_or_after([Idea.created_at, Idea.id], [anchor.created_at, anchor.id]))
    rows = list((await session.execute(stmt.limit(limit + 1))).all())
    return split_page(rows, limit, key=lambda r: r[0].id)


async def list_ideas_by_author(session: AsyncSession, author_id: int) -> List[Row[Any]]:
    rows = await session.execute(_cards().where(Idea.author_id == author_id))
    return list(rows.all())


async def list_ideas_by_ids(session: AsyncSession, ids: Iterable[int]) -> dict[int, Row[Any]]:
    ids = list(ids)
    if not ids:
        return {}
    rows = await session.execute(_cards().where(Idea.id.in_(ids)))
    return {r[0].id: r for r in rows.all()}


async def get_idea_card(session: AsyncSession, idea_id: int) -> Optional[Row[Any]]:
    res = await session.execute(_cards().where(Idea.id == idea_id))
    return res.first()


async def get_idea_detail(session: AsyncSession, idea_id: int) -> Optional[Idea]:
    stmt = (
        select(Idea)
        .where(Idea.id == idea_id)
        .options(selectinload(Idea.author), selectinload(Idea.votes))
        .execution_options(populate_existing=True)
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def apply_counter_deltas(session: AsyncSession, idea_id: int, *, upvotes: int = 0, downvotes: int = 0) -> None:
    """Move the counters with one ``UPDATE ... SET col = col + delta`` statement."""
    values: dict[str, Any] = {}
    if upvotes:
        values["upvotes"] = Idea.upvotes + upvotes
    if downvotes:
        values["downvotes"] = Idea.downvotes + downvotes
    if not values:
        return
    await session.execute(
        update(Idea)
        .where(Idea.id == idea_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


async def get_counters(session: AsyncSession, idea_id: int) -> tuple[int, int]:
    row = (await session.execute(select(Idea.upvotes, Idea.downvotes).where(Idea.id == idea_id))).one()
    return int(row.upvotes), int(row.downvotes)


async def list_interests_for_idea(session: AsyncSession, idea_id: int) -> Sequence[Interest]:
    stmt = (
        select(Interest)
        .where(Interest.idea_id == idea_id)
        .options(selectinload(Interest.user))
        .order_by(Interest.created_at.desc(), Interest.id.desc())
    )
    return (await session.execute(stmt)).scalars().all()


async def list_interests_for_user(session: AsyncSession, user_id: int) -> Sequence[Interest]:
    stmt = (
        select(Interest)
        .where(Interest.user_id == user_id)
        .order_by(Interest.created_at.desc(), Interest.id.desc())
    )
    return (await session.execute(stmt)).scalars().all()


async def get_interest(session: AsyncSession, *, user_id: int, idea_id: int) -> Optional[Interest]:
    stmt = select(Interest).where(Interest.user_id == user_id, Interest.idea_id == idea_id)
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_interest_with_user(session: AsyncSession, interest_id: int) -> Interest:
    stmt = (
        select(Interest)
        .where(Interest.id == interest_id)
        .options(selectinload(Interest.user))
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one()

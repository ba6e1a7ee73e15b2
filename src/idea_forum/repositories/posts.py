from __future__ import annotations

from typing import Any, List, Optional, Sequence

from sqlalchemy import Row, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from idea_forum.errors import BadRequestError
from idea_forum.models import Post, PostReply, PostVote
from idea_forum.repositories.pagination import at_or_after, split_page


def _count_columns() -> list[Any]:
    replies = (
        select(func.count(PostReply.id)).where(PostReply.post_id == Post.id).correlate(Post).scalar_subquery()
    )
    votes = select(func.count(PostVote.id)).where(PostVote.post_id == Post.id).correlate(Post).scalar_subquery()
    return [replies.label("replies_count"), votes.label("votes_count")]


async def list_posts(
    session: AsyncSession,
    *,
    limit: int = 10,
    cursor: Optional[int] = None,
    category_id: Optional[int] = None,
) -> tuple[List[Row[Any]], Optional[int]]:
    # pinned first, then newest
    order = [Post.is_pinned, Post.created_at, Post.id]
    stmt = (
        select(Post, *_count_columns())
        .options(selectinload(Post.author), selectinload(Post.category))
        .order_by(*(c.desc() for c in order))
    )
    if category_id is not None:
        stmt = stmt.where(Post.category_id == category_id)
    if cursor is not None:
        anchor = (await session.execute(select(*order).where(Post.id == cursor))).first()
        if anchor is None:
            raise BadRequestError(f"Invalid cursor: {cursor}")
        stmt = stmt.where(at_or_after(order, list(anchor)))
    rows = list((await session.execute(stmt.limit(limit + 1))).all())
    return split_page(rows, limit, key=lambda r: r[0].id)


async def get_post(session: AsyncSession, post_id: int) -> Optional[Post]:
    res = await session.execute(select(Post).where(Post.id == post_id))
    return res.scalar_one_or_none()


async def get_post_id_by_slug(session: AsyncSession, slug: str) -> Optional[int]:
    res = await session.execute(select(Post.id).where(Post.slug == slug))
    return res.scalar_one_or_none()


async def get_post_card(session: AsyncSession, post_id: int) -> Optional[Row[Any]]:
    stmt = (
        select(Post, *_count_columns())
        .where(Post.id == post_id)
        .options(selectinload(Post.author), selectinload(Post.category))
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).first()


async def get_post_detail(session: AsyncSession, post_id: int) -> Optional[Post]:
    stmt = (
        select(Post)
        .where(Post.id == post_id)
        .options(selectinload(Post.author), selectinload(Post.category), selectinload(Post.votes))
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def list_reply_threads(session: AsyncSession, post_id: int) -> Sequence[PostReply]:
    stmt = (
        select(PostReply)
        .where(PostReply.post_id == post_id, PostReply.parent_id.is_(None))
        .options(
            selectinload(PostReply.author),
            selectinload(PostReply.children).selectinload(PostReply.author),
        )
        .order_by(PostReply.created_at, PostReply.id)
    )
    return (await session.execute(stmt)).scalars().all()


async def increment_view_count(session: AsyncSession, post_id: int) -> None:
    await session.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(view_count=Post.view_count + 1)
        .execution_options(synchronize_session=False)
    )


async def get_latest_by_author(session: AsyncSession, author_id: int) -> Optional[Post]:
    stmt = (
        select(Post)
        .where(Post.author_id == author_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(1)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def slug_taken(session: AsyncSession, slug: str) -> bool:
    return (await session.execute(select(Post.id).where(Post.slug == slug).limit(1))).first() is not None

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from idea_forum.models import Comment


def _with_replies():
    return (
        selectinload(Comment.author),
        selectinload(Comment.replies).selectinload(Comment.author),
    )


async def get_comment(session: AsyncSession, comment_id: int) -> Optional[Comment]:
    res = await session.execute(select(Comment).where(Comment.id == comment_id))
    return res.scalar_one_or_none()


async def get_thread(session: AsyncSession, comment_id: int) -> Optional[Comment]:
    stmt = (
        select(Comment)
        .where(Comment.id == comment_id)
        .options(*_with_replies())
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def list_threads(session: AsyncSession, idea_id: int) -> Sequence[Comment]:
    """Top-level comments of an idea, oldest first, replies loaded."""
    stmt = (
        select(Comment)
        .where(Comment.idea_id == idea_id, Comment.parent_id.is_(None))
        .options(*_with_replies())
        .order_by(Comment.created_at, Comment.id)
    )
    return (await session.execute(stmt)).scalars().all()


async def delete_thread(session: AsyncSession, comment_id: int) -> int:
    """Delete a comment and its replies in one statement."""
    res = await session.execute(
        delete(Comment)
        .where(or_(Comment.id == comment_id, Comment.parent_id == comment_id))
        .execution_options(synchronize_session=False)
    )
    return int(res.rowcount or 0)

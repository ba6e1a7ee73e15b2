from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import Row, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from idea_forum.models import Category, Post


def _post_count() -> Any:
    return (
        select(func.count(Post.id))
        .where(Post.category_id == Category.id)
        .correlate(Category)
        .scalar_subquery()
        .label("post_count")
    )


async def get_category(session: AsyncSession, category_id: int) -> Optional[Category]:
    res = await session.execute(select(Category).where(Category.id == category_id))
    return res.scalar_one_or_none()


async def list_active(session: AsyncSession) -> List[Row[Any]]:
    stmt = (
        select(Category, _post_count())
        .where(Category.is_active.is_(True))
        .order_by(Category.name, Category.id)
    )
    return list((await session.execute(stmt)).all())


async def list_all(session: AsyncSession) -> List[Row[Any]]:
    stmt = select(Category, _post_count()).order_by(Category.name, Category.id)
    return list((await session.execute(stmt)).all())


async def get_by_slug(session: AsyncSession, slug: str) -> Optional[Row[Any]]:
    stmt = select(Category, _post_count()).where(Category.slug == slug)
    return (await session.execute(stmt)).first()


async def get_with_count(session: AsyncSession, category_id: int) -> Optional[Row[Any]]:
    stmt = (
        select(Category, _post_count())
        .where(Category.id == category_id)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).first()


async def slug_taken(session: AsyncSession, slug: str, *, exclude_id: Optional[int] = None) -> bool:
    stmt = select(Category.id).where(Category.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    return (await session.execute(stmt.limit(1))).first() is not None

from __future__ import annotations

import logging
from typing import Any, List

from sqlalchemy import Row
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from idea_forum.config import get_settings
from idea_forum.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from idea_forum.models import Category, UserRole
from idea_forum.repositories import categories as categories_repo
from idea_forum.repositories.users import get_user
from idea_forum.schemas import CategoryCreate, CategoryOut, CategoryUpdate
from idea_forum.slugs import unique_slug


logger = logging.getLogger("idea_forum.services.categories")


def category_out(row: Row[Any]) -> CategoryOut:
    category, post_count = row
    return CategoryOut.model_validate(category).model_copy(update={"post_count": int(post_count or 0)})


async def _require_admin(session: AsyncSession, user_id: int, verb: str) -> None:
    # role is read from the store, never from the caller's claims
    user = await get_user(session, user_id)
    if user is None or user.role != UserRole.ADMIN:
        raise ForbiddenError(f"Only admins can {verb} categories")


async def _commit_or_conflict(session: AsyncSession, slug: str) -> None:
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(f"Slug already in use: {slug}")


async def list_categories(session: AsyncSession) -> List[CategoryOut]:
    return [category_out(r) for r in await categories_repo.list_active(session)]


async def get_by_slug(session: AsyncSession, slug: str) -> CategoryOut:
    row = await categories_repo.get_by_slug(session, slug)
    if row is None:
        raise NotFoundError("Category not found")
    return category_out(row)


async def create_category(session: AsyncSession, data: CategoryCreate, *, user_id: int) -> CategoryOut:
    await _require_admin(session, user_id, "create")
    slug = await unique_slug(data.name, lambda s: categories_repo.slug_taken(session, s))
    category = Category(
        name=data.name,
        description=data.description,
        slug=slug,
        color=data.color or get_settings().default_category_color,
    )
    session.add(category)
    await _commit_or_conflict(session, slug)
    logger.info("category.create", extra={"category_id": category.id, "slug": slug})
    row = await categories_repo.get_with_count(session, category.id)
    return category_out(row)


async def update_category(session: AsyncSession, data: CategoryUpdate, *, user_id: int) -> CategoryOut:
    await _require_admin(session, user_id, "update")
    category = await categories_repo.get_category(session, data.id)
    if category is None:
        raise NotFoundError("Category not found")
    changes = data.model_dump(exclude_unset=True, exclude={"id"})
    # description is the only nullable column
    cleared = sorted(k for k, v in changes.items() if v is None and k != "description")
    if cleared:
        raise BadRequestError(f"Cannot clear required fields: {', '.join(cleared)}")
    if "name" in changes:
        changes["slug"] = await unique_slug(
            changes["name"], lambda s: categories_repo.slug_taken(session, s, exclude_id=category.id)
        )
    for key, value in changes.items():
        setattr(category, key, value)
    await _commit_or_conflict(session, category.slug)
    logger.info("category.update", extra={"category_id": category.id, "fields": sorted(changes)})
    row = await categories_repo.get_with_count(session, category.id)
    return category_out(row)

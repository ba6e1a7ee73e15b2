from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import Row
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from idea_forum.errors import ConflictError, NotFoundError
from idea_forum.models import Post, PostVote, VoteType
from idea_forum.repositories import categories as categories_repo
from idea_forum.repositories import posts as posts_repo
from idea_forum.repositories import votes as votes_repo
from idea_forum.schemas import (
    AuthorWithRole,
    CategoryBase,
    PostCard,
    PostCounts,
    PostCreate,
    PostDetail,
    PostOut,
    PostPage,
    PostReplyThread,
    PostVoteOut,
    VoteResult,
)
from idea_forum.slugs import unique_slug
from idea_forum.voting import plan_vote


logger = logging.getLogger("idea_forum.services.posts")


def post_card(row: Row[Any]) -> PostCard:
    post, replies, votes = row
    counts = PostCounts(replies=int(replies or 0), votes=int(votes or 0))
    return PostCard.model_validate(post).model_copy(update={"counts": counts})


async def list_posts(
    session: AsyncSession,
    *,
    limit: int = 10,
    cursor: Optional[int] = None,
    category_id: Optional[int] = None,
) -> PostPage:
    rows, next_cursor = await posts_repo.list_posts(session, limit=limit, cursor=cursor, category_id=category_id)
    return PostPage(items=[post_card(r) for r in rows], next_cursor=next_cursor)


async def get_by_slug(session: AsyncSession, slug: str) -> PostDetail:
    """Load a post by slug and count the read.

    Every read increments ``view_count``; repeated reads by the same viewer
    all count.
    """
    post_id = await posts_repo.get_post_id_by_slug(session, slug)
    if post_id is None:
        raise NotFoundError("Post not found")
    await posts_repo.increment_view_count(session, post_id)
    await session.commit()

    post = await posts_repo.get_post_detail(session, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    threads = await posts_repo.list_reply_threads(session, post_id)
    return PostDetail(
        **PostOut.model_validate(post).model_dump(),
        author=AuthorWithRole.model_validate(post.author),
        category=CategoryBase.model_validate(post.category),
        replies=[PostReplyThread.model_validate(r) for r in threads],
        votes=[PostVoteOut.model_validate(v) for v in sorted(post.votes, key=lambda v: v.id)],
    )


async def create_post(session: AsyncSession, data: PostCreate, *, author_id: int) -> PostCard:
    if await categories_repo.get_category(session, data.category_id) is None:
        raise NotFoundError("Category not found")
    slug = await unique_slug(data.title, lambda s: posts_repo.slug_taken(session, s))
    post = Post(
        title=data.title,
        content=data.content,
        slug=slug,
        category_id=data.category_id,
        author_id=author_id,
    )
    session.add(post)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(f"Slug already in use: {slug}")
    logger.info("post.create", extra={"post_id": post.id, "slug": slug, "author_id": author_id})
    row = await posts_repo.get_post_card(session, post.id)
    return post_card(row)


async def vote(session: AsyncSession, post_id: int, vote_type: VoteType, *, user_id: int) -> VoteResult:
    # posts keep no counters; totals are counted from post_votes
    if await posts_repo.get_post(session, post_id) is None:
        raise NotFoundError("Post not found")
    existing = await votes_repo.get_post_vote(session, user_id=user_id, post_id=post_id)
    plan = plan_vote(existing.type if existing is not None else None, vote_type)
    try:
        if existing is None:
            session.add(PostVote(type=vote_type, post_id=post_id, user_id=user_id))
        elif plan.action == "removed":
            await session.delete(existing)
        else:
            existing.type = vote_type
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("A vote for this post is already being recorded")
    logger.info(f"post.vote:{plan.action}", extra={"post_id": post_id, "user_id": user_id})
    return VoteResult(action=plan.action)


async def get_latest(session: AsyncSession, *, user_id: int) -> Optional[PostOut]:
    post = await posts_repo.get_latest_by_author(session, user_id)
    return PostOut.model_validate(post) if post is not None else None

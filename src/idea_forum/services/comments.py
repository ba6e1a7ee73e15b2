from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from idea_forum.errors import BadRequestError, ForbiddenError, NotFoundError
from idea_forum.models import Comment
from idea_forum.repositories import comments as comments_repo
from idea_forum.repositories import ideas as ideas_repo
from idea_forum.schemas import CommentOut, SuccessResponse


logger = logging.getLogger("idea_forum.services.comments")


async def _thread_or_404(session: AsyncSession, comment_id: int) -> CommentOut:
    comment = await comments_repo.get_thread(session, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return CommentOut.model_validate(comment)


async def _owned_comment(session: AsyncSession, comment_id: int, user_id: int, verb: str) -> Comment:
    comment = await comments_repo.get_comment(session, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    if comment.author_id != user_id:
        raise ForbiddenError(f"You can only {verb} your own comments")
    return comment


async def get_by_idea(session: AsyncSession, idea_id: int) -> List[CommentOut]:
    return [CommentOut.model_validate(c) for c in await comments_repo.list_threads(session, idea_id)]


async def get_comment(session: AsyncSession, comment_id: int) -> CommentOut:
    return await _thread_or_404(session, comment_id)


async def create_comment(
    session: AsyncSession,
    idea_id: int,
    content: str,
    *,
    author_id: int,
    parent_id: Optional[int] = None,
) -> CommentOut:
    if await ideas_repo.get_author_id(session, idea_id) is None:
        raise NotFoundError("Idea not found")
    if parent_id is not None:
        parent = await comments_repo.get_comment(session, parent_id)
        if parent is None:
            raise NotFoundError("Parent comment not found")
        if parent.idea_id != idea_id:
            raise BadRequestError("Parent comment does not belong to this idea")
        if parent.parent_id is not None:
            raise BadRequestError("Replies cannot be replied to")

    comment = Comment(idea_id=idea_id, content=content, author_id=author_id, parent_id=parent_id)
    session.add(comment)
    await session.commit()
    logger.info(
        "comment.create",
        extra={"comment_id": comment.id, "idea_id": idea_id, "parent_id": parent_id, "author_id": author_id},
    )
    return await _thread_or_404(session, comment.id)


async def update_comment(session: AsyncSession, comment_id: int, content: str, *, user_id: int) -> CommentOut:
    comment = await _owned_comment(session, comment_id, user_id, "edit")
    comment.content = content
    await session.commit()
    return await _thread_or_404(session, comment.id)


async def delete_comment(session: AsyncSession, comment_id: int, *, user_id: int) -> SuccessResponse:
    await _owned_comment(session, comment_id, user_id, "delete")
    deleted = await comments_repo.delete_thread(session, comment_id)
    await session.commit()
    logger.info("comment.delete", extra={"comment_id": comment_id, "deleted": deleted})
    return SuccessResponse()

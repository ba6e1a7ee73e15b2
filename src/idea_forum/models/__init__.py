from idea_forum.models.base import Base
from idea_forum.models.models import (
    Category,
    Comment,
    Idea,
    IdeaCategory,
    Interest,
    Post,
    PostReply,
    PostVote,
    User,
    UserRole,
    Vote,
    VoteType,
)

__all__ = [
    "Base",
    "Category",
    "Comment",
    "Idea",
    "IdeaCategory",
    "Interest",
    "Post",
    "PostReply",
    "PostVote",
    "User",
    "UserRole",
    "Vote",
    "VoteType",
]

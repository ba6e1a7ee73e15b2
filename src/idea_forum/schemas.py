"""Request and response bodies of the HTTP API.

Response models read ORM objects (``from_attributes``). Only relationships
that were eagerly loaded may be declared on them.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from idea_forum.models import IdeaCategory, UserRole, VoteType


HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Users


class UserSummary(OrmModel):
    id: int
    name: Optional[str] = None
    username: Optional[str] = None
    image: Optional[str] = None


class UserProfile(UserSummary):
    skills: List[str] = []
    bio: Optional[str] = None


class AuthorWithRole(UserSummary):
    role: UserRole


# Ideas


class IdeaCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    category: IdeaCategory
    tags: List[str] = []
    wants_team: bool = False
    needed_skills: List[str] = []


class IdeaUpdate(BaseModel):
    id: int
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[IdeaCategory] = None
    tags: Optional[List[str]] = None
    wants_team: Optional[bool] = None
    needed_skills: Optional[List[str]] = None


class IdeaVoteRequest(BaseModel):
    idea_id: int
    type: VoteType


class InterestCreate(BaseModel):
    idea_id: int
    message: Optional[str] = None


class InterestRemove(BaseModel):
    idea_id: int


class IdeaCounts(BaseModel):
    comments: int = 0
    votes: int = 0
    interests: int = 0


class IdeaOut(OrmModel):
    id: int
    title: str
    description: str
    category: IdeaCategory
    tags: List[str]
    upvotes: int
    downvotes: int
    wants_team: bool
    needed_skills: List[str]
    author_id: int
    created_at: datetime
    updated_at: datetime


class IdeaCard(IdeaOut):
    author: UserProfile
    counts: IdeaCounts = IdeaCounts()


class IdeaPage(BaseModel):
    items: List[IdeaCard]
    next_cursor: Optional[int] = None


class VoteOut(OrmModel):
    id: int
    user_id: int
    type: VoteType


class VoteResult(BaseModel):
    action: Literal["created", "removed", "updated"]


class IdeaVoteResult(VoteResult):
    upvotes: int
    downvotes: int


class InterestOut(OrmModel):
    id: int
    idea_id: int
    user_id: int
    message: Optional[str] = None
    created_at: datetime
    user: UserProfile


class MyInterestOut(BaseModel):
    id: int
    message: Optional[str] = None
    created_at: datetime
    idea: IdeaCard


# Comments


class CommentCreate(BaseModel):
    idea_id: int
    content: str = Field(min_length=1)
    parent_id: Optional[int] = None


class CommentUpdate(BaseModel):
    id: int
    content: str = Field(min_length=1)


class CommentDelete(BaseModel):
    id: int


class ReplyOut(OrmModel):
    id: int
    content: str
    idea_id: int
    author_id: int
    parent_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    author: UserSummary


class CommentOut(ReplyOut):
    replies: List[ReplyOut] = []


class IdeaDetail(IdeaOut):
    author: UserProfile
    comments: List[CommentOut] = []
    votes: List[VoteOut] = []
    interests: List[InterestOut] = []


class SuccessResponse(BaseModel):
    success: bool = True


# Categories


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)


class CategoryUpdate(BaseModel):
    id: int
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    is_active: Optional[bool] = None


class CategorySummary(OrmModel):
    id: int
    name: str
    slug: str
    color: str


class CategoryBase(CategorySummary):
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CategoryOut(CategoryBase):
    post_count: int = 0


# Posts


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    category_id: int


class PostVoteRequest(BaseModel):
    post_id: int
    type: VoteType


class PostCounts(BaseModel):
    replies: int = 0
    votes: int = 0


class PostOut(OrmModel):
    id: int
    title: str
    content: str
    slug: str
    is_pinned: bool
    view_count: int
    category_id: int
    author_id: int
    created_at: datetime
    updated_at: datetime


class PostCard(PostOut):
    author: UserSummary
    category: CategorySummary
    counts: PostCounts = PostCounts()


class PostPage(BaseModel):
    items: List[PostCard]
    next_cursor: Optional[int] = None


class PostReplyOut(OrmModel):
    id: int
    content: str
    post_id: int
    author_id: int
    parent_id: Optional[int] = None
    created_at: datetime
    author: AuthorWithRole


class PostReplyThread(PostReplyOut):
    children: List[PostReplyOut] = []


class PostVoteOut(OrmModel):
    id: int
    user_id: int
    type: VoteType


class PostDetail(PostOut):
    author: AuthorWithRole
    category: CategoryBase
    replies: List[PostReplyThread] = []
    votes: List[PostVoteOut] = []

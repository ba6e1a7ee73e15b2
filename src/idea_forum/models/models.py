from __future__ import annotations

import enum
from typing import Optional

from sqlalchemy import Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from idea_forum.models.base import Base, CreatedAtMixin, JsonList, TimestampMixin


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class IdeaCategory(str, enum.Enum):
    SAAS = "SAAS"
    MOBILE_APP = "MOBILE_APP"
    WEB_APP = "WEB_APP"
    HARDWARE = "HARDWARE"
    SERVICE = "SERVICE"
    OTHER = "OTHER"


class VoteType(str, enum.Enum):
    UP = "UP"
    DOWN = "DOWN"


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[Optional[str]] = mapped_column(String(200))
    username: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), unique=True)
    image: Mapped[Optional[str]] = mapped_column(Text)
    bio: Mapped[Optional[str]] = mapped_column(Text)
    skills: Mapped[list[str]] = mapped_column(JsonList, default=list, nullable=False)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole, name="user_role"), default=UserRole.USER, nullable=False)


# Idea platform


class Idea(TimestampMixin, Base):
    __tablename__ = "ideas"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[IdeaCategory] = mapped_column(Enum(IdeaCategory, name="idea_category"), index=True)
    tags: Mapped[list[str]] = mapped_column(JsonList, default=list, nullable=False)
    upvotes: Mapped[int] = mapped_column(default=0, server_default="0", nullable=False)
    downvotes: Mapped[int] = mapped_column(default=0, server_default="0", nullable=False)
    wants_team: Mapped[bool] = mapped_column(default=False, nullable=False, index=True)
    needed_skills: Mapped[list[str]] = mapped_column(JsonList, default=list, nullable=False)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    author: Mapped["User"] = relationship()
    comments: Mapped[list["Comment"]] = relationship(back_populates="idea", cascade="all, delete-orphan")
    votes: Mapped[list["Vote"]] = relationship(back_populates="idea", cascade="all, delete-orphan")
    interests: Mapped[list["Interest"]] = relationship(back_populates="idea", cascade="all, delete-orphan")


class Vote(CreatedAtMixin, Base):
    __tablename__ = "votes"
    __table_args__ = (UniqueConstraint("user_id", "idea_id", name="uq_votes_user_idea"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    type: Mapped[VoteType] = mapped_column(Enum(VoteType, name="vote_type"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    idea_id: Mapped[int] = mapped_column(ForeignKey("ideas.id", ondelete="CASCADE"), index=True)

    idea: Mapped["Idea"] = relationship(back_populates="votes")


class Interest(CreatedAtMixin, Base):
    __tablename__ = "interests"
    __table_args__ = (UniqueConstraint("user_id", "idea_id", name="uq_interests_user_idea"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    message: Mapped[Optional[str]] = mapped_column(Text)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    idea_id: Mapped[int] = mapped_column(ForeignKey("ideas.id", ondelete="CASCADE"), index=True)

    user: Mapped["User"] = relationship()
    idea: Mapped["Idea"] = relationship(back_populates="interests")


class Comment(TimestampMixin, Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    idea_id: Mapped[int] = mapped_column(ForeignKey("ideas.id", ondelete="CASCADE"), index=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    # replies point at a top-level comment; replies never have replies
    parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("comments.id", ondelete="CASCADE"), index=True)

    author: Mapped["User"] = relationship()
    idea: Mapped["Idea"] = relationship(back_populates="comments")
    parent: Mapped[Optional["Comment"]] = relationship(back_populates="replies", remote_side="Comment.id")
    replies: Mapped[list["Comment"]] = relationship(
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by=lambda: (Comment.created_at, Comment.id),
    )


# Legacy forum


class Category(TimestampMixin, Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    color: Mapped[str] = mapped_column(String(7), default="#3b82f6", nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    posts: Mapped[list["Post"]] = relationship(back_populates="category")


class Post(TimestampMixin, Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    is_pinned: Mapped[bool] = mapped_column(default=False, nullable=False)
    view_count: Mapped[int] = mapped_column(default=0, server_default="0", nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"), index=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    author: Mapped["User"] = relationship()
    category: Mapped["Category"] = relationship(back_populates="posts")
    replies: Mapped[list["PostReply"]] = relationship(back_populates="post", cascade="all, delete-orphan")
    votes: Mapped[list["PostVote"]] = relationship(back_populates="post", cascade="all, delete-orphan")


class PostReply(CreatedAtMixin, Base):
    __tablename__ = "post_replies"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id", ondelete="CASCADE"), index=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("post_replies.id", ondelete="CASCADE"), index=True)

    author: Mapped["User"] = relationship()
    post: Mapped["Post"] = relationship(back_populates="replies")
    parent: Mapped[Optional["PostReply"]] = relationship(back_populates="children", remote_side="PostReply.id")
    children: Mapped[list["PostReply"]] = relationship(
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by=lambda: (PostReply.created_at, PostReply.id),
    )


class PostVote(CreatedAtMixin, Base):
    __tablename__ = "post_votes"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_votes_post_user"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    type: Mapped[VoteType] = mapped_column(Enum(VoteType, name="vote_type"), nullable=False)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    post: Mapped["Post"] = relationship(back_populates="votes")

"""init forum schema

Revision ID: init_0001
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "init_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role = postgresql.ENUM("USER", "ADMIN", name="user_role", create_type=False)
idea_category = postgresql.ENUM(
    "SAAS", "MOBILE_APP", "WEB_APP", "HARDWARE", "SERVICE", "OTHER", name="idea_category", create_type=False
)
vote_type = postgresql.ENUM("UP", "DOWN", name="vote_type", create_type=False)


def _timestamps(updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False)]
    if updated:
        cols.append(
            sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False)
        )
    return cols


def upgrade() -> None:
    bind = op.get_bind()
    for enum in (user_role, idea_category, vote_type):
        enum.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("username", sa.String(length=64), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("skills", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default="[]"),
        sa.Column("role", user_role, nullable=False, server_default="USER"),
        *_timestamps(),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "ideas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", idea_category, nullable=False),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default="[]"),
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wants_team", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("needed_skills", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default="[]"),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_ideas_category", "ideas", ["category"], unique=False)
    op.create_index("ix_ideas_wants_team", "ideas", ["wants_team"], unique=False)
    op.create_index("ix_ideas_author_id", "ideas", ["author_id"], unique=False)
    op.create_index("ix_ideas_created_at_id", "ideas", ["created_at", "id"], unique=False)

    op.create_table(
        "votes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", vote_type, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("idea_id", sa.Integer(), sa.ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("user_id", "idea_id", name="uq_votes_user_idea"),
    )
    op.create_index("ix_votes_user_id", "votes", ["user_id"], unique=False)
    op.create_index("ix_votes_idea_id", "votes", ["idea_id"], unique=False)

    op.create_table(
        "interests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("idea_id", sa.Integer(), sa.ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("user_id", "idea_id", name="uq_interests_user_idea"),
    )
    op.create_index("ix_interests_user_id", "interests", ["user_id"], unique=False)
    op.create_index("ix_interests_idea_id", "interests", ["idea_id"], unique=False)

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("idea_id", sa.Integer(), sa.ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("parent_id", sa.Integer(), sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_comments_idea_id", "comments", ["idea_id"], unique=False)
    op.create_index("ix_comments_author_id", "comments", ["author_id"], unique=False)
    op.create_index("ix_comments_parent_id", "comments", ["parent_id"], unique=False)

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(length=7), nullable=False, server_default="#3b82f6"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="uq_categories_slug"),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("slug", sa.String(length=64), nullable=False),
        sa.Column("is_pinned", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="uq_posts_slug"),
    )
    op.create_index("ix_posts_category_id", "posts", ["category_id"], unique=False)
    op.create_index("ix_posts_author_id", "posts", ["author_id"], unique=False)

    op.create_table(
        "post_replies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("parent_id", sa.Integer(), sa.ForeignKey("post_replies.id", ondelete="CASCADE"), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_post_replies_post_id", "post_replies", ["post_id"], unique=False)
    op.create_index("ix_post_replies_author_id", "post_replies", ["author_id"], unique=False)
    op.create_index("ix_post_replies_parent_id", "post_replies", ["parent_id"], unique=False)

    op.create_table(
        "post_votes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", vote_type, nullable=False),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("post_id", "user_id", name="uq_post_votes_post_user"),
    )
    op.create_index("ix_post_votes_post_id", "post_votes", ["post_id"], unique=False)
    op.create_index("ix_post_votes_user_id", "post_votes", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_table("post_votes")
    op.drop_table("post_replies")
    op.drop_index("ix_posts_author_id", table_name="posts")
    op.drop_index("ix_posts_category_id", table_name="posts")
    op.drop_table("posts")
    op.drop_table("categories")
    op.drop_table("comments")
    op.drop_table("interests")
    op.drop_table("votes")
    op.drop_index("ix_ideas_created_at_id", table_name="ideas")
    op.drop_index("ix_ideas_author_id", table_name="ideas")
    op.drop_index("ix_ideas_wants_team", table_name="ideas")
    op.drop_index("ix_ideas_category", table_name="ideas")
    op.drop_table("ideas")
    op.drop_table("users")

    bind = op.get_bind()
    for enum in (vote_type, idea_category, user_role):
        enum.drop(bind, checkfirst=True)

"""Initial schema for Level

Revision ID: 20261017_000000
Revises: None
Create Date: 2026-10-17 00:00:00.000000

Creates every table of the Level server:
- Accounts and spaces (users, spaces, space_users, open_invitations)
- Groups (groups, group_users, group_bookmarks)
- Posts and replies with inbox state, logs, views and reactions
- Mentions, notifications, nudges and digests

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261017_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), nullable=False)


def _fk(name: str, target: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.String(36), sa.ForeignKey(f"{target}.id"), nullable=nullable)


def _timestamps() -> list:
    return [
        sa.Column("inserted_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""

    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("hashed_password", sa.String(128), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("handle", sa.String(20), nullable=False),
        sa.Column("time_zone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("state", sa.String(16), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
        sa.Column("last_seen_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_users_email", "email", unique=True),
        sa.Index("ix_users_handle", "handle", unique=True),
    )

    op.create_table(
        "spaces",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(50), nullable=False),
        sa.Column("state", sa.String(16), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_spaces_slug", "slug", unique=True),
    )

    op.create_table(
        "space_users",
        _id(),
        _fk("space_id", "spaces"),
        _fk("user_id", "users"),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("state", sa.String(16), nullable=False, server_default="ACTIVE"),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("handle", sa.String(20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("space_id", "user_id", name="uq_space_users_space_id_user_id"),
        sa.Index("ix_space_users_space_id", "space_id"),
        sa.Index("ix_space_users_user_id", "user_id"),
        sa.Index("ix_space_users_handle", "handle"),
    )

    op.create_table(
        "open_invitations",
        _id(),
        _fk("space_id", "spaces"),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("state", sa.String(16), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_open_invitations_space_id", "space_id"),
        sa.Index("ix_open_invitations_token", "token", unique=True),
    )

    op.create_table(
        "groups",
        _id(),
        _fk("space_id", "spaces"),
        _fk("creator_id", "space_users"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("state", sa.String(16), nullable=False, server_default="OPEN"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("space_id", "name", name="uq_groups_space_id_name"),
        sa.Index("ix_groups_space_id", "space_id"),
    )

    op.create_table(
        "group_users",
        _id(),
        _fk("space_id", "spaces"),
        _fk("group_id", "groups"),
        _fk("space_user_id", "space_users"),
        sa.Column("role", sa.String(16), nullable=False, server_default="MEMBER"),
        sa.Column("is_watching", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("inserted_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "space_user_id", name="uq_group_users_group_id_space_user_id"),
        sa.Index("ix_group_users_space_id", "space_id"),
        sa.Index("ix_group_users_group_id", "group_id"),
        sa.Index("ix_group_users_space_user_id", "space_user_id"),
    )

    op.create_table(
        "group_bookmarks",
        _id(),
        _fk("space_id", "spaces"),
        _fk("group_id", "groups"),
        _fk("space_user_id", "space_users"),
        sa.Column("inserted_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "space_user_id", name="uq_group_bookmarks_group_id_space_user_id"),
        sa.Index("ix_group_bookmarks_space_id", "space_id"),
        sa.Index("ix_group_bookmarks_group_id", "group_id"),
        sa.Index("ix_group_bookmarks_space_user_id", "space_user_id"),
    )

    op.create_table(
        "posts",
        _id(),
        _fk("space_id", "spaces"),
        _fk("space_user_id", "space_users"),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("state", sa.String(16), nullable=False, server_default="OPEN"),
        *_timestamps(),
        sa.Column("last_activity_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_posts_space_id", "space_id"),
        sa.Index("ix_posts_space_user_id", "space_user_id"),
        sa.Index("ix_posts_inserted_at", "inserted_at"),
        sa.Index("ix_posts_last_activity_at", "last_activity_at"),
    )

    op.create_table(
        "post_groups",
        _id(),
        _fk("space_id", "spaces"),
        _fk("post_id", "posts"),
        _fk("group_id", "groups"),
        sa.Column("inserted_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("post_id", "group_id", name="uq_post_groups_post_id_group_id"),
        sa.Index("ix_post_groups_space_id", "space_id"),
        sa.Index("ix_post_groups_post_id", "post_id"),
        sa.Index("ix_post_groups_group_id", "group_id"),
    )

    op.create_table(
        "replies",
        _id(),
        _fk("space_id", "spaces"),
        _fk("post_id", "posts"),
        _fk("space_user_id", "space_users"),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_replies_space_id", "space_id"),
        sa.Index("ix_replies_post_id", "post_id"),
        sa.Index("ix_replies_space_user_id", "space_user_id"),
        sa.Index("ix_replies_inserted_at", "inserted_at"),
    )

    op.create_table(
        "post_users",
        _id(),
        _fk("space_id", "spaces"),
        _fk("post_id", "posts"),
        _fk("space_user_id", "space_users"),
        sa.Column("subscription_state", sa.String(16), nullable=False, server_default="NOT_SUBSCRIBED"),
        sa.Column("inbox_state", sa.String(16), nullable=False, server_default="EXCLUDED"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("post_id", "space_user_id", name="uq_post_users_post_id_space_user_id"),
        sa.Index("ix_post_users_space_id", "space_id"),
        sa.Index("ix_post_users_post_id", "post_id"),
        sa.Index("ix_post_users_space_user_id", "space_user_id"),
        sa.Index("ix_post_users_inbox_state", "inbox_state"),
    )

    op.create_table(
        "post_logs",
        _id(),
        _fk("space_id", "spaces"),
        _fk("post_id", "posts"),
        _fk("group_id", "groups", nullable=True),
        _fk("reply_id", "replies", nullable=True),
        _fk("actor_id", "space_users"),
        sa.Column("event", sa.String(32), nullable=False),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_post_logs_space_id", "space_id"),
        sa.Index("ix_post_logs_post_id", "post_id"),
        sa.Index("ix_post_logs_occurred_at", "occurred_at"),
    )

    op.create_table(
        "reply_views",
        _id(),
        _fk("space_id", "spaces"),
        _fk("post_id", "posts"),
        _fk("reply_id", "replies"),
        _fk("space_user_id", "space_users"),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_reply_views_space_id", "space_id"),
        sa.Index("ix_reply_views_post_id", "post_id"),
        sa.Index("ix_reply_views_reply_id", "reply_id"),
        sa.Index("ix_reply_views_space_user_id", "space_user_id"),
    )

    op.create_table(
        "post_reactions",
        _id(),
        _fk("space_id", "spaces"),
        _fk("post_id", "posts"),
        _fk("space_user_id", "space_users"),
        sa.Column("value", sa.String(16), nullable=False),
        sa.Column("inserted_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "post_id", "space_user_id", "value", name="uq_post_reactions_post_id_space_user_id_value"
        ),
        sa.Index("ix_post_reactions_space_id", "space_id"),
        sa.Index("ix_post_reactions_post_id", "post_id"),
        sa.Index("ix_post_reactions_space_user_id", "space_user_id"),
    )

    op.create_table(
        "reply_reactions",
        _id(),
        _fk("space_id", "spaces"),
        _fk("post_id", "posts"),
        _fk("reply_id", "replies"),
        _fk("space_user_id", "space_users"),
        sa.Column("value", sa.String(16), nullable=False),
        sa.Column("inserted_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "reply_id", "space_user_id", "value", name="uq_reply_reactions_reply_id_space_user_id_value"
        ),
        sa.Index("ix_reply_reactions_space_id", "space_id"),
        sa.Index("ix_reply_reactions_post_id", "post_id"),
        sa.Index("ix_reply_reactions_reply_id", "reply_id"),
        sa.Index("ix_reply_reactions_space_user_id", "space_user_id"),
    )

    op.create_table(
        "user_mentions",
        _id(),
        _fk("space_id", "spaces"),
        _fk("post_id", "posts"),
        _fk("reply_id", "replies", nullable=True),
        _fk("mentioner_id", "space_users"),
        _fk("mentioned_id", "space_users"),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.Column("dismissed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_user_mentions_space_id", "space_id"),
        sa.Index("ix_user_mentions_post_id", "post_id"),
        sa.Index("ix_user_mentions_mentioned_id", "mentioned_id"),
    )

    op.create_table(
        "notifications",
        _id(),
        _fk("space_id", "spaces"),
        _fk("space_user_id", "space_users"),
        sa.Column("topic", sa.String(64), nullable=False),
        sa.Column("event", sa.String(32), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("state", sa.String(16), nullable=False, server_default="UNDISMISSED"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_notifications_space_id", "space_id"),
        sa.Index("ix_notifications_space_user_id", "space_user_id"),
        sa.Index("ix_notifications_topic", "topic"),
        sa.Index("ix_notifications_state", "state"),
        sa.Index("ix_notifications_inserted_at", "inserted_at"),
    )

    op.create_table(
        "nudges",
        _id(),
        _fk("space_id", "spaces"),
        _fk("space_user_id", "space_users"),
        sa.Column("minute", sa.Integer(), nullable=False),
        sa.Column("inserted_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("space_user_id", "minute", name="uq_nudges_space_user_id_minute"),
        sa.CheckConstraint("minute >= 0 AND minute <= 1439", name="ck_nudges_minute_range"),
        sa.Index("ix_nudges_space_id", "space_id"),
        sa.Index("ix_nudges_space_user_id", "space_user_id"),
    )

    op.create_table(
        "digests",
        _id(),
        _fk("space_id", "spaces"),
        _fk("space_user_id", "space_users"),
        sa.Column("key", sa.String(128), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("time_zone", sa.String(64), nullable=False),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("end_at", sa.DateTime(), nullable=False),
        sa.Column("inserted_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("space_user_id", "key", name="uq_digests_space_user_id_key"),
        sa.Index("ix_digests_space_id", "space_id"),
        sa.Index("ix_digests_space_user_id", "space_user_id"),
    )

    op.create_table(
        "digest_sections",
        _id(),
        _fk("digest_id", "digests"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("link_text", sa.String(255), nullable=True),
        sa.Column("link_url", sa.String(255), nullable=True),
        sa.Column("rank", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_digest_sections_digest_id", "digest_id"),
    )

    op.create_table(
        "digest_posts",
        _id(),
        _fk("digest_id", "digests"),
        _fk("section_id", "digest_sections"),
        _fk("post_id", "posts"),
        sa.Column("rank", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_digest_posts_digest_id", "digest_id"),
        sa.Index("ix_digest_posts_section_id", "section_id"),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        "digest_posts",
        "digest_sections",
        "digests",
        "nudges",
        "notifications",
        "user_mentions",
        "reply_reactions",
        "post_reactions",
        "reply_views",
        "post_logs",
        "post_users",
        "replies",
        "post_groups",
        "posts",
        "group_bookmarks",
        "group_users",
        "groups",
        "open_invitations",
        "space_users",
        "spaces",
        "users",
    ):
        op.drop_table(table)

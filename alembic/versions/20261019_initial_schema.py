"""initial schema

Revision ID: 20261019_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20261019_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

app_role = postgresql.ENUM("SUPERADMIN", "EDITOR", "VIEWER", name="app_role", create_type=False)


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    ]


def _uuid_pk() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False, primary_key=True)


def upgrade() -> None:
    app_role.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=150), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("last_sign_in_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_roles",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", app_role, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"], unique=True)

    op.create_table(
        "page",
        _uuid_pk(),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("title", postgresql.JSONB(), nullable=False),
        sa.Column("excerpt", postgresql.JSONB(), nullable=True),
        sa.Column("body", postgresql.JSONB(), nullable=True),
        sa.Column("seo_title", postgresql.JSONB(), nullable=True),
        sa.Column("seo_desc", postgresql.JSONB(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_page_slug", "page", ["slug"], unique=True)
    op.create_index("ix_page_status", "page", ["status"], unique=False)

    op.create_table(
        "block",
        _uuid_pk(),
        sa.Column("page_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("page.id", ondelete="CASCADE"), nullable=True),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("title", postgresql.JSONB(), nullable=True),
        sa.Column("content", postgresql.JSONB(), nullable=True),
        sa.Column("media", postgresql.JSONB(), nullable=True),
        sa.Column("sort", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_block_page_sort", "block", ["page_id", "sort"], unique=False)

    op.create_table(
        "program",
        _uuid_pk(),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("title", postgresql.JSONB(), nullable=False),
        sa.Column("summary", postgresql.JSONB(), nullable=True),
        sa.Column("body", postgresql.JSONB(), nullable=True),
        sa.Column("cover_url", sa.Text(), nullable=True),
        sa.Column("icon", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_program_slug", "program", ["slug"], unique=True)
    op.create_index("ix_program_status", "program", ["status"], unique=False)

    op.create_table(
        "event",
        _uuid_pk(),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("title", postgresql.JSONB(), nullable=False),
        sa.Column("summary", postgresql.JSONB(), nullable=True),
        sa.Column("body", postgresql.JSONB(), nullable=True),
        sa.Column("venue", postgresql.JSONB(), nullable=True),
        sa.Column("city", postgresql.JSONB(), nullable=True),
        sa.Column("cover_url", sa.Text(), nullable=True),
        sa.Column("gallery", postgresql.JSONB(), nullable=True),
        sa.Column("external_url", sa.Text(), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_event_slug", "event", ["slug"], unique=True)
    op.create_index("ix_event_status", "event", ["status"], unique=False)
    op.create_index("ix_event_start_at", "event", ["start_at"], unique=False)

    op.create_table(
        "post",
        _uuid_pk(),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("title", postgresql.JSONB(), nullable=False),
        sa.Column("excerpt", postgresql.JSONB(), nullable=True),
        sa.Column("body", postgresql.JSONB(), nullable=True),
        sa.Column("cover_url", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_post_slug", "post", ["slug"], unique=True)
    op.create_index("ix_post_status", "post", ["status"], unique=False)
    op.create_index("ix_post_published_at", "post", ["published_at"], unique=False)

    op.create_table(
        "kpi",
        _uuid_pk(),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value_int", sa.Integer(), nullable=True),
        sa.Column("value_dec", sa.Numeric(14, 2), nullable=True),
        sa.Column("value_text", postgresql.JSONB(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_kpi_key", "kpi", ["key"], unique=False)

    op.create_table(
        "video",
        _uuid_pk(),
        sa.Column("youtube_id", sa.String(length=32), nullable=False),
        sa.Column("title", postgresql.JSONB(), nullable=False),
        sa.Column("description", postgresql.JSONB(), nullable=True),
        sa.Column("channel", postgresql.JSONB(), nullable=True),
        sa.Column("tags", postgresql.JSONB(), nullable=True),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("sort", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_video_status", "video", ["status"], unique=False)

    op.create_table(
        "partner",
        _uuid_pk(),
        sa.Column("name", postgresql.JSONB(), nullable=False),
        sa.Column("logo_url", sa.Text(), nullable=True),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("sort", sa.Integer(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "settings",
        _uuid_pk(),
        sa.Column("org_name", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("address", postgresql.JSONB(), nullable=True),
        sa.Column("emails", postgresql.JSONB(), nullable=True),
        sa.Column("socials", postgresql.JSONB(), nullable=True),
        sa.Column("default_meta_title", postgresql.JSONB(), nullable=True),
        sa.Column("default_meta_desc", postgresql.JSONB(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "submission",
        _uuid_pk(),
        sa.Column("form_type", sa.String(length=40), nullable=False),
        sa.Column("data", postgresql.JSONB(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_submission_form_type", "submission", ["form_type"], unique=False)
    op.create_index("ix_submission_created_at", "submission", ["created_at"], unique=False)

    op.create_table(
        "media_library",
        _uuid_pk(),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("storage_path", sa.Text(), nullable=False),
        sa.Column("public_url", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=True),
        sa.Column("source", sa.String(length=20), nullable=False),
        sa.Column("source_attribution", sa.Text(), nullable=True),
        sa.Column("mime_type", sa.String(length=100), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("alt_text", postgresql.JSONB(), nullable=False),
        sa.Column("caption", postgresql.JSONB(), nullable=True),
        sa.Column("tags", postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_media_library_category", "media_library", ["category"], unique=False)
    op.create_index("ix_media_library_created_at", "media_library", ["created_at"], unique=False)

    op.create_table(
        "activity_log",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("action", sa.String(length=40), nullable=False),
        sa.Column("entity_type", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=True),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_activity_log_user_id", "activity_log", ["user_id"], unique=False)
    op.create_index("ix_activity_log_action", "activity_log", ["action"], unique=False)
    op.create_index("ix_activity_log_entity_type", "activity_log", ["entity_type"], unique=False)
    op.create_index("ix_activity_log_created_at", "activity_log", ["created_at"], unique=False)
    op.create_index("ix_activity_log_entity", "activity_log", ["entity_type", "entity_id", "created_at"], unique=False)


def downgrade() -> None:
    for table in (
        "activity_log",
        "media_library",
        "submission",
        "settings",
        "partner",
        "video",
        "kpi",
        "post",
        "event",
        "program",
        "block",
        "page",
        "user_roles",
        "users",
    ):
        op.drop_table(table)
    app_role.drop(op.get_bind(), checkfirst=True)

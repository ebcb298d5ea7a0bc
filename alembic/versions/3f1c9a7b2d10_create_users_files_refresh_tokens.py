"""create users, files and refresh_tokens

Revision ID: 3f1c9a7b2d10
Revises:
Create Date: 2026-10-18 09:12:41.518204

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "3f1c9a7b2d10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
  op.create_table(
    "users",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("first_name", sa.String(length=100), nullable=False),
    sa.Column("last_name", sa.String(length=100), nullable=False),
    sa.Column("email", sa.String(length=254), nullable=False),
    sa.Column("password_hash", sa.String(), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

  op.create_table(
    "files",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("user_id", sa.Integer(), nullable=False),
    sa.Column("original_name", sa.String(length=255), nullable=False),
    sa.Column("mime_type", sa.String(length=255), nullable=False),
    sa.Column("size_in_bytes", sa.BigInteger(), nullable=False),
    sa.Column("s3_bucket", sa.String(length=255), nullable=False),
    sa.Column("s3_key", sa.String(length=1024), nullable=False),
    sa.Column("status", sa.Integer(), nullable=False),
    sa.Column("is_public", sa.Boolean(), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
    sa.UniqueConstraint(
      "user_id", "original_name", name="uq_files_user_original_name"
    ),
  )
  op.create_index(op.f("ix_files_user_id"), "files", ["user_id"], unique=False)

  op.create_table(
    "refresh_tokens",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("user_id", sa.Integer(), nullable=False),
    sa.Column("token_hash", sa.String(length=64), nullable=False),
    sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("revoked", sa.Boolean(), nullable=False),
    sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(
    op.f("ix_refresh_tokens_token_hash"), "refresh_tokens", ["token_hash"], unique=True
  )
  op.create_index(
    op.f("ix_refresh_tokens_user_id"), "refresh_tokens", ["user_id"], unique=False
  )
  op.create_index(
    "idx_refresh_tokens_expires", "refresh_tokens", ["expires_at"], unique=False
  )


def downgrade() -> None:
  op.drop_index("idx_refresh_tokens_expires", table_name="refresh_tokens")
  op.drop_index(op.f("ix_refresh_tokens_user_id"), table_name="refresh_tokens")
  op.drop_index(op.f("ix_refresh_tokens_token_hash"), table_name="refresh_tokens")
  op.drop_table("refresh_tokens")
  op.drop_index(op.f("ix_files_user_id"), table_name="files")
  op.drop_table("files")
  op.drop_index(op.f("ix_users_email"), table_name="users")
  op.drop_table("users")

"""create audits table

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "audits",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("target_url", sa.String(length=2048), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=True, comment="Hostname without scheme or leading www."),
        sa.Column("keyword", sa.String(length=512), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, comment="queued, running, done, failed"),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("scores", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column(
            "provider_data",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Per-provider result envelopes kept for debugging",
        ),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audits_created_at", "audits", ["created_at"], unique=False)
    op.create_index("ix_audits_status", "audits", ["status"], unique=False)
    op.create_index(
        "ix_audits_target_url_created_at",
        "audits",
        ["target_url", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_audits_target_url_created_at", table_name="audits")
    op.drop_index("ix_audits_status", table_name="audits")
    op.drop_index("ix_audits_created_at", table_name="audits")
    op.drop_table("audits")

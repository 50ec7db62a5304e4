"""Initial schema: live and archived audit records

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _record_columns() -> list[sa.Column]:
    """Columns shared by audit_records and archived_audit_records."""
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("actor_email", sa.String(100), nullable=True),
        sa.Column("actor_name", sa.String(100), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("resource_type", sa.String(50), nullable=False),
        sa.Column("resource_id", sa.String(255), nullable=False),
        sa.Column("resource_name", sa.String(255), nullable=True),
        sa.Column("metadata", postgresql.JSONB, nullable=True),
        sa.Column("previous_state", postgresql.JSONB, nullable=True),
        sa.Column("new_state", postgresql.JSONB, nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("session_id", sa.String(50), nullable=True),
        sa.Column("severity", sa.String(20), nullable=False, server_default="LOW"),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table("audit_records", *_record_columns())
    op.create_index("idx_audit_record_tenant", "audit_records", ["tenant_id"])
    op.create_index("idx_audit_record_actor", "audit_records", ["actor_id"])
    op.create_index("idx_audit_record_action", "audit_records", ["action"])
    op.create_index(
        "idx_audit_record_resource", "audit_records", ["resource_type", "resource_id"]
    )
    op.create_index("idx_audit_record_created", "audit_records", ["created_at"])
    # Covers the retention predicate: tenant + age + optional category/severity
    op.create_index(
        "idx_audit_record_retention",
        "audit_records",
        ["tenant_id", "created_at", "category", "severity"],
    )

    op.create_table(
        "archived_audit_records",
        *_record_columns(),
        sa.Column(
            "archived_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("archived_by_policy_id", postgresql.UUID(as_uuid=True), nullable=False),
    )
    op.create_index("idx_archived_tenant", "archived_audit_records", ["tenant_id"])
    op.create_index("idx_archived_actor", "archived_audit_records", ["actor_id"])
    op.create_index("idx_archived_action", "archived_audit_records", ["action"])
    op.create_index(
        "idx_archived_resource", "archived_audit_records", ["resource_type", "resource_id"]
    )
    op.create_index("idx_archived_created", "archived_audit_records", ["created_at"])
    op.create_index("idx_archived_policy", "archived_audit_records", ["archived_by_policy_id"])


def downgrade() -> None:
    op.drop_table("archived_audit_records")
    op.drop_table("audit_records")

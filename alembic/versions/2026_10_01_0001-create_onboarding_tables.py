"""create_onboarding_tables

Revision ID: 3f9c2a7d1b04
Revises:
Create Date: 2026-10-01 00:01:00.000000

Creates the tenant registry, the provisioning ledger and the profiles
table. The unique constraint on tenants.slug is the final arbiter of slug
uniqueness; auto_provisioning.candidate_slug is indexed for the
availability check.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3f9c2a7d1b04"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "tenants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("slug", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("owner_id", sa.String(length=255), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=False, server_default="UTC"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug", name="uq_tenants_slug"),
    )
    op.create_index("ix_tenants_id", "tenants", ["id"], unique=False)
    op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=False)
    op.create_index("ix_tenants_email", "tenants", ["email"], unique=False)

    op.create_table(
        "auto_provisioning",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=True),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("restaurant_name", sa.String(length=255), nullable=True),
        sa.Column("candidate_slug", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("idempotency_key", sa.String(length=128), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("idempotency_key", name="uq_auto_provisioning_idempotency_key"),
    )
    op.create_index("ix_auto_provisioning_id", "auto_provisioning", ["id"], unique=False)
    op.create_index(
        "ix_auto_provisioning_tenant_id", "auto_provisioning", ["tenant_id"], unique=False
    )
    op.create_index(
        "ix_auto_provisioning_candidate_slug",
        "auto_provisioning",
        ["candidate_slug"],
        unique=False,
    )
    op.create_index("ix_auto_provisioning_status", "auto_provisioning", ["status"], unique=False)
    # At most one completed record per tenant
    op.create_index(
        "uq_auto_provisioning_completed_tenant",
        "auto_provisioning",
        ["tenant_id"],
        unique=True,
        postgresql_where=sa.text("status = 'completed'"),
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_profiles_id", "profiles", ["id"], unique=False)
    op.create_index("ix_profiles_user_id", "profiles", ["user_id"], unique=False)
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("profiles")
    op.drop_index("uq_auto_provisioning_completed_tenant", table_name="auto_provisioning")
    op.drop_table("auto_provisioning")
    op.drop_table("tenants")

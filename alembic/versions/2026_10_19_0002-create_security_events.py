"""create_security_events

Revision ID: 8b51e0c4a2f7
Revises: 3f9c2a7d1b04
Create Date: 2026-10-19 00:02:00.000000

Audit table for owner credential changes made through tenant management.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "8b51e0c4a2f7"
down_revision: Union[str, None] = "3f9c2a7d1b04"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "security_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("severity", sa.String(length=32), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("tenant_id", sa.Uuid(), nullable=True),
        sa.Column("actor_id", sa.String(length=255), nullable=True),
        sa.Column("request_id", sa.String(length=64), nullable=True),
        sa.Column("event_data", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_security_events_id", "security_events", ["id"], unique=False)
    op.create_index(
        "ix_security_events_event_type", "security_events", ["event_type"], unique=False
    )
    op.create_index("ix_security_events_user_id", "security_events", ["user_id"], unique=False)
    op.create_index(
        "ix_security_events_tenant_id", "security_events", ["tenant_id"], unique=False
    )
    op.create_index(
        "ix_security_events_created_at", "security_events", ["created_at"], unique=False
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("security_events")

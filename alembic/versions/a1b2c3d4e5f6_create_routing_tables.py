"""create roles, users and leads tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 09:00:00.000000

Initial schema for lead routing:
  - roles: staff roles, unique by name
  - users: staff with routing fields (is_available, weightage,
    active_leads_count, last_assigned_at)
  - leads: admission enquiries with the duplicate-lookup indexes
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "roles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(20)),
        sa.Column(
            "role_id",
            sa.String(36),
            sa.ForeignKey("roles.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "is_available", sa.Boolean(), nullable=False, server_default=sa.text("true")
        ),
        sa.Column("weightage", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column(
            "active_leads_count",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("last_assigned_at", sa.DateTime(timezone=True)),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.CheckConstraint("active_leads_count >= 0", name="ck_active_leads_nonneg"),
        sa.CheckConstraint("weightage >= 1", name="ck_weightage_positive"),
    )
    op.create_index("idx_users_role_available", "users", ["role_id", "is_available"])

    op.create_table(
        "leads",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("lead_reference_id", sa.String(40), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("college", sa.String(255)),
        sa.Column("course", sa.String(255)),
        sa.Column("state", sa.String(100)),
        sa.Column("district", sa.String(100)),
        sa.Column("admission_year", sa.String(4), nullable=False),
        sa.Column("source_website", sa.String(255), nullable=False),
        sa.Column("utm_params", sa.JSON(), nullable=False),
        sa.Column("form_data", sa.JSON(), nullable=False),
        sa.Column(
            "assigned_to",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "created_by",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column("status", sa.String(50), nullable=False, server_default="new"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
    )
    op.create_index("idx_leads_phone", "leads", ["phone"])
    op.create_index(
        "idx_leads_phone_year_source",
        "leads",
        ["phone", "admission_year", "source_website"],
    )
    op.create_index("idx_leads_assigned_to", "leads", ["assigned_to"])


def downgrade() -> None:
    op.drop_index("idx_leads_assigned_to", table_name="leads")
    op.drop_index("idx_leads_phone_year_source", table_name="leads")
    op.drop_index("idx_leads_phone", table_name="leads")
    op.drop_table("leads")
    op.drop_index("idx_users_role_available", table_name="users")
    op.drop_table("users")
    op.drop_table("roles")

"""create installation lifecycle tables

Revision ID: 20261019_installation_lifecycle
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "20261019_installation_lifecycle"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_customers_tenant_id", "customers", ["tenant_id"])

    op.create_table(
        "installations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column(
            "customer_id",
            sa.String(length=36),
            sa.ForeignKey("customers.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("installation_number", sa.String(length=32), nullable=False),
        sa.Column("installation_address", sa.String(length=500), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("completed_date", sa.Date(), nullable=True),
        sa.Column("system_size", sa.Numeric(10, 2), nullable=True),
        sa.Column("total_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("installer_notes", sa.Text(), nullable=True),
        sa.Column("customer_notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "installation_number", name="uq_installations_tenant_number"),
    )
    op.create_index("ix_installations_tenant_id", "installations", ["tenant_id"])

    op.create_table(
        "installation_milestones",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column(
            "installation_id",
            sa.String(length=36),
            sa.ForeignKey("installations.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("milestone_type", sa.String(length=40), nullable=False),
        sa.Column("milestone_name", sa.String(length=200), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("completed_date", sa.Date(), nullable=True),
        sa.Column("assigned_to", sa.String(length=200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_installation_milestones_tenant_id", "installation_milestones", ["tenant_id"])
    op.create_index("ix_installation_milestones_installation_id", "installation_milestones", ["installation_id"])

    op.create_table(
        "permits",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column(
            "installation_id",
            sa.String(length=36),
            sa.ForeignKey("installations.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("permit_type", sa.String(length=40), nullable=False),
        sa.Column("permit_number", sa.String(length=100), nullable=True),
        sa.Column("issuing_authority", sa.String(length=200), nullable=True),
        sa.Column("application_date", sa.Date(), nullable=True),
        sa.Column("approval_date", sa.Date(), nullable=True),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_permits_tenant_id", "permits", ["tenant_id"])
    op.create_index("ix_permits_installation_id", "permits", ["installation_id"])


def downgrade() -> None:
    op.drop_index("ix_permits_installation_id", table_name="permits")
    op.drop_index("ix_permits_tenant_id", table_name="permits")
    op.drop_table("permits")
    op.drop_index("ix_installation_milestones_installation_id", table_name="installation_milestones")
    op.drop_index("ix_installation_milestones_tenant_id", table_name="installation_milestones")
    op.drop_table("installation_milestones")
    op.drop_index("ix_installations_tenant_id", table_name="installations")
    op.drop_table("installations")
    op.drop_index("ix_customers_tenant_id", table_name="customers")
    op.drop_table("customers")

"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ("ADMIN", "ATTENDANT", "OFFICE_OWNER", "VISITOR")
BOOKING_STATUSES = ("REQUESTED", "CONFIRMED", "CANCELLED", "COMPLETED")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column(
            "role",
            sa.Enum(*USER_ROLES, name="user_role", native_enum=False, length=20),
            nullable=False,
            server_default=sa.text("'VISITOR'"),
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "offices",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("number", sa.String(64), nullable=False, unique=True),
        sa.Column("company_name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("deleted_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "office_owners",
        sa.Column("office_id", sa.String(36), sa.ForeignKey("offices.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "office_availability",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("office_id", sa.String(36), sa.ForeignKey("offices.id", ondelete="CASCADE"), nullable=False),
        sa.Column("available_from", sa.DateTime(), nullable=False),
        sa.Column("available_to", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("available_to > available_from", name="availability_interval_valid"),
    )
    op.create_index(
        "ix_office_availability_office_from", "office_availability", ["office_id", "available_from"]
    )

    op.create_table(
        "visitors",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.String(320)),
        sa.Column("phone", sa.Text()),
        sa.Column("document", sa.Text()),
        sa.Column("company", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_visitors_email", "visitors", ["email"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("office_id", sa.String(36), sa.ForeignKey("offices.id"), nullable=False),
        sa.Column("visitor_id", sa.String(36), sa.ForeignKey("visitors.id", ondelete="SET NULL")),
        sa.Column("created_by_user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("end_at", sa.DateTime(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*BOOKING_STATUSES, name="booking_status", native_enum=False, length=20),
            nullable=False,
            server_default=sa.text("'REQUESTED'"),
        ),
        sa.Column("title", sa.Text()),
        sa.Column("description", sa.Text()),
        sa.Column("notes", sa.Text()),
        sa.Column("needs_support", sa.Boolean(), nullable=False),
        sa.Column("visitor_name", sa.Text()),
        sa.Column("visitor_email", sa.String(320)),
        sa.Column("visitor_whatsapp", sa.Text()),
        sa.Column("deleted_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("end_at > start_at", name="booking_interval_valid"),
    )
    op.create_index("ix_bookings_office_start", "bookings", ["office_id", "start_at"])


def downgrade():
    op.drop_index("ix_bookings_office_start", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_visitors_email", table_name="visitors")
    op.drop_table("visitors")
    op.drop_index("ix_office_availability_office_from", table_name="office_availability")
    op.drop_table("office_availability")
    op.drop_table("office_owners")
    op.drop_table("offices")
    op.drop_table("users")

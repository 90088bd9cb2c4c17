"""Add availability overrides, bookings and email verifications

Revision ID: 5c2e7d1a9b40
Revises:
Create Date: 2026-10-19 12:00:00.000000+00:00

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5c2e7d1a9b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "availability_overrides",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("slots", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_availability_overrides_date"),
        "availability_overrides",
        ["date"],
        unique=True,
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("customer_type", sa.String(length=16), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("slot", sa.String(length=5), nullable=False),
        sa.Column("meeting_link", sa.String(length=500), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("booking_date", "slot", name="uq_bookings_date_slot"),
    )
    op.create_index(
        op.f("ix_bookings_email"),
        "bookings",
        ["email"],
        unique=False,
    )
    op.create_index(
        op.f("ix_bookings_booking_date"),
        "bookings",
        ["booking_date"],
        unique=False,
    )
    op.create_index(
        op.f("ix_bookings_created_at"),
        "bookings",
        ["created_at"],
        unique=False,
    )

    op.create_table(
        "email_verifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=6), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_email_verifications_email"),
        "email_verifications",
        ["email"],
        unique=True,
    )
    op.create_index(
        op.f("ix_email_verifications_expires_at"),
        "email_verifications",
        ["expires_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(
        op.f("ix_email_verifications_expires_at"), table_name="email_verifications"
    )
    op.drop_index(
        op.f("ix_email_verifications_email"), table_name="email_verifications"
    )
    op.drop_table("email_verifications")

    op.drop_index(op.f("ix_bookings_created_at"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_booking_date"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_email"), table_name="bookings")
    op.drop_table("bookings")

    op.drop_index(
        op.f("ix_availability_overrides_date"), table_name="availability_overrides"
    )
    op.drop_table("availability_overrides")

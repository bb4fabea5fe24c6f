"""Create users, rooms and bookings

Revision ID: 3f1c2a7b9d10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


revision = "3f1c2a7b9d10"
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum("customer", "admin", name="userrole")
room_type = sa.Enum("single", "double", "suite", "deluxe", "presidential", name="roomtype")
booking_status = sa.Enum(
    "pending", "confirmed", "cancelled", "checked_in", "checked_out",
    name="bookingstatus",
)
payment_status = sa.Enum("pending", "completed", "failed", "refunded", name="paymentstatus")
payment_method = sa.Enum("credit_card", "debit_card", "paypal", "stripe", "cash", name="paymentmethod")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="customer"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(2000), nullable=False),
        sa.Column("type", room_type, nullable=False),
        sa.Column("price_per_night", sa.Numeric(10, 2), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("amenities", sa.JSON(), nullable=False),
        sa.Column("booked_dates", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_rooms_id", "rooms", ["id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("adults", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("children", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("infants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("nights", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", booking_status, nullable=False, server_default="pending"),
        sa.Column("payment_method", payment_method, nullable=False, server_default="stripe"),
        sa.Column("payment_status", payment_status, nullable=False, server_default="pending"),
        sa.Column("payment_id", sa.String(), nullable=True),
        sa.Column("special_requests", sa.String(500), nullable=True),
        sa.Column("cancellation_reason", sa.String(), nullable=True),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("checked_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("room_snapshot", sa.JSON(), nullable=False),
        sa.Column("user_snapshot", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_room_id", "bookings", ["room_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_payment_status", "bookings", ["payment_status"])
    op.create_index("ix_bookings_created_at", "bookings", ["created_at"])


def downgrade():
    op.drop_table("bookings")
    op.drop_table("rooms")
    op.drop_table("users")

    # Drop ENUM types (no-op on databases without native enums)
    bind = op.get_bind()
    for enum in (payment_method, payment_status, booking_status, room_type, user_role):
        enum.drop(bind, checkfirst=True)

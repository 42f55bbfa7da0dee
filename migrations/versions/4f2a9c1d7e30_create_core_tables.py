"""create_core_tables

Revision ID: 4f2a9c1d7e30
Revises:
Create Date: 2026-10-19 09:12:40.118203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4f2a9c1d7e30"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

VEHICLE_TYPES = "'TWO_WHEELER', 'FOUR_WHEELER', 'HEAVY'"


def upgrade() -> None:
    # Live availability counters, one row per catalog parking spot
    op.create_table(
        "parking_availability",
        sa.Column("spot_id", sa.String(length=64), nullable=False),
        sa.Column("available_spots_two_wheeler", sa.Integer(), nullable=False),
        sa.Column("available_spots_four_wheeler", sa.Integer(), nullable=False),
        sa.Column("available_spots_heavy", sa.Integer(), nullable=False),
        sa.Column("floor_availability", sa.dialects.postgresql.JSONB(), nullable=False),
        sa.Column(
            "last_updated",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.CheckConstraint("available_spots_two_wheeler >= 0", name="check_two_wheeler_non_negative"),
        sa.CheckConstraint("available_spots_four_wheeler >= 0", name="check_four_wheeler_non_negative"),
        sa.CheckConstraint("available_spots_heavy >= 0", name="check_heavy_non_negative"),
        sa.PrimaryKeyConstraint("spot_id"),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("parking_id", sa.String(length=64), nullable=False),
        sa.Column("parking_name", sa.String(length=255), nullable=False),
        sa.Column("parking_address", sa.String(length=512), nullable=False),
        sa.Column("vehicle_id", sa.String(length=64), nullable=False),
        sa.Column("vehicle_number", sa.String(length=32), nullable=False),
        sa.Column("vehicle_type", sa.String(length=16), nullable=False),
        sa.Column("floor_number", sa.Integer(), nullable=True),
        sa.Column("floor_name", sa.String(length=64), nullable=False),
        sa.Column("spot_number", sa.String(length=16), nullable=False),
        sa.Column("entry_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("exit_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actual_exit_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_hours", sa.Integer(), nullable=False),
        sa.Column("base_price", sa.Float(), nullable=False),
        sa.Column("tax_amount", sa.Float(), nullable=False),
        sa.Column("discount_amount", sa.Float(), nullable=False),
        sa.Column("total_price", sa.Float(), nullable=False),
        sa.Column("extra_charges", sa.Float(), nullable=False),
        sa.Column("coupon_code", sa.String(length=64), nullable=True),
        sa.Column("payment_method", sa.String(length=16), nullable=False),
        sa.Column("payment_status", sa.String(length=16), nullable=False),
        sa.Column("booking_status", sa.String(length=16), nullable=False),
        sa.Column("transaction_id", sa.String(length=128), nullable=True),
        sa.Column("qr_code_data", sa.String(length=255), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
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
        sa.CheckConstraint(f"vehicle_type IN ({VEHICLE_TYPES})", name="check_vehicle_type"),
        sa.CheckConstraint(
            "payment_method IN ('UPI', 'NET_BANKING', 'CARD', 'CASH')",
            name="check_payment_method",
        ),
        sa.CheckConstraint(
            "payment_status IN ('PENDING', 'PROCESSING', 'COMPLETED', 'FAILED', 'REFUNDED')",
            name="check_payment_status",
        ),
        sa.CheckConstraint(
            "booking_status IN ('PENDING', 'CONFIRMED', 'ACTIVE', 'COMPLETED', 'CANCELLED', 'EXPIRED')",
            name="check_booking_status",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index(
        "ix_bookings_spot_status", "bookings", ["parking_id", "spot_number", "booking_status"]
    )
    op.create_index(
        "ix_bookings_floor_status", "bookings", ["parking_id", "floor_number", "booking_status"]
    )

    op.create_table(
        "vehicles",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("number", sa.String(length=32), nullable=False),
        sa.Column("brand", sa.String(length=128), nullable=False),
        sa.Column("model", sa.String(length=128), nullable=False),
        sa.Column("color", sa.String(length=64), nullable=False),
        sa.Column("photo_url", sa.String(length=512), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("is_preset", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(f"type IN ({VEHICLE_TYPES})", name="check_vehicle_type"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_vehicles_user_id", "vehicles", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_vehicles_user_id", table_name="vehicles")
    op.drop_table("vehicles")

    op.drop_index("ix_bookings_floor_status", table_name="bookings")
    op.drop_index("ix_bookings_spot_status", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_table("parking_availability")

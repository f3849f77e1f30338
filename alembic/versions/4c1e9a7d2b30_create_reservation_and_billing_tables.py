"""create_reservation_and_billing_tables

Revision ID: 4c1e9a7d2b30
Revises:
Create Date: 2025-11-03 10:14:22.481305

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c1e9a7d2b30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BOOKING_STATUS = sa.Enum(
    "CONFIRMED",
    "OCCUPIED",
    "CHECKEDOUT",
    "CANCELLED",
    "NO_SHOW",
    "BLOCKED",
    "MAINTENANCE",
    name="bookingstatus",
)
PRICING_TYPE = sa.Enum("BASE_EXCLUSIVE", "FINAL_INCLUSIVE", name="pricingtype")
DISCOUNT_SCOPE = sa.Enum("TOTAL", "ROOM", "EXTRAS", name="discountscope")
PAYMENT_MODE = sa.Enum(
    "CASH", "UPI", "CARD", "BANK_TRANSFER", "ONLINE", "OTHER", name="paymentmode"
)
ROOM_STATUS = sa.Enum(
    "AVAILABLE", "OCCUPIED", "CLEANING", "MAINTENANCE", name="roomstatus"
)
FOOD_ORDER_STATUS = sa.Enum(
    "NEW", "PREPARING", "DELIVERED", "CANCELLED", name="foodorderstatus"
)
FOOD_PAYMENT_STATUS = sa.Enum("PENDING", "PAID", name="foodpaymentstatus")
TRANSACTION_TYPE = sa.Enum("CREDIT", "DEBIT", name="transactiontype")
TRANSACTION_SOURCE = sa.Enum(
    "ROOM",
    "RESTAURANT",
    "BANQUET",
    "MAINTENANCE",
    "LAUNDRY",
    "INVENTORY",
    "OTHER",
    name="transactionsource",
)


def _money(name: str, nullable: bool = False, default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(12, 2),
        nullable=nullable,
        server_default="0" if default else None,
    )


def upgrade() -> None:
    """Create room, booking, invoice, food order and ledger tables."""
    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("hotel_id", sa.Integer(), nullable=False),
        sa.Column("number", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("floor", sa.Integer(), nullable=True),
        sa.Column("status", ROOM_STATUS, nullable=False),
        _money("base_rate", nullable=True, default=False),
        sa.Column("max_guests", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("hotel_id", "number", name="uq_rooms_hotel_number"),
    )
    op.create_index("ix_rooms_id", "rooms", ["id"])
    op.create_index("ix_rooms_hotel_id", "rooms", ["hotel_id"])
    op.create_index("ix_rooms_type", "rooms", ["type"])

    op.create_table(
        "room_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        _money("single_price"),
        _money("double_price"),
    )
    op.create_index("ix_room_plans_id", "room_plans", ["id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("hotel_id", sa.Integer(), nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column("status", BOOKING_STATUS, nullable=False),
        sa.Column("guest_name", sa.String(), nullable=True),
        sa.Column("guest_phone", sa.String(), nullable=True),
        sa.Column("guest_email", sa.String(), nullable=True),
        sa.Column("guest_city", sa.String(), nullable=True),
        sa.Column("guest_nationality", sa.String(), nullable=True),
        sa.Column("guest_address", sa.Text(), nullable=True),
        sa.Column("adults", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("children", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("company_gstin", sa.String(), nullable=True),
        sa.Column("company_address", sa.Text(), nullable=True),
        sa.Column("check_in", sa.DateTime(), nullable=False),
        sa.Column("check_out", sa.DateTime(), nullable=False),
        sa.Column("actual_checkout_time", sa.DateTime(), nullable=True),
        sa.Column("plan_code", sa.String(), nullable=True),
        sa.Column("pricing_type", PRICING_TYPE, nullable=False),
        _money("final_room_price", nullable=True, default=False),
        sa.Column("gst_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("discount_percent", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("discount_scope", DISCOUNT_SCOPE, nullable=False),
        sa.Column(
            "round_off_enabled", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "food_discount_percent", sa.Numeric(5, 2), nullable=False, server_default="0"
        ),
        sa.Column(
            "food_gst_enabled", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column("nights", sa.Integer(), nullable=False, server_default="0"),
        _money("room_rate"),
        _money("room_base"),
        _money("extras_base"),
        _money("discount_amount"),
        _money("taxable"),
        _money("cgst"),
        _money("sgst"),
        _money("food_subtotal"),
        _money("food_discount_amount"),
        _money("food_gst"),
        _money("food_total"),
        _money("round_off_amount"),
        _money("grand_total"),
        _money("advance_paid"),
        _money("balance_due"),
        sa.Column(
            "final_payment_received",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        _money("final_payment_amount"),
        sa.Column("final_payment_mode", PAYMENT_MODE, nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_hotel_id", "bookings", ["hotel_id"])
    op.create_index(
        "idx_bookings_room_window", "bookings", ["room_id", "check_in", "check_out"]
    )
    op.create_index("idx_bookings_hotel_status", "bookings", ["hotel_id", "status"])

    op.create_table(
        "booking_added_services",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(), nullable=False),
        _money("price"),
        sa.Column("days", sa.JSON(), nullable=False),
        sa.Column("gst_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_booking_added_services_id", "booking_added_services", ["id"])

    op.create_table(
        "booking_advances",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False
        ),
        _money("amount", default=False),
        sa.Column("mode", PAYMENT_MODE, nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_booking_advances_id", "booking_advances", ["id"])

    op.create_table(
        "room_invoices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("hotel_id", sa.Integer(), nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("invoice_number", sa.String(), nullable=False, unique=True),
        sa.Column("pricing_version", sa.Integer(), nullable=False),
        sa.Column("room_number", sa.String(), nullable=True),
        sa.Column("room_type", sa.String(), nullable=True),
        sa.Column("guest_name", sa.String(), nullable=True),
        sa.Column("guest_phone", sa.String(), nullable=True),
        sa.Column("guest_email", sa.String(), nullable=True),
        sa.Column("guest_city", sa.String(), nullable=True),
        sa.Column("guest_nationality", sa.String(), nullable=True),
        sa.Column("guest_address", sa.Text(), nullable=True),
        sa.Column("adults", sa.Integer(), nullable=True),
        sa.Column("children", sa.Integer(), nullable=True),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("company_gstin", sa.String(), nullable=True),
        sa.Column("company_address", sa.Text(), nullable=True),
        sa.Column("check_in", sa.DateTime(), nullable=False),
        sa.Column("check_out", sa.DateTime(), nullable=False),
        sa.Column("actual_checkout_time", sa.DateTime(), nullable=False),
        sa.Column("stay_nights", sa.Integer(), nullable=False),
        sa.Column("plan_code", sa.String(), nullable=True),
        sa.Column("pricing_type", sa.String(), nullable=False),
        _money("room_rate", default=False),
        _money("room_base", default=False),
        _money("extras_base", default=False),
        sa.Column("extra_services", sa.JSON(), nullable=False),
        sa.Column("discount_percent", sa.Numeric(5, 2), nullable=False),
        sa.Column("discount_scope", sa.String(), nullable=False),
        _money("discount_amount", default=False),
        _money("taxable", default=False),
        sa.Column("gst_enabled", sa.Boolean(), nullable=False),
        _money("cgst", default=False),
        _money("sgst", default=False),
        sa.Column("food_orders", sa.JSON(), nullable=False),
        _money("food_subtotal", default=False),
        sa.Column("food_discount_percent", sa.Numeric(5, 2), nullable=False),
        _money("food_discount_amount", default=False),
        _money("food_gst", default=False),
        _money("food_total", default=False),
        sa.Column("food_gst_enabled", sa.Boolean(), nullable=False),
        _money("round_off_amount", default=False),
        _money("grand_total", default=False),
        sa.Column("advances", sa.JSON(), nullable=False),
        _money("advance_paid", default=False),
        _money("balance_due", default=False),
        sa.Column("final_payment_mode", sa.String(), nullable=True),
        sa.Column("final_payment_received", sa.Boolean(), nullable=False),
        _money("final_payment_amount", default=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_room_invoices_id", "room_invoices", ["id"])
    op.create_index("ix_room_invoices_hotel_id", "room_invoices", ["hotel_id"])
    op.create_index("ix_room_invoices_room_id", "room_invoices", ["room_id"])
    op.create_index(
        "idx_room_invoices_hotel_created", "room_invoices", ["hotel_id", "created_at"]
    )

    op.create_table(
        "food_orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("hotel_id", sa.Integer(), nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id"), nullable=True),
        sa.Column("source", sa.String(), nullable=True),
        sa.Column("items", sa.JSON(), nullable=False),
        _money("subtotal"),
        _money("gst"),
        _money("total"),
        sa.Column("status", FOOD_ORDER_STATUS, nullable=False),
        sa.Column("payment_status", FOOD_PAYMENT_STATUS, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_food_orders_id", "food_orders", ["id"])
    op.create_index(
        "idx_food_orders_room_created",
        "food_orders",
        ["hotel_id", "room_id", "created_at"],
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("hotel_id", sa.Integer(), nullable=False),
        sa.Column("type", TRANSACTION_TYPE, nullable=False),
        sa.Column("source", TRANSACTION_SOURCE, nullable=False),
        _money("amount", default=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("reference_id", sa.String(), nullable=True),
        sa.Column("payment_mode", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_transactions_id", "transactions", ["id"])
    op.create_index(
        "idx_transactions_hotel_created", "transactions", ["hotel_id", "created_at"]
    )
    op.create_index("idx_transactions_reference", "transactions", ["reference_id"])

    # Storage-level guarantee that no two live stays overlap on a room
    if op.get_bind().dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            "ALTER TABLE bookings ADD CONSTRAINT excl_bookings_room_window "
            "EXCLUDE USING gist (room_id WITH =, tsrange(check_in, check_out, '[)') WITH &&) "
            "WHERE (status <> 'CANCELLED')"
        )


def downgrade() -> None:
    """Drop all reservation and billing tables."""
    if op.get_bind().dialect.name == "postgresql":
        op.execute(
            "ALTER TABLE bookings DROP CONSTRAINT IF EXISTS excl_bookings_room_window"
        )

    op.drop_table("transactions")
    op.drop_table("food_orders")
    op.drop_table("room_invoices")
    op.drop_table("booking_advances")
    op.drop_table("booking_added_services")
    op.drop_table("bookings")
    op.drop_table("room_plans")
    op.drop_table("rooms")

    bind = op.get_bind()
    for enum_type in (
        TRANSACTION_SOURCE,
        TRANSACTION_TYPE,
        FOOD_PAYMENT_STATUS,
        FOOD_ORDER_STATUS,
        ROOM_STATUS,
        PAYMENT_MODE,
        DISCOUNT_SCOPE,
        PRICING_TYPE,
        BOOKING_STATUS,
    ):
        enum_type.drop(bind, checkfirst=True)

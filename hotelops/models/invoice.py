
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)

from hotelops.core.service_utils import utcnow
from hotelops.models.base import Base


class RoomInvoice(Base):
    """Checkout snapshot. Written once and never recomputed."""

    __tablename__ = "room_invoices"
    __table_args__ = (Index("idx_room_invoices_hotel_created", "hotel_id", "created_at"),)

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, unique=True)
    invoice_number = Column(String, nullable=False, unique=True)
    pricing_version = Column(Integer, nullable=False)

    # Room details
    room_number = Column(String, nullable=True)
    room_type = Column(String, nullable=True)

    # Guest details
    guest_name = Column(String, nullable=True)
    guest_phone = Column(String, nullable=True)
    guest_email = Column(String, nullable=True)
    guest_city = Column(String, nullable=True)
    guest_nationality = Column(String, nullable=True)
    guest_address = Column(Text, nullable=True)
    adults = Column(Integer, nullable=True)
    children = Column(Integer, nullable=True)

    # Company details
    company_name = Column(String, nullable=True)
    company_gstin = Column(String, nullable=True)
    company_address = Column(Text, nullable=True)

    # Stay details
    check_in = Column(DateTime, nullable=False)
    check_out = Column(DateTime, nullable=False)
    actual_checkout_time = Column(DateTime, nullable=False)
    stay_nights = Column(Integer, nullable=False)
    plan_code = Column(String, nullable=True)
    pricing_type = Column(String, nullable=False)

    # Room and extras
    room_rate = Column(Numeric(12, 2), nullable=False)
    room_base = Column(Numeric(12, 2), nullable=False)
    extras_base = Column(Numeric(12, 2), nullable=False)
    extra_services = Column(JSON, nullable=False, default=list)

    # Discount and tax
    discount_percent = Column(Numeric(5, 2), nullable=False)
    discount_scope = Column(String, nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False)
    taxable = Column(Numeric(12, 2), nullable=False)
    gst_enabled = Column(Boolean, nullable=False)
    cgst = Column(Numeric(12, 2), nullable=False)
    sgst = Column(Numeric(12, 2), nullable=False)

    # Food
    food_orders = Column(JSON, nullable=False, default=list)
    food_subtotal = Column(Numeric(12, 2), nullable=False)
    food_discount_percent = Column(Numeric(5, 2), nullable=False)
    food_discount_amount = Column(Numeric(12, 2), nullable=False)
    food_gst = Column(Numeric(12, 2), nullable=False)
    food_total = Column(Numeric(12, 2), nullable=False)
    food_gst_enabled = Column(Boolean, nullable=False)

    # Totals and payments
    round_off_amount = Column(Numeric(12, 2), nullable=False)
    grand_total = Column(Numeric(12, 2), nullable=False)
    advances = Column(JSON, nullable=False, default=list)
    advance_paid = Column(Numeric(12, 2), nullable=False)
    balance_due = Column(Numeric(12, 2), nullable=False)
    final_payment_mode = Column(String, nullable=True)
    final_payment_received = Column(Boolean, nullable=False)
    final_payment_amount = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

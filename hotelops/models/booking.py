import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from hotelops.core.service_utils import utcnow
from hotelops.models.base import Base


class BookingStatus(enum.Enum):
    CONFIRMED = "CONFIRMED"
    OCCUPIED = "OCCUPIED"
    CHECKEDOUT = "CHECKEDOUT"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    BLOCKED = "BLOCKED"
    MAINTENANCE = "MAINTENANCE"


class PricingType(enum.Enum):
    BASE_EXCLUSIVE = "BASE_EXCLUSIVE"
    FINAL_INCLUSIVE = "FINAL_INCLUSIVE"


class DiscountScope(enum.Enum):
    TOTAL = "TOTAL"
    ROOM = "ROOM"
    EXTRAS = "EXTRAS"


class PaymentMode(enum.Enum):
    CASH = "CASH"
    UPI = "UPI"
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    ONLINE = "ONLINE"
    OTHER = "OTHER"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("idx_bookings_room_window", "room_id", "check_in", "check_out"),
        Index("idx_bookings_hotel_status", "hotel_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    status = Column(Enum(BookingStatus), default=BookingStatus.OCCUPIED, nullable=False)

    # Guest details
    guest_name = Column(String, nullable=True)
    guest_phone = Column(String, nullable=True)
    guest_email = Column(String, nullable=True)
    guest_city = Column(String, nullable=True)
    guest_nationality = Column(String, nullable=True)
    guest_address = Column(Text, nullable=True)
    adults = Column(Integer, default=1, nullable=False)
    children = Column(Integer, default=0, nullable=False)

    # Company details
    company_name = Column(String, nullable=True)
    company_gstin = Column(String, nullable=True)
    company_address = Column(Text, nullable=True)

    # Stay window, check_out exclusive
    check_in = Column(DateTime, nullable=False)
    check_out = Column(DateTime, nullable=False)
    actual_checkout_time = Column(DateTime, nullable=True)

    # Pricing inputs
    plan_code = Column(String, nullable=True)
    pricing_type = Column(
        Enum(PricingType), default=PricingType.BASE_EXCLUSIVE, nullable=False
    )
    final_room_price = Column(Numeric(12, 2), nullable=True)
    gst_enabled = Column(Boolean, default=True, nullable=False)
    discount_percent = Column(Numeric(5, 2), default=0, nullable=False)
    discount_scope = Column(
        Enum(DiscountScope), default=DiscountScope.TOTAL, nullable=False
    )
    round_off_enabled = Column(Boolean, default=False, nullable=False)

    # Food inputs
    food_discount_percent = Column(Numeric(5, 2), default=0, nullable=False)
    food_gst_enabled = Column(Boolean, default=True, nullable=False)

    # Derived fields, written only by the pricing engine
    nights = Column(Integer, default=0, nullable=False)
    room_rate = Column(Numeric(12, 2), default=0, nullable=False)
    room_base = Column(Numeric(12, 2), default=0, nullable=False)
    extras_base = Column(Numeric(12, 2), default=0, nullable=False)
    discount_amount = Column(Numeric(12, 2), default=0, nullable=False)
    taxable = Column(Numeric(12, 2), default=0, nullable=False)
    cgst = Column(Numeric(12, 2), default=0, nullable=False)
    sgst = Column(Numeric(12, 2), default=0, nullable=False)
    food_subtotal = Column(Numeric(12, 2), default=0, nullable=False)
    food_discount_amount = Column(Numeric(12, 2), default=0, nullable=False)
    food_gst = Column(Numeric(12, 2), default=0, nullable=False)
    food_total = Column(Numeric(12, 2), default=0, nullable=False)
    round_off_amount = Column(Numeric(12, 2), default=0, nullable=False)
    grand_total = Column(Numeric(12, 2), default=0, nullable=False)
    advance_paid = Column(Numeric(12, 2), default=0, nullable=False)
    balance_due = Column(Numeric(12, 2), default=0, nullable=False)
    final_payment_received = Column(Boolean, default=False, nullable=False)
    final_payment_amount = Column(Numeric(12, 2), default=0, nullable=False)
    final_payment_mode = Column(Enum(PaymentMode), nullable=True)

    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    room = relationship("Room", back_populates="bookings")
    services = relationship(
        "AddedService",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="AddedService.position",
    )
    advances = relationship(
        "Advance",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Advance.id",
    )

    @property
    def food_totals(self) -> dict:
        return {
            "subtotal": self.food_subtotal,
            "discount_amount": self.food_discount_amount,
            "gst": self.food_gst,
            "total": self.food_total,
        }


class AddedService(Base):
    __tablename__ = "booking_added_services"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)
    position = Column(Integer, default=0, nullable=False)
    name = Column(String, nullable=False)
    price = Column(Numeric(12, 2), default=0, nullable=False)
    days = Column(JSON, nullable=False, default=list)  # night indexes, 1-based
    gst_enabled = Column(Boolean, default=True, nullable=False)

    booking = relationship("Booking", back_populates="services")


class Advance(Base):
    __tablename__ = "booking_advances"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    mode = Column(Enum(PaymentMode), default=PaymentMode.CASH, nullable=False)
    date = Column(DateTime, default=utcnow, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    booking = relationship("Booking", back_populates="advances")

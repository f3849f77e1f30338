from hotelops.models.base import Base
from hotelops.models.booking import (
    AddedService,
    Advance,
    Booking,
    BookingStatus,
    DiscountScope,
    PaymentMode,
    PricingType,
)
from hotelops.models.food_order import FoodOrder, FoodOrderStatus, FoodPaymentStatus
from hotelops.models.invoice import RoomInvoice
from hotelops.models.room import Room, RoomPlan, RoomStatus
from hotelops.models.transaction import Transaction, TransactionSource, TransactionType

__all__ = [
    "Base",
    "Room",
    "RoomPlan",
    "RoomStatus",
    "Booking",
    "BookingStatus",
    "PricingType",
    "DiscountScope",
    "PaymentMode",
    "AddedService",
    "Advance",
    "RoomInvoice",
    "FoodOrder",
    "FoodOrderStatus",
    "FoodPaymentStatus",
    "Transaction",
    "TransactionType",
    "TransactionSource",
]

from .billing import FoodBillingSummary, FoodOrderOut, InvoiceResponse, TransactionResponse
from .booking import (
    AdvanceCreate,
    BlockConvert,
    BlockCreate,
    BlockSelectedCreate,
    BookingCreate,
    BookingResponse,
    CalendarEvent,
    CheckoutRequest,
    CompanyDetails,
    ExtendStayRequest,
    ExtendStayResponse,
    FoodBillingUpdate,
    GuestDetails,
    RoomBillingUpdate,
    ServicesUpdate,
)
from .room import AvailableRoom, RoomOut

__all__ = [
    # Booking schemas
    "AdvanceCreate", "BlockConvert", "BlockCreate", "BlockSelectedCreate",
    "BookingCreate", "BookingResponse", "CalendarEvent", "CheckoutRequest",
    "CompanyDetails", "ExtendStayRequest", "ExtendStayResponse",
    "FoodBillingUpdate", "GuestDetails", "RoomBillingUpdate", "ServicesUpdate",
    # Billing schemas
    "FoodBillingSummary", "FoodOrderOut", "InvoiceResponse", "TransactionResponse",
    # Room schemas
    "AvailableRoom", "RoomOut",
]

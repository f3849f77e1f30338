from .advance_ledger_service import AdvanceLedgerService
from .booking_service import BookingService
from .calendar_service import CalendarService
from .checkout_service import CheckoutService
from .food_billing_service import FoodBillingService
from .invoice_service import InvoiceService
from .ledger_service import LedgerService
from .reservation_service import ReservationService
from .room_service import RoomService

__all__ = [
    "AdvanceLedgerService",
    "BookingService",
    "CalendarService",
    "CheckoutService",
    "FoodBillingService",
    "InvoiceService",
    "LedgerService",
    "ReservationService",
    "RoomService",
]

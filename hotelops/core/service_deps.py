"""
Service dependency injection utilities.

This module provides centralized service instantiation through dependency injection,
eliminating the repeated pattern of manually creating service instances in endpoints.
"""

from typing import Annotated, Callable, Type, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotelops.core.database import get_db
from hotelops.services.advance_ledger_service import AdvanceLedgerService
from hotelops.services.booking_service import BookingService
from hotelops.services.calendar_service import CalendarService
from hotelops.services.checkout_service import CheckoutService
from hotelops.services.invoice_service import InvoiceService
from hotelops.services.ledger_service import LedgerService
from hotelops.services.reservation_service import ReservationService
from hotelops.services.room_service import RoomService

T = TypeVar("T")


def get_service(service_class: Type[T]) -> Callable[[AsyncSession], T]:
    """
    Generic service dependency factory.

    Creates a dependency function that instantiates a service with a database session.

    Args:
        service_class: The service class to instantiate

    Returns:
        A dependency function that creates service instances
    """

    def dependency(db: AsyncSession = Depends(get_db)) -> T:
        return service_class(db)

    return dependency


# Pre-configured service dependencies
GetBookingService = Annotated[BookingService, Depends(get_service(BookingService))]
GetAdvanceLedgerService = Annotated[
    AdvanceLedgerService, Depends(get_service(AdvanceLedgerService))
]
GetCheckoutService = Annotated[CheckoutService, Depends(get_service(CheckoutService))]
GetReservationService = Annotated[
    ReservationService, Depends(get_service(ReservationService))
]
GetRoomService = Annotated[RoomService, Depends(get_service(RoomService))]
GetInvoiceService = Annotated[InvoiceService, Depends(get_service(InvoiceService))]
GetLedgerService = Annotated[LedgerService, Depends(get_service(LedgerService))]
GetCalendarService = Annotated[CalendarService, Depends(get_service(CalendarService))]

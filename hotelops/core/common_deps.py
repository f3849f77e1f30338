"""
Common dependencies for the hotel operations API.

This module provides convenient access to commonly used dependencies,
reducing boilerplate code in endpoint functions.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotelops.core.database import get_db
from hotelops.core.service_deps import (
    GetAdvanceLedgerService,
    GetBookingService,
    GetCalendarService,
    GetCheckoutService,
    GetInvoiceService,
    GetLedgerService,
    GetReservationService,
    GetRoomService,
)
from hotelops.core.tenant_deps import CurrentHotelDep

# Database dependencies
DatabaseDep = Annotated[AsyncSession, Depends(get_db)]

# Tenant dependencies
HotelIdDep = CurrentHotelDep

# Service type aliases for cleaner endpoint signatures
BookingServiceDep = GetBookingService
AdvanceLedgerServiceDep = GetAdvanceLedgerService
CheckoutServiceDep = GetCheckoutService
ReservationServiceDep = GetReservationService
InvoiceServiceDep = GetInvoiceService
RoomServiceDep = GetRoomService
LedgerServiceDep = GetLedgerService
CalendarServiceDep = GetCalendarService

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query, status

from hotelops.core.common_deps import (
    AdvanceLedgerServiceDep,
    BookingServiceDep,
    CalendarServiceDep,
    CheckoutServiceDep,
    HotelIdDep,
    InvoiceServiceDep,
)
from hotelops.models.booking import BookingStatus
from hotelops.schemas.billing import FoodBillingSummary, InvoiceResponse
from hotelops.schemas.booking import (
    AdvanceCreate,
    BlockConvert,
    BlockCreate,
    BlockSelectedCreate,
    BookingCreate,
    BookingResponse,
    CalendarEvent,
    CancelRequest,
    CheckoutRequest,
    CompanyDetails,
    ExtendStayRequest,
    ExtendStayResponse,
    FoodBillingUpdate,
    GuestDetails,
    RoomBillingUpdate,
    ServicesUpdate,
    UnblockRequest,
)
from hotelops.schemas.responses import CheckoutResponse

router = APIRouter()


# Listing and creation
@router.get("/", response_model=List[BookingResponse])
async def get_bookings(
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    status: Optional[List[BookingStatus]] = Query(
        None, description="Filter by booking status"
    ),
    room_id: Optional[int] = Query(None),
    check_in_from: Optional[datetime] = Query(None),
    check_in_to: Optional[datetime] = Query(None),
):
    """Get list of bookings with freshly computed totals"""
    return await service.list(
        hotel_id,
        statuses=[s.value for s in status or []],
        room_id=room_id,
        check_in_from=check_in_from,
        check_in_to=check_in_to,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Create a booking; 409 when the room is taken for any part of the stay"""
    return await service.create(hotel_id, booking_data)


@router.get("/calendar", response_model=List[CalendarEvent])
async def get_calendar_events(
    service: CalendarServiceDep,
    hotel_id: HotelIdDep,
    start: datetime = Query(..., alias="from"),
    end: datetime = Query(..., alias="to"),
):
    """Get calendar events (bookings) overlapping the window"""
    return await service.get_calendar_events(hotel_id, start, end)


# Admin holds
@router.post("/block", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def block_room(
    block_data: BlockCreate,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Block a room (BLOCKED or MAINTENANCE) for a date range"""
    return await service.block(hotel_id, block_data)


@router.post(
    "/block-selected",
    response_model=List[BookingResponse],
    status_code=status.HTTP_201_CREATED,
)
async def block_selected_rooms(
    block_data: BlockSelectedCreate,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Block several rooms at once; all or nothing"""
    return await service.block_selected(hotel_id, block_data)


@router.patch("/unblock/{booking_id}", response_model=BookingResponse)
async def unblock_room(
    booking_id: int,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
    unblock_data: Optional[UnblockRequest] = None,
):
    """Release a block"""
    reason = unblock_data.reason if unblock_data else None
    return await service.unblock(booking_id, hotel_id, reason)


@router.patch("/{booking_id}/convert", response_model=BookingResponse)
async def convert_block(
    booking_id: int,
    convert_data: BlockConvert,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Turn a block into a guest booking"""
    return await service.convert_block(booking_id, hotel_id, convert_data)


# Single booking
@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Get a booking; totals are recomputed before responding"""
    return await service.get(booking_id, hotel_id)


@router.patch("/{booking_id}/room-billing", response_model=BookingResponse)
async def update_room_billing(
    booking_id: int,
    billing_data: RoomBillingUpdate,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Update plan, pricing type, GST, discount or round-off"""
    return await service.update_room_billing(booking_id, hotel_id, billing_data)


@router.patch("/{booking_id}/services", response_model=BookingResponse)
async def update_services(
    booking_id: int,
    services_data: ServicesUpdate,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Replace the added services"""
    return await service.update_services(booking_id, hotel_id, services_data)


@router.get("/{booking_id}/food-billing", response_model=FoodBillingSummary)
async def get_food_billing(
    booking_id: int,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Restaurant orders charged to this stay"""
    summary = await service.get_food_billing(booking_id, hotel_id)
    return FoodBillingSummary.model_validate(summary, from_attributes=True)


@router.get("/{booking_id}/invoice", response_model=InvoiceResponse)
async def get_booking_invoice(
    booking_id: int,
    service: InvoiceServiceDep,
    hotel_id: HotelIdDep,
):
    """Invoice issued when the booking was checked out"""
    return await service.get_for_booking(booking_id, hotel_id)


@router.patch("/{booking_id}/food-billing", response_model=BookingResponse)
async def update_food_billing(
    booking_id: int,
    food_data: FoodBillingUpdate,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Update the food discount or food GST switch"""
    return await service.update_food_billing(booking_id, hotel_id, food_data)


@router.patch("/{booking_id}/guest", response_model=BookingResponse)
async def update_guest(
    booking_id: int,
    guest_data: GuestDetails,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    return await service.update_guest(booking_id, hotel_id, guest_data)


@router.patch("/{booking_id}/company", response_model=BookingResponse)
async def update_company(
    booking_id: int,
    company_data: CompanyDetails,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    return await service.update_company(booking_id, hotel_id, company_data)


# Advances
@router.post(
    "/{booking_id}/advances",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_advance(
    booking_id: int,
    advance_data: AdvanceCreate,
    service: AdvanceLedgerServiceDep,
    hotel_id: HotelIdDep,
):
    """Record an advance payment"""
    return await service.add_advance(booking_id, hotel_id, advance_data)


@router.delete("/{booking_id}/advances/{advance_id}", response_model=BookingResponse)
async def remove_advance(
    booking_id: int,
    advance_id: int,
    service: AdvanceLedgerServiceDep,
    hotel_id: HotelIdDep,
):
    """Remove an advance payment"""
    return await service.remove_advance(booking_id, hotel_id, advance_id)


# Lifecycle
@router.post("/{booking_id}/checkout", response_model=CheckoutResponse)
async def checkout_booking(
    booking_id: int,
    service: CheckoutServiceDep,
    hotel_id: HotelIdDep,
    checkout_data: Optional[CheckoutRequest] = None,
):
    """Check out: final pricing, invoice, food settlement, room release and ledger entry"""
    mode = checkout_data.final_payment_mode if checkout_data else None
    booking, invoice = await service.checkout(booking_id, hotel_id, mode)
    return CheckoutResponse(
        message="Checkout completed",
        booking=BookingResponse.model_validate(booking),
        invoice=InvoiceResponse.model_validate(invoice),
    )


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
    cancel_data: Optional[CancelRequest] = None,
):
    """Cancel a booking and free the room"""
    reason = cancel_data.reason if cancel_data else None
    return await service.cancel(booking_id, hotel_id, reason)


@router.post("/{booking_id}/check-in", response_model=BookingResponse)
async def check_in_booking(
    booking_id: int,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Check in a confirmed booking"""
    return await service.check_in(booking_id, hotel_id)


@router.post("/{booking_id}/no-show", response_model=BookingResponse)
async def mark_no_show(
    booking_id: int,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    return await service.mark_no_show(booking_id, hotel_id)


@router.post("/{booking_id}/extend-stay", response_model=ExtendStayResponse)
async def extend_stay(
    booking_id: int,
    extend_data: ExtendStayRequest,
    service: BookingServiceDep,
    hotel_id: HotelIdDep,
):
    """Move the checkout later; 409 ROOM_ALREADY_BOOKED on a hard conflict"""
    booking, check = await service.extend_stay(
        booking_id, hotel_id, extend_data.new_check_out
    )
    message = "Stay extended successfully"
    if check.warning:
        message = (
            "Stay extended; the room has another check-in later the same day "
            f"(booking {check.conflicting_booking.id})"
        )
    return ExtendStayResponse(
        message=message,
        warning=check.warning,
        conflicting_booking_id=(
            check.conflicting_booking.id if check.conflicting_booking else None
        ),
        booking=BookingResponse.model_validate(booking),
    )

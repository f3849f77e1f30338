from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query

from hotelops.core.common_deps import (
    HotelIdDep,
    InvoiceServiceDep,
    ReservationServiceDep,
    RoomServiceDep,
)
from hotelops.schemas.billing import InvoiceResponse
from hotelops.schemas.room import AvailableRoom, RoomOut

router = APIRouter()


@router.get("/", response_model=List[RoomOut])
async def get_rooms(
    service: RoomServiceDep,
    hotel_id: HotelIdDep,
    room_type: Optional[str] = Query(None, alias="type"),
):
    """Rooms of the hotel with their rate plans"""
    return await service.list_for_hotel(hotel_id, room_type)


@router.get("/available", response_model=List[AvailableRoom])
async def get_available_rooms(
    service: ReservationServiceDep,
    hotel_id: HotelIdDep,
    check_in: datetime = Query(..., alias="checkIn"),
    check_out: datetime = Query(..., alias="checkOut"),
    room_type: Optional[str] = Query(None, alias="type"),
):
    """Rooms free for the window, flagged when a previous guest leaves the same day"""
    rows = await service.list_available_rooms(hotel_id, check_in, check_out, room_type)
    return [
        AvailableRoom(
            **RoomOut.model_validate(row["room"]).model_dump(),
            available=row["available"],
            has_same_day_checkout=row["has_same_day_checkout"],
            checkout_time=row["checkout_time"],
        )
        for row in rows
    ]


@router.get("/{room_id}/invoices", response_model=List[InvoiceResponse])
async def get_room_invoices(
    room_id: int,
    service: InvoiceServiceDep,
    hotel_id: HotelIdDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """Checkout invoices issued for a room, newest first"""
    return await service.list_for_room(room_id, hotel_id, skip, limit)

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from hotelops.models.room import RoomStatus


class RoomPlanOut(BaseModel):
    code: str
    name: Optional[str] = None
    single_price: Decimal
    double_price: Decimal

    class Config:
        from_attributes = True


class RoomOut(BaseModel):
    id: int
    hotel_id: int
    number: str
    type: Optional[str] = None
    floor: Optional[int] = None
    status: RoomStatus
    base_rate: Optional[Decimal] = None
    max_guests: int
    plans: List[RoomPlanOut] = []

    class Config:
        from_attributes = True


class AvailableRoom(RoomOut):
    """Room free for the requested window, with same-day turnaround metadata."""

    available: bool = True
    has_same_day_checkout: bool = Field(
        False,
        description="A previous stay checks out on the requested check-in date",
    )
    checkout_time: Optional[datetime] = Field(
        None, description="Checkout time of that previous stay"
    )

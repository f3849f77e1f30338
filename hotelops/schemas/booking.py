from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from hotelops.models.booking import (
    BookingStatus,
    DiscountScope,
    PaymentMode,
    PricingType,
)


class AddedServiceIn(BaseModel):
    name: str = Field(..., min_length=1, example="Extra bed")
    price: Decimal = Field(..., ge=0, description="Price per selected night")
    days: Optional[List[int]] = Field(
        None,
        description="Nights (1-based) the service applies to. Defaults to every night on creation.",
        example=[1, 2],
    )
    gst_enabled: bool = True


class AddedServiceOut(BaseModel):
    id: int
    name: str
    price: Decimal
    days: List[int]
    gst_enabled: bool

    class Config:
        from_attributes = True


class AdvanceCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Advance amount must be greater than 0")
    mode: PaymentMode = PaymentMode.CASH
    note: Optional[str] = None
    date: Optional[datetime] = None


class AdvanceOut(BaseModel):
    id: int
    amount: Decimal
    mode: PaymentMode
    date: datetime
    note: Optional[str] = None

    class Config:
        from_attributes = True


class GuestDetails(BaseModel):
    guest_name: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_email: Optional[str] = None
    guest_city: Optional[str] = None
    guest_nationality: Optional[str] = None
    guest_address: Optional[str] = None
    adults: Optional[int] = Field(None, ge=1)
    children: Optional[int] = Field(None, ge=0)


class CompanyDetails(BaseModel):
    company_name: Optional[str] = None
    company_gstin: Optional[str] = None
    company_address: Optional[str] = None


class RoomBillingUpdate(BaseModel):
    """Room pricing inputs; unset fields keep their stored value"""

    plan_code: Optional[str] = None
    pricing_type: Optional[PricingType] = None
    final_room_price: Optional[Decimal] = Field(None, ge=0)
    gst_enabled: Optional[bool] = None
    discount_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    discount_scope: Optional[DiscountScope] = None
    round_off_enabled: Optional[bool] = None


class FoodBillingUpdate(BaseModel):
    food_discount_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    food_gst_enabled: Optional[bool] = None


class ServicesUpdate(BaseModel):
    """Replaces the whole list of added services"""

    services: List[AddedServiceIn] = Field(default_factory=list)


class StayDetails(GuestDetails, CompanyDetails):
    """Guest, company and pricing inputs shared by creation and block conversion"""

    guest_name: str = Field(..., min_length=1, example="Asha Rao")
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)

    plan_code: Optional[str] = Field(None, example="DELUXE_DOUBLE")
    pricing_type: PricingType = PricingType.BASE_EXCLUSIVE
    final_room_price: Optional[Decimal] = Field(None, ge=0)
    gst_enabled: bool = True
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    discount_scope: DiscountScope = DiscountScope.TOTAL
    round_off_enabled: bool = False
    food_discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    food_gst_enabled: bool = True

    services: List[AddedServiceIn] = Field(default_factory=list)
    advance_paid: Optional[Decimal] = Field(
        None, ge=0, description="Initial advance, recorded as the first ledger entry"
    )
    advance_payment_mode: PaymentMode = PaymentMode.CASH
    notes: Optional[str] = None


class BookingCreate(StayDetails):
    room_id: int
    check_in: datetime
    check_out: datetime
    status: BookingStatus = BookingStatus.OCCUPIED

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: BookingStatus) -> BookingStatus:
        if value not in (BookingStatus.OCCUPIED, BookingStatus.CONFIRMED):
            raise ValueError("New bookings must be OCCUPIED or CONFIRMED")
        return value


class BlockConvert(StayDetails):
    """Schema for turning an admin block into a guest booking"""


class BlockCreate(BaseModel):
    room_id: int
    check_in: datetime
    check_out: datetime
    status: BookingStatus = BookingStatus.BLOCKED
    reason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: BookingStatus) -> BookingStatus:
        if value not in (BookingStatus.BLOCKED, BookingStatus.MAINTENANCE):
            raise ValueError("Blocks must be BLOCKED or MAINTENANCE")
        return value


class BlockSelectedCreate(BaseModel):
    room_ids: List[int] = Field(..., min_length=1)
    check_in: datetime
    check_out: datetime
    status: BookingStatus = BookingStatus.BLOCKED
    reason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: BookingStatus) -> BookingStatus:
        if value not in (BookingStatus.BLOCKED, BookingStatus.MAINTENANCE):
            raise ValueError("Blocks must be BLOCKED or MAINTENANCE")
        return value


class UnblockRequest(BaseModel):
    reason: Optional[str] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = None


class CheckoutRequest(BaseModel):
    final_payment_mode: Optional[PaymentMode] = Field(
        None, description="Settle the remaining balance with this mode before checkout"
    )


class ExtendStayRequest(BaseModel):
    new_check_out: datetime


class FoodTotals(BaseModel):
    subtotal: Decimal
    discount_amount: Decimal
    gst: Decimal
    total: Decimal


class BookingResponse(BaseModel):
    id: int
    hotel_id: int
    room_id: int
    status: BookingStatus

    guest_name: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_email: Optional[str] = None
    guest_city: Optional[str] = None
    guest_nationality: Optional[str] = None
    guest_address: Optional[str] = None
    adults: int
    children: int
    company_name: Optional[str] = None
    company_gstin: Optional[str] = None
    company_address: Optional[str] = None

    check_in: datetime
    check_out: datetime
    actual_checkout_time: Optional[datetime] = None

    plan_code: Optional[str] = None
    pricing_type: PricingType
    final_room_price: Optional[Decimal] = None
    gst_enabled: bool
    discount_percent: Decimal
    discount_scope: DiscountScope
    round_off_enabled: bool
    food_discount_percent: Decimal
    food_gst_enabled: bool

    nights: int
    room_rate: Decimal
    room_base: Decimal
    extras_base: Decimal
    discount_amount: Decimal
    taxable: Decimal
    cgst: Decimal
    sgst: Decimal
    food_totals: FoodTotals
    round_off_amount: Decimal
    grand_total: Decimal
    advance_paid: Decimal
    balance_due: Decimal
    final_payment_received: bool
    final_payment_amount: Decimal
    final_payment_mode: Optional[PaymentMode] = None

    services: List[AddedServiceOut] = []
    advances: List[AdvanceOut] = []
    notes: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ExtendStayResponse(BaseModel):
    success: bool = True
    message: str
    warning: bool = False
    conflicting_booking_id: Optional[int] = None
    booking: BookingResponse


class CalendarPayment(BaseModel):
    status: str = Field(..., description="DUE, PARTIAL or PAID", example="PARTIAL")
    grand_total: Decimal
    advance_paid: Decimal
    balance_due: Decimal


class CalendarEvent(BaseModel):
    """Schema for calendar events/bookings"""

    id: int
    title: str
    start: datetime
    end: datetime
    room_id: int
    room_number: Optional[str] = None
    guest_name: Optional[str] = None
    status: BookingStatus
    payment: CalendarPayment

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel

from hotelops.models.food_order import FoodOrderStatus, FoodPaymentStatus
from hotelops.models.transaction import TransactionSource, TransactionType


class FoodOrderOut(BaseModel):
    id: int
    room_id: Optional[int] = None
    source: Optional[str] = None
    items: List[Any] = []
    subtotal: Decimal
    gst: Decimal
    total: Decimal
    status: FoodOrderStatus
    payment_status: FoodPaymentStatus
    created_at: datetime

    class Config:
        from_attributes = True


class FoodBillingSummary(BaseModel):
    """What the restaurant charges to a stay"""

    orders: List[FoodOrderOut]
    subtotal: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    gst: Decimal
    total: Decimal
    gst_enabled: bool

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: int
    hotel_id: int
    room_id: int
    booking_id: int
    invoice_number: str
    pricing_version: int

    room_number: Optional[str] = None
    room_type: Optional[str] = None

    guest_name: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_email: Optional[str] = None
    guest_city: Optional[str] = None
    guest_nationality: Optional[str] = None
    guest_address: Optional[str] = None
    adults: Optional[int] = None
    children: Optional[int] = None

    company_name: Optional[str] = None
    company_gstin: Optional[str] = None
    company_address: Optional[str] = None

    check_in: datetime
    check_out: datetime
    actual_checkout_time: datetime
    stay_nights: int
    plan_code: Optional[str] = None
    pricing_type: str

    room_rate: Decimal
    room_base: Decimal
    extras_base: Decimal
    extra_services: List[Any] = []

    discount_percent: Decimal
    discount_scope: str
    discount_amount: Decimal
    taxable: Decimal
    gst_enabled: bool
    cgst: Decimal
    sgst: Decimal

    food_orders: List[Any] = []
    food_subtotal: Decimal
    food_discount_percent: Decimal
    food_discount_amount: Decimal
    food_gst: Decimal
    food_total: Decimal
    food_gst_enabled: bool

    round_off_amount: Decimal
    grand_total: Decimal
    advances: List[Any] = []
    advance_paid: Decimal
    balance_due: Decimal
    final_payment_mode: Optional[str] = None
    final_payment_received: bool
    final_payment_amount: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    id: int
    hotel_id: int
    type: TransactionType
    source: TransactionSource
    amount: Decimal
    description: str
    reference_id: Optional[str] = None
    payment_mode: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

"""
Pricing engine: the single source of billing truth for a room booking.

``compute`` derives every monetary field of a booking from its raw inputs, the
room's rate card and the food billing summary. It performs no I/O and never
reads previously derived fields, so running it on a fetched booking always
yields the same numbers as running it at creation time.

Order of evaluation:

1. validate the stay window
2. nights (ceil of the window in days, at least one)
3. room base (plan rate, base-rate fallback, or back-split of a GST-inclusive price)
4. extras base (price * number of selected nights, per service)
5. scope-aware discount, clamped to each pool
6. taxable amount
7. GST on the discounted pools (inclusive room GST is never re-taxed)
8. food totals, taken verbatim from the food billing summary
9. grand total
10. optional round-off to a whole currency unit
11. advances
12. balance due
13. final payment flag
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Optional, Sequence, Set, Tuple

from hotelops.core.config import settings
from hotelops.core.exceptions import ValidationError
from hotelops.models.booking import BookingStatus, DiscountScope, PricingType

PRICING_ENGINE_VERSION = 1

CENT = Decimal("0.01")
UNIT = Decimal("1")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

# Admin holds carry no financials
HOLD_STATUSES = {BookingStatus.BLOCKED, BookingStatus.MAINTENANCE}

OCCUPANCY_SINGLE = "SINGLE"
OCCUPANCY_DOUBLE = "DOUBLE"


def money(value: Any) -> Decimal:
    """Quantize a number to currency precision."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FoodSummary:
    subtotal: Decimal = ZERO
    discount_percent: Decimal = ZERO
    discount_amount: Decimal = ZERO
    gst: Decimal = ZERO
    total: Decimal = ZERO
    gst_enabled: bool = True
    orders: Tuple[Any, ...] = ()

    @classmethod
    def empty(cls, gst_enabled: bool = True) -> "FoodSummary":
        return cls(gst_enabled=gst_enabled)


@dataclass
class PricingSnapshot:
    nights: int
    room_rate: Decimal = ZERO
    room_base: Decimal = ZERO
    room_gst_from_inclusive: Decimal = ZERO
    extras_base: Decimal = ZERO
    discount_on_room: Decimal = ZERO
    discount_on_extras: Decimal = ZERO
    discount_amount: Decimal = ZERO
    taxable: Decimal = ZERO
    room_gst: Decimal = ZERO
    extras_gst: Decimal = ZERO
    total_gst: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    food_subtotal: Decimal = ZERO
    food_discount_amount: Decimal = ZERO
    food_gst: Decimal = ZERO
    food_total: Decimal = ZERO
    round_off_amount: Decimal = ZERO
    grand_total: Decimal = ZERO
    advance_paid: Decimal = ZERO
    balance_due: Decimal = ZERO
    final_payment_received: bool = False
    final_payment_amount: Decimal = ZERO


def count_nights(check_in, check_out) -> int:
    """Billable nights: ceil of the window in days, never less than one."""
    delta = check_out - check_in
    nights = delta.days
    if delta.seconds or delta.microseconds:
        nights += 1
    return max(1, nights)


def validate_stay_window(check_in, check_out) -> None:
    if check_in is None or check_out is None:
        raise ValidationError("check_in and check_out are required", "check_in")
    if check_in >= check_out:
        raise ValidationError(
            "check_in must be before check_out",
            "check_out",
            f"{check_out} (check_in: {check_in})",
        )


def split_plan_code(plan_code: Optional[str]) -> Tuple[Optional[str], str]:
    """Split ``DELUXE_DOUBLE`` into ``("DELUXE", "DOUBLE")``.

    Codes without an occupancy suffix are priced at the double rate.
    """
    if not plan_code:
        return None, OCCUPANCY_DOUBLE
    code, sep, suffix = plan_code.rpartition("_")
    if sep and suffix.upper() in (OCCUPANCY_SINGLE, OCCUPANCY_DOUBLE):
        return code, suffix.upper()
    return plan_code, OCCUPANCY_DOUBLE


def resolve_room_rate(room, plan_code: Optional[str]) -> Decimal:
    """Nightly rate for a plan code, falling back to the room's base rate."""
    code, occupancy = split_plan_code(plan_code)
    rate = None
    if code is not None:
        for plan in getattr(room, "plans", None) or []:
            if plan.code == code:
                rate = (
                    plan.single_price
                    if occupancy == OCCUPANCY_SINGLE
                    else plan.double_price
                )
                break

    if not rate:
        rate = getattr(room, "base_rate", None)
        if rate is None:
            raise ValidationError(
                f"Plan '{plan_code}' not found and room has no base rate",
                "plan_code",
                plan_code,
            )

    rate = money(rate)
    if rate < 0:
        raise ValidationError("Room rate cannot be negative", "plan_code", plan_code)
    return rate


def normalize_days(days: Optional[Iterable[Any]]) -> List[int]:
    """Deduplicated, sorted night indexes."""
    result: Set[int] = set()
    for day in days or []:
        try:
            result.add(int(day))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid night index {day!r}", "days", str(day))
    return sorted(result)


def _percent(value: Any, field_name: str) -> Decimal:
    percent = Decimal(str(value)) if value is not None else Decimal("0")
    if percent < 0 or percent > HUNDRED:
        raise ValidationError(
            f"{field_name} must be between 0 and 100", field_name, str(value)
        )
    return percent


def _non_negative(value: Any, field_name: str) -> Decimal:
    amount = money(value)
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative", field_name, str(value))
    return amount


def _service_bases(services: Sequence[Any], nights: int) -> List[Tuple[Any, Decimal]]:
    bases = []
    for index, service in enumerate(services, start=1):
        label = getattr(service, "name", None) or f"#{index}"
        days = normalize_days(getattr(service, "days", None))
        if not days:
            raise ValidationError(
                f"Please select at least one day for service \"{label}\"",
                "days",
            )
        out_of_range = [d for d in days if d < 1 or d > nights]
        if out_of_range:
            raise ValidationError(
                f"Service \"{label}\" has nights outside 1..{nights}: {out_of_range}",
                "days",
                str(out_of_range),
            )
        price = _non_negative(getattr(service, "price", None), "price")
        bases.append((service, money(price * len(days))))
    return bases


def _hold_snapshot(nights: int) -> PricingSnapshot:
    return PricingSnapshot(nights=nights, final_payment_received=True)


def compute(
    booking,
    room,
    food_summary: Optional[FoodSummary] = None,
    gst_rate: Optional[Decimal] = None,
) -> PricingSnapshot:
    """Derive the full financial snapshot of ``booking``. Pure and idempotent."""
    rate = Decimal(str(gst_rate)) if gst_rate is not None else settings.GST_RATE

    validate_stay_window(booking.check_in, booking.check_out)
    nights = count_nights(booking.check_in, booking.check_out)

    if booking.status in HOLD_STATUSES:
        return _hold_snapshot(nights)

    snapshot = PricingSnapshot(nights=nights)

    # Room
    pricing_type = booking.pricing_type or PricingType.BASE_EXCLUSIVE
    final_price = _non_negative(booking.final_room_price, "final_room_price")
    inclusive = pricing_type == PricingType.FINAL_INCLUSIVE and final_price > 0

    if inclusive:
        nightly_base = money(final_price / (1 + rate))
        nightly_gst = money(final_price - nightly_base)
        snapshot.room_rate = nightly_base
        snapshot.room_base = money(nightly_base * nights)
        snapshot.room_gst_from_inclusive = money(nightly_gst * nights)
    else:
        snapshot.room_rate = resolve_room_rate(room, booking.plan_code)
        snapshot.room_base = money(snapshot.room_rate * nights)

    # Extras
    service_bases = _service_bases(booking.services or [], nights)
    snapshot.extras_base = money(sum((base for _, base in service_bases), ZERO))

    # Discount, each pool discounted independently and clamped to itself
    percent = _percent(booking.discount_percent, "discount_percent")
    scope = booking.discount_scope or DiscountScope.TOTAL
    if scope in (DiscountScope.TOTAL, DiscountScope.ROOM):
        snapshot.discount_on_room = min(
            money(snapshot.room_base * percent / HUNDRED), snapshot.room_base
        )
    if scope in (DiscountScope.TOTAL, DiscountScope.EXTRAS):
        snapshot.discount_on_extras = min(
            money(snapshot.extras_base * percent / HUNDRED), snapshot.extras_base
        )
    snapshot.discount_amount = snapshot.discount_on_room + snapshot.discount_on_extras

    net_room = max(snapshot.room_base - snapshot.discount_on_room, ZERO)
    net_extras = max(snapshot.extras_base - snapshot.discount_on_extras, ZERO)
    snapshot.taxable = money(net_room + net_extras)

    # GST, strictly after discount
    if booking.gst_enabled is not False:
        if not inclusive:
            snapshot.room_gst = money(net_room * rate)
        if snapshot.extras_base > 0:
            taxable_extras = sum(
                (
                    base
                    for service, base in service_bases
                    if getattr(service, "gst_enabled", True) is not False
                ),
                ZERO,
            )
            snapshot.extras_gst = money(
                taxable_extras * net_extras / snapshot.extras_base * rate
            )
    snapshot.total_gst = money(
        snapshot.room_gst_from_inclusive + snapshot.room_gst + snapshot.extras_gst
    )
    snapshot.cgst = money(snapshot.total_gst / 2)
    snapshot.sgst = snapshot.total_gst - snapshot.cgst

    # Food
    food = food_summary or FoodSummary.empty()
    snapshot.food_subtotal = money(food.subtotal)
    snapshot.food_discount_amount = money(food.discount_amount)
    snapshot.food_gst = money(food.gst)
    snapshot.food_total = money(food.total)

    grand_total = money(snapshot.taxable + snapshot.total_gst + snapshot.food_total)

    if booking.round_off_enabled:
        rounded = grand_total.quantize(UNIT, rounding=ROUND_HALF_UP)
        snapshot.round_off_amount = money(rounded - grand_total)
        grand_total = money(rounded)
    snapshot.grand_total = grand_total

    # Advances
    snapshot.advance_paid = money(
        sum((money(a.amount) for a in booking.advances or []), ZERO)
    )
    snapshot.balance_due = max(
        money(snapshot.grand_total - snapshot.advance_paid), ZERO
    )
    snapshot.final_payment_received = snapshot.balance_due == 0
    snapshot.final_payment_amount = (
        snapshot.grand_total if snapshot.final_payment_received else ZERO
    )
    return snapshot


def apply(booking, snapshot: PricingSnapshot):
    """Write a snapshot onto the booking's derived fields."""
    booking.nights = snapshot.nights
    booking.room_rate = snapshot.room_rate
    booking.room_base = snapshot.room_base
    booking.extras_base = snapshot.extras_base
    booking.discount_amount = snapshot.discount_amount
    booking.taxable = snapshot.taxable
    booking.cgst = snapshot.cgst
    booking.sgst = snapshot.sgst
    booking.food_subtotal = snapshot.food_subtotal
    booking.food_discount_amount = snapshot.food_discount_amount
    booking.food_gst = snapshot.food_gst
    booking.food_total = snapshot.food_total
    booking.round_off_amount = snapshot.round_off_amount
    booking.grand_total = snapshot.grand_total
    booking.advance_paid = snapshot.advance_paid
    booking.balance_due = snapshot.balance_due
    booking.final_payment_received = snapshot.final_payment_received
    booking.final_payment_amount = snapshot.final_payment_amount
    return booking


def recompute(booking, room, food_summary: Optional[FoodSummary] = None):
    """Recompute and write back every derived field of ``booking``."""
    return apply(booking, compute(booking, room, food_summary))


def remaining_payable(booking) -> Decimal:
    """Outstanding balance rounded to a whole unit, as shown at the desk."""
    return money(booking.balance_due).quantize(UNIT, rounding=ROUND_HALF_UP)


def ensure_advance_fits(booking, amount: Decimal, tolerance: Optional[Decimal] = None):
    """Reject an advance that overshoots the remaining balance by more than the tolerance."""
    tolerance = tolerance if tolerance is not None else settings.ADVANCE_TOLERANCE
    amount = money(amount)
    if amount <= 0:
        raise ValidationError("Advance amount must be greater than 0", "amount", str(amount))

    remaining = remaining_payable(booking)
    if amount - remaining > tolerance:
        raise ValidationError(
            f"Advance of {amount} exceeds the remaining payable {remaining}",
            "amount",
            str(amount),
        )

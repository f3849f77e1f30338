"""
Tests for hotelops/services/pricing_engine.py
Covers: nights, plan resolution, inclusive back-split, scoped discounts,
        GST after discount, food totals, round-off, advances and balance
"""
import random
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from hotelops.core.exceptions import ValidationError
from hotelops.models.booking import BookingStatus, DiscountScope, PricingType
from hotelops.services import pricing_engine
from hotelops.services.food_billing_service import summarize_orders
from hotelops.services.pricing_engine import FoodSummary, compute, money


# ── helpers ──────────────────────────────────────────────────────────

def _room(base_rate=Decimal("1800"), plans=None):
    if plans is None:
        plans = [
            SimpleNamespace(
                code="DELUXE", single_price=Decimal("2000"), double_price=Decimal("2500")
            )
        ]
    return SimpleNamespace(base_rate=base_rate, plans=plans)


def _service(name="Breakfast", price="300", days=(1,), gst_enabled=True):
    return SimpleNamespace(
        name=name, price=Decimal(price), days=list(days), gst_enabled=gst_enabled
    )


def _advance(amount):
    return SimpleNamespace(amount=Decimal(amount))


def _booking(**overrides):
    fields = dict(
        status=BookingStatus.OCCUPIED,
        check_in=datetime(2025, 1, 1, 12, 0),
        check_out=datetime(2025, 1, 3, 10, 0),
        plan_code="DELUXE_DOUBLE",
        pricing_type=PricingType.BASE_EXCLUSIVE,
        final_room_price=None,
        gst_enabled=True,
        discount_percent=Decimal("0"),
        discount_scope=DiscountScope.TOTAL,
        round_off_enabled=False,
        services=[],
        advances=[],
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


# ── worked examples ──────────────────────────────────────────────────

def test_plan_rate_with_total_discount_and_gst():
    booking = _booking(discount_percent=Decimal("10"))

    snap = compute(booking, _room())

    assert snap.nights == 2
    assert snap.room_base == Decimal("5000.00")
    assert snap.discount_amount == Decimal("500.00")
    assert snap.taxable == Decimal("4500.00")
    assert snap.total_gst == Decimal("225.00")
    assert snap.cgst == Decimal("112.50")
    assert snap.sgst == Decimal("112.50")
    assert snap.grand_total == Decimal("4725.00")
    assert snap.balance_due == Decimal("4725.00")
    assert snap.final_payment_received is False


def test_inclusive_price_is_split_and_not_taxed_again():
    booking = _booking(
        check_in=datetime(2025, 1, 1, 12, 0),
        check_out=datetime(2025, 1, 2, 11, 0),
        pricing_type=PricingType.FINAL_INCLUSIVE,
        final_room_price=Decimal("1050"),
    )

    snap = compute(booking, _room())

    assert snap.nights == 1
    assert snap.room_rate == Decimal("1000.00")
    assert snap.room_base == Decimal("1000.00")
    assert snap.room_gst_from_inclusive == Decimal("50.00")
    assert snap.room_gst == Decimal("0")
    assert snap.total_gst == Decimal("50.00")
    assert snap.grand_total == Decimal("1050.00")


def test_inclusive_gst_counts_even_with_gst_disabled():
    booking = _booking(
        pricing_type=PricingType.FINAL_INCLUSIVE,
        final_room_price=Decimal("1050"),
        gst_enabled=False,
        services=[_service(price="100", days=[1, 2])],
    )

    snap = compute(booking, _room())

    assert snap.total_gst == Decimal("100.00")
    assert snap.extras_gst == Decimal("0")
    assert snap.grand_total == Decimal("2000.00") + Decimal("200.00") + Decimal("100.00")


def test_inclusive_with_zero_price_falls_back_to_plan():
    booking = _booking(
        pricing_type=PricingType.FINAL_INCLUSIVE, final_room_price=Decimal("0")
    )

    snap = compute(booking, _room())

    assert snap.room_rate == Decimal("2500.00")
    assert snap.room_gst_from_inclusive == Decimal("0")


# ── nights and rates ─────────────────────────────────────────────────

@pytest.mark.parametrize(
    "check_in, check_out, nights",
    [
        (datetime(2025, 1, 1, 12), datetime(2025, 1, 2, 12), 1),
        (datetime(2025, 1, 1, 12), datetime(2025, 1, 2, 13), 2),
        (datetime(2025, 1, 1, 12), datetime(2025, 1, 1, 18), 1),
        (datetime(2025, 1, 1, 0), datetime(2025, 1, 4, 0), 3),
    ],
)
def test_nights_round_up_partial_days(check_in, check_out, nights):
    assert pricing_engine.count_nights(check_in, check_out) == nights


def test_inverted_window_is_rejected():
    booking = _booking(
        check_in=datetime(2025, 1, 3), check_out=datetime(2025, 1, 1)
    )
    with pytest.raises(ValidationError):
        compute(booking, _room())


def test_single_occupancy_uses_single_price():
    snap = compute(_booking(plan_code="DELUXE_SINGLE"), _room())
    assert snap.room_rate == Decimal("2000.00")


def test_unknown_plan_falls_back_to_base_rate():
    snap = compute(_booking(plan_code="SUITE_DOUBLE"), _room())
    assert snap.room_rate == Decimal("1800.00")
    assert snap.room_base == Decimal("3600.00")


def test_unknown_plan_without_base_rate_is_rejected():
    with pytest.raises(ValidationError):
        compute(_booking(plan_code="SUITE_DOUBLE"), _room(base_rate=None))


def test_plan_code_without_suffix_is_priced_double():
    assert pricing_engine.split_plan_code("DELUXE") == ("DELUXE", "DOUBLE")
    assert pricing_engine.split_plan_code("EP_SINGLE") == ("EP", "SINGLE")
    assert pricing_engine.split_plan_code(None) == (None, "DOUBLE")


# ── extras and discounts ─────────────────────────────────────────────

def test_extras_are_charged_per_selected_night():
    booking = _booking(services=[_service(price="300", days=[1, 2])])

    snap = compute(booking, _room())

    assert snap.extras_base == Decimal("600.00")
    assert snap.extras_gst == Decimal("30.00")
    assert snap.grand_total == Decimal("5000.00") + Decimal("250.00") + Decimal("630.00")


def test_service_without_days_is_rejected():
    with pytest.raises(ValidationError):
        compute(_booking(services=[_service(days=[])]), _room())


def test_service_night_outside_stay_is_rejected():
    with pytest.raises(ValidationError):
        compute(_booking(services=[_service(days=[3])]), _room())


def test_service_with_gst_disabled_is_not_taxed():
    booking = _booking(
        services=[
            _service(name="Laundry", price="200", days=[1], gst_enabled=False),
            _service(name="Breakfast", price="200", days=[1]),
        ]
    )

    snap = compute(booking, _room())

    assert snap.extras_base == Decimal("400.00")
    assert snap.extras_gst == Decimal("10.00")


def test_room_scope_leaves_extras_undiscounted():
    booking = _booking(
        discount_percent=Decimal("20"),
        discount_scope=DiscountScope.ROOM,
        services=[_service(price="500", days=[1, 2])],
    )

    snap = compute(booking, _room())

    assert snap.discount_on_room == Decimal("1000.00")
    assert snap.discount_on_extras == Decimal("0")
    assert snap.taxable == Decimal("5000.00")


def test_extras_scope_leaves_room_undiscounted():
    booking = _booking(
        discount_percent=Decimal("50"),
        discount_scope=DiscountScope.EXTRAS,
        services=[_service(price="500", days=[1, 2])],
    )

    snap = compute(booking, _room())

    assert snap.discount_on_room == Decimal("0")
    assert snap.discount_on_extras == Decimal("500.00")
    assert snap.extras_gst == Decimal("25.00")


@pytest.mark.parametrize("scope", list(DiscountScope))
def test_full_discount_never_exceeds_its_pool(scope):
    booking = _booking(
        discount_percent=Decimal("100"),
        discount_scope=scope,
        services=[_service(price="333.33", days=[1, 2])],
    )

    snap = compute(booking, _room())

    assert snap.discount_on_room <= snap.room_base
    assert snap.discount_on_extras <= snap.extras_base
    assert snap.taxable >= 0
    assert snap.discount_amount == snap.discount_on_room + snap.discount_on_extras


def test_discount_outside_percent_range_is_rejected():
    with pytest.raises(ValidationError):
        compute(_booking(discount_percent=Decimal("120")), _room())


# ── food, round-off, advances ────────────────────────────────────────

def test_food_totals_are_taken_verbatim():
    food = FoodSummary(
        subtotal=Decimal("400"),
        discount_amount=Decimal("40"),
        gst=Decimal("18"),
        total=Decimal("378"),
    )

    snap = compute(_booking(), _room(), food)

    assert snap.food_total == Decimal("378.00")
    assert snap.grand_total == Decimal("5250.00") + Decimal("378.00")


def test_food_summary_discounts_before_gst():
    orders = [SimpleNamespace(subtotal=Decimal("250")), SimpleNamespace(subtotal=Decimal("150"))]

    summary = summarize_orders(orders, Decimal("10"), gst_enabled=True)

    assert summary.subtotal == Decimal("400.00")
    assert summary.discount_amount == Decimal("40.00")
    assert summary.gst == Decimal("18.00")
    assert summary.total == Decimal("378.00")


def test_food_summary_without_gst():
    summary = summarize_orders([SimpleNamespace(subtotal=Decimal("100"))], None, gst_enabled=False)
    assert summary.gst == Decimal("0")
    assert summary.total == Decimal("100.00")


def test_round_off_replaces_grand_total():
    booking = _booking(
        pricing_type=PricingType.FINAL_INCLUSIVE,
        final_room_price=Decimal("1234.56"),
        round_off_enabled=True,
    )

    snap = compute(booking, _room())

    assert snap.grand_total == snap.grand_total.to_integral_value()
    assert money(snap.grand_total - snap.round_off_amount) == money(
        snap.taxable + snap.total_gst
    )


def test_round_off_stays_within_half_unit():
    rng = random.Random(7)
    for _ in range(200):
        price = Decimal(rng.randint(100, 999999)) / 100
        booking = _booking(
            pricing_type=PricingType.FINAL_INCLUSIVE,
            final_room_price=price,
            round_off_enabled=True,
            discount_percent=Decimal(rng.randint(0, 30)),
        )
        snap = compute(booking, _room())
        assert Decimal("-0.5") < snap.round_off_amount <= Decimal("0.5")


def test_balance_is_never_negative():
    rng = random.Random(11)
    for _ in range(100):
        advances = [_advance(str(rng.randint(0, 4000))) for _ in range(rng.randint(0, 4))]
        snap = compute(_booking(advances=advances), _room())
        assert snap.advance_paid == sum((a.amount for a in advances), Decimal("0"))
        assert snap.balance_due == max(Decimal("0"), snap.grand_total - snap.advance_paid)
        assert snap.final_payment_received == (snap.balance_due == 0)


def test_fully_paid_booking_reports_final_payment():
    snap = compute(_booking(advances=[_advance("5250")]), _room())

    assert snap.balance_due == Decimal("0")
    assert snap.final_payment_received is True
    assert snap.final_payment_amount == snap.grand_total


def test_recompute_is_idempotent():
    booking = _booking(
        discount_percent=Decimal("12.5"),
        services=[_service(price="199.99", days=[1, 2]), _service(price="49.5", days=[2])],
        advances=[_advance("1000")],
        round_off_enabled=True,
    )
    room = _room()
    food = FoodSummary(subtotal=Decimal("120"), gst=Decimal("6"), total=Decimal("126"))

    first = compute(booking, room, food)
    pricing_engine.apply(booking, first)
    second = compute(booking, room, food)

    assert first == second


def test_holds_carry_no_financials():
    booking = _booking(status=BookingStatus.BLOCKED, plan_code=None, advances=[_advance("10")])

    snap = compute(booking, _room(base_rate=None, plans=[]))

    assert snap.grand_total == Decimal("0")
    assert snap.balance_due == Decimal("0")


# ── advance tolerance ────────────────────────────────────────────────

def test_advance_over_remaining_is_rejected():
    booking = SimpleNamespace(balance_due=Decimal("2725.00"))

    with pytest.raises(ValidationError):
        pricing_engine.ensure_advance_fits(booking, Decimal("3000"))


def test_advance_within_tolerance_is_accepted():
    booking = SimpleNamespace(balance_due=Decimal("2724.60"))

    pricing_engine.ensure_advance_fits(booking, Decimal("2727"))
    with pytest.raises(ValidationError):
        pricing_engine.ensure_advance_fits(booking, Decimal("2727.01"))

"""
Tests for hotelops/services/reservation_service.py
Covers: half-open overlap rule, admission under random load, holds,
        multi-room blocks, availability listing, stay extension
"""
import random
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from conftest import HOTEL_ID, add_room, booking_create
from hotelops.core.exceptions import ConflictError, ValidationError
from hotelops.models.booking import Booking, BookingStatus
from hotelops.schemas.booking import BlockCreate, BlockSelectedCreate
from hotelops.services.booking_service import BookingService
from hotelops.services.reservation_service import (
    ROOM_ALREADY_BLOCKED,
    ROOM_ALREADY_BOOKED,
    ReservationService,
)

BASE = datetime(2025, 3, 1, 12, 0)


def _at(hours):
    return BASE + timedelta(hours=hours)


def _overlaps(a, b):
    return a[0] < b[1] and b[0] < a[1]


async def _count_bookings(db, room_id):
    result = await db.execute(
        select(func.count(Booking.id)).where(
            Booking.room_id == room_id, Booking.status != BookingStatus.CANCELLED
        )
    )
    return result.scalar()


# ── admission ────────────────────────────────────────────────────────

async def test_random_requests_never_produce_overlaps(db, room):
    room_id = room.id
    service = BookingService(db)
    rng = random.Random(2025)
    accepted, rejected = [], []

    for _ in range(40):
        start = rng.randint(0, 24 * 20)
        length = rng.randint(2, 24 * 4)
        window = (_at(start), _at(start + length))
        try:
            await service.create(HOTEL_ID, booking_create(room_id, *window))
        except ConflictError as exc:
            assert exc.code == ROOM_ALREADY_BOOKED
            rejected.append(window)
        else:
            accepted.append(window)

    assert accepted
    for i, first in enumerate(accepted):
        for second in accepted[i + 1:]:
            assert not _overlaps(first, second)
    for window in rejected:
        assert any(_overlaps(window, other) for other in accepted)
    assert await _count_bookings(db, room_id) == len(accepted)


async def test_touching_stays_are_both_admitted(db, room):
    service = BookingService(db)

    first = await service.create(HOTEL_ID, booking_create(room.id, _at(0), _at(48)))
    second = await service.create(HOTEL_ID, booking_create(room.id, _at(48), _at(72)))

    assert first.check_out == second.check_in


async def test_overlapping_stay_reports_the_blocking_booking(db, room):
    room_id = room.id
    service = BookingService(db)
    existing = await service.create(HOTEL_ID, booking_create(room_id, _at(0), _at(48)))
    existing_id = existing.id

    with pytest.raises(ConflictError) as exc_info:
        await service.create(HOTEL_ID, booking_create(room_id, _at(47), _at(60)))

    assert exc_info.value.code == ROOM_ALREADY_BOOKED
    assert exc_info.value.conflicting_id == existing_id
    assert await _count_bookings(db, room_id) == 1


async def test_cancelled_booking_releases_the_window(db, room):
    room_id = room.id
    service = BookingService(db)
    existing = await service.create(HOTEL_ID, booking_create(room_id, _at(0), _at(48)))
    await service.cancel(existing.id, HOTEL_ID, "Plans changed")

    replacement = await service.create(HOTEL_ID, booking_create(room_id, _at(0), _at(48)))

    assert replacement.status == BookingStatus.OCCUPIED


async def test_same_window_on_another_room_is_free(db, room):
    other = await add_room(db, number="102")
    service = BookingService(db)

    await service.create(HOTEL_ID, booking_create(room.id, _at(0), _at(48)))
    booking = await service.create(HOTEL_ID, booking_create(other.id, _at(0), _at(48)))

    assert booking.room_id == other.id


async def test_inverted_window_is_rejected(db, room):
    with pytest.raises(ValidationError):
        await BookingService(db).create(HOTEL_ID, booking_create(room.id, _at(48), _at(0)))


async def test_check_availability_ignores_the_excluded_booking(db, room):
    booking = await BookingService(db).create(
        HOTEL_ID, booking_create(room.id, _at(0), _at(48))
    )
    reservations = ReservationService(db)

    assert not await reservations.check_availability(HOTEL_ID, room.id, _at(24), _at(72))
    assert await reservations.check_availability(
        HOTEL_ID, room.id, _at(24), _at(72), exclude_booking_id=booking.id
    )
    assert await reservations.check_availability(HOTEL_ID, room.id, _at(48), _at(72))


# ── holds ────────────────────────────────────────────────────────────

async def test_block_carries_no_charges(db, room):
    block = await BookingService(db).block(
        HOTEL_ID,
        BlockCreate(room_id=room.id, check_in=_at(0), check_out=_at(48), reason="Deep clean"),
    )

    assert block.status == BookingStatus.BLOCKED
    assert block.notes == "Deep clean"
    assert block.grand_total == 0
    assert block.balance_due == 0


async def test_block_over_block_is_rejected(db, room):
    room_id = room.id
    service = BookingService(db)
    await service.block(
        HOTEL_ID, BlockCreate(room_id=room_id, check_in=_at(0), check_out=_at(48))
    )

    with pytest.raises(ConflictError) as exc_info:
        await service.block(
            HOTEL_ID,
            BlockCreate(
                room_id=room_id,
                check_in=_at(24),
                check_out=_at(72),
                status=BookingStatus.MAINTENANCE,
            ),
        )

    assert exc_info.value.code == ROOM_ALREADY_BLOCKED


async def test_block_over_guest_stay_is_rejected(db, room):
    room_id = room.id
    service = BookingService(db)
    await service.create(HOTEL_ID, booking_create(room_id, _at(0), _at(48)))

    with pytest.raises(ConflictError) as exc_info:
        await service.block(
            HOTEL_ID, BlockCreate(room_id=room_id, check_in=_at(24), check_out=_at(30))
        )

    assert exc_info.value.code == ROOM_ALREADY_BOOKED


async def test_booking_over_block_is_rejected(db, room):
    room_id = room.id
    service = BookingService(db)
    await service.block(
        HOTEL_ID, BlockCreate(room_id=room_id, check_in=_at(0), check_out=_at(48))
    )

    with pytest.raises(ConflictError):
        await service.create(HOTEL_ID, booking_create(room_id, _at(12), _at(36)))


async def test_block_selected_is_all_or_nothing(db, room):
    first_id = room.id
    second_id = (await add_room(db, number="102")).id
    third_id = (await add_room(db, number="103")).id
    service = BookingService(db)
    await service.create(HOTEL_ID, booking_create(third_id, _at(0), _at(24)))

    with pytest.raises(ConflictError):
        await service.block_selected(
            HOTEL_ID,
            BlockSelectedCreate(
                room_ids=[first_id, second_id, third_id], check_in=_at(0), check_out=_at(48)
            ),
        )

    assert await _count_bookings(db, first_id) == 0
    assert await _count_bookings(db, second_id) == 0

    blocks = await service.block_selected(
        HOTEL_ID,
        BlockSelectedCreate(room_ids=[second_id, first_id], check_in=_at(0), check_out=_at(48)),
    )
    assert sorted(b.room_id for b in blocks) == sorted([first_id, second_id])


# ── availability listing ─────────────────────────────────────────────

async def test_available_rooms_flag_same_day_checkout(db, room):
    turnover_id = room.id
    taken_id = (await add_room(db, number="102")).id
    free_id = (await add_room(db, number="103")).id
    service = BookingService(db)
    await service.create(
        HOTEL_ID,
        booking_create(turnover_id, datetime(2025, 3, 1, 12), datetime(2025, 3, 3, 10)),
    )
    await service.create(
        HOTEL_ID,
        booking_create(taken_id, datetime(2025, 3, 2, 12), datetime(2025, 3, 4, 10)),
    )

    rows = await ReservationService(db).list_available_rooms(
        HOTEL_ID, datetime(2025, 3, 3, 12), datetime(2025, 3, 4, 11)
    )
    by_id = {row["room"].id: row for row in rows}

    assert set(by_id) == {turnover_id, free_id}
    assert by_id[turnover_id]["has_same_day_checkout"] is True
    assert by_id[turnover_id]["checkout_time"] == datetime(2025, 3, 3, 10)
    assert by_id[free_id]["has_same_day_checkout"] is False
    assert by_id[free_id]["checkout_time"] is None


async def test_available_rooms_filter_by_type(db, room):
    suite = await add_room(db, number="201")
    suite.type = "SUITE"
    await db.commit()

    rows = await ReservationService(db).list_available_rooms(
        HOTEL_ID, _at(0), _at(24), room_type="SUITE"
    )

    assert [row["room"].number for row in rows] == ["201"]


async def test_offset_aware_window_is_normalised(db, room):
    room_id = room.id
    await BookingService(db).create(
        HOTEL_ID,
        booking_create(room_id, datetime(2025, 3, 1, 12), datetime(2025, 3, 3, 10)),
    )
    reservations = ReservationService(db)
    ist = timezone(timedelta(hours=5, minutes=30))

    rows = await reservations.list_available_rooms(
        HOTEL_ID,
        datetime(2025, 3, 3, 17, 30, tzinfo=ist),
        datetime(2025, 3, 4, 10, tzinfo=timezone.utc),
    )

    assert [row["room"].id for row in rows] == [room_id]
    assert rows[0]["has_same_day_checkout"] is True
    assert rows[0]["checkout_time"] == datetime(2025, 3, 3, 10)
    assert not await reservations.check_availability(
        HOTEL_ID,
        room_id,
        datetime(2025, 3, 2, 12, tzinfo=timezone.utc),
        datetime(2025, 3, 4, 10, tzinfo=timezone.utc),
    )
    with pytest.raises(ConflictError):
        await reservations.ensure_available(
            HOTEL_ID,
            room_id,
            datetime(2025, 3, 3, 14, 0, tzinfo=ist),
            datetime(2025, 3, 4, 10, tzinfo=timezone.utc),
        )


async def test_available_rooms_endpoint_accepts_utc_suffix(client, db, room):
    await BookingService(db).create(
        HOTEL_ID,
        booking_create(room.id, datetime(2025, 3, 1, 12), datetime(2025, 3, 3, 10)),
    )

    response = await client.get(
        "/api/v1/rooms/available",
        params={"checkIn": "2025-03-03T12:00:00Z", "checkOut": "2025-03-04T10:00:00Z"},
    )

    assert response.status_code == 200, response.text
    rows = response.json()
    assert [r["number"] for r in rows] == ["101"]
    assert rows[0]["has_same_day_checkout"] is True


# ── extension ────────────────────────────────────────────────────────

async def _stay_followed_by(db, room_id, next_check_in):
    service = BookingService(db)
    stay = await service.create(
        HOTEL_ID,
        booking_create(room_id, datetime(2025, 3, 1, 12), datetime(2025, 3, 3, 10)),
    )
    following = await service.create(
        HOTEL_ID,
        booking_create(
            room_id,
            next_check_in,
            next_check_in + timedelta(days=2),
            status=BookingStatus.CONFIRMED.value,
        ),
    )
    return service, stay.id, following.id


async def test_extension_into_next_stay_is_rejected(db, room):
    service, stay_id, following_id = await _stay_followed_by(
        db, room.id, datetime(2025, 3, 3, 14)
    )

    with pytest.raises(ConflictError) as exc_info:
        await service.extend_stay(stay_id, HOTEL_ID, datetime(2025, 3, 3, 16))

    assert exc_info.value.code == ROOM_ALREADY_BOOKED
    assert exc_info.value.conflicting_id == following_id
    unchanged = await service.get_for_hotel(stay_id, HOTEL_ID)
    assert unchanged.check_out == datetime(2025, 3, 3, 10)


async def test_extension_to_same_day_warns(db, room):
    service, stay_id, following_id = await _stay_followed_by(
        db, room.id, datetime(2025, 3, 3, 14)
    )

    booking, check = await service.extend_stay(stay_id, HOTEL_ID, datetime(2025, 3, 3, 12))

    assert check.warning is True
    assert check.conflicting_booking.id == following_id
    assert booking.check_out == datetime(2025, 3, 3, 12)


async def test_extension_without_following_stay_reprices(db, room):
    service = BookingService(db)
    stay = await service.create(
        HOTEL_ID,
        booking_create(room.id, datetime(2025, 3, 1, 12), datetime(2025, 3, 3, 10)),
    )

    booking, check = await service.extend_stay(stay.id, HOTEL_ID, datetime(2025, 3, 5, 10))

    assert check.warning is False
    assert booking.nights == 4
    assert booking.room_base == 10000


async def test_extension_must_move_checkout_later(db, room):
    service = BookingService(db)
    stay = await service.create(
        HOTEL_ID,
        booking_create(room.id, datetime(2025, 3, 1, 12), datetime(2025, 3, 3, 10)),
    )

    with pytest.raises(ValidationError):
        await service.extend_stay(stay.id, HOTEL_ID, datetime(2025, 3, 2, 10))

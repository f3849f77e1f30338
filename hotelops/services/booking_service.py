import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from hotelops.core.config import settings
from hotelops.core.exceptions import ConcurrentUpdateError, ValidationError
from hotelops.core.query_builders import BookingQueryBuilder
from hotelops.core.service_utils import (
    ensure_exists,
    ensure_same_hotel,
    to_naive_utc,
    utcnow,
)
from hotelops.models.booking import AddedService, Advance, Booking, BookingStatus
from hotelops.models.room import Room, RoomStatus
from hotelops.schemas.booking import (
    AddedServiceIn,
    BlockConvert,
    BlockCreate,
    BlockSelectedCreate,
    BookingCreate,
    CompanyDetails,
    FoodBillingUpdate,
    GuestDetails,
    RoomBillingUpdate,
    ServicesUpdate,
    StayDetails,
)
from hotelops.services import pricing_engine
from hotelops.services.booking_lifecycle import (
    FROZEN_STATUSES,
    ensure_mutable,
    ensure_transition,
)
from hotelops.services.food_billing_service import FoodBillingService
from hotelops.services.pricing_engine import HOLD_STATUSES, FoodSummary
from hotelops.services.reservation_service import ExtensionCheck, ReservationService
from hotelops.services.room_service import RoomService

logger = logging.getLogger(__name__)

Mutation = Callable[[Booking], Awaitable[None]]

# Billing fields that may be cleared explicitly
NULLABLE_BILLING_FIELDS = {"plan_code", "final_room_price"}


def _append_note(booking: Booking, note: str) -> None:
    booking.notes = f"{booking.notes or ''}\n{note}".strip()


def build_services(
    services: Sequence[AddedServiceIn], nights: int, default_all_nights: bool
) -> List[AddedService]:
    """Turn service payloads into rows; creation fills missing nights with the whole stay."""
    rows = []
    for position, service in enumerate(services):
        days = pricing_engine.normalize_days(service.days)
        if not days and default_all_nights:
            days = list(range(1, nights + 1))
        rows.append(
            AddedService(
                position=position,
                name=service.name,
                price=pricing_engine.money(service.price),
                days=days,
                gst_enabled=service.gst_enabled,
            )
        )
    return rows


class BookingService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.rooms = RoomService(db)
        self.reservations = ReservationService(db)
        self.food = FoodBillingService(db)

    # Loading

    async def get_by_id(self, booking_id: int) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .options(
                selectinload(Booking.services),
                selectinload(Booking.advances),
                selectinload(Booking.room).selectinload(Room.plans),
            )
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_hotel(self, booking_id: int, hotel_id: Optional[int]) -> Booking:
        booking = ensure_exists(await self.get_by_id(booking_id), "Booking", booking_id)
        return ensure_same_hotel(booking, hotel_id, "Booking")

    async def recompute(self, booking: Booking, room: Optional[Room] = None) -> FoodSummary:
        """Run the pricing engine against current state. Nothing is flushed."""
        room = room or booking.room
        with self.db.no_autoflush:
            if booking.status in HOLD_STATUSES:
                food = FoodSummary.empty()
            else:
                food = await self.food.get_food_summary(booking)
            pricing_engine.recompute(booking, room, food)
        return food

    async def get(self, booking_id: int, hotel_id: int) -> Booking:
        """Fetch a booking with freshly computed totals.

        Checked-out and cancelled bookings are served from their stored snapshot.
        """
        booking = await self.get_for_hotel(booking_id, hotel_id)
        if booking.status not in FROZEN_STATUSES:
            await self.recompute(booking)
        return booking

    async def list(
        self,
        hotel_id: int,
        statuses: Optional[List[str]] = None,
        room_id: Optional[int] = None,
        check_in_from: Optional[datetime] = None,
        check_in_to: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        stmt = (
            BookingQueryBuilder(Booking)
            .filter_by_hotel(hotel_id)
            .filter_by_status(statuses or [])
            .filter_by_room(room_id)
            .filter_by_check_in(to_naive_utc(check_in_from), to_naive_utc(check_in_to))
            .order_by(Booking.check_in, "desc")
            .order_by(Booking.id, "desc")
            .paginate(skip, limit)
            .build()
        )
        result = await self.db.execute(stmt)
        bookings = list(result.scalars().all())
        for booking in bookings:
            if booking.status not in FROZEN_STATUSES:
                await self.recompute(booking)
        return bookings

    async def get_food_billing(self, booking_id: int, hotel_id: int) -> FoodSummary:
        booking = await self.get_for_hotel(booking_id, hotel_id)
        return await self.food.get_food_summary(booking)

    # Saving

    async def mutate(self, booking_id: int, hotel_id: int, mutation: Mutation) -> Booking:
        """
        Load, mutate, recompute and commit a booking.

        Saves are versioned: when another request committed first, the booking
        is reloaded and the mutation replayed, up to BOOKING_SAVE_RETRIES times.
        """
        for attempt in range(1, settings.BOOKING_SAVE_RETRIES + 1):
            try:
                booking = await self.get_for_hotel(booking_id, hotel_id)
                await mutation(booking)
                booking.updated_at = utcnow()
                if booking.status not in FROZEN_STATUSES:
                    await self.recompute(booking)
                await self.db.commit()
            except StaleDataError:
                await self.db.rollback()
                logger.warning(
                    f"Booking {booking_id} changed concurrently, retry {attempt}/{settings.BOOKING_SAVE_RETRIES}"
                )
                continue
            except Exception:
                await self.db.rollback()
                raise
            return await self.get_for_hotel(booking_id, hotel_id)

        raise ConcurrentUpdateError(booking_id)

    def _apply_stay_details(self, booking: Booking, data: StayDetails) -> None:
        fields = data.model_dump(
            exclude={
                "services",
                "advance_paid",
                "advance_payment_mode",
                "room_id",
                "check_in",
                "check_out",
                "status",
                "notes",
            }
        )
        for field, value in fields.items():
            setattr(booking, field, value)
        if data.notes:
            _append_note(booking, data.notes)

        nights = pricing_engine.count_nights(booking.check_in, booking.check_out)
        booking.services = build_services(data.services, nights, default_all_nights=True)

    async def _record_initial_advance(
        self, booking: Booking, room: Room, data: StayDetails
    ) -> None:
        if not data.advance_paid:
            return
        food = await self.recompute(booking, room)
        pricing_engine.ensure_advance_fits(booking, data.advance_paid)
        booking.advances.append(
            Advance(
                amount=pricing_engine.money(data.advance_paid),
                mode=data.advance_payment_mode,
                date=utcnow(),
                note="Advance at booking",
            )
        )
        pricing_engine.recompute(booking, room, food)

    # Admission

    async def create(self, hotel_id: int, data: BookingCreate) -> Booking:
        check_in = to_naive_utc(data.check_in)
        check_out = to_naive_utc(data.check_out)
        pricing_engine.validate_stay_window(check_in, check_out)

        try:
            room = await self.rooms.get_for_hotel(data.room_id, hotel_id)
            await self.reservations.ensure_available(hotel_id, room.id, check_in, check_out)

            booking = Booking(
                hotel_id=hotel_id,
                room_id=room.id,
                status=data.status,
                check_in=check_in,
                check_out=check_out,
            )
            self._apply_stay_details(booking, data)
            await self.recompute(booking, room)
            await self._record_initial_advance(booking, room, data)

            if booking.status == BookingStatus.OCCUPIED:
                room.status = RoomStatus.OCCUPIED

            self.db.add(booking)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Booking {booking.id} created for room {room.number} (hotel {hotel_id}), status {booking.status.value}"
        )
        return await self.get_for_hotel(booking.id, hotel_id)

    async def _create_blocks(
        self,
        hotel_id: int,
        room_ids: Sequence[int],
        check_in: datetime,
        check_out: datetime,
        status: BookingStatus,
        reason: Optional[str],
    ) -> List[Booking]:
        check_in = to_naive_utc(check_in)
        check_out = to_naive_utc(check_out)
        pricing_engine.validate_stay_window(check_in, check_out)

        try:
            rooms = []
            # Lock in id order so concurrent multi-room blocks cannot deadlock
            for room_id in sorted(set(room_ids)):
                room = await self.rooms.get_for_hotel(room_id, hotel_id)
                await self.reservations.ensure_blockable(
                    hotel_id, room.id, check_in, check_out
                )
                rooms.append(room)

            blocks = []
            for room in rooms:
                block = Booking(
                    hotel_id=hotel_id,
                    room_id=room.id,
                    status=status,
                    check_in=check_in,
                    check_out=check_out,
                    guest_name=status.value,
                    adults=1,
                    children=0,
                    notes=reason or f"{status.value.title()} hold",
                )
                pricing_engine.recompute(block, room, FoodSummary.empty())
                self.db.add(block)
                blocks.append(block)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        for block in blocks:
            logger.info(
                f"Room {block.room_id} {status.value} from {check_in} to {check_out} as booking {block.id} (hotel {hotel_id})"
            )
        return [await self.get_for_hotel(block.id, hotel_id) for block in blocks]

    async def block(self, hotel_id: int, data: BlockCreate) -> Booking:
        blocks = await self._create_blocks(
            hotel_id, [data.room_id], data.check_in, data.check_out, data.status, data.reason
        )
        return blocks[0]

    async def block_selected(self, hotel_id: int, data: BlockSelectedCreate) -> List[Booking]:
        """Block several rooms at once; nothing is blocked if any room conflicts."""
        return await self._create_blocks(
            hotel_id, data.room_ids, data.check_in, data.check_out, data.status, data.reason
        )

    async def extend_stay(
        self, booking_id: int, hotel_id: int, new_check_out: datetime
    ) -> Tuple[Booking, ExtensionCheck]:
        new_check_out = to_naive_utc(new_check_out)
        outcome: List[ExtensionCheck] = []

        async def mutation(booking: Booking) -> None:
            ensure_mutable(booking)
            check = await self.reservations.validate_extension(booking, new_check_out)
            booking.check_out = new_check_out
            outcome.append(check)

        booking = await self.mutate(booking_id, hotel_id, mutation)
        check = outcome[-1]
        logger.info(
            f"Booking {booking_id} extended to {new_check_out} (hotel {hotel_id}, warning={check.warning})"
        )
        return booking, check

    # Billing inputs

    async def update_room_billing(
        self, booking_id: int, hotel_id: int, data: RoomBillingUpdate
    ) -> Booking:
        changes = data.model_dump(exclude_unset=True)

        async def mutation(booking: Booking) -> None:
            ensure_mutable(booking)
            for field, value in changes.items():
                if value is None and field not in NULLABLE_BILLING_FIELDS:
                    continue
                setattr(booking, field, value)

        return await self.mutate(booking_id, hotel_id, mutation)

    async def update_services(
        self, booking_id: int, hotel_id: int, data: ServicesUpdate
    ) -> Booking:
        async def mutation(booking: Booking) -> None:
            ensure_mutable(booking)
            nights = pricing_engine.count_nights(booking.check_in, booking.check_out)
            booking.services = build_services(
                data.services, nights, default_all_nights=False
            )

        return await self.mutate(booking_id, hotel_id, mutation)

    async def update_food_billing(
        self, booking_id: int, hotel_id: int, data: FoodBillingUpdate
    ) -> Booking:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        async def mutation(booking: Booking) -> None:
            ensure_mutable(booking)
            for field, value in changes.items():
                setattr(booking, field, value)

        return await self.mutate(booking_id, hotel_id, mutation)

    async def update_guest(
        self, booking_id: int, hotel_id: int, data: GuestDetails
    ) -> Booking:
        changes = data.model_dump(exclude_unset=True)
        for field in ("adults", "children"):
            if changes.get(field) is None:
                changes.pop(field, None)

        async def mutation(booking: Booking) -> None:
            ensure_mutable(booking)
            for field, value in changes.items():
                setattr(booking, field, value)

        return await self.mutate(booking_id, hotel_id, mutation)

    async def update_company(
        self, booking_id: int, hotel_id: int, data: CompanyDetails
    ) -> Booking:
        changes = data.model_dump(exclude_unset=True)

        async def mutation(booking: Booking) -> None:
            ensure_mutable(booking)
            for field, value in changes.items():
                setattr(booking, field, value)

        return await self.mutate(booking_id, hotel_id, mutation)

    # Lifecycle

    async def cancel(
        self, booking_id: int, hotel_id: int, reason: Optional[str] = None
    ) -> Booking:
        async def mutation(booking: Booking) -> None:
            ensure_transition(booking, BookingStatus.CANCELLED)
            was_occupied = booking.status == BookingStatus.OCCUPIED
            if booking.status not in HOLD_STATUSES:
                await self.recompute(booking)
            booking.status = BookingStatus.CANCELLED
            _append_note(booking, f"Cancelled: {reason}" if reason else "Cancelled")
            if was_occupied:
                booking.room.status = RoomStatus.AVAILABLE

        booking = await self.mutate(booking_id, hotel_id, mutation)
        logger.info(f"Booking {booking_id} cancelled (hotel {hotel_id})")
        return booking

    async def unblock(
        self, booking_id: int, hotel_id: int, reason: Optional[str] = None
    ) -> Booking:
        async def mutation(booking: Booking) -> None:
            if booking.status not in HOLD_STATUSES:
                raise ValidationError(
                    f"Booking {booking.id} is not a block", "status", booking.status.value
                )
            ensure_transition(booking, BookingStatus.CANCELLED)
            held_as = booking.status.value
            booking.status = BookingStatus.CANCELLED
            _append_note(
                booking,
                f"Unblocked ({held_as}): {reason}" if reason else f"Unblocked ({held_as})",
            )

        booking = await self.mutate(booking_id, hotel_id, mutation)
        logger.info(f"Block {booking_id} released (hotel {hotel_id})")
        return booking

    async def convert_block(
        self, booking_id: int, hotel_id: int, data: BlockConvert
    ) -> Booking:
        """Turn a BLOCKED hold into an occupied guest booking over the same window."""

        async def mutation(booking: Booking) -> None:
            if booking.status != BookingStatus.BLOCKED:
                raise ValidationError(
                    f"Only BLOCKED bookings can be converted, booking {booking.id} is {booking.status.value}",
                    "status",
                    booking.status.value,
                )
            ensure_transition(booking, BookingStatus.OCCUPIED)
            booking.status = BookingStatus.OCCUPIED
            self._apply_stay_details(booking, data)
            await self._record_initial_advance(booking, booking.room, data)
            booking.room.status = RoomStatus.OCCUPIED

        booking = await self.mutate(booking_id, hotel_id, mutation)
        logger.info(f"Block {booking_id} converted to booking (hotel {hotel_id})")
        return booking

    async def check_in(self, booking_id: int, hotel_id: int) -> Booking:
        async def mutation(booking: Booking) -> None:
            if booking.status != BookingStatus.CONFIRMED:
                raise ValidationError(
                    "Can only check-in confirmed bookings", "status", booking.status.value
                )
            ensure_transition(booking, BookingStatus.OCCUPIED)
            booking.status = BookingStatus.OCCUPIED
            booking.room.status = RoomStatus.OCCUPIED

        booking = await self.mutate(booking_id, hotel_id, mutation)
        logger.info(f"Booking {booking_id} checked in (hotel {hotel_id})")
        return booking

    async def mark_no_show(self, booking_id: int, hotel_id: int) -> Booking:
        async def mutation(booking: Booking) -> None:
            ensure_transition(booking, BookingStatus.NO_SHOW)
            booking.status = BookingStatus.NO_SHOW

        booking = await self.mutate(booking_id, hotel_id, mutation)
        logger.info(f"Booking {booking_id} marked no-show (hotel {hotel_id})")
        return booking

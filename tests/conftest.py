"""
Shared fixtures: a per-test SQLite database, sessions, an HTTP client and seed helpers.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./hotelops-test.db")

from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hotelops.core.database import get_db
from hotelops.main import app
from hotelops.models import (
    Base,
    FoodOrder,
    FoodOrderStatus,
    FoodPaymentStatus,
    Room,
    RoomPlan,
)
from hotelops.schemas.booking import BookingCreate

HOTEL_ID = 1
OTHER_HOTEL_ID = 2


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'hotelops.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Hotel-Id": str(HOTEL_ID)},
    ) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ── seed helpers ─────────────────────────────────────────────────────

async def add_room(db, number="101", hotel_id=HOTEL_ID, base_rate=Decimal("1800"), plans=True):
    room = Room(
        hotel_id=hotel_id,
        number=number,
        type="DELUXE",
        floor=1,
        base_rate=base_rate,
        max_guests=2,
        plans=(
            [
                RoomPlan(
                    code="DELUXE",
                    name="Deluxe",
                    single_price=Decimal("2000"),
                    double_price=Decimal("2500"),
                )
            ]
            if plans
            else []
        ),
    )
    db.add(room)
    await db.commit()
    return room


async def add_food_order(
    db,
    room,
    subtotal,
    created_at,
    status=FoodOrderStatus.DELIVERED,
    payment_status=FoodPaymentStatus.PENDING,
):
    order = FoodOrder(
        hotel_id=room.hotel_id,
        room_id=room.id,
        source="ROOM",
        items=[{"name": "Thali", "qty": 1, "price": str(subtotal)}],
        subtotal=Decimal(subtotal),
        gst=Decimal("0"),
        total=Decimal(subtotal),
        status=status,
        payment_status=payment_status,
        created_at=created_at,
    )
    db.add(order)
    await db.commit()
    return order


def booking_payload(room_id, check_in, check_out, **overrides):
    payload = {
        "room_id": room_id,
        "check_in": check_in.isoformat() if isinstance(check_in, datetime) else check_in,
        "check_out": check_out.isoformat() if isinstance(check_out, datetime) else check_out,
        "guest_name": "Asha Rao",
        "guest_phone": "9800000000",
        "plan_code": "DELUXE_DOUBLE",
    }
    payload.update(overrides)
    return payload


def booking_create(room_id, check_in, check_out, **overrides) -> BookingCreate:
    return BookingCreate(**booking_payload(room_id, check_in, check_out, **overrides))


@pytest_asyncio.fixture
async def room(db):
    return await add_room(db)

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hotelops.core.service_utils import ensure_exists, ensure_same_hotel
from hotelops.models.room import Room


class RoomService:
    """Read access to rooms and their rate plans."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, room_id: int) -> Optional[Room]:
        stmt = select(Room).options(selectinload(Room.plans)).where(Room.id == room_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_hotel(self, room_id: int, hotel_id: Optional[int]) -> Room:
        room = ensure_exists(await self.get_by_id(room_id), "Room", room_id)
        return ensure_same_hotel(room, hotel_id, "Room")

    async def lock(self, room_id: int) -> Optional[Room]:
        """Lock the room row for the rest of the transaction.

        Serializes admission checks per room on PostgreSQL; a no-op on SQLite,
        which serializes writers itself.
        """
        stmt = (
            select(Room)
            .options(selectinload(Room.plans))
            .where(Room.id == room_id)
            .with_for_update()
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_hotel(
        self, hotel_id: int, room_type: Optional[str] = None
    ) -> List[Room]:
        stmt = (
            select(Room)
            .options(selectinload(Room.plans))
            .where(Room.hotel_id == hotel_id)
            .order_by(Room.number)
        )
        if room_type:
            stmt = stmt.where(Room.type == room_type)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

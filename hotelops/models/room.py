import enum

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from hotelops.core.service_utils import utcnow
from hotelops.models.base import Base


class RoomStatus(enum.Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    CLEANING = "CLEANING"
    MAINTENANCE = "MAINTENANCE"


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (UniqueConstraint("hotel_id", "number", name="uq_rooms_hotel_number"),)

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, nullable=False, index=True)
    number = Column(String, nullable=False)
    type = Column(String, nullable=True, index=True)
    floor = Column(Integer, nullable=True)
    status = Column(Enum(RoomStatus), default=RoomStatus.AVAILABLE, nullable=False)
    base_rate = Column(Numeric(12, 2), nullable=True)
    max_guests = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    plans = relationship(
        "RoomPlan",
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="RoomPlan.id",
    )
    bookings = relationship("Booking", back_populates="room")


class RoomPlan(Base):
    __tablename__ = "room_plans"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    code = Column(String, nullable=False)  # EP, CP, MAP, DELUXE...
    name = Column(String, nullable=True)
    single_price = Column(Numeric(12, 2), default=0, nullable=False)
    double_price = Column(Numeric(12, 2), default=0, nullable=False)

    room = relationship("Room", back_populates="plans")

import enum

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String

from hotelops.core.service_utils import utcnow
from hotelops.models.base import Base


class FoodOrderStatus(enum.Enum):
    NEW = "NEW"
    PREPARING = "PREPARING"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class FoodPaymentStatus(enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class FoodOrder(Base):
    """Restaurant order charged to a room. Owned by the restaurant module."""

    __tablename__ = "food_orders"
    __table_args__ = (Index("idx_food_orders_room_created", "hotel_id", "room_id", "created_at"),)

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=True)
    source = Column(String, nullable=True)  # QR, TABLE, ROOM
    items = Column(JSON, nullable=False, default=list)
    subtotal = Column(Numeric(12, 2), default=0, nullable=False)
    gst = Column(Numeric(12, 2), default=0, nullable=False)
    total = Column(Numeric(12, 2), default=0, nullable=False)
    status = Column(Enum(FoodOrderStatus), default=FoodOrderStatus.NEW, nullable=False)
    payment_status = Column(
        Enum(FoodPaymentStatus), default=FoodPaymentStatus.PENDING, nullable=False
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)

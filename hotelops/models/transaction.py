import enum

from sqlalchemy import Column, DateTime, Enum, Index, Integer, Numeric, String, Text

from hotelops.core.service_utils import utcnow
from hotelops.models.base import Base


class TransactionType(enum.Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class TransactionSource(enum.Enum):
    ROOM = "ROOM"
    RESTAURANT = "RESTAURANT"
    BANQUET = "BANQUET"
    MAINTENANCE = "MAINTENANCE"
    LAUNDRY = "LAUNDRY"
    INVENTORY = "INVENTORY"
    OTHER = "OTHER"


class Transaction(Base):
    """Append-only hotel ledger entry."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_hotel_created", "hotel_id", "created_at"),
        Index("idx_transactions_reference", "reference_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, nullable=False)
    type = Column(Enum(TransactionType), nullable=False)
    source = Column(Enum(TransactionSource), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, default="", nullable=False)
    reference_id = Column(String, nullable=True)
    payment_mode = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from hotelops.core.exceptions import ValidationError
from hotelops.core.query_builders import TransactionQueryBuilder
from hotelops.models.transaction import Transaction, TransactionSource, TransactionType

logger = logging.getLogger(__name__)


class LedgerService:
    """Append-only hotel ledger."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def post_transaction(
        self,
        hotel_id: int,
        type: TransactionType,
        source: TransactionSource,
        amount: Decimal,
        reference_id: Optional[str] = None,
        description: str = "",
        payment_mode: Optional[str] = None,
    ) -> Transaction:
        """Stage a ledger entry in the caller's transaction. Does not commit."""
        if amount < 0:
            raise ValidationError(
                "Transaction amount cannot be negative", "amount", str(amount)
            )

        entry = Transaction(
            hotel_id=hotel_id,
            type=type,
            source=source,
            amount=amount,
            reference_id=reference_id,
            description=description,
            payment_mode=payment_mode,
        )
        self.db.add(entry)
        logger.info(
            f"Ledger {type.value} {source.value} {amount} posted for hotel {hotel_id} (ref {reference_id})"
        )
        return entry

    async def list_transactions(
        self,
        hotel_id: int,
        sources: Optional[List[str]] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Transaction]:
        stmt = (
            TransactionQueryBuilder(Transaction)
            .filter_by_hotel(hotel_id)
            .filter_by_source(sources or [])
            .filter_by_created(start, end)
            .order_by(Transaction.created_at, "desc")
            .order_by(Transaction.id, "desc")
            .paginate(skip, limit)
            .build()
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

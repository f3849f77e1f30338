from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query

from hotelops.core.common_deps import HotelIdDep, LedgerServiceDep
from hotelops.models.transaction import TransactionSource
from hotelops.schemas.billing import TransactionResponse

router = APIRouter()


@router.get("/", response_model=List[TransactionResponse])
async def get_transactions(
    service: LedgerServiceDep,
    hotel_id: HotelIdDep,
    source: Optional[List[TransactionSource]] = Query(None),
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """Hotel ledger, newest first"""
    return await service.list_transactions(
        hotel_id,
        sources=[s.value for s in source or []],
        start=start,
        end=end,
        skip=skip,
        limit=limit,
    )

from fastapi import APIRouter

from hotelops.core.common_deps import HotelIdDep, InvoiceServiceDep
from hotelops.schemas.billing import InvoiceResponse

router = APIRouter()


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    service: InvoiceServiceDep,
    hotel_id: HotelIdDep,
):
    """Stored invoice snapshot"""
    return await service.get_by_id(invoice_id, hotel_id)

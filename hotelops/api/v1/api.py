from fastapi import APIRouter

from hotelops.api.v1.endpoints import bookings, invoices, rooms, transactions
from hotelops.schemas.responses import ErrorResponse

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Business rule violation"},
    403: {"model": ErrorResponse, "description": "Entity belongs to another hotel"},
    404: {"model": ErrorResponse, "description": "Entity not found"},
    409: {"model": ErrorResponse, "description": "Reservation or update conflict"},
}

api_router = APIRouter(responses=ERROR_RESPONSES)

api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(
    transactions.router, prefix="/transactions", tags=["transactions"]
)

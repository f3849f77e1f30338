"""
Tenant resolution.

Every request acts on behalf of one hotel, named by the tenant header.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request

from hotelops.core.config import settings
from hotelops.core.exceptions import ValidationError


def get_current_hotel_id(request: Request) -> int:
    """
    Read the hotel id from the tenant header.

    Raises:
        ValidationError: If the header is missing or not a positive integer
    """
    raw: Optional[str] = request.headers.get(settings.TENANT_HEADER)
    if not raw:
        raise ValidationError(
            f"Missing {settings.TENANT_HEADER} header", settings.TENANT_HEADER
        )
    try:
        hotel_id = int(raw)
    except ValueError:
        raise ValidationError(
            f"Invalid {settings.TENANT_HEADER} header", settings.TENANT_HEADER, raw
        )
    if hotel_id <= 0:
        raise ValidationError(
            f"Invalid {settings.TENANT_HEADER} header", settings.TENANT_HEADER, raw
        )
    return hotel_id


CurrentHotelDep = Annotated[int, Depends(get_current_hotel_id)]

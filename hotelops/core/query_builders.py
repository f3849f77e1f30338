from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import Select, and_, asc, desc, select
from sqlalchemy.orm import selectinload


class BaseQueryBuilder:
    """Base query builder with common filtering and sorting capabilities."""

    def __init__(self, model_class):
        self.model_class = model_class
        self.query = select(model_class)
        self.filters = []
        self.order_by_clauses = []
        self._includes = []

    def where(self, condition):
        """Add a WHERE condition to the query."""
        self.filters.append(condition)
        return self

    def where_in(self, field, values: List[Any]):
        """Add WHERE field IN (values) condition."""
        if values:
            self.filters.append(field.in_(values))
        return self

    def where_datetime_range(
        self,
        field,
        start_datetime: Optional[datetime],
        end_datetime: Optional[datetime],
    ):
        """Add datetime range filtering."""
        if start_datetime:
            self.filters.append(field >= start_datetime)
        if end_datetime:
            self.filters.append(field <= end_datetime)
        return self

    def include(self, *relationships):
        """Add relationships to eager load."""
        for relationship in relationships:
            self._includes.append(selectinload(relationship))
        return self

    def include_option(self, *options):
        """Add prebuilt loader options, e.g. nested selectinload chains."""
        self._includes.extend(options)
        return self

    def order_by(self, field, direction: str = "asc"):
        """Add ORDER BY clause."""
        if direction.lower() == "desc":
            self.order_by_clauses.append(desc(field))
        else:
            self.order_by_clauses.append(asc(field))
        return self

    def paginate(self, skip: int = 0, limit: int = 100):
        """Add pagination to the query."""
        self.query = self.query.offset(skip).limit(limit)
        return self

    def build(self) -> Select:
        """Build the final query with all conditions applied."""
        if self._includes:
            self.query = self.query.options(*self._includes)

        if self.filters:
            self.query = self.query.where(and_(*self.filters))

        if self.order_by_clauses:
            self.query = self.query.order_by(*self.order_by_clauses)

        return self.query


class BookingQueryBuilder(BaseQueryBuilder):
    """Specialized query builder for booking listings."""

    def __init__(self, model_class):
        super().__init__(model_class)
        from hotelops.models.room import Room

        # Everything the pricing engine needs
        self.include(model_class.services, model_class.advances)
        self.include_option(selectinload(model_class.room).selectinload(Room.plans))

    def filter_by_hotel(self, hotel_id: int):
        return self.where(self.model_class.hotel_id == hotel_id)

    def filter_by_room(self, room_id: Optional[int]):
        if room_id is not None:
            return self.where(self.model_class.room_id == room_id)
        return self

    def filter_by_status(self, statuses: List[str]):
        """Filter by booking status(es)."""
        if statuses:
            from hotelops.models.booking import BookingStatus

            enum_statuses = [BookingStatus(status) for status in statuses]
            return self.where_in(self.model_class.status, enum_statuses)
        return self

    def exclude_status(self, *statuses):
        if statuses:
            return self.where(self.model_class.status.notin_(statuses))
        return self

    def filter_by_check_in(
        self, start: Optional[datetime], end: Optional[datetime]
    ):
        """Filter by check-in datetime range."""
        return self.where_datetime_range(self.model_class.check_in, start, end)

    def overlapping(self, start: datetime, end: datetime):
        """Stays intersecting the half-open window [start, end)."""
        return self.where(
            and_(self.model_class.check_in < end, self.model_class.check_out > start)
        )


class TransactionQueryBuilder(BaseQueryBuilder):
    """Specialized query builder for ledger listings."""

    def filter_by_hotel(self, hotel_id: int):
        return self.where(self.model_class.hotel_id == hotel_id)

    def filter_by_source(self, sources: List[str]):
        if sources:
            from hotelops.models.transaction import TransactionSource

            return self.where_in(
                self.model_class.source, [TransactionSource(s) for s in sources]
            )
        return self

    def filter_by_created(self, start: Optional[datetime], end: Optional[datetime]):
        return self.where_datetime_range(self.model_class.created_at, start, end)

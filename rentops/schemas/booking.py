"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_SOURCES = "^(direct|airbnb|booking_com|website|referral|other)$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for creating a new booking.

    ``total_price`` defaults to the property's daily rate times the number of
    nights. ``force`` creates the booking even when it overlaps existing
    reservations.
    """

    property_id: uuid.UUID
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: str | None = Field(None, max_length=255)
    check_in: date
    check_out: date
    num_guests: int = Field(1, ge=1)
    status: str = Field("pending", pattern="^(pending|confirmed)$")
    total_price: Decimal | None = Field(None, ge=0)
    source: str = Field("direct", pattern=_SOURCES)
    special_requests: str | None = None
    force: bool = False

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingUpdate(BaseModel):
    """Schema for partially updating a booking. All fields optional."""

    property_id: uuid.UUID | None = None
    guest_name: str | None = Field(None, min_length=1, max_length=255)
    guest_email: str | None = Field(None, max_length=255)
    check_in: date | None = None
    check_out: date | None = None
    num_guests: int | None = Field(None, ge=1)
    status: str | None = Field(
        None,
        pattern="^(pending|confirmed|checked_in|checked_out|cancelled|no_show)$",
    )
    total_price: Decimal | None = Field(None, ge=0)
    source: str | None = Field(None, pattern=_SOURCES)
    special_requests: str | None = None
    force: bool = False

    @field_validator("property_id", "guest_name", "check_in", "check_out", "num_guests", "status", "source")
    @classmethod
    def reject_null(cls, value):
        """Omit a field to keep its value; these columns cannot be cleared."""
        if value is None:
            raise ValueError("field cannot be null")
        return value

    @model_validator(mode="after")
    def check_dates(self) -> "BookingUpdate":
        """If both dates are provided, validate check_out > check_in."""
        if self.check_in is not None and self.check_out is not None and self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response returned from CRUD operations."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_name: str
    guest_email: str | None = None
    check_in: date
    check_out: date
    num_guests: int
    status: str
    total_price: Decimal | None = None
    source: str
    special_requests: str | None = None
    checked_in_at: datetime | None = None
    checked_out_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int

"""Pydantic v2 schemas for availability queries and conflict reporting."""

import uuid
from datetime import date

from pydantic import BaseModel, Field, model_validator

from rentops.services.reservations import Reservation


class ConflictResponse(BaseModel):
    """A reservation standing in the way of a requested stay."""

    id: uuid.UUID
    kind: str
    status: str
    guest_name: str
    check_in: date
    check_out: date | None = None  # None for open-ended leases

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> "ConflictResponse":
        return cls(
            id=reservation.id,
            kind=reservation.kind.value,
            status=reservation.status.value,
            guest_name=reservation.guest_name,
            check_in=reservation.start,
            check_out=None if reservation.is_open_ended else reservation.end,
        )


class AvailabilityResponse(BaseModel):
    """Verdict for one property and date range."""

    property_id: uuid.UUID
    property_name: str
    available: bool
    conflicts: list[ConflictResponse]
    reason: str | None = None
    nights: int


class BatchAvailabilityRequest(BaseModel):
    property_ids: list[uuid.UUID] = Field(..., min_length=1)
    check_in: date
    check_out: date

    @model_validator(mode="after")
    def check_dates(self) -> "BatchAvailabilityRequest":
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BatchAvailabilityItem(BaseModel):
    property_id: uuid.UUID
    property_name: str
    available: bool
    conflict_count: int
    reason: str | None = None


class BatchAvailabilityResponse(BaseModel):
    results: list[BatchAvailabilityItem]
    available_count: int
    total_checked: int


class DoubleBookingResponse(BaseModel):
    """Two active reservations on the same property whose dates overlap."""

    first: ConflictResponse
    second: ConflictResponse


class DoubleBookingListResponse(BaseModel):
    property_id: uuid.UUID
    items: list[DoubleBookingResponse]
    total: int

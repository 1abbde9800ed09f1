"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_PROPERTY_TYPES = "^(apartment|house|townhouse|cottage|room|studio|duplex|penthouse|villa|other)$"
_RENTAL_TYPES = "^(short_term|long_term|both)$"
_STATUSES = "^(active|maintenance|inactive)$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _StayLimits(BaseModel):
    minimum_stay: int | None = Field(None, ge=1)
    maximum_stay: int | None = Field(None, ge=1)

    @model_validator(mode="after")
    def check_stay_limits(self):
        """A maximum stay shorter than the minimum stay could never be booked."""
        if self.minimum_stay is not None and self.maximum_stay is not None and self.maximum_stay < self.minimum_stay:
            raise ValueError("maximum_stay must be at least minimum_stay")
        return self


class PropertyCreate(_StayLimits):
    """Schema for creating a new property."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    address: str | None = Field(None, max_length=255)
    property_type: str = Field(..., pattern=_PROPERTY_TYPES)
    rental_type: str = Field("short_term", pattern=_RENTAL_TYPES)
    daily_rate: Decimal | None = Field(None, ge=0)
    monthly_rent: Decimal | None = Field(None, ge=0)
    available_from: date | None = None
    status: str = Field("active", pattern=_STATUSES)


class PropertyUpdate(_StayLimits):
    """Schema for partially updating a property. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    address: str | None = Field(None, max_length=255)
    property_type: str | None = Field(None, pattern=_PROPERTY_TYPES)
    rental_type: str | None = Field(None, pattern=_RENTAL_TYPES)
    daily_rate: Decimal | None = Field(None, ge=0)
    monthly_rent: Decimal | None = Field(None, ge=0)
    available_from: date | None = None
    status: str | None = Field(None, pattern=_STATUSES)

    @field_validator("name", "property_type", "rental_type", "status")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    description: str | None = None
    address: str | None = None
    property_type: str
    rental_type: str
    daily_rate: Decimal | None = None
    monthly_rent: Decimal | None = None
    minimum_stay: int | None = None
    maximum_stay: int | None = None
    available_from: date | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    """Paginated list of properties."""

    items: list[PropertyResponse]
    total: int

"""Pydantic v2 request/response schemas for lease endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LeaseCreate(BaseModel):
    """Schema for creating a lease. Omit ``end_date`` for an open-ended lease."""

    property_id: uuid.UUID
    tenant_name: str = Field(..., min_length=1, max_length=255)
    tenant_email: str | None = Field(None, max_length=255)
    start_date: date
    end_date: date | None = None
    monthly_rent: Decimal = Field(..., ge=0)
    deposit_paid: Decimal = Field(Decimal("0"), ge=0)
    force: bool = False

    @model_validator(mode="after")
    def check_dates(self) -> "LeaseCreate":
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class LeaseTerminate(BaseModel):
    """Ends a lease on ``end_date`` (exclusive); the property is free from that day."""

    end_date: date


class LeaseResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    tenant_name: str
    tenant_email: str | None = None
    start_date: date
    end_date: date | None = None
    monthly_rent: Decimal
    deposit_paid: Decimal
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LeaseListResponse(BaseModel):
    items: list[LeaseResponse]
    total: int

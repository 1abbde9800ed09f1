"""Bookings API router: CRUD, availability queries and check-in/out.

Ownership rule: a user can only access bookings that belong to **their**
properties. Every booking query filters through ``Property.owner_id``.

Writes that can introduce an overlap lock the property row first
(:func:`~rentops.services.snapshot_service.lock_property`), then read the
snapshot, then write, all in the request transaction.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentops.api.deps import get_current_active_user, get_db
from rentops.api.errors import enforce_verdict, http_error_for
from rentops.config import settings
from rentops.errors import RentOpsError
from rentops.models.booking import Booking
from rentops.models.property import Property
from rentops.models.user import User
from rentops.schemas.auth import MessageResponse
from rentops.schemas.availability import (
    AvailabilityResponse,
    BatchAvailabilityItem,
    BatchAvailabilityRequest,
    BatchAvailabilityResponse,
    ConflictResponse,
)
from rentops.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
)
from rentops.services.availability_service import check_availability, check_batch_availability
from rentops.services.reservations import (
    BLOCKING_STATUSES,
    ReservationKind,
    ReservationStatus,
    nights_between,
)
from rentops.services.snapshot_service import load_properties, load_snapshot, lock_property

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])

_RANGE_DETAIL = "check_out must be after check_in"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _today() -> date | None:
    """Cut-off for new check-ins, or ``None`` when past check-ins are allowed."""
    return date.today() if settings.reject_past_check_in else None


async def _get_booking_with_ownership(
    booking_id: uuid.UUID,
    current_user: User,
    db: AsyncSession,
) -> Booking:
    """Fetch a booking and verify the user owns the associated property.

    Raises ``HTTPException 404`` when the booking does not exist or does not
    belong to a property owned by the current user.
    """
    result = await db.execute(
        select(Booking)
        .join(Property, Booking.property_id == Property.id)
        .where(Booking.id == booking_id, Property.owner_id == current_user.id)
    )
    booking = result.scalar_one_or_none()

    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


async def _verify_booking_dates(
    db: AsyncSession,
    current_user: User,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    *,
    exclude_booking_id: uuid.UUID | None = None,
    force: bool = False,
    today: date | None = None,
) -> Property:
    """Lock the property and make sure the stay may be written.

    Raises 404 for unknown properties, 422 for policy violations and 409 for
    conflicts (unless ``force``).
    """
    prop = await lock_property(db, property_id, current_user.id)
    if prop is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )

    snapshot = await load_snapshot(db, [prop], check_in, check_out)
    try:
        verdict = check_availability(
            snapshot,
            prop.id,
            check_in,
            check_out,
            exclude_reservation_id=exclude_booking_id,
            kind=ReservationKind.BOOKING,
            today=today,
        )
    except RentOpsError as exc:
        raise http_error_for(exc, _RANGE_DETAIL) from exc

    enforce_verdict(verdict, force=force, subject=f"booking on property {prop.id}")
    return prop


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    summary="Check whether a property is free for a date range",
)
async def get_availability(
    property_id: uuid.UUID = Query(..., description="Property to check"),
    check_in: date = Query(..., description="Arrival date"),
    check_out: date = Query(..., description="Departure date (not occupied)"),
    exclude_booking_id: uuid.UUID | None = Query(None, description="Booking being edited"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> AvailabilityResponse:
    """Return an availability verdict with any conflicting reservations.

    Business-rule rejections (minimum stay, listing not open yet, ...) come
    back as ``available: false`` with a ``reason`` and no conflicts.
    """
    properties = await load_properties(db, current_user.id, [property_id])
    snapshot = await load_snapshot(db, properties, check_in, check_out)
    try:
        verdict = check_availability(
            snapshot,
            property_id,
            check_in,
            check_out,
            exclude_reservation_id=exclude_booking_id,
            today=_today(),
        )
    except RentOpsError as exc:
        raise http_error_for(exc, _RANGE_DETAIL) from exc

    return AvailabilityResponse(
        property_id=property_id,
        property_name=snapshot.get_property(property_id).name,
        available=verdict.available,
        conflicts=[ConflictResponse.from_reservation(r) for r in verdict.conflicts],
        reason=verdict.reason,
        nights=verdict.nights,
    )


@router.post(
    "/availability",
    response_model=BatchAvailabilityResponse,
    summary="Check one date range against several properties",
)
async def post_batch_availability(
    body: BatchAvailabilityRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BatchAvailabilityResponse:
    """Check availability for many properties at once. Unknown ids are skipped."""
    if len(body.property_ids) > settings.report_max_properties:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"At most {settings.report_max_properties} properties can be checked at once",
        )

    properties = await load_properties(db, current_user.id, body.property_ids)
    snapshot = await load_snapshot(db, properties, body.check_in, body.check_out)
    items = check_batch_availability(
        snapshot,
        body.property_ids,
        body.check_in,
        body.check_out,
        today=_today(),
    )

    results = [
        BatchAvailabilityItem(
            property_id=item.property_id,
            property_name=item.property_name,
            available=item.available,
            conflict_count=item.conflict_count,
            reason=item.reason,
        )
        for item in items
    ]
    return BatchAvailabilityResponse(
        results=results,
        available_count=sum(1 for r in results if r.available),
        total_checked=len(results),
    )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Create a booking for a property owned by the current user.

    Validates that:
    - The property belongs to the current user.
    - The stay satisfies the property's business rules.
    - No active booking or lease overlaps the dates, unless ``force`` is set.
    """
    prop = await _verify_booking_dates(
        db,
        current_user,
        body.property_id,
        body.check_in,
        body.check_out,
        force=body.force,
        today=_today(),
    )

    data = body.model_dump(exclude={"force"})
    if data["total_price"] is None and prop.daily_rate is not None:
        data["total_price"] = prop.daily_rate * nights_between(body.check_in, body.check_out)

    booking = Booking(**data)
    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    logger.info("Created booking %s on property %s", booking.id, prop.id)
    return booking


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List bookings for the current user's properties",
)
async def list_bookings(
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    check_in_from: date | None = Query(None, description="Bookings with check_in >= this date"),
    check_in_to: date | None = Query(None, description="Bookings with check_in <= this date"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    """Return a paginated list of bookings for properties owned by the user."""
    filters = [Property.owner_id == current_user.id]
    if property_id is not None:
        filters.append(Booking.property_id == property_id)
    if status_filter is not None:
        filters.append(Booking.status == status_filter)
    if check_in_from is not None:
        filters.append(Booking.check_in >= check_in_from)
    if check_in_to is not None:
        filters.append(Booking.check_in <= check_in_to)

    count_query = (
        select(func.count()).select_from(Booking).join(Property, Booking.property_id == Property.id).where(*filters)
    )
    total = (await db.execute(count_query)).scalar_one()

    items_query = (
        select(Booking)
        .join(Property, Booking.property_id == Property.id)
        .where(*filters)
        .order_by(Booking.check_in, Booking.id)
        .offset(skip)
        .limit(limit)
    )
    items = list((await db.execute(items_query)).scalars().all())

    return {"items": items, "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Retrieve a single booking owned (through its property) by the user."""
    return await _get_booking_with_ownership(booking_id, current_user, db)


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Update a booking",
)
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Partially update a booking.

    Availability is re-checked (excluding the booking itself) whenever the
    result is an active booking and the dates, the property, or the status
    changed in a way that could create an overlap, such as reinstating a
    cancelled booking.
    """
    booking = await _get_booking_with_ownership(booking_id, current_user, db)

    update_data = body.model_dump(exclude_unset=True)
    force = update_data.pop("force", False)

    effective_check_in = update_data.get("check_in", booking.check_in)
    effective_check_out = update_data.get("check_out", booking.check_out)
    effective_property_id = update_data.get("property_id", booking.property_id)
    effective_status = ReservationStatus(update_data.get("status", booking.status))

    if effective_check_out <= effective_check_in:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_RANGE_DETAIL)

    dates_changed = effective_check_in != booking.check_in or effective_check_out != booking.check_out
    property_changed = effective_property_id != booking.property_id
    reactivated = booking.status not in BLOCKING_STATUSES and effective_status in BLOCKING_STATUSES

    if effective_status in BLOCKING_STATUSES and (dates_changed or property_changed or reactivated):
        await _verify_booking_dates(
            db,
            current_user,
            effective_property_id,
            effective_check_in,
            effective_check_out,
            exclude_booking_id=booking.id,
            force=force,
        )
    elif property_changed and await lock_property(db, effective_property_id, current_user.id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )

    for field, value in update_data.items():
        setattr(booking, field, value)

    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    return booking


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    summary="Delete a booking",
)
async def delete_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    """Delete a booking. Only bookings on properties owned by the user can be deleted."""
    booking = await _get_booking_with_ownership(booking_id, current_user, db)

    await db.delete(booking)
    await db.flush()
    return {"message": "Booking deleted"}


# ---------------------------------------------------------------------------
# Check-in / check-out
# ---------------------------------------------------------------------------


@router.post(
    "/{booking_id}/check-in",
    response_model=BookingResponse,
    summary="Check a guest in",
)
async def check_in_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Move a pending or confirmed booking to ``checked_in``."""
    booking = await _get_booking_with_ownership(booking_id, current_user, db)
    if booking.status not in (ReservationStatus.PENDING, ReservationStatus.CONFIRMED):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot check in a booking with status: {booking.status}",
        )

    booking.status = ReservationStatus.CHECKED_IN.value
    booking.checked_in_at = datetime.now(timezone.utc)
    await db.flush()
    await db.refresh(booking)
    return booking


@router.post(
    "/{booking_id}/check-out",
    response_model=BookingResponse,
    summary="Check a guest out",
)
async def check_out_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Move a checked-in booking to ``checked_out``. The dates stay as booked."""
    booking = await _get_booking_with_ownership(booking_id, current_user, db)
    if booking.status != ReservationStatus.CHECKED_IN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot check out a booking with status: {booking.status}",
        )

    booking.status = ReservationStatus.CHECKED_OUT.value
    booking.checked_out_at = datetime.now(timezone.utc)
    await db.flush()
    await db.refresh(booking)
    return booking

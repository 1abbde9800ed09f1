"""Properties CRUD API routes: ownership-scoped."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentops.api.deps import get_current_active_user, get_db
from rentops.models.booking import Booking
from rentops.models.lease import Lease
from rentops.models.property import Property
from rentops.models.user import User
from rentops.schemas.auth import MessageResponse
from rentops.schemas.availability import (
    ConflictResponse,
    DoubleBookingListResponse,
    DoubleBookingResponse,
)
from rentops.schemas.property import (
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from rentops.services.overlap_checker import find_double_bookings
from rentops.services.snapshot_service import load_snapshot

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


async def get_owned_property(property_id: uuid.UUID, current_user: User, db: AsyncSession) -> Property:
    """Fetch a property owned by ``current_user`` or raise 404."""
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()

    if prop is None or prop.owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    return prop


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new property",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PropertyResponse:
    """Create a property owned by the authenticated user."""
    prop = Property(owner_id=current_user.id, **body.model_dump())
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="List properties owned by the current user",
)
async def list_properties(
    status_filter: str | None = Query(None, alias="status"),
    rental_type: str | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PropertyListResponse:
    """Return paginated properties belonging to the current user."""
    filters = [Property.owner_id == current_user.id]
    if status_filter is not None:
        filters.append(Property.status == status_filter)
    if rental_type is not None:
        filters.append(Property.rental_type == rental_type)

    total = (await db.execute(select(func.count()).select_from(Property).where(*filters))).scalar_one()

    items_query = select(Property).where(*filters).order_by(Property.created_at.desc()).offset(skip).limit(limit)
    items = (await db.execute(items_query)).scalars().all()

    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a property by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PropertyResponse:
    """Retrieve a single property. Returns 404 if not found or not owned."""
    prop = await get_owned_property(property_id, current_user, db)
    return PropertyResponse.model_validate(prop)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PropertyResponse:
    """Partially update a property. Only explicitly set fields are changed."""
    prop = await get_owned_property(property_id, current_user, db)

    update_data = body.model_dump(exclude_unset=True)
    minimum_stay = update_data.get("minimum_stay", prop.minimum_stay)
    maximum_stay = update_data.get("maximum_stay", prop.maximum_stay)
    if minimum_stay is not None and maximum_stay is not None and maximum_stay < minimum_stay:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="maximum_stay must be at least minimum_stay",
        )

    for field, value in update_data.items():
        setattr(prop, field, value)

    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delete a property",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    """Delete a property together with its bookings and leases."""
    prop = await get_owned_property(property_id, current_user, db)

    await db.execute(delete(Booking).where(Booking.property_id == prop.id))
    await db.execute(delete(Lease).where(Lease.property_id == prop.id))
    await db.delete(prop)
    await db.flush()

    return MessageResponse(message="Property deleted")


@router.get(
    "/{property_id}/double-bookings",
    response_model=DoubleBookingListResponse,
    summary="List overlapping active reservations on a property",
)
async def list_double_bookings(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DoubleBookingListResponse:
    """Report reservation pairs that were accepted despite overlapping."""
    prop = await get_owned_property(property_id, current_user, db)
    snapshot = await load_snapshot(db, [prop])

    pairs = find_double_bookings(snapshot, prop.id)
    return DoubleBookingListResponse(
        property_id=prop.id,
        items=[
            DoubleBookingResponse(
                first=ConflictResponse.from_reservation(first),
                second=ConflictResponse.from_reservation(second),
            )
            for first, second in pairs
        ],
        total=len(pairs),
    )

"""Leases API router: long-term tenancies that share availability with bookings.

On properties let both short- and long-term, a lease blocks bookings for its
whole term and vice versa.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentops.api.deps import get_current_active_user, get_db
from rentops.api.errors import enforce_verdict, http_error_for
from rentops.errors import RentOpsError
from rentops.models.lease import Lease
from rentops.models.property import Property
from rentops.models.user import User
from rentops.schemas.auth import MessageResponse
from rentops.schemas.lease import LeaseCreate, LeaseListResponse, LeaseResponse, LeaseTerminate
from rentops.services.availability_service import check_availability
from rentops.services.reservations import OPEN_ENDED, ReservationKind, ReservationStatus
from rentops.services.snapshot_service import load_snapshot, lock_property

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/leases", tags=["leases"])


async def _get_lease_with_ownership(lease_id: uuid.UUID, current_user: User, db: AsyncSession) -> Lease:
    result = await db.execute(
        select(Lease)
        .join(Property, Lease.property_id == Property.id)
        .where(Lease.id == lease_id, Property.owner_id == current_user.id)
    )
    lease = result.scalar_one_or_none()
    if lease is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lease not found",
        )
    return lease


@router.post(
    "",
    response_model=LeaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a lease",
)
async def create_lease(
    body: LeaseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Lease:
    """Create a lease after checking the property is free for the whole term.

    Leases may start in the past so existing tenancies can be recorded.
    """
    prop = await lock_property(db, body.property_id, current_user.id)
    if prop is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )

    snapshot = await load_snapshot(db, [prop], body.start_date, body.end_date)
    try:
        verdict = check_availability(
            snapshot,
            prop.id,
            body.start_date,
            body.end_date or OPEN_ENDED,
            kind=ReservationKind.LEASE,
        )
    except RentOpsError as exc:
        raise http_error_for(exc, "end_date must be after start_date") from exc
    enforce_verdict(verdict, force=body.force, subject=f"lease on property {prop.id}")

    lease = Lease(status=ReservationStatus.ACTIVE.value, **body.model_dump(exclude={"force"}))
    db.add(lease)
    await db.flush()
    await db.refresh(lease)
    logger.info("Created lease %s on property %s", lease.id, prop.id)
    return lease


@router.get(
    "",
    response_model=LeaseListResponse,
    summary="List leases for the current user's properties",
)
async def list_leases(
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    status_filter: str | None = Query(None, alias="status", description="active or terminated"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> LeaseListResponse:
    filters = [Property.owner_id == current_user.id]
    if property_id is not None:
        filters.append(Lease.property_id == property_id)
    if status_filter is not None:
        filters.append(Lease.status == status_filter)

    count_query = select(func.count()).select_from(Lease).join(Property, Lease.property_id == Property.id)
    total = (await db.execute(count_query.where(*filters))).scalar_one()

    items_query = (
        select(Lease)
        .join(Property, Lease.property_id == Property.id)
        .where(*filters)
        .order_by(Lease.start_date, Lease.id)
        .offset(skip)
        .limit(limit)
    )
    items = (await db.execute(items_query)).scalars().all()
    return LeaseListResponse(items=[LeaseResponse.model_validate(lease) for lease in items], total=total)


@router.get("/{lease_id}", response_model=LeaseResponse, summary="Get a lease")
async def get_lease(
    lease_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Lease:
    return await _get_lease_with_ownership(lease_id, current_user, db)


@router.post(
    "/{lease_id}/terminate",
    response_model=LeaseResponse,
    summary="Terminate a lease",
)
async def terminate_lease(
    lease_id: uuid.UUID,
    body: LeaseTerminate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Lease:
    """End an active lease early. The property is free from ``end_date`` on.

    A terminated lease no longer blocks availability but still counts toward
    occupancy for the days it covered.
    """
    lease = await _get_lease_with_ownership(lease_id, current_user, db)

    if lease.status != ReservationStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot terminate a lease with status: {lease.status}",
        )
    if body.end_date <= lease.start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must be after start_date",
        )
    if lease.end_date is not None and body.end_date > lease.end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date cannot be later than the lease's scheduled end",
        )

    lease.end_date = body.end_date
    lease.status = ReservationStatus.TERMINATED.value
    await db.flush()
    await db.refresh(lease)
    logger.info("Terminated lease %s effective %s", lease.id, body.end_date)
    return lease


@router.delete("/{lease_id}", response_model=MessageResponse, summary="Delete a lease")
async def delete_lease(
    lease_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    lease = await _get_lease_with_ownership(lease_id, current_user, db)
    await db.delete(lease)
    await db.flush()
    return MessageResponse(message="Lease deleted")

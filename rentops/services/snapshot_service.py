"""Snapshot loader: reads properties, bookings and leases into a ReservationSnapshot.

This is the only module that touches the database on behalf of the
availability and occupancy services. Everything it returns is detached,
immutable data, so the services stay pure.
"""

import logging
import uuid
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentops.models.booking import Booking
from rentops.models.lease import Lease
from rentops.models.property import Property
from rentops.services.reservations import (
    OPEN_ENDED,
    PropertyProfile,
    RentalType,
    Reservation,
    ReservationKind,
    ReservationSnapshot,
    ReservationStatus,
)

logger = logging.getLogger(__name__)

_MONTHS_PER_YEAR = Decimal("12")
_DAYS_PER_YEAR = Decimal("365")


# ---------------------------------------------------------------------------
# Row projections
# ---------------------------------------------------------------------------


def property_to_profile(prop: Property) -> PropertyProfile:
    return PropertyProfile(
        id=prop.id,
        name=prop.name,
        rental_type=RentalType(prop.rental_type),
        daily_rate=prop.daily_rate,
        minimum_stay=prop.minimum_stay,
        maximum_stay=prop.maximum_stay,
        available_from=prop.available_from,
    )


def booking_to_reservation(booking: Booking) -> Reservation:
    return Reservation(
        id=booking.id,
        property_id=booking.property_id,
        kind=ReservationKind.BOOKING,
        status=ReservationStatus(booking.status),
        start=booking.check_in,
        end=booking.check_out,
        revenue=Decimal(booking.total_price or 0),
        guest_name=booking.guest_name,
    )


def prorated_lease_rent(
    monthly_rent: Decimal,
    start: date,
    end: date,
    window: tuple[date, date] | None = None,
) -> Decimal:
    """Rent a lease earns inside ``window`` (or over its whole term).

    Monthly rent is converted to a daily rate on a 365-day year. An
    open-ended lease without a window has no finite term and earns zero here.
    """
    lo, hi = start, end
    if window is not None:
        lo, hi = max(lo, window[0]), min(hi, window[1])
    if lo >= hi or hi == OPEN_ENDED:
        return Decimal("0")
    daily = Decimal(monthly_rent) * _MONTHS_PER_YEAR / _DAYS_PER_YEAR
    return daily * Decimal((hi - lo).days)


def lease_to_reservation(lease: Lease, window: tuple[date, date] | None = None) -> Reservation:
    end = lease.end_date or OPEN_ENDED
    return Reservation(
        id=lease.id,
        property_id=lease.property_id,
        kind=ReservationKind.LEASE,
        status=ReservationStatus(lease.status),
        start=lease.start_date,
        end=end,
        revenue=prorated_lease_rent(lease.monthly_rent, lease.start_date, end, window),
        guest_name=lease.tenant_name,
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def load_properties(
    db: AsyncSession,
    owner_id: uuid.UUID,
    property_ids: Sequence[uuid.UUID] | None = None,
) -> list[Property]:
    """Properties owned by ``owner_id``, optionally restricted to ``property_ids``."""
    query = select(Property).where(Property.owner_id == owner_id)
    if property_ids is not None:
        query = query.where(Property.id.in_(list(property_ids)))
    result = await db.execute(query.order_by(Property.name, Property.id))
    return list(result.scalars().all())


async def lock_property(db: AsyncSession, property_id: uuid.UUID, owner_id: uuid.UUID) -> Property | None:
    """Fetch an owned property with a row lock held until the transaction ends.

    Reservation writes take this lock before reading the snapshot, so two
    requests cannot both see a free range and both book it.
    """
    result = await db.execute(
        select(Property)
        .where(Property.id == property_id, Property.owner_id == owner_id)
        .with_for_update()
    )
    return result.scalar_one_or_none()


async def load_snapshot(
    db: AsyncSession,
    properties: Sequence[Property],
    start: date | None = None,
    end: date | None = None,
) -> ReservationSnapshot:
    """Build a snapshot for ``properties`` with reservations touching ``[start, end)``.

    Without bounds every reservation of the properties is loaded. Lease
    revenue is pro-rated to the bounds when both are given.
    """
    property_ids = [p.id for p in properties]
    profiles = [property_to_profile(p) for p in properties]
    if not property_ids:
        return ReservationSnapshot.build(profiles)

    booking_query = select(Booking).where(Booking.property_id.in_(property_ids))
    lease_query = select(Lease).where(Lease.property_id.in_(property_ids))
    if end is not None:
        booking_query = booking_query.where(Booking.check_in < end)
        lease_query = lease_query.where(Lease.start_date < end)
    if start is not None:
        booking_query = booking_query.where(Booking.check_out > start)
        lease_query = lease_query.where(or_(Lease.end_date.is_(None), Lease.end_date > start))

    bookings = (await db.execute(booking_query)).scalars().all()
    leases = (await db.execute(lease_query)).scalars().all()

    window = (start, end) if start is not None and end is not None else None
    reservations: list[Reservation] = []
    for booking in bookings:
        if booking.check_out <= booking.check_in:
            logger.warning("Skipping booking %s with empty date range", booking.id)
            continue
        reservations.append(booking_to_reservation(booking))
    for lease in leases:
        if lease.end_date is not None and lease.end_date <= lease.start_date:
            logger.warning("Skipping lease %s with empty date range", lease.id)
            continue
        reservations.append(lease_to_reservation(lease, window))

    logger.debug(
        "Loaded snapshot: %d properties, %d bookings, %d leases",
        len(profiles),
        len(bookings),
        len(leases),
    )
    return ReservationSnapshot.build(profiles, reservations)

"""Tests for loading reservation snapshots from the database."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from rentops.models.booking import Booking
from rentops.models.lease import Lease
from rentops.models.property import Property
from rentops.models.user import User
from rentops.services.reservations import OPEN_ENDED, RentalType, ReservationKind, ReservationStatus
from rentops.services.snapshot_service import (
    booking_to_reservation,
    lease_to_reservation,
    load_properties,
    load_snapshot,
    lock_property,
    prorated_lease_rent,
    property_to_profile,
)


class TestProratedLeaseRent:
    """3650 a month is 120 a day on a 365-day year."""

    def test_whole_term(self):
        assert prorated_lease_rent(Decimal("3650"), date(2024, 1, 1), date(2024, 1, 11)) == Decimal("1200")

    def test_clipped_to_window(self):
        rent = prorated_lease_rent(
            Decimal("3650"),
            date(2024, 1, 1),
            date(2024, 1, 11),
            window=(date(2024, 1, 6), date(2024, 2, 1)),
        )
        assert rent == Decimal("600")

    def test_open_ended_in_window(self):
        rent = prorated_lease_rent(
            Decimal("3650"),
            date(2024, 1, 1),
            OPEN_ENDED,
            window=(date(2024, 6, 1), date(2024, 7, 1)),
        )
        assert rent == Decimal("3600")

    def test_open_ended_without_window(self):
        assert prorated_lease_rent(Decimal("3650"), date(2024, 1, 1), OPEN_ENDED) == Decimal("0")

    def test_outside_window(self):
        rent = prorated_lease_rent(
            Decimal("3650"),
            date(2024, 1, 1),
            date(2024, 2, 1),
            window=(date(2024, 6, 1), date(2024, 7, 1)),
        )
        assert rent == Decimal("0")


class TestProjections:
    """Row-to-interval projections on unsaved model instances."""

    def test_property_to_profile(self):
        prop = Property(
            id=uuid.uuid4(),
            name="Dune House",
            property_type="house",
            rental_type="both",
            minimum_stay=3,
            available_from=date(2024, 6, 1),
        )
        profile = property_to_profile(prop)
        assert profile.rental_type == RentalType.BOTH
        assert profile.minimum_stay == 3
        assert profile.available_from == date(2024, 6, 1)

    def test_booking_without_price_has_zero_revenue(self):
        booking = Booking(
            id=uuid.uuid4(),
            property_id=uuid.uuid4(),
            guest_name="Sarah Chen",
            check_in=date(2024, 6, 1),
            check_out=date(2024, 6, 4),
            status="confirmed",
        )
        reservation = booking_to_reservation(booking)
        assert reservation.kind == ReservationKind.BOOKING
        assert reservation.status == ReservationStatus.CONFIRMED
        assert reservation.revenue == Decimal("0")
        assert reservation.guest_name == "Sarah Chen"

    def test_open_ended_lease(self):
        lease = Lease(
            id=uuid.uuid4(),
            property_id=uuid.uuid4(),
            tenant_name="Pieter van Wyk",
            start_date=date(2024, 1, 1),
            end_date=None,
            monthly_rent=Decimal("3650"),
            status="active",
        )
        reservation = lease_to_reservation(lease, window=(date(2024, 6, 1), date(2024, 6, 11)))
        assert reservation.kind == ReservationKind.LEASE
        assert reservation.is_open_ended
        assert reservation.revenue == Decimal("1200")


# ---------------------------------------------------------------------------
# Database queries
# ---------------------------------------------------------------------------


async def _seed(db: AsyncSession) -> tuple[User, Property, Property]:
    user = User(email=f"snap-{uuid.uuid4().hex[:8]}@test.com", name="Snap", role="manager")
    db.add(user)
    await db.flush()

    apartment = Property(owner_id=user.id, name="B Apartment", property_type="apartment", rental_type="short_term")
    house = Property(owner_id=user.id, name="A House", property_type="house", rental_type="both")
    db.add_all([apartment, house])
    await db.flush()

    db.add_all(
        [
            Booking(
                property_id=apartment.id,
                guest_name="May",
                check_in=date(2024, 5, 1),
                check_out=date(2024, 5, 5),
                status="checked_out",
                total_price=Decimal("400"),
            ),
            Booking(
                property_id=apartment.id,
                guest_name="June",
                check_in=date(2024, 6, 10),
                check_out=date(2024, 6, 12),
                status="confirmed",
                total_price=Decimal("200"),
            ),
            Lease(
                property_id=house.id,
                tenant_name="Tenant",
                start_date=date(2024, 1, 1),
                end_date=None,
                monthly_rent=Decimal("3650"),
                status="active",
            ),
            Lease(
                property_id=house.id,
                tenant_name="Old Tenant",
                start_date=date(2023, 1, 1),
                end_date=date(2023, 12, 31),
                monthly_rent=Decimal("3000"),
                status="terminated",
            ),
        ]
    )
    await db.flush()
    return user, apartment, house


@pytest.mark.asyncio
async def test_load_properties_ordered_by_name(db_session: AsyncSession):
    user, apartment, house = await _seed(db_session)
    properties = await load_properties(db_session, user.id)
    assert [p.name for p in properties] == ["A House", "B Apartment"]

    only = await load_properties(db_session, user.id, [apartment.id])
    assert [p.id for p in only] == [apartment.id]


@pytest.mark.asyncio
async def test_load_properties_scoped_to_owner(db_session: AsyncSession):
    _, apartment, _ = await _seed(db_session)
    assert await load_properties(db_session, uuid.uuid4(), [apartment.id]) == []


@pytest.mark.asyncio
async def test_lock_property(db_session: AsyncSession):
    user, apartment, _ = await _seed(db_session)
    assert (await lock_property(db_session, apartment.id, user.id)).id == apartment.id
    assert await lock_property(db_session, apartment.id, uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_load_snapshot_unbounded(db_session: AsyncSession):
    _, apartment, house = await _seed(db_session)
    snapshot = await load_snapshot(db_session, [apartment, house])
    assert len(snapshot.for_property(apartment.id)) == 2
    assert len(snapshot.for_property(house.id)) == 2


@pytest.mark.asyncio
async def test_load_snapshot_bounded_to_window(db_session: AsyncSession):
    _, apartment, house = await _seed(db_session)
    snapshot = await load_snapshot(db_session, [apartment, house], date(2024, 6, 1), date(2024, 7, 1))

    (booking,) = snapshot.for_property(apartment.id)
    assert booking.guest_name == "June"
    assert booking.revenue == Decimal("200")

    (lease,) = snapshot.for_property(house.id)
    assert lease.is_open_ended
    # 30 days at 120 a day
    assert lease.revenue == Decimal("3600")


@pytest.mark.asyncio
async def test_load_snapshot_without_properties(db_session: AsyncSession):
    snapshot = await load_snapshot(db_session, [])
    assert snapshot.properties == {}

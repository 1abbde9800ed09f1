"""Unit tests for the reservation interval model and snapshot."""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from rentops.errors import InvalidRangeError, PropertyNotFoundError
from rentops.services.reservations import (
    OPEN_ENDED,
    PropertyProfile,
    RentalType,
    Reservation,
    ReservationKind,
    ReservationSnapshot,
    ReservationStatus,
    accepted_kinds,
    nights_between,
)


def _booking(start: date, end: date, status=ReservationStatus.CONFIRMED, **kwargs) -> Reservation:
    return Reservation(
        id=kwargs.pop("id", uuid.uuid4()),
        property_id=kwargs.pop("property_id", uuid.uuid4()),
        kind=kwargs.pop("kind", ReservationKind.BOOKING),
        status=status,
        start=start,
        end=end,
        **kwargs,
    )


class TestReservation:
    """Test interval behaviour of a single reservation."""

    def test_empty_range_rejected(self):
        with pytest.raises(InvalidRangeError):
            _booking(date(2024, 6, 5), date(2024, 6, 5))

    def test_reversed_range_rejected(self):
        with pytest.raises(ValueError):
            _booking(date(2024, 6, 5), date(2024, 6, 1))

    def test_nights(self):
        assert _booking(date(2024, 6, 1), date(2024, 6, 5)).nights == 4

    def test_touching_ranges_do_not_overlap(self):
        r = _booking(date(2024, 6, 1), date(2024, 6, 5))
        assert not r.overlaps(date(2024, 6, 5), date(2024, 6, 8))
        assert not r.overlaps(date(2024, 5, 28), date(2024, 6, 1))

    def test_partial_overlap(self):
        r = _booking(date(2024, 6, 1), date(2024, 6, 5))
        assert r.overlaps(date(2024, 6, 4), date(2024, 6, 6))
        assert r.overlaps(date(2024, 5, 30), date(2024, 6, 2))

    def test_containing_range_overlaps(self):
        r = _booking(date(2024, 6, 2), date(2024, 6, 3))
        assert r.overlaps(date(2024, 6, 1), date(2024, 6, 10))

    def test_contains_day_excludes_end(self):
        r = _booking(date(2024, 6, 1), date(2024, 6, 3))
        assert r.contains_day(date(2024, 6, 1))
        assert r.contains_day(date(2024, 6, 2))
        assert not r.contains_day(date(2024, 6, 3))

    def test_clip_inside_window(self):
        r = _booking(date(2024, 5, 28), date(2024, 6, 3))
        assert r.clip(date(2024, 6, 1), date(2024, 7, 1)) == (date(2024, 6, 1), date(2024, 6, 3))

    def test_clip_outside_window(self):
        r = _booking(date(2024, 5, 1), date(2024, 5, 5))
        assert r.clip(date(2024, 6, 1), date(2024, 7, 1)) is None

    @pytest.mark.parametrize(
        ("status", "blocking", "occupying"),
        [
            (ReservationStatus.PENDING, True, True),
            (ReservationStatus.CONFIRMED, True, True),
            (ReservationStatus.CHECKED_IN, True, True),
            (ReservationStatus.CHECKED_OUT, False, True),
            (ReservationStatus.CANCELLED, False, False),
            (ReservationStatus.NO_SHOW, False, False),
            (ReservationStatus.ACTIVE, True, True),
            (ReservationStatus.TERMINATED, False, True),
        ],
    )
    def test_status_classification(self, status, blocking, occupying):
        r = _booking(date(2024, 6, 1), date(2024, 6, 2), status=status)
        assert r.is_blocking is blocking
        assert r.is_occupying is occupying

    def test_open_ended_lease(self):
        r = _booking(date(2024, 1, 1), OPEN_ENDED, kind=ReservationKind.LEASE, status=ReservationStatus.ACTIVE)
        assert r.is_open_ended
        assert r.overlaps(date(2090, 1, 1), date(2090, 1, 2))

    def test_default_revenue_is_zero(self):
        assert _booking(date(2024, 6, 1), date(2024, 6, 2)).revenue == Decimal("0")


class TestAcceptedKinds:
    def test_short_term(self):
        assert accepted_kinds(RentalType.SHORT_TERM) == {ReservationKind.BOOKING}

    def test_long_term(self):
        assert accepted_kinds(RentalType.LONG_TERM) == {ReservationKind.LEASE}

    def test_both(self):
        assert accepted_kinds("both") == {ReservationKind.BOOKING, ReservationKind.LEASE}


class TestSnapshot:
    """Test snapshot grouping and lookups."""

    def test_reservations_sorted_by_start(self):
        pid = uuid.uuid4()
        late = _booking(date(2024, 6, 10), date(2024, 6, 12), property_id=pid)
        early = _booking(date(2024, 6, 1), date(2024, 6, 3), property_id=pid)
        snapshot = ReservationSnapshot.build([PropertyProfile(id=pid, name="P")], [late, early])
        assert snapshot.for_property(pid) == (early, late)

    def test_reservations_grouped_by_property(self):
        p1, p2 = uuid.uuid4(), uuid.uuid4()
        r1 = _booking(date(2024, 6, 1), date(2024, 6, 3), property_id=p1)
        r2 = _booking(date(2024, 6, 1), date(2024, 6, 3), property_id=p2)
        snapshot = ReservationSnapshot.build(
            [PropertyProfile(id=p1, name="A"), PropertyProfile(id=p2, name="B")],
            [r1, r2],
        )
        assert snapshot.for_property(p1) == (r1,)
        assert snapshot.for_property(p2) == (r2,)

    def test_property_without_reservations(self):
        pid = uuid.uuid4()
        snapshot = ReservationSnapshot.build([PropertyProfile(id=pid, name="P")])
        assert snapshot.for_property(pid) == ()
        assert snapshot.has_property(pid)

    def test_unknown_property_raises(self):
        snapshot = ReservationSnapshot.build([])
        missing = uuid.uuid4()
        with pytest.raises(PropertyNotFoundError) as exc_info:
            snapshot.get_property(missing)
        assert exc_info.value.property_id == missing


def test_nights_between():
    assert nights_between(date(2024, 2, 28), date(2024, 3, 1)) == 2

"""Overlap checker: finds reservations that collide with a candidate date range."""

import logging
import uuid
from datetime import date

from rentops.errors import InvalidRangeError
from rentops.services.reservations import (
    Reservation,
    ReservationKind,
    ReservationSnapshot,
)

logger = logging.getLogger(__name__)


def _competing_kinds(
    snapshot: ReservationSnapshot,
    property_id: uuid.UUID,
    kind: ReservationKind | None,
) -> frozenset[ReservationKind]:
    """Kinds a candidate of ``kind`` competes with on this property.

    Bookings and leases only share an overlap space on properties let both
    ways; elsewhere a candidate only competes with its own kind.
    """
    if kind is None:
        return frozenset(ReservationKind)
    if snapshot.has_property(property_id):
        profile = snapshot.get_property(property_id)
        if kind in profile.accepted_kinds and len(profile.accepted_kinds) > 1:
            return profile.accepted_kinds
    return frozenset({ReservationKind(kind)})


def check_overlap(
    snapshot: ReservationSnapshot,
    property_id: uuid.UUID,
    start: date,
    end: date,
    exclude_reservation_id: uuid.UUID | None = None,
    kind: ReservationKind | None = None,
) -> list[Reservation]:
    """Return the blocking reservations that overlap ``[start, end)``.

    Args:
        snapshot: Reservations to scan.
        property_id: Property the candidate is for.
        start: Candidate check-in / lease start.
        end: Candidate check-out / lease end (exclusive).
        exclude_reservation_id: Reservation being edited; never reported as
            conflicting with itself.
        kind: Kind of the candidate. ``None`` checks against every kind.

    Returns:
        Conflicting reservations ordered by start date. Empty when the range
        is free.

    Raises:
        InvalidRangeError: If ``end`` is not after ``start``.
    """
    if end <= start:
        raise InvalidRangeError(start, end)

    competing = _competing_kinds(snapshot, property_id, kind)
    conflicts = [
        reservation
        for reservation in snapshot.for_property(property_id)
        if reservation.is_blocking
        and reservation.kind in competing
        and reservation.id != exclude_reservation_id
        and reservation.overlaps(start, end)
    ]
    conflicts.sort(key=Reservation.sort_key)

    if conflicts:
        logger.debug(
            "Found %d conflicting reservation(s) for property %s in [%s, %s)",
            len(conflicts),
            property_id,
            start,
            end,
        )
    return conflicts


def find_double_bookings(
    snapshot: ReservationSnapshot,
    property_id: uuid.UUID,
) -> list[tuple[Reservation, Reservation]]:
    """Return every pair of blocking reservations that overlap each other.

    Overrides ("create anyway") can leave a property double-booked; this
    surfaces the pairs so they can be resolved. Pairs are ordered by the
    earlier reservation's start date.
    """
    profile_kinds = (
        snapshot.get_property(property_id).accepted_kinds
        if snapshot.has_property(property_id)
        else frozenset(ReservationKind)
    )
    blocking = [
        r for r in snapshot.for_property(property_id) if r.is_blocking and r.kind in profile_kinds
    ]
    pairs: list[tuple[Reservation, Reservation]] = []
    # Sweep: reservations are sorted by start, so once a later one starts at or
    # after the current one's end, no further reservation can overlap it.
    for i, first in enumerate(blocking):
        for second in blocking[i + 1 :]:
            if second.start >= first.end:
                break
            pairs.append((first, second))
    return pairs

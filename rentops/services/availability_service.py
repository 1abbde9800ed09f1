"""Availability service: business rules on top of the overlap checker.

A verdict distinguishes two kinds of "no": a *policy* rejection (stay too
short, listing not open yet, ...) carries a ``reason`` and never lists
conflicts, while a *scheduling* rejection lists the conflicting reservations
and has no reason. Callers may still create a reservation despite conflicts.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from rentops.errors import InvalidRangeError
from rentops.services.overlap_checker import check_overlap
from rentops.services.reservations import (
    PropertyProfile,
    Reservation,
    ReservationKind,
    ReservationSnapshot,
    nights_between,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityVerdict:
    """Result of an availability query. Computed per request, never cached."""

    available: bool
    conflicts: tuple[Reservation, ...] = ()
    reason: str | None = None
    nights: int = 0

    @property
    def is_policy_violation(self) -> bool:
        return self.reason is not None


@dataclass(frozen=True)
class BatchAvailabilityItem:
    property_id: uuid.UUID
    property_name: str
    available: bool
    conflict_count: int
    reason: str | None = None


def evaluate_policies(
    profile: PropertyProfile,
    start: date,
    end: date,
    kind: ReservationKind = ReservationKind.BOOKING,
    today: date | None = None,
) -> str | None:
    """Return the first business rule the stay breaks, or ``None``.

    Minimum and maximum stay only apply to bookings; leases are governed by
    their contract length instead.
    """
    nights = nights_between(start, end)

    if today is not None and start < today:
        return "Check-in date cannot be in the past"

    if not profile.accepts(kind):
        if kind == ReservationKind.BOOKING:
            return "Property does not accept short-term bookings"
        return "Property does not accept long-term leases"

    if profile.available_from is not None and start < profile.available_from:
        return f"Property is not available before {profile.available_from.isoformat()}"

    if kind == ReservationKind.BOOKING:
        if profile.minimum_stay and nights < profile.minimum_stay:
            return f"Minimum stay is {profile.minimum_stay} nights"
        if profile.maximum_stay and nights > profile.maximum_stay:
            return f"Maximum stay is {profile.maximum_stay} nights"

    return None


def check_availability(
    snapshot: ReservationSnapshot,
    property_id: uuid.UUID,
    start: date,
    end: date,
    *,
    exclude_reservation_id: uuid.UUID | None = None,
    kind: ReservationKind = ReservationKind.BOOKING,
    today: date | None = None,
) -> AvailabilityVerdict:
    """Decide whether ``property_id`` can take a reservation for ``[start, end)``.

    Args:
        snapshot: Properties and reservations to evaluate against.
        property_id: Property being reserved.
        start: Check-in (or lease start) date.
        end: Check-out (or lease end) date, exclusive.
        exclude_reservation_id: Reservation being edited, ignored as a conflict.
        kind: Whether the candidate is a booking or a lease.
        today: When given, stays starting before this date are rejected.

    Raises:
        InvalidRangeError: If ``end`` is not after ``start``.
        PropertyNotFoundError: If the property is not in the snapshot.
    """
    if end <= start:
        raise InvalidRangeError(start, end)

    profile = snapshot.get_property(property_id)
    nights = nights_between(start, end)

    reason = evaluate_policies(profile, start, end, kind, today)
    if reason is not None:
        logger.info("Availability rejected by policy for property %s: %s", property_id, reason)
        return AvailabilityVerdict(available=False, reason=reason, nights=nights)

    conflicts = check_overlap(
        snapshot,
        property_id,
        start,
        end,
        exclude_reservation_id=exclude_reservation_id,
        kind=kind,
    )
    if conflicts:
        logger.info(
            "Availability check for property %s [%s, %s) found %d conflict(s)",
            property_id,
            start,
            end,
            len(conflicts),
        )
    return AvailabilityVerdict(
        available=not conflicts,
        conflicts=tuple(conflicts),
        nights=nights,
    )


def check_batch_availability(
    snapshot: ReservationSnapshot,
    property_ids: Iterable[uuid.UUID],
    start: date,
    end: date,
    *,
    kind: ReservationKind = ReservationKind.BOOKING,
    today: date | None = None,
) -> list[BatchAvailabilityItem]:
    """Check one date range against several properties.

    Ids missing from the snapshot are skipped rather than failing the batch.
    """
    if end <= start:
        raise InvalidRangeError(start, end)

    results: list[BatchAvailabilityItem] = []
    seen: set[uuid.UUID] = set()
    for property_id in property_ids:
        if property_id in seen or not snapshot.has_property(property_id):
            continue
        seen.add(property_id)
        verdict = check_availability(snapshot, property_id, start, end, kind=kind, today=today)
        results.append(
            BatchAvailabilityItem(
                property_id=property_id,
                property_name=snapshot.get_property(property_id).name,
                available=verdict.available,
                conflict_count=len(verdict.conflicts),
                reason=verdict.reason,
            )
        )
    return results

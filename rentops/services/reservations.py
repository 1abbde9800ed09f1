"""Reservation interval model shared by the availability and occupancy services.

Bookings and leases are projected into one :class:`Reservation` type so the
overlap and occupancy algorithms never need to know which table a row came
from. Everything here is immutable; a :class:`ReservationSnapshot` is built
per request by :mod:`rentops.services.snapshot_service` and handed to the pure
service functions.
"""

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import StrEnum

from rentops.errors import InvalidRangeError, PropertyNotFoundError

# Open-ended leases have no move-out date yet.
OPEN_ENDED = date.max


class ReservationKind(StrEnum):
    BOOKING = "booking"
    LEASE = "lease"


class ReservationStatus(StrEnum):
    # Booking lifecycle
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    # Lease lifecycle
    ACTIVE = "active"
    TERMINATED = "terminated"


class RentalType(StrEnum):
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"
    BOTH = "both"


BOOKING_STATUSES = frozenset(
    {
        ReservationStatus.PENDING,
        ReservationStatus.CONFIRMED,
        ReservationStatus.CHECKED_IN,
        ReservationStatus.CHECKED_OUT,
        ReservationStatus.CANCELLED,
        ReservationStatus.NO_SHOW,
    }
)
LEASE_STATUSES = frozenset({ReservationStatus.ACTIVE, ReservationStatus.TERMINATED})

# Reservations in these statuses must not overlap within one overlap space.
BLOCKING_STATUSES = frozenset(
    {
        ReservationStatus.PENDING,
        ReservationStatus.CONFIRMED,
        ReservationStatus.CHECKED_IN,
        ReservationStatus.ACTIVE,
    }
)

# Reservations in these statuses never occupied the property.
NON_OCCUPYING_STATUSES = frozenset({ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW})

_ACCEPTED_KINDS: dict[RentalType, frozenset[ReservationKind]] = {
    RentalType.SHORT_TERM: frozenset({ReservationKind.BOOKING}),
    RentalType.LONG_TERM: frozenset({ReservationKind.LEASE}),
    RentalType.BOTH: frozenset({ReservationKind.BOOKING, ReservationKind.LEASE}),
}


def accepted_kinds(rental_type: RentalType) -> frozenset[ReservationKind]:
    """Return the reservation kinds that share a property's overlap space."""
    return _ACCEPTED_KINDS[RentalType(rental_type)]


def nights_between(start: date, end: date) -> int:
    """Number of nights in ``[start, end)``."""
    return (end - start).days


@dataclass(frozen=True)
class Reservation:
    """A booking or lease occupying a property for the half-open range ``[start, end)``."""

    id: uuid.UUID
    property_id: uuid.UUID
    kind: ReservationKind
    status: ReservationStatus
    start: date
    end: date
    revenue: Decimal = Decimal("0")
    guest_name: str = ""

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidRangeError(self.start, self.end)

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_STATUSES

    @property
    def is_occupying(self) -> bool:
        return self.status not in NON_OCCUPYING_STATUSES

    @property
    def is_open_ended(self) -> bool:
        return self.end == OPEN_ENDED

    @property
    def nights(self) -> int:
        return nights_between(self.start, self.end)

    def overlaps(self, start: date, end: date) -> bool:
        """Half-open overlap test: touching ranges do not overlap."""
        return self.start < end and start < self.end

    def contains_day(self, day: date) -> bool:
        return self.start <= day < self.end

    def clip(self, start: date, end: date) -> tuple[date, date] | None:
        """Return the part of this reservation inside ``[start, end)``, or ``None``."""
        lo = max(self.start, start)
        hi = min(self.end, end)
        if lo >= hi:
            return None
        return lo, hi

    def sort_key(self) -> tuple[date, date, str]:
        return self.start, self.end, str(self.id)


@dataclass(frozen=True)
class PropertyProfile:
    """The subset of a property the availability rules and reports need."""

    id: uuid.UUID
    name: str
    rental_type: RentalType = RentalType.SHORT_TERM
    daily_rate: Decimal | None = None
    minimum_stay: int | None = None
    maximum_stay: int | None = None
    available_from: date | None = None

    @property
    def accepted_kinds(self) -> frozenset[ReservationKind]:
        return accepted_kinds(self.rental_type)

    def accepts(self, kind: ReservationKind) -> bool:
        return kind in self.accepted_kinds


@dataclass(frozen=True)
class ReservationSnapshot:
    """Read-only view of properties and their reservations at one point in time."""

    properties: Mapping[uuid.UUID, PropertyProfile]
    reservations: tuple[Reservation, ...] = ()
    _by_property: dict[uuid.UUID, tuple[Reservation, ...]] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        grouped: dict[uuid.UUID, list[Reservation]] = {}
        for reservation in self.reservations:
            grouped.setdefault(reservation.property_id, []).append(reservation)
        for property_id, items in grouped.items():
            self._by_property[property_id] = tuple(sorted(items, key=Reservation.sort_key))

    @classmethod
    def build(
        cls,
        properties: Iterable[PropertyProfile],
        reservations: Iterable[Reservation] = (),
    ) -> "ReservationSnapshot":
        return cls(
            properties={p.id: p for p in properties},
            reservations=tuple(reservations),
        )

    def has_property(self, property_id: uuid.UUID) -> bool:
        return property_id in self.properties

    def get_property(self, property_id: uuid.UUID) -> PropertyProfile:
        try:
            return self.properties[property_id]
        except KeyError:
            raise PropertyNotFoundError(property_id) from None

    def for_property(self, property_id: uuid.UUID) -> tuple[Reservation, ...]:
        """Reservations of one property, ordered by start date."""
        return self._by_property.get(property_id, ())

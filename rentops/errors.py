"""Domain errors raised by the availability and occupancy services.

Scheduling conflicts and business-rule rejections are *not* errors; they are
reported through :class:`~rentops.services.availability_service.AvailabilityVerdict`.
Only malformed input and unknown references raise.
"""

import uuid
from datetime import date


class RentOpsError(Exception):
    """Base class for all domain errors."""


class InvalidRangeError(RentOpsError, ValueError):
    """The end of a date range is not strictly after its start."""

    def __init__(self, start: date, end: date, *, label: str = "end date") -> None:
        self.start = start
        self.end = end
        super().__init__(f"{label} must be after {start.isoformat()} (got {end.isoformat()})")


class PropertyNotFoundError(RentOpsError, LookupError):
    """A referenced property is not part of the reservation snapshot."""

    def __init__(self, property_id: uuid.UUID) -> None:
        self.property_id = property_id
        super().__init__(f"Property {property_id} not found")

"""Translate availability results and domain errors into HTTP responses."""

import logging

from fastapi import HTTPException, status

from rentops.errors import InvalidRangeError, PropertyNotFoundError, RentOpsError
from rentops.schemas.availability import ConflictResponse
from rentops.services.availability_service import AvailabilityVerdict

logger = logging.getLogger(__name__)


def http_error_for(exc: RentOpsError, range_detail: str = "end date must be after start date") -> HTTPException:
    """Map a domain error to the HTTP error the API reports for it."""
    if isinstance(exc, InvalidRangeError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=range_detail)
    if isinstance(exc, PropertyNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def enforce_verdict(verdict: AvailabilityVerdict, *, force: bool, subject: str) -> None:
    """Reject a reservation write that the verdict does not allow.

    Policy violations always fail with 422. Scheduling conflicts fail with
    409 unless ``force`` is set, in which case the override is logged and the
    write goes ahead.
    """
    if verdict.is_policy_violation:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": verdict.reason},
        )

    if verdict.available:
        return

    if force:
        logger.warning(
            "Creating %s despite %d conflicting reservation(s): %s",
            subject,
            len(verdict.conflicts),
            ", ".join(str(r.id) for r in verdict.conflicts),
        )
        return

    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "message": "Dates conflict with an existing reservation",
            "conflicts": [
                ConflictResponse.from_reservation(r).model_dump(mode="json") for r in verdict.conflicts
            ],
        },
    )

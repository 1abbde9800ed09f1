"""Reports API router: occupancy, revenue, ADR and RevPAR across properties."""

from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentops.api.deps import get_current_active_user, get_db
from rentops.api.errors import http_error_for
from rentops.config import settings
from rentops.errors import RentOpsError
from rentops.models.user import User
from rentops.schemas.reports import OccupancyReportResponse
from rentops.services.occupancy_service import RevenueAttribution, aggregate_occupancy
from rentops.services.snapshot_service import load_properties, load_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get("/occupancy", response_model=OccupancyReportResponse)
async def get_occupancy_report(
    property_id: uuid.UUID | None = Query(None, description="Limit the report to one property"),
    start_date: date | None = Query(None, description="First day of the report"),
    end_date: date | None = Query(None, description="Day after the last reported day"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> OccupancyReportResponse:
    """Occupancy report for the user's properties over ``[start_date, end_date)``.

    Without dates the report covers the last ``report_default_window_days``
    days up to today. Revenue for reservations crossing the window edge is
    attributed according to ``settings.revenue_attribution``.
    """
    end = end_date or date.today()
    start = start_date or end - timedelta(days=settings.report_default_window_days)

    if end <= start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must be after start_date",
        )
    if (end - start).days > settings.report_max_window_days:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Report window cannot exceed {settings.report_max_window_days} days",
        )

    properties = await load_properties(
        db,
        current_user.id,
        [property_id] if property_id is not None else None,
    )
    if property_id is not None and not properties:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    if len(properties) > settings.report_max_properties:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=(
                f"Report covers {len(properties)} properties; at most "
                f"{settings.report_max_properties} are allowed. Filter by property_id."
            ),
        )

    snapshot = await load_snapshot(db, properties, start, end)
    try:
        report = aggregate_occupancy(
            snapshot,
            [p.id for p in properties],
            start,
            end,
            attribution=RevenueAttribution(settings.revenue_attribution),
        )
    except RentOpsError as exc:
        raise http_error_for(exc, "end_date must be after start_date") from exc

    logger.info(
        "Occupancy report for user %s: %d properties, %s to %s",
        current_user.id,
        len(properties),
        start,
        end,
    )
    return OccupancyReportResponse.from_report(report)

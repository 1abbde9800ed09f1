"""Occupancy aggregator: per-day occupancy rolled up into rates and revenue.

For each property the reporting window is clipped to the listing's active
span, the occupying reservations are clipped to that span, sorted and merged,
and the merged intervals are swept once. Per property this costs
``O(D + R log R)`` for ``D`` days and ``R`` reservations, and overlapping
reservations (overrides, data imported from channels) never count a day twice.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import StrEnum

from rentops.errors import InvalidRangeError
from rentops.services import metrics
from rentops.services.reservations import (
    PropertyProfile,
    Reservation,
    ReservationKind,
    ReservationSnapshot,
    nights_between,
)

logger = logging.getLogger(__name__)


class RevenueAttribution(StrEnum):
    """How a reservation straddling the window edge contributes revenue.

    FULL counts the whole reservation amount for any reservation with at
    least one occupied day in the window. PRORATED counts only the share of
    nights that fall inside the window. Lease revenue is pro-rated to the
    window when the snapshot is built, so the policy only changes bookings.
    """

    FULL = "full"
    PRORATED = "prorated"


@dataclass(frozen=True)
class OccupancyMetrics:
    """Summed occupancy figures for one property or the portfolio.

    ``total_bookings`` counts every occupying reservation with at least one
    day in the listed span, leases included.
    """

    occupied_days: int = 0
    total_days: int = 0
    total_revenue: Decimal = metrics.ZERO
    total_bookings: int = 0

    @property
    def vacant_days(self) -> int:
        return self.total_days - self.occupied_days

    @property
    def occupancy_rate(self) -> Decimal:
        return metrics.round_rate(metrics.occupancy_rate(self.occupied_days, self.total_days))

    @property
    def average_daily_rate(self) -> Decimal:
        return metrics.round_money(metrics.adr(self.total_revenue, self.occupied_days))

    @property
    def rev_par(self) -> Decimal:
        return metrics.round_money(metrics.rev_par(self.total_revenue, self.total_days))

    def __add__(self, other: "OccupancyMetrics") -> "OccupancyMetrics":
        return OccupancyMetrics(
            occupied_days=self.occupied_days + other.occupied_days,
            total_days=self.total_days + other.total_days,
            total_revenue=self.total_revenue + other.total_revenue,
            total_bookings=self.total_bookings + other.total_bookings,
        )


@dataclass(frozen=True)
class PropertyOccupancy:
    property: PropertyProfile
    metrics: OccupancyMetrics


@dataclass(frozen=True)
class DailyOccupancy:
    day: date
    occupied: int  # properties occupied that day
    available: int  # listed properties left vacant that day


@dataclass(frozen=True)
class MonthlyOccupancy:
    month: str  # YYYY-MM
    occupied_days: int
    available_days: int

    @property
    def occupancy_rate(self) -> Decimal:
        return metrics.round_rate(metrics.occupancy_rate(self.occupied_days, self.available_days))


@dataclass(frozen=True)
class OccupancySummary:
    total_properties: int
    days_in_range: int
    metrics: OccupancyMetrics

    @property
    def total_available_days(self) -> int:
        return self.metrics.total_days

    @property
    def total_occupied_days(self) -> int:
        return self.metrics.occupied_days

    @property
    def overall_occupancy(self) -> Decimal:
        # Recomputed from the sums; averaging per-property rates would
        # overweight small properties.
        return self.metrics.occupancy_rate


@dataclass(frozen=True)
class OccupancyReport:
    window_start: date
    window_end: date
    attribution: RevenueAttribution
    summary: OccupancySummary
    by_property: tuple[PropertyOccupancy, ...]
    daily_occupancy: tuple[DailyOccupancy, ...]
    monthly_trend: tuple[MonthlyOccupancy, ...]


def merge_intervals(intervals: Iterable[tuple[date, date]]) -> list[tuple[date, date]]:
    """Merge overlapping or touching half-open intervals."""
    merged: list[tuple[date, date]] = []
    for start, end in sorted(intervals):
        if merged and start <= merged[-1][1]:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def active_span(profile: PropertyProfile, window_start: date, window_end: date) -> tuple[date, date] | None:
    """Part of the window during which the property was listed."""
    start = window_start
    if profile.available_from is not None and profile.available_from > start:
        start = profile.available_from
    if start >= window_end:
        return None
    return start, window_end


def attributed_revenue(
    reservation: Reservation,
    in_window: tuple[date, date],
    attribution: RevenueAttribution,
    billed: tuple[date, date] | None = None,
) -> Decimal:
    """Revenue a reservation contributes for the nights in ``in_window``.

    Lease revenue arrives already pro-rated over ``billed`` (the lease
    clipped to the report window); only the ``in_window`` share of it is
    kept, so rent for days before the listing started is dropped.
    """
    if reservation.kind == ReservationKind.LEASE:
        if billed is None or billed == in_window:
            return reservation.revenue
        return reservation.revenue * Decimal(nights_between(*in_window)) / Decimal(nights_between(*billed))
    if attribution == RevenueAttribution.FULL:
        return reservation.revenue
    share = nights_between(*in_window)
    return reservation.revenue * Decimal(share) / Decimal(reservation.nights)


def _property_occupancy(
    snapshot: ReservationSnapshot,
    profile: PropertyProfile,
    span: tuple[date, date],
    window: tuple[date, date],
    attribution: RevenueAttribution,
) -> tuple[OccupancyMetrics, list[tuple[date, date]]]:
    span_start, span_end = span
    accepted = profile.accepted_kinds

    clipped: list[tuple[date, date]] = []
    revenue = metrics.ZERO
    bookings = 0
    for reservation in snapshot.for_property(profile.id):
        if not reservation.is_occupying or reservation.kind not in accepted:
            continue
        in_window = reservation.clip(span_start, span_end)
        if in_window is None:
            continue
        clipped.append(in_window)
        billed = reservation.clip(*window)
        revenue += attributed_revenue(reservation, in_window, attribution, billed)
        bookings += 1

    merged = merge_intervals(clipped)
    occupied = sum(nights_between(start, end) for start, end in merged)
    return (
        OccupancyMetrics(
            occupied_days=occupied,
            total_days=nights_between(span_start, span_end),
            total_revenue=revenue,
            total_bookings=bookings,
        ),
        merged,
    )


def _running_totals(deltas: list[int]) -> list[int]:
    totals: list[int] = []
    running = 0
    for delta in deltas[:-1]:
        running += delta
        totals.append(running)
    return totals


def _monthly_trend(window_start: date, occupied: list[int], listed: list[int]) -> list[MonthlyOccupancy]:
    trend: list[MonthlyOccupancy] = []
    current_month: str | None = None
    month_occupied = month_listed = 0
    for offset, (occ, lst) in enumerate(zip(occupied, listed, strict=True)):
        month = (window_start + timedelta(days=offset)).strftime("%Y-%m")
        if month != current_month:
            if current_month is not None:
                trend.append(MonthlyOccupancy(current_month, month_occupied, month_listed))
            current_month = month
            month_occupied = month_listed = 0
        month_occupied += occ
        month_listed += lst
    if current_month is not None:
        trend.append(MonthlyOccupancy(current_month, month_occupied, month_listed))
    return trend


def aggregate_occupancy(
    snapshot: ReservationSnapshot,
    property_ids: Iterable[uuid.UUID],
    window_start: date,
    window_end: date,
    attribution: RevenueAttribution = RevenueAttribution.FULL,
) -> OccupancyReport:
    """Compute occupancy and revenue metrics for ``[window_start, window_end)``.

    Args:
        snapshot: Properties and reservations to aggregate.
        property_ids: Properties to include. Duplicates are ignored.
        window_start: First day of the reporting window.
        window_end: Day after the last reported day.
        attribution: Revenue policy for reservations crossing the window edge.

    Returns:
        Per-property metrics, a portfolio summary recomputed from summed
        totals, and daily / monthly chart series.

    Raises:
        InvalidRangeError: If ``window_end`` is not after ``window_start``.
        PropertyNotFoundError: If a property id is not in the snapshot.
    """
    if window_end <= window_start:
        raise InvalidRangeError(window_start, window_end)

    attribution = RevenueAttribution(attribution)
    days_in_range = nights_between(window_start, window_end)

    # Difference arrays over the window; index i is window_start + i days.
    occupied_delta = [0] * (days_in_range + 1)
    listed_delta = [0] * (days_in_range + 1)

    by_property: list[PropertyOccupancy] = []
    total = OccupancyMetrics()
    seen: set[uuid.UUID] = set()

    for property_id in property_ids:
        if property_id in seen:
            continue
        seen.add(property_id)
        profile = snapshot.get_property(property_id)

        span = active_span(profile, window_start, window_end)
        if span is None:
            prop_metrics = OccupancyMetrics()
        else:
            prop_metrics, merged = _property_occupancy(
                snapshot, profile, span, (window_start, window_end), attribution
            )
            listed_delta[(span[0] - window_start).days] += 1
            listed_delta[(span[1] - window_start).days] -= 1
            for start, end in merged:
                occupied_delta[(start - window_start).days] += 1
                occupied_delta[(end - window_start).days] -= 1

        by_property.append(PropertyOccupancy(property=profile, metrics=prop_metrics))
        total = total + prop_metrics

    occupied_per_day = _running_totals(occupied_delta)
    listed_per_day = _running_totals(listed_delta)
    daily = tuple(
        DailyOccupancy(
            day=window_start + timedelta(days=offset),
            occupied=occupied_per_day[offset],
            available=listed_per_day[offset] - occupied_per_day[offset],
        )
        for offset in range(days_in_range)
    )

    logger.debug(
        "Aggregated occupancy for %d properties over %d days: %d/%d occupied",
        len(by_property),
        days_in_range,
        total.occupied_days,
        total.total_days,
    )

    return OccupancyReport(
        window_start=window_start,
        window_end=window_end,
        attribution=attribution,
        summary=OccupancySummary(
            total_properties=len(by_property),
            days_in_range=days_in_range,
            metrics=total,
        ),
        by_property=tuple(by_property),
        daily_occupancy=daily,
        monthly_trend=tuple(_monthly_trend(window_start, occupied_per_day, listed_per_day)),
    )

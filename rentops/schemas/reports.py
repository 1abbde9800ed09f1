"""Pydantic v2 schemas for the occupancy report."""

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel

from rentops.services.metrics import round_money
from rentops.services.occupancy_service import OccupancyMetrics, OccupancyReport


class OccupancyMetricsResponse(BaseModel):
    """Occupancy and revenue figures for one property or the whole portfolio."""

    total_days: int
    occupied_days: int
    vacant_days: int
    occupancy_rate: Decimal  # percentage 0.0–100.0
    total_bookings: int
    total_revenue: Decimal
    average_daily_rate: Decimal
    rev_par: Decimal

    @classmethod
    def from_metrics(cls, metrics: OccupancyMetrics) -> "OccupancyMetricsResponse":
        return cls(
            total_days=metrics.total_days,
            occupied_days=metrics.occupied_days,
            vacant_days=metrics.vacant_days,
            occupancy_rate=metrics.occupancy_rate,
            total_bookings=metrics.total_bookings,
            total_revenue=round_money(metrics.total_revenue),
            average_daily_rate=metrics.average_daily_rate,
            rev_par=metrics.rev_par,
        )


class ReportProperty(BaseModel):
    id: uuid.UUID
    name: str
    rental_type: str


class PropertyOccupancyResponse(BaseModel):
    property: ReportProperty
    metrics: OccupancyMetricsResponse


class DateRange(BaseModel):
    start: datetime.date
    end: datetime.date  # exclusive


class OccupancySummaryResponse(BaseModel):
    total_properties: int
    date_range: DateRange
    days_in_range: int
    total_available_days: int
    total_occupied_days: int
    total_vacant_days: int
    overall_occupancy: Decimal
    total_bookings: int
    total_revenue: Decimal
    average_daily_rate: Decimal
    rev_par: Decimal
    revenue_attribution: str


class DailyOccupancyPoint(BaseModel):
    date: datetime.date
    occupied: int
    available: int


class MonthlyTrendPoint(BaseModel):
    month: str
    occupied_days: int
    available_days: int
    occupancy_rate: Decimal


class OccupancyCharts(BaseModel):
    daily_occupancy: list[DailyOccupancyPoint]
    monthly_trend: list[MonthlyTrendPoint]


class OccupancyReportResponse(BaseModel):
    """Occupancy report: portfolio summary, per-property metrics and chart series."""

    summary: OccupancySummaryResponse
    by_property: list[PropertyOccupancyResponse]
    charts: OccupancyCharts

    @classmethod
    def from_report(cls, report: OccupancyReport) -> "OccupancyReportResponse":
        summary = report.summary
        totals = summary.metrics
        return cls(
            summary=OccupancySummaryResponse(
                total_properties=summary.total_properties,
                date_range=DateRange(start=report.window_start, end=report.window_end),
                days_in_range=summary.days_in_range,
                total_available_days=summary.total_available_days,
                total_occupied_days=summary.total_occupied_days,
                total_vacant_days=totals.vacant_days,
                overall_occupancy=summary.overall_occupancy,
                total_bookings=totals.total_bookings,
                total_revenue=round_money(totals.total_revenue),
                average_daily_rate=totals.average_daily_rate,
                rev_par=totals.rev_par,
                revenue_attribution=report.attribution.value,
            ),
            by_property=[
                PropertyOccupancyResponse(
                    property=ReportProperty(
                        id=item.property.id,
                        name=item.property.name,
                        rental_type=item.property.rental_type.value,
                    ),
                    metrics=OccupancyMetricsResponse.from_metrics(item.metrics),
                )
                for item in report.by_property
            ],
            charts=OccupancyCharts(
                daily_occupancy=[
                    DailyOccupancyPoint(date=point.day, occupied=point.occupied, available=point.available)
                    for point in report.daily_occupancy
                ],
                monthly_trend=[
                    MonthlyTrendPoint(
                        month=point.month,
                        occupied_days=point.occupied_days,
                        available_days=point.available_days,
                        occupancy_rate=point.occupancy_rate,
                    )
                    for point in report.monthly_trend
                ],
            ),
        )

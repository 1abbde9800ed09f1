"""Lease model: long-term tenancies."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentops.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Lease(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A tenant's occupancy of a property from ``start_date`` until ``end_date`` (exclusive).

    ``end_date`` is ``None`` for open-ended (month-to-month) leases.
    """

    __tablename__ = "leases"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    tenant_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    deposit_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(50), default="active", index=True)  # active, terminated

    # Relationships
    property: Mapped["Property"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (Index("ix_leases_property_dates", "property_id", "start_date"),)

    def __repr__(self) -> str:
        return f"<Lease(id={self.id}, property_id={self.property_id}, status={self.status})>"

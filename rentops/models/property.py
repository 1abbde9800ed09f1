"""Property model: apartments, houses and villas let short-term, long-term or both."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rentops.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rentable unit managed by a user."""

    __tablename__ = "properties"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    address: Mapped[str | None] = mapped_column(String(255), default=None)
    property_type: Mapped[str] = mapped_column(String(50), nullable=False)  # apartment, house, villa, ...
    rental_type: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default="short_term"
    )  # short_term, long_term, both
    daily_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    monthly_rent: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    minimum_stay: Mapped[int | None] = mapped_column(Integer, default=None)
    maximum_stay: Mapped[int | None] = mapped_column(Integer, default=None)
    available_from: Mapped[date | None] = mapped_column(Date, default=None)
    status: Mapped[str] = mapped_column(String(50), server_default="active")  # active, maintenance, inactive

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name!r}, rental_type={self.rental_type!r})>"

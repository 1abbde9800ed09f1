"""Seed the database with a demo manager, properties, bookings and leases.

Covers every rental type (short-term, long-term, both), every booking status
and both lease states, so the availability and occupancy endpoints have
something to chew on.

Run from the repository root:
    python -m scripts.seed_data
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import delete, select

from rentops.auth.passwords import hash_password
from rentops.database import Base, async_session_factory, engine
from rentops.models import Booking, Lease, Property, User

DEMO_USER = {
    "email": "demo@rentops.dev",
    "password": "demo1234",
    "name": "Demo Manager",
}

PROPERTIES = [
    {
        "name": "Harbour View Apartment",
        "description": "Two-bedroom apartment above the marina, let nightly.",
        "address": "12 Quay Street, Cape Town",
        "property_type": "apartment",
        "rental_type": "short_term",
        "daily_rate": Decimal("1450.00"),
        "minimum_stay": 2,
        "maximum_stay": 28,
    },
    {
        "name": "Oak Lane Cottage",
        "description": "Garden cottage let on annual leases.",
        "address": "4 Oak Lane, Stellenbosch",
        "property_type": "cottage",
        "rental_type": "long_term",
        "monthly_rent": Decimal("9500.00"),
    },
    {
        "name": "Dune House",
        "description": "Beach house let by the night in summer and by the month in winter.",
        "address": "88 Beach Road, Hermanus",
        "property_type": "house",
        "rental_type": "both",
        "daily_rate": Decimal("2100.00"),
        "monthly_rent": Decimal("18000.00"),
        "minimum_stay": 3,
    },
    {
        "name": "Bree Street Studio",
        "description": "New listing, opening next month.",
        "address": "201 Bree Street, Cape Town",
        "property_type": "studio",
        "rental_type": "short_term",
        "daily_rate": Decimal("900.00"),
        "minimum_stay": 1,
    },
]


def _bookings(p: dict[str, Property], today: date) -> list[dict]:
    """Bookings relative to ``today``; active ones never overlap on a property."""

    def stay(prop: str, guest: str, start: int, nights: int, status: str) -> dict:
        prop_obj = p[prop]
        return {
            "property_id": prop_obj.id,
            "guest_name": guest,
            "check_in": today + timedelta(days=start),
            "check_out": today + timedelta(days=start + nights),
            "status": status,
            "total_price": (prop_obj.daily_rate or Decimal("0")) * nights,
        }

    return [
        stay("Harbour View Apartment", "James Wilson", -30, 5, "checked_out"),
        stay("Harbour View Apartment", "Chloe Williams", -25, 4, "checked_out"),
        stay("Harbour View Apartment", "Henrik Johansson", -18, 3, "cancelled"),
        stay("Harbour View Apartment", "Emma Thompson", -2, 7, "checked_in"),
        # Same-day turnover with Emma's checkout
        stay("Harbour View Apartment", "Sarah Chen", 5, 4, "confirmed"),
        stay("Harbour View Apartment", "Liam Murphy", 14, 3, "pending"),
        stay("Harbour View Apartment", "Noah Smith", -10, 2, "no_show"),
        stay("Dune House", "Yuki Tanaka", -40, 7, "checked_out"),
        stay("Dune House", "Amara Okafor", 20, 5, "confirmed"),
        stay("Bree Street Studio", "Mia Rossi", 35, 2, "confirmed"),
    ]


def _leases(p: dict[str, Property], today: date) -> list[dict]:
    return [
        {
            "property_id": p["Oak Lane Cottage"].id,
            "tenant_name": "Thandi Nkosi",
            "start_date": today - timedelta(days=400),
            "end_date": today - timedelta(days=35),
            "monthly_rent": Decimal("9000.00"),
            "status": "terminated",
        },
        {
            "property_id": p["Oak Lane Cottage"].id,
            "tenant_name": "Pieter van Wyk",
            "start_date": today - timedelta(days=30),
            "end_date": None,
            "monthly_rent": Decimal("9500.00"),
            "status": "active",
        },
        {
            "property_id": p["Dune House"].id,
            "tenant_name": "Grace Adeyemi",
            "start_date": today + timedelta(days=60),
            "end_date": today + timedelta(days=150),
            "monthly_rent": Decimal("18000.00"),
            "status": "active",
        },
    ]


async def seed() -> None:
    """Create tables if needed and (re)seed the demo account."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    today = date.today()
    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.email == DEMO_USER["email"]))
        existing_user = result.scalar_one_or_none()

        if existing_user is not None:
            print(f"Demo user '{DEMO_USER['email']}' already exists. Deleting and re-seeding...")
            owned = select(Property.id).where(Property.owner_id == existing_user.id)
            await session.execute(delete(Booking).where(Booking.property_id.in_(owned)))
            await session.execute(delete(Lease).where(Lease.property_id.in_(owned)))
            await session.execute(delete(Property).where(Property.owner_id == existing_user.id))
            await session.execute(delete(User).where(User.id == existing_user.id))
            await session.flush()

        user = User(
            email=DEMO_USER["email"],
            hashed_password=hash_password(DEMO_USER["password"]),
            name=DEMO_USER["name"],
            is_active=True,
            role="manager",
        )
        session.add(user)
        await session.flush()

        properties: dict[str, Property] = {}
        for prop_data in PROPERTIES:
            prop = Property(owner_id=user.id, **prop_data)
            if prop.name == "Bree Street Studio":
                prop.available_from = today + timedelta(days=30)
            session.add(prop)
            properties[prop.name] = prop
        await session.flush()

        bookings = [Booking(**data) for data in _bookings(properties, today)]
        leases = [Lease(**data) for data in _leases(properties, today)]
        session.add_all(bookings + leases)
        await session.commit()

    print(f"Seeded {DEMO_USER['email']} / {DEMO_USER['password']}")
    print(f"   Properties: {len(properties)}")
    print(f"   Bookings:   {len(bookings)}")
    print(f"   Leases:     {len(leases)}")


if __name__ == "__main__":
    asyncio.run(seed())

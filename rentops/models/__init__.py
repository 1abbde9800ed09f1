"""SQLAlchemy models for RentOps.

All models are imported here so that ``Base.metadata`` knows every table
(``create_all`` in tests and the seed script rely on it). If you add a new
model, import it in this file.
"""

from rentops.models.booking import Booking
from rentops.models.lease import Lease
from rentops.models.property import Property
from rentops.models.user import User

__all__ = [
    "Booking",
    "Lease",
    "Property",
    "User",
]

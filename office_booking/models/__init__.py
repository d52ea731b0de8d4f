from .enums import ACTIVE_BOOKING_STATUSES, BookingStatus, UserRole
from .tables import (
    Base,
    Bookings,
    OfficeAvailability,
    Offices,
    Users,
    Visitors,
    metadata,
    naive_utc,
    new_id,
    t_office_owners,
    utcnow,
)

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "BookingStatus",
    "UserRole",
    "Base",
    "Bookings",
    "OfficeAvailability",
    "Offices",
    "Users",
    "Visitors",
    "metadata",
    "naive_utc",
    "new_id",
    "t_office_owners",
    "utcnow",
]

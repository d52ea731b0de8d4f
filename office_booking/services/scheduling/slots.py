# office_booking/services/scheduling/slots.py
"""
Slot engine: free bookable intervals of an office.

    free = (availability windows ∩ query range) − active bookings

Contains:
✓ availability windows of the office, clipped to the query range
✓ active bookings (REQUESTED / CONFIRMED), not soft-deleted
✓ minimum duration filter
✓ nothing for inactive offices, NotFound for deleted ones

Does NOT contain:
✗ Caching (every call reads the current snapshot)
✗ Grid alignment (slots are raw free intervals, not fixed steps)
"""

from datetime import datetime, timedelta
from typing import Iterable

from sqlalchemy.orm import Session

from ...core.errors import InvalidState, NotFound
from ...models import ACTIVE_BOOKING_STATUSES, Bookings, OfficeAvailability, Offices, naive_utc
from .intervals import Interval, clip, overlaps, subtract


def compute_free_slots(
    windows: Iterable[Interval],
    bookings: Iterable[Interval],
    query: Interval,
    min_duration: timedelta,
) -> list[Interval]:
    """
    Pure part of the engine. Same inputs, same output.

    Windows are assumed non-overlapping (guaranteed by the availability store),
    so remainders of different windows never need merging.
    """
    booked = sorted((Interval(*b) for b in bookings), key=lambda b: b.start)
    slots: list[Interval] = []

    for window in sorted((Interval(*w) for w in windows), key=lambda w: w.start):
        clipped = clip(window, query)
        if clipped is None:
            continue

        cuts = [b for b in booked if overlaps(b.start, b.end, clipped.start, clipped.end)]
        for piece in subtract(clipped, cuts):
            if piece.duration >= min_duration:
                slots.append(piece)

    slots.sort(key=lambda s: s.start)
    return slots


def get_available_slots(
    db: Session,
    office_id: str,
    range_start: datetime,
    range_end: datetime,
    min_duration_minutes: int = 60,
) -> list[Interval]:
    """
    Free slots of an office in [range_start, range_end) lasting at least
    min_duration_minutes.

    An inactive office has no free slots.

    Raises:
        NotFound: office does not exist or is deleted.
        InvalidState: empty range or non-positive duration.
    """
    range_start, range_end = naive_utc(range_start), naive_utc(range_end)
    if not range_start < range_end:
        raise InvalidState("endDate must be after startDate")
    if min_duration_minutes < 1:
        raise InvalidState("duration must be at least 1 minute")

    office = db.get(Offices, office_id)
    if office is None or office.deleted_at is not None:
        raise NotFound("Office not found")
    if not office.is_bookable:
        return []

    query = Interval(range_start, range_end)
    windows = _get_windows(db, office_id, query)
    bookings = _get_active_bookings(db, office_id, query)

    return compute_free_slots(
        windows,
        bookings,
        query,
        timedelta(minutes=min_duration_minutes),
    )


# ── Database helpers ─────────────────────────────────────────────────────


def _get_windows(db: Session, office_id: str, query: Interval) -> list[Interval]:
    rows = (
        db.query(OfficeAvailability.available_from, OfficeAvailability.available_to)
        .filter(
            OfficeAvailability.office_id == office_id,
            OfficeAvailability.available_from < query.end,
            OfficeAvailability.available_to > query.start,
        )
        .order_by(OfficeAvailability.available_from)
        .all()
    )
    return [Interval(r.available_from, r.available_to) for r in rows]


def _get_active_bookings(db: Session, office_id: str, query: Interval) -> list[Interval]:
    rows = (
        db.query(Bookings.start_at, Bookings.end_at)
        .filter(
            Bookings.office_id == office_id,
            Bookings.status.in_(ACTIVE_BOOKING_STATUSES),
            Bookings.deleted_at.is_(None),
            Bookings.start_at < query.end,
            Bookings.end_at > query.start,
        )
        .order_by(Bookings.start_at)
        .all()
    )
    return [Interval(r.start_at, r.end_at) for r in rows]

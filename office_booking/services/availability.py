# office_booking/services/availability.py
"""
Availability windows of an office.

Rules:
✓ only admins and owners of the office manage windows
✓ windows of one office never overlap (touching is fine)
✓ inactive or deleted offices get no new windows
✓ a window with active bookings inside cannot be deleted
✓ a window cannot be moved/shrunk so that an active booking falls outside it

Every check-then-write is a single guarded statement (INSERT … SELECT … WHERE
NOT EXISTS / UPDATE … WHERE NOT EXISTS / DELETE … WHERE NOT EXISTS) taken after
the office row lock, so two concurrent requests cannot both pass the overlap
check. SQLite gets the same guarantee from its database write lock.
"""

import logging
from datetime import datetime

from sqlalchemy import DateTime, String, and_, delete, exists, insert, literal, not_, select, update
from sqlalchemy.orm import Session

from ..core.errors import Conflict, InvalidState, NotFound
from ..models import ACTIVE_BOOKING_STATUSES, Bookings, OfficeAvailability, Offices, naive_utc, new_id, utcnow
from .authorization import Caller, Capability, require
from .events import emit_event
from .offices import lock_office

logger = logging.getLogger(__name__)

_windows = OfficeAvailability.__table__
_bookings = Bookings.__table__
_offices = Offices.__table__

MSG_OVERLAP = "An availability window already overlaps this period"
MSG_HAS_BOOKINGS = "Cannot remove an availability window with active bookings"
MSG_SHRINK = "Active bookings would fall outside the updated availability window"


def create_availability(
    db: Session,
    office_id: str,
    available_from: datetime,
    available_to: datetime,
    caller: Caller | None,
) -> OfficeAvailability:
    office = _get_office(db, office_id)
    require(caller, office.owner_ids, Capability.AVAILABILITY_MANAGE,
            "Only the office owner can manage availability")

    available_from, available_to = naive_utc(available_from), naive_utc(available_to)
    if not office.is_bookable:
        raise InvalidState("Office is not active")
    if not available_from < available_to:
        raise InvalidState("availableTo must be after availableFrom")

    lock_office(db, office_id)
    window_id = new_id()
    existing = _windows.alias("existing")

    guard = and_(
        exists(
            select(_offices.c.id).where(
                _offices.c.id == office_id,
                _offices.c.is_active.is_(True),
                _offices.c.deleted_at.is_(None),
            )
        ),
        not_(exists(
            select(existing.c.id).where(
                existing.c.office_id == office_id,
                existing.c.available_from < available_to,
                existing.c.available_to > available_from,
            )
        )),
    )

    stmt = insert(_windows).from_select(
        ["id", "office_id", "available_from", "available_to", "created_at"],
        select(
            literal(window_id, String()),
            literal(office_id, String()),
            literal(available_from, DateTime()),
            literal(available_to, DateTime()),
            literal(utcnow(), DateTime()),
        ).where(guard),
    )
    res = db.execute(stmt)

    if res.rowcount != 1:
        db.rollback()
        # Either the office was deactivated meanwhile or the period is taken
        db.refresh(office)
        if not office.is_bookable:
            raise InvalidState("Office is not active")
        raise Conflict(MSG_OVERLAP)

    db.commit()
    window = db.get(OfficeAvailability, window_id)

    logger.info(f"Availability {window_id} created for office={office_id}")
    emit_event("availability_created", {
        "office_id": office_id,
        "availability_id": window_id,
    })
    return window


def list_availability(
    db: Session,
    office_id: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[OfficeAvailability], int]:
    """Windows of the office, optionally only those intersecting [start_date, end_date)."""
    _get_office(db, office_id)

    q = db.query(OfficeAvailability).filter(OfficeAvailability.office_id == office_id)
    if start_date is not None:
        q = q.filter(OfficeAvailability.available_to > start_date)
    if end_date is not None:
        q = q.filter(OfficeAvailability.available_from < end_date)

    total = q.count()
    items = (
        q.order_by(OfficeAvailability.available_from.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def get_availability(db: Session, office_id: str, availability_id: str) -> OfficeAvailability:
    window = db.get(OfficeAvailability, availability_id)
    if window is None or window.office_id != office_id:
        raise NotFound("Availability not found")
    return window


def update_availability(
    db: Session,
    office_id: str,
    availability_id: str,
    caller: Caller | None,
    available_from: datetime | None = None,
    available_to: datetime | None = None,
) -> OfficeAvailability:
    office = _get_office(db, office_id)
    require(caller, office.owner_ids, Capability.AVAILABILITY_MANAGE,
            "Only the office owner can manage availability")
    window = get_availability(db, office_id, availability_id)

    old_from, old_to = window.available_from, window.available_to
    new_from = naive_utc(available_from) or old_from
    new_to = naive_utc(available_to) or old_to

    if not new_from < new_to:
        raise InvalidState("availableTo must be after availableFrom")
    if (new_from, new_to) == (old_from, old_to):
        return window

    lock_office(db, office_id)
    other = _windows.alias("other")
    overlap = exists(
        select(other.c.id).where(
            other.c.office_id == office_id,
            other.c.id != availability_id,
            other.c.available_from < new_to,
            other.c.available_to > new_from,
        )
    )
    stranded = exists(
        select(_bookings.c.id).where(
            _bookings.c.office_id == office_id,
            _bookings.c.status.in_(ACTIVE_BOOKING_STATUSES),
            _bookings.c.deleted_at.is_(None),
            _bookings.c.start_at >= old_from,
            _bookings.c.end_at <= old_to,
            not_(and_(_bookings.c.start_at >= new_from, _bookings.c.end_at <= new_to)),
        )
    )

    stmt = (
        update(_windows)
        .where(
            _windows.c.id == availability_id,
            _windows.c.available_from == old_from,
            _windows.c.available_to == old_to,
            not_(overlap),
            not_(stranded),
        )
        .values(available_from=new_from, available_to=new_to)
    )
    res = db.execute(stmt)

    if res.rowcount != 1:
        db.rollback()
        if db.execute(select(overlap)).scalar():
            raise Conflict(MSG_OVERLAP)
        if db.execute(select(stranded)).scalar():
            raise Conflict(MSG_SHRINK)
        raise Conflict("Availability was modified concurrently, retry")

    db.commit()
    db.refresh(window)
    logger.info(f"Availability {availability_id} updated for office={office_id}")
    return window


def delete_availability(
    db: Session,
    office_id: str,
    availability_id: str,
    caller: Caller | None,
) -> None:
    office = _get_office(db, office_id)
    require(caller, office.owner_ids, Capability.AVAILABILITY_MANAGE,
            "Only the office owner can manage availability")
    window = get_availability(db, office_id, availability_id)

    lock_office(db, office_id)
    has_bookings = exists(
        select(_bookings.c.id).where(
            _bookings.c.office_id == office_id,
            _bookings.c.status.in_(ACTIVE_BOOKING_STATUSES),
            _bookings.c.deleted_at.is_(None),
            _bookings.c.start_at >= window.available_from,
            _bookings.c.end_at <= window.available_to,
        )
    )
    stmt = delete(_windows).where(_windows.c.id == availability_id, not_(has_bookings))
    res = db.execute(stmt)

    if res.rowcount != 1:
        db.rollback()
        raise Conflict(MSG_HAS_BOOKINGS)

    db.commit()
    # the ORM instance refers to a deleted row now
    db.expunge(window)

    logger.info(f"Availability {availability_id} deleted for office={office_id}")
    emit_event("availability_deleted", {
        "office_id": office_id,
        "availability_id": availability_id,
    })


# ── Helpers ──────────────────────────────────────────────────────────────


def _get_office(db: Session, office_id: str) -> Offices:
    office = db.get(Offices, office_id)
    if office is None:
        raise NotFound("Office not found")
    return office

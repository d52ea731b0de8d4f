# office_booking/services/bookings.py
"""
Bookings of offices.

Create:
✓ office must exist, be active and not deleted
✓ the interval must lie inside one availability window          → Unavailable
✓ no active booking (REQUESTED / CONFIRMED) may overlap it      → Conflict
✓ visitor resolved by id, reused by email, or created
✓ contact snapshot kept on the booking
The window and overlap checks and the insert are one INSERT … SELECT statement,
run under the office row lock (lock_office); the visitor row and the booking
row share one transaction.

Read:
✓ staff see everything, office owners their offices only
✓ anonymous and VISITOR callers see a reduced projection, and a single
  booking only when they prove its visitor email

Status:
✓ transitions validated by the state machine
✓ persisted with UPDATE … WHERE status = :old (a concurrent change → Conflict)

Bookings are never hard-deleted.
"""

import logging
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, and_, exists, func, insert, literal, not_, or_, select, update
from sqlalchemy.orm import Session

from ..core.errors import Conflict, Forbidden, InvalidState, NotFound, Unavailable
from ..models import (
    ACTIVE_BOOKING_STATUSES,
    Bookings,
    BookingStatus,
    OfficeAvailability,
    Offices,
    UserRole,
    Visitors,
    naive_utc,
    new_id,
    t_office_owners,
    utcnow,
)
from ..schemas.bookings import BookingCreate, BookingFilters, BookingUpdate, VisitorCreate
from .authorization import Caller, Capability, caller_can, require
from .events import emit_event
from .offices import lock_office
from .scheduling.state_machine import check_transition

logger = logging.getLogger(__name__)

_windows = OfficeAvailability.__table__
_bookings = Bookings.__table__
_offices = Offices.__table__

MSG_UNAVAILABLE = "Requested time is outside the office availability"
MSG_CONFLICT = "Office is already booked for this period"


def is_public_view(caller: Caller | None) -> bool:
    """Anonymous and VISITOR-role callers get the reduced projection."""
    return caller is None or caller.role == UserRole.VISITOR


# ── Create ───────────────────────────────────────────────────────────────


def create_booking(db: Session, data: BookingCreate, caller: Caller | None) -> Bookings:
    require(caller, [], Capability.BOOKING_CREATE)

    office = db.get(Offices, data.office_id)
    if office is None or office.deleted_at is not None:
        raise NotFound("Office not found")
    if not office.is_active:
        raise InvalidState("Office is not active")

    start_at, end_at = naive_utc(data.start_at), naive_utc(data.end_at)
    if not start_at < end_at:
        raise InvalidState("endAt must be after startAt")

    lock_office(db, office.id)
    visitor = _resolve_visitor(db, data.visitor_id, data.visitor)

    booking_id = new_id()
    now = utcnow()
    row = [
        ("id", literal(booking_id, String())),
        ("office_id", literal(office.id, String())),
        ("visitor_id", literal(visitor.id if visitor else None, String())),
        ("created_by_user_id", literal(caller.identity if caller else None, String())),
        ("start_at", literal(start_at, DateTime())),
        ("end_at", literal(end_at, DateTime())),
        ("status", literal(BookingStatus.REQUESTED, _bookings.c.status.type)),
        ("title", literal(data.title, Text())),
        ("description", literal(data.description, Text())),
        ("notes", literal(data.notes, Text())),
        ("needs_support", literal(data.needs_support, Boolean())),
        ("visitor_name", literal(data.visitor_name or (visitor.name if visitor else None), Text())),
        ("visitor_email", literal(data.visitor_email or (visitor.email if visitor else None), String())),
        ("visitor_whatsapp", literal(data.visitor_whatsapp or (visitor.phone if visitor else None), Text())),
        ("created_at", literal(now, DateTime())),
        ("updated_at", literal(now, DateTime())),
    ]

    guard = and_(
        _office_bookable(office.id),
        _window_contains(office.id, start_at, end_at),
        not_(_active_overlap(office.id, start_at, end_at)),
    )
    stmt = insert(_bookings).from_select(
        [name for name, _ in row],
        select(*[value for _, value in row]).where(guard),
    )
    res = db.execute(stmt)

    if res.rowcount != 1:
        # also drops a visitor created above
        db.rollback()
        raise _explain_rejection(db, office, start_at, end_at)

    db.commit()
    booking = db.get(Bookings, booking_id)

    logger.info(
        f"Booking {booking_id} created: office={office.id} "
        f"{start_at.isoformat()}–{end_at.isoformat()} by={caller.identity if caller else 'anonymous'}"
    )
    emit_event("booking_created", {
        "booking_id": booking_id,
        "office_id": office.id,
        "start_at": start_at.isoformat(),
        "end_at": end_at.isoformat(),
        "status": BookingStatus.REQUESTED.value,
        "visitor_email": booking.visitor_email,
    })
    return booking


# ── Read ─────────────────────────────────────────────────────────────────


def list_bookings(
    db: Session,
    filters: BookingFilters,
    caller: Caller | None,
) -> tuple[list[Bookings], int]:
    q = db.query(Bookings).filter(Bookings.deleted_at.is_(None))

    if caller is not None and caller.role == UserRole.OFFICE_OWNER:
        owned = select(t_office_owners.c.office_id).where(t_office_owners.c.user_id == caller.identity)
        q = q.filter(Bookings.office_id.in_(owned))

    if filters.office_id:
        q = q.filter(Bookings.office_id == filters.office_id)
    if filters.status:
        q = q.filter(Bookings.status == filters.status)
    if filters.start_date:
        q = q.filter(Bookings.start_at >= naive_utc(filters.start_date))
    if filters.end_date:
        q = q.filter(Bookings.end_at <= naive_utc(filters.end_date))
    if filters.visitor_email:
        needle = filters.visitor_email.strip().lower()
        q = q.outerjoin(Visitors, Bookings.visitor_id == Visitors.id).filter(
            or_(
                func.lower(Bookings.visitor_email).contains(needle, autoescape=True),
                func.lower(Visitors.email).contains(needle, autoescape=True),
            )
        )

    total = q.count()
    items = (
        q.order_by(Bookings.start_at.asc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
        .all()
    )
    return items, total


def list_for_visitor(
    db: Session,
    visitor_email: str,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Bookings], int]:
    """Bookings whose snapshot or linked visitor email equals visitor_email."""
    email = visitor_email.strip().lower()
    if not email:
        raise InvalidState("visitorEmail is required")

    q = (
        db.query(Bookings)
        .outerjoin(Visitors, Bookings.visitor_id == Visitors.id)
        .filter(
            Bookings.deleted_at.is_(None),
            or_(func.lower(Bookings.visitor_email) == email, func.lower(Visitors.email) == email),
        )
    )
    total = q.count()
    items = q.order_by(Bookings.start_at.asc()).offset((page - 1) * limit).limit(limit).all()
    return items, total


def get_booking(
    db: Session,
    booking_id: str,
    caller: Caller | None,
    visitor_email: str | None = None,
) -> Bookings:
    """
    Single booking, if the caller may see it.

    Invisible bookings are reported as missing so their existence does not leak.
    """
    booking = db.get(Bookings, booking_id)
    if booking is None or booking.deleted_at is not None:
        raise NotFound("Booking not found")

    if not caller_can(caller, booking.office.owner_ids, Capability.BOOKING_VIEW,
                      visitor_match=_visitor_match(booking, caller, visitor_email)):
        raise NotFound("Booking not found")
    return booking


# ── Update ───────────────────────────────────────────────────────────────


def update_status(
    db: Session,
    booking_id: str,
    new_status: BookingStatus,
    caller: Caller | None,
    visitor_email: str | None = None,
) -> Bookings:
    booking = get_booking(db, booking_id, caller, visitor_email)
    old_status = BookingStatus(booking.status)

    changed = check_transition(
        old_status,
        new_status,
        caller,
        booking.office.owner_ids,
        visitor_match=_visitor_match(booking, caller, visitor_email),
    )
    if not changed:
        return booking

    _set_status(db, booking.id, old_status, new_status)
    db.commit()
    db.refresh(booking)

    _after_status_change(booking, old_status, caller)
    return booking


def update_booking(
    db: Session,
    booking_id: str,
    changes: BookingUpdate,
    caller: Caller | None,
    visitor_email: str | None = None,
) -> Bookings:
    """Optional status change plus edits of descriptive and contact fields."""
    booking = get_booking(db, booking_id, caller, visitor_email)
    old_status = BookingStatus(booking.status)
    owner_ids = booking.office.owner_ids

    fields = changes.field_changes()
    if fields and not caller_can(caller, owner_ids, Capability.BOOKING_EDIT):
        raise Forbidden("Only staff or the office owner can edit bookings")
    if fields:
        _check_contact(booking, fields)

    status_changed = False
    if changes.status is not None:
        status_changed = check_transition(
            old_status,
            changes.status,
            caller,
            owner_ids,
            visitor_match=_visitor_match(booking, caller, visitor_email),
        )

    if not fields and not status_changed:
        return booking

    if status_changed:
        _set_status(db, booking.id, old_status, changes.status)
    for key, value in fields.items():
        setattr(booking, key, value)
    booking.updated_at = utcnow()

    db.commit()
    db.refresh(booking)

    if fields:
        logger.info(f"Booking {booking.id} edited: fields={sorted(fields)}")
    if status_changed:
        _after_status_change(booking, old_status, caller)
    return booking


# ── Helpers ──────────────────────────────────────────────────────────────


def _resolve_visitor(
    db: Session,
    visitor_id: str | None,
    payload: VisitorCreate | None,
) -> Visitors | None:
    """Referenced visitor, an existing one with the same email, or a new one (flushed, not committed)."""
    if visitor_id:
        visitor = db.get(Visitors, visitor_id)
        if visitor is None:
            raise NotFound("Visitor not found")
        return visitor

    if payload is None:
        return None

    if payload.email:
        visitor = (
            db.query(Visitors)
            .filter(func.lower(Visitors.email) == payload.email.lower())
            .order_by(Visitors.created_at.asc())
            .first()
        )
        if visitor is not None:
            return visitor

    visitor = Visitors(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        document=payload.document,
        company=payload.company,
    )
    db.add(visitor)
    db.flush()
    return visitor


def _check_contact(booking: Bookings, fields: dict) -> None:
    """An edit must leave a visitor link or a name plus email/whatsapp snapshot."""
    if booking.visitor_id:
        return
    name = fields.get("visitor_name", booking.visitor_name)
    email = fields.get("visitor_email", booking.visitor_email)
    whatsapp = fields.get("visitor_whatsapp", booking.visitor_whatsapp)
    if not (name and (email or whatsapp)):
        raise InvalidState("Visitor data required: visitorName with visitorEmail/visitorWhatsapp")


def _visitor_match(booking: Bookings, caller: Caller | None, visitor_email: str | None) -> bool:
    """
    Whether the request proves it acts for the booking's visitor.

    Only anonymous and VISITOR callers act as visitors; staff and owners are
    scoped by their role alone.
    """
    if not is_public_view(caller):
        return False
    if booking.owned_by_email(visitor_email):
        return True
    if caller is not None:
        return booking.created_by_user_id == caller.identity or booking.owned_by_email(caller.email)
    return False


def _set_status(db: Session, booking_id: str, old: BookingStatus, new: BookingStatus) -> None:
    res = db.execute(
        update(_bookings)
        .where(_bookings.c.id == booking_id, _bookings.c.status == old)
        .values(status=new, updated_at=utcnow())
    )
    if res.rowcount != 1:
        db.rollback()
        raise Conflict("Booking status was changed concurrently, retry")


def _after_status_change(booking: Bookings, old_status: BookingStatus, caller: Caller | None) -> None:
    new_status = BookingStatus(booking.status)
    logger.info(
        f"Booking {booking.id} status {old_status.value} → {new_status.value} "
        f"by={caller.identity if caller else 'visitor'}"
    )
    emit_event("booking_status_changed", {
        "booking_id": booking.id,
        "office_id": booking.office_id,
        "from_status": old_status.value,
        "to_status": new_status.value,
    })


def _office_bookable(office_id: str):
    return exists(
        select(_offices.c.id).where(
            _offices.c.id == office_id,
            _offices.c.is_active.is_(True),
            _offices.c.deleted_at.is_(None),
        )
    )


def _window_contains(office_id: str, start_at: datetime, end_at: datetime):
    window = _windows.alias("window")
    return exists(
        select(window.c.id).where(
            window.c.office_id == office_id,
            window.c.available_from <= start_at,
            window.c.available_to >= end_at,
        )
    )


def _active_overlap(office_id: str, start_at: datetime, end_at: datetime):
    active = _bookings.alias("active")
    return exists(
        select(active.c.id).where(
            active.c.office_id == office_id,
            active.c.status.in_(ACTIVE_BOOKING_STATUSES),
            active.c.deleted_at.is_(None),
            active.c.start_at < end_at,
            active.c.end_at > start_at,
        )
    )


def _explain_rejection(db: Session, office: Offices, start_at: datetime, end_at: datetime) -> Exception:
    """Which guard of the insert failed, checked in the order they are documented."""
    db.refresh(office)
    if not office.is_bookable:
        return InvalidState("Office is not active")
    if not db.execute(select(_window_contains(office.id, start_at, end_at))).scalar():
        return Unavailable(MSG_UNAVAILABLE)
    return Conflict(MSG_CONFLICT)

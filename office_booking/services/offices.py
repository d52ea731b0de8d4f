# office_booking/services/offices.py
"""
Offices and their owners.

✓ admins create, edit, delete (soft) offices and assign owners
✓ an owner may change the company name of an owned office, nothing else
✓ owners must be OFFICE_OWNER users
✓ deleted offices are invisible to non-admins
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..core.errors import Conflict, Forbidden, InvalidState, NotFound
from ..models import Offices, UserRole, Users, utcnow
from ..schemas.offices import OfficeCreate, OfficeUpdate
from .authorization import Caller, Capability, caller_can, require

logger = logging.getLogger(__name__)

MSG_ADMIN_ONLY = "Only administrators can manage offices"


def is_full_view(office: Offices, caller: Caller | None) -> bool:
    """Admins and owners of the office see the full record."""
    return caller_can(caller, office.owner_ids, Capability.OFFICE_EDIT)


def list_offices(
    db: Session,
    caller: Caller | None,
    q: str | None = None,
    include_deleted: bool = False,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Offices], int]:
    is_admin = caller is not None and caller.role == UserRole.ADMIN

    query = db.query(Offices)
    if not (is_admin and include_deleted):
        query = query.filter(Offices.deleted_at.is_(None), Offices.is_active.is_(True))
    if q:
        needle = q.strip()
        query = query.filter(
            or_(
                Offices.number.ilike(f"%{needle}%"),
                Offices.company_name.ilike(f"%{needle}%"),
            )
        )

    total = query.count()
    items = query.order_by(Offices.number.asc()).offset((page - 1) * limit).limit(limit).all()
    return items, total


def get_office(db: Session, office_id: str, caller: Caller | None) -> Offices:
    office = db.get(Offices, office_id)
    if office is None:
        raise NotFound("Office not found")
    if office.deleted_at is not None and not (caller is not None and caller.role == UserRole.ADMIN):
        raise NotFound("Office not found")
    return office


def create_office(db: Session, data: OfficeCreate, caller: Caller | None) -> Offices:
    require(caller, [], Capability.OFFICE_MANAGE, MSG_ADMIN_ONLY)

    if db.query(Offices).filter(Offices.number == data.number).first() is not None:
        raise Conflict("Office number already exists")

    office = Offices(
        number=data.number,
        company_name=data.company_name,
        is_active=data.is_active,
        owners=_load_owners(db, data.owner_ids),
    )
    db.add(office)
    db.commit()
    db.refresh(office)

    logger.info(f"Office {office.id} ({office.number}) created by admin={caller.identity}")
    return office


def update_office(db: Session, office_id: str, data: OfficeUpdate, caller: Caller | None) -> Offices:
    office = get_office(db, office_id, caller)
    require(caller, office.owner_ids, Capability.OFFICE_EDIT, "You can only edit your own offices")

    changes = data.model_dump(exclude_unset=True)
    if caller.role != UserRole.ADMIN and set(changes) - {"company_name"}:
        raise Forbidden("Office owners can only change the company name")

    if "owner_ids" in changes:
        office.owners = _load_owners(db, changes.pop("owner_ids") or [])
    for field, value in changes.items():
        setattr(office, field, value)

    db.commit()
    db.refresh(office)
    return office


def delete_office(db: Session, office_id: str, caller: Caller | None) -> None:
    require(caller, [], Capability.OFFICE_MANAGE, MSG_ADMIN_ONLY)
    office = get_office(db, office_id, caller)
    if office.deleted_at is not None:
        return

    office.is_active = False
    office.deleted_at = utcnow()
    db.commit()
    logger.info(f"Office {office_id} deleted by admin={caller.identity}")


def add_owner(db: Session, office_id: str, user_id: str, caller: Caller | None) -> Offices:
    require(caller, [], Capability.OFFICE_MANAGE, MSG_ADMIN_ONLY)
    office = get_office(db, office_id, caller)

    if user_id not in office.owner_ids:
        office.owners.extend(_load_owners(db, [user_id]))
        db.commit()
        db.refresh(office)
    return office


def remove_owner(db: Session, office_id: str, user_id: str, caller: Caller | None) -> Offices:
    require(caller, [], Capability.OFFICE_MANAGE, MSG_ADMIN_ONLY)
    office = get_office(db, office_id, caller)

    owner = next((u for u in office.owners if u.id == user_id), None)
    if owner is None:
        raise NotFound("Owner not found")

    office.owners.remove(owner)
    db.commit()
    db.refresh(office)
    return office


# ── Schedule lock ────────────────────────────────────────────────────────


def office_lock(office_id: str):
    """
    SELECT … FOR UPDATE on the office row.

    Window and booking writes of one office take it first, so their guarded
    statements run one at a time under READ COMMITTED. SQLite renders no
    FOR UPDATE; its write lock already serializes them.
    """
    return select(Offices.id).where(Offices.id == office_id).with_for_update()


def lock_office(db: Session, office_id: str) -> None:
    db.execute(office_lock(office_id))


# ── Helpers ──────────────────────────────────────────────────────────────


def _load_owners(db: Session, user_ids: list[str]) -> list[Users]:
    owners = []
    for user_id in dict.fromkeys(user_ids):
        user = db.get(Users, user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        if user.role != UserRole.OFFICE_OWNER:
            raise InvalidState(f"User {user_id} is not an office owner")
        owners.append(user)
    return owners

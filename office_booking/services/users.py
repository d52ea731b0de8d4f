# office_booking/services/users.py
"""
User accounts: self-registration, login, admin management.

✓ self-registered users always get the VISITOR role
✓ admins create users with any role
✓ emails are unique (case-insensitive)
✓ inactive users cannot log in
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.errors import Conflict, NotFound, Unauthenticated
from ..models import UserRole, Users
from ..schemas.users import UserCreate, UserRegister, UserUpdate
from ..security import create_access_token, hash_password, verify_password
from .authorization import Caller, Capability, require

logger = logging.getLogger(__name__)

MSG_BAD_CREDENTIALS = "Invalid email or password"


def register_user(db: Session, data: UserRegister) -> Users:
    return _create(db, data.name, data.email, data.password, UserRole.VISITOR)


def create_user(db: Session, data: UserCreate, caller: Caller | None) -> Users:
    require(caller, [], Capability.USER_MANAGE, "Only administrators can manage users")
    user = _create(db, data.name, data.email, data.password, data.role)
    logger.info(f"User {user.id} created by admin={caller.identity} role={user.role.value}")
    return user


def authenticate(db: Session, email: str, password: str) -> tuple[str, Users]:
    """Token and user for valid credentials of an active account."""
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning(f"Failed login for email={email}")
        raise Unauthenticated(MSG_BAD_CREDENTIALS)
    if not user.is_active:
        raise Unauthenticated("Account is disabled")

    token = create_access_token(user.id, user.role.value, user.email)
    return token, user


def list_users(
    db: Session,
    caller: Caller | None,
    role: UserRole | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Users], int]:
    require(caller, [], Capability.USER_MANAGE, "Only administrators can manage users")

    q = db.query(Users)
    if role is not None:
        q = q.filter(Users.role == role)

    total = q.count()
    items = q.order_by(Users.created_at.asc()).offset((page - 1) * limit).limit(limit).all()
    return items, total


def get_user(db: Session, user_id: str, caller: Caller | None) -> Users:
    if caller is None or caller.identity != user_id:
        require(caller, [], Capability.USER_MANAGE, "Only administrators can manage users")

    user = db.get(Users, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def update_user(db: Session, user_id: str, data: UserUpdate, caller: Caller | None) -> Users:
    require(caller, [], Capability.USER_MANAGE, "Only administrators can manage users")

    user = db.get(Users, user_id)
    if user is None:
        raise NotFound("User not found")

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


def get_user_by_email(db: Session, email: str) -> Users | None:
    return db.query(Users).filter(func.lower(Users.email) == email.strip().lower()).first()


# ── Helpers ──────────────────────────────────────────────────────────────


def _create(db: Session, name: str, email: str, password: str, role: UserRole) -> Users:
    email = email.strip().lower()
    if get_user_by_email(db, email) is not None:
        raise Conflict("Email is already registered")

    user = Users(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

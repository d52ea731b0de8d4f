# office_booking/middleware/auth.py
"""
Request identity as FastAPI dependencies.

get_optional_caller: no Authorization header → anonymous (None)
get_current_caller:  authentication required

A token that is present but invalid, expired, or belongs to a missing or
disabled account is always rejected with 401, never downgraded to anonymous.
"""

import logging

import jwt
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.errors import MSG_AUTH_REQUIRED, Unauthenticated
from ..database import get_db
from ..models import UserRole, Users
from ..security import decode_access_token
from ..services.authorization import Caller

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header:
        return None

    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Malformed Authorization header")
    return token.strip()


def get_optional_caller(request: Request, db: Session = Depends(get_db)) -> Caller | None:
    token = _bearer_token(request)
    if token is None:
        return None

    try:
        claims = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired") from None
    except jwt.PyJWTError as e:
        logger.info(f"Rejected token: {e}")
        raise Unauthenticated("Invalid token") from None

    user = db.get(Users, claims["sub"])
    if user is None or not user.is_active:
        raise Unauthenticated("User not found or inactive")

    # role and email come from the database, not the token, so changes apply immediately
    return Caller(identity=user.id, role=UserRole(user.role), email=user.email)


def get_current_caller(caller: Caller | None = Depends(get_optional_caller)) -> Caller:
    if caller is None:
        raise Unauthenticated(MSG_AUTH_REQUIRED)
    return caller

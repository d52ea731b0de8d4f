# office_booking/services/authorization.py
"""
Authorization resolver: one capability table instead of role checks at call sites.

Role order: ADMIN > ATTENDANT > OFFICE_OWNER > VISITOR / anonymous.

- ADMIN passes every capability.
- Roles listed in `roles` pass unconditionally.
- Roles listed in `owner_roles` pass only when the caller's identity is one of
  the resource owners (office owners for office/availability/booking scope).
- `public` capabilities pass for everyone, including anonymous callers.
- `visitor` capabilities pass for anyone who proved ownership of the booking
  by its visitor email.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ..core.errors import Forbidden, Unauthenticated
from ..models.enums import UserRole


@dataclass(frozen=True)
class Caller:
    """Who is making the request. Threaded explicitly through every service call."""
    identity: str
    role: UserRole
    email: str | None = None

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.ATTENDANT)


class Capability(str, Enum):
    OFFICE_MANAGE = "office:manage"
    OFFICE_EDIT = "office:edit"
    USER_MANAGE = "user:manage"
    AVAILABILITY_MANAGE = "availability:manage"
    BOOKING_CREATE = "booking:create"
    BOOKING_LIST = "booking:list"
    BOOKING_VIEW = "booking:view"
    BOOKING_EDIT = "booking:edit"
    BOOKING_CONFIRM = "booking:confirm"
    BOOKING_CANCEL = "booking:cancel"
    BOOKING_COMPLETE = "booking:complete"


@dataclass(frozen=True)
class Rule:
    roles: frozenset = frozenset()
    owner_roles: frozenset = frozenset()
    public: bool = False
    visitor: bool = False


_STAFF = frozenset({UserRole.ATTENDANT})
_OWNER = frozenset({UserRole.OFFICE_OWNER})

CAPABILITIES: dict[Capability, Rule] = {
    Capability.OFFICE_MANAGE: Rule(),
    Capability.OFFICE_EDIT: Rule(owner_roles=_OWNER),
    Capability.USER_MANAGE: Rule(),
    Capability.AVAILABILITY_MANAGE: Rule(owner_roles=_OWNER),
    Capability.BOOKING_CREATE: Rule(public=True),
    Capability.BOOKING_LIST: Rule(public=True),
    Capability.BOOKING_VIEW: Rule(roles=_STAFF, owner_roles=_OWNER, visitor=True),
    Capability.BOOKING_EDIT: Rule(roles=_STAFF, owner_roles=_OWNER),
    Capability.BOOKING_CONFIRM: Rule(roles=_STAFF, owner_roles=_OWNER),
    Capability.BOOKING_CANCEL: Rule(roles=_STAFF, owner_roles=_OWNER, visitor=True),
    Capability.BOOKING_COMPLETE: Rule(roles=_STAFF),
}


def can_act(
    role: UserRole | None,
    identity: str | None,
    resource_owner_ids: Iterable[str],
    capability: Capability,
    visitor_match: bool = False,
) -> bool:
    """Pure allow/deny decision for one capability."""
    rule = CAPABILITIES[capability]

    if rule.public:
        return True
    if rule.visitor and visitor_match:
        return True
    if role is None or identity is None:
        return False
    if role == UserRole.ADMIN:
        return True
    if role in rule.roles:
        return True
    if role in rule.owner_roles:
        return identity in set(resource_owner_ids)
    return False


def caller_can(
    caller: Caller | None,
    resource_owner_ids: Iterable[str],
    capability: Capability,
    visitor_match: bool = False,
) -> bool:
    if caller is None:
        return can_act(None, None, resource_owner_ids, capability, visitor_match)
    return can_act(caller.role, caller.identity, resource_owner_ids, capability, visitor_match)


def require(
    caller: Caller | None,
    resource_owner_ids: Iterable[str],
    capability: Capability,
    message: str | None = None,
) -> Caller | None:
    """Raise Unauthenticated for anonymous callers and Forbidden for everyone else denied."""
    if caller_can(caller, resource_owner_ids, capability):
        return caller
    if caller is None:
        raise Unauthenticated()
    raise Forbidden(message)

# office_booking/services/scheduling/state_machine.py
"""
Booking status transitions.

    REQUESTED ──► CONFIRMED ──► COMPLETED
        │             │
        └──► CANCELLED ◄┘

REQUESTED may also go straight to COMPLETED.
CANCELLED and COMPLETED are terminal. Moving to the current status is a no-op.

Checks run in order: no-op, transition table, actor.
"""

from ...core.errors import Forbidden, InvalidTransition
from ...models.enums import BookingStatus
from ..authorization import Caller, Capability, caller_can

TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], Capability] = {
    (BookingStatus.REQUESTED, BookingStatus.CONFIRMED): Capability.BOOKING_CONFIRM,
    (BookingStatus.REQUESTED, BookingStatus.CANCELLED): Capability.BOOKING_CANCEL,
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): Capability.BOOKING_CANCEL,
    (BookingStatus.REQUESTED, BookingStatus.COMPLETED): Capability.BOOKING_COMPLETE,
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): Capability.BOOKING_COMPLETE,
}

TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})

_DENIED_MESSAGES = {
    Capability.BOOKING_CONFIRM: "Only staff or the office owner can confirm bookings",
    Capability.BOOKING_CANCEL: "You can only cancel your own bookings",
    Capability.BOOKING_COMPLETE: "Only administrators and attendants can complete bookings",
}


def is_noop(current: BookingStatus, target: BookingStatus) -> bool:
    return BookingStatus(current) == BookingStatus(target)


def check_transition(
    current: BookingStatus,
    target: BookingStatus,
    caller: Caller | None,
    office_owner_ids: list[str],
    visitor_match: bool = False,
) -> bool:
    """
    Validate a status change.

    Returns:
        False for a no-op (same status), True when the change must be persisted.

    Raises:
        InvalidTransition: the pair is not in the transition table.
        Forbidden: the caller may not perform this transition.
    """
    current = BookingStatus(current)
    target = BookingStatus(target)

    if current == target:
        return False

    capability = TRANSITIONS.get((current, target))
    if capability is None:
        raise InvalidTransition(
            f"Cannot change booking status from {current.value} to {target.value}"
        )

    if not caller_can(caller, office_owner_ids, capability, visitor_match=visitor_match):
        raise Forbidden(_DENIED_MESSAGES[capability])

    return True


def allowed_targets(current: BookingStatus) -> list[BookingStatus]:
    """Statuses reachable from current, ignoring who is asking."""
    current = BookingStatus(current)
    return [to for (frm, to) in TRANSITIONS if frm == current]

"""
Scheduling engine.

Intervals: half-open interval algebra
Slots: free time = availability windows − active bookings
State machine: booking status transitions and who may trigger them
"""

from .intervals import Interval, Subtraction, clip, contains, overlaps, subtract
from .slots import compute_free_slots, get_available_slots
from .state_machine import TRANSITIONS, allowed_targets, check_transition, is_noop

__all__ = [
    "Interval",
    "Subtraction",
    "clip",
    "contains",
    "overlaps",
    "subtract",
    "compute_free_slots",
    "get_available_slots",
    "TRANSITIONS",
    "allowed_targets",
    "check_transition",
    "is_noop",
]

# office_booking/services/scheduling/intervals.py
"""
Half-open interval algebra: [start, end).

Used by:
✓ availability windows (no overlap within an office)
✓ bookings (containment in a window, no overlap between active bookings)
✓ slot engine (window minus bookings)

Touching intervals ([9, 10) and [10, 11)) do not overlap.
Works with any totally ordered values: datetimes in production, ints in tests.
"""

from typing import Iterable, Iterator, NamedTuple, Any


class Interval(NamedTuple):
    start: Any
    end: Any

    @property
    def duration(self):
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return not self.start < self.end


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """True iff [a_start, a_end) and [b_start, b_end) share at least one instant."""
    return a_start < b_end and b_start < a_end


def contains(outer_start, outer_end, inner_start, inner_end) -> bool:
    """True iff [inner_start, inner_end) lies inside [outer_start, outer_end)."""
    return outer_start <= inner_start and inner_end <= outer_end


def clip(interval: Interval, bounds: Interval) -> Interval | None:
    """Intersection of interval with bounds, or None when they do not overlap."""
    start = max(interval[0], bounds[0])
    end = min(interval[1], bounds[1])
    if not start < end:
        return None
    return Interval(start, end)


class Subtraction:
    """
    Remaining pieces of `base` after removing `cuts`.

    Lazy and restartable: nothing is computed until iteration, and every
    iteration replays the same sequence. Cuts may arrive in any order and may
    stick out of `base`; they are clipped and sorted by start on each pass.
    Zero-length pieces are never produced.
    """

    def __init__(self, base: Interval, cuts: Iterable[Interval]):
        self.base = Interval(*base)
        self._cuts = tuple(cuts)

    def __iter__(self) -> Iterator[Interval]:
        base_start, base_end = self.base
        clipped = (clip(Interval(*cut), self.base) for cut in self._cuts)
        cursor = base_start

        for cut in sorted((c for c in clipped if c is not None), key=lambda c: c.start):
            if cursor < cut.start:
                yield Interval(cursor, cut.start)
            if cursor < cut.end:
                cursor = cut.end

        if cursor < base_end:
            yield Interval(cursor, base_end)

    def __repr__(self) -> str:
        return f"Subtraction(base={self.base!r}, cuts={len(self._cuts)})"


def subtract(base: Interval, cuts: Iterable[Interval]) -> Subtraction:
    """Sub-intervals of base not covered by any cut (see Subtraction)."""
    return Subtraction(base, cuts)

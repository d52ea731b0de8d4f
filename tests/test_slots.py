# tests/test_slots.py
import random
from datetime import timedelta

import pytest

from office_booking.core.errors import InvalidState, NotFound
from office_booking.models import BookingStatus
from office_booking.schemas.bookings import BookingCreate
from office_booking.services.bookings import create_booking
from office_booking.services.scheduling import Interval, compute_free_slots, get_available_slots

from .conftest import at


def test_free_slots_around_confirmed_booking(db, make_office, make_window, make_booking):
    office = make_office()
    make_window(office, at(9), at(17))
    make_booking(office, at(10), at(11), status=BookingStatus.CONFIRMED)

    slots = get_available_slots(db, office.id, at(0), at(23, 59), min_duration_minutes=30)

    assert slots == [Interval(at(9), at(10)), Interval(at(11), at(17))]


def test_cancelled_and_completed_bookings_do_not_block(db, make_office, make_window, make_booking):
    office = make_office()
    make_window(office, at(9), at(17))
    make_booking(office, at(10), at(11), status=BookingStatus.CANCELLED)
    make_booking(office, at(12), at(13), status=BookingStatus.COMPLETED)

    slots = get_available_slots(db, office.id, at(0), at(23))

    assert slots == [Interval(at(9), at(17))]


def test_windows_are_clipped_to_range(db, make_office, make_window):
    office = make_office()
    make_window(office, at(9), at(17))

    assert get_available_slots(db, office.id, at(12), at(14)) == [Interval(at(12), at(14))]


def test_short_remainders_are_dropped(db, make_office, make_window, make_booking):
    office = make_office()
    make_window(office, at(9), at(12))
    make_booking(office, at(9, 30), at(11, 45))

    slots = get_available_slots(db, office.id, at(0), at(23), min_duration_minutes=30)

    assert slots == [Interval(at(9), at(9, 30))]


def test_slots_of_several_windows_are_ascending(db, make_office, make_window):
    office = make_office()
    make_window(office, at(14), at(16))
    make_window(office, at(8), at(10))

    slots = get_available_slots(db, office.id, at(0), at(23))

    assert slots == [Interval(at(8), at(10)), Interval(at(14), at(16))]


def test_invalid_queries(db, make_office):
    office = make_office()
    with pytest.raises(InvalidState):
        get_available_slots(db, office.id, at(12), at(12))
    with pytest.raises(InvalidState):
        get_available_slots(db, office.id, at(9), at(12), min_duration_minutes=0)
    with pytest.raises(NotFound):
        get_available_slots(db, "missing", at(9), at(12))


def test_inactive_office_has_no_slots(db, make_office, make_window):
    office = make_office()
    make_window(office, at(9), at(17))
    office.is_active = False
    db.commit()

    assert get_available_slots(db, office.id, at(0), at(23), min_duration_minutes=30) == []


def test_deleted_office_is_not_found(db, make_office, make_window):
    office = make_office()
    make_window(office, at(9), at(17))
    office.is_active = False
    office.deleted_at = at(8)
    db.commit()

    with pytest.raises(NotFound):
        get_available_slots(db, office.id, at(0), at(23), min_duration_minutes=30)


def test_compute_free_slots_ignores_booking_order():
    windows = [Interval(0, 100), Interval(200, 300)]
    bookings = [Interval(10, 20), Interval(50, 60), Interval(250, 260), Interval(90, 210)]
    expected = compute_free_slots(windows, bookings, Interval(0, 400), 5)

    rng = random.Random(7)
    for _ in range(10):
        shuffled = bookings[:]
        rng.shuffle(shuffled)
        assert compute_free_slots(windows, shuffled, Interval(0, 400), 5) == expected

    assert expected == [
        Interval(0, 10), Interval(20, 50), Interval(60, 90), Interval(210, 250), Interval(260, 300),
    ]


def test_returned_slot_is_bookable(db, make_office, make_window, make_booking):
    office = make_office()
    make_window(office, at(9), at(17))
    make_booking(office, at(9), at(13), status=BookingStatus.CONFIRMED)

    slot = get_available_slots(db, office.id, at(0), at(23), min_duration_minutes=60)[0]
    booking = create_booking(db, BookingCreate(
        office_id=office.id,
        start_at=slot.start,
        end_at=slot.start + timedelta(minutes=60),
        visitor_name="Ana",
        visitor_email="ana@example.com",
    ), None)

    assert booking.status == BookingStatus.REQUESTED
    assert booking.start_at == at(13)

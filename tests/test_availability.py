from datetime import datetime

import pytest

from booking.availability import count_active_bookings, ensure_slots_free, ensure_within_user_limit
from booking.errors import Conflict, LimitExceeded
from booking.store import Store
from models import BookingStatus

from conftest import NOW

TWO_PM = datetime(2025, 3, 1, 14)
THREE_PM = datetime(2025, 3, 1, 15)


def test_free_slots_pass(catalog):
    ensure_slots_free(Store(), catalog.andi.id, [TWO_PM, THREE_PM])


def test_taken_slot_reports_the_colliding_time(catalog, user, make_booking):
    make_booking(user, catalog.andi, THREE_PM)

    with pytest.raises(Conflict) as exc:
        ensure_slots_free(Store(), catalog.andi.id, [TWO_PM, THREE_PM])

    assert exc.value.status_code == 409
    assert exc.value.details == {"capster_id": catalog.andi.id, "schedule": "2025-03-01T15:00:00"}
    assert "3:00 PM" in exc.value.message


def test_other_capster_or_other_time_is_free(catalog, user, make_booking):
    make_booking(user, catalog.andi, TWO_PM)

    ensure_slots_free(Store(), catalog.budi.id, [TWO_PM])
    ensure_slots_free(Store(), catalog.andi.id, [THREE_PM])


def test_cancelled_booking_does_not_hold_the_slot(catalog, user, make_booking):
    make_booking(user, catalog.andi, TWO_PM, status=BookingStatus.CANCELLED)

    ensure_slots_free(Store(), catalog.andi.id, [TWO_PM])


def test_excluded_group_is_ignored(catalog, user, make_booking):
    rows = make_booking(user, catalog.andi, [TWO_PM, THREE_PM])

    ensure_slots_free(Store(), catalog.andi.id, [THREE_PM], exclude_group=rows[0].booking_group)


def test_user_limit_counts_bookings_not_rows(catalog, user, make_booking):
    make_booking(user, catalog.andi, [TWO_PM, THREE_PM])
    assert count_active_bookings(Store(), user.id, NOW) == 1

    ensure_within_user_limit(Store(), user.id, NOW, limit=2)

    make_booking(user, catalog.budi, TWO_PM)
    with pytest.raises(LimitExceeded) as exc:
        ensure_within_user_limit(Store(), user.id, NOW, limit=2)
    assert exc.value.status_code == 429
    assert exc.value.details == {"active_bookings": 2, "limit": 2}


def test_user_limit_ignores_cancelled_and_past_bookings(catalog, user, make_booking):
    make_booking(user, catalog.andi, TWO_PM, status=BookingStatus.CANCELLED)
    make_booking(user, catalog.andi, datetime(2025, 1, 31, 10))  # yesterday

    assert count_active_bookings(Store(), user.id, NOW) == 0


def test_user_limit_counts_earlier_today(catalog, user, make_booking):
    make_booking(user, catalog.andi, datetime(2025, 2, 1, 7))  # before NOW, same day

    assert count_active_bookings(Store(), user.id, NOW) == 1


def test_user_limit_is_per_user(catalog, user, other_user, make_booking):
    make_booking(other_user, catalog.andi, TWO_PM)
    make_booking(other_user, catalog.budi, TWO_PM)

    ensure_within_user_limit(Store(), user.id, NOW, limit=2)

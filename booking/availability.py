"""
Availability checks: slot conflicts per capster and the per-user cap on
active bookings.

The check and the later insert are separate round trips. The partial
unique index on bookings(capster_id, schedule) is what finally rejects a
request that loses that race.
"""
from datetime import datetime

from models import Booking, BookingStatus
from booking.errors import Conflict, LimitExceeded
from booking.slots import fmt_schedule

DEFAULT_MAX_ACTIVE_BOOKINGS = 2


def ensure_slots_free(store, capster_id: int, slots: list, exclude_group: str = None) -> None:
    """
    Fail on the first slot already held by a non-cancelled booking of
    this capster. Rows of exclude_group (the booking being edited) are
    ignored.
    """
    for slot in slots:
        criteria = [
            Booking.capster_id == capster_id,
            Booking.schedule == slot,
            Booking.status != BookingStatus.CANCELLED,
        ]
        if exclude_group is not None:
            criteria.append(Booking.booking_group != exclude_group)

        if store.count(Booking, *criteria) > 0:
            raise Conflict(
                f"Capster already booked on {fmt_schedule(slot)}",
                details={"capster_id": capster_id, "schedule": slot.isoformat()},
            )


def count_active_bookings(store, user_id: str, now: datetime) -> int:
    """Bookings (not rows) the user holds from the start of today onwards."""
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return store.count(
        Booking,
        Booking.user_id == user_id,
        Booking.status != BookingStatus.CANCELLED,
        Booking.schedule >= start_of_today,
        Booking.slot_sequence == 1,
    )


def ensure_within_user_limit(store, user_id: str, now: datetime,
                             limit: int = DEFAULT_MAX_ACTIVE_BOOKINGS) -> None:
    active = count_active_bookings(store, user_id, now)
    if active >= limit:
        raise LimitExceeded(
            f"Maximum booking limit reached ({limit} bookings per user)",
            details={"active_bookings": active, "limit": limit},
        )

"""Booking settings read from the Flask config, with fallbacks outside an app context."""
from flask import current_app

from booking.slots import SLOT_MINUTES, parse_clock

_DEFAULTS = {
    "BOOKING_OPENING_TIME": "09:00",
    "BOOKING_CLOSING_TIME": "18:00",
    "BOOKING_SLOT_MINUTES": SLOT_MINUTES,
    "MAX_ACTIVE_BOOKINGS_PER_USER": 2,
}


def setting(name: str):
    try:
        return current_app.config.get(name, _DEFAULTS[name])
    except RuntimeError:
        return _DEFAULTS[name]


def opening_hours():
    """(opening, closing) slot starts as time objects."""
    return parse_clock(setting("BOOKING_OPENING_TIME")), parse_clock(setting("BOOKING_CLOSING_TIME"))

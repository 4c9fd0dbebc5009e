"""
Input validation for booking requests.

Pure functions: each one either returns the normalized value or raises
InvalidArgument / PastSchedule.
"""
import json
import re
from dataclasses import dataclass
from datetime import date, datetime

from booking.errors import InvalidArgument, PastSchedule

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%I:%M %p"

_UUID4 = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_INT = re.compile(r"^\s*\d+\s*$")
_TIME_SPACING = re.compile(r"\s*(AM|PM)$", re.IGNORECASE)


@dataclass
class BookingInput:
    capster_id: int
    branch_id: int
    service_ids: list
    schedule: datetime
    user_id: str


def _as_int(value):
    # bool is an int subclass; "true" is not an id
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT.match(value):
        return int(value)
    return None


def parse_positive_int(value, field: str) -> int:
    parsed = _as_int(value)
    if parsed is None or parsed <= 0:
        raise InvalidArgument(f"{field} must be a positive integer", details={"field": field})
    return parsed


def parse_service_ids(value) -> list:
    """
    Accepts a list or a JSON-encoded list. Returns the ids as ints, in
    request order, with duplicates dropped.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise InvalidArgument("service_ids must be a list or a JSON array", details={"field": "service_ids"})

    if not isinstance(value, (list, tuple)) or not value:
        raise InvalidArgument("service_ids must be a non-empty list", details={"field": "service_ids"})

    ids = []
    for item in value:
        parsed = _as_int(item)
        if parsed is None or parsed <= 0:
            raise InvalidArgument(
                "service_ids must contain only positive integers",
                details={"field": "service_ids", "value": item},
            )
        if parsed not in ids:
            ids.append(parsed)
    return ids


def parse_user_id(value) -> str:
    if not isinstance(value, str) or not _UUID4.match(value.strip()):
        raise InvalidArgument("user_id must be a UUID", details={"field": "user_id"})
    return value.strip().lower()


def parse_date(value) -> date:
    if not isinstance(value, str):
        raise InvalidArgument("date must use YYYY-MM-DD", details={"field": "date"})
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        raise InvalidArgument("date must use YYYY-MM-DD", details={"field": "date"})


def parse_time(value):
    """Parse a 12-hour clock value such as '2:00 PM' or '02:00pm'."""
    if not isinstance(value, str):
        raise InvalidArgument("time must use h:mm AM/PM", details={"field": "time"})
    text = _TIME_SPACING.sub(lambda m: " " + m.group(1).upper(), value.strip())
    try:
        return datetime.strptime(text, TIME_FORMAT).time()
    except ValueError:
        raise InvalidArgument("time must use h:mm AM/PM", details={"field": "time"})


def parse_schedule(date_value, time_value, now: datetime) -> datetime:
    day = parse_date(date_value)
    at = parse_time(time_value)
    schedule = datetime.combine(day, at)

    if schedule.minute != 0:
        raise InvalidArgument(
            "Bookings start on the hour (e.g. 2:00 PM)",
            details={"field": "time", "value": time_value},
        )
    if schedule <= now:
        raise PastSchedule(
            "Schedule must be in the future",
            details={"schedule": schedule.isoformat()},
        )
    return schedule


def validate_booking_input(data: dict, now: datetime) -> BookingInput:
    if not isinstance(data, dict):
        raise InvalidArgument("Booking payload must be an object")

    # Field order matches the order errors are reported in
    capster_id = parse_positive_int(data.get("capster_id"), "capster_id")
    branch_id = parse_positive_int(data.get("branch_id"), "branch_id")
    service_ids = parse_service_ids(data.get("service_ids"))
    user_id = parse_user_id(data.get("user_id"))
    schedule = parse_schedule(data.get("date"), data.get("time"), now)

    return BookingInput(
        capster_id=capster_id,
        branch_id=branch_id,
        service_ids=service_ids,
        schedule=schedule,
        user_id=user_id,
    )

"""
Slot allocation on the hour-aligned day grid.
"""
import math
from datetime import date as date_type, datetime, time as time_type, timedelta

from booking.errors import InvalidArgument

SLOT_MINUTES = 60


def allocate_slots(start: datetime, total_duration: int, slot_minutes: int = SLOT_MINUTES) -> list:
    """
    Expand a start time and a total duration (minutes) into the ordered
    slot starts that cover it: ceil(duration / slot) slots, each one slot
    length after the previous.
    """
    if total_duration <= 0:
        raise InvalidArgument("Total service duration must be positive")
    count = math.ceil(total_duration / slot_minutes)
    return [start + timedelta(minutes=slot_minutes * i) for i in range(count)]


def parse_clock(value: str) -> time_type:
    """'09:00' -> time(9, 0). Used for the configured opening/closing times."""
    return datetime.strptime(value, "%H:%M").time()


def day_grid(day: date_type, opening: time_type, closing: time_type,
             slot_minutes: int = SLOT_MINUTES) -> list:
    """All slot starts of a day, opening through closing inclusive."""
    current = datetime.combine(day, opening)
    end = datetime.combine(day, closing)
    grid = []
    while current <= end:
        grid.append(current)
        current += timedelta(minutes=slot_minutes)
    return grid


def ensure_within_opening_hours(slots: list, opening: time_type, closing: time_type,
                                slot_minutes: int = SLOT_MINUTES) -> None:
    grid = set()
    for day in {s.date() for s in slots}:
        grid.update(day_grid(day, opening, closing, slot_minutes))

    outside = [s for s in slots if s not in grid]
    if outside:
        raise InvalidArgument(
            f"Requested time is outside opening hours "
            f"({fmt_time(opening)} - {fmt_time(closing)})",
            details={"outside_slots": [s.isoformat() for s in outside]},
        )


# ── Display helpers ──────────────────────────────────────────────────────────

def fmt_time(t) -> str:
    """
    Format as '2:00 PM' without a leading zero on the hour.
    strftime('%-I') is not portable, so build it by hand.
    """
    hour = t.hour % 12 or 12
    ampm = "AM" if t.hour < 12 else "PM"
    return f"{hour}:{t.minute:02d} {ampm}"


def fmt_schedule(dt: datetime) -> str:
    """'Sat, 01 Mar 2025 at 2:00 PM'"""
    return f"{dt.strftime('%a, %d %b %Y')} at {fmt_time(dt)}"

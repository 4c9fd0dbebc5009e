"""
Booking core: the operations the HTTP layer calls.

Public API (each returns a Result, never raises):
  create_booking(data, now=None, store=None)
  get_booking(booking_id, user_id, store=None)
  get_user_bookings(user_id, status=None, store=None)
  update_booking(booking_id, user_id, patch, now=None, store=None)
  cancel_booking(booking_id, user_id, store=None)

Create runs: validate -> resolve branch/capster/services -> allocate
slots -> check slot conflicts -> check the user's booking cap -> write.
"""
from datetime import datetime

from models import Booking, BookingStatus
from booking import availability, reader, resolver, slots as slot_alloc, validator, writer
from booking.errors import InvalidArgument, returns_result
from booking.settings import opening_hours, setting
from booking.store import Store

UPDATABLE_FIELDS = ("capster_id", "branch_id", "service_ids", "date", "time")


def _plan_slots(start: datetime, services: list) -> list:
    slot_minutes = setting("BOOKING_SLOT_MINUTES")
    opening, closing = opening_hours()
    _, total_duration = resolver.totals(services)
    planned = slot_alloc.allocate_slots(start, total_duration, slot_minutes)
    slot_alloc.ensure_within_opening_hours(planned, opening, closing, slot_minutes)
    return planned


# ── Create ───────────────────────────────────────────────────────────────────

@returns_result
def create_booking(data: dict, now: datetime = None, store: Store = None) -> dict:
    store = store or Store()
    now = now or datetime.now()

    req = validator.validate_booking_input(data, now)
    _, capster, services = resolver.resolve_references(store, req.branch_id, req.capster_id, req.service_ids)
    total_price, total_duration = resolver.totals(services)

    planned = _plan_slots(req.schedule, services)
    availability.ensure_slots_free(store, capster.id, planned)
    availability.ensure_within_user_limit(store, req.user_id, now, setting("MAX_ACTIVE_BOOKINGS_PER_USER"))

    rows = writer.write_booking(
        store,
        user_id=req.user_id,
        capster_id=capster.id,
        branch_id=req.branch_id,
        service_ids=req.service_ids,
        slots=planned,
        total_price=total_price,
        total_duration=total_duration,
    )
    return reader.build_views(store, rows[:1])[0]


# ── Read ─────────────────────────────────────────────────────────────────────

@returns_result
def get_booking(booking_id, user_id, store: Store = None) -> dict:
    store = store or Store()
    row = reader.find_user_booking(store, booking_id, user_id)
    return reader.build_views(store, [row])[0]


@returns_result
def get_user_bookings(user_id, status: str = None, store: Store = None) -> list:
    store = store or Store()
    rows = reader.find_user_bookings(store, user_id, status)
    return reader.build_views(store, rows)


# ── Update ───────────────────────────────────────────────────────────────────

def _validate_patch(patch) -> dict:
    if not isinstance(patch, dict) or not patch:
        raise InvalidArgument("No updatable fields supplied", details={"allowed": list(UPDATABLE_FIELDS)})
    unknown = sorted(k for k in patch if k not in UPDATABLE_FIELDS)
    if unknown:
        raise InvalidArgument(
            f"Fields cannot be updated: {', '.join(unknown)}",
            details={"fields": unknown, "allowed": list(UPDATABLE_FIELDS)},
        )
    return patch


@returns_result
def update_booking(booking_id, user_id, patch: dict, now: datetime = None, store: Store = None) -> dict:
    store = store or Store()
    now = now or datetime.now()
    patch = _validate_patch(patch)

    row = reader.find_user_booking(store, booking_id, user_id)
    if row.status == BookingStatus.CANCELLED:
        raise InvalidArgument("Cancelled bookings cannot be modified")

    group_rows = store.find_many(
        Booking,
        Booking.booking_group == row.booking_group,
        Booking.status == BookingStatus.CONFIRMED,
        order_by=Booking.slot_sequence.asc(),
    )
    lead = group_rows[0]

    branch_id = validator.parse_positive_int(patch["branch_id"], "branch_id") if "branch_id" in patch else lead.branch_id
    capster_id = validator.parse_positive_int(patch["capster_id"], "capster_id") if "capster_id" in patch else lead.capster_id
    service_ids = validator.parse_service_ids(patch["service_ids"]) if "service_ids" in patch else list(lead.service_ids)

    start = lead.schedule
    if "date" in patch or "time" in patch:
        start = validator.parse_schedule(
            patch.get("date", lead.schedule.strftime(validator.DATE_FORMAT)),
            patch.get("time", slot_alloc.fmt_time(lead.schedule)),
            now,
        )

    _, capster, services = resolver.resolve_references(store, branch_id, capster_id, service_ids)
    total_price, total_duration = resolver.totals(services)
    planned = _plan_slots(start, services)

    current_slots = [r.schedule for r in group_rows]
    if capster.id != lead.capster_id or planned != current_slots:
        availability.ensure_slots_free(store, capster.id, planned, exclude_group=lead.booking_group)

    rows = writer.reschedule_group(
        store, group_rows,
        capster_id=capster.id,
        branch_id=branch_id,
        service_ids=service_ids,
        slots=planned,
        total_price=total_price,
        total_duration=total_duration,
    )
    return reader.build_views(store, rows[:1])[0]


# ── Cancel ───────────────────────────────────────────────────────────────────

@returns_result
def cancel_booking(booking_id, user_id, store: Store = None) -> dict:
    store = store or Store()
    row = reader.find_user_booking(store, booking_id, user_id)
    if row.status != BookingStatus.CONFIRMED:
        raise InvalidArgument("Booking not cancellable", details={"status": row.status})

    cancelled = writer.cancel_group(store, row.booking_group, row.user_id)
    return {
        "id": row.id,
        "status": BookingStatus.CANCELLED,
        "cancelled_slots": len(cancelled),
        "message": "Booking cancelled successfully",
    }

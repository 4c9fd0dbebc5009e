"""
Booking read model: raw rows joined with their barber, branch and
services, plus a computed summary.

Every query is scoped to the caller's user id, so another user's booking
is simply not found.
"""
from datetime import timedelta

from sqlalchemy.orm import joinedload

from models import Booking, BookingStatus, Service
from models.booking import BookingType
from booking.errors import InvalidArgument, NotFound
from booking.settings import setting
from booking.slots import fmt_schedule, fmt_time
from booking.validator import parse_positive_int, parse_user_id

_JOINS = (joinedload(Booking.capster), joinedload(Booking.branch))


def find_user_booking(store, booking_id, user_id) -> Booking:
    booking_id = parse_positive_int(booking_id, "booking_id")
    user_id = parse_user_id(user_id)
    row = store.find_one(
        Booking,
        Booking.id == booking_id,
        Booking.user_id == user_id,
        options=_JOINS,
    )
    if row is None:
        raise NotFound("booking", details={"booking_id": booking_id})
    return row


def find_user_bookings(store, user_id, status: str = None) -> list:
    user_id = parse_user_id(user_id)
    criteria = [Booking.user_id == user_id]
    if status:
        if status not in BookingStatus.ALL:
            raise InvalidArgument(
                f"status must be one of: {', '.join(BookingStatus.ALL)}",
                details={"field": "status"},
            )
        criteria.append(Booking.status == status)
    return store.find_many(
        Booking, *criteria,
        order_by=(Booking.schedule.asc(), Booking.id.asc()),
        options=_JOINS,
    )


def _services_by_id(store, rows: list) -> dict:
    ids = sorted({sid for row in rows for sid in (row.service_ids or [])})
    if not ids:
        return {}
    return {s.id: s for s in store.find_many(Service, Service.id.in_(ids))}


def _siblings_by_group(store, rows: list) -> dict:
    groups = sorted({r.booking_group for r in rows if r.booking_type == BookingType.MULTI})
    if not groups:
        return {}
    siblings = {}
    for row in store.find_many(
        Booking, Booking.booking_group.in_(groups),
        order_by=(Booking.schedule.asc(), Booking.id.asc()),
    ):
        siblings.setdefault(row.booking_group, []).append(row)
    return siblings


def _slot_entry(row: Booking) -> dict:
    return {
        "id": row.id,
        "sequence": row.slot_sequence,
        "schedule": row.schedule.isoformat(),
        "display": fmt_time(row.schedule),
    }


def _same_lifecycle(row: Booking, sibling: Booking) -> bool:
    # a cancelled group keeps its slots apart from rows an earlier shrink cancelled
    if row.status == BookingStatus.CANCELLED:
        return sibling.status == row.status and sibling.cancelled_at == row.cancelled_at
    return sibling.status == row.status


def _summary(row: Booking, services: list, siblings: list) -> dict:
    summary = {
        "total_services": len(services),
        "total_price": row.total_price,
        "total_duration": row.total_duration,
    }
    if row.booking_type == BookingType.MULTI:
        slots = [s for s in siblings if _same_lifecycle(row, s)] or [row]
        end = slots[-1].schedule + timedelta(minutes=setting("BOOKING_SLOT_MINUTES"))
        summary.update({
            "start_time": fmt_time(slots[0].schedule),
            "end_time": fmt_time(end),
            "slots": [_slot_entry(s) for s in slots],
        })
    return summary


def to_view(row: Booking, services_by_id: dict, siblings: list = ()) -> dict:
    services = [services_by_id[sid].to_dict() for sid in row.service_ids if sid in services_by_id]
    return {
        "id": row.id,
        "user_id": row.user_id,
        "capster_id": row.capster_id,
        "branch_id": row.branch_id,
        "service_ids": list(row.service_ids),
        "schedule": row.schedule.isoformat(),
        "schedule_display": fmt_schedule(row.schedule),
        "status": row.status,
        "total_price": row.total_price,
        "total_duration": row.total_duration,
        "booking_group": row.booking_group,
        "booking_type": row.booking_type,
        "slot_sequence": row.slot_sequence,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "cancelled_at": row.cancelled_at.isoformat() if row.cancelled_at else None,
        "barber": row.capster.summary() if row.capster else None,
        "branch": row.branch.summary() if row.branch else None,
        "services": services,
        "summary": _summary(row, services, list(siblings)),
    }


def build_views(store, rows: list) -> list:
    """Assemble views for many rows with one service and one sibling lookup."""
    services_by_id = _services_by_id(store, rows)
    siblings = _siblings_by_group(store, rows)
    return [to_view(r, services_by_id, siblings.get(r.booking_group, ())) for r in rows]

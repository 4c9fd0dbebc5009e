"""
Catalog lookups (branches, capsters, services) and per-day availability.

Public API (each returns a Result):
  list_branches(cache=None)
  get_branch_details(branch_id, cache=None)
  list_capsters(branch_id, cache=None)
  list_services(branch_id, cache=None)
  get_available_schedules(capster_id, branch_id, date, now=None)

The list lookups read through the injected cache. Available schedules
are always computed from fresh booking rows.
"""
from datetime import datetime, timedelta

from sqlalchemy.orm import joinedload

from models import Booking, BookingStatus, Branch, Capster, Service
from booking import resolver, slots as slot_alloc, validator
from booking.errors import returns_result
from booking.settings import opening_hours, setting
from booking.store import Store


def _cached(cache, key: str, loader):
    if cache is None:
        return loader()
    return cache.get_or_set(key, loader)


def _branches(store) -> list:
    return [b.summary() for b in store.find_many(Branch, order_by=Branch.branch_name.asc())]


def _capsters(store, branch_id: int) -> list:
    rows = store.find_many(
        Capster,
        Capster.branch_id == branch_id,
        order_by=Capster.name.asc(),
        options=(joinedload(Capster.branch),),
    )
    return [
        {**c.summary(), "branch_id": c.branch_id, "branch": c.branch.summary()}
        for c in rows
    ]


def _services(store, branch_id: int) -> list:
    rows = store.find_many(
        Service,
        (Service.branch_id == branch_id) | (Service.branch_id.is_(None)),
        order_by=Service.name.asc(),
    )
    return [s.to_dict() for s in rows]


@returns_result
def list_branches(cache=None, store: Store = None) -> list:
    store = store or Store()
    return _cached(cache, "branches", lambda: _branches(store))


@returns_result
def get_branch_details(branch_id, cache=None, store: Store = None) -> dict:
    store = store or Store()
    branch_id = validator.parse_positive_int(branch_id, "branch_id")

    def load():
        branch = resolver.resolve_branch(store, branch_id)
        return {
            "branch": branch.summary(),
            "capsters": _capsters(store, branch_id),
            "services": _services(store, branch_id),
        }
    return _cached(cache, f"branch:{branch_id}:details", load)


@returns_result
def list_capsters(branch_id, cache=None, store: Store = None) -> list:
    store = store or Store()
    branch_id = validator.parse_positive_int(branch_id, "branch_id")
    return _cached(cache, f"branch:{branch_id}:capsters", lambda: _capsters(store, branch_id))


@returns_result
def list_services(branch_id, cache=None, store: Store = None) -> list:
    store = store or Store()
    branch_id = validator.parse_positive_int(branch_id, "branch_id")
    return _cached(cache, f"branch:{branch_id}:services", lambda: _services(store, branch_id))


@returns_result
def get_available_schedules(capster_id, branch_id, date, now: datetime = None, store: Store = None) -> dict:
    store = store or Store()
    now = now or datetime.now()

    capster_id = validator.parse_positive_int(capster_id, "capster_id")
    branch_id = validator.parse_positive_int(branch_id, "branch_id")
    day = validator.parse_date(date)
    capster = resolver.resolve_capster(store, capster_id, branch_id)

    start_of_day = datetime.combine(day, datetime.min.time())
    taken = {
        b.schedule
        for b in store.find_many(
            Booking,
            Booking.capster_id == capster_id,
            Booking.status != BookingStatus.CANCELLED,
            Booking.schedule >= start_of_day,
            Booking.schedule < start_of_day + timedelta(days=1),
        )
    }

    opening, closing = opening_hours()
    grid = slot_alloc.day_grid(day, opening, closing, setting("BOOKING_SLOT_MINUTES"))
    available = [
        {"time": slot.strftime("%H:%M"), "display": slot_alloc.fmt_time(slot)}
        for slot in grid
        if slot not in taken and slot > now
    ]

    return {
        "date": day.isoformat(),
        "capster_id": capster_id,
        "branch_id": branch_id,
        "capster_name": capster.name,
        "available_slots": available,
    }

from datetime import datetime

import booking
from booking.errors import ErrorKind
from models import BookingStatus, Branch, db
from utils.cache import TTLCache
from utils.seed import seed_catalog

from conftest import BOOKING_DATE, NOW


def test_branches_are_sorted_by_name(catalog):
    result = booking.list_branches()

    assert result.success
    assert [b["branch_name"] for b in result.data] == ["Downtown", "Uptown"]


def test_branches_stay_cached_until_cleared(catalog):
    cache = TTLCache(default_ttl=60)
    assert len(booking.list_branches(cache=cache).data) == 2

    db.session.add(Branch(branch_name="Airport"))
    db.session.commit()

    assert len(booking.list_branches(cache=cache).data) == 2
    cache.clear()
    assert [b["branch_name"] for b in booking.list_branches(cache=cache).data] == ["Airport", "Downtown", "Uptown"]


def test_branch_details_bundle_capsters_and_services(catalog):
    result = booking.get_branch_details(catalog.downtown.id)

    assert result.success
    assert result.data["branch"] == {"id": catalog.downtown.id, "branch_name": "Downtown"}
    assert [c["name"] for c in result.data["capsters"]] == ["Andi", "Budi"]
    assert "Hair Wash" in [s["name"] for s in result.data["services"]]
    assert "Hot Towel Shave" not in [s["name"] for s in result.data["services"]]


def test_unknown_branch_details_is_not_found(catalog):
    cache = TTLCache()
    result = booking.get_branch_details(999, cache=cache)

    assert result.status_code == 404
    assert len(cache) == 0


def test_capsters_of_a_branch(catalog):
    result = booking.list_capsters(catalog.downtown.id)

    assert [c["name"] for c in result.data] == ["Andi", "Budi"]
    assert result.data[0]["image"] == "https://cdn.example.com/andi.jpg"
    assert result.data[0]["branch"]["branch_name"] == "Downtown"


def test_services_include_global_ones(catalog):
    names = [s["name"] for s in booking.list_services(catalog.uptown.id).data]

    assert names == ["Hair Wash", "Hot Towel Shave"]


def test_lookups_reject_bad_ids(catalog):
    for result in (
        booking.list_capsters("abc"),
        booking.list_services(0),
        booking.get_branch_details(-3),
    ):
        assert result.status_code == 400
        assert result.error.kind is ErrorKind.INVALID_ARGUMENT


# ── available schedules ──────────────────────────────────────────────────────

def test_free_day_offers_the_whole_grid(catalog):
    result = booking.get_available_schedules(catalog.andi.id, catalog.downtown.id, BOOKING_DATE, now=NOW)

    assert result.success
    slots = result.data["available_slots"]
    assert len(slots) == 10
    assert slots[0] == {"time": "09:00", "display": "9:00 AM"}
    assert slots[-1] == {"time": "18:00", "display": "6:00 PM"}
    assert result.data["capster_name"] == "Andi"
    assert result.data["date"] == BOOKING_DATE


def test_taken_slots_are_excluded_but_cancelled_ones_are_not(catalog, user, other_user, make_booking):
    make_booking(user, catalog.andi, [datetime(2025, 3, 1, 14), datetime(2025, 3, 1, 15)])
    make_booking(other_user, catalog.andi, datetime(2025, 3, 1, 10), status=BookingStatus.CANCELLED)
    make_booking(other_user, catalog.budi, datetime(2025, 3, 1, 11))

    result = booking.get_available_schedules(catalog.andi.id, catalog.downtown.id, BOOKING_DATE, now=NOW)

    times = [s["time"] for s in result.data["available_slots"]]
    assert "14:00" not in times and "15:00" not in times
    assert "10:00" in times and "11:00" in times
    assert len(times) == 8


def test_same_day_hides_slots_already_started(catalog):
    midday = datetime(2025, 3, 1, 12, 30)

    result = booking.get_available_schedules(catalog.andi.id, catalog.downtown.id, BOOKING_DATE, now=midday)

    assert [s["time"] for s in result.data["available_slots"]] == [
        "13:00", "14:00", "15:00", "16:00", "17:00", "18:00",
    ]


def test_capster_of_another_branch_has_no_schedule(catalog):
    result = booking.get_available_schedules(catalog.citra.id, catalog.downtown.id, BOOKING_DATE, now=NOW)

    assert result.status_code == 404


def test_malformed_date_is_rejected(catalog):
    result = booking.get_available_schedules(catalog.andi.id, catalog.downtown.id, "01/03/2025", now=NOW)

    assert result.status_code == 400
    assert result.error.details == {"field": "date"}


def test_seed_catalog_is_idempotent(app):
    first = seed_catalog()
    second = seed_catalog()

    assert first == {"branches": 2, "capsters": 3, "services": 5}
    assert second == {"branches": 0, "capsters": 0, "services": 0}
    assert [b["branch_name"] for b in booking.list_branches().data] == ["Downtown", "Uptown"]


def test_seed_command_clears_the_catalog_cache(app):
    cache = app.extensions["catalog_cache"]
    assert booking.list_branches(cache=cache).data == []

    result = app.test_cli_runner().invoke(args=["seed-catalog"])

    assert "Seeded 2 branches" in result.output
    assert len(booking.list_branches(cache=cache).data) == 2

from flask import Blueprint, request, jsonify, g

import booking as core
from utils.audit import log_booking_result
from utils.auth_context import login_required

booking_bp = Blueprint("booking", __name__, url_prefix="/booking")


def _respond(result, success_status: int = 200):
    status = success_status if result.success else result.status_code
    return jsonify(result.to_dict()), status


@booking_bp.post("")
@login_required
def create_booking():
    data = request.get_json(silent=True) or {}
    # user identity always comes from the token, never the body
    payload = {**data, "user_id": g.user.id}

    result = core.create_booking(payload)
    log_booking_result(
        "BOOKING_CREATE", result, user_id=g.user.id,
        metadata={"capster_id": data.get("capster_id"), "date": data.get("date"), "time": data.get("time")},
    )
    return _respond(result, 201)


@booking_bp.get("")
@login_required
def my_bookings():
    status = request.args.get("status")
    return _respond(core.get_user_bookings(g.user.id, status=status))


@booking_bp.get("/<int:booking_id>")
@login_required
def get_booking(booking_id: int):
    return _respond(core.get_booking(booking_id, g.user.id))


@booking_bp.put("/<int:booking_id>")
@login_required
def update_booking(booking_id: int):
    patch = request.get_json(silent=True) or {}
    result = core.update_booking(booking_id, g.user.id, patch)
    log_booking_result(
        "BOOKING_UPDATE", result, user_id=g.user.id, booking_id=booking_id,
        metadata={"fields": sorted(patch)},
    )
    return _respond(result)


@booking_bp.delete("/<int:booking_id>")
@login_required
def cancel_booking(booking_id: int):
    result = core.cancel_booking(booking_id, g.user.id)
    log_booking_result("BOOKING_CANCEL", result, user_id=g.user.id, booking_id=booking_id)
    return _respond(result)

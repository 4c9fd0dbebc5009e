from flask import Blueprint, current_app, jsonify, request

import booking as core

catalog_bp = Blueprint("catalog", __name__, url_prefix="/booking")


def _cache():
    return current_app.extensions.get("catalog_cache")


def _respond(result):
    return jsonify(result.to_dict()), result.status_code


@catalog_bp.get("/branches")
def list_branches():
    return _respond(core.list_branches(cache=_cache()))


@catalog_bp.get("/branches/<branch_id>")
def branch_details(branch_id):
    return _respond(core.get_branch_details(branch_id, cache=_cache()))


@catalog_bp.get("/branches/<branch_id>/services")
def branch_services(branch_id):
    return _respond(core.list_services(branch_id, cache=_cache()))


@catalog_bp.get("/branches/<branch_id>/capsters")
def branch_capsters(branch_id):
    return _respond(core.list_capsters(branch_id, cache=_cache()))


# ?capster_id=1&branch_id=1&date=2025-03-01
@catalog_bp.get("/available-schedules")
def available_schedules():
    return _respond(core.get_available_schedules(
        request.args.get("capster_id"),
        request.args.get("branch_id"),
        request.args.get("date"),
    ))

"""
Existence checks for the branch, capster and services a request names.
"""
from models import Branch, Capster, Service
from booking.errors import NotFound


def resolve_branch(store, branch_id: int) -> Branch:
    branch = store.find_one(Branch, Branch.id == branch_id)
    if branch is None:
        raise NotFound("branch", details={"branch_id": branch_id})
    return branch


def resolve_capster(store, capster_id: int, branch_id: int) -> Capster:
    # A capster from another branch is reported exactly like a missing one
    capster = store.find_one(
        Capster,
        Capster.id == capster_id,
        Capster.branch_id == branch_id,
    )
    if capster is None:
        raise NotFound(
            "capster",
            message="Capster not found in this branch",
            details={"capster_id": capster_id, "branch_id": branch_id},
        )
    return capster


def resolve_services(store, service_ids: list, branch_id: int) -> list:
    """
    Fetch every requested service in one query, returned in request order.
    Services scoped to another branch count as missing.
    """
    found = store.find_many(
        Service,
        Service.id.in_(service_ids),
        (Service.branch_id == branch_id) | (Service.branch_id.is_(None)),
    )
    by_id = {s.id: s for s in found}
    if len(by_id) < len(service_ids):
        missing = [sid for sid in service_ids if sid not in by_id]
        raise NotFound(
            "services",
            message=f"Services not found: {', '.join(str(m) for m in missing)}",
            details={"missing_ids": missing},
        )
    return [by_id[sid] for sid in service_ids]


def resolve_references(store, branch_id: int, capster_id: int, service_ids: list):
    branch = resolve_branch(store, branch_id)
    capster = resolve_capster(store, capster_id, branch_id)
    services = resolve_services(store, service_ids, branch_id)
    return branch, capster, services


def totals(services: list) -> tuple[int, int]:
    """(total_price, total_duration) of a resolved service set."""
    return sum(s.price for s in services), sum(s.duration for s in services)

from models import db
from models.branch import Branch
from models.capster import Capster
from models.service import Service

# Demo catalog used by `flask seed-catalog`
DEFAULT_CATALOG = [
    {
        "branch_name": "Downtown",
        "capsters": [
            {"name": "Andi", "image": None},
            {"name": "Budi", "image": None},
        ],
        "services": [
            {"name": "Haircut", "price": 50000, "duration": 45},
            {"name": "Beard Trim", "price": 30000, "duration": 30},
            {"name": "Hair Coloring", "price": 150000, "duration": 90},
        ],
    },
    {
        "branch_name": "Uptown",
        "capsters": [
            {"name": "Citra", "image": None},
        ],
        "services": [
            {"name": "Haircut", "price": 55000, "duration": 45},
            {"name": "Hair Wash", "price": 20000, "duration": 15},
        ],
    },
]

def seed_catalog(catalog=None) -> dict:
    """Insert missing branches, capsters and services. Safe to run repeatedly."""
    created = {"branches": 0, "capsters": 0, "services": 0}

    for entry in catalog or DEFAULT_CATALOG:
        branch = Branch.query.filter_by(branch_name=entry["branch_name"]).first()
        if not branch:
            branch = Branch(branch_name=entry["branch_name"])
            db.session.add(branch)
            db.session.flush()
            created["branches"] += 1

        existing_capsters = {c.name for c in Capster.query.filter_by(branch_id=branch.id).all()}
        for capster in entry.get("capsters", []):
            if capster["name"] not in existing_capsters:
                db.session.add(Capster(branch_id=branch.id, **capster))
                created["capsters"] += 1

        existing_services = {s.name for s in Service.query.filter_by(branch_id=branch.id).all()}
        for service in entry.get("services", []):
            if service["name"] not in existing_services:
                db.session.add(Service(branch_id=branch.id, **service))
                created["services"] += 1

    db.session.commit()
    return created

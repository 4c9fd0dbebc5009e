import uuid
from datetime import datetime
from types import SimpleNamespace

import pytest

from app import create_app
from config import Config
from models import db, Booking, BookingStatus, Branch, Capster, Service, User
from models.booking import BookingType

# Saturday 1 Feb 2025, 08:00; bookings in these tests land in March 2025
NOW = datetime(2025, 2, 1, 8, 0)
BOOKING_DATE = "2025-03-01"


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    CATALOG_CACHE_TTL_SECONDS = 60
    LOG_LEVEL = "WARNING"


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(email: str) -> User:
    user = User(id=str(uuid.uuid4()), email=email, password_hash="x")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def user(app):
    return _make_user("rina@example.com")


@pytest.fixture
def other_user(app):
    return _make_user("dodi@example.com")


@pytest.fixture
def catalog(app):
    downtown = Branch(branch_name="Downtown")
    uptown = Branch(branch_name="Uptown")
    db.session.add_all([downtown, uptown])
    db.session.flush()

    andi = Capster(name="Andi", branch_id=downtown.id, image="https://cdn.example.com/andi.jpg")
    budi = Capster(name="Budi", branch_id=downtown.id)
    citra = Capster(name="Citra", branch_id=uptown.id)

    haircut = Service(name="Haircut", price=50000, duration=45, branch_id=downtown.id)
    beard = Service(name="Beard Trim", price=30000, duration=30, branch_id=downtown.id)
    coloring = Service(name="Hair Coloring", price=150000, duration=90, branch_id=downtown.id)
    wash = Service(name="Hair Wash", price=20000, duration=15, branch_id=None)
    shave = Service(name="Hot Towel Shave", price=40000, duration=30, branch_id=uptown.id)

    db.session.add_all([andi, budi, citra, haircut, beard, coloring, wash, shave])
    db.session.commit()

    return SimpleNamespace(
        downtown=downtown, uptown=uptown,
        andi=andi, budi=budi, citra=citra,
        haircut=haircut, beard=beard, coloring=coloring, wash=wash, shave=shave,
    )


@pytest.fixture
def make_booking(app):
    """Insert booking rows directly, bypassing the core checks."""
    def _make(user, capster, schedules, service_ids=(1,), status=BookingStatus.CONFIRMED):
        if isinstance(schedules, datetime):
            schedules = [schedules]
        group = str(uuid.uuid4())
        rows = [
            Booking(
                user_id=user.id,
                capster_id=capster.id,
                branch_id=capster.branch_id,
                service_ids=list(service_ids),
                schedule=schedule,
                status=status,
                total_price=50000,
                total_duration=45 * len(schedules),
                booking_group=group,
                booking_type=BookingType.SINGLE if len(schedules) == 1 else BookingType.MULTI,
                slot_sequence=seq,
            )
            for seq, schedule in enumerate(schedules, start=1)
        ]
        db.session.add_all(rows)
        db.session.commit()
        return rows
    return _make


@pytest.fixture
def booking_payload(catalog, user):
    def _payload(**overrides):
        data = {
            "capster_id": catalog.andi.id,
            "branch_id": catalog.downtown.id,
            "service_ids": [catalog.haircut.id, catalog.beard.id],
            "date": BOOKING_DATE,
            "time": "2:00 PM",
            "user_id": user.id,
        }
        data.update(overrides)
        return data
    return _payload

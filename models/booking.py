from datetime import datetime
from models.db import db


class BookingStatus:
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    ALL = (CONFIRMED, CANCELLED)


class BookingType:
    SINGLE = "single"
    MULTI = "multi"


class Booking(db.Model):
    """
    One row per occupied slot. A request covering several slots produces
    several rows sharing booking_group, numbered by slot_sequence.
    """
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    capster_id = db.Column(db.Integer, db.ForeignKey("capsters.id"), nullable=False, index=True)
    branch_id = db.Column(db.Integer, db.ForeignKey("branch.id"), nullable=False, index=True)
    service_ids = db.Column(db.JSON, nullable=False)

    schedule = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=BookingStatus.CONFIRMED)

    # snapshot of the service catalog at creation time
    total_price = db.Column(db.Integer, nullable=False, default=0)
    total_duration = db.Column(db.Integer, nullable=False)

    booking_group = db.Column(db.String(36), nullable=False, index=True)
    booking_type = db.Column(db.String(10), nullable=False, default=BookingType.SINGLE)
    slot_sequence = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    capster = db.relationship("Capster")
    branch = db.relationship("Branch")

    __table_args__ = (
        # a capster slot can be held by at most one non-cancelled booking
        db.Index(
            "uq_bookings_capster_schedule_active",
            "capster_id",
            "schedule",
            unique=True,
            sqlite_where=db.text("status <> 'cancelled'"),
            postgresql_where=db.text("status <> 'cancelled'"),
        ),
    )

from datetime import datetime
from models.db import db

class Service(db.Model):
    __tablename__ = "services"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)

    price = db.Column(db.Integer, nullable=False, default=0)  # smallest currency unit
    duration = db.Column(db.Integer, nullable=False)          # minutes, always > 0

    # NULL means the service is offered at every branch
    branch_id = db.Column(db.Integer, db.ForeignKey("branch.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
        db.CheckConstraint("duration > 0", name="ck_services_duration_positive"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "duration": self.duration,
            "branch_id": self.branch_id,
        }

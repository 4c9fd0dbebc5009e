from datetime import datetime
from models.db import db

class Branch(db.Model):
    __tablename__ = "branch"

    id = db.Column(db.Integer, primary_key=True)
    branch_name = db.Column(db.String(120), nullable=False, unique=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    capsters = db.relationship("Capster", back_populates="branch", order_by="Capster.name")

    def summary(self) -> dict:
        return {"id": self.id, "branch_name": self.branch_name}

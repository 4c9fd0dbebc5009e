from datetime import datetime
from models.db import db

class Capster(db.Model):
    __tablename__ = "capsters"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    image = db.Column(db.String(255), nullable=True)  # public URL of the profile photo

    branch_id = db.Column(db.Integer, db.ForeignKey("branch.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    branch = db.relationship("Branch", back_populates="capsters")

    def summary(self) -> dict:
        return {"id": self.id, "name": self.name, "image": self.image}

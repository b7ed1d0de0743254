import uuid
from datetime import datetime

from ..extensions import db


def _uuid():
    return str(uuid.uuid4())


class Reservation(db.Model):
    __tablename__ = "property_reservations"

    reservation_id = db.Column(db.String(36), primary_key=True, default=_uuid)
    tracking_number = db.Column(db.String(40), unique=True, nullable=False, index=True)

    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=False)
    property_title = db.Column(db.String(255), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    client_name = db.Column(db.String(200), nullable=False)
    client_email = db.Column(db.String(255), nullable=False)
    client_phone = db.Column(db.String(20), nullable=True)

    reservation_fee = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    status = db.Column(db.String(20), default="pending", index=True)  # pending, approved, rejected
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    transactions = db.relationship("Transaction", backref="reservation", lazy=True)

    STATUSES = ("pending", "approved", "rejected")

    def __repr__(self):
        return f"<Reservation {self.tracking_number}: {self.status}>"

    def serialize(self):
        return {
            "reservation_id": self.reservation_id,
            "tracking_number": self.tracking_number,
            "property_id": self.property_id,
            "property_title": self.property_title,
            "user_id": self.user_id,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_phone": self.client_phone,
            "reservation_fee": float(self.reservation_fee or 0),
            "status": self.status,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

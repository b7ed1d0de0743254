from datetime import datetime

from ..extensions import db


class Homeowner(db.Model):
    __tablename__ = "homeowners"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=True)
    unit_number = db.Column(db.String(50), nullable=True)
    monthly_dues = db.Column(db.Numeric(10, 2), default=0)
    move_in_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), default="active", index=True)  # active, inactive

    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    billings = db.relationship("Billing", backref="homeowner", lazy=True, cascade="all, delete-orphan")

    STATUSES = ("active", "inactive")

    def __repr__(self):
        return f"<Homeowner {self.id}: {self.full_name}>"

    def serialize(self):
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "unit_number": self.unit_number,
            "monthly_dues": float(self.monthly_dues or 0),
            "move_in_date": self.move_in_date.isoformat() if self.move_in_date else None,
            "status": self.status,
            "property_id": self.property_id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

from datetime import datetime

from ..extensions import db


class Inquiry(db.Model):
    __tablename__ = "client_inquiries"

    id = db.Column(db.Integer, primary_key=True)
    client_name = db.Column(db.String(200), nullable=False)
    client_email = db.Column(db.String(255), nullable=False, index=True)
    client_phone = db.Column(db.String(20), nullable=True)
    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=True)
    property_title = db.Column(db.String(255), nullable=True)
    message = db.Column(db.Text, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    role_id = db.Column(db.String(50), nullable=True)  # staff role the inquiry is routed to
    status = db.Column(db.String(20), default="pending", index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    STATUSES = ("pending", "approved", "declined", "in_progress", "responded", "closed")

    def __repr__(self):
        return f"<Inquiry {self.id}: {self.client_email}>"

    def serialize(self):
        return {
            "inquiry_id": self.id,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_phone": self.client_phone,
            "property_id": self.property_id,
            "property_title": self.property_title,
            "message": self.message,
            "user_id": self.user_id,
            "role_id": self.role_id,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

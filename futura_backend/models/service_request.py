from datetime import datetime

from ..extensions import db


class ServiceRequest(db.Model):
    __tablename__ = "service_requests"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    request_type = db.Column(db.String(50), nullable=False)  # plumbing, electrical, landscaping, ...
    priority = db.Column(db.String(20), default="medium")
    status = db.Column(db.String(20), default="pending", index=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    contract_id = db.Column(db.Integer, db.ForeignKey("contracts.id"), nullable=False, index=True)
    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    contract = db.relationship("Contract", lazy=True)

    STATUSES = ("pending", "approved", "in_progress", "completed", "declined", "cancelled")

    def __repr__(self):
        return f"<ServiceRequest {self.id}: {self.title}>"

    def serialize(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "request_type": self.request_type,
            "priority": self.priority,
            "status": self.status,
            "user_id": self.user_id,
            "contract_id": self.contract_id,
            "property_id": self.property_id,
            "client_name": self.contract.client_name if self.contract else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

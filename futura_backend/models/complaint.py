from datetime import datetime

from ..extensions import db


class Complaint(db.Model):
    __tablename__ = "complaints"

    id = db.Column(db.Integer, primary_key=True)
    subject = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    complaint_type = db.Column(db.String(50), nullable=False)
    severity = db.Column(db.String(20), default="medium")  # low, medium, high
    status = db.Column(db.String(20), default="pending", index=True)

    contract_id = db.Column(db.Integer, db.ForeignKey("contracts.id"), nullable=False, index=True)
    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    contract = db.relationship("Contract", lazy=True)
    property = db.relationship("Property", lazy=True)

    STATUSES = ("pending", "investigating", "resolved", "closed", "escalated")

    def __repr__(self):
        return f"<Complaint {self.id}: {self.subject}>"

    def serialize(self):
        return {
            "id": self.id,
            "subject": self.subject,
            "description": self.description,
            "complaint_type": self.complaint_type,
            "severity": self.severity,
            "status": self.status,
            "contract_id": self.contract_id,
            "property_id": self.property_id,
            "contract": {
                "contract_id": self.contract.id,
                "client_name": self.contract.client_name,
                "user_id": self.contract.user_id,
            } if self.contract else None,
            "property_title": self.property.property_title if self.property else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

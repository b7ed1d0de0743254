from datetime import datetime

from ..extensions import db


class Billing(db.Model):
    __tablename__ = "billings"

    id = db.Column(db.Integer, primary_key=True)
    homeowner_id = db.Column(db.Integer, db.ForeignKey("homeowners.id"), nullable=False, index=True)
    billing_period = db.Column(db.String(50), nullable=False)  # e.g. "2026-10"
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    due_date = db.Column(db.Date, nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), default="unpaid", index=True)  # unpaid, paid, overdue, cancelled
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    STATUSES = ("unpaid", "paid", "overdue", "cancelled")

    def __repr__(self):
        return f"<Billing {self.id}: {self.amount} - {self.status}>"

    def serialize(self):
        return {
            "id": self.id,
            "homeowner_id": self.homeowner_id,
            "homeowner": {
                "id": self.homeowner.id,
                "full_name": self.homeowner.full_name,
            } if self.homeowner else None,
            "billing_period": self.billing_period,
            "amount": float(self.amount),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "description": self.description,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

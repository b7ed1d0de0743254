from datetime import datetime

from ..extensions import db


class PaymentSchedule(db.Model):
    """One monthly downpayment installment of a contract."""

    __tablename__ = "contract_payment_schedules"

    id = db.Column(db.Integer, primary_key=True)
    contract_id = db.Column(db.Integer, db.ForeignKey("contracts.id"), nullable=False, index=True)

    installment_number = db.Column(db.Integer, nullable=False)
    installment_description = db.Column(db.String(120), nullable=True)

    scheduled_amount = db.Column(db.Numeric(12, 2), nullable=False)
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    remaining_amount = db.Column(db.Numeric(12, 2), nullable=False)

    due_date = db.Column(db.Date, nullable=False, index=True)
    grace_period_end_date = db.Column(db.Date, nullable=True)
    payment_status = db.Column(db.String(20), nullable=False, default="pending")  # pending, partially_paid, paid
    paid_date = db.Column(db.DateTime, nullable=True)

    penalty_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    penalty_rate = db.Column(db.Numeric(6, 4), nullable=True)  # monthly; falls back to the default rate

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    transactions = db.relationship("Transaction", backref="schedule", lazy=True)

    STATUSES = ("pending", "partially_paid", "paid")

    def __repr__(self):
        return f"<PaymentSchedule {self.contract_id}#{self.installment_number}: {self.payment_status}>"

    def serialize(self):
        return {
            "schedule_id": self.id,
            "contract_id": self.contract_id,
            "installment_number": self.installment_number,
            "installment_description": self.installment_description,
            "scheduled_amount": float(self.scheduled_amount),
            "paid_amount": float(self.paid_amount or 0),
            "remaining_amount": float(self.remaining_amount),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "grace_period_end_date": self.grace_period_end_date.isoformat() if self.grace_period_end_date else None,
            "payment_status": self.payment_status,
            "paid_date": self.paid_date.isoformat() if self.paid_date else None,
            "penalty_amount": float(self.penalty_amount or 0),
        }

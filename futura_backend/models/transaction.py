import uuid
from datetime import datetime

from ..extensions import db


class Transaction(db.Model):
    """A payment against a contract or a reservation fee."""

    __tablename__ = "payment_transactions"

    transaction_id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    contract_id = db.Column(db.Integer, db.ForeignKey("contracts.id"), nullable=True, index=True)
    reservation_id = db.Column(db.String(36), db.ForeignKey("property_reservations.reservation_id"), nullable=True)
    schedule_id = db.Column(db.Integer, db.ForeignKey("contract_payment_schedules.id"), nullable=True, index=True)

    transaction_type = db.Column(db.String(40), default="monthly_payment")  # monthly_payment, down_payment, reservation_fee
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    penalty_paid = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    payment_method = db.Column(db.String(30), nullable=True)  # cash, check, bank_transfer, gcash
    payment_status = db.Column(db.String(20), default="completed", index=True)  # pending, completed, reverted

    receipt_number = db.Column(db.String(40), nullable=True, index=True)
    or_number = db.Column(db.String(40), nullable=True)

    transaction_date = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    due_date = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    processed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    STATUSES = ("pending", "completed", "reverted")

    def __repr__(self):
        return f"<Transaction {self.transaction_id}: {self.amount} {self.payment_status}>"

    def serialize(self):
        return {
            "transaction_id": self.transaction_id,
            "contract_id": self.contract_id,
            "reservation_id": self.reservation_id,
            "schedule_id": self.schedule_id,
            "transaction_type": self.transaction_type,
            "amount": float(self.amount),
            "penalty_paid": float(self.penalty_paid or 0),
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "receipt_number": self.receipt_number,
            "or_number": self.or_number,
            "transaction_date": self.transaction_date.isoformat() if self.transaction_date else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "notes": self.notes,
            "processed_by": self.processed_by,
            "property_contracts": self.contract.summary() if self.contract else None,
        }

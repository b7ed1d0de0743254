from datetime import datetime

from ..extensions import db


class Contract(db.Model):
    """Sales agreement linking a client to a property."""

    __tablename__ = "contracts"

    id = db.Column(db.Integer, primary_key=True)
    contract_number = db.Column(db.String(50), unique=True, nullable=False, index=True)
    reservation_id = db.Column(db.String(36), db.ForeignKey("property_reservations.reservation_id"),
                               nullable=True, unique=True)

    client_name = db.Column(db.String(200), nullable=False)
    client_email = db.Column(db.String(255), nullable=True)
    client_phone = db.Column(db.String(20), nullable=True)
    client_address = db.Column(db.String(512), nullable=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=True)

    total_amount = db.Column(db.Numeric(12, 2), default=0)
    status = db.Column(db.String(20), default="active")  # active, completed, cancelled

    # Downpayment terms, set when the contract is drawn from a reservation
    property_price = db.Column(db.Numeric(12, 2), nullable=True)
    downpayment_total = db.Column(db.Numeric(12, 2), nullable=True)
    reservation_fee_paid = db.Column(db.Numeric(12, 2), nullable=True)
    remaining_downpayment = db.Column(db.Numeric(12, 2), nullable=True)
    payment_plan_months = db.Column(db.Integer, nullable=True)
    monthly_installment = db.Column(db.Numeric(12, 2), nullable=True)
    bank_financing_amount = db.Column(db.Numeric(12, 2), nullable=True)
    downpayment_status = db.Column(db.String(20), nullable=True)  # in_progress, completed
    total_paid_amount = db.Column(db.Numeric(12, 2), default=0)
    remaining_balance = db.Column(db.Numeric(12, 2), nullable=True)

    contract_signed_date = db.Column(db.Date, nullable=True)
    first_installment_date = db.Column(db.Date, nullable=True)
    final_installment_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    property = db.relationship("Property", lazy=True)
    transactions = db.relationship("Transaction", backref="contract", lazy=True)
    schedules = db.relationship("PaymentSchedule", backref="contract", lazy=True,
                                order_by="PaymentSchedule.installment_number",
                                cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Contract {self.contract_number}: {self.client_name}>"

    def summary(self):
        return {
            "contract_id": self.id,
            "contract_number": self.contract_number,
            "client_name": self.client_name,
            "client_phone": self.client_phone,
            "client_email": self.client_email,
            "client_address": self.client_address,
            "user_id": self.user_id,
        }

    def serialize(self):
        def money(value):
            return float(value) if value is not None else None

        def day(value):
            return value.isoformat() if value else None

        data = self.summary()
        data.update({
            "id": self.id,
            "reservation_id": self.reservation_id,
            "property_id": self.property_id,
            "property_title": self.property.property_title if self.property else None,
            "total_amount": float(self.total_amount or 0),
            "status": self.status,
            "property_price": money(self.property_price),
            "downpayment_total": money(self.downpayment_total),
            "reservation_fee_paid": money(self.reservation_fee_paid),
            "remaining_downpayment": money(self.remaining_downpayment),
            "payment_plan_months": self.payment_plan_months,
            "monthly_installment": money(self.monthly_installment),
            "bank_financing_amount": money(self.bank_financing_amount),
            "downpayment_status": self.downpayment_status,
            "total_paid_amount": float(self.total_paid_amount or 0),
            "remaining_balance": money(self.remaining_balance),
            "contract_signed_date": day(self.contract_signed_date),
            "first_installment_date": day(self.first_installment_date),
            "final_installment_date": day(self.final_installment_date),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        })
        return data

    @classmethod
    def for_user(cls, user_id):
        return cls.query.filter_by(user_id=user_id).order_by(cls.created_at.desc()).first()

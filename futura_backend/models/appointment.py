from datetime import datetime

from ..extensions import db

PENDING = "pending"
CS_APPROVED = "cs_approved"
SALES_APPROVED = "sales_approved"
REJECTED = "rejected"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"
COMPLETED = "completed"
NO_SHOW = "no_show"

APPOINTMENT_STATUSES = (
    PENDING, CS_APPROVED, SALES_APPROVED, REJECTED,
    CONFIRMED, CANCELLED, COMPLETED, NO_SHOW,
)
ADMINISTRATIVE_STATUSES = (CONFIRMED, CANCELLED, COMPLETED, NO_SHOW)


class Appointment(db.Model):
    """A property tour request that goes through customer service then sales approval."""

    __tablename__ = "appointments"

    id = db.Column(db.Integer, primary_key=True)
    property_id = db.Column(db.Integer, db.ForeignKey("properties.id"), nullable=False)
    property_title = db.Column(db.String(255), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    client_name = db.Column(db.String(200), nullable=False)
    client_email = db.Column(db.String(255), nullable=False, index=True)
    client_phone = db.Column(db.String(20), nullable=True)

    appointment_date = db.Column(db.Date, nullable=False)
    appointment_time = db.Column(db.String(10), nullable=False)  # HH:MM
    message = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=PENDING, index=True)

    # Customer service stage
    cs_approved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    cs_approved_at = db.Column(db.DateTime, nullable=True)
    cs_approval_notes = db.Column(db.Text, nullable=True)

    # Sales stage
    sales_approved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    sales_approved_at = db.Column(db.DateTime, nullable=True)
    sales_approval_notes = db.Column(db.Text, nullable=True)

    # Rejection
    rejected_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    rejected_at = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Appointment {self.id}: {self.client_email} {self.status}>"

    def serialize(self):
        def _iso(value):
            return value.isoformat() if value else None

        return {
            "appointment_id": self.id,
            "property_id": self.property_id,
            "property_title": self.property_title,
            "user_id": self.user_id,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_phone": self.client_phone,
            "appointment_date": _iso(self.appointment_date),
            "appointment_time": self.appointment_time,
            "message": self.message,
            "status": self.status,
            "cs_approved_by": self.cs_approved_by,
            "cs_approved_at": _iso(self.cs_approved_at),
            "cs_approval_notes": self.cs_approval_notes,
            "sales_approved_by": self.sales_approved_by,
            "sales_approved_at": _iso(self.sales_approved_at),
            "sales_approval_notes": self.sales_approval_notes,
            "rejected_by": self.rejected_by,
            "rejected_at": _iso(self.rejected_at),
            "rejection_reason": self.rejection_reason,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
